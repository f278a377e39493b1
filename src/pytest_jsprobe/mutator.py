"""Mutant generation: apply one alteration, record the whole program, revert."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from pytest_jsprobe import nodes as js
from pytest_jsprobe.codegen import generate
from pytest_jsprobe.config import ProbeConfig
from pytest_jsprobe.errors import MissingHandlerError
from pytest_jsprobe.frontend import parse
from pytest_jsprobe.models import Mutant, MutantType, SourceRange
from pytest_jsprobe.operators import MUTABLE_NODE_KINDS, alterations_for, binary_kind
from pytest_jsprobe.synth import bool_literal, string_literal, template_element
from pytest_jsprobe.walker import Walker, clone

logger = logging.getLogger(__name__)


class Mutator(Walker):
    """Walk a program once, recording a mutant for every applicable alteration.

    Each alteration is applied to the live tree inside :meth:`_patched`, the
    whole program is regenerated, and the node is restored before the walk
    moves on, so every mutant differs from the original at exactly one site.
    """

    def __init__(self, code: str, config: ProbeConfig | None = None, detail: bool = False) -> None:
        self.require_handlers()
        self.config = config or ProbeConfig()
        self.detail = detail or self.config.detail
        self.code = code
        self.mutants: list[Mutant] = []
        self.ast = parse(code)
        self.beautified = generate(self.ast)
        self.generate_mutants()

    @classmethod
    def from_code(cls, code: str, config: ProbeConfig | None = None, detail: bool = False) -> list[Mutant]:
        return cls(code, config, detail).mutants

    @classmethod
    def require_handlers(cls) -> None:
        """Fail unless every kind in the alteration catalogue has a handler."""
        missing = [
            kind for kind in MUTABLE_NODE_KINDS if getattr(cls, "visit_" + kind, None) is None
        ]
        if missing:
            raise MissingHandlerError(missing)

    def generate_mutants(self) -> None:
        if self.detail:
            logger.info("Generating mutants...")
        self.visit(self.ast)
        if generate(self.ast) != self.beautified:
            logger.warning("The AST is changed after generating mutants")

    def add_mutant(self, kind: MutantType, node: js.Node) -> None:
        mutant = Mutant(
            id=len(self.mutants) + 1,
            type=kind,
            mutated_source=generate(self.ast),
            original_source=self.code,
            range=SourceRange.from_node(self.code, node),
            mutated_text=generate(node),
        )
        self.mutants.append(mutant)
        if mutant.mutated_source == self.beautified:
            logger.warning("The code is the same after generating a mutant: %s", mutant)
        elif self.detail:
            logger.info("%s", mutant)
        else:
            logger.debug("Recorded mutant %s", mutant)

    @contextmanager
    def _patched(self, node: js.Node, **changes: Any) -> Iterator[js.Node]:
        saved = {name: getattr(node, name) for name in changes}
        for name, value in changes.items():
            setattr(node, name, value)
        try:
            yield node
        finally:
            for name, value in saved.items():
                setattr(node, name, value)

    def _record(self, kind: MutantType, node: js.Node, report: js.Node | None = None, **changes: Any) -> None:
        with self._patched(node, **changes):
            self.add_mutant(kind, report if report is not None else node)

    def _swap_operator(self, kind: MutantType, node: js.Node) -> None:
        for operator in alterations_for(kind, node.operator, node):
            self._record(kind, node, operator=operator)

    def _force_test(self, node: js.Node) -> None:
        test = node.test
        # A missing for-loop test already means true.
        values = (False,) if test is None else (True, False)
        for value in values:
            if isinstance(test, js.Literal) and test.value is value:
                continue
            literal = bool_literal(value, like=test if test is not None else node)
            self._record(MutantType.CONDITIONAL, node, report=literal, test=literal)

    def _is_assertion(self, node: js.CallExpression) -> bool:
        callee = node.callee
        return isinstance(callee, js.Identifier) and callee.name == self.config.assert_name

    # -- operators -------------------------------------------------------

    def visit_BinaryExpression(self, node: js.BinaryExpression) -> None:
        kind = binary_kind(node.operator)
        if kind is not None:
            self._swap_operator(kind, node)
        self.generic_visit(node)

    def visit_LogicalExpression(self, node: js.LogicalExpression) -> None:
        self._swap_operator(MutantType.LOGICAL, node)
        self.generic_visit(node)

    def visit_AssignmentExpression(self, node: js.AssignmentExpression) -> None:
        self._swap_operator(MutantType.ASSIGNMENT, node)
        self.generic_visit(node)

    def visit_UnaryExpression(self, node: js.UnaryExpression) -> None:
        self._swap_operator(MutantType.UNARY, node)
        self.generic_visit(node)

    def visit_UpdateExpression(self, node: js.UpdateExpression) -> None:
        self._swap_operator(MutantType.UPDATE, node)
        self._record(MutantType.UPDATE, node, prefix=not node.prefix)
        self.generic_visit(node)

    # -- literals --------------------------------------------------------

    def visit_Literal(self, node: js.Literal) -> None:
        value = node.value
        if isinstance(value, bool):
            self._record(MutantType.BOOLEAN_LITERAL, node, value=not value)
        elif isinstance(value, str) and node.regex is None:
            literal = string_literal(self.config.string_sentinel if value == "" else "", like=node)
            self._record(MutantType.STRING_LITERAL, node, value=literal.value, raw=literal.raw)

    def visit_TemplateLiteral(self, node: js.TemplateLiteral) -> None:
        first = node.quasis[0]
        element = template_element(self.config.string_sentinel if first.raw == "" else "", tail=first.tail)
        self._record(MutantType.STRING_LITERAL, node, quasis=[element, *node.quasis[1:]])
        self.generic_visit(node)

    def visit_ArrayExpression(self, node: js.ArrayExpression) -> None:
        if node.elements:
            self._record(MutantType.COLLECTION_LITERAL, node, elements=[])
        self.generic_visit(node)

    def visit_ObjectExpression(self, node: js.ObjectExpression) -> None:
        if node.properties:
            self._record(MutantType.COLLECTION_LITERAL, node, properties=[])
        self.generic_visit(node)

    def visit_CallExpression(self, node: js.CallExpression) -> None:
        if self._is_assertion(node):
            for argument in node.arguments:
                self.visit(argument)
            return
        if node.arguments:
            self._record(MutantType.COLLECTION_LITERAL, node, arguments=[])
        self.generic_visit(node)

    def visit_NewExpression(self, node: js.NewExpression) -> None:
        if node.arguments:
            self._record(MutantType.COLLECTION_LITERAL, node, arguments=[])
        self.generic_visit(node)

    # -- statements ------------------------------------------------------

    def visit_BlockStatement(self, node: js.BlockStatement) -> None:
        if node.body:
            self._record(MutantType.BLOCK_STATEMENT, node, body=[])
        self.generic_visit(node)

    def visit_IfStatement(self, node: js.IfStatement) -> None:
        self._force_test(node)
        self.generic_visit(node)

    def visit_WhileStatement(self, node: js.WhileStatement) -> None:
        self._force_test(node)
        self.generic_visit(node)

    def visit_DoWhileStatement(self, node: js.DoWhileStatement) -> None:
        self._force_test(node)
        self.generic_visit(node)

    def visit_ForStatement(self, node: js.ForStatement) -> None:
        self._force_test(node)
        self.generic_visit(node)

    # -- chains and property keys ----------------------------------------

    def visit_ChainExpression(self, node: js.ChainExpression) -> None:
        chain = clone(node.expression)
        link = chain
        while isinstance(link, (js.MemberExpression, js.CallExpression)):
            link.optional = False
            link = link.object if isinstance(link, js.MemberExpression) else link.callee
        self._record(MutantType.OPTIONAL_CHAINING, node, expression=chain)
        self.generic_visit(node)

    def _visit_keyed(self, node: js.Node) -> None:
        # Plain keys are names, not values.
        if node.computed:
            self.visit(node.key)
        if node.value is not None:
            self.visit(node.value)

    def visit_Property(self, node: js.Property) -> None:
        self._visit_keyed(node)

    def visit_MethodDefinition(self, node: js.MethodDefinition) -> None:
        self._visit_keyed(node)

    def visit_PropertyDefinition(self, node: js.PropertyDefinition) -> None:
        self._visit_keyed(node)
