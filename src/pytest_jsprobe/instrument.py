"""Coverage instrumentation: insert tracking calls and catalog what they track.

Three independent id spaces are assigned in pre-order during one walk:

- ``func``: every function-like node;
- ``stmt``: statements inside blocks (other than declarations and ``if``),
  declarator initializers, default parameter values, and arrow bodies;
- ``branch``: both arms of ``if`` and ``?:``, each ``switch`` case, and each
  operand of a short-circuit chain.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pytest_jsprobe import nodes as js
from pytest_jsprobe.codegen import generate
from pytest_jsprobe.config import ProbeConfig
from pytest_jsprobe.coverage_tracker import NOT_RUNNABLE, CoverageTracker, CoverSet
from pytest_jsprobe.frontend import parse
from pytest_jsprobe.models import CoverageTarget, SourceRange
from pytest_jsprobe.synth import SPACES, prepend, sequence, to_block, tracking_call, tracking_statement
from pytest_jsprobe.walker import Walker

logger = logging.getLogger(__name__)


class _Instrumenter(Walker):
    def __init__(self, code: str, handle: str) -> None:
        self.code = code
        self.handle = handle
        self.targets: dict[str, CoverageTarget] = {space: {} for space in SPACES}

    def _assign(self, space: str, node: js.Node | None = None, span: SourceRange | None = None) -> int:
        target = self.targets[space]
        ident = len(target)
        target[ident] = span if span is not None else SourceRange.from_node(self.code, node)
        return ident

    def _call(self, space: str, ident: int) -> js.CallExpression:
        return tracking_call(space, ident, self.handle)

    def _statement(self, space: str, ident: int) -> js.ExpressionStatement:
        return tracking_statement(space, ident, self.handle)

    def _walk_stmts(self, stmts: list[js.Node]) -> list[js.Node]:
        result: list[js.Node] = []
        for stmt in stmts:
            # An if is covered through its branch ids.
            if not isinstance(stmt, (js.Declaration, js.IfStatement)):
                result.append(self._statement("stmt", self._assign("stmt", stmt)))
            result.append(stmt)
            self.visit(stmt)
        return result

    def _tracked(self, space: str, expr: js.Node) -> js.SequenceExpression:
        ident = self._assign(space, expr)
        self.visit(expr)
        return sequence([self._call(space, ident), expr])

    def visit_Function(self, node: js.Function) -> None:
        for param in node.params:
            self.visit(param)
        fid = self._assign("func", node)
        if isinstance(node.body, js.BlockStatement):
            node.body.body = self._walk_stmts(node.body.body)
            node.body.body.insert(0, self._statement("func", fid))
        else:
            body = node.body
            sid = self._assign("stmt", body)
            self.visit(body)
            node.body = sequence([self._call("func", fid), self._call("stmt", sid), body])

    def visit_VariableDeclaration(self, node: js.VariableDeclaration) -> None:
        for declarator in node.declarations:
            self.visit(declarator.id)
            if declarator.init is None:
                continue
            sid = self._assign("stmt", declarator)
            init = declarator.init
            self.visit(init)
            declarator.init = sequence([self._call("stmt", sid), init])

    def visit_AssignmentPattern(self, node: js.AssignmentPattern) -> None:
        self.visit(node.left)
        node.right = self._tracked("stmt", node.right)

    def visit_BlockStatement(self, node: js.BlockStatement) -> None:
        node.body = self._walk_stmts(node.body)

    def visit_StaticBlock(self, node: js.StaticBlock) -> None:
        node.body = self._walk_stmts(node.body)

    def visit_SwitchStatement(self, node: js.SwitchStatement) -> None:
        self.visit(node.discriminant)
        for case in node.cases:
            bid = self._assign("branch", case)
            if case.test is not None:
                self.visit(case.test)
            case.consequent = self._walk_stmts(case.consequent)
            case.consequent.insert(0, self._statement("branch", bid))

    def visit_IfStatement(self, node: js.IfStatement) -> None:
        self.visit(node.test)

        bid = self._assign("branch", node.consequent)
        consequent = to_block(node.consequent)
        node.consequent = consequent
        self.visit(consequent)
        node.consequent = prepend(self._statement("branch", bid), consequent)

        if node.alternate is not None:
            bid = self._assign("branch", node.alternate)
            alternate = to_block(node.alternate)
            node.alternate = alternate
            self.visit(alternate)
            node.alternate = prepend(self._statement("branch", bid), alternate)
        else:
            # No else in the source: span the gap after the consequent.
            span = SourceRange.from_offsets(self.code, consequent.end, node.end)
            bid = self._assign("branch", span=span)
            node.alternate = prepend(self._statement("branch", bid), None)

    def visit_ConditionalExpression(self, node: js.ConditionalExpression) -> None:
        self.visit(node.test)
        node.consequent = self._tracked("branch", node.consequent)
        node.alternate = self._tracked("branch", node.alternate)

    def _operand(self, operand: js.Node) -> js.Node:
        if isinstance(operand, js.LogicalExpression):
            # Nested chains contribute their own operands.
            self.visit(operand)
            return operand
        return self._tracked("branch", operand)

    def visit_LogicalExpression(self, node: js.LogicalExpression) -> None:
        node.left = self._operand(node.left)
        node.right = self._operand(node.right)

    def visit_LabeledStatement(self, node: js.LabeledStatement) -> None:
        self.visit(node.body)

    def visit_WhileStatement(self, node: js.WhileStatement) -> None:
        self.visit(node.test)
        node.body = to_block(node.body)
        self.visit(node.body)

    def visit_DoWhileStatement(self, node: js.DoWhileStatement) -> None:
        node.body = to_block(node.body)
        self.visit(node.body)
        self.visit(node.test)

    def visit_ForStatement(self, node: js.ForStatement) -> None:
        node.body = to_block(node.body)
        for part in (node.init, node.test, node.update):
            if part is not None:
                self.visit(part)
        self.visit(node.body)

    def _for_each(self, node: js.ForInStatement | js.ForOfStatement) -> None:
        node.body = to_block(node.body)
        self.visit(node.left)
        self.visit(node.right)
        self.visit(node.body)

    def visit_ForInStatement(self, node: js.ForInStatement) -> None:
        self._for_each(node)

    def visit_ForOfStatement(self, node: js.ForOfStatement) -> None:
        self._for_each(node)


class Coverage:
    """Function, statement and branch coverage of one program."""

    def __init__(self, code: str, config: ProbeConfig | None = None) -> None:
        self.config = config or ProbeConfig()
        program = parse(code)
        instrumenter = _Instrumenter(code, self.config.handle_name)
        instrumenter.visit(program)

        self.code = code
        self.modified = generate(program)
        self.func = CoverSet(instrumenter.targets["func"])
        self.stmt = CoverSet(instrumenter.targets["stmt"])
        self.branch = CoverSet(instrumenter.targets["branch"])
        self.tracker = CoverageTracker.compile(self.modified, self.config)

    @property
    def runnable(self) -> bool:
        return self.tracker is not None

    def close(self) -> None:
        """Release the isolate; the catalogs and covered ids stay readable."""
        if self.tracker is not None:
            self.tracker.close()
            self.tracker = None

    def __enter__(self) -> Coverage:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def cover_sets(self) -> dict[str, CoverSet]:
        return {"func": self.func, "stmt": self.stmt, "branch": self.branch}

    def run(self, inputs: Sequence[Sequence[Any]]) -> None:
        for args in inputs:
            self.run_single(args)

    def run_single(self, args: Sequence[Any]) -> None:
        if self.tracker is None:
            logger.warning(NOT_RUNNABLE)
            return
        hits = self.tracker.invoke(args)
        for space, cover in self.cover_sets().items():
            for ident in hits.get(space, []):
                cover.add(ident)

    def to_string(
        self,
        show_modified: bool = False,
        show_detail: bool = False,
        show_source: bool = False,
    ) -> str:
        text = ""
        if show_modified:
            text += f"Modified: {self.modified}\n"
        text += "Coverage:\n"
        code = self.code if show_source else None
        for space, cover in self.cover_sets().items():
            if cover.total > 0:
                text += f"- {space}: {cover.to_string(show_detail, code)}\n"
        return text.strip()

    def __str__(self) -> str:
        return self.to_string()
