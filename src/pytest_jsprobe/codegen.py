"""Regenerate JavaScript source text from syntax nodes.

Parentheses come purely from operator precedence, so a tree that was
rewritten in place prints correctly without any bookkeeping by the code
that rewrote it.  Output uses two-space indentation and one statement per
line.
"""

from __future__ import annotations

import json
import re

from pytest_jsprobe import nodes as js
from pytest_jsprobe.errors import CodegenError
from pytest_jsprobe.walker import Walker

_INDENT = "  "

# Operands of these kinds are always parenthesised.
_NEEDS_PARENS = 17

_PRECEDENCE: dict[str, int] = {
    "ArrayExpression": 20,
    "TaggedTemplateExpression": 20,
    "ThisExpression": 20,
    "Identifier": 20,
    "PrivateIdentifier": 20,
    "Literal": 20,
    "TemplateLiteral": 20,
    "Super": 20,
    "SequenceExpression": 20,
    "MetaProperty": 20,
    "MemberExpression": 19,
    "ChainExpression": 19,
    "CallExpression": 19,
    "NewExpression": 19,
    "ArrowFunctionExpression": _NEEDS_PARENS,
    "ClassExpression": _NEEDS_PARENS,
    "FunctionExpression": _NEEDS_PARENS,
    "ObjectExpression": _NEEDS_PARENS,
    "UpdateExpression": 16,
    "UnaryExpression": 15,
    "AwaitExpression": 15,
    "BinaryExpression": 14,
    "LogicalExpression": 13,
    "ConditionalExpression": 4,
    "AssignmentExpression": 3,
    "YieldExpression": 2,
    "SpreadElement": 1,
    "RestElement": 1,
}

_OPERATOR_PRECEDENCE: dict[str, int] = {
    "||": 2,
    "??": 3,
    "&&": 4,
    "|": 5,
    "^": 6,
    "&": 7,
    "==": 8,
    "!=": 8,
    "===": 8,
    "!==": 8,
    "<": 9,
    ">": 9,
    "<=": 9,
    ">=": 9,
    "in": 9,
    "instanceof": 9,
    "<<": 10,
    ">>": 10,
    ">>>": 10,
    "+": 11,
    "-": 11,
    "*": 12,
    "%": 12,
    "/": 12,
    "**": 13,
}

# Expression statements must not start with these.
_AMBIGUOUS_START = re.compile(r"(\{|function\b|async\s+function\b|class\b|let\s*\[)")


def generate(node: js.Node) -> str:
    """Print any node (program, statement, or expression) as source text."""
    return _Generator().visit(node)


def _precedence(node: js.Node) -> int:
    return _PRECEDENCE.get(node.type, 20)


def _needs_parens(node: js.Node, parent: js.Node, right: bool = False) -> bool:
    """Whether ``node`` must be parenthesised as an operand of binary ``parent``."""
    precedence = _precedence(node)
    if precedence == _NEEDS_PARENS:
        return True
    parent_precedence = _precedence(parent)
    if precedence != parent_precedence:
        if not right and precedence == 15 and parent_precedence == 14 and parent.operator == "**":
            return True
        return precedence < parent_precedence
    if precedence not in (13, 14):
        return False
    if node.operator == "**" and parent.operator == "**":
        return not right
    if precedence == 13 and (node.operator == "??" or parent.operator == "??"):
        return True
    if right:
        return _OPERATOR_PRECEDENCE[node.operator] <= _OPERATOR_PRECEDENCE[parent.operator]
    return _OPERATOR_PRECEDENCE[node.operator] < _OPERATOR_PRECEDENCE[parent.operator]


def _has_call(node: js.Node) -> bool:
    while isinstance(node, js.MemberExpression):
        node = node.object
    return isinstance(node, (js.CallExpression, js.ChainExpression))


class _Generator(Walker):
    def __init__(self) -> None:
        self.level = 0

    def generic_visit(self, node: js.Node) -> str:
        raise CodegenError(f"Cannot generate source for {node.type}")

    # -- layout helpers --------------------------------------------------

    def _indent(self) -> str:
        return _INDENT * self.level

    def _block(self, items: list[js.Node], separator: str = "") -> str:
        if not items:
            return "{}"
        self.level += 1
        lines = [self._indent() + self.visit(item) for item in items]
        self.level -= 1
        return "{\n" + (separator + "\n").join(lines) + "\n" + self._indent() + "}"

    def _wrap(self, node: js.Node, parens: bool) -> str:
        text = self.visit(node)
        return f"({text})" if parens else text

    def _list(self, items: list[js.Node | None]) -> str:
        parts = ["" if item is None else self.visit(item) for item in items]
        text = ", ".join(parts)
        if items and items[-1] is None:
            text += ","
        return text

    def _key(self, key: js.Node, computed: bool) -> str:
        return f"[{self.visit(key)}]" if computed else self.visit(key)

    def _function(self, node: js.Function) -> str:
        head = "async function" if node.is_async else "function"
        if node.generator:
            head += "*"
        if node.id is not None:
            head += " " + self.visit(node.id)
        return f"{head}({self._list(node.params)}) {self.visit(node.body)}"

    def _method(self, prefix: str, key: str, function: js.Function) -> str:
        if function.is_async:
            prefix += "async "
        if function.generator:
            prefix += "*"
        return f"{prefix}{key}({self._list(function.params)}) {self.visit(function.body)}"

    def _declaration(self, node: js.VariableDeclaration) -> str:
        return f"{node.kind} {self._list(node.declarations)}"

    def _loop_head(self, node: js.Node | None) -> str:
        if node is None:
            return ""
        if isinstance(node, js.VariableDeclaration):
            return self._declaration(node)
        return self.visit(node)

    # -- program and statements ------------------------------------------

    def visit_Program(self, node: js.Program) -> str:
        return "\n".join(self._indent() + self.visit(stmt) for stmt in node.body)

    def visit_ExpressionStatement(self, node: js.ExpressionStatement) -> str:
        text = self.visit(node.expression)
        if _AMBIGUOUS_START.match(text):
            text = f"({text})"
        return text + ";"

    def visit_BlockStatement(self, node: js.BlockStatement) -> str:
        return self._block(node.body)

    def visit_StaticBlock(self, node: js.StaticBlock) -> str:
        return "static " + self._block(node.body)

    def visit_EmptyStatement(self, node: js.EmptyStatement) -> str:
        return ";"

    def visit_DebuggerStatement(self, node: js.DebuggerStatement) -> str:
        return "debugger;"

    def visit_ReturnStatement(self, node: js.ReturnStatement) -> str:
        if node.argument is None:
            return "return;"
        return f"return {self.visit(node.argument)};"

    def visit_ThrowStatement(self, node: js.ThrowStatement) -> str:
        return f"throw {self.visit(node.argument)};"

    def visit_BreakStatement(self, node: js.BreakStatement) -> str:
        return "break;" if node.label is None else f"break {self.visit(node.label)};"

    def visit_ContinueStatement(self, node: js.ContinueStatement) -> str:
        return "continue;" if node.label is None else f"continue {self.visit(node.label)};"

    def visit_LabeledStatement(self, node: js.LabeledStatement) -> str:
        return f"{self.visit(node.label)}: {self.visit(node.body)}"

    def visit_IfStatement(self, node: js.IfStatement) -> str:
        consequent = node.consequent
        if node.alternate is not None and not isinstance(consequent, js.BlockStatement):
            # An unbraced consequent could capture the else.
            consequent_text = self._block([consequent])
        else:
            consequent_text = self.visit(consequent)
        text = f"if ({self.visit(node.test)}) {consequent_text}"
        if node.alternate is not None:
            text += f" else {self.visit(node.alternate)}"
        return text

    def visit_SwitchStatement(self, node: js.SwitchStatement) -> str:
        return f"switch ({self.visit(node.discriminant)}) {self._block(node.cases)}"

    def visit_SwitchCase(self, node: js.SwitchCase) -> str:
        head = "default:" if node.test is None else f"case {self.visit(node.test)}:"
        self.level += 1
        lines = [head] + [self._indent() + self.visit(stmt) for stmt in node.consequent]
        self.level -= 1
        return "\n".join(lines)

    def visit_WhileStatement(self, node: js.WhileStatement) -> str:
        return f"while ({self.visit(node.test)}) {self.visit(node.body)}"

    def visit_DoWhileStatement(self, node: js.DoWhileStatement) -> str:
        return f"do {self.visit(node.body)} while ({self.visit(node.test)});"

    def visit_ForStatement(self, node: js.ForStatement) -> str:
        head = self._loop_head(node.init) + ";"
        if node.test is not None:
            head += " " + self.visit(node.test)
        head += ";"
        if node.update is not None:
            head += " " + self.visit(node.update)
        return f"for ({head}) {self.visit(node.body)}"

    def visit_ForInStatement(self, node: js.ForInStatement) -> str:
        return (
            f"for ({self._loop_head(node.left)} in {self.visit(node.right)}) "
            f"{self.visit(node.body)}"
        )

    def visit_ForOfStatement(self, node: js.ForOfStatement) -> str:
        keyword = "for await" if node.is_await else "for"
        return (
            f"{keyword} ({self._loop_head(node.left)} of {self.visit(node.right)}) "
            f"{self.visit(node.body)}"
        )

    def visit_TryStatement(self, node: js.TryStatement) -> str:
        text = "try " + self.visit(node.block)
        if node.handler is not None:
            text += " " + self.visit(node.handler)
        if node.finalizer is not None:
            text += " finally " + self.visit(node.finalizer)
        return text

    def visit_CatchClause(self, node: js.CatchClause) -> str:
        if node.param is None:
            return "catch " + self.visit(node.body)
        return f"catch ({self.visit(node.param)}) {self.visit(node.body)}"

    def visit_VariableDeclaration(self, node: js.VariableDeclaration) -> str:
        return self._declaration(node) + ";"

    def visit_VariableDeclarator(self, node: js.VariableDeclarator) -> str:
        if node.init is None:
            return self.visit(node.id)
        return f"{self.visit(node.id)} = {self.visit(node.init)}"

    def visit_FunctionDeclaration(self, node: js.FunctionDeclaration) -> str:
        return self._function(node)

    def visit_Class(self, node: js.Class) -> str:
        text = "class"
        if node.id is not None:
            text += " " + self.visit(node.id)
        if node.super_class is not None:
            parens = not isinstance(
                node.super_class, (js.Identifier, js.MemberExpression, js.CallExpression)
            )
            text += " extends " + self._wrap(node.super_class, parens)
        return f"{text} {self.visit(node.body)}"

    def visit_ClassBody(self, node: js.ClassBody) -> str:
        return self._block(node.body)

    def visit_MethodDefinition(self, node: js.MethodDefinition) -> str:
        prefix = "static " if node.static else ""
        if node.kind in ("get", "set"):
            prefix += node.kind + " "
        return self._method(prefix, self._key(node.key, node.computed), node.value)

    def visit_PropertyDefinition(self, node: js.PropertyDefinition) -> str:
        text = ("static " if node.static else "") + self._key(node.key, node.computed)
        if node.value is not None:
            text += " = " + self.visit(node.value)
        return text + ";"

    # -- expressions -----------------------------------------------------

    def visit_Identifier(self, node: js.Identifier) -> str:
        return node.name

    def visit_PrivateIdentifier(self, node: js.PrivateIdentifier) -> str:
        return "#" + node.name

    def visit_Literal(self, node: js.Literal) -> str:
        if node.regex is not None:
            pattern, flags = node.regex
            return f"/{pattern}/{flags}"
        value = node.value
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        if node.raw is not None:
            return node.raw
        if isinstance(value, str):
            return json.dumps(value)
        return repr(value)

    def visit_TemplateLiteral(self, node: js.TemplateLiteral) -> str:
        parts = []
        for index, quasi in enumerate(node.quasis):
            parts.append(quasi.raw)
            if index < len(node.expressions):
                parts.append("${" + self.visit(node.expressions[index]) + "}")
        return "`" + "".join(parts) + "`"

    def visit_TaggedTemplateExpression(self, node: js.TaggedTemplateExpression) -> str:
        parens = _precedence(node.tag) < 19 or isinstance(node.tag, js.ChainExpression)
        return self._wrap(node.tag, parens) + self.visit(node.quasi)

    def visit_ThisExpression(self, node: js.ThisExpression) -> str:
        return "this"

    def visit_Super(self, node: js.Super) -> str:
        return "super"

    def visit_MetaProperty(self, node: js.MetaProperty) -> str:
        return f"{self.visit(node.meta)}.{self.visit(node.property)}"

    def visit_ArrayExpression(self, node: js.ArrayExpression) -> str:
        return f"[{self._list(node.elements)}]"

    def visit_ObjectExpression(self, node: js.ObjectExpression) -> str:
        return self._block(node.properties, separator=",")

    def visit_Property(self, node: js.Property) -> str:
        key = self._key(node.key, node.computed)
        if node.kind in ("get", "set"):
            return self._method(node.kind + " ", key, node.value)
        if node.method:
            return self._method("", key, node.value)
        if node.shorthand:
            return self.visit(node.value)
        return f"{key}: {self.visit(node.value)}"

    def visit_SpreadElement(self, node: js.SpreadElement) -> str:
        return "..." + self.visit(node.argument)

    def visit_UnaryExpression(self, node: js.UnaryExpression) -> str:
        argument = node.argument
        parens = _precedence(argument) < _precedence(node)
        text = node.operator
        if not parens and (
            node.operator.isalpha()
            or (
                isinstance(argument, (js.UnaryExpression, js.UpdateExpression))
                and argument.operator[0] == node.operator[0]
            )
        ):
            text += " "
        return text + self._wrap(argument, parens)

    def visit_UpdateExpression(self, node: js.UpdateExpression) -> str:
        argument = self._wrap(node.argument, _precedence(node.argument) < 19)
        if node.prefix:
            return node.operator + argument
        return argument + node.operator

    def _binary(self, node: js.BinaryExpression | js.LogicalExpression) -> str:
        left = self._wrap(node.left, _needs_parens(node.left, node))
        right = self._wrap(node.right, _needs_parens(node.right, node, right=True))
        return f"{left} {node.operator} {right}"

    def visit_BinaryExpression(self, node: js.BinaryExpression) -> str:
        return self._binary(node)

    def visit_LogicalExpression(self, node: js.LogicalExpression) -> str:
        return self._binary(node)

    def visit_AssignmentExpression(self, node: js.AssignmentExpression) -> str:
        return f"{self.visit(node.left)} {node.operator} {self.visit(node.right)}"

    def visit_ConditionalExpression(self, node: js.ConditionalExpression) -> str:
        test_precedence = _precedence(node.test)
        parens = test_precedence == _NEEDS_PARENS or test_precedence <= _precedence(node)
        return (
            f"{self._wrap(node.test, parens)} ? "
            f"{self.visit(node.consequent)} : {self.visit(node.alternate)}"
        )

    def visit_CallExpression(self, node: js.CallExpression) -> str:
        callee = node.callee
        parens = _precedence(callee) < 19 or isinstance(callee, js.ChainExpression)
        opener = "?.(" if node.optional else "("
        return f"{self._wrap(callee, parens)}{opener}{self._list(node.arguments)})"

    def visit_NewExpression(self, node: js.NewExpression) -> str:
        callee = node.callee
        parens = _precedence(callee) < 19 or _has_call(callee)
        return f"new {self._wrap(callee, parens)}({self._list(node.arguments)})"

    def visit_MemberExpression(self, node: js.MemberExpression) -> str:
        target = node.object
        parens = (
            _precedence(target) < 19
            or isinstance(target, js.ChainExpression)
            or (
                isinstance(target, js.Literal)
                and isinstance(target.value, (int, float))
                and not isinstance(target.value, bool)
            )
        )
        text = self._wrap(target, parens)
        if node.computed:
            opener = "?.[" if node.optional else "["
            return f"{text}{opener}{self.visit(node.property)}]"
        return f"{text}{'?.' if node.optional else '.'}{self.visit(node.property)}"

    def visit_ChainExpression(self, node: js.ChainExpression) -> str:
        return self.visit(node.expression)

    def visit_SequenceExpression(self, node: js.SequenceExpression) -> str:
        return f"({self._list(node.expressions)})"

    def visit_AwaitExpression(self, node: js.AwaitExpression) -> str:
        parens = _precedence(node.argument) < _precedence(node)
        return "await " + self._wrap(node.argument, parens)

    def visit_YieldExpression(self, node: js.YieldExpression) -> str:
        text = "yield*" if node.delegate else "yield"
        if node.argument is not None:
            text += " " + self.visit(node.argument)
        return text

    def visit_FunctionExpression(self, node: js.FunctionExpression) -> str:
        return self._function(node)

    def visit_ArrowFunctionExpression(self, node: js.ArrowFunctionExpression) -> str:
        head = "async " if node.is_async else ""
        body = node.body
        if node.expression:
            body_text = self._wrap(body, isinstance(body, js.ObjectExpression))
        else:
            body_text = self.visit(body)
        return f"{head}({self._list(node.params)}) => {body_text}"

    # -- patterns --------------------------------------------------------

    def visit_ObjectPattern(self, node: js.ObjectPattern) -> str:
        if not node.properties:
            return "{}"
        return "{" + self._list(node.properties) + "}"

    def visit_ArrayPattern(self, node: js.ArrayPattern) -> str:
        return f"[{self._list(node.elements)}]"

    def visit_AssignmentPattern(self, node: js.AssignmentPattern) -> str:
        return f"{self.visit(node.left)} = {self.visit(node.right)}"

    def visit_RestElement(self, node: js.RestElement) -> str:
        return "..." + self.visit(node.argument)
