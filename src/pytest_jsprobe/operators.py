"""Mutation operator registry."""

from __future__ import annotations

from pytest_jsprobe import nodes as js
from pytest_jsprobe.models import MutantType

ARITHMETIC_MUTATIONS: dict[str, list[str]] = {
    "+": ["-"],
    "-": ["+"],
    "*": ["/", "%"],
    "/": ["*", "%"],
    "%": ["*", "/"],
}

EQUALITY_MUTATIONS: dict[str, list[str]] = {
    "<": ["<=", ">="],
    "<=": ["<", ">"],
    ">": [">=", "<="],
    ">=": [">", "<"],
    "==": ["!=", "==="],
    "!=": ["==", "!=="],
    "===": ["!==", "=="],
    "!==": ["===", "!="],
}

# Strict operators lose their loose counterpart against a literal `null`
NULL_SENSITIVE: dict[str, str] = {
    "===": "==",
    "!==": "!=",
}

ASSIGNMENT_MUTATIONS: dict[str, list[str]] = {
    "+=": ["-="],
    "-=": ["+="],
    "*=": ["/="],
    "/=": ["*="],
    "%=": ["*="],
    "<<=": [">>="],
    ">>=": ["<<="],
    "&=": ["|="],
    "|=": ["&="],
    "??=": ["&&="],
}

LOGICAL_MUTATIONS: dict[str, list[str]] = {
    "&&": ["||", "??"],
    "||": ["&&", "??"],
    "??": ["&&", "||"],
}

UNARY_MUTATIONS: dict[str, list[str]] = {
    "+": ["-"],
    "-": ["+"],
}

UPDATE_MUTATIONS: dict[str, list[str]] = {
    "++": ["--"],
    "--": ["++"],
}

_TABLES: dict[MutantType, dict[str, list[str]]] = {
    MutantType.ARITHMETIC: ARITHMETIC_MUTATIONS,
    MutantType.EQUALITY: EQUALITY_MUTATIONS,
    MutantType.ASSIGNMENT: ASSIGNMENT_MUTATIONS,
    MutantType.LOGICAL: LOGICAL_MUTATIONS,
    MutantType.UNARY: UNARY_MUTATIONS,
    MutantType.UPDATE: UPDATE_MUTATIONS,
}

# Node kinds the mutator must have a handler for
MUTABLE_NODE_KINDS: list[str] = [
    "BinaryExpression",
    "LogicalExpression",
    "AssignmentExpression",
    "UnaryExpression",
    "UpdateExpression",
    "Literal",
    "TemplateLiteral",
    "ArrayExpression",
    "ObjectExpression",
    "CallExpression",
    "NewExpression",
    "BlockStatement",
    "IfStatement",
    "WhileStatement",
    "DoWhileStatement",
    "ForStatement",
    "ChainExpression",
]


def _is_null(node: js.Node) -> bool:
    return isinstance(node, js.Literal) and node.value is None and node.regex is None


def binary_kind(operator: str) -> MutantType | None:
    """Category of a binary operator, or None when it is not mutated."""
    if operator in ARITHMETIC_MUTATIONS:
        return MutantType.ARITHMETIC
    if operator in EQUALITY_MUTATIONS:
        return MutantType.EQUALITY
    return None


def alterations_for(kind: MutantType, operator: str, node: js.Node | None = None) -> list[str]:
    """Replacement operators for ``operator``; never includes ``operator`` itself."""
    table = _TABLES.get(kind, {})
    alterations = [op for op in table.get(operator, []) if op != operator]
    if (
        kind is MutantType.EQUALITY
        and node is not None
        and operator in NULL_SENSITIVE
        and (_is_null(node.left) or _is_null(node.right))
    ):
        alterations = [op for op in alterations if op != NULL_SENSITIVE[operator]]
    return alterations
