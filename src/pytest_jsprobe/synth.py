"""Builders for the small syntax fragments spliced into programs."""

from __future__ import annotations

from pytest_jsprobe.config import DEFAULT_HANDLE_NAME
from pytest_jsprobe.nodes import (
    BlockStatement,
    CallExpression,
    Expression,
    ExpressionStatement,
    Identifier,
    Literal,
    MemberExpression,
    Node,
    SequenceExpression,
    Statement,
    TemplateElement,
)
from pytest_jsprobe.walker import copy_location

# Id spaces exposed by the tracking handle
SPACES = ("func", "stmt", "branch")


def tracking_call(space: str, ident: int, handle: str = DEFAULT_HANDLE_NAME) -> CallExpression:
    """``<handle>.<space>.add(<ident>)``"""
    if space not in SPACES:
        raise ValueError(f"Unknown id space: {space!r}")
    callee = MemberExpression(
        object=MemberExpression(object=Identifier(name=handle), property=Identifier(name=space)),
        property=Identifier(name="add"),
    )
    return CallExpression(callee=callee, arguments=[Literal(value=ident, raw=str(ident))])


def tracking_statement(space: str, ident: int, handle: str = DEFAULT_HANDLE_NAME) -> ExpressionStatement:
    return ExpressionStatement(expression=tracking_call(space, ident, handle))


def sequence(expressions: list[Expression]) -> SequenceExpression:
    """Left-to-right evaluation yielding the last expression's value."""
    return SequenceExpression(expressions=list(expressions))


def bool_literal(value: bool, like: Node | None = None) -> Literal:
    literal = Literal(value=value, raw="true" if value else "false")
    if like is not None:
        copy_location(literal, like)
    return literal


def string_literal(value: str, like: Node | None = None) -> Literal:
    # No raw spelling: the generator quotes the value.
    literal = Literal(value=value)
    if like is not None:
        copy_location(literal, like)
    return literal


def template_element(raw: str, tail: bool = False) -> TemplateElement:
    return TemplateElement(raw=raw, cooked=raw, tail=tail)


def to_block(stmt: Statement) -> BlockStatement:
    """Wrap a statement in a block unless it already is one."""
    if isinstance(stmt, BlockStatement):
        return stmt
    return copy_location(BlockStatement(body=[stmt]), stmt)


def prepend(stmt: Statement, block: Statement | None) -> BlockStatement:
    """Put ``stmt`` first in ``block``, creating or wrapping the block as needed."""
    if block is None:
        return BlockStatement(body=[stmt])
    block = to_block(block)
    block.body.insert(0, stmt)
    return block
