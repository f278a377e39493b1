"""ESTree-shaped syntax nodes for JavaScript programs.

Every node kind is a class with a ``_fields`` tuple, following the
convention of the stdlib :mod:`ast` module.  Abstract categories
(``Statement``, ``Expression``, ``Pattern``, ``Declaration``, ``Function``,
``Class``) are base classes, so a walker can dispatch on a category by
looking a handler up along the class MRO.

``start`` and ``end`` are character offsets into the parsed source text.
Nodes built by the instrumentation engines carry ``None`` there until a
location is copied in from an original node.
"""

from __future__ import annotations

from typing import Any


class Node:
    """Base class of every syntax node."""

    _fields: tuple[str, ...] = ()
    # Field defaults; callables (``list``) are invoked for a fresh value.
    _defaults: dict[str, Any] = {}

    def __init__(self, start: int | None = None, end: int | None = None, **fields: Any) -> None:
        for name in self._fields:
            if name in fields:
                value = fields.pop(name)
            else:
                default = self._defaults.get(name)
                value = default() if callable(default) else default
            setattr(self, name, value)
        if fields:
            raise TypeError(
                f"{type(self).__name__} got unexpected fields: {', '.join(sorted(fields))}"
            )
        self.start = start
        self.end = end

    @property
    def type(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._fields)
        return f"{self.type}({parts})"


# Categories

class Statement(Node):
    pass


class Declaration(Statement):
    pass


class Expression(Node):
    pass


class Pattern(Node):
    pass


class Function(Node):
    """Any function-like node: declarations, expressions, and arrows."""

    _fields = ("id", "params", "body", "is_async", "generator", "expression")
    _defaults = {"params": list, "is_async": False, "generator": False, "expression": False}


class Class(Node):
    _fields = ("id", "super_class", "body")


# Program and statements

class Program(Node):
    _fields = ("body",)
    _defaults = {"body": list}


class ExpressionStatement(Statement):
    _fields = ("expression",)


class BlockStatement(Statement):
    _fields = ("body",)
    _defaults = {"body": list}


class StaticBlock(Node):
    _fields = ("body",)
    _defaults = {"body": list}


class EmptyStatement(Statement):
    pass


class DebuggerStatement(Statement):
    pass


class ReturnStatement(Statement):
    _fields = ("argument",)


class ThrowStatement(Statement):
    _fields = ("argument",)


class BreakStatement(Statement):
    _fields = ("label",)


class ContinueStatement(Statement):
    _fields = ("label",)


class LabeledStatement(Statement):
    _fields = ("label", "body")


class IfStatement(Statement):
    _fields = ("test", "consequent", "alternate")


class SwitchStatement(Statement):
    _fields = ("discriminant", "cases")
    _defaults = {"cases": list}


class SwitchCase(Node):
    _fields = ("test", "consequent")
    _defaults = {"consequent": list}


class WhileStatement(Statement):
    _fields = ("test", "body")


class DoWhileStatement(Statement):
    _fields = ("body", "test")


class ForStatement(Statement):
    _fields = ("init", "test", "update", "body")


class ForInStatement(Statement):
    _fields = ("left", "right", "body")


class ForOfStatement(Statement):
    _fields = ("left", "right", "body", "is_await")
    _defaults = {"is_await": False}


class TryStatement(Statement):
    _fields = ("block", "handler", "finalizer")


class CatchClause(Node):
    _fields = ("param", "body")


class VariableDeclaration(Declaration):
    _fields = ("kind", "declarations")
    _defaults = {"kind": "var", "declarations": list}


class VariableDeclarator(Node):
    _fields = ("id", "init")


class FunctionDeclaration(Function, Declaration):
    pass


class ClassDeclaration(Class, Declaration):
    pass


class ClassBody(Node):
    _fields = ("body",)
    _defaults = {"body": list}


class MethodDefinition(Node):
    _fields = ("key", "value", "kind", "computed", "static")
    _defaults = {"kind": "method", "computed": False, "static": False}


class PropertyDefinition(Node):
    _fields = ("key", "value", "computed", "static")
    _defaults = {"computed": False, "static": False}


# Expressions

class Identifier(Expression, Pattern):
    _fields = ("name",)


class PrivateIdentifier(Node):
    _fields = ("name",)


class Literal(Expression):
    """A primitive literal.

    ``raw`` is the original spelling and is only trusted while ``value`` is
    untouched; code that changes ``value`` of a string or number resets it.
    Regular expressions keep ``value`` at ``None`` and carry ``regex`` as a
    ``(pattern, flags)`` pair.
    """

    _fields = ("value", "raw", "regex")


class TemplateLiteral(Expression):
    _fields = ("quasis", "expressions")
    _defaults = {"quasis": list, "expressions": list}


class TemplateElement(Node):
    _fields = ("raw", "cooked", "tail")
    _defaults = {"raw": "", "cooked": "", "tail": False}


class TaggedTemplateExpression(Expression):
    _fields = ("tag", "quasi")


class ThisExpression(Expression):
    pass


class Super(Node):
    pass


class ArrayExpression(Expression):
    # ``None`` entries are holes: ``[1, , 2]``.
    _fields = ("elements",)
    _defaults = {"elements": list}


class ObjectExpression(Expression):
    _fields = ("properties",)
    _defaults = {"properties": list}


class Property(Node):
    _fields = ("key", "value", "kind", "computed", "shorthand", "method")
    _defaults = {"kind": "init", "computed": False, "shorthand": False, "method": False}


class SpreadElement(Node):
    _fields = ("argument",)


class UnaryExpression(Expression):
    _fields = ("operator", "argument")


class UpdateExpression(Expression):
    _fields = ("operator", "prefix", "argument")
    _defaults = {"prefix": False}


class BinaryExpression(Expression):
    _fields = ("left", "operator", "right")


class LogicalExpression(Expression):
    _fields = ("left", "operator", "right")


class AssignmentExpression(Expression):
    _fields = ("left", "operator", "right")
    _defaults = {"operator": "="}


class ConditionalExpression(Expression):
    _fields = ("test", "consequent", "alternate")


class CallExpression(Expression):
    _fields = ("callee", "arguments", "optional")
    _defaults = {"arguments": list, "optional": False}


class NewExpression(Expression):
    _fields = ("callee", "arguments")
    _defaults = {"arguments": list}


class MemberExpression(Expression, Pattern):
    _fields = ("object", "property", "computed", "optional")
    _defaults = {"computed": False, "optional": False}


class ChainExpression(Expression):
    """Top of a member/call chain that contains at least one ``?.``."""

    _fields = ("expression",)


class SequenceExpression(Expression):
    _fields = ("expressions",)
    _defaults = {"expressions": list}


class AwaitExpression(Expression):
    _fields = ("argument",)


class YieldExpression(Expression):
    _fields = ("argument", "delegate")
    _defaults = {"delegate": False}


class MetaProperty(Expression):
    _fields = ("meta", "property")


class FunctionExpression(Function, Expression):
    pass


class ArrowFunctionExpression(Function, Expression):
    pass


class ClassExpression(Class, Expression):
    pass


# Patterns

class ObjectPattern(Pattern):
    _fields = ("properties",)
    _defaults = {"properties": list}


class ArrayPattern(Pattern):
    _fields = ("elements",)
    _defaults = {"elements": list}


class AssignmentPattern(Pattern):
    _fields = ("left", "right")


class RestElement(Pattern):
    _fields = ("argument",)
