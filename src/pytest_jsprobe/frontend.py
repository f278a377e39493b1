"""Parse JavaScript source into syntax nodes.

tree-sitter's JavaScript grammar produces the concrete syntax tree; a
dispatch table keyed by tree-sitter node type lowers it into the ESTree
shaped classes of :mod:`pytest_jsprobe.nodes`.  tree-sitter reports UTF-8
byte offsets, which are converted to character offsets so every node's
``start``/``end`` indexes the Python ``str`` that was parsed.
"""

from __future__ import annotations

import functools
import re
from typing import Any, Callable

import tree_sitter_language_pack

from pytest_jsprobe import nodes as js
from pytest_jsprobe.errors import ParseError
from pytest_jsprobe.models import Position

_LANGUAGE = "javascript"

# Extras that may sit between any two tokens.
_NOISE_TYPES = frozenset({"comment", "html_comment", "hash_bang_line"})

_UNSUPPORTED: dict[str, str] = {
    "import_statement": "module syntax",
    "export_statement": "module syntax",
    "import": "dynamic import",
    "with_statement": "with statements",
    "decorator": "decorators",
    "jsx_element": "JSX",
    "jsx_self_closing_element": "JSX",
}

_CHAIN_TYPES = frozenset({"member_expression", "subscript_expression", "call_expression"})
_LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_LINE_CONTINUATIONS = frozenset({"\n", "\r\n", "\r", "\u2028", "\u2029"})
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")


@functools.lru_cache(maxsize=None)
def _parser() -> Any:
    return tree_sitter_language_pack.get_parser(_LANGUAGE)


def parse(code: str) -> js.Program:
    """Parse a script; raise :class:`ParseError` if it is malformed or unsupported."""
    source = code.encode("utf-8")
    tree = _parser().parse(source)
    lowering = _Lowering(code, source)
    root = tree.root_node
    if root.has_error:
        lowering.raise_first_error(root)
    return lowering.lower(root)


def _unescape(text: str) -> str:
    """Decode the escape sequences of a string literal body."""

    def replace(match: re.Match[str]) -> str:
        seq = match.group(1)
        if len(seq) > 1 and seq[0] == "u":
            digits = seq[2:-1] if seq[1] == "{" else seq[1:]
            return chr(int(digits, 16))
        if len(seq) == 3 and seq[0] == "x":
            return chr(int(seq[1:], 16))
        if seq in _LINE_CONTINUATIONS:
            return ""
        return _SIMPLE_ESCAPES.get(seq, seq)

    return _ESCAPE_RE.sub(replace, text)


def _number_value(raw: str) -> int | float:
    text = raw.replace("_", "")
    if text.endswith("n"):
        return int(text[:-1], 0)
    try:
        return int(text, 0)
    except ValueError:
        return float(text)


def _char_offsets(code: str) -> list[int]:
    """Map every UTF-8 byte offset of ``code`` to its character offset."""
    offsets: list[int] = []
    for index, char in enumerate(code):
        offsets.extend([index] * len(char.encode("utf-8")))
    offsets.append(len(code))
    return offsets


class _Lowering:
    """Lower a tree-sitter tree into :mod:`pytest_jsprobe.nodes` classes."""

    def __init__(self, code: str, source: bytes) -> None:
        self.code = code
        self.source = source
        self._offsets = None if len(source) == len(code) else _char_offsets(code)
        self._dispatch: dict[str, Callable[[Any], js.Node]] = {
            # Statements
            "program": self._program,
            "expression_statement": self._expression_statement,
            "variable_declaration": self._variable_declaration,
            "lexical_declaration": self._variable_declaration,
            "statement_block": self._statement_block,
            "empty_statement": lambda ts: self._make(js.EmptyStatement, ts),
            "debugger_statement": lambda ts: self._make(js.DebuggerStatement, ts),
            "if_statement": self._if_statement,
            "switch_statement": self._switch_statement,
            "for_statement": self._for_statement,
            "for_in_statement": self._for_in_statement,
            "while_statement": self._while_statement,
            "do_statement": self._do_statement,
            "try_statement": self._try_statement,
            "return_statement": lambda ts: self._argument_statement(js.ReturnStatement, ts),
            "throw_statement": lambda ts: self._argument_statement(js.ThrowStatement, ts),
            "break_statement": lambda ts: self._jump_statement(js.BreakStatement, ts),
            "continue_statement": lambda ts: self._jump_statement(js.ContinueStatement, ts),
            "labeled_statement": self._labeled_statement,
            "function_declaration": lambda ts: self._function(js.FunctionDeclaration, ts),
            "generator_function_declaration": lambda ts: self._function(js.FunctionDeclaration, ts),
            "class_declaration": lambda ts: self._class(js.ClassDeclaration, ts),
            # Expressions
            "parenthesized_expression": self._parenthesized_expression,
            "identifier": self._identifier,
            "property_identifier": self._identifier,
            "shorthand_property_identifier": self._identifier,
            "shorthand_property_identifier_pattern": self._identifier,
            "statement_identifier": self._identifier,
            "private_property_identifier": self._private_identifier,
            "undefined": self._identifier,
            "this": lambda ts: self._make(js.ThisExpression, ts),
            "super": lambda ts: self._make(js.Super, ts),
            "true": lambda ts: self._make(js.Literal, ts, value=True, raw="true"),
            "false": lambda ts: self._make(js.Literal, ts, value=False, raw="false"),
            "null": lambda ts: self._make(js.Literal, ts, value=None, raw="null"),
            "number": self._number,
            "string": self._string,
            "regex": self._regex,
            "template_string": self._template_string,
            "array": self._array,
            "object": self._object,
            "binary_expression": self._binary_expression,
            "unary_expression": self._unary_expression,
            "update_expression": self._update_expression,
            "assignment_expression": self._assignment_expression,
            "augmented_assignment_expression": self._assignment_expression,
            "ternary_expression": self._ternary_expression,
            "call_expression": self._call_expression,
            "new_expression": self._new_expression,
            "member_expression": self._member_expression,
            "subscript_expression": self._subscript_expression,
            "sequence_expression": self._sequence_expression,
            "await_expression": self._await_expression,
            "yield_expression": self._yield_expression,
            "spread_element": self._spread_element,
            "meta_property": self._meta_property,
            "arrow_function": self._arrow_function,
            "function_expression": lambda ts: self._function(js.FunctionExpression, ts),
            "function": lambda ts: self._function(js.FunctionExpression, ts),
            "generator_function": lambda ts: self._function(js.FunctionExpression, ts),
            "class": lambda ts: self._class(js.ClassExpression, ts),
            # Patterns
            "object_pattern": self._object_pattern,
            "array_pattern": self._array_pattern,
            "assignment_pattern": self._assignment_pattern,
            "rest_pattern": self._rest_pattern,
        }

    # -- helpers ---------------------------------------------------------

    def _offset(self, byte: int) -> int:
        return byte if self._offsets is None else self._offsets[byte]

    def _text(self, ts: Any) -> str:
        return self.source[ts.start_byte:ts.end_byte].decode("utf-8")

    def _named(self, ts: Any) -> list[Any]:
        return [c for c in ts.named_children if c.type not in _NOISE_TYPES]

    def _make(self, cls: type[js.Node], ts: Any, **fields: Any) -> Any:
        return cls(start=self._offset(ts.start_byte), end=self._offset(ts.end_byte), **fields)

    def _error(self, message: str, ts: Any) -> ParseError:
        index = self._offset(ts.start_byte)
        position = Position.from_index(self.code, index)
        return ParseError(message, position.line, position.column, index)

    def raise_first_error(self, root: Any) -> None:
        node = root
        stack = [root]
        while stack:
            current = stack.pop()
            if current.type == "ERROR" or current.is_missing:
                node = current
                break
            stack.extend(
                c for c in reversed(current.children) if c.has_error or c.is_missing
            )
        if node.is_missing:
            raise self._error(f"Missing {node.type!r}", node)
        raise self._error(f"Unexpected token {self._text(node)[:20]!r}", node)

    def lower(self, ts: Any) -> Any:
        handler = self._dispatch.get(ts.type)
        if handler is None:
            what = _UNSUPPORTED.get(ts.type, ts.type)
            raise self._error(f"Unsupported syntax: {what}", ts)
        return handler(ts)

    def _optional(self, ts: Any | None) -> Any:
        return None if ts is None else self.lower(ts)

    def _has_token(self, ts: Any, *tokens: str) -> bool:
        return any(c.type in tokens for c in ts.children)

    # -- statements ------------------------------------------------------

    def _program(self, ts: Any) -> js.Program:
        return self._make(js.Program, ts, body=[self.lower(c) for c in self._named(ts)])

    def _expression_statement(self, ts: Any) -> js.ExpressionStatement:
        return self._make(js.ExpressionStatement, ts, expression=self.lower(self._named(ts)[0]))

    def _variable_declaration(self, ts: Any) -> js.VariableDeclaration:
        kind = ts.child_by_field_name("kind")
        declarations = [
            self._variable_declarator(c)
            for c in self._named(ts)
            if c.type == "variable_declarator"
        ]
        return self._make(
            js.VariableDeclaration,
            ts,
            kind=self._text(kind) if kind is not None else "var",
            declarations=declarations,
        )

    def _variable_declarator(self, ts: Any) -> js.VariableDeclarator:
        return self._make(
            js.VariableDeclarator,
            ts,
            id=self.lower(ts.child_by_field_name("name")),
            init=self._optional(ts.child_by_field_name("value")),
        )

    def _statement_block(self, ts: Any) -> js.BlockStatement:
        return self._make(js.BlockStatement, ts, body=[self.lower(c) for c in self._named(ts)])

    def _if_statement(self, ts: Any) -> js.IfStatement:
        alternative = ts.child_by_field_name("alternative")
        alternate = None
        if alternative is not None:
            # else_clause wraps the statement
            alternate = self.lower(self._named(alternative)[0])
        return self._make(
            js.IfStatement,
            ts,
            test=self.lower(ts.child_by_field_name("condition")),
            consequent=self.lower(ts.child_by_field_name("consequence")),
            alternate=alternate,
        )

    def _switch_statement(self, ts: Any) -> js.SwitchStatement:
        cases = [self._switch_case(c) for c in self._named(ts.child_by_field_name("body"))]
        return self._make(
            js.SwitchStatement,
            ts,
            discriminant=self.lower(ts.child_by_field_name("value")),
            cases=cases,
        )

    def _switch_case(self, ts: Any) -> js.SwitchCase:
        test = ts.child_by_field_name("value") if ts.type == "switch_case" else None
        consequent = [self.lower(c) for c in ts.children_by_field_name("body")]
        return self._make(js.SwitchCase, ts, test=self._optional(test), consequent=consequent)

    def _for_clause(self, ts: Any | None) -> Any:
        if ts is None or ts.type in (";", "empty_statement"):
            return None
        if ts.type == "expression_statement":
            return self.lower(self._named(ts)[0])
        return self.lower(ts)

    def _for_statement(self, ts: Any) -> js.ForStatement:
        return self._make(
            js.ForStatement,
            ts,
            init=self._for_clause(ts.child_by_field_name("initializer")),
            test=self._for_clause(ts.child_by_field_name("condition")),
            update=self._for_clause(ts.child_by_field_name("increment")),
            body=self.lower(ts.child_by_field_name("body")),
        )

    def _for_in_statement(self, ts: Any) -> js.ForInStatement | js.ForOfStatement:
        kind = ts.child_by_field_name("kind")
        left_ts = ts.child_by_field_name("left")
        left = self.lower(left_ts)
        if kind is not None:
            declarator = self._make(
                js.VariableDeclarator,
                left_ts,
                id=left,
                init=self._optional(ts.child_by_field_name("value")),
            )
            left = js.VariableDeclaration(
                start=self._offset(kind.start_byte),
                end=self._offset(left_ts.end_byte),
                kind=self._text(kind),
                declarations=[declarator],
            )
        right = self.lower(ts.child_by_field_name("right"))
        body = self.lower(ts.child_by_field_name("body"))
        if self._text(ts.child_by_field_name("operator")) == "of":
            return self._make(
                js.ForOfStatement,
                ts,
                left=left,
                right=right,
                body=body,
                is_await=self._has_token(ts, "await"),
            )
        return self._make(js.ForInStatement, ts, left=left, right=right, body=body)

    def _while_statement(self, ts: Any) -> js.WhileStatement:
        return self._make(
            js.WhileStatement,
            ts,
            test=self.lower(ts.child_by_field_name("condition")),
            body=self.lower(ts.child_by_field_name("body")),
        )

    def _do_statement(self, ts: Any) -> js.DoWhileStatement:
        return self._make(
            js.DoWhileStatement,
            ts,
            body=self.lower(ts.child_by_field_name("body")),
            test=self.lower(ts.child_by_field_name("condition")),
        )

    def _try_statement(self, ts: Any) -> js.TryStatement:
        handler = None
        handler_ts = ts.child_by_field_name("handler")
        if handler_ts is not None:
            handler = self._make(
                js.CatchClause,
                handler_ts,
                param=self._optional(handler_ts.child_by_field_name("parameter")),
                body=self.lower(handler_ts.child_by_field_name("body")),
            )
        finalizer = None
        finalizer_ts = ts.child_by_field_name("finalizer")
        if finalizer_ts is not None:
            finalizer = self.lower(finalizer_ts.child_by_field_name("body"))
        return self._make(
            js.TryStatement,
            ts,
            block=self.lower(ts.child_by_field_name("body")),
            handler=handler,
            finalizer=finalizer,
        )

    def _argument_statement(self, cls: type[js.Node], ts: Any) -> js.Node:
        named = self._named(ts)
        return self._make(cls, ts, argument=self.lower(named[0]) if named else None)

    def _jump_statement(self, cls: type[js.Node], ts: Any) -> js.Node:
        return self._make(cls, ts, label=self._optional(ts.child_by_field_name("label")))

    def _labeled_statement(self, ts: Any) -> js.LabeledStatement:
        return self._make(
            js.LabeledStatement,
            ts,
            label=self.lower(ts.child_by_field_name("label")),
            body=self.lower(ts.child_by_field_name("body")),
        )

    # -- functions and classes -------------------------------------------

    def _params(self, ts: Any) -> list[Any]:
        return [self.lower(c) for c in self._named(ts)]

    def _function(self, cls: type[js.Function], ts: Any) -> js.Function:
        return self._make(
            cls,
            ts,
            id=self._optional(ts.child_by_field_name("name")),
            params=self._params(ts.child_by_field_name("parameters")),
            body=self.lower(ts.child_by_field_name("body")),
            is_async=self._has_token(ts, "async"),
            generator=self._has_token(ts, "*"),
        )

    def _arrow_function(self, ts: Any) -> js.ArrowFunctionExpression:
        parameter = ts.child_by_field_name("parameter")
        if parameter is not None:
            params = [self.lower(parameter)]
        else:
            params = self._params(ts.child_by_field_name("parameters"))
        body_ts = ts.child_by_field_name("body")
        return self._make(
            js.ArrowFunctionExpression,
            ts,
            params=params,
            body=self.lower(body_ts),
            is_async=self._has_token(ts, "async"),
            expression=body_ts.type != "statement_block",
        )

    def _class(self, cls: type[js.Class], ts: Any) -> js.Class:
        super_class = None
        for child in self._named(ts):
            if child.type == "class_heritage":
                super_class = self.lower(self._named(child)[0])
        body_ts = ts.child_by_field_name("body")
        members = [self._class_member(c) for c in self._named(body_ts)]
        return self._make(
            cls,
            ts,
            id=self._optional(ts.child_by_field_name("name")),
            super_class=super_class,
            body=self._make(js.ClassBody, body_ts, body=members),
        )

    def _class_member(self, ts: Any) -> js.Node:
        if ts.type == "method_definition":
            key, computed, kind, value = self._method(ts)
            static = self._has_token(ts, "static", "static get")
            if kind == "init":
                name = getattr(key, "name", None)
                kind = "constructor" if name == "constructor" and not static else "method"
            return self._make(
                js.MethodDefinition,
                ts,
                key=key,
                value=value,
                kind=kind,
                computed=computed,
                static=static,
            )
        if ts.type == "field_definition":
            key, computed = self._property_key(ts.child_by_field_name("property"))
            return self._make(
                js.PropertyDefinition,
                ts,
                key=key,
                value=self._optional(ts.child_by_field_name("value")),
                computed=computed,
                static=self._has_token(ts, "static"),
            )
        if ts.type == "class_static_block":
            block = self.lower(ts.child_by_field_name("body"))
            return self._make(js.StaticBlock, ts, body=block.body)
        raise self._error(f"Unsupported class member: {ts.type}", ts)

    def _method(self, ts: Any) -> tuple[Any, bool, str, js.FunctionExpression]:
        """Shared by class methods and object methods: key, computed, kind, function."""
        name_ts = ts.child_by_field_name("name")
        key, computed = self._property_key(name_ts)
        kind = "init"
        if self._has_token(ts, "get", "static get"):
            kind = "get"
        elif self._has_token(ts, "set"):
            kind = "set"
        params_ts = ts.child_by_field_name("parameters")
        body_ts = ts.child_by_field_name("body")
        value = js.FunctionExpression(
            start=self._offset(params_ts.start_byte),
            end=self._offset(body_ts.end_byte),
            params=self._params(params_ts),
            body=self.lower(body_ts),
            is_async=self._has_token(ts, "async"),
            generator=self._has_token(ts, "*"),
        )
        return key, computed, kind, value

    def _property_key(self, ts: Any) -> tuple[Any, bool]:
        if ts.type == "computed_property_name":
            return self.lower(self._named(ts)[0]), True
        return self.lower(ts), False

    # -- expressions -----------------------------------------------------

    def _parenthesized_expression(self, ts: Any) -> Any:
        return self.lower(self._named(ts)[0])

    def _identifier(self, ts: Any) -> js.Identifier:
        return self._make(js.Identifier, ts, name=self._text(ts))

    def _private_identifier(self, ts: Any) -> js.PrivateIdentifier:
        return self._make(js.PrivateIdentifier, ts, name=self._text(ts).lstrip("#"))

    def _number(self, ts: Any) -> js.Literal:
        raw = self._text(ts)
        return self._make(js.Literal, ts, value=_number_value(raw), raw=raw)

    def _string(self, ts: Any) -> js.Literal:
        raw = self._text(ts)
        return self._make(js.Literal, ts, value=_unescape(raw[1:-1]), raw=raw)

    def _regex(self, ts: Any) -> js.Literal:
        pattern = ts.child_by_field_name("pattern")
        flags = ts.child_by_field_name("flags")
        return self._make(
            js.Literal,
            ts,
            value=None,
            raw=self._text(ts),
            regex=(self._text(pattern) if pattern is not None else "", self._text(flags) if flags is not None else ""),
        )

    def _template_element(self, start: int, end: int, tail: bool) -> js.TemplateElement:
        raw = self.source[start:end].decode("utf-8")
        return js.TemplateElement(
            start=self._offset(start),
            end=self._offset(end),
            raw=raw,
            cooked=_unescape(raw),
            tail=tail,
        )

    def _template_string(self, ts: Any) -> js.TemplateLiteral:
        quasis: list[js.TemplateElement] = []
        expressions: list[Any] = []
        cursor = ts.start_byte + 1  # after the opening backtick
        for child in ts.named_children:
            if child.type == "template_substitution":
                quasis.append(self._template_element(cursor, child.start_byte, tail=False))
                expressions.append(self.lower(self._named(child)[0]))
                cursor = child.end_byte
        quasis.append(self._template_element(cursor, ts.end_byte - 1, tail=True))
        return self._make(js.TemplateLiteral, ts, quasis=quasis, expressions=expressions)

    def _elements(self, ts: Any) -> list[Any]:
        """Array elements with ``None`` for holes, from the comma layout."""
        elements: list[Any] = []
        expecting = True
        for child in ts.children:
            if child.type in _NOISE_TYPES or child.type in ("[", "]"):
                continue
            if child.type == ",":
                if expecting:
                    elements.append(None)
                expecting = True
                continue
            elements.append(self.lower(child))
            expecting = False
        return elements

    def _array(self, ts: Any) -> js.ArrayExpression:
        return self._make(js.ArrayExpression, ts, elements=self._elements(ts))

    def _shorthand(self, ts: Any) -> js.Property:
        return self._make(
            js.Property,
            ts,
            key=self._identifier(ts),
            value=self._identifier(ts),
            shorthand=True,
        )

    def _object(self, ts: Any) -> js.ObjectExpression:
        properties: list[Any] = []
        for child in self._named(ts):
            if child.type == "pair":
                key, computed = self._property_key(child.child_by_field_name("key"))
                properties.append(
                    self._make(
                        js.Property,
                        child,
                        key=key,
                        value=self.lower(child.child_by_field_name("value")),
                        computed=computed,
                    )
                )
            elif child.type == "shorthand_property_identifier":
                properties.append(self._shorthand(child))
            elif child.type == "method_definition":
                key, computed, kind, value = self._method(child)
                properties.append(
                    self._make(
                        js.Property,
                        child,
                        key=key,
                        value=value,
                        kind=kind,
                        computed=computed,
                        method=kind == "init",
                    )
                )
            else:
                properties.append(self.lower(child))
        return self._make(js.ObjectExpression, ts, properties=properties)

    def _binary_expression(self, ts: Any) -> js.BinaryExpression | js.LogicalExpression:
        operator = ts.child_by_field_name("operator").type
        cls = js.LogicalExpression if operator in _LOGICAL_OPERATORS else js.BinaryExpression
        return self._make(
            cls,
            ts,
            left=self.lower(ts.child_by_field_name("left")),
            operator=operator,
            right=self.lower(ts.child_by_field_name("right")),
        )

    def _unary_expression(self, ts: Any) -> js.UnaryExpression:
        return self._make(
            js.UnaryExpression,
            ts,
            operator=ts.child_by_field_name("operator").type,
            argument=self.lower(ts.child_by_field_name("argument")),
        )

    def _update_expression(self, ts: Any) -> js.UpdateExpression:
        return self._make(
            js.UpdateExpression,
            ts,
            operator=ts.child_by_field_name("operator").type,
            prefix=ts.children[0].type in ("++", "--"),
            argument=self.lower(ts.child_by_field_name("argument")),
        )

    def _assignment_expression(self, ts: Any) -> js.AssignmentExpression:
        operator = ts.child_by_field_name("operator")
        return self._make(
            js.AssignmentExpression,
            ts,
            left=self.lower(ts.child_by_field_name("left")),
            operator=operator.type if operator is not None else "=",
            right=self.lower(ts.child_by_field_name("right")),
        )

    def _ternary_expression(self, ts: Any) -> js.ConditionalExpression:
        return self._make(
            js.ConditionalExpression,
            ts,
            test=self.lower(ts.child_by_field_name("condition")),
            consequent=self.lower(ts.child_by_field_name("consequence")),
            alternate=self.lower(ts.child_by_field_name("alternative")),
        )

    def _chain_link(self, ts: Any) -> Any:
        """Lower the object/callee of a member or call without closing the chain."""
        if ts.type == "call_expression":
            return self._call_expression(ts, in_chain=True)
        if ts.type == "member_expression":
            return self._member_expression(ts, in_chain=True)
        if ts.type == "subscript_expression":
            return self._subscript_expression(ts, in_chain=True)
        return self.lower(ts)

    def _close_chain(self, node: Any) -> Any:
        """Wrap the top of a chain holding any ``?.`` in a ChainExpression."""
        link = node
        while isinstance(link, (js.MemberExpression, js.CallExpression)):
            if link.optional:
                return js.ChainExpression(start=node.start, end=node.end, expression=node)
            link = link.object if isinstance(link, js.MemberExpression) else link.callee
        return node

    def _is_optional(self, ts: Any) -> bool:
        return self._has_token(ts, "optional_chain", "?.")

    def _arguments(self, ts: Any) -> list[Any]:
        return [self.lower(c) for c in self._named(ts)]

    def _call_expression(self, ts: Any, in_chain: bool = False) -> Any:
        function = ts.child_by_field_name("function")
        arguments = ts.child_by_field_name("arguments")
        if function.type == "import":
            raise self._error("Unsupported syntax: dynamic import", function)
        if arguments.type == "template_string":
            return self._make(
                js.TaggedTemplateExpression,
                ts,
                tag=self.lower(function),
                quasi=self.lower(arguments),
            )
        node = self._make(
            js.CallExpression,
            ts,
            callee=self._chain_link(function),
            arguments=self._arguments(arguments),
            optional=self._is_optional(ts),
        )
        return node if in_chain else self._close_chain(node)

    def _member_expression(self, ts: Any, in_chain: bool = False) -> Any:
        node = self._make(
            js.MemberExpression,
            ts,
            object=self._chain_link(ts.child_by_field_name("object")),
            property=self.lower(ts.child_by_field_name("property")),
            optional=self._is_optional(ts),
        )
        return node if in_chain else self._close_chain(node)

    def _subscript_expression(self, ts: Any, in_chain: bool = False) -> Any:
        node = self._make(
            js.MemberExpression,
            ts,
            object=self._chain_link(ts.child_by_field_name("object")),
            property=self.lower(ts.child_by_field_name("index")),
            computed=True,
            optional=self._is_optional(ts),
        )
        return node if in_chain else self._close_chain(node)

    def _new_expression(self, ts: Any) -> js.NewExpression:
        arguments = ts.child_by_field_name("arguments")
        return self._make(
            js.NewExpression,
            ts,
            callee=self.lower(ts.child_by_field_name("constructor")),
            arguments=self._arguments(arguments) if arguments is not None else [],
        )

    def _sequence_expression(self, ts: Any) -> js.SequenceExpression:
        expressions: list[Any] = []
        for child in self._named(ts):
            if child.type == "sequence_expression":
                expressions.extend(self._sequence_expression(child).expressions)
            else:
                expressions.append(self.lower(child))
        return self._make(js.SequenceExpression, ts, expressions=expressions)

    def _await_expression(self, ts: Any) -> js.AwaitExpression:
        return self._make(js.AwaitExpression, ts, argument=self.lower(self._named(ts)[0]))

    def _yield_expression(self, ts: Any) -> js.YieldExpression:
        named = self._named(ts)
        return self._make(
            js.YieldExpression,
            ts,
            argument=self.lower(named[0]) if named else None,
            delegate=self._has_token(ts, "*"),
        )

    def _spread_element(self, ts: Any) -> js.SpreadElement:
        return self._make(js.SpreadElement, ts, argument=self.lower(self._named(ts)[0]))

    def _meta_property(self, ts: Any) -> js.MetaProperty:
        meta, _, prop = self._text(ts).partition(".")
        return self._make(
            js.MetaProperty,
            ts,
            meta=self._make(js.Identifier, ts, name=meta.strip()),
            property=self._make(js.Identifier, ts, name=prop.strip()),
        )

    # -- patterns --------------------------------------------------------

    def _object_pattern(self, ts: Any) -> js.ObjectPattern:
        properties: list[Any] = []
        for child in self._named(ts):
            if child.type == "pair_pattern":
                key, computed = self._property_key(child.child_by_field_name("key"))
                properties.append(
                    self._make(
                        js.Property,
                        child,
                        key=key,
                        value=self.lower(child.child_by_field_name("value")),
                        computed=computed,
                    )
                )
            elif child.type == "shorthand_property_identifier_pattern":
                properties.append(self._shorthand(child))
            elif child.type == "object_assignment_pattern":
                left_ts = child.child_by_field_name("left")
                default = self._make(
                    js.AssignmentPattern,
                    child,
                    left=self.lower(left_ts),
                    right=self.lower(child.child_by_field_name("right")),
                )
                properties.append(
                    self._make(
                        js.Property,
                        child,
                        key=self.lower(left_ts),
                        value=default,
                        shorthand=True,
                    )
                )
            else:
                properties.append(self.lower(child))
        return self._make(js.ObjectPattern, ts, properties=properties)

    def _array_pattern(self, ts: Any) -> js.ArrayPattern:
        return self._make(js.ArrayPattern, ts, elements=self._elements(ts))

    def _assignment_pattern(self, ts: Any) -> js.AssignmentPattern:
        return self._make(
            js.AssignmentPattern,
            ts,
            left=self.lower(ts.child_by_field_name("left")),
            right=self.lower(ts.child_by_field_name("right")),
        )

    def _rest_pattern(self, ts: Any) -> js.RestElement:
        return self._make(js.RestElement, ts, argument=self.lower(self._named(ts)[0]))
