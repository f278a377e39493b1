"""Type-directed traversal over syntax nodes."""

from __future__ import annotations

import copy
from typing import Any, Iterator

from pytest_jsprobe.nodes import Node


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield direct children, reading each field at the time it is reached."""
    for name in node._fields:
        value = getattr(node, name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def copy_location(new: Node, old: Node) -> Node:
    """Give a synthesized node the source span of an original one."""
    new.start = old.start
    new.end = old.end
    return new


def clone(node: Node) -> Node:
    """Structural deep copy of one subtree."""
    return copy.deepcopy(node)


class Walker:
    """Dispatch a node to ``visit_<Kind>``, trying each class along its MRO.

    A handler for a category (``visit_Function``) receives every kind that
    inherits from it unless a more specific handler exists.  Kinds with no
    handler go to :meth:`generic_visit`, which visits every child.  A
    handler that does not visit a child prunes that subtree.
    """

    def visit(self, node: Node) -> Any:
        for cls in type(node).__mro__:
            handler = getattr(self, "visit_" + cls.__name__, None)
            if handler is not None:
                return handler(node)
        return self.generic_visit(node)

    def generic_visit(self, node: Node) -> Any:
        for child in iter_child_nodes(node):
            self.visit(child)
        return None
