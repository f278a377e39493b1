"""Tests for pytest_jsprobe.operators — mutation operator registry."""

from pytest_jsprobe import nodes as js
from pytest_jsprobe.models import MutantType
from pytest_jsprobe.operators import (
    LOGICAL_MUTATIONS,
    MUTABLE_NODE_KINDS,
    alterations_for,
    binary_kind,
)


def _make_comparison(operator: str, right: js.Node) -> js.BinaryExpression:
    return js.BinaryExpression(left=js.Identifier(name="x"), operator=operator, right=right)


def describe_binary_kind():
    def it_classifies_arithmetic_operators():
        assert binary_kind("%") is MutantType.ARITHMETIC

    def it_classifies_comparisons_as_equality():
        assert binary_kind("<=") is MutantType.EQUALITY
        assert binary_kind("!==") is MutantType.EQUALITY

    def it_ignores_bitwise_operators():
        assert binary_kind("&") is None
        assert binary_kind("instanceof") is None


def describe_alterations_for():
    def it_swaps_relational_operators_both_ways():
        assert alterations_for(MutantType.EQUALITY, ">") == [">=", "<="]

    def it_never_includes_the_original_operator():
        for operator in LOGICAL_MUTATIONS:
            assert operator not in alterations_for(MutantType.LOGICAL, operator)

    def it_offers_both_other_logical_operators():
        assert alterations_for(MutantType.LOGICAL, "??") == ["&&", "||"]

    def it_skips_the_loose_strict_swap_against_null():
        node = _make_comparison("===", js.Literal(value=None, raw="null"))
        assert alterations_for(MutantType.EQUALITY, "===", node) == ["!=="]

    def it_keeps_the_strict_swap_for_loose_operators_against_null():
        node = _make_comparison("==", js.Literal(value=None, raw="null"))
        assert alterations_for(MutantType.EQUALITY, "==", node) == ["!=", "==="]
        node = _make_comparison("!=", js.Literal(value=None, raw="null"))
        assert alterations_for(MutantType.EQUALITY, "!=", node) == ["==", "!=="]

    def it_keeps_the_loose_strict_swap_otherwise():
        node = _make_comparison("===", js.Identifier(name="y"))
        assert alterations_for(MutantType.EQUALITY, "===", node) == ["!==", "=="]

    def it_returns_nothing_for_unknown_operators():
        assert alterations_for(MutantType.ASSIGNMENT, "=") == []
        assert alterations_for(MutantType.UNARY, "!") == []

    def it_returns_nothing_for_kinds_without_a_table():
        assert alterations_for(MutantType.BLOCK_STATEMENT, "+") == []

    def it_flips_updates():
        assert alterations_for(MutantType.UPDATE, "++") == ["--"]


def describe_mutable_node_kinds():
    def it_names_only_real_node_classes():
        for kind in MUTABLE_NODE_KINDS:
            assert isinstance(getattr(js, kind), type)
