"""Tests for target/strings.js."""

from pathlib import Path

from pytest_jsprobe.runner import observe

SOURCE = (Path(__file__).parents[2] / "target" / "strings.js").read_text(encoding="utf-8")


def _call(expression: str) -> str:
    [outcome] = observe(SOURCE, [expression])
    return outcome


def describe_describe():
    def it_names_anonymous_values():
        assert _call("describe(null)") == 'return "anonymous"'

    def it_returns_the_bare_label_for_zero():
        assert _call('describe("ann", 0)') == 'return "ann"'

    def it_spells_out_one():
        assert _call('describe("bo", 1)') == 'return "bo: one"'

    def it_counts_many_items():
        assert _call('describe("cy", 3)') == 'return "cy: 3 items"'


def describe_shout():
    def it_uppercases_and_exclaims():
        assert _call('shout("hi")') == 'return "HI!"'
