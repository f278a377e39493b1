"""Tests for pytest_jsprobe.instrument — coverage ids and tracked runs."""

import logging
from unittest.mock import patch

import pytest
from py_mini_racer import MiniRacer

from pytest_jsprobe.config import ProbeConfig
from pytest_jsprobe.coverage_tracker import NOT_RUNNABLE, CoverageTracker, CoverSet
from pytest_jsprobe.instrument import Coverage
from pytest_jsprobe.models import SourceRange

SIGN = "function f(x) { if (x > 0) { return 1; } else { return -1; } }"


def _spans(cover: CoverSet, code: str) -> list[str]:
    return [cover.target[ident].substring(code) for ident in sorted(cover.target)]


def describe_coverage_ids():
    def it_assigns_one_function_two_statements_and_two_branches():
        cov = Coverage(SIGN)
        assert (cov.func.total, cov.stmt.total, cov.branch.total) == (1, 2, 2)

    def it_numbers_each_space_densely_from_zero():
        code = "function f(a, b = 2) { let c = a ?? b; while (c) { c--; } return (() => c)(); }"
        cov = Coverage(code)
        for cover in cov.cover_sets().values():
            assert sorted(cover.target) == list(range(cover.total))

    def it_records_ranges_inside_the_source():
        cov = Coverage(SIGN)
        assert _spans(cov.func, SIGN) == [SIGN]
        assert _spans(cov.stmt, SIGN) == ["return 1;", "return -1;"]
        assert _spans(cov.branch, SIGN) == ["{ return 1; }", "{ return -1; }"]

    def it_gives_a_missing_else_an_empty_range():
        code = "function f(x) { if (x) { return 1; } return 2; }"
        cov = Coverage(code)
        assert _spans(cov.branch, code) == ["{ return 1; }", ""]

    def it_tracks_each_operand_of_a_logical_chain():
        code = "let y = a && b || c;"
        cov = Coverage(code)
        assert _spans(cov.branch, code) == ["a", "b", "c"]
        assert _spans(cov.stmt, code) == ["y = a && b || c"]

    def it_tracks_both_arms_of_a_conditional():
        code = "function f(x) { return x ? 1 : 2; }"
        cov = Coverage(code)
        assert _spans(cov.branch, code) == ["1", "2"]

    def it_tracks_switch_cases_as_branches():
        code = "function f(x) { switch (x) { case 1: return 'a'; default: return 'b'; } }"
        cov = Coverage(code)
        assert cov.branch.total == 2
        assert _spans(cov.stmt, code)[1:] == ["return 'a';", "return 'b';"]

    def it_tracks_arrow_bodies_and_default_values():
        code = "function g(n = 1) { return [n].map((v) => v * 2); }"
        cov = Coverage(code)
        assert cov.func.total == 2
        assert _spans(cov.stmt, code) == ["1", "return [n].map((v) => v * 2);", "v * 2"]

    def it_skips_declarators_without_initializers():
        cov = Coverage("function f() { let a; let b = 1; return b; }")
        assert cov.stmt.total == 2

    def it_injects_calls_on_the_configured_handle():
        cov = Coverage(SIGN, ProbeConfig(handle_name="$probe"))
        assert "$probe.func.add(0);" in cov.modified
        assert "__cov__" not in cov.modified


def describe_coverage_runs():
    def it_marks_the_path_taken():
        cov = Coverage(SIGN)
        cov.run_single([5])
        assert cov.func.covered == {0}
        assert cov.stmt.covered == {0}
        assert cov.branch.covered == {0}

    def it_accumulates_across_inputs():
        cov = Coverage(SIGN)
        cov.run([[5], [-5]])
        assert cov.stmt.covered == {0, 1}
        assert cov.branch.covered == {0, 1}

    def it_follows_the_implicit_else():
        cov = Coverage("function f(x) { if (x) { return 1; } return 2; }")
        cov.run_single([0])
        assert cov.branch.covered == {1}
        assert cov.stmt.covered == {1}

    def it_stops_at_the_first_defined_operand():
        cov = Coverage("function f(a, b) { return a ?? b; }")
        cov.run_single([1, 2])
        assert cov.branch.covered == {0}
        cov.run_single([None, 2])
        assert cov.branch.covered == {0, 1}

    def it_counts_hits_before_a_thrown_error():
        cov = Coverage("function f() { g(); return 1; }")
        cov.run_single([])
        assert cov.stmt.covered == {0}

    def it_warns_when_the_program_is_not_a_function(caplog):
        with caplog.at_level(logging.WARNING):
            cov = Coverage("const f = (x) => x;")
            assert not cov.runnable
            cov.run_single([1])
        assert NOT_RUNNABLE in caplog.text
        assert cov.func.covered == set()


def describe_coverage_report():
    def it_summarises_each_space():
        cov = Coverage(SIGN)
        cov.run_single([5])
        assert str(cov) == (
            "Coverage:\n"
            "- func: 1/1 (100.00%)\n"
            "- stmt: 1/2 (50.00%)\n"
            "- branch: 1/2 (50.00%)"
        )

    def it_omits_empty_spaces():
        cov = Coverage("let a = 1;")
        assert cov.to_string() == "Coverage:\n- stmt: 0/1 (0.00%)"

    def it_can_show_the_instrumented_program():
        cov = Coverage(SIGN)
        assert cov.to_string(show_modified=True).startswith("Modified: function f(x) {")

    def it_can_itemise_targets_with_their_source():
        cov = Coverage(SIGN)
        cov.run_single([5])
        text = cov.to_string(show_detail=True, show_source=True)
        assert "* 0: (1:29-1:38) -- return 1;" in text
        assert "  1: (1:48-1:58) -- return -1;" in text


def _make_cover_set() -> CoverSet:
    code = "abc def"
    return CoverSet({0: SourceRange.from_offsets(code, 0, 3), 1: SourceRange.from_offsets(code, 4, 7)})


def describe_cover_set():
    def it_starts_uncovered():
        cover = _make_cover_set()
        assert cover.total == 2
        assert cover.ratio == 0.0

    def it_rejects_unknown_ids():
        cover = _make_cover_set()
        with pytest.raises(KeyError):
            cover.add(5)

    def it_formats_its_ratio():
        cover = _make_cover_set()
        cover.add(1)
        assert str(cover) == "1/2 (50.00%)"

    def it_itemises_targets_on_request():
        cover = _make_cover_set()
        cover.add(0)
        assert cover.to_string(show_detail=True, code="abc def") == (
            "1/2 (50.00%)\n"
            "      * 0: (1:0-1:3) -- abc\n"
            "        1: (1:4-1:7) -- def"
        )

    def it_merges_covers_over_the_same_catalog():
        first, second = _make_cover_set(), _make_cover_set()
        first.add(0)
        second.add(1)
        first.merge(second)
        assert first.covered == {0, 1}

    def it_refuses_to_merge_different_catalogs():
        with pytest.raises(ValueError):
            _make_cover_set().merge(CoverSet({}))

    def it_reports_zero_for_an_empty_catalog():
        assert CoverSet({}).ratio == 0.0


def _recording_racer() -> tuple[type, list]:
    created: list = []

    class RecordingRacer(MiniRacer):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self.released = False
            created.append(self)

        def close(self):
            self.released = True
            super().close()

    return RecordingRacer, created


def describe_isolates():
    def it_releases_the_isolate_of_a_program_that_does_not_compile():
        racer, created = _recording_racer()
        with patch("pytest_jsprobe.coverage_tracker.MiniRacer", racer):
            assert CoverageTracker.compile("const f = (x) => x;") is None
        assert [ctx.released for ctx in created] == [True]

    def it_keeps_the_isolate_of_a_compiled_program_open():
        with Coverage(SIGN) as cov:
            modified = cov.modified
        racer, created = _recording_racer()
        with patch("pytest_jsprobe.coverage_tracker.MiniRacer", racer):
            tracker = CoverageTracker.compile(modified)
        assert tracker is not None
        assert [ctx.released for ctx in created] == [False]
        tracker.close()
        assert created[0].released

    def it_releases_the_isolate_when_coverage_is_closed():
        racer, created = _recording_racer()
        with patch("pytest_jsprobe.coverage_tracker.MiniRacer", racer):
            with Coverage(SIGN) as cov:
                cov.run_single([5])
        assert [ctx.released for ctx in created] == [True]
        assert not cov.runnable
        assert cov.branch.covered == {0}

    def it_closes_an_unrunnable_coverage_quietly():
        cov = Coverage("let a = 1;")
        cov.close()
        cov.close()
        assert cov.tracker is None
