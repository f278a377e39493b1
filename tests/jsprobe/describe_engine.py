"""Tests for pytest_jsprobe.engine."""

import pytest

from pytest_jsprobe.engine import Engine
from pytest_jsprobe.errors import ParseError

ADD = "function add(a, b) { return a + b; }\n"


def _write(tmp_path, name: str, code: str) -> str:  # type: ignore[no-untyped-def]
    path = tmp_path / name
    path.write_text(code, encoding="utf-8")
    return str(path)


def describe_engine():
    def it_generates_mutants_without_testing_them_by_default(tmp_path):
        path = _write(tmp_path, "add.js", ADD)
        result = Engine().run([path])
        assert result.target_files == [path]
        assert result.total_mutants == 2
        assert result.mutants_tested == 0
        assert result.results == []

    def it_runs_coverage_inputs(tmp_path):
        path = _write(tmp_path, "add.js", ADD)
        result = Engine().run([path], coverage_inputs=[[1, 2]])
        coverage = result.coverage[path]
        assert coverage.func.covered == {0}
        assert coverage.stmt.covered == {0}

    def it_releases_each_coverage_isolate_after_running(tmp_path):
        path = _write(tmp_path, "add.js", ADD)
        result = Engine().run([path], coverage_inputs=[[1, 2]])
        assert result.coverage[path].tracker is None

    def it_scores_mutants_against_mutation_inputs(tmp_path):
        path = _write(tmp_path, "add.js", ADD)
        result = Engine().run([path], mutation_inputs=["add(1, 2)"])
        assert result.mutants_tested == 2
        assert result.killed == 2
        assert result.mutation_score == 100.0
        assert all(r.file_path == path for r in result.results)

    def it_reports_survivors(tmp_path):
        path = _write(tmp_path, "add.js", ADD)
        result = Engine().run([path], mutation_inputs=["add(0, 0)"])
        assert [r.mutant.mutated_text for r in result.survived] == ["a - b"]

    def it_keeps_the_source_of_every_target(tmp_path):
        first = _write(tmp_path, "a.js", ADD)
        second = _write(tmp_path, "b.js", "let flag = true;\n")
        result = Engine().run([first, second])
        assert result.target_sources == {first: ADD, second: "let flag = true;\n"}
        assert result.total_mutants == 3

    def it_propagates_parse_errors(tmp_path):
        path = _write(tmp_path, "broken.js", "let = ;\n")
        with pytest.raises(ParseError):
            Engine().run([path])
