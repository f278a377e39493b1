"""Tests for pytest_jsprobe.plugin — target discovery and plugin behavior."""

import json
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

from pytest_jsprobe.models import Mutant, MutantResult, MutantType, RunResult, SourceRange
from pytest_jsprobe.plugin import (
    JsProbePlugin,
    _find_default_targets,
    _find_target_files,
    _is_test_file,
    _load_inputs,
    pytest_addoption,
    pytest_configure,
)


def _make_config(options: dict) -> MagicMock:  # type: ignore[type-arg]
    config = MagicMock()
    config.getoption.side_effect = lambda key, default=None: options.get(key, default)
    return config


def _make_session(config: MagicMock) -> MagicMock:
    session = MagicMock()
    session.config = config
    session.config.rootpath = Path("/tmp/project")
    return session


def _make_run_result(killed: bool) -> RunResult:
    code = "a + b;"
    mutant = Mutant(
        id=1,
        type=MutantType.ARITHMETIC,
        mutated_source="a - b;",
        original_source=code,
        range=SourceRange.from_offsets(code, 0, 5),
        mutated_text="a - b",
    )
    result = MutantResult(
        mutant=mutant,
        killed=killed,
        tests_run=1,
        killing_test="f()" if killed else None,
        time_seconds=0.1,
        file_path="/fake/mod.js",
    )
    return RunResult(
        target_files=["/fake/mod.js"],
        total_mutants=1,
        mutants_tested=1,
        results=[result],
        wall_time_seconds=0.5,
    )


def describe_is_test_file():
    def it_detects_test_and_spec_suffixes():
        assert _is_test_file("math.test.js") is True
        assert _is_test_file("math.spec.js") is True

    def it_detects_test_prefix():
        assert _is_test_file("test_math.js") is True

    def it_allows_regular_modules():
        assert _is_test_file("math.js") is False
        assert _is_test_file("contest.js") is False


def describe_find_target_files():
    def it_returns_single_file_for_js_file(tmp_path):
        target = tmp_path / "module.js"
        target.write_text("let x = 1;\n")
        assert _find_target_files(str(target)) == [str(target)]

    def it_returns_empty_for_non_js_file(tmp_path):
        target = tmp_path / "data.txt"
        target.write_text("hello\n")
        assert _find_target_files(str(target)) == []

    def it_returns_empty_for_nonexistent_path():
        assert _find_target_files("/nonexistent/path/nope.js") == []

    def it_finds_files_recursively(tmp_path):
        sub = tmp_path / "lib"
        sub.mkdir()
        (sub / "deep.js").write_text("let z = 3;\n")
        (tmp_path / "top.js").write_text("let a = 1;\n")
        basenames = sorted(os.path.basename(f) for f in _find_target_files(str(tmp_path)))
        assert basenames == ["deep.js", "top.js"]

    def it_excludes_test_files_and_node_modules(tmp_path):
        (tmp_path / "app.js").write_text("let x = 1;\n")
        (tmp_path / "app.test.js").write_text("test();\n")
        modules = tmp_path / "node_modules" / "dep"
        modules.mkdir(parents=True)
        (modules / "index.js").write_text("let y = 2;\n")
        basenames = [os.path.basename(f) for f in _find_target_files(str(tmp_path))]
        assert basenames == ["app.js"]


def describe_find_default_targets():
    def it_prefers_target_over_src(tmp_path):
        (tmp_path / "target").mkdir()
        (tmp_path / "target" / "from_target.js").write_text("let a = 1;\n")
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "from_src.js").write_text("let b = 2;\n")
        basenames = [os.path.basename(f) for f in _find_default_targets(tmp_path)]
        assert basenames == ["from_target.js"]

    def it_falls_back_to_src(tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "lib.js").write_text("let b = 2;\n")
        assert [os.path.basename(f) for f in _find_default_targets(tmp_path)] == ["lib.js"]

    def it_returns_empty_when_no_standard_dirs(tmp_path):
        assert _find_default_targets(tmp_path) == []


def describe_load_inputs():
    def it_returns_nothing_without_a_path():
        assert _load_inputs(None) == ([], [])

    def it_reads_both_input_kinds(tmp_path):
        path = tmp_path / "inputs.json"
        path.write_text(json.dumps({"coverage": [[1, 2], [3]], "mutation": ["add(1, 2)"]}))
        assert _load_inputs(str(path)) == ([[1, 2], [3]], ["add(1, 2)"])

    def it_tolerates_missing_sections(tmp_path):
        path = tmp_path / "inputs.json"
        path.write_text(json.dumps({"mutation": ["f()"]}))
        assert _load_inputs(str(path)) == ([], ["f()"])


def describe_pytest_addoption():
    def it_registers_the_jsprobe_options():
        parser = MagicMock()
        pytest_addoption(parser)
        group = parser.getgroup.return_value
        names = [c.args[0] for c in group.addoption.call_args_list]
        assert names == [
            "--jsprobe",
            "--jsprobe-target",
            "--jsprobe-inputs",
            "--jsprobe-detail",
            "--jsprobe-timeout",
            "--jsprobe-json",
        ]


def describe_pytest_configure():
    def it_registers_the_plugin_when_enabled():
        config = _make_config({"jsprobe": True})
        pytest_configure(config)
        config.pluginmanager.register.assert_called_once()
        assert config.pluginmanager.register.call_args.args[1] == "jsprobe-plugin"

    def it_does_nothing_when_disabled():
        config = _make_config({})
        pytest_configure(config)
        config.pluginmanager.register.assert_not_called()


def describe_JsProbePlugin():
    def it_skips_when_the_test_run_failed():
        config = MagicMock()
        plugin = JsProbePlugin(config)
        assert plugin.pytest_sessionfinish(MagicMock(), exitstatus=1) is None
        config.getoption.assert_not_called()

    def it_skips_when_no_target_files_found():
        config = _make_config({})
        plugin = JsProbePlugin(config)
        mock_engine = MagicMock()
        with (
            patch("pytest_jsprobe.plugin._find_default_targets", return_value=[]),
            patch("pytest_jsprobe.plugin.Engine", mock_engine),
        ):
            plugin.pytest_sessionfinish(_make_session(config), exitstatus=0)
        mock_engine.assert_not_called()

    def it_runs_the_engine_with_loaded_inputs(tmp_path):
        inputs = tmp_path / "inputs.json"
        inputs.write_text(json.dumps({"coverage": [[1]], "mutation": ["f(1)"]}))
        config = _make_config({"jsprobe_target": ["/fake/mod.js"], "jsprobe_inputs": str(inputs)})
        plugin = JsProbePlugin(config)
        mock_engine = MagicMock()
        mock_engine.return_value.run.return_value = _make_run_result(killed=True)

        with (
            patch("pytest_jsprobe.plugin._find_target_files", return_value=["/fake/mod.js"]),
            patch("pytest_jsprobe.plugin.Engine", mock_engine),
        ):
            plugin.pytest_sessionfinish(_make_session(config), exitstatus=0)

        mock_engine.return_value.run.assert_called_once_with(["/fake/mod.js"], [[1]], ["f(1)"])

    def it_passes_command_line_limits_to_the_engine():
        config = _make_config({"jsprobe_target": ["/fake/mod.js"], "jsprobe_timeout": 250})
        plugin = JsProbePlugin(config)
        mock_engine = MagicMock()
        mock_engine.return_value.run.return_value = _make_run_result(killed=True)

        with (
            patch("pytest_jsprobe.plugin._find_target_files", return_value=["/fake/mod.js"]),
            patch("pytest_jsprobe.plugin.Engine", mock_engine),
        ):
            plugin.pytest_sessionfinish(_make_session(config), exitstatus=0)

        probe_config = mock_engine.call_args.args[0]
        assert probe_config.timeout_ms == 250

    def it_writes_the_report_to_the_terminal():
        config = _make_config({"jsprobe_target": ["/fake/mod.js"]})
        plugin = JsProbePlugin(config)
        session = _make_session(config)
        mock_engine = MagicMock()
        mock_engine.return_value.run.return_value = _make_run_result(killed=True)

        with (
            patch("pytest_jsprobe.plugin._find_target_files", return_value=["/fake/mod.js"]),
            patch("pytest_jsprobe.plugin.Engine", mock_engine),
            patch("pytest_jsprobe.plugin.format_terminal_report", return_value="report"),
        ):
            plugin.pytest_sessionfinish(session, exitstatus=0)

        session.config.get_terminal_writer.return_value.write.assert_called_once_with("report")

    def it_writes_a_json_report_on_request(tmp_path):
        out = tmp_path / "report.json"
        config = _make_config({"jsprobe_target": ["/fake/mod.js"], "jsprobe_json": str(out)})
        plugin = JsProbePlugin(config)
        mock_engine = MagicMock()
        mock_engine.return_value.run.return_value = _make_run_result(killed=True)

        with (
            patch("pytest_jsprobe.plugin._find_target_files", return_value=["/fake/mod.js"]),
            patch("pytest_jsprobe.plugin.Engine", mock_engine),
        ):
            plugin.pytest_sessionfinish(_make_session(config), exitstatus=0)

        assert json.loads(out.read_text())["killed"] == 1

    def it_sets_exitstatus_to_1_when_mutants_survived():
        config = _make_config({"jsprobe_target": ["/fake/mod.js"]})
        plugin = JsProbePlugin(config)
        session = _make_session(config)
        session.exitstatus = 0
        mock_engine = MagicMock()
        mock_engine.return_value.run.return_value = _make_run_result(killed=False)

        with (
            patch("pytest_jsprobe.plugin._find_target_files", return_value=["/fake/mod.js"]),
            patch("pytest_jsprobe.plugin.Engine", mock_engine),
        ):
            plugin.pytest_sessionfinish(session, exitstatus=0)

        assert session.exitstatus == 1

    def it_keeps_exitstatus_0_when_all_mutants_killed():
        config = _make_config({"jsprobe_target": ["/fake/mod.js"]})
        plugin = JsProbePlugin(config)
        session = _make_session(config)
        session.exitstatus = 0
        mock_engine = MagicMock()
        mock_engine.return_value.run.return_value = _make_run_result(killed=True)

        with (
            patch("pytest_jsprobe.plugin._find_target_files", return_value=["/fake/mod.js"]),
            patch("pytest_jsprobe.plugin.Engine", mock_engine),
        ):
            plugin.pytest_sessionfinish(session, exitstatus=0)

        assert session.exitstatus == 0
