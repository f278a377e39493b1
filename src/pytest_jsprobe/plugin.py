"""pytest plugin entry point for JavaScript coverage and mutation testing."""

from __future__ import annotations

import glob as _glob
import json
import os
from pathlib import Path
from typing import Any

from pytest_jsprobe.config import ProbeConfig
from pytest_jsprobe.engine import Engine
from pytest_jsprobe.output import format_json_report, format_terminal_report


def _is_test_file(basename: str) -> bool:
    """Return True if the filename looks like a JavaScript test file."""
    return (
        basename.endswith(".test.js")
        or basename.endswith(".spec.js")
        or basename.startswith("test_")
    )


def pytest_addoption(parser):  # type: ignore[no-untyped-def]
    group = parser.getgroup("jsprobe", "JavaScript coverage and mutation testing")
    group.addoption(
        "--jsprobe", action="store_true", default=False, help="Enable JavaScript coverage and mutation testing"
    )
    group.addoption(
        "--jsprobe-target", action="append", default=[], help="JavaScript file/directory to probe (repeatable)"
    )
    group.addoption(
        "--jsprobe-inputs",
        default=None,
        help='JSON file with "coverage" argument lists and "mutation" input expressions',
    )
    group.addoption(
        "--jsprobe-detail", action="store_true", default=False, help="Itemize coverage targets and log every mutant"
    )
    group.addoption(
        "--jsprobe-timeout", type=int, default=None, help="Per-evaluation timeout in milliseconds"
    )
    group.addoption(
        "--jsprobe-json", default=None, help="Also write a JSON report to this path"
    )


def pytest_configure(config):  # type: ignore[no-untyped-def]
    if config.getoption("jsprobe", default=False):
        config.pluginmanager.register(JsProbePlugin(config), "jsprobe-plugin")


def _find_target_files(target: str) -> list[str]:
    """Resolve a --jsprobe-target path to a list of .js files."""
    target_path = os.path.abspath(target)
    if os.path.isfile(target_path) and target_path.endswith(".js"):
        return [target_path]
    if os.path.isdir(target_path):
        return sorted(
            os.path.abspath(p)
            for p in _glob.glob(os.path.join(target_path, "**", "*.js"), recursive=True)
            if "node_modules" not in Path(p).parts
            and not _is_test_file(os.path.basename(p))
        )
    return []


def _find_default_targets(rootpath: Path) -> list[str]:
    """Look for common source directories to use as default targets."""
    for candidate in ("target", "src"):
        candidate_dir = rootpath / candidate
        if candidate_dir.is_dir():
            return _find_target_files(str(candidate_dir))
    return []


def _load_inputs(path: str | None) -> tuple[list[list[Any]], list[str]]:
    """Read coverage argument lists and mutation input expressions."""
    if path is None:
        return [], []
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    coverage = [list(args) for args in data.get("coverage", [])]
    mutation = [str(expression) for expression in data.get("mutation", [])]
    return coverage, mutation


class JsProbePlugin:
    def __init__(self, config):  # type: ignore[no-untyped-def]
        self.config = config

    def pytest_sessionfinish(self, session, exitstatus):  # type: ignore[no-untyped-def]
        if exitstatus != 0:
            return

        targets = self.config.getoption("jsprobe_target", default=[])
        if targets:
            target_files: list[str] = []
            for t in targets:
                target_files.extend(_find_target_files(t))
            target_files = sorted(set(target_files))
        else:
            target_files = _find_default_targets(session.config.rootpath)

        if not target_files:
            return

        probe_config = ProbeConfig.from_pytest_config(self.config)
        coverage_inputs, mutation_inputs = _load_inputs(
            self.config.getoption("jsprobe_inputs", default=None)
        )

        engine = Engine(probe_config)
        result = engine.run(target_files, coverage_inputs, mutation_inputs)

        report = format_terminal_report(result, show_detail=probe_config.detail)

        json_path = self.config.getoption("jsprobe_json", default=None)
        if json_path:
            with open(json_path, "w", encoding="utf-8") as f:
                f.write(format_json_report(result))

        tw = (
            session.config.get_terminal_writer()
            if hasattr(session.config, "get_terminal_writer")
            else None
        )
        if tw:
            tw.write(report)
        else:
            print(report)

        if result.survived:
            session.exitstatus = 1
