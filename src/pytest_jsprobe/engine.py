"""Coverage and mutation testing orchestrator."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Sequence

from pytest_jsprobe.config import ProbeConfig
from pytest_jsprobe.instrument import Coverage
from pytest_jsprobe.models import Mutant, MutantResult, RunResult
from pytest_jsprobe.mutator import Mutator
from pytest_jsprobe.runner import observe, run_mutant

logger = logging.getLogger(__name__)


class Engine:
    """Runs coverage and mutation testing over JavaScript files."""

    def __init__(self, config: ProbeConfig | None = None) -> None:
        self.config = config or ProbeConfig()

    def run(
        self,
        target_files: list[str],
        coverage_inputs: Sequence[Sequence[Any]] | None = None,
        mutation_inputs: Sequence[str] | None = None,
    ) -> RunResult:
        start = time.monotonic()

        target_sources: dict[str, str] = {}
        coverage: dict[str, Coverage] = {}
        all_mutants: list[tuple[str, Mutant]] = []

        # Parse errors propagate: no partial result for a malformed file.
        for file_path in target_files:
            abs_path = os.path.abspath(file_path)
            with open(abs_path, encoding="utf-8") as f:
                source = f.read()
            target_sources[abs_path] = source

            with Coverage(source, self.config) as file_coverage:
                if coverage_inputs:
                    file_coverage.run(coverage_inputs)
            coverage[abs_path] = file_coverage

            mutants = Mutator.from_code(source, self.config)
            logger.info("%s: %d mutants", os.path.basename(abs_path), len(mutants))
            all_mutants.extend((abs_path, mutant) for mutant in mutants)

        results: list[MutantResult] = []
        if mutation_inputs:
            expected: dict[str, list[str]] = {}
            for abs_path, mutant in all_mutants:
                if abs_path not in expected:
                    expected[abs_path] = observe(target_sources[abs_path], mutation_inputs, self.config)
                results.append(
                    run_mutant(
                        mutant,
                        mutation_inputs,
                        expected=expected[abs_path],
                        config=self.config,
                        file_path=abs_path,
                    )
                )

        return RunResult(
            target_files=list(target_sources),
            total_mutants=len(all_mutants),
            mutants_tested=len(results),
            results=results,
            wall_time_seconds=time.monotonic() - start,
            coverage=coverage,
            target_sources=target_sources,
        )
