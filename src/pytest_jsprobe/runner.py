"""Score a single mutant by comparing its observable behavior to the original."""

from __future__ import annotations

import json
import logging
import time
from contextlib import closing
from typing import Generator, Sequence

from py_mini_racer import JSEvalException, JSParseException, JSTimeoutException, MiniRacer

from pytest_jsprobe.config import ProbeConfig
from pytest_jsprobe.models import Mutant, MutantResult

logger = logging.getLogger(__name__)

TIMEOUT = "timeout"


def _prelude(config: ProbeConfig) -> str:
    return (
        f"function {config.assert_name}(condition, message) {{\n"
        "  if (!condition) throw new Error(message === undefined ? 'Assertion failed' : String(message));\n"
        "}\n"
    )


def _harness(expression: str) -> str:
    """Evaluate ``expression`` globally and serialize its outcome as JSON."""
    # Indirect eval turns syntax errors in the input into catchable faults.
    return (
        "(function () {\n"
        "  try {\n"
        f"    var value = (0, eval)({json.dumps(expression)});\n"
        "    var text = JSON.stringify(value);\n"
        "    return JSON.stringify({ok: true, value: text === undefined ? String(value) : text});\n"
        "  } catch (e) {\n"
        "    return JSON.stringify({ok: false, value: String(e)});\n"
        "  }\n"
        "})()"
    )


def _first_line(exc: Exception) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


def _evaluate(context: MiniRacer, expression: str, config: ProbeConfig) -> str:
    try:
        raw = context.eval(_harness(expression), timeout=config.timeout_ms)
    except JSTimeoutException:
        return TIMEOUT
    except (JSParseException, JSEvalException) as exc:
        return f"error {_first_line(exc)}"
    outcome = json.loads(raw)
    return ("return " if outcome["ok"] else "throw ") + outcome["value"]


def _observations(source: str, inputs: Sequence[str], config: ProbeConfig) -> Generator[str, None, None]:
    """Load ``source`` into a fresh isolate and yield one outcome per input."""
    with MiniRacer() as context:
        try:
            context.eval(_prelude(config) + source, timeout=config.timeout_ms)
        except JSTimeoutException:
            for _ in inputs:
                yield TIMEOUT
            return
        except (JSParseException, JSEvalException) as exc:
            failure = f"load error {_first_line(exc)}"
            for _ in inputs:
                yield failure
            return
        for expression in inputs:
            yield _evaluate(context, expression, config)


def observe(source: str, inputs: Sequence[str], config: ProbeConfig | None = None) -> list[str]:
    """Outcome of every input expression against ``source``."""
    return list(_observations(source, inputs, config or ProbeConfig()))


def run_mutant(
    mutant: Mutant,
    inputs: Sequence[str],
    expected: list[str] | None = None,
    config: ProbeConfig | None = None,
    file_path: str | None = None,
) -> MutantResult:
    """Run the input suite against a mutant; the first diverging input kills it."""
    config = config or ProbeConfig()
    start = time.monotonic()
    if expected is None:
        expected = observe(mutant.original_source, inputs, config)

    tests_run = 0
    # Stopping early must still release the mutant's isolate.
    with closing(_observations(mutant.mutated_source, inputs, config)) as outcomes:
        for expression, wanted, actual in zip(inputs, expected, outcomes):
            tests_run += 1
            if actual == TIMEOUT or actual != wanted:
                logger.debug("Mutant %d killed by %r", mutant.id, expression)
                return MutantResult(
                    mutant=mutant,
                    killed=True,
                    tests_run=tests_run,
                    killing_test=expression,
                    time_seconds=time.monotonic() - start,
                    file_path=file_path,
                    expected=wanted,
                    actual=actual,
                )

    return MutantResult(
        mutant=mutant,
        killed=False,
        tests_run=tests_run,
        killing_test=None,
        time_seconds=time.monotonic() - start,
        file_path=file_path,
    )
