"""Coverage accumulators and the V8 isolate that runs instrumented programs."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from py_mini_racer import JSEvalException, JSParseException, JSTimeoutException, MiniRacer

from pytest_jsprobe.config import ProbeConfig
from pytest_jsprobe.models import CoverageTarget
from pytest_jsprobe.synth import SPACES

logger = logging.getLogger(__name__)

NOT_RUNNABLE = "The given code is not runnable with arguments."

_HITS = "__jsprobe_hits__"
_ENTRY = "__jsprobe_entry__"

_HARVEST = (
    "JSON.stringify({"
    + ", ".join(f"{space}: Array.from({_HITS}.{space})" for space in SPACES)
    + "})"
)


class CoverSet:
    """Catalog of coverage targets plus the ids reached so far."""

    def __init__(self, target: CoverageTarget) -> None:
        self.covered: set[int] = set()
        self.target = target
        self.total = len(target)

    def add(self, ident: int) -> None:
        if ident not in self.target:
            raise KeyError(f"Id {ident} is not a coverage target")
        self.covered.add(ident)

    def merge(self, other: CoverSet) -> None:
        if other.target.keys() != self.target.keys():
            raise ValueError("Cannot merge coverage over different catalogs")
        self.covered |= other.covered

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return len(self.covered) / self.total * 100.0

    def to_string(self, show_detail: bool = False, code: str | None = None) -> str:
        text = f"{len(self.covered)}/{self.total} ({self.ratio:.2f}%)"
        if show_detail:
            for ident in sorted(self.target):
                span = self.target[ident]
                marker = "*" if ident in self.covered else " "
                text += f"\n      {marker} {ident}: {span}"
                if code:
                    text += " -- " + span.substring(code)
        return text

    def __str__(self) -> str:
        return self.to_string()


def _entry_source(modified: str, handle: str) -> str:
    # The program is bound as an expression, as in `const orig = function f() {...};`
    return (
        f"var {_HITS} = {{" + ", ".join(f"{space}: new Set()" for space in SPACES) + "};\n"
        f"var {_ENTRY} = (function ({handle}) {{\n"
        f"const orig = {modified}\n;\n"
        "return function () {\n"
        "  try { return orig.apply(null, arguments); } catch (e) { }\n"
        "};\n"
        f"}})({_HITS});"
    )


class CoverageTracker:
    """An instrumented program compiled in its own isolate.

    The tracking handle lives inside the isolate and is passed to the
    program as an explicit parameter; covered ids are read back after each
    invocation.
    """

    def __init__(self, context: MiniRacer, timeout_ms: int) -> None:
        self.context = context
        self.timeout_ms = timeout_ms

    @classmethod
    def compile(cls, modified: str, config: ProbeConfig | None = None) -> CoverageTracker | None:
        """Compile ``modified``; log a warning and return None if it cannot run."""
        config = config or ProbeConfig()
        context = MiniRacer()
        try:
            context.eval(_entry_source(modified, config.handle_name), timeout=config.timeout_ms)
        except (JSParseException, JSEvalException) as exc:
            context.close()
            logger.warning("%s (%s)", NOT_RUNNABLE, exc)
            return None
        return cls(context, config.timeout_ms)

    def close(self) -> None:
        """Release the isolate; the tracker cannot be invoked afterwards."""
        self.context.close()

    def invoke(self, args: Sequence[Any]) -> dict[str, list[int]]:
        """Call the program once; return every id reached so far, per space."""
        call = f"void {_ENTRY}.apply(null, {json.dumps(list(args))})"
        try:
            self.context.eval(call, timeout=self.timeout_ms)
        except JSTimeoutException:
            logger.warning("Coverage run timed out after %d ms for arguments %r", self.timeout_ms, args)
        except (JSParseException, JSEvalException) as exc:
            logger.debug("Coverage run failed for arguments %r: %s", args, exc)
        return json.loads(self.context.eval(_HARVEST))
