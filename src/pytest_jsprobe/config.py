"""Run configuration shared by the engines, the runner and the plugin."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

DEFAULT_HANDLE_NAME = "__cov__"
DEFAULT_ASSERT_NAME = "__assert__"
DEFAULT_STRING_SENTINEL = "__mutated__"

_JS_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*", re.ASCII)


@dataclass(frozen=True)
class ProbeConfig:
    """Configurable names and limits for instrumentation and mutation runs."""

    handle_name: str = DEFAULT_HANDLE_NAME
    assert_name: str = DEFAULT_ASSERT_NAME
    string_sentinel: str = DEFAULT_STRING_SENTINEL
    timeout_ms: int = 1000
    detail: bool = False

    def __post_init__(self) -> None:
        if not _JS_IDENTIFIER.fullmatch(self.handle_name):
            raise ValueError(f"Tracking handle name is not an identifier: {self.handle_name!r}")
        if not _JS_IDENTIFIER.fullmatch(self.assert_name):
            raise ValueError(f"Assertion name is not an identifier: {self.assert_name!r}")
        if self.string_sentinel == "":
            raise ValueError("String sentinel must not be empty")
        if self.timeout_ms <= 0:
            raise ValueError(f"Timeout must be positive: {self.timeout_ms}")

    @classmethod
    def from_pytest_config(cls, config: Any) -> ProbeConfig:
        """Build a config from ``--jsprobe-*`` command-line options."""
        timeout = config.getoption("jsprobe_timeout", default=None)
        return cls(
            detail=bool(config.getoption("jsprobe_detail", default=False)),
            timeout_ms=timeout if timeout is not None else cls.timeout_ms,
        )
