"""Exception classes raised by the instrumentation engines."""

from __future__ import annotations


class JsProbeError(Exception):
    """Base exception for all jsprobe errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        result = self.message
        if self.suggestion:
            result += f"\n\nSuggestion: {self.suggestion}"
        return result


class ParseError(JsProbeError):
    """Raised when source text is not a valid (or supported) program."""

    def __init__(
        self,
        message: str,
        line: int,
        column: int,
        index: int,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(f"{message} ({line}:{column})", suggestion)
        self.line = line
        self.column = column
        self.index = index


class CodegenError(JsProbeError):
    """Raised when the generator meets a node kind it cannot print."""


class MissingHandlerError(JsProbeError):
    """Raised when the mutation catalogue names a node kind with no handler."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Mutation handlers not implemented: {', '.join(missing)}",
            suggestion="Add a visit_<Kind> method for each listed node kind.",
        )
        self.missing = missing
