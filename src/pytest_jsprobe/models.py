"""Data models for coverage targets and mutation testing."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pytest_jsprobe.instrument import Coverage
    from pytest_jsprobe.nodes import Node


@dataclass(frozen=True)
class Position:
    """A point in source text: 1-based line, 0-based column, absolute index."""

    line: int
    column: int
    index: int

    @classmethod
    def from_index(cls, code: str, index: int) -> Position:
        line = code.count("\n", 0, index) + 1
        column = index - (code.rfind("\n", 0, index) + 1)
        return cls(line=line, column=column, index=index)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceRange:
    """Immutable span of the original source text."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.start.index > self.end.index:
            raise ValueError(f"Range starts after it ends: {self.start.index} > {self.end.index}")

    @classmethod
    def from_offsets(cls, code: str, start: int, end: int) -> SourceRange:
        return cls(Position.from_index(code, start), Position.from_index(code, end))

    @classmethod
    def from_node(cls, code: str, node: Node) -> SourceRange:
        if node.start is None or node.end is None:
            raise ValueError(f"{node.type} has no source location")
        return cls.from_offsets(code, node.start, node.end)

    def substring(self, code: str) -> str:
        return code[self.start.index:self.end.index]

    def __str__(self) -> str:
        return f"({self.start}-{self.end})"


# Coverage catalog: dense integer id -> span of the original source.
CoverageTarget = dict[int, SourceRange]


class MutantType(enum.Enum):
    """Closed set of mutation categories."""

    ARITHMETIC = "ArithmeticOperator"
    ASSIGNMENT = "AssignmentOperator"
    EQUALITY = "EqualityOperator"
    LOGICAL = "LogicalOperator"
    UNARY = "UnaryOperator"
    BOOLEAN_LITERAL = "BooleanLiteral"
    STRING_LITERAL = "StringLiteral"
    COLLECTION_LITERAL = "CollectionLiteral"
    BLOCK_STATEMENT = "BlockStatement"
    CONDITIONAL = "ConditionalExpression"
    UPDATE = "UpdateOperator"
    OPTIONAL_CHAINING = "OptionalChaining"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Mutant:
    """One whole-program variant with a single alteration applied."""

    id: int
    type: MutantType
    mutated_source: str
    original_source: str
    range: SourceRange
    mutated_text: str

    @property
    def original_text(self) -> str:
        return self.range.substring(self.original_source)

    @property
    def description(self) -> str:
        return f"{self.original_text} → {self.mutated_text}"

    def __str__(self) -> str:
        return f"[{self.id}] {self.type} {self.range}: {self.description}"


@dataclass
class MutantResult:
    """Result of running the input suite against a single mutant."""

    mutant: Mutant
    killed: bool
    tests_run: int
    killing_test: str | None  # Input expression that exposed the mutant
    time_seconds: float
    file_path: str | None = None
    expected: str | None = None  # Outcome of the original for killing_test
    actual: str | None = None  # Outcome of the mutant for killing_test


@dataclass
class RunResult:
    """Complete result of a coverage and mutation testing run."""

    target_files: list[str]
    total_mutants: int
    mutants_tested: int
    results: list[MutantResult]
    wall_time_seconds: float
    coverage: dict[str, Coverage] = field(default_factory=dict)  # file_path -> coverage
    target_sources: dict[str, str] = field(default_factory=dict)  # file_path -> source

    @property
    def killed(self) -> int:
        return sum(1 for r in self.results if r.killed)

    @property
    def survived(self) -> list[MutantResult]:
        return [r for r in self.results if not r.killed]

    @property
    def mutation_score(self) -> float:
        if self.mutants_tested == 0:
            return 0.0
        return self.killed / self.mutants_tested * 100.0
