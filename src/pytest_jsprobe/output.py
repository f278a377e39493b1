"""Terminal reporter and structured output for coverage and mutation results."""

from __future__ import annotations

import json
import os

from pytest_jsprobe.models import Mutant, MutantResult, RunResult


def _mutant_display(mutant: Mutant) -> str:
    """One-line description of a mutant, flattened for terminal output."""
    original = " ".join(mutant.original_text.split())
    mutated = " ".join(mutant.mutated_text.split())
    return f"{original} → {mutated}"


def _pct(killed: int, total: int) -> float:
    """Calculate kill percentage, defaulting to 100% when no mutants exist."""
    return killed / total * 100 if total > 0 else 100.0


def format_coverage_report(result: RunResult, show_detail: bool = False) -> str:
    """Coverage summary per file, in ``covered/total (pct%)`` form."""
    lines: list[str] = []
    for file_path in sorted(result.coverage):
        coverage = result.coverage[file_path]
        lines.append(f"  {os.path.basename(file_path)}")
        for line in coverage.to_string(show_detail=show_detail, show_source=show_detail).splitlines():
            lines.append(f"    {line}")
    return "\n".join(lines)


def format_terminal_report(result: RunResult, show_detail: bool = False) -> str:
    """Format a terminal-friendly coverage and mutation testing report."""
    lines: list[str] = []

    lines.append("")
    lines.append("=" * 70)
    lines.append("jsprobe coverage and mutation testing")
    lines.append("=" * 70)

    n_files = len(result.target_files)
    file_label = "file" if n_files == 1 else "files"
    lines.append(f"Target: {n_files} {file_label}")
    lines.append(f"Mutants: {result.total_mutants} generated, {result.mutants_tested} tested")
    lines.append("")

    if result.coverage:
        lines.append(format_coverage_report(result, show_detail=show_detail))
        lines.append("")

    # Per-file results
    file_results: dict[str, list[MutantResult]] = {}
    for r in result.results:
        file_results.setdefault(r.file_path or "<source>", []).append(r)

    for file_path in sorted(file_results.keys()):
        basename = os.path.basename(file_path)
        file_res = file_results[file_path]

        killed = sum(1 for r in file_res if r.killed)
        total = len(file_res)
        pct = _pct(killed, total)

        lines.append(f"  {basename:<30s} {killed}/{total} killed ({pct:.1f}%)")

        for r in file_res:
            if r.killed:
                continue
            m = r.mutant
            desc = _mutant_display(m)
            lines.append(f"    [{m.id}] {m.type} {m.range}: {desc:<40s} SURVIVED")

    if result.mutants_tested:
        lines.append("")
        lines.append(
            f"Overall: {result.killed}/{result.mutants_tested} killed "
            f"({result.mutation_score:.1f}%) in {result.wall_time_seconds:.1f}s"
        )
    lines.append("")

    return "\n".join(lines)


def format_json_report(result: RunResult) -> str:
    """Format a JSON coverage and mutation testing report."""
    data = {
        "target_files": result.target_files,
        "total_mutants": result.total_mutants,
        "mutants_tested": result.mutants_tested,
        "killed": result.killed,
        "survived": len(result.survived),
        "mutation_score": round(result.mutation_score, 2),
        "wall_time_seconds": round(result.wall_time_seconds, 2),
        "coverage": {
            file_path: {
                space: {
                    "covered": len(cover.covered),
                    "total": cover.total,
                    "ratio": round(cover.ratio, 2),
                }
                for space, cover in coverage.cover_sets().items()
            }
            for file_path, coverage in result.coverage.items()
        },
        "survived_mutants": [
            {
                "file": r.file_path,
                "id": r.mutant.id,
                "type": str(r.mutant.type),
                "line": r.mutant.range.start.line,
                "column": r.mutant.range.start.column,
                "original": r.mutant.original_text,
                "mutated": r.mutant.mutated_text,
                "description": _mutant_display(r.mutant),
            }
            for r in result.survived
        ],
    }
    return json.dumps(data, indent=2)
