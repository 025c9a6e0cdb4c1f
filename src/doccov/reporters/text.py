"""Plain-text coverage report renderer.

Output is deterministic for a given report (files keep their input order), so
it can be diffed and snapshot-tested.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from doccov.models.coverage import (
        CoverageReport,
        FileCoverageReport,
        LineSpan,
        SymbolDetail,
    )

COVERED_MARK = "✓"
UNCOVERED_MARK = "✗"


def format_spans(spans: Sequence[LineSpan]) -> str:
    """Format spans as ``1-10, 20-30`` (single lines as ``5``)."""
    return ", ".join(str(s.start) if s.start == s.end else f"{s.start}-{s.end}" for s in spans)


def format_threshold(value: float) -> str:
    """Format a threshold without trailing zeros (``95``, ``92.5``)."""
    return f"{value:g}"


def _symbols(details: Sequence[SymbolDetail]) -> str:
    return ", ".join(f"{d.name}{COVERED_MARK if d.is_covered else UNCOVERED_MARK}" for d in details)


def _render_file(file: FileCoverageReport) -> list[str]:
    lines = [
        f"- {file.path} :: {file.coverage_percentage:.2f}% "
        f"({file.covered_lines}/{file.total_lines})"
    ]
    if file.has_symbols:
        lines.append(
            f"  Symbols: functions {file.functions_covered}/{file.functions_total}, "
            f"classes {file.classes_covered}/{file.classes_total}"
        )
        if file.functions_details:
            lines.append(f"  Functions: {_symbols(file.functions_details)}")
        if file.classes_details:
            lines.append(f"  Classes: {_symbols(file.classes_details)}")
    if file.uncovered_sections:
        lines.append(f"  Uncovered: {format_spans(file.uncovered_sections)}")
    return lines


def render_report(report: CoverageReport) -> str:
    """Render a coverage report as human-readable text."""
    summary = report.summary
    lines = [
        "Documentation Coverage Report",
        f"Generated: {report.generated_at}",
        "",
        "Summary",
        f"  Files: {summary.total_files}",
        f"  Lines: {summary.total_lines}",
        f"  Covered: {summary.covered_lines}",
        f"  Coverage: {summary.coverage_percentage:.2f}%",
        f"  Functions: {summary.functions_covered}/{summary.functions_total} "
        f"({summary.functions_coverage_percentage:.2f}%)",
        f"  Classes: {summary.classes_covered}/{summary.classes_total} "
        f"({summary.classes_coverage_percentage:.2f}%)",
    ]

    if summary.undocumented_files:
        lines.append(f"  Undocumented files: {', '.join(summary.undocumented_files)}")
    if summary.low_coverage_files:
        lines.append(f"  Low coverage files: {', '.join(summary.low_coverage_files)}")

    if summary.scopes:
        lines.append("  Scopes:")
        for scope in summary.scopes:
            threshold = (
                f" (threshold {format_threshold(scope.threshold)}%)"
                if scope.threshold is not None
                else ""
            )
            lines.append(
                f"    {scope.name}: {scope.coverage_percentage:.2f}% "
                f"({scope.covered_lines}/{scope.total_lines}){threshold}"
            )

    if summary.scope_threshold_violations:
        lines.append("  Scope threshold violations:")
        lines.extend(
            f"    {v.scope}:{v.actual:.2f}<{format_threshold(v.threshold)}"
            for v in summary.scope_threshold_violations
        )

    lines.extend(["", "Files"])
    if report.files:
        for file in report.files:
            lines.extend(_render_file(file))
    else:
        lines.append("  (none)")

    if report.recommendations:
        lines.extend(["", "Recommendations"])
        lines.extend(
            f"- [{rec.priority.value}] {rec.file}: {rec.message}" for rec in report.recommendations
        )

    return "\n".join(lines) + "\n"
