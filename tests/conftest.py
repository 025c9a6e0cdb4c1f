"""Shared fixtures for doccov tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from doccov.models.coverage import (
    CoverageRecommendation,
    CoverageReport,
    CoverageSummary,
    FileCoverageReport,
    LineSpan,
    RecommendationPriority,
    ScopeCoverage,
    ScopeThresholdViolation,
    SymbolDetail,
)
from doccov.models.record import Record
from doccov.parsing import treesitter

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


# ── File creation helpers ────────────────────────────────────────


def write_file(root: Path, rel: str, content: str) -> Path:
    """Write *content* to *root/rel*, creating parent directories."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_lines(root: Path, rel: str, count: int) -> Path:
    """Write a file of *count* plain statement lines, each ending in a newline."""
    return write_file(root, rel, "".join(f"value{i};\n" for i in range(1, count + 1)))


def write_record(
    root: Path,
    name: str,
    *,
    record_id: str,
    title: str,
    sources: list[str],
    category: str = "DOC",
) -> Path:
    """Write a Markdown record with YAML frontmatter."""
    source_lines = "".join(f"  - {s!r}\n" for s in sources)
    content = (
        "---\n"
        f"id: {record_id}\n"
        f"title: {title}\n"
        f"category: {category}\n"
        f"sources:\n{source_lines}"
        "---\n\n"
        f"# {title}\n"
    )
    return write_file(root, name, content)


def make_record(
    record_id: str, sources: list[str], title: str = "", category: str = "DOC"
) -> Record:
    return Record(
        id=record_id, title=title or f"Record {record_id}", sources=sources, category=category
    )


@pytest.fixture(autouse=True)
def _clear_parser_cache() -> Iterator[None]:
    """Isolate tree-sitter parser instances between tests."""
    yield
    treesitter._parser_cache.clear()


# ── Report fixtures ──────────────────────────────────────────────


def sample_report() -> CoverageReport:
    """A two-file report exercising every section of the renderers."""
    files = (
        FileCoverageReport(
            path="src/a.ts",
            total_lines=40,
            covered_lines=21,
            coverage_percentage=52.5,
            uncovered_sections=(LineSpan(11, 19), LineSpan(31, 40)),
            functions_total=2,
            functions_covered=1,
            classes_total=1,
            classes_covered=1,
            functions_details=(SymbolDetail("alpha", True), SymbolDetail("beta", False)),
            classes_details=(SymbolDetail("Loader", True),),
        ),
        FileCoverageReport(
            path="src/b.ts",
            total_lines=10,
            covered_lines=0,
            coverage_percentage=0.0,
            uncovered_sections=(LineSpan(1, 10),),
        ),
    )
    summary = CoverageSummary(
        total_files=2,
        total_lines=50,
        covered_lines=21,
        coverage_percentage=42.0,
        undocumented_files=("src/b.ts",),
        low_coverage_files=("src/a.ts",),
        functions_total=2,
        functions_covered=1,
        classes_total=1,
        classes_covered=1,
        functions_coverage_percentage=50.0,
        classes_coverage_percentage=100.0,
        scopes=(ScopeCoverage("src", 50, 21, 42.0, threshold=92.5),),
        scope_threshold_violations=(ScopeThresholdViolation("src", 42.0, 92.5),),
    )
    return CoverageReport(
        summary=summary,
        files=files,
        recommendations=(
            CoverageRecommendation(
                "src/a.ts",
                "Add documentation sources covering uncovered sections",
                RecommendationPriority.MEDIUM,
            ),
            CoverageRecommendation(
                "src/b.ts", "No documentation references this file", RecommendationPriority.HIGH
            ),
        ),
        generated_at="2024-01-01T00:00:00+00:00",
    )
