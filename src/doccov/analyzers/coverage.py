"""CoverageService: cross-references documentation records with source files.

For each file referenced by a record (and, optionally, every source file found
on disk) the service:
1. Counts the file's lines
2. Merges the line ranges the records declare as documented
3. Computes the undocumented gaps
4. Scans the file's structure and marks each function/class as covered when its
   span overlaps a documented range
5. Aggregates per-file results into summary, scope and threshold data
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections import defaultdict
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from doccov.config import DEFAULT_EXCLUDE, DEFAULT_INCLUDE
from doccov.models.coverage import (
    ClassCoverage,
    CoverageOptions,
    CoverageRecommendation,
    CoverageReport,
    CoverageSummary,
    ElementType,
    FileCoverage,
    FileCoverageReport,
    FunctionCoverage,
    LineSpan,
    ParsedSource,
    RecommendationPriority,
    ScopeCoverage,
    ScopeThresholdViolation,
    SymbolDetail,
)
from doccov.parsing.scanner import scan_file
from doccov.parsing.source_ref import SourceParseError, parse_source_string
from doccov.utils.file_scanner import FileScanner
from doccov.utils.intervals import clip_ranges, complement_ranges, count_lines_in, overlaps_any
from doccov.utils.paths import UnsafePathError, normalize_relative_path, validate_source_path

if TYPE_CHECKING:
    from collections.abc import Sequence

    from doccov.models.record import RecordStore

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

DEFAULT_LOW_COVERAGE_THRESHOLD = 80.0
"""Files below this percentage are "low coverage" when no threshold is configured."""

DEFAULT_SCOPES: tuple[str, ...] = ("src", "tests")

UNDOCUMENTED_MESSAGE = "No documentation references this file"
LOW_COVERAGE_MESSAGE = "Add documentation sources covering uncovered sections"

_READ_CHUNK_SIZE = 64 * 1024
_GLOB_CHARS = re.compile(r"[*?\[\]{}]")

_FUNCTION_TYPES = (ElementType.FUNCTION, ElementType.METHOD)

CoverageMap = dict[str, list[ParsedSource]]


# ── Line counting ────────────────────────────────────────────────


def count_lines_streaming(path: Path) -> int:
    """Count lines by reading fixed-size chunks.

    Counts line breaks, plus one for a trailing line without a newline. An empty
    file counts as one line.
    """
    lines = 0
    last_byte = b""
    with path.open("rb") as fh:
        while chunk := fh.read(_READ_CHUNK_SIZE):
            lines += chunk.count(b"\n")
            last_byte = chunk[-1:]
    if last_byte != b"\n":
        lines += 1
    return lines


def count_lines_buffered(path: Path) -> int:
    """Count lines from a full read; used when streaming fails."""
    text = path.read_text(encoding="utf-8", errors="replace")
    return len(re.split(r"\r?\n", text))


# ── Scope helpers ────────────────────────────────────────────────


def infer_scopes(include: Sequence[str]) -> list[str]:
    """Derive scope names from the top-level directory of each include glob.

    With no include patterns, the conventional ``src`` and ``tests`` scopes are
    used.
    """
    if not include:
        return list(DEFAULT_SCOPES)
    scopes: list[str] = []
    for pattern in include:
        head = normalize_relative_path(pattern).split("/")[0]
        if not head or head in (".", "**") or _GLOB_CHARS.search(head):
            continue
        if head not in scopes:
            scopes.append(head)
    return scopes


def _percentage(covered: int, total: int) -> float:
    return 100.0 if total == 0 else (covered / total) * 100.0


def _symbol_percentage(covered: int, total: int, any_lines_covered: bool) -> float:
    # With no symbols at all, report 100 only when something is documented.
    if total == 0:
        return 100.0 if any_lines_covered else 0.0
    return (covered / total) * 100.0


def empty_report() -> CoverageReport:
    """Return a well-formed report with no files and 100% coverage."""
    return CoverageReport(
        summary=CoverageSummary(
            total_files=0,
            total_lines=0,
            covered_lines=0,
            coverage_percentage=100.0,
        ),
        files=(),
        recommendations=(),
        generated_at=datetime.now(UTC).isoformat(),
    )


# ── Service ──────────────────────────────────────────────────────


class CoverageService:
    """Builds documentation coverage reports from a record store."""

    def __init__(self, store: RecordStore, *, file_scanner: FileScanner | None = None) -> None:
        """Initialize the service.

        Args:
            store: Supplies every documentation record.
            file_scanner: Discovers source files when ``scan_source_files`` is set.
        """
        self._store = store
        self._file_scanner = file_scanner or FileScanner()

    async def build_coverage_map(self) -> CoverageMap:
        """Group the parsed source references of every record by file path.

        A reference that fails to parse or names an unsafe path is logged and
        skipped; the rest of the record and the remaining records still count.

        Raises:
            RecordStoreError: If the store cannot supply records.
        """
        records = await self._store.get_all_records()
        coverage_map: CoverageMap = defaultdict(list)

        for record in records:
            for raw in record.sources:
                try:
                    parsed = parse_source_string(raw)
                    validate_source_path(parsed.file_path)
                except (SourceParseError, UnsafePathError) as exc:
                    logger.warning(
                        'Skipping invalid source entry in record "%s" ("%s"): "%s" - reason: %s',
                        record.id,
                        record.title,
                        raw,
                        exc,
                    )
                    continue
                key = normalize_relative_path(parsed.file_path)
                coverage_map[key].append(parsed)

        return dict(coverage_map)

    async def generate_report(self, options: CoverageOptions | None = None) -> CoverageReport:
        """Analyze every documented (and optionally every scanned) file.

        Never raises for store, file or scan failures: a store failure yields an
        empty report, an unreadable file counts as zero lines.
        """
        options = options or CoverageOptions()

        try:
            coverage_map = await self.build_coverage_map()
        except Exception as exc:
            logger.error("Failed to build coverage map from records: %s", exc)
            return empty_report()

        root = Path(options.root_dir) if options.root_dir else Path.cwd()
        file_paths = self._files_to_analyze(coverage_map, options, root)

        files: list[FileCoverage] = []
        for index, file_path in enumerate(file_paths, start=1):
            file_coverage = await self.analyze_file(
                file_path, coverage_map.get(file_path, []), root
            )
            files.append(file_coverage)
            if options.verbose:
                logger.info(
                    "Analyzed %s: %d/%d lines documented",
                    file_path,
                    file_coverage.covered_lines,
                    file_coverage.total_lines,
                )
            self._notify_progress(options, index, len(file_paths), file_path)

        return self._build_report(files, options)

    def _files_to_analyze(
        self, coverage_map: CoverageMap, options: CoverageOptions, root: Path
    ) -> list[str]:
        scanned: list[str] = []
        if options.scan_source_files:
            try:
                scanned = self._file_scanner.scan_source_files(
                    include=options.include or DEFAULT_INCLUDE,
                    exclude=options.exclude or DEFAULT_EXCLUDE,
                    root_dir=root,
                )
            except (OSError, ValueError) as exc:
                logger.error("Filesystem scanning failed, falling back to records only: %s", exc)
        # Scanned files first, then documented files not found by the scan.
        return list(dict.fromkeys([*scanned, *coverage_map.keys()]))

    async def analyze_file(
        self, file_path: str, entries: Sequence[ParsedSource], root: Path | None = None
    ) -> FileCoverage:
        """Compute line and symbol coverage for one file."""
        resolved = (root or Path.cwd()) / file_path
        total_lines = await self._count_lines(resolved, file_path)

        covered: list[LineSpan] = []
        if entries:
            if any(entry.covers_whole_file for entry in entries):
                covered = [LineSpan(1, total_lines)] if total_lines > 0 else []
            else:
                covered = clip_ranges(
                    (span for entry in entries for span in entry.ranges), total_lines
                )

        file_coverage = FileCoverage(
            path=file_path,
            total_lines=total_lines,
            covered_lines=count_lines_in(covered),
            covered_sections=covered,
            uncovered_sections=complement_ranges(covered, total_lines),
        )

        try:
            scan = await asyncio.to_thread(scan_file, resolved)
        except OSError as exc:
            logger.debug("Structure scan skipped for %s: %s", file_path, exc)
            return file_coverage

        for element in scan.elements:
            if not element.name:
                continue
            is_covered = overlaps_any(element.span, covered)
            if element.type in _FUNCTION_TYPES:
                file_coverage.functions.append(
                    FunctionCoverage(element.name, element.start, element.end, is_covered)
                )
            elif element.type == ElementType.CLASS:
                file_coverage.classes.append(
                    ClassCoverage(element.name, element.start, element.end, is_covered)
                )
        return file_coverage

    @staticmethod
    async def _count_lines(path: Path, display_path: str) -> int:
        try:
            return await asyncio.to_thread(count_lines_streaming, path)
        except OSError as stream_exc:
            logger.debug("Streaming line count failed for %s: %s", display_path, stream_exc)
        try:
            return await asyncio.to_thread(count_lines_buffered, path)
        except OSError as exc:
            logger.warning("Cannot read %s, counting it as 0 lines: %s", display_path, exc)
            return 0

    @staticmethod
    def _notify_progress(options: CoverageOptions, processed: int, total: int, path: str) -> None:
        if options.on_progress is None:
            return
        try:
            options.on_progress(processed, total, path)
        except Exception as exc:
            logger.warning("Progress callback failed for %s: %s", path, exc)

    # ── Aggregation ──────────────────────────────────────────────

    def _build_report(self, files: list[FileCoverage], options: CoverageOptions) -> CoverageReport:
        reports = tuple(_to_file_report(fc) for fc in files)

        total_lines = sum(r.total_lines for r in reports)
        covered_lines = sum(r.covered_lines for r in reports)

        threshold = options.effective_threshold
        low_threshold = threshold if threshold is not None else DEFAULT_LOW_COVERAGE_THRESHOLD
        undocumented = tuple(r.path for r in reports if r.coverage_percentage == 0)
        low_coverage = tuple(
            r.path for r in reports if 0 < r.coverage_percentage < low_threshold
        )

        scopes = self._compute_scopes(reports, options)
        violations = tuple(
            ScopeThresholdViolation(s.name, s.coverage_percentage, s.threshold)
            for s in scopes
            if s.threshold is not None and s.coverage_percentage < s.threshold
        )

        functions_total = sum(r.functions_total for r in reports)
        functions_covered = sum(r.functions_covered for r in reports)
        classes_total = sum(r.classes_total for r in reports)
        classes_covered = sum(r.classes_covered for r in reports)

        summary = CoverageSummary(
            total_files=len(reports),
            total_lines=total_lines,
            covered_lines=covered_lines,
            coverage_percentage=_percentage(covered_lines, total_lines),
            undocumented_files=undocumented,
            low_coverage_files=low_coverage,
            functions_total=functions_total,
            functions_covered=functions_covered,
            classes_total=classes_total,
            classes_covered=classes_covered,
            functions_coverage_percentage=_symbol_percentage(
                functions_covered, functions_total, covered_lines > 0
            ),
            classes_coverage_percentage=_symbol_percentage(
                classes_covered, classes_total, covered_lines > 0
            ),
            scopes=scopes,
            scope_threshold_violations=violations,
        )

        return CoverageReport(
            summary=summary,
            files=reports,
            recommendations=_recommendations(reports, set(undocumented), set(low_coverage)),
            generated_at=datetime.now(UTC).isoformat(),
        )

    @staticmethod
    def _compute_scopes(
        reports: Sequence[FileCoverageReport], options: CoverageOptions
    ) -> tuple[ScopeCoverage, ...]:
        scopes: list[ScopeCoverage] = []
        for name in infer_scopes(options.include):
            prefix = name + "/"
            members = [r for r in reports if r.path.startswith(prefix)]
            total = sum(r.total_lines for r in members)
            covered = sum(r.covered_lines for r in members)
            threshold = options.thresholds.get(name) if name != "overall" else None
            scopes.append(
                ScopeCoverage(
                    name=name,
                    total_lines=total,
                    covered_lines=covered,
                    coverage_percentage=_percentage(covered, total),
                    threshold=float(threshold) if threshold is not None else None,
                )
            )
        return tuple(scopes)


def _to_file_report(fc: FileCoverage) -> FileCoverageReport:
    return FileCoverageReport(
        path=fc.path,
        total_lines=fc.total_lines,
        covered_lines=fc.covered_lines,
        coverage_percentage=fc.coverage_percentage,
        uncovered_sections=tuple(fc.uncovered_sections),
        functions_total=len(fc.functions),
        functions_covered=sum(1 for f in fc.functions if f.is_covered),
        classes_total=len(fc.classes),
        classes_covered=sum(1 for c in fc.classes if c.is_covered),
        functions_details=tuple(SymbolDetail(f.name, f.is_covered) for f in fc.functions),
        classes_details=tuple(SymbolDetail(c.name, c.is_covered) for c in fc.classes),
    )


def _recommendations(
    reports: Sequence[FileCoverageReport], undocumented: set[str], low_coverage: set[str]
) -> tuple[CoverageRecommendation, ...]:
    recommendations: list[CoverageRecommendation] = []
    for report in reports:
        if report.path in undocumented:
            recommendations.append(
                CoverageRecommendation(
                    report.path, UNDOCUMENTED_MESSAGE, RecommendationPriority.HIGH
                )
            )
        elif report.path in low_coverage:
            recommendations.append(
                CoverageRecommendation(
                    report.path, LOW_COVERAGE_MESSAGE, RecommendationPriority.MEDIUM
                )
            )
    return tuple(recommendations)
