"""Documentation coverage models.

Line numbers are 1-indexed and spans are inclusive on both ends.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum

ProgressCallback = Callable[[int, int, str], None]
"""Called after each analyzed file with (processed count, total files, file path)."""


class ElementType(Enum):
    """Kind of structural element found by the code scanner."""

    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    EXPORT = "export"
    IMPORT = "import"
    INTERFACE = "interface"
    COMMENT = "comment"


class RecommendationPriority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, order=True)
class LineSpan:
    """Inclusive line interval ``[start, end]``."""

    start: int
    end: int

    @property
    def length(self) -> int:
        """Return the number of lines in the span."""
        return self.end - self.start + 1


@dataclass(frozen=True)
class ParsedSource:
    """Structured form of one source-reference string."""

    file_path: str
    """Project-relative file path."""

    ranges: tuple[LineSpan, ...] = ()
    """Declared covered ranges. Empty means the whole file is covered."""

    @property
    def covers_whole_file(self) -> bool:
        """Return True when the reference names the file without ranges."""
        return not self.ranges


@dataclass(frozen=True)
class StructuralElement:
    """A construct located in a source file."""

    start: int
    end: int
    type: ElementType
    name: str | None = None

    @property
    def span(self) -> LineSpan:
        return LineSpan(self.start, self.end)


@dataclass(frozen=True)
class FunctionCoverage:
    """Coverage state of a single function."""

    name: str
    start: int
    end: int
    is_covered: bool


@dataclass(frozen=True)
class ClassCoverage:
    """Coverage state of a single class."""

    name: str
    start: int
    end: int
    is_covered: bool


@dataclass
class FileCoverage:
    """Per-file working result of the coverage analysis."""

    path: str
    total_lines: int
    covered_lines: int = 0
    covered_sections: list[LineSpan] = field(default_factory=list)
    uncovered_sections: list[LineSpan] = field(default_factory=list)
    functions: list[FunctionCoverage] = field(default_factory=list)
    classes: list[ClassCoverage] = field(default_factory=list)

    @property
    def coverage_percentage(self) -> float:
        """Return line coverage percentage (0.0-100.0); 100 for empty files."""
        if self.total_lines == 0:
            return 100.0
        return (self.covered_lines / self.total_lines) * 100.0


@dataclass(frozen=True)
class SymbolDetail:
    name: str
    is_covered: bool


@dataclass(frozen=True)
class FileCoverageReport:
    """Externally visible coverage result for one file."""

    path: str
    total_lines: int
    covered_lines: int
    coverage_percentage: float
    uncovered_sections: tuple[LineSpan, ...] = ()
    functions_total: int = 0
    functions_covered: int = 0
    classes_total: int = 0
    classes_covered: int = 0
    functions_details: tuple[SymbolDetail, ...] = ()
    classes_details: tuple[SymbolDetail, ...] = ()

    @property
    def has_symbols(self) -> bool:
        return self.functions_total > 0 or self.classes_total > 0


@dataclass(frozen=True)
class ScopeCoverage:
    """Aggregated coverage for a group of files sharing a top-level directory."""

    name: str
    total_lines: int
    covered_lines: int
    coverage_percentage: float
    threshold: float | None = None


@dataclass(frozen=True)
class ScopeThresholdViolation:
    scope: str
    actual: float
    threshold: float


@dataclass(frozen=True)
class CoverageRecommendation:
    file: str
    message: str
    priority: RecommendationPriority


@dataclass(frozen=True)
class CoverageSummary:
    """Aggregate totals across every analyzed file."""

    total_files: int
    total_lines: int
    covered_lines: int
    coverage_percentage: float
    undocumented_files: tuple[str, ...] = ()
    """Files with 0% coverage."""

    low_coverage_files: tuple[str, ...] = ()
    """Files with coverage above 0% but below the effective threshold."""

    functions_total: int = 0
    functions_covered: int = 0
    classes_total: int = 0
    classes_covered: int = 0
    functions_coverage_percentage: float = 100.0
    classes_coverage_percentage: float = 100.0
    scopes: tuple[ScopeCoverage, ...] = ()
    scope_threshold_violations: tuple[ScopeThresholdViolation, ...] = ()


@dataclass(frozen=True)
class CoverageReport:
    """Complete documentation coverage report."""

    summary: CoverageSummary
    files: tuple[FileCoverageReport, ...]
    recommendations: tuple[CoverageRecommendation, ...]
    generated_at: str
    """ISO-8601 generation timestamp."""


@dataclass(frozen=True)
class CoverageOptions:
    """Options for a single coverage run, threaded explicitly through the service."""

    threshold: float | None = None
    """Global coverage threshold; falls back to ``thresholds['overall']``."""

    thresholds: Mapping[str, float] = field(default_factory=dict)
    """``overall`` plus optional per-scope thresholds keyed by scope name."""

    include: tuple[str, ...] = ()
    """Include globs. Also define the reported scopes when given."""

    exclude: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    root_dir: str | None = None
    """Directory that source paths are resolved against (default: cwd)."""

    scan_source_files: bool = False
    """Also analyze undocumented source files found under ``root_dir``."""

    on_progress: ProgressCallback | None = None
    verbose: bool = False
    memory_store_path: str | None = None
    index_path: str | None = None

    @property
    def effective_threshold(self) -> float | None:
        """Return the global threshold, or None when none is configured."""
        if self.threshold is not None:
            return self.threshold
        return self.thresholds.get("overall")
