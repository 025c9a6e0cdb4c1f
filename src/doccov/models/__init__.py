"""Data models for doccov."""

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
    ProgressCallback,
    RecommendationPriority,
    ScopeCoverage,
    ScopeThresholdViolation,
    StructuralElement,
    SymbolDetail,
)
from doccov.models.record import Record, RecordStore, RecordStoreError

__all__ = [
    "ClassCoverage",
    "CoverageOptions",
    "CoverageRecommendation",
    "CoverageReport",
    "CoverageSummary",
    "ElementType",
    "FileCoverage",
    "FileCoverageReport",
    "FunctionCoverage",
    "LineSpan",
    "ParsedSource",
    "ProgressCallback",
    "RecommendationPriority",
    "Record",
    "RecordStore",
    "RecordStoreError",
    "ScopeCoverage",
    "ScopeThresholdViolation",
    "StructuralElement",
    "SymbolDetail",
]
