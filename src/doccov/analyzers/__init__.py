"""Coverage analysis over documentation records."""

from doccov.analyzers.coverage import CoverageService, empty_report, infer_scopes

__all__ = ["CoverageService", "empty_report", "infer_scopes"]
