"""Source-reference parsing and code-structure scanning."""

from doccov.parsing.languages import extract_from_source, get_extractor
from doccov.parsing.scanner import ScanResult, ScanStrategy, scan_file, scan_source
from doccov.parsing.source_ref import SourceParseError, format_source, parse_source_string
from doccov.parsing.treesitter import detect_language, parse_code

__all__ = [
    "ScanResult",
    "ScanStrategy",
    "SourceParseError",
    "detect_language",
    "extract_from_source",
    "format_source",
    "get_extractor",
    "parse_code",
    "parse_source_string",
    "scan_file",
    "scan_source",
]
