"""Parser for source-reference strings.

Grammar::

    reference  := file_path [":" range_list]
    range_list := range ("," range)*
    range      := start "-" end

The file path is everything before the first unescaped colon (``\\:`` escapes a
colon inside the path). A reference without a colon covers the whole file.
Parsing is purely syntactic; path safety is checked separately.
"""

from __future__ import annotations

import re

from doccov.models.coverage import LineSpan, ParsedSource

_UNESCAPED_COLON_RE = re.compile(r"(?<!\\):")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_RANGE_BOUNDS = 2


class SourceParseError(ValueError):
    """Raised when a source-reference string is malformed."""


def parse_source_string(value: str) -> ParsedSource:
    """Parse a source reference such as ``src/index.ts:10-20,30-40``.

    Raises:
        SourceParseError: If the string is empty, has an empty path, has a colon
            with no ranges, or contains a malformed, non-positive or inverted range.
    """
    if not isinstance(value, str):
        raise SourceParseError(f"Source must be a string, got {type(value).__name__}")

    trimmed = value.strip()
    if not trimmed:
        raise SourceParseError("Source string is empty")

    match = _UNESCAPED_COLON_RE.search(trimmed)
    if match is None:
        path_part, ranges_part = trimmed, None
    else:
        path_part, ranges_part = trimmed[: match.start()], trimmed[match.end() :]

    file_path = path_part.replace("\\:", ":").strip()
    if not file_path:
        raise SourceParseError(f"Invalid source file path: {value}")

    if ranges_part is None:
        return ParsedSource(file_path=file_path)

    ranges_part = ranges_part.strip()
    if not ranges_part:
        raise SourceParseError(f"Missing line ranges after ':' in {value}")

    ranges = tuple(_parse_range(segment, value) for segment in ranges_part.split(","))
    return ParsedSource(file_path=file_path, ranges=ranges)


def _parse_range(segment: str, value: str) -> LineSpan:
    bounds = [part.strip() for part in segment.split("-")]
    if len(bounds) != _RANGE_BOUNDS or not all(_INTEGER_RE.match(b) for b in bounds):
        raise SourceParseError(f"Invalid range numbers: {segment.strip()} in {value}")

    start, end = int(bounds[0]), int(bounds[1])
    if start <= 0 or end <= 0:
        raise SourceParseError(f"Line numbers must be positive: {segment.strip()} in {value}")
    if end < start:
        raise SourceParseError(f"Range end must be >= start: {segment.strip()} in {value}")
    return LineSpan(start, end)


def format_source(source: ParsedSource) -> str:
    """Serialize a ParsedSource back into its string form."""
    path = source.file_path.replace(":", "\\:")
    if source.covers_whole_file:
        return path
    return path + ":" + ",".join(f"{r.start}-{r.end}" for r in source.ranges)
