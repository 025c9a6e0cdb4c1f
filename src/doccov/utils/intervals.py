"""Interval algebra over inclusive line spans.

All functions are pure. For every ``total >= 0``, ``merge_ranges(clip_ranges(x, total))``
together with ``complement_ranges(x, total)`` partitions ``[1, total]``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from doccov.models.coverage import LineSpan

if TYPE_CHECKING:
    from collections.abc import Iterable


def merge_ranges(spans: Iterable[LineSpan]) -> list[LineSpan]:
    """Merge overlapping and adjacent spans into a sorted, disjoint list."""
    ordered = sorted(spans)
    if not ordered:
        return []

    merged: list[LineSpan] = [ordered[0]]
    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end + 1:
            merged[-1] = LineSpan(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def complement_ranges(spans: Iterable[LineSpan], total: int) -> list[LineSpan]:
    """Return the gaps in ``[1, total]`` not covered by *spans*."""
    if total <= 0:
        return []
    merged = merge_ranges(spans)
    if not merged:
        return [LineSpan(1, total)]

    gaps: list[LineSpan] = []
    cursor = 1
    for span in merged:
        if span.start > total:
            break
        if span.start > cursor:
            gaps.append(LineSpan(cursor, span.start - 1))
        cursor = max(cursor, span.end + 1)
    if cursor <= total:
        gaps.append(LineSpan(cursor, total))
    return gaps


def overlaps_any(span: LineSpan, spans: Iterable[LineSpan]) -> bool:
    """Return True if *span* shares at least one line with any span in *spans*."""
    return any(span.start <= other.end and span.end >= other.start for other in spans)


def clip_ranges(spans: Iterable[LineSpan], total: int) -> list[LineSpan]:
    """Merge *spans* and trim them to ``[1, total]``, dropping spans past the end."""
    if total <= 0:
        return []
    clipped: list[LineSpan] = []
    for span in merge_ranges(spans):
        if span.start > total:
            break
        clipped.append(LineSpan(span.start, min(span.end, total)))
    return clipped


def count_lines_in(spans: Iterable[LineSpan]) -> int:
    """Return the number of lines covered by *spans* (which must be disjoint)."""
    return sum(span.length for span in spans)
