"""Code-structure scanner.

Locates functions, classes and other constructs in a source file. Two strategies
share one output contract:

- ``STRUCTURAL``: a tree-sitter parse walked by the language's extractor. Spans
  cover the whole declaration body.
- ``HEURISTIC``: line-oriented pattern matching, used when there is no parser
  for the file or the parse fails. Spans are single lines.

The scanner never raises for parse problems; only reading the file can fail.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from doccov.models.coverage import ElementType, StructuralElement
from doccov.parsing.languages import extract_from_source
from doccov.parsing.treesitter import detect_language

logger = logging.getLogger(__name__)


class ScanStrategy(Enum):
    STRUCTURAL = "structural"
    HEURISTIC = "heuristic"


@dataclass
class ScanResult:
    """Line count and structural inventory of one source file."""

    total_lines: int
    elements: list[StructuralElement] = field(default_factory=list)
    strategy: ScanStrategy = ScanStrategy.HEURISTIC

    def of_type(self, element_type: ElementType) -> list[StructuralElement]:
        """Return the elements of one kind, in document order."""
        return [e for e in self.elements if e.type == element_type]


# ── Heuristic patterns ───────────────────────────────────────────

_COMMENT_RE = re.compile(r"^\s*(?://|/\*|\*|#)")
_FUNCTION_PATTERNS = (
    re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*([A-Za-z0-9_$]+)"),
    re.compile(
        r"^\s*(?:export\s+)?(?:const|let|var)\s+([A-Za-z0-9_$]+)\s*(?::[^=]+)?=\s*"
        r"(?:async\s+)?(?:\([^)]*\)|[A-Za-z0-9_$]+)\s*(?::[^=]+)?=>"
    ),
    re.compile(r"^\s*(?:async\s+)?def\s+([A-Za-z0-9_]+)\s*\("),
)
_CLASS_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+([A-Za-z0-9_$]+)"
)


def count_text_lines(text: str) -> int:
    """Count line breaks plus a trailing partial line.

    An empty string counts as one (empty) line.
    """
    newlines = text.count("\n")
    if not text or not text.endswith("\n"):
        return newlines + 1
    return newlines


def scan_heuristic(text: str) -> list[StructuralElement]:
    """Find functions, classes and comment lines by pattern matching each line.

    Lines are split on newline characters only, matching ``count_text_lines``.
    """
    elements: list[StructuralElement] = []
    for line_no, raw in enumerate(text.split("\n"), start=1):
        line = raw.removesuffix("\r")
        if _COMMENT_RE.match(line):
            elements.append(StructuralElement(line_no, line_no, ElementType.COMMENT))
            continue

        for pattern in _FUNCTION_PATTERNS:
            match = pattern.match(line)
            if match:
                elements.append(
                    StructuralElement(line_no, line_no, ElementType.FUNCTION, match.group(1))
                )
                break
        else:
            match = _CLASS_RE.match(line)
            if match:
                elements.append(
                    StructuralElement(line_no, line_no, ElementType.CLASS, match.group(1))
                )
    return elements


def scan_source(text: str, file_path: str | Path = "") -> ScanResult:
    """Scan already-loaded source text.

    *file_path* is only used to pick the structural parser by extension.
    """
    total_lines = count_text_lines(text)
    language = detect_language(file_path) if file_path else None

    if language is not None:
        try:
            result = extract_from_source(text.encode("utf-8"), language)
        except Exception as exc:
            logger.debug("Structural parse of %s failed (%s); using heuristics", file_path, exc)
        else:
            if not result.has_errors:
                return ScanResult(
                    total_lines=total_lines,
                    elements=result.elements,
                    strategy=ScanStrategy.STRUCTURAL,
                )
            logger.debug("Parse errors in %s; using heuristics", file_path)

    return ScanResult(
        total_lines=total_lines,
        elements=scan_heuristic(text),
        strategy=ScanStrategy.HEURISTIC,
    )


def scan_file(file_path: str | Path) -> ScanResult:
    """Read a source file and scan it.

    Raises:
        OSError: If the file cannot be read.
    """
    path = Path(file_path)
    text = path.read_text(encoding="utf-8", errors="replace")
    return scan_source(text, path)
