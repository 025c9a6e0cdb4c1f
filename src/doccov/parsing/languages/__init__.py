"""Language-specific structural extractors.

Each supported language has its own module with an extractor class.
Use get_extractor() or extract_from_source() to work with them.
"""

from __future__ import annotations

from doccov.parsing.languages.base import ExtractionResult, LanguageExtractor
from doccov.parsing.languages.javascript import (
    JavaScriptExtractor,
    TSXExtractor,
    TypeScriptExtractor,
)
from doccov.parsing.languages.python import PythonExtractor

_EXTRACTORS: dict[str, type[LanguageExtractor]] = {
    "python": PythonExtractor,
    "javascript": JavaScriptExtractor,
    "typescript": TypeScriptExtractor,
    "tsx": TSXExtractor,
}


def get_extractor(language: str) -> LanguageExtractor:
    """Get a language extractor instance for the given language."""
    cls = _EXTRACTORS.get(language)
    if cls is None:
        raise ValueError(f"No extractor for language: {language}")
    return cls()


def extract_from_source(source: bytes, language: str) -> ExtractionResult:
    """Parse source code and extract its structural elements."""
    return get_extractor(language).extract(source)


__all__ = [
    "ExtractionResult",
    "JavaScriptExtractor",
    "LanguageExtractor",
    "PythonExtractor",
    "TSXExtractor",
    "TypeScriptExtractor",
    "extract_from_source",
    "get_extractor",
]
