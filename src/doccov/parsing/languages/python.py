"""Python structural extractor."""

from __future__ import annotations

from typing import TYPE_CHECKING

from doccov.models.coverage import ElementType
from doccov.parsing.languages.base import LanguageExtractor

if TYPE_CHECKING:
    import tree_sitter


class PythonExtractor(LanguageExtractor):
    language = "python"

    def classify(self, node: tree_sitter.Node, ancestors: tuple[str, ...]) -> ElementType | None:
        if node.type == "function_definition":
            # A def directly inside a class body (possibly decorated) is a method.
            enclosing = [t for t in ancestors if t != "decorated_definition"]
            if enclosing[-2:] == ["class_definition", "block"]:
                return ElementType.METHOD
            return ElementType.FUNCTION
        if node.type == "class_definition":
            return ElementType.CLASS
        if node.type in ("import_statement", "import_from_statement"):
            return ElementType.IMPORT
        if node.type == "comment":
            return ElementType.COMMENT
        return None
