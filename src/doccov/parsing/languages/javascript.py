"""JavaScript / TypeScript / TSX structural extractors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from doccov.models.coverage import ElementType
from doccov.parsing.languages.base import LanguageExtractor

if TYPE_CHECKING:
    import tree_sitter

_DIRECT_TYPES: dict[str, ElementType] = {
    "function_declaration": ElementType.FUNCTION,
    "generator_function_declaration": ElementType.FUNCTION,
    "class_declaration": ElementType.CLASS,
    "abstract_class_declaration": ElementType.CLASS,
    "method_definition": ElementType.METHOD,
    "interface_declaration": ElementType.INTERFACE,
    "import_statement": ElementType.IMPORT,
    "export_statement": ElementType.EXPORT,
    "comment": ElementType.COMMENT,
}

# Values that turn a variable declarator into a function binding.
_FUNCTION_VALUES = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)


class JavaScriptExtractor(LanguageExtractor):
    language = "javascript"

    def classify(self, node: tree_sitter.Node, ancestors: tuple[str, ...]) -> ElementType | None:
        element_type = _DIRECT_TYPES.get(node.type)
        if element_type is not None:
            return element_type
        if node.type == "variable_declarator":
            value = node.child_by_field_name("value")
            if value is not None and value.type in _FUNCTION_VALUES:
                return ElementType.FUNCTION
        return None


class TypeScriptExtractor(JavaScriptExtractor):
    language = "typescript"


class TSXExtractor(JavaScriptExtractor):
    language = "tsx"
