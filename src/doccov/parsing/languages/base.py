"""Base class for language-specific structural extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from doccov.models.coverage import ElementType, StructuralElement
from doccov.parsing.treesitter import get_parser, node_text

if TYPE_CHECKING:
    import tree_sitter


@dataclass
class ExtractionResult:
    """Structural elements found in one parsed source buffer."""

    language: str
    elements: list[StructuralElement] = field(default_factory=list)
    has_errors: bool = False


class LanguageExtractor(ABC):
    """Walks a tree-sitter syntax tree and classifies declarations by kind.

    Subclasses map node types onto ``ElementType`` values in ``classify``.
    Every node is visited, so nested declarations (methods, inner functions,
    exported classes) are reported alongside top-level ones. Spans cover the
    full node, from its first line to its last.
    """

    @property
    @abstractmethod
    def language(self) -> str:
        """Tree-sitter language name."""

    def extract(self, source: bytes) -> ExtractionResult:
        """Parse source and extract every structural element, in document order."""
        parser = get_parser(self.language)
        tree = parser.parse(source)
        root = tree.root_node

        elements: list[StructuralElement] = []
        stack: list[tuple[tree_sitter.Node, tuple[str, ...]]] = [(root, ())]
        while stack:
            node, ancestors = stack.pop()
            element_type = self.classify(node, ancestors)
            if element_type is not None:
                elements.append(
                    StructuralElement(
                        start=node.start_point.row + 1,
                        end=node.end_point.row + 1,
                        type=element_type,
                        name=self.element_name(node, element_type),
                    )
                )
            child_ancestors = (*ancestors, node.type)
            stack.extend((child, child_ancestors) for child in reversed(node.children))

        return ExtractionResult(
            language=self.language,
            elements=elements,
            has_errors=root.has_error,
        )

    @abstractmethod
    def classify(self, node: tree_sitter.Node, ancestors: tuple[str, ...]) -> ElementType | None:
        """Return the element type for *node*, or None when it is not a declaration.

        *ancestors* holds the node types from the root down to the parent.
        """

    def element_name(self, node: tree_sitter.Node, element_type: ElementType) -> str | None:
        """Return the declared name of *node*, when it has one."""
        if element_type in (ElementType.COMMENT, ElementType.IMPORT, ElementType.EXPORT):
            return None
        name = node_text(node.child_by_field_name("name"))
        return name or None
