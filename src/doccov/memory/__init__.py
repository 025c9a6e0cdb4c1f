"""Record stores that supply documentation records to the coverage engine."""

from doccov.memory.store import (
    CategoryFilteredStore,
    InMemoryRecordStore,
    MarkdownRecordStore,
    filter_records,
    parse_frontmatter,
)

__all__ = [
    "CategoryFilteredStore",
    "InMemoryRecordStore",
    "MarkdownRecordStore",
    "filter_records",
    "parse_frontmatter",
]
