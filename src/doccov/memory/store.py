"""Markdown record store.

Documentation records are stored as Markdown files with YAML frontmatter::

    ---
    id: 2f0c...
    title: Request routing
    category: DOC
    tags: [routing]
    sources:
      - src/router.ts:10-80
      - src/middleware/auth.ts
    ---

    Body text...

Only the frontmatter matters for coverage; the body is ignored.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from doccov.models.record import Record, RecordStore, RecordStoreError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_FRONTMATTER_DELIMITER = "---"


def parse_frontmatter(text: str) -> dict[str, Any] | None:
    """Return the YAML frontmatter of a Markdown document, or None if it has none.

    Raises:
        yaml.YAMLError: If the frontmatter is not valid YAML.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != _FRONTMATTER_DELIMITER:
        return None
    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == _FRONTMATTER_DELIMITER:
            data = yaml.safe_load("\n".join(lines[1:index]))
            return data if isinstance(data, dict) else None
    return None


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def record_from_frontmatter(data: dict[str, Any], file_path: str = "") -> Record | None:
    """Build a Record from parsed frontmatter; None when it has no ``id``."""
    record_id = data.get("id")
    if record_id is None or str(record_id).strip() == "":
        return None
    return Record(
        id=str(record_id),
        title=str(data.get("title") or ""),
        sources=_as_str_list(data.get("sources")),
        category=str(data.get("category") or "general"),
        tags=_as_str_list(data.get("tags")),
        file_path=file_path,
    )


class MarkdownRecordStore(RecordStore):
    """Reads every ``*.md`` record under a directory, in sorted path order."""

    def __init__(self, root: str | Path, index_path: str | Path | None = None) -> None:
        """Initialize the store.

        Args:
            root: Directory holding the record files.
            index_path: Index directory to skip while reading records.
        """
        self._root = Path(root)
        self._index_path = Path(index_path).resolve() if index_path else None

    @property
    def root(self) -> Path:
        return self._root

    async def get_all_records(self) -> list[Record]:
        return await asyncio.to_thread(self._read_all)

    def _read_all(self) -> list[Record]:
        if not self._root.is_dir():
            raise RecordStoreError(f"Record store directory not found: {self._root}")

        records: list[Record] = []
        try:
            paths = sorted(self._root.rglob("*.md"))
        except OSError as exc:
            raise RecordStoreError(f"Cannot list records in {self._root}: {exc}") from exc

        for path in paths:
            if self._is_indexed_path(path):
                continue
            record = self._read_record(path)
            if record is not None:
                records.append(record)

        logger.debug("Loaded %d records from %s", len(records), self._root)
        return records

    def _is_indexed_path(self, path: Path) -> bool:
        if self._index_path is None:
            return False
        return path.resolve().is_relative_to(self._index_path)

    def _read_record(self, path: Path) -> Record | None:
        rel = path.relative_to(self._root).as_posix()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot read record %s: %s", rel, exc)
            return None

        try:
            data = parse_frontmatter(text)
        except yaml.YAMLError as exc:
            logger.warning("Invalid frontmatter in %s: %s", rel, exc)
            return None

        if data is None:
            logger.warning("Skipping %s: no frontmatter", rel)
            return None

        record = record_from_frontmatter(data, file_path=rel)
        if record is None:
            logger.warning("Skipping %s: frontmatter has no id", rel)
        return record


class InMemoryRecordStore(RecordStore):
    """Record store backed by a list, for embedding and tests."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._records = list(records)

    async def get_all_records(self) -> list[Record]:
        return list(self._records)


class CategoryFilteredStore(RecordStore):
    """Wraps another store and keeps only records in the given categories."""

    def __init__(self, inner: RecordStore, categories: Iterable[str]) -> None:
        self._inner = inner
        self._categories = list(categories)

    async def get_all_records(self) -> list[Record]:
        return filter_records(await self._inner.get_all_records(), self._categories)


def filter_records(records: Iterable[Record], categories: Iterable[str]) -> list[Record]:
    """Keep records whose category is listed (case-insensitive); no filter when empty."""
    wanted = {c.upper() for c in categories}
    if not wanted:
        return list(records)
    return [r for r in records if r.category.upper() in wanted]
