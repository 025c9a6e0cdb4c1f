"""Documentation record models and the record-store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class Record:
    """A documentation entry that references the source regions it documents."""

    id: str
    """Stable record identifier."""

    title: str
    """Human-readable record title."""

    sources: list[str] = field(default_factory=list)
    """Source-reference strings such as ``src/app.ts:10-20,30-40``."""

    category: str = "general"
    """Record category (DOC, ADR, CTX, ...)."""

    tags: list[str] = field(default_factory=list)

    file_path: str = ""
    """Location of the record in its backing store, if any."""


class RecordStore(ABC):
    """Supplies every documentation record; filtering happens outside the store."""

    @abstractmethod
    async def get_all_records(self) -> list[Record]:
        """Return all records.

        Raises:
            RecordStoreError: If the backing store cannot be read.
        """


class RecordStoreError(Exception):
    """Raised when the record store cannot be reached or read."""
