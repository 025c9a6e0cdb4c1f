"""Tests for memory/store.py — Markdown record stores."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
import yaml

from doccov.memory.store import (
    CategoryFilteredStore,
    InMemoryRecordStore,
    MarkdownRecordStore,
    filter_records,
    parse_frontmatter,
    record_from_frontmatter,
)
from doccov.models.record import RecordStoreError
from tests.conftest import make_record, write_file, write_record

if TYPE_CHECKING:
    from pathlib import Path


class TestParseFrontmatter:
    def test_reads_yaml_block(self) -> None:
        text = "---\nid: r1\nsources:\n  - src/a.ts:1-4\n---\n\n# Title\n"
        assert parse_frontmatter(text) == {"id": "r1", "sources": ["src/a.ts:1-4"]}

    def test_no_frontmatter(self) -> None:
        assert parse_frontmatter("# Just markdown\n") is None

    def test_unterminated_block(self) -> None:
        assert parse_frontmatter("---\nid: r1\n") is None

    def test_non_mapping_frontmatter(self) -> None:
        assert parse_frontmatter("---\n- a\n- b\n---\n") is None

    def test_invalid_yaml_raises(self) -> None:
        with pytest.raises(yaml.YAMLError):
            parse_frontmatter("---\nid: [unclosed\n---\n")


class TestRecordFromFrontmatter:
    def test_full_record(self) -> None:
        record = record_from_frontmatter(
            {
                "id": 42,
                "title": "Routing",
                "category": "ADR",
                "tags": "http",
                "sources": ["src/router.ts:10-80", "src/auth.ts"],
            },
            file_path="adr/routing.md",
        )
        assert record is not None
        assert record.id == "42"
        assert record.category == "ADR"
        assert record.tags == ["http"]
        assert record.sources == ["src/router.ts:10-80", "src/auth.ts"]
        assert record.file_path == "adr/routing.md"

    def test_defaults(self) -> None:
        record = record_from_frontmatter({"id": "r1"})
        assert record is not None
        assert record.title == ""
        assert record.sources == []
        assert record.category == "general"

    def test_single_source_string(self) -> None:
        record = record_from_frontmatter({"id": "r1", "sources": "src/a.ts"})
        assert record is not None
        assert record.sources == ["src/a.ts"]

    @pytest.mark.parametrize("data", [{}, {"id": None}, {"id": "  "}])
    def test_missing_id(self, data: dict) -> None:
        assert record_from_frontmatter(data) is None


class TestMarkdownRecordStore:
    @pytest.mark.asyncio
    async def test_reads_records_in_path_order(self, tmp_path: Path) -> None:
        write_record(tmp_path, "b.md", record_id="r2", title="Second", sources=["src/b.ts"])
        write_record(
            tmp_path, "a/first.md", record_id="r1", title="First", sources=["src/a.ts:1-3"]
        )

        records = await MarkdownRecordStore(tmp_path).get_all_records()

        assert [r.id for r in records] == ["r1", "r2"]
        assert records[0].sources == ["src/a.ts:1-3"]
        assert records[0].file_path == "a/first.md"
        assert records[1].category == "DOC"

    @pytest.mark.asyncio
    async def test_skips_index_directory(self, tmp_path: Path) -> None:
        write_record(tmp_path, "doc.md", record_id="r1", title="Doc", sources=["src/a.ts"])
        write_record(tmp_path, "index/cached.md", record_id="r9", title="Cached", sources=[])

        store = MarkdownRecordStore(tmp_path, index_path=tmp_path / "index")
        records = await store.get_all_records()

        assert [r.id for r in records] == ["r1"]

    @pytest.mark.asyncio
    async def test_bad_files_are_skipped_with_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_record(tmp_path, "good.md", record_id="r1", title="Good", sources=["src/a.ts"])
        write_file(tmp_path, "plain.md", "# No frontmatter\n")
        write_file(tmp_path, "broken.md", "---\nid: [oops\n---\n")
        write_file(tmp_path, "anonymous.md", "---\ntitle: No id\n---\n")

        with caplog.at_level(logging.WARNING, logger="doccov"):
            records = await MarkdownRecordStore(tmp_path).get_all_records()

        assert [r.id for r in records] == ["r1"]
        assert "plain.md" in caplog.text
        assert "broken.md" in caplog.text
        assert "anonymous.md" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(RecordStoreError, match="not found"):
            await MarkdownRecordStore(tmp_path / "nowhere").get_all_records()


class TestFilteredStores:
    @pytest.mark.asyncio
    async def test_in_memory_store_returns_copy(self) -> None:
        store = InMemoryRecordStore([make_record("r1", ["src/a.ts"])])
        records = await store.get_all_records()
        records.clear()
        assert len(await store.get_all_records()) == 1

    @pytest.mark.asyncio
    async def test_category_filter(self) -> None:
        inner = InMemoryRecordStore(
            [
                make_record("r1", [], category="DOC"),
                make_record("r2", [], category="adr"),
                make_record("r3", [], category="CTX"),
            ]
        )
        records = await CategoryFilteredStore(inner, ["ADR", "doc"]).get_all_records()
        assert [r.id for r in records] == ["r1", "r2"]

    def test_empty_filter_keeps_everything(self) -> None:
        records = [make_record("r1", []), make_record("r2", [], category="CTX")]
        assert filter_records(records, []) == records
