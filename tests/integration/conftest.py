"""Shared fixtures for integration tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from pathlib import Path

# ── File creation helpers ────────────────────────────────────────


def write_file(root: Path, rel: str, content: str) -> None:
    """Write *content* to a file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def write_json(root: Path, rel: str, data: dict[str, Any]) -> None:
    """Write a JSON file under *root*."""
    write_file(root, rel, json.dumps(data, indent=2))


def write_record(root: Path, rel: str, record_id: str, sources: list[str], **extra: str) -> None:
    """Write a Markdown record with YAML frontmatter."""
    header = [f"id: {record_id}", f"title: {extra.get('title', record_id)}"]
    header.append(f"category: {extra.get('category', 'DOC')}")
    header.append("sources:")
    header.extend(f"  - '{source}'" for source in sources)
    write_file(root, rel, "---\n" + "\n".join(header) + "\n---\n\nBody.\n")


# ── Project scaffolding fixtures ─────────────────────────────────

ROUTER_TS = """import { Request } from "./http";

// Routes incoming requests.
export class Router {
  private routes: string[] = [];

  add(path: string): void {
    this.routes.push(path);
  }

  match(path: string): boolean {
    return this.routes.includes(path);
  }
}

export function createRouter(): Router {
  return new Router();
}
"""

HELPERS_PY = '''"""Helper functions."""


def slugify(text):
    return text.lower().replace(" ", "-")


class Cache:
    def get(self, key):
        return None
'''


@pytest.fixture()
def docs_project(tmp_path: Path) -> Path:
    """A project with TypeScript and Python sources and three records.

    Layout::

        src/router.ts      18 lines, lines 4-9 documented (Router, add)
        src/helpers.py     10 lines, fully documented
        src/orphan.ts       3 lines, undocumented
        src/router.test.ts  ignored by the scanner
        memories/          records (plus an index directory to skip)
    """
    write_file(tmp_path, "src/router.ts", ROUTER_TS)
    write_file(tmp_path, "src/helpers.py", HELPERS_PY)
    write_file(tmp_path, "src/orphan.ts", "export const a = 1;\nexport const b = 2;\n\n")
    write_file(tmp_path, "src/router.test.ts", "test('x', () => {});\n")
    write_record(tmp_path, "memories/router.md", "rec-router", ["src/router.ts:4-9"])
    write_record(
        tmp_path, "memories/adr/helpers.md", "rec-helpers", ["src/helpers.py"], category="ADR"
    )
    write_record(tmp_path, "memories/broken.md", "rec-broken", ["src/router.ts:9-3", "../etc/x"])
    write_record(tmp_path, "memories/index/stale.md", "rec-stale", ["src/orphan.ts"])
    write_json(
        tmp_path,
        ".coverage.json",
        {
            "include": ["src/**/*.ts", "src/**/*.py"],
            "thresholds": {"src": 50},
        },
    )
    return tmp_path
