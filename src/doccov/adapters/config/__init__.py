"""Configuration dialect adapters.

Adding a dialect means adding a ``ConfigDialect`` subclass and listing it in
``DIALECTS``; detection order matters because the first match wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from doccov.adapters.config.base import ConfigDialect, ConfigError
from doccov.adapters.config.jest import JestDialect
from doccov.adapters.config.native import NativeDialect
from doccov.adapters.config.vitest import VitestDialect

if TYPE_CHECKING:
    from pathlib import Path

DIALECTS: tuple[ConfigDialect, ...] = (NativeDialect(), VitestDialect(), JestDialect())


def get_dialect(name: str) -> ConfigDialect:
    """Return the dialect registered under *name*."""
    for dialect in DIALECTS:
        if dialect.name == name:
            return dialect
    raise ValueError(f"Unknown config dialect: {name}")


def detect_dialect(path: Path) -> ConfigDialect:
    """Pick the dialect for *path* by file name; unknown names are read as native."""
    for dialect in DIALECTS:
        if dialect.detect(path):
            return dialect
    return DIALECTS[0]


__all__ = [
    "DIALECTS",
    "ConfigDialect",
    "ConfigError",
    "JestDialect",
    "NativeDialect",
    "VitestDialect",
    "detect_dialect",
    "get_dialect",
]
