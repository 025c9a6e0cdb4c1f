"""Base class for configuration dialect adapters."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from doccov.parsing.jsliteral import JSLiteralError, read_module_export

if TYPE_CHECKING:
    from pathlib import Path

# Per-metric threshold fields, in the order they are consulted for the
# single overall threshold.
THRESHOLD_PRIORITY = ("lines", "functions", "branches", "statements")

JS_MODULE_EXTENSIONS = frozenset({".js", ".mjs", ".cjs", ".ts", ".mts", ".cts"})


class ConfigError(Exception):
    """Raised when a configuration file cannot be read, parsed or evaluated."""


class ConfigDialect(ABC):
    """Reads one configuration file format.

    Each dialect knows how to recognise its files by name and how to pull the
    settings doccov understands out of them. ``extract`` returns a partial,
    native-shaped mapping (``include``, ``exclude``, ``thresholds`` and so on);
    filling in defaults is left to ``doccov.config.normalize_config``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Dialect identifier (e.g. 'native', 'vitest', 'jest')."""

    @abstractmethod
    def detect(self, path: Path) -> bool:
        """Return True if *path* looks like a file of this dialect."""

    @abstractmethod
    def extract(self, path: Path) -> dict[str, Any]:
        """Read *path* and return its settings in native shape.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """


def pick_overall_threshold(metrics: Any) -> float | None:
    """Return the first numeric metric threshold in priority order."""
    if not isinstance(metrics, dict):
        return None
    for key in THRESHOLD_PRIORITY:
        value = metrics.get(key)
        if isinstance(value, int | float) and not isinstance(value, bool):
            return float(value)
    return None


def string_list(value: Any) -> list[str]:
    """Coerce a string or list of strings into a list, dropping anything else."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def load_module_config(path: Path) -> dict[str, Any]:
    """Load a test-runner config: ``.json`` as data, JS/TS modules statically.

    Raises:
        ConfigError: If the file cannot be read, is invalid JSON, or its module
            export cannot be read without executing it.
    """
    try:
        if path.suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a JSON object")
            return data
        return read_module_export(path)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    except JSLiteralError as exc:
        raise ConfigError(f"Cannot evaluate config module {path}: {exc}") from exc
