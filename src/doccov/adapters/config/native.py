"""Native ``*.coverage.json`` configuration dialect."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from doccov.adapters.config.base import ConfigDialect, ConfigError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

NATIVE_SUFFIX = ".coverage.json"


class NativeDialect(ConfigDialect):
    """JSON document already in doccov's own shape.

    Example::

        {
          "thresholds": {"overall": 80, "src": 90},
          "include": ["src/**/*.ts"],
          "exclude": ["node_modules/**"],
          "categories": ["DOC", "ADR"],
          "memoryStorePath": "./memories"
        }
    """

    name = "native"

    def detect(self, path: Path) -> bool:
        return path.name.endswith(NATIVE_SUFFIX)

    def extract(self, path: Path) -> dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        logger.debug("Loaded native config from %s", path)
        return data
