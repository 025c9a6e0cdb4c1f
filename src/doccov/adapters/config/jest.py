"""Jest configuration dialect (``jest.config.js`` and friends)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from doccov.adapters.config.base import (
    JS_MODULE_EXTENSIONS,
    ConfigDialect,
    load_module_config,
    pick_overall_threshold,
    string_list,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class JestDialect(ConfigDialect):
    """Reads ``collectCoverageFrom`` and ``coverageThreshold.global``.

    ``collectCoverageFrom`` entries starting with ``!`` are negated globs and
    become excludes; the rest are includes.
    """

    name = "jest"

    def detect(self, path: Path) -> bool:
        return "jest" in path.name and path.suffix in (*JS_MODULE_EXTENSIONS, ".json")

    def extract(self, path: Path) -> dict[str, Any]:
        module = load_module_config(path)
        result: dict[str, Any] = {}

        include: list[str] = []
        exclude: list[str] = []
        for pattern in string_list(module.get("collectCoverageFrom")):
            if pattern.startswith("!"):
                exclude.append(pattern[1:])
            else:
                include.append(pattern)
        if include:
            result["include"] = include
        if exclude:
            result["exclude"] = exclude

        threshold = module.get("coverageThreshold")
        overall = (
            pick_overall_threshold(threshold.get("global")) if isinstance(threshold, dict) else None
        )
        if overall is not None:
            result["thresholds"] = {"overall": overall}

        if not result:
            logger.debug("No coverage settings found in %s", path)
        return result
