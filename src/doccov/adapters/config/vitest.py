"""Vitest configuration dialect (``vitest.config.ts`` and friends)."""

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


class VitestDialect(ConfigDialect):
    """Reads ``test.coverage.{include,exclude,thresholds}`` from a vitest config.

    Thresholds may be flat (``thresholds.lines``) or nested under
    ``thresholds.global``; the first populated metric in priority order
    becomes the overall threshold.
    """

    name = "vitest"

    def detect(self, path: Path) -> bool:
        return "vitest" in path.name and path.suffix in (*JS_MODULE_EXTENSIONS, ".json")

    def extract(self, path: Path) -> dict[str, Any]:
        module = load_module_config(path)
        test = module.get("test")
        coverage = test.get("coverage") if isinstance(test, dict) else None
        if not isinstance(coverage, dict):
            logger.debug("No test.coverage section in %s", path)
            return {}

        result: dict[str, Any] = {}
        include = string_list(coverage.get("include"))
        if include:
            result["include"] = include
        exclude = string_list(coverage.get("exclude"))
        if exclude:
            result["exclude"] = exclude

        thresholds = coverage.get("thresholds")
        overall = None
        if isinstance(thresholds, dict):
            overall = pick_overall_threshold(thresholds.get("global"))
            if overall is None:
                overall = pick_overall_threshold(thresholds)
        if overall is not None:
            result["thresholds"] = {"overall": overall}
        return result
