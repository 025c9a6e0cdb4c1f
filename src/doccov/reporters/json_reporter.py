"""JSON reporter — machine-readable documentation coverage reports."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from doccov.models.coverage import CoverageReport

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


def report_to_dict(report: CoverageReport) -> dict[str, Any]:
    """Convert a report into plain JSON-compatible data."""
    data = asdict(report)
    for rec in data["recommendations"]:
        priority = rec.get("priority")
        if isinstance(priority, Enum):
            rec["priority"] = priority.value
    return data


def render_json(report: CoverageReport) -> str:
    """Return the report as an indented JSON string."""
    return json.dumps(report_to_dict(report), indent=2, ensure_ascii=False, default=_json_default)


class JSONReporter:
    """Write coverage reports as JSON documents."""

    def generate(self, output_path: Path, report: CoverageReport) -> Path:
        """Write a JSON report file.

        Args:
            output_path: Path to write the JSON file.
            report: The coverage report to serialize.

        Returns:
            The path to the generated JSON file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(render_json(report), encoding="utf-8")
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(self, report: CoverageReport) -> str:
        """Return the JSON report as a string."""
        return render_json(report)
