"""Coverage report renderers."""

from doccov.reporters.json_reporter import JSONReporter, render_json, report_to_dict
from doccov.reporters.text import render_report

__all__ = ["JSONReporter", "render_json", "render_report", "report_to_dict"]
