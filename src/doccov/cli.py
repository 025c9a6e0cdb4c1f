"""doccov CLI — top-level command group."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import TYPE_CHECKING, TypedDict, Unpack

import click
import yaml
from rich.logging import RichHandler

from doccov import __version__
from doccov.analyzers.coverage import CoverageService
from doccov.config import (
    ALLOWED_CATEGORIES,
    ConfigError,
    CoverageConfig,
    load_config,
    normalize_config,
    validate_config,
)
from doccov.memory.store import CategoryFilteredStore, MarkdownRecordStore
from doccov.models.coverage import CoverageOptions
from doccov.parsing.source_ref import SourceParseError, format_source, parse_source_string
from doccov.reporters.json_reporter import JSONReporter, render_json
from doccov.reporters.terminal import err_console, reporter
from doccov.reporters.text import render_report
from doccov.utils.file_scanner import FileScanner
from doccov.utils.paths import is_valid_glob_pattern

if TYPE_CHECKING:
    from doccov.models.coverage import CoverageReport
    from doccov.models.record import RecordStore

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_THRESHOLD_FAILED = 1
EXIT_CONFIG_ERROR = 3


class _ReportKwargs(TypedDict):
    """Keyword arguments for the report CLI command."""

    config_path: str | None
    categories: list[str]
    threshold: float | None
    include: list[str]
    exclude: list[str]
    root_dir: str | None
    no_scan: bool
    dry_run: bool
    memory_store_path: str | None
    index_path: str | None
    as_json: bool
    output_json: str | None
    verbose: bool


# ── Helpers ──────────────────────────────────────────────────────


def _configure_logging(*, verbose: bool) -> None:
    """Route doccov's log records to stderr through rich."""
    pkg_logger = logging.getLogger("doccov")
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
        pkg_logger.addHandler(
            RichHandler(console=err_console, show_time=False, show_path=False, markup=False)
        )


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _glob_list(_ctx: click.Context, _param: click.Parameter, value: str | None) -> list[str]:
    patterns = _split_csv(value)
    for pattern in patterns:
        if not is_valid_glob_pattern(pattern):
            raise click.BadParameter(
                f"{pattern!r} must be a relative glob without '..' segments or null bytes."
            )
    return patterns


def _category_list(_ctx: click.Context, _param: click.Parameter, value: str | None) -> list[str]:
    categories = [c.upper() for c in _split_csv(value)]
    unknown = [c for c in categories if c not in ALLOWED_CATEGORIES]
    if unknown:
        raise click.BadParameter(
            f"unknown categories {', '.join(unknown)} "
            f"(expected: {', '.join(ALLOWED_CATEGORIES)})."
        )
    return categories


def _load_run_config(root: Path, config_path: str | None) -> CoverageConfig:
    """Load the explicit or discovered config.

    An explicit ``--config`` that fails to load is fatal. A discovered config
    that fails to load is reported and replaced by defaults.
    """
    if config_path is not None:
        return load_config(root, config_path)
    try:
        return load_config(root)
    except ConfigError as exc:
        reporter.print_warning(f"Ignoring unreadable config, using defaults: {exc}")
        return normalize_config({})


def _run_root(root_option: str | None, config: CoverageConfig) -> Path:
    """Return the project root: ``--root-dir``, else the config's ``root_dir``.

    A relative ``root_dir`` is resolved against the directory of its config file.

    Raises:
        ConfigError: If the configured ``root_dir`` is not a directory.
    """
    if root_option is not None:
        return Path(root_option)
    if config.root_dir is None:
        return Path()
    root = Path(config.root_dir)
    if config.source is not None:
        root = Path(config.source).parent / root
    if not root.is_dir():
        raise ConfigError(f"root_dir is not a directory: {root}")
    return root


def _threshold_failures(report: CoverageReport, threshold: float | None) -> list[str]:
    failures: list[str] = []
    pct = report.summary.coverage_percentage
    if threshold is not None and pct < threshold:
        failures.append(f"Coverage {pct:.2f}% is below threshold {threshold:g}%")
    failures.extend(
        f"{v.scope}:{v.actual:.2f}<{v.threshold:g}"
        for v in report.summary.scope_threshold_violations
    )
    return failures


# ── Command group ────────────────────────────────────────────────


@click.group()
@click.option(
    "--ci",
    is_flag=True,
    help="CI mode: machine-readable JSON output, no progress output.",
)
@click.version_option(version=__version__, prog_name="doccov")
@click.pass_context
def cli(ctx: click.Context, *, ci: bool) -> None:
    """doccov — documentation coverage analysis for codebases."""
    ctx.ensure_object(dict)
    ctx.obj["ci"] = ci


@cli.command()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Config file (*.coverage.json, vitest.config.*, jest.config.*).",
)
@click.option(
    "--categories",
    callback=_category_list,
    default=None,
    help=f"Comma-separated record categories to count ({', '.join(ALLOWED_CATEGORIES)}).",
)
@click.option(
    "--threshold",
    type=click.FloatRange(0, 100),
    default=None,
    help="Fail (exit 1) when overall coverage is below this percentage.",
)
@click.option(
    "--include",
    callback=_glob_list,
    default=None,
    help="Comma-separated include globs (overrides the config).",
)
@click.option(
    "--exclude",
    callback=_glob_list,
    default=None,
    help="Comma-separated exclude globs (overrides the config).",
)
@click.option(
    "--root-dir",
    default=None,
    type=click.Path(exists=True, file_okay=False),
    help=(
        "Project root that source paths are resolved against "
        "(default: the config's root_dir, else the working directory)."
    ),
)
@click.option(
    "--no-scan",
    is_flag=True,
    help="Only analyze files referenced by records; skip filesystem scanning.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="List the files that would be analyzed and exit.",
)
@click.option("--memory-store-path", default=None, help="Directory holding the records.")
@click.option("--index-path", default=None, help="Record index directory (skipped).")
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Print the report as JSON.",
)
@click.option(
    "--output-json",
    default=None,
    type=click.Path(dir_okay=False),
    help="Also write the JSON report to this file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show per-file progress and debug logs.")
@click.pass_context
def report(ctx: click.Context, **kwargs: Unpack[_ReportKwargs]) -> None:
    """Generate a documentation coverage report.

    Exit codes: 0 when every threshold is met, 1 on a global or scope threshold
    violation, 3 when the configuration cannot be loaded or is invalid.

    Examples:
        doccov report
        doccov report --threshold 80 --include "src/**/*.ts"
        doccov report --config vitest.config.ts --json-output
    """
    verbose = kwargs["verbose"]
    ci_mode = bool(ctx.obj.get("ci", False)) if ctx.obj else False
    as_json = kwargs["as_json"] or ci_mode
    _configure_logging(verbose=verbose)

    try:
        config = _load_run_config(Path(kwargs["root_dir"] or "."), kwargs["config_path"])
        root = _run_root(kwargs["root_dir"], config)
    except ConfigError as exc:
        reporter.print_error(f"Failed to load configuration: {exc}")
        ctx.exit(EXIT_CONFIG_ERROR)
    logger.debug("Using %s config from %s", config.dialect, config.source or "defaults")

    if kwargs["include"]:
        config = replace(config, include=kwargs["include"])
    if kwargs["exclude"]:
        config = replace(config, exclude=kwargs["exclude"])

    errors = validate_config(config)
    if errors:
        reporter.print_error(f"Found {len(errors)} configuration error(s):")
        for error in errors:
            reporter.print_error(f"  {error}")
        ctx.exit(EXIT_CONFIG_ERROR)

    include = config.include
    exclude = config.exclude

    if kwargs["dry_run"]:
        try:
            result = FileScanner().dry_run_scan(include, exclude, root)
        except ValueError as exc:
            reporter.print_error(str(exc))
            ctx.exit(EXIT_CONFIG_ERROR)
        if as_json:
            click.echo(json.dumps(asdict(result), indent=2))
        else:
            reporter.print_dry_run(result)
        ctx.exit(EXIT_OK)

    thresholds = dict(config.thresholds)
    if kwargs["threshold"] is not None:
        thresholds["overall"] = kwargs["threshold"]
    threshold = thresholds.get("overall")

    memory_store_path = kwargs["memory_store_path"] or config.memory_store_path
    index_path = kwargs["index_path"] or config.index_path
    store: RecordStore = MarkdownRecordStore(root / memory_store_path, root / index_path)
    if kwargs["categories"]:
        store = CategoryFilteredStore(store, kwargs["categories"])

    options = CoverageOptions(
        threshold=threshold,
        thresholds=thresholds,
        include=tuple(include),
        exclude=tuple(exclude),
        categories=tuple(kwargs["categories"]),
        root_dir=str(root),
        scan_source_files=not kwargs["no_scan"],
        on_progress=reporter.print_analysis_progress if verbose and not ci_mode else None,
        verbose=verbose,
        memory_store_path=memory_store_path,
        index_path=index_path,
    )

    coverage_report = asyncio.run(CoverageService(store).generate_report(options))

    if kwargs["output_json"]:
        JSONReporter().generate(Path(kwargs["output_json"]), coverage_report)

    if as_json:
        click.echo(render_json(coverage_report))
    else:
        click.echo(render_report(coverage_report), nl=False)
        reporter.print_coverage_summary(coverage_report)

    failures = _threshold_failures(coverage_report, threshold)
    if failures:
        for failure in failures:
            reporter.print_error(failure)
        ctx.exit(EXIT_THRESHOLD_FAILED)

    if threshold is not None:
        reporter.print_success(
            f"Coverage {coverage_report.summary.coverage_percentage:.2f}% "
            f"meets threshold {threshold:g}%"
        )


@cli.command("parse")
@click.argument("source")
@click.option("--json-output", "as_json", is_flag=True, help="Print as JSON.")
@click.pass_context
def parse_command(ctx: click.Context, source: str, *, as_json: bool) -> None:
    """Parse a source reference such as ``src/app.ts:10-20,30-40``."""
    try:
        parsed = parse_source_string(source)
    except SourceParseError as exc:
        reporter.print_error(str(exc))
        ctx.exit(1)

    if as_json:
        payload = {
            "file_path": parsed.file_path,
            "ranges": [{"start": r.start, "end": r.end} for r in parsed.ranges],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(f"File: {parsed.file_path}")
    if parsed.covers_whole_file:
        click.echo("Ranges: (whole file)")
    else:
        click.echo("Ranges: " + ", ".join(f"{r.start}-{r.end}" for r in parsed.ranges))
    click.echo(f"Normalized: {format_source(parsed)}")


# ── Config commands ──────────────────────────────────────────────


@cli.group("config")
def config_group() -> None:
    """Inspect documentation coverage configuration."""


_path_option = click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Project root directory (used to discover .coverage.json).",
)
_config_option = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Config file to load instead of discovering one.",
)


@config_group.command("show")
@_path_option
@_config_option
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
@click.pass_context
def config_show(ctx: click.Context, path: str, config_path: str | None, *, as_json: bool) -> None:
    """Display the normalized configuration.

    Example:
      doccov config show --config vitest.config.ts
    """
    try:
        config = load_config(path, config_path)
    except ConfigError as exc:
        reporter.print_error(f"Failed to load configuration: {exc}")
        ctx.exit(EXIT_CONFIG_ERROR)

    config_dict = config.to_dict()
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@_path_option
@_config_option
@click.pass_context
def config_validate(ctx: click.Context, path: str, config_path: str | None) -> None:
    """Validate the configuration.

    Example:
      doccov config validate --config .coverage.json
    """
    try:
        config = load_config(path, config_path)
    except ConfigError as exc:
        reporter.print_error(f"Failed to load configuration: {exc}")
        ctx.exit(EXIT_CONFIG_ERROR)

    errors = validate_config(config)
    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    for idx, error in enumerate(errors, start=1):
        reporter.print_error(f"  {idx}. {error}")
    ctx.exit(1)
