"""Configuration loading for documentation coverage runs.

Three dialects are understood (see ``doccov.adapters.config``): the native
``*.coverage.json`` document, vitest configs and jest configs. Whatever the
source, ``normalize_config`` produces a ``CoverageConfig`` with every field
populated.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from doccov.adapters.config import ConfigError, detect_dialect
from doccov.utils.paths import is_valid_glob_pattern

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

DEFAULT_INCLUDE: tuple[str, ...] = ("src/**/*.ts", "src/**/*.js")
DEFAULT_EXCLUDE: tuple[str, ...] = ("node_modules/**", "dist/**")
ALLOWED_CATEGORIES: tuple[str, ...] = ("DOC", "ADR", "CTX")
DEFAULT_MEMORY_STORE_PATH = "./memories"
DEFAULT_INDEX_PATH = "./memories/index"

MEMORY_STORE_ENV = "DOCCOV_MEMORY_STORE_PATH"
INDEX_PATH_ENV = "DOCCOV_INDEX_PATH"

CONFIG_FILE_NAME = ".coverage.json"

_MAX_PERCENTAGE = 100.0

# camelCase keys accepted in native configs, mapped to field names.
_KEY_ALIASES = {
    "memoryStorePath": "memory_store_path",
    "indexPath": "index_path",
    "rootDir": "root_dir",
}


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass
class CoverageConfig:
    """Normalized documentation coverage configuration."""

    thresholds: dict[str, float] = field(default_factory=dict)
    """``overall`` plus per-scope minimum percentages keyed by scope name."""

    include: list[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    """Globs selecting the source files to analyze."""

    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    """Globs removed from the include set."""

    categories: list[str] = field(default_factory=lambda: list(ALLOWED_CATEGORIES))
    """Record categories that count towards coverage."""

    memory_store_path: str = DEFAULT_MEMORY_STORE_PATH
    """Directory holding the documentation records."""

    index_path: str = DEFAULT_INDEX_PATH
    """Directory holding the record index (skipped when reading records)."""

    root_dir: str | None = None
    """Directory source paths are resolved against; None means the working directory."""

    source: str | None = None
    """Path of the file this config was loaded from, if any."""

    dialect: str = "default"
    """Dialect of the file this config was loaded from."""

    @property
    def overall_threshold(self) -> float | None:
        return self.thresholds.get("overall")

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict of the config."""
        return asdict(self)


def detect_config_type(path: str | Path) -> str:
    """Return the dialect name for a config path: ``native``, ``vitest`` or ``jest``."""
    return detect_dialect(Path(path)).name


def _to_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        raise ConfigError(f"thresholds.{key} must be a number (got: {value!r})")
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"thresholds.{key} must be a number (got: {value!r})") from exc


def _list_field(raw: dict[str, Any], key: str, default: tuple[str, ...]) -> list[str]:
    value = raw.get(key)
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings")
    return list(value)


def normalize_config(
    raw: dict[str, Any], *, source: str | None = None, dialect: str = "default"
) -> CoverageConfig:
    """Fill in defaults so that no field of the resulting config is missing.

    Store locations fall back to the ``DOCCOV_MEMORY_STORE_PATH`` and
    ``DOCCOV_INDEX_PATH`` environment variables before the built-in defaults.

    Raises:
        ConfigError: If a field has the wrong type.
    """
    data = {_KEY_ALIASES.get(key, key): value for key, value in raw.items()}

    thresholds_raw = data.get("thresholds") or {}
    if not isinstance(thresholds_raw, dict):
        raise ConfigError("thresholds must be an object mapping scope names to numbers")
    thresholds = {str(k): _to_float(v, str(k)) for k, v in thresholds_raw.items()}

    memory_store_path = data.get("memory_store_path") or os.environ.get(
        MEMORY_STORE_ENV, DEFAULT_MEMORY_STORE_PATH
    )
    index_path = data.get("index_path") or os.environ.get(INDEX_PATH_ENV, DEFAULT_INDEX_PATH)
    root_dir = data.get("root_dir")

    return CoverageConfig(
        thresholds=thresholds,
        include=_list_field(data, "include", DEFAULT_INCLUDE),
        exclude=_list_field(data, "exclude", DEFAULT_EXCLUDE),
        categories=_list_field(data, "categories", ALLOWED_CATEGORIES),
        memory_store_path=str(memory_store_path),
        index_path=str(index_path),
        root_dir=str(root_dir) if root_dir else None,
        source=source,
        dialect=dialect,
    )


def parse_config(path: str | Path) -> CoverageConfig:
    """Load a config file of any supported dialect.

    Raises:
        ConfigError: If the file is missing, unreadable, not valid JSON, or a
            module whose export cannot be read.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    dialect = detect_dialect(config_path)
    raw = _resolve_dict(dialect.extract(config_path))
    logger.debug("Parsed %s config from %s", dialect.name, config_path)
    return normalize_config(raw, source=str(config_path), dialect=dialect.name)


def discover_config_file(root: str | Path) -> Path | None:
    """Find a native config in *root*: ``.coverage.json`` first, then ``*.coverage.json``."""
    root_path = Path(root)
    default = root_path / CONFIG_FILE_NAME
    if default.is_file():
        return default
    candidates = sorted(p for p in root_path.glob("*" + CONFIG_FILE_NAME) if p.is_file())
    return candidates[0] if candidates else None


def load_config(root: str | Path = ".", config_path: str | Path | None = None) -> CoverageConfig:
    """Load the explicit config, else a discovered one, else defaults.

    Raises:
        ConfigError: If the chosen config file cannot be loaded.
    """
    if config_path is not None:
        return parse_config(config_path)

    discovered = discover_config_file(root)
    if discovered is None:
        return normalize_config({})
    return parse_config(discovered)


def validate_config(config: CoverageConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    for scope, value in config.thresholds.items():
        if not 0.0 <= value <= _MAX_PERCENTAGE:
            errors.append(f"thresholds.{scope} must be between 0 and 100 (got: {value})")

    if not config.include:
        errors.append("include must contain at least one pattern")
    for key, patterns in (("include", config.include), ("exclude", config.exclude)):
        errors.extend(
            f"{key} contains an invalid glob pattern: {pattern!r}"
            for pattern in patterns
            if not is_valid_glob_pattern(pattern)
        )

    unknown = [c for c in config.categories if c not in ALLOWED_CATEGORIES]
    if unknown:
        errors.append(
            f"categories must be among {', '.join(ALLOWED_CATEGORIES)} "
            f"(got: {', '.join(unknown)})"
        )

    if not config.memory_store_path:
        errors.append("memory_store_path is required")
    if not config.index_path:
        errors.append("index_path is required")

    return errors
