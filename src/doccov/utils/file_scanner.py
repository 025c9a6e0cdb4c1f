"""Filesystem source scanner.

Finds the source files a project contains so that undocumented files show up
in the coverage report, not only the files some record already references.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from doccov.utils.paths import is_valid_glob_pattern

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".ts",
        ".tsx",
        ".js",
        ".jsx",
        ".mjs",
        ".cjs",
        ".vue",
        ".svelte",
        ".astro",
        ".mdx",
        ".md",
        ".py",
    }
)

# Generated, test, story and config files are never documentation targets.
_NON_SOURCE_MARKERS = (".min.", ".bundle.", ".test.", ".spec.", ".stories.", ".config.")
_NON_SOURCE_SUFFIXES = (".d.ts", ".map")

_BRACE_RE = re.compile(r"\{([^{}]*)\}")

# Number of parts when splitting a pattern on '**'
_SINGLE_STAR_PARTS = 2  # e.g. **/*.ts  -> ['', '/*.ts']
_DOUBLE_STAR_PARTS = 3  # e.g. **/foo/** -> ['', '/foo/', '']

# Files sampled to estimate total line count in a dry run.
_DRY_RUN_SAMPLE = 5


@dataclass
class DryRunResult:
    """What a scan would analyze, without analyzing it."""

    total_files: int
    source_files: list[str] = field(default_factory=list)
    excluded_files: list[str] = field(default_factory=list)
    estimated_lines: int = 0


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternations: ``src/*.{ts,js}`` -> ``src/*.ts``, ``src/*.js``."""
    match = _BRACE_RE.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def _match_one_doublestar(path: str, parts: list[str]) -> bool:
    prefix = parts[0].rstrip("/")
    suffix = parts[1].lstrip("/")

    # **/*.ts
    if not prefix and suffix:
        segments = path.split("/")
        return any(fnmatch.fnmatch("/".join(segments[i:]), suffix) for i in range(len(segments)))

    # dist/**
    if prefix and not suffix:
        return path.startswith(prefix + "/") or path == prefix

    # src/**/index.ts
    if prefix and suffix:
        if not path.startswith(prefix + "/"):
            return False
        rest_segments = path[len(prefix) + 1 :].split("/")
        return any(
            fnmatch.fnmatch("/".join(rest_segments[i:]), suffix) for i in range(len(rest_segments))
        )

    # a bare ** matches everything
    return True


def matches_glob(path: str, pattern: str) -> bool:
    """Match a POSIX relative path against a glob with ``**`` and brace support."""
    for expanded in expand_braces(pattern):
        if "**" not in expanded:
            if fnmatch.fnmatch(path, expanded):
                return True
            continue

        parts = expanded.split("**")
        if len(parts) == _SINGLE_STAR_PARTS:
            if _match_one_doublestar(path, parts):
                return True
        elif len(parts) == _DOUBLE_STAR_PARTS:
            middle = parts[1].strip("/")
            if middle and any(fnmatch.fnmatch(seg, middle) for seg in path.split("/")):
                return True
        elif fnmatch.fnmatch(path, expanded):
            return True
    return False


def is_source_file(path: str) -> bool:
    """Return True for files worth documenting (by extension and naming)."""
    name = Path(path).name.lower()
    if name.endswith(_NON_SOURCE_SUFFIXES):
        return False
    if any(marker in name for marker in _NON_SOURCE_MARKERS):
        return False
    return Path(name).suffix in SOURCE_EXTENSIONS


class FileScanner:
    """Expands include/exclude globs under a project root."""

    def scan_source_files(
        self,
        include: list[str] | tuple[str, ...],
        exclude: list[str] | tuple[str, ...] = (),
        root_dir: str | Path = ".",
    ) -> list[str]:
        """Return sorted, de-duplicated POSIX relative paths of source files.

        Raises:
            ValueError: If *include* is empty or contains an unsafe pattern.
        """
        matched, _excluded = self._collect(include, exclude, root_dir)
        return matched

    def dry_run_scan(
        self,
        include: list[str] | tuple[str, ...],
        exclude: list[str] | tuple[str, ...] = (),
        root_dir: str | Path = ".",
    ) -> DryRunResult:
        """Report what a scan would analyze, with an estimated total line count."""
        matched, excluded = self._collect(include, exclude, root_dir)
        return DryRunResult(
            total_files=len(matched) + len(excluded),
            source_files=matched,
            excluded_files=excluded,
            estimated_lines=self._estimate_lines(matched, Path(root_dir)),
        )

    def _collect(
        self,
        include: list[str] | tuple[str, ...],
        exclude: list[str] | tuple[str, ...],
        root_dir: str | Path,
    ) -> tuple[list[str], list[str]]:
        if not include:
            raise ValueError("At least one include pattern is required")
        for pattern in (*include, *exclude):
            if not is_valid_glob_pattern(pattern):
                raise ValueError(f"Invalid glob pattern: {pattern}")

        root = Path(root_dir)
        candidates: set[str] = set()
        for pattern in include:
            for expanded in expand_braces(pattern):
                for file_path in root.glob(expanded):
                    if file_path.is_file():
                        candidates.add(file_path.relative_to(root).as_posix())

        matched: list[str] = []
        excluded: list[str] = []
        for rel in sorted(candidates):
            if any(matches_glob(rel, pattern) for pattern in exclude) or not is_source_file(rel):
                excluded.append(rel)
            else:
                matched.append(rel)

        logger.debug(
            "Scanned %s: %d source files, %d excluded", root, len(matched), len(excluded)
        )
        return matched, excluded

    @staticmethod
    def _estimate_lines(files: list[str], root: Path) -> int:
        if not files:
            return 0
        sample = files[:_DRY_RUN_SAMPLE]
        counted = 0
        lines = 0
        for rel in sample:
            try:
                with (root / rel).open("rb") as fh:
                    lines += sum(1 for _ in fh)
                counted += 1
            except OSError as exc:
                logger.warning("Could not read %s for line estimate: %s", rel, exc)
        if counted == 0:
            return 0
        return round(lines / counted * len(files))
