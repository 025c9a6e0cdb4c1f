"""Path and glob safety checks for user-supplied file references."""

from __future__ import annotations

import posixpath
import re

_WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")


class UnsafePathError(ValueError):
    """Raised when a source path is absolute, escapes the project, or has a null byte."""


def _is_absolute(path: str) -> bool:
    return path.startswith(("/", "\\")) or bool(_WINDOWS_DRIVE_RE.match(path))


def is_safe_relative_path(path: str) -> bool:
    """Return True for project-relative paths that stay inside the project."""
    if not isinstance(path, str) or not path:
        return False
    if "\x00" in path:
        return False
    if _is_absolute(path):
        return False
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return not (normalized == ".." or normalized.startswith("../"))


def validate_source_path(path: str) -> None:
    """Raise UnsafePathError unless *path* is a safe project-relative path."""
    if not is_safe_relative_path(path):
        raise UnsafePathError(
            f"Invalid source file path: {path}. Only project-relative paths are "
            "allowed and parent traversal is forbidden."
        )


def is_valid_glob_pattern(pattern: str) -> bool:
    """Return True for non-empty relative glob patterns without parent traversal."""
    if not isinstance(pattern, str) or not pattern:
        return False
    if "\x00" in pattern:
        return False
    if _is_absolute(pattern):
        return False
    return ".." not in pattern.replace("\\", "/").split("/")


def normalize_relative_path(path: str) -> str:
    """Return a POSIX-normalized form of a relative path (``./a//b.ts`` -> ``a/b.ts``)."""
    return posixpath.normpath(path.replace("\\", "/"))
