"""Custom exceptions for globdeps."""

from __future__ import annotations

from pathlib import Path


class GlobDepsError(Exception):
    """Base exception for globdeps."""


class InvalidPatternError(GlobDepsError):
    """Glob pattern is structurally invalid (unbalanced braces or brackets)."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")


class ResolutionError(GlobDepsError):
    """A module identifier could not be mapped to a file."""

    def __init__(self, identifier: str, base_dir: Path, reason: str | None = None):
        self.identifier = identifier
        self.base_dir = base_dir
        message = f"Cannot resolve module {identifier!r} from {base_dir}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class EntryAccessError(GlobDepsError):
    """A directory entry could not be listed or stat'ed during a walk."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot access {path}: {cause.strerror or cause}")


class ConfigError(GlobDepsError):
    """Config file or options are invalid."""
