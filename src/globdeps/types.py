"""Configuration types for glob dependency resolution."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from globdeps.defaults import DEFAULT_EXCLUDES, DEFAULT_MODULE_DIRECTORIES

ModuleGlobs = Mapping[str, str | Sequence[str]]


def normalize_module_globs(module_globs: ModuleGlobs) -> dict[str, tuple[str, ...]]:
    """
    Normalize each value to a tuple of patterns: a single string becomes a
    one-element tuple and duplicates are dropped, keeping first occurrence.
    """
    normalized: dict[str, tuple[str, ...]] = {}
    for module, globs in module_globs.items():
        if isinstance(globs, str):
            globs = [globs]
        normalized[module] = tuple(dict.fromkeys(globs))
    return normalized


@dataclass(frozen=True)
class ResolverConfig:
    """
    Construction-time settings for `ModuleGlobResolver`. Immutable.

    `root=None` means the current working directory at construction time.
    `exclude=None` means use `DEFAULT_EXCLUDES`; providing a list replaces them.
    `alias_prefixes=None` derives prefixes from `module_directories` that lie
    under `root` (see `alias_prefixes_for`).
    """

    module_globs: ModuleGlobs = field(default_factory=dict)
    root: Path | None = None
    alias_prefixes: Sequence[str] | None = None
    module_directories: Sequence[str] = tuple(DEFAULT_MODULE_DIRECTORIES)
    exclude: Sequence[str] | None = None
    extend_exclude: Sequence[str] = ()
    case_sensitive: bool = True
    dot: bool = False
    max_workers: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "module_globs", normalize_module_globs(self.module_globs))

    @property
    def effective_root(self) -> Path:
        return (self.root if self.root is not None else Path.cwd()).resolve()

    @property
    def effective_exclude(self) -> list[str]:
        """Combined exclude patterns: defaults (or `exclude`) + `extend_exclude`."""
        base = list(self.exclude) if self.exclude is not None else list(DEFAULT_EXCLUDES)
        return base + list(self.extend_exclude)
