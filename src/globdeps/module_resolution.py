"""
Mapping of module identifiers to files.

`PathModuleResolver` follows the usual bundler conventions: relative and
absolute identifiers resolve against the requesting directory, bare ones are
searched in module directories. Extensions, `package.json` `main` entries and
`index` files are tried in turn.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Protocol

from globdeps.defaults import DEFAULT_EXTENSIONS, DEFAULT_INDEX_FILES, DEFAULT_MODULE_DIRECTORIES
from globdeps.errors import ResolutionError

log = logging.getLogger(__name__)


class ModuleResolver(Protocol):
    """
    Maps a module identifier to an absolute file path, raising
    `ResolutionError` if it can't. Must be safe to call from several threads.
    """

    def resolve(self, identifier: str, base_dir: Path) -> Path: ...


class PathModuleResolver:
    """Filesystem-based `ModuleResolver`. Stateless, so safe for concurrent use."""

    def __init__(
        self,
        module_directories: Sequence[str | Path] | None = None,
        extensions: Sequence[str] | None = None,
        index_files: Sequence[str] | None = None,
    ) -> None:
        self._module_directories = [
            Path(d)
            for d in (
                module_directories
                if module_directories is not None
                else DEFAULT_MODULE_DIRECTORIES
            )
        ]
        self._extensions = list(extensions if extensions is not None else DEFAULT_EXTENSIONS)
        self._index_files = list(index_files if index_files is not None else DEFAULT_INDEX_FILES)

    def resolve(self, identifier: str, base_dir: Path) -> Path:
        base_dir = Path(base_dir)
        if _is_path_like(identifier):
            found = self._resolve_candidate(base_dir / identifier)
            if found is not None:
                return found
        else:
            for directory in self._search_directories(base_dir):
                found = self._resolve_candidate(directory / identifier)
                if found is not None:
                    return found
        raise ResolutionError(identifier, base_dir, "no matching file")

    def _search_directories(self, base_dir: Path) -> Iterator[Path]:
        """Absolute module directories as-is; relative ones in `base_dir` and each ancestor."""
        for directory in self._module_directories:
            if directory.is_absolute():
                if directory.is_dir():
                    yield directory
                continue
            for ancestor in (base_dir, *base_dir.parents):
                candidate = ancestor / directory
                if candidate.is_dir():
                    yield candidate

    def _resolve_candidate(self, path: Path) -> Path | None:
        found = self._resolve_file(path)
        if found is not None:
            return found
        if path.is_dir():
            main = _package_main(path)
            if main is not None:
                target = path / main
                found = self._resolve_file(target) or self._resolve_index(target)
                if found is not None:
                    return found
            return self._resolve_index(path)
        return None

    def _resolve_file(self, path: Path) -> Path | None:
        if path.is_file():
            return path.resolve()
        for ext in self._extensions:
            with_ext = path.with_name(path.name + ext)
            if with_ext.is_file():
                return with_ext.resolve()
        return None

    def _resolve_index(self, directory: Path) -> Path | None:
        if not directory.is_dir():
            return None
        for index in self._index_files:
            found = self._resolve_file(directory / index)
            if found is not None:
                return found
        return None


def _is_path_like(identifier: str) -> bool:
    return (
        identifier in (".", "..")
        or identifier.startswith(("./", "../", ".\\", "..\\", "/"))
        or Path(identifier).is_absolute()
    )


def _package_main(directory: Path) -> str | None:
    """Read the `main` field of `directory/package.json`, if there is a usable one."""
    manifest = directory / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (ValueError, OSError) as e:
        log.warning("Ignoring unreadable %s: %s", manifest, e)
        return None
    main = data.get("main") if isinstance(data, dict) else None
    return main if isinstance(main, str) and main else None
