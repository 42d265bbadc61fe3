"""
Pruned directory-tree walk for a single glob.

Listing everything under the root and filtering afterwards is not an option
when the root holds a large `node_modules` or similar. Instead every
subdirectory is tested with a partial match first, and only directories that
could still contain a match are listed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pathspec

from globdeps.errors import EntryAccessError
from globdeps.filesystem import FileSystemReader, LocalFileSystem
from globdeps.matching import GlobPattern, MatchMode, compile_pattern

log = logging.getLogger(__name__)

ErrorHandler = Callable[[EntryAccessError], None]


def walk(
    root: str | Path,
    glob: GlobPattern | str,
    fs: FileSystemReader | None = None,
    *,
    exclude: pathspec.PathSpec | None = None,
    on_error: ErrorHandler | None = None,
) -> Iterator[str]:
    """
    Lazily yield `/`-joined paths, relative to `root`, of files matching `glob`.

    Traversal is depth-first with an explicit stack; sibling order is whatever
    the reader returns, so callers should treat the result as a set. Each call
    starts a fresh traversal.

    Directories matching `exclude` (gitignore syntax, tested with a trailing
    `/`) are never listed, and files matching it are never yielded.

    If the root itself can't be listed, `EntryAccessError` is raised on first
    iteration. Failures below the root are logged, passed to `on_error` if
    given, and the entry is skipped.
    """
    if isinstance(glob, str):
        glob = compile_pattern(glob)
    reader = fs if fs is not None else LocalFileSystem()
    root = Path(root)
    # Each entry carries the identities of its ancestor directories. A directory
    # reachable by several paths is walked once per path; only a directory that
    # is its own ancestor (a symlink cycle) is skipped.
    stack: list[tuple[str, frozenset[tuple[int, int]]]] = [("", frozenset())]

    while stack:
        folder, ancestors = stack.pop()
        full = root / folder if folder else root
        try:
            names = reader.read_directory(full)
        except OSError as e:
            if not folder:
                raise EntryAccessError(full, e) from e
            _report(EntryAccessError(full, e), on_error)
            continue

        for name in names:
            rel = f"{folder}/{name}" if folder else name
            entry_path = full / name
            try:
                entry = reader.stat(entry_path)
            except OSError as e:
                _report(EntryAccessError(entry_path, e), on_error)
                continue

            if entry.is_directory:
                if exclude is not None and exclude.match_file(rel + "/"):
                    log.debug("Excluded directory: %s", rel)
                    continue
                if not glob.match(rel, MatchMode.PARTIAL):
                    log.debug("Pruned directory: %s (pattern %s)", rel, glob.source)
                    continue
                if entry.identity is None:
                    stack.append((rel, ancestors))
                elif entry.identity in ancestors:
                    log.debug("Skipping symlink cycle: %s", rel)
                else:
                    stack.append((rel, ancestors | {entry.identity}))
            elif entry.is_file:
                if exclude is not None and exclude.match_file(rel):
                    continue
                if glob.match(rel, MatchMode.EXACT):
                    yield rel


def _report(error: EntryAccessError, on_error: ErrorHandler | None) -> None:
    log.warning("Skipping entry: %s", error)
    if on_error is not None:
        on_error(error)
