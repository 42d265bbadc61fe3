"""Shared fixtures: an in-memory filesystem that records every access."""

from __future__ import annotations

import errno
from collections.abc import Callable, Iterable
from pathlib import PurePosixPath

import pytest

from globdeps.filesystem import EntryStat

ROOT = PurePosixPath("/proj")


class MemoryFileSystem:
    """
    `FileSystemReader` over a fixed set of root-relative file paths. Every
    `read_directory` and `stat` call is recorded as a root-relative path
    (`""` for the root itself).
    """

    def __init__(self, files: Iterable[str], unreadable: Iterable[str] = ()) -> None:
        self.dirs: dict[str, list[str]] = {"": []}
        self.files: set[str] = set()
        self.unreadable = set(unreadable)
        self.listed: list[str] = []
        self.statted: list[str] = []
        for path in files:
            self._add_file(path)

    def _add_file(self, path: str) -> None:
        parts = path.split("/")
        parent = ""
        for part in parts[:-1]:
            child = f"{parent}/{part}" if parent else part
            if child not in self.dirs:
                self.dirs[child] = []
                self.dirs[parent].append(part)
            parent = child
        self.dirs[parent].append(parts[-1])
        self.files.add(path)

    def _rel(self, path: object) -> str:
        rel = str(PurePosixPath(str(path)).relative_to(ROOT))
        return "" if rel == "." else rel

    def read_directory(self, path: object) -> list[str]:
        rel = self._rel(path)
        self.listed.append(rel)
        if rel in self.unreadable:
            raise PermissionError(errno.EACCES, "Permission denied", str(path))
        if rel not in self.dirs:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(path))
        return list(self.dirs[rel])

    def stat(self, path: object) -> EntryStat:
        rel = self._rel(path)
        self.statted.append(rel)
        if rel in self.unreadable and rel in self.files:
            raise PermissionError(errno.EACCES, "Permission denied", str(path))
        if rel in self.dirs:
            return EntryStat(is_directory=True, is_file=False)
        if rel in self.files:
            return EntryStat(is_directory=False, is_file=True)
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(path))


@pytest.fixture
def memory_fs() -> Callable[..., MemoryFileSystem]:
    """Factory for `MemoryFileSystem` instances rooted at `/proj`."""
    return MemoryFileSystem
