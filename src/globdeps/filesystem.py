"""Filesystem reader interface consumed by the walker, plus the local implementation."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class EntryStat:
    """
    Classification of one directory entry. `identity` is an optional
    `(st_dev, st_ino)` pair used to detect symlink cycles.
    """

    is_directory: bool
    is_file: bool
    identity: tuple[int, int] | None = None


class FileSystemReader(Protocol):
    """
    Minimal read-only filesystem view. Implementations must reflect the real
    state at call time and raise `OSError` when an entry can't be accessed.
    """

    def read_directory(self, path: Path) -> list[str]: ...

    def stat(self, path: Path) -> EntryStat: ...


class LocalFileSystem:
    """`FileSystemReader` over the real filesystem. Follows symlinks."""

    def read_directory(self, path: Path) -> list[str]:
        return os.listdir(path)

    def stat(self, path: Path) -> EntryStat:
        st = os.stat(path)
        return EntryStat(
            is_directory=stat.S_ISDIR(st.st_mode),
            is_file=stat.S_ISREG(st.st_mode),
            identity=(st.st_dev, st.st_ino),
        )
