"""Tests for globdeps exceptions."""

from __future__ import annotations

import errno
from pathlib import Path

from globdeps.errors import (
    EntryAccessError,
    GlobDepsError,
    InvalidPatternError,
    ResolutionError,
)


class TestMessages:
    """Exception messages name the offending input."""

    def test_invalid_pattern(self):
        error = InvalidPatternError("a/{b", "unmatched '{'")
        assert error.pattern == "a/{b"
        assert str(error) == "Invalid glob pattern 'a/{b': unmatched '{'"

    def test_resolution_error_with_reason(self):
        error = ResolutionError("widgets", Path("/proj"), "no matching file")
        assert "'widgets'" in str(error)
        assert "/proj" in str(error)
        assert str(error).endswith(": no matching file")

    def test_resolution_error_without_reason(self):
        error = ResolutionError("widgets", Path("/proj"))
        assert not str(error).endswith(":")

    def test_entry_access_error_uses_strerror(self):
        cause = PermissionError(errno.EACCES, "Permission denied", "/proj/x")
        error = EntryAccessError(Path("/proj/x"), cause)
        assert error.cause is cause
        assert str(error) == "Cannot access /proj/x: Permission denied"


def test_all_errors_share_a_base():
    for cls in (InvalidPatternError, ResolutionError, EntryAccessError):
        assert issubclass(cls, GlobDepsError)
