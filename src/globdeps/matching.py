"""
Glob pattern compilation with exact and partial matching.

A pattern is split into `/`-separated segments and each segment is compiled
to a regex. A segment that is exactly `**` matches zero or more path segments.
Partial matching answers "could something below this directory still match?",
which is what lets the walker skip whole subtrees without listing them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from globdeps.errors import InvalidPatternError

_GLOBSTAR = "**"


class MatchMode(Enum):
    """How a relative path is tested against a pattern."""

    EXACT = "exact"
    """The path as a whole must match."""

    PARTIAL = "partial"
    """The path must be a prefix of something that could match."""


@dataclass(frozen=True)
class _Segment:
    """One compiled path segment. `regex` is `None` for a `**` segment."""

    regex: re.Pattern[str] | None
    explicit_dot: bool

    @property
    def is_globstar(self) -> bool:
        return self.regex is None

    def accepts(self, name: str, dot: bool) -> bool:
        if self.regex is None:
            return dot or not name.startswith(".")
        if name.startswith(".") and not (dot or self.explicit_dot):
            return False
        return self.regex.fullmatch(name) is not None


@dataclass(frozen=True)
class GlobPattern:
    """
    A compiled glob. Holds one segment sequence per brace alternative, so
    `assets/*.{png,jpg}` compiles to two alternatives.
    """

    source: str
    case_sensitive: bool
    dot: bool
    alternatives: tuple[tuple[_Segment, ...], ...]

    def match(self, path: str, mode: MatchMode = MatchMode.EXACT) -> bool:
        """Test a root-relative path. Backslashes count as separators."""
        names = [n for n in path.replace("\\", "/").split("/") if n and n != "."]
        return any(
            _match_segments(segments, names, mode, self.dot) for segments in self.alternatives
        )


@lru_cache(maxsize=256)
def compile_pattern(pattern: str, case_sensitive: bool = True, dot: bool = False) -> GlobPattern:
    """
    Compile a glob string. Raises `InvalidPatternError` for unbalanced braces
    or an unterminated character class.

    With `dot=False`, wildcards never match a name starting with `.` unless the
    pattern segment itself starts with a literal `.`.
    """
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    alternatives = tuple(
        _compile_segments(expanded, pattern, flags) for expanded in _expand_braces(pattern, pattern)
    )
    return GlobPattern(
        source=pattern, case_sensitive=case_sensitive, dot=dot, alternatives=alternatives
    )


def matches(glob: GlobPattern | str, path: str, mode: MatchMode = MatchMode.EXACT) -> bool:
    """Convenience wrapper accepting either a compiled pattern or a glob string."""
    if isinstance(glob, str):
        glob = compile_pattern(glob)
    return glob.match(path, mode)


def _match_segments(
    segments: tuple[_Segment, ...], names: list[str], mode: MatchMode, dot: bool
) -> bool:
    # Simulate the segment sequence as an NFA whose states are segment indices.
    end = len(segments)
    states = _closure(segments, {0})
    for name in names:
        advanced: set[int] = set()
        for j in states:
            if j == end:
                continue
            segment = segments[j]
            if segment.accepts(name, dot):
                advanced.add(j if segment.is_globstar else j + 1)
        if not advanced:
            return False
        states = _closure(segments, advanced)
    if mode is MatchMode.EXACT:
        return end in states
    return any(j < end for j in states)


def _closure(segments: tuple[_Segment, ...], states: set[int]) -> set[int]:
    """Add the states reachable by letting `**` match zero segments."""
    result = set(states)
    pending = list(states)
    while pending:
        j = pending.pop()
        if j < len(segments) and segments[j].is_globstar and j + 1 not in result:
            result.add(j + 1)
            pending.append(j + 1)
    return result


def _compile_segments(expanded: str, source: str, flags: int) -> tuple[_Segment, ...]:
    segments: list[_Segment] = []
    for name in expanded.split("/"):
        if not name or name == ".":
            continue
        if name == _GLOBSTAR:
            # Adjacent `**` segments are equivalent to one.
            if not (segments and segments[-1].is_globstar):
                segments.append(_Segment(regex=None, explicit_dot=False))
            continue
        try:
            regex = re.compile(_translate_segment(name, source), flags)
        except re.error as e:
            raise InvalidPatternError(source, str(e)) from e
        segments.append(_Segment(regex=regex, explicit_dot=name.startswith(".")))
    return tuple(segments)


def _translate_segment(name: str, source: str) -> str:
    out: list[str] = []
    i, n = 0, len(name)
    while i < n:
        c = name[i]
        i += 1
        if c == "\\":
            if i < n:
                out.append(re.escape(name[i]))
                i += 1
            else:
                out.append(re.escape(c))
        elif c == "*":
            while i < n and name[i] == "*":
                i += 1
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "[":
            i, char_class = _translate_class(name, i, source)
            out.append(char_class)
        else:
            out.append(re.escape(c))
    return "".join(out)


# Regex bodies for the POSIX `[:name:]` classes allowed inside a bracket.
_POSIX_CLASSES = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "ascii": r"\x00-\x7f",
    "blank": r" \t",
    "cntrl": r"\x00-\x1f\x7f",
    "digit": "0-9",
    "graph": r"\x21-\x7e",
    "lower": "a-z",
    "print": r"\x20-\x7e",
    "punct": r"!-/:-@\[-`{-~",
    "space": r" \t\n\r\f\v",
    "upper": "A-Z",
    "word": r"\w",
    "xdigit": "0-9A-Fa-f",
}


def _translate_class(name: str, start: int, source: str) -> tuple[int, str]:
    """Translate a `[...]` class whose body starts at `start`. Returns (next index, regex)."""
    close = _find_class_end(name, start)
    if close == -1:
        raise InvalidPatternError(source, "unterminated character class")
    negate = name[start] in "!^"
    j = start + 1 if negate else start

    members: list[str] = []
    while j < close:
        ch = name[j]
        if ch == "\\" and j + 1 < close:
            members.append(re.escape(name[j + 1]))
            j += 2
            continue
        posix_end = _posix_class_end(name, j)
        if posix_end != -1:
            class_name = name[j + 2 : posix_end - 2]
            if class_name not in _POSIX_CLASSES:
                raise InvalidPatternError(source, f"unknown character class [:{class_name}:]")
            members.append(_POSIX_CLASSES[class_name])
            j = posix_end
            continue
        members.append("-" if ch == "-" else re.escape(ch))
        j += 1
    return close + 1, "[" + ("^" if negate else "") + "".join(members) + "]"


def _expand_braces(pattern: str, source: str) -> list[str]:
    """
    Expand the first top-level `{a,b}` group and recurse on the results.
    A group without commas expands to its single body.
    """
    depth = 0
    open_at = -1
    commas: list[int] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c == "[":
            close = _find_class_end(pattern, i + 1)
            if close != -1:
                i = close + 1
                continue
        elif c == "{":
            if depth == 0:
                open_at = i
                commas = []
            depth += 1
        elif c == "}":
            if depth == 0:
                raise InvalidPatternError(source, "unmatched '}'")
            depth -= 1
            if depth == 0:
                edges = [open_at, *commas, i]
                prefix, suffix = pattern[:open_at], pattern[i + 1 :]
                expanded: list[str] = []
                for a, b in zip(edges, edges[1:]):
                    expanded.extend(_expand_braces(prefix + pattern[a + 1 : b] + suffix, source))
                return list(dict.fromkeys(expanded))
        elif c == "," and depth == 1:
            commas.append(i)
        i += 1
    if depth:
        raise InvalidPatternError(source, "unmatched '{'")
    return [pattern]


def _find_class_end(pattern: str, start: int) -> int:
    """Index of the `]` closing a class whose body starts at `start`, or -1."""
    i = start
    if i < len(pattern) and pattern[i] in "!^":
        i += 1
    if i < len(pattern) and pattern[i] == "]":
        i += 1
    while i < len(pattern) and pattern[i] not in "]/":
        if pattern[i] == "\\":
            i += 2
            continue
        posix_end = _posix_class_end(pattern, i)
        i = posix_end if posix_end != -1 else i + 1
    if i < len(pattern) and pattern[i] == "]":
        return i
    return -1


def _posix_class_end(pattern: str, i: int) -> int:
    """If a `[:name:]` starts at `i`, the index just past it; otherwise -1."""
    if not pattern.startswith("[:", i):
        return -1
    end = pattern.find(":]", i + 2)
    if end == -1 or not pattern[i + 2 : end].isalpha():
        return -1
    return end + 2
