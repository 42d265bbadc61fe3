"""Tests for glob compilation and exact/partial matching."""

from __future__ import annotations

import pytest

from globdeps.errors import InvalidPatternError
from globdeps.matching import MatchMode, compile_pattern, matches

EXACT = MatchMode.EXACT
PARTIAL = MatchMode.PARTIAL


def test_star_stays_within_segment():
    glob = compile_pattern("*.ts")
    assert glob.match("a.ts")
    assert not glob.match("src/a.ts")
    assert not glob.match("a.tsx")


def test_globstar_crosses_segments():
    glob = compile_pattern("src/**/*.ts")
    assert glob.match("src/a.ts")
    assert glob.match("src/x/y/z/a.ts")
    assert not glob.match("lib/a.ts")
    assert not glob.match("src/a.js")


def test_trailing_globstar_matches_any_depth():
    glob = compile_pattern("assets/**")
    assert glob.match("assets/a.png")
    assert glob.match("assets/icons/b.svg")
    assert not glob.match("other/a.png")


def test_double_star_inside_segment_acts_like_star():
    glob = compile_pattern("a**b")
    assert glob.match("axxb")
    assert not glob.match("ax/xb")


def test_question_mark_matches_one_character():
    glob = compile_pattern("a?.md")
    assert glob.match("ab.md")
    assert not glob.match("abc.md")
    assert not glob.match("a.md")


def test_character_classes():
    assert compile_pattern("file[0-9].txt").match("file3.txt")
    assert not compile_pattern("file[0-9].txt").match("filea.txt")
    assert compile_pattern("[!a]*.txt").match("b.txt")
    assert not compile_pattern("[!a]*.txt").match("a.txt")
    assert compile_pattern("[^a]x").match("bx")
    assert not compile_pattern("[^a]x").match("ax")
    assert compile_pattern("[]]x").match("]x")


def test_posix_character_classes():
    assert compile_pattern("[[:digit:]].txt").match("1.txt")
    assert not compile_pattern("[[:digit:]].txt").match("a.txt")
    assert compile_pattern("v[[:digit:][:upper:]]*").match("vX2")
    assert not compile_pattern("[![:alpha:]]*").match("abc")
    assert compile_pattern("[![:alpha:]]*").match("_abc")
    assert compile_pattern("[[:punct:]]x").match("-x")
    assert compile_pattern("[[:xdigit:]]").match("f")
    assert not compile_pattern("[[:xdigit:]]").match("g")
    assert compile_pattern("[[:space:]]").match(" ")


def test_posix_character_classes_in_partial_match():
    glob = compile_pattern("[[:alpha:]]*/**/[[:lower:]]*.ts")
    assert glob.match("src", PARTIAL)
    assert glob.match("src/deep", PARTIAL)
    assert not glob.match("1src", PARTIAL)
    assert glob.match("src/deep/a.ts")
    assert not glob.match("src/deep/A.ts")


def test_posix_class_inside_braces():
    glob = compile_pattern("{lib,[[:digit:]]}/*.js")
    assert glob.match("lib/a.js")
    assert glob.match("7/a.js")
    assert not glob.match("x/a.js")


def test_unknown_posix_class_is_invalid():
    with pytest.raises(InvalidPatternError) as exc:
        compile_pattern("[[:vowel:]].txt")
    assert "vowel" in exc.value.reason


def test_escaped_wildcard_is_literal():
    glob = compile_pattern("\\*.txt")
    assert glob.match("*.txt")
    assert not glob.match("a.txt")


def test_brace_alternatives():
    glob = compile_pattern("assets/*.{png,jpg}")
    assert glob.match("assets/logo.png")
    assert glob.match("assets/photo.jpg")
    assert not glob.match("assets/anim.gif")
    assert len(glob.alternatives) == 2


def test_nested_braces():
    glob = compile_pattern("{a,b{c,d}}.txt")
    assert glob.match("a.txt")
    assert glob.match("bc.txt")
    assert glob.match("bd.txt")
    assert not glob.match("b.txt")


def test_braces_spanning_segments():
    glob = compile_pattern("{src,lib}/**/*.css")
    assert glob.match("src/theme/main.css")
    assert glob.match("lib/reset.css")
    assert not glob.match("vendor/reset.css")


@pytest.mark.parametrize(
    "pattern",
    ["a/{b,c", "a/b}", "{a,{b}", "file[0-9.txt", "src/[abc"],
)
def test_unbalanced_patterns_are_invalid(pattern: str):
    with pytest.raises(InvalidPatternError) as exc:
        compile_pattern(pattern)
    assert exc.value.pattern == pattern


def test_reversed_range_is_invalid():
    with pytest.raises(InvalidPatternError):
        compile_pattern("[z-a].txt")


def test_case_sensitivity_is_configurable():
    assert not compile_pattern("*.PNG").match("logo.png")
    assert compile_pattern("*.PNG", case_sensitive=False).match("logo.png")
    assert compile_pattern("SRC/**", case_sensitive=False).match("src/a", PARTIAL)


def test_dotfiles_need_explicit_dot_or_option():
    assert not compile_pattern("*").match(".env")
    assert compile_pattern(".*").match(".env")
    assert compile_pattern("*", dot=True).match(".env")
    assert not compile_pattern("**/*.ts").match(".cache/a.ts")
    assert compile_pattern("**/*.ts", dot=True).match(".cache/a.ts")
    assert compile_pattern(".cache/*.ts").match(".cache/a.ts")


def test_leading_dot_slash_and_repeated_separators_ignored():
    glob = compile_pattern("./src//*.ts")
    assert glob.match("src/a.ts")
    assert glob.match("./src/a.ts")


def test_backslashes_in_path_are_separators():
    assert compile_pattern("src/**/*.ts").match("src\\deep\\a.ts")


def test_partial_accepts_directories_on_the_way():
    glob = compile_pattern("src/**/*.ts")
    assert glob.match("", PARTIAL)
    assert glob.match("src", PARTIAL)
    assert glob.match("src/deep/er", PARTIAL)
    assert not glob.match("node_modules", PARTIAL)
    assert not glob.match("node_modules/x", PARTIAL)


def test_partial_rejects_once_pattern_is_exhausted():
    glob = compile_pattern("assets/*.png")
    assert glob.match("assets", PARTIAL)
    assert not glob.match("assets/sub", PARTIAL)
    assert not glob.match("assets/logo.png", PARTIAL)


def test_partial_with_literal_segments():
    glob = compile_pattern("a/b/c.txt")
    assert glob.match("a", PARTIAL)
    assert glob.match("a/b", PARTIAL)
    assert not glob.match("a/x", PARTIAL)
    assert not glob.match("b", PARTIAL)


def test_partial_follows_any_brace_alternative():
    glob = compile_pattern("{src,lib}/*.ts")
    assert glob.match("src", PARTIAL)
    assert glob.match("lib", PARTIAL)
    assert not glob.match("test", PARTIAL)


_PATTERNS = [
    "src/**/*.ts",
    "*.md",
    "assets/*.{png,jpg}",
    "a/b/c.txt",
    "**/index.?s",
    "{src,lib}/**/[a-c]*.css",
    "docs/**",
    "x/**/y/**/z.txt",
]

_PATHS = [
    "src/a.ts",
    "src/x/y/z/a.ts",
    "README.md",
    "assets/logo.png",
    "assets/photo.jpg",
    "a/b/c.txt",
    "index.js",
    "deep/down/index.ts",
    "lib/theme/base.css",
    "docs/guide/intro.md",
    "x/1/y/2/3/z.txt",
    "x/y/z.txt",
]


@pytest.mark.parametrize("pattern", _PATTERNS)
def test_exact_match_implies_partial_match_of_every_parent(pattern: str):
    glob = compile_pattern(pattern)
    matched = [p for p in _PATHS if glob.match(p, EXACT)]
    assert matched
    for path in matched:
        parts = path.split("/")
        for i in range(len(parts)):
            prefix = "/".join(parts[:i])
            assert glob.match(prefix, PARTIAL), (pattern, path, prefix)


def test_compile_is_memoized():
    assert compile_pattern("src/*.ts") is compile_pattern("src/*.ts")
    assert compile_pattern("src/*.ts") is not compile_pattern("src/*.ts", case_sensitive=False)


def test_matches_accepts_strings():
    assert matches("src/*.ts", "src/a.ts")
    assert matches(compile_pattern("src/*.ts"), "src", PARTIAL)
    assert not matches("src/*.ts", "src/a.js")
