"""
Default exclusion patterns and module resolution settings.

Exclusion patterns use gitignore syntax. Directory patterns end with `/`.
"""

from __future__ import annotations

# Directories that never hold build inputs. Applied during traversal
# (prune, don't enter), on top of glob-based pruning.
DEFAULT_EXCLUDES: list[str] = [
    ".git/",
    ".hg/",
    ".svn/",
    ".bzr/",
    "_darcs/",
]

# Directories searched for bare module identifiers. Relative names are looked
# up in `base_dir` and each of its ancestors.
DEFAULT_MODULE_DIRECTORIES: list[str] = ["node_modules"]

# Tried in order when an identifier names a file without its extension.
DEFAULT_EXTENSIONS: list[str] = [".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx", ".json"]

DEFAULT_INDEX_FILES: list[str] = ["index"]
