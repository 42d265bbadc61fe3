"""
Glob-based dependency discovery for build modules.

Associates modules with glob patterns and reports the files matching those
globs as extra dependencies of each module. Directory walks are pruned with
partial glob matches, so large trees like `node_modules` are never listed
unless a glob can reach into them.

Usage::

    from globdeps import BuildPass, ModuleGlobResolver, ResolverConfig

    config = ResolverConfig(
        module_globs={"widgets": ["assets/*.png", "assets/*.jpg"]},
        module_directories=["src"],
    )
    resolver = ModuleGlobResolver(config)
    build = BuildPass()
    resolver.apply(build)
    deps = build.run(["src/widgets/index.ts"])
"""

from globdeps.errors import (
    ConfigError,
    EntryAccessError,
    GlobDepsError,
    InvalidPatternError,
    ResolutionError,
)
from globdeps.filesystem import EntryStat, FileSystemReader, LocalFileSystem
from globdeps.lifecycle import BuildPass, BuildPassLifecycle
from globdeps.matching import GlobPattern, MatchMode, compile_pattern, matches
from globdeps.module_resolution import ModuleResolver, PathModuleResolver
from globdeps.resolver import ModuleGlobResolver, ResolverState, alias_prefixes_for
from globdeps.types import ResolverConfig
from globdeps.walker import walk

__all__ = [
    "BuildPass",
    "BuildPassLifecycle",
    "ConfigError",
    "EntryAccessError",
    "EntryStat",
    "FileSystemReader",
    "GlobDepsError",
    "GlobPattern",
    "InvalidPatternError",
    "LocalFileSystem",
    "MatchMode",
    "ModuleGlobResolver",
    "ModuleResolver",
    "PathModuleResolver",
    "ResolutionError",
    "ResolverConfig",
    "ResolverState",
    "alias_prefixes_for",
    "compile_pattern",
    "matches",
    "walk",
]
