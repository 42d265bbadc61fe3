"""
ModuleGlobResolver: adds files matching globs as dependencies of specific modules.

Modules are configured by identifier (as they would be imported), but the
build hands over resolved files. So at the start of every build pass each
identifier is resolved to its file, and the per-module hook looks the file up
to find which globs to walk.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from types import MappingProxyType

import pathspec

from globdeps.errors import GlobDepsError, ResolutionError
from globdeps.filesystem import FileSystemReader, LocalFileSystem
from globdeps.lifecycle import AddDependency, BuildPassLifecycle
from globdeps.matching import GlobPattern, compile_pattern
from globdeps.module_resolution import ModuleResolver, PathModuleResolver
from globdeps.types import ResolverConfig
from globdeps.walker import walk

log = logging.getLogger(__name__)


class ResolverState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    READY = "ready"


def alias_prefixes_for(root: Path, module_directories: Iterable[str | Path]) -> list[str]:
    """
    Alias prefixes implied by module search directories: each directory
    relative to `root`, dropping those that are not strictly below it.
    Relative directories are taken relative to `root`.
    """
    prefixes: list[str] = []
    for directory in module_directories:
        absolute = os.path.join(root, directory)
        try:
            rel = os.path.relpath(absolute, root)
        except ValueError:
            # Different drive on Windows.
            continue
        if rel == os.curdir or rel.startswith(os.pardir):
            continue
        prefixes.append(rel.replace(os.sep, "/") + "/")
    return prefixes


class ModuleGlobResolver:
    """
    Discovers extra file dependencies for configured modules.

    Lifecycle per build pass: `before_compile()` resolves every configured
    identifier (concurrently) and moves the resolver from IDLE to READY;
    `collect_dependencies()` is then usable until the next `before_compile()`.
    With no module globs configured the resolver is inert: it never touches
    the filesystem and `apply()` registers no hooks.
    """

    def __init__(
        self,
        config: ResolverConfig,
        module_resolver: ModuleResolver | None = None,
        fs: FileSystemReader | None = None,
    ) -> None:
        self._config: ResolverConfig = config
        self._root: Path = config.effective_root
        self._module_globs: Mapping[str, tuple[str, ...]] = config.module_globs
        # Compile eagerly so malformed globs fail before any build pass.
        self._patterns: dict[str, GlobPattern] = {
            glob: compile_pattern(glob, config.case_sensitive, config.dot)
            for globs in self._module_globs.values()
            for glob in globs
        }
        exclude = config.effective_exclude
        self._exclude_spec: pathspec.PathSpec | None = (
            pathspec.PathSpec.from_lines("gitignore", exclude) if exclude else None
        )
        alias_prefixes = (
            config.alias_prefixes
            if config.alias_prefixes is not None
            else alias_prefixes_for(self._root, config.module_directories)
        )
        self._normalizers: list[re.Pattern[str]] = [
            re.compile("^" + re.escape(prefix.strip("/")) + "/", re.IGNORECASE)
            for prefix in alias_prefixes
            if prefix.strip("/")
        ]
        self._module_resolver: ModuleResolver = (
            module_resolver
            if module_resolver is not None
            else PathModuleResolver(config.module_directories)
        )
        self._fs: FileSystemReader = fs if fs is not None else LocalFileSystem()
        self._resources: Mapping[Path, tuple[str, ...]] = MappingProxyType({})
        self._state: ResolverState = ResolverState.IDLE

    @property
    def state(self) -> ResolverState:
        return self._state

    @property
    def root(self) -> Path:
        return self._root

    @property
    def resources(self) -> Mapping[Path, tuple[str, ...]]:
        """Read-only view of resolved file -> globs for the current pass."""
        return self._resources

    def apply(self, lifecycle: BuildPassLifecycle) -> None:
        """Subscribe to a build's hooks. Does nothing without module globs."""
        if not self._module_globs:
            log.debug("No module globs configured, not registering hooks")
            return
        lifecycle.on_before_compile(self.before_compile)
        lifecycle.on_module(self._add_module_dependencies)

    def before_compile(self) -> None:
        """
        Resolve every configured identifier to its file, replacing the
        previous pass's mapping. All-or-nothing: if any identifier fails, the
        resolver goes back to IDLE with an empty mapping and the error
        propagates as `ResolutionError`.
        """
        if not self._module_globs:
            return

        self._state = ResolverState.RESOLVING
        self._resources = MappingProxyType({})
        identifiers = list(self._module_globs)
        try:
            with ThreadPoolExecutor(max_workers=self._config.max_workers) as executor:
                futures = [
                    (identifier, executor.submit(self._resolve_one, identifier))
                    for identifier in identifiers
                ]
            # Exiting the executor waits for every resolution.
            resolved: dict[Path, tuple[str, ...]] = {}
            for identifier, future in futures:
                resource = future.result()
                globs = self._module_globs[identifier]
                # Two identifiers may resolve to the same file; keep both glob sets.
                resolved[resource] = tuple(dict.fromkeys(resolved.get(resource, ()) + globs))
                log.debug("Resolved module %r to %s", identifier, resource)
        except Exception:
            self._state = ResolverState.IDLE
            raise

        self._resources = MappingProxyType(resolved)
        self._state = ResolverState.READY

    def collect_dependencies(self, resource: str | Path) -> set[str]:
        """
        Files matching the globs associated with `resource`, as root-relative
        `/`-separated paths with alias prefixes stripped. Empty for resources
        with no globs.
        """
        if not self._module_globs:
            return set()
        if self._state is not ResolverState.READY:
            raise GlobDepsError(
                f"Dependencies requested while {self._state.value}; call before_compile() first"
            )
        globs = self._resources.get(_resource_key(resource))
        if not globs:
            return set()

        found: set[str] = set()
        for glob in globs:
            for rel in walk(self._root, self._patterns[glob], self._fs, exclude=self._exclude_spec):
                found.add(self.normalize_path(rel))
        log.debug("Found %d dependencies for %s", len(found), resource)
        return found

    def normalize_path(self, path: str) -> str:
        """Use `/` separators and strip each alias prefix, in configured order."""
        path = path.replace("\\", "/")
        for normalizer in self._normalizers:
            path = normalizer.sub("", path, count=1)
        return path

    def _resolve_one(self, identifier: str) -> Path:
        try:
            return _resource_key(self._module_resolver.resolve(identifier, self._root))
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(identifier, self._root, str(e)) from e

    def _add_module_dependencies(self, resource: Path, add_dependency: AddDependency) -> None:
        for path in sorted(self.collect_dependencies(resource)):
            add_dependency(path)


def _resource_key(resource: str | Path) -> Path:
    """Absolute path with symlinks resolved, so any route to a file gives the same key."""
    return Path(os.path.realpath(resource))
