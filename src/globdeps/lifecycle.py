"""
Build pass hooks.

A host build tool exposes two hook points: a "before compile" signal fired
once per pass, and a per-module hook that hands over the module's resolved
file and a sink for extra dependencies. `BuildPass` is a small in-process
host used by the CLI and tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

AddDependency = Callable[[str], None]
BeforeCompileHook = Callable[[], None]
ModuleHook = Callable[[Path, AddDependency], None]


class BuildPassLifecycle(Protocol):
    def on_before_compile(self, callback: BeforeCompileHook) -> None: ...

    def on_module(self, callback: ModuleHook) -> None: ...


class _DependencySink:
    """Collects added dependencies in insertion order, without duplicates."""

    def __init__(self) -> None:
        self.paths: dict[str, None] = {}

    def __call__(self, path: str) -> None:
        self.paths.setdefault(path, None)


class BuildPass:
    """
    Runs build passes over a fixed list of resources. Hooks stay registered
    across passes, so calling `run()` again starts a fresh pass.
    """

    def __init__(self) -> None:
        self._before_compile: list[BeforeCompileHook] = []
        self._module_hooks: list[ModuleHook] = []

    @property
    def has_hooks(self) -> bool:
        return bool(self._before_compile or self._module_hooks)

    def on_before_compile(self, callback: BeforeCompileHook) -> None:
        self._before_compile.append(callback)

    def on_module(self, callback: ModuleHook) -> None:
        self._module_hooks.append(callback)

    def run(self, resources: Iterable[str | Path]) -> dict[Path, list[str]]:
        """
        Fire before-compile hooks, then module hooks for each resource.
        Returns the dependencies added per resource. Hook exceptions propagate
        and abort the pass.
        """
        for hook in self._before_compile:
            hook()

        results: dict[Path, list[str]] = {}
        for resource in resources:
            resource = Path(resource)
            sink = _DependencySink()
            for module_hook in self._module_hooks:
                module_hook(resource, sink)
            results[resource] = list(sink.paths)
        return results
