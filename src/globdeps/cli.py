#!/usr/bin/env python3
"""
globdeps: Discover glob-matched file dependencies for build modules

Common usage:
  globdeps --glob widgets='assets/*.png' --module-dir src
  globdeps src/widgets/index.ts
  globdeps -v

Modules and globs are usually configured in a `[modules]` table of
`globdeps.toml`, `.globdeps.toml` or `pyproject.toml [tool.globdeps]`.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from globdeps.config import find_config_file, load_config, merge_cli_with_config
from globdeps.errors import GlobDepsError
from globdeps.lifecycle import BuildPass
from globdeps.resolver import ModuleGlobResolver
from globdeps.types import ResolverConfig

log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the globdeps tool."""

    resources: list[str]
    modules: dict[str, list[str]] = field(default_factory=dict)
    root: Path | None = None
    alias_prefixes: list[str] | None = None
    module_directories: list[str] | None = None
    exclude: list[str] | None = None
    extend_exclude: list[str] | None = None
    case_sensitive: bool | None = None
    dot: bool | None = None
    max_workers: int | None = None
    verbose: int = 0
    version: bool = False


# Options fields that a config file may also set.
_TRACKED_FLAGS = [
    "root",
    "alias_prefixes",
    "module_directories",
    "exclude",
    "extend_exclude",
    "case_sensitive",
    "dot",
    "max_workers",
]


def _parse_glob(value: str) -> tuple[str, str]:
    module, sep, pattern = value.partition("=")
    if not sep or not module or not pattern:
        raise argparse.ArgumentTypeError(f"expected MODULE=PATTERN, got {value!r}")
    return module, pattern


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)` where `explicit_flags` names the
    options the user actually passed, for config merge precedence. Unset
    options are left as `None` so they can be told apart from defaults.
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "resources",
        nargs="*",
        type=str,
        default=[],
        help="Module files to collect dependencies for (default: every configured module)",
    )
    parser.add_argument(
        "-g",
        "--glob",
        action="append",
        type=_parse_glob,
        default=[],
        metavar="MODULE=PATTERN",
        help="Add a glob for a module identifier. Can be repeated",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Root directory that globs are matched against (default: current directory)",
    )
    parser.add_argument(
        "--module-dir",
        action="append",
        default=None,
        dest="module_directories",
        metavar="DIR",
        help="Directory searched for bare module identifiers (default: node_modules). "
        "Can be repeated",
    )
    parser.add_argument(
        "--alias-prefix",
        action="append",
        default=None,
        dest="alias_prefixes",
        metavar="PREFIX",
        help="Prefix stripped from discovered paths (default: module directories under "
        "the root). Can be repeated",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Replace all default exclusion patterns (gitignore syntax). Can be repeated",
    )
    parser.add_argument(
        "--extend-exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Add to default exclusion patterns (e.g., 'fixtures/'). Can be repeated",
    )
    parser.add_argument(
        "-i",
        "--ignore-case",
        action="store_const",
        const=False,
        default=None,
        dest="case_sensitive",
        help="Match globs case-insensitively",
    )
    parser.add_argument(
        "--dot",
        action="store_const",
        const=True,
        default=None,
        help="Let wildcards match names starting with '.'",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        dest="max_workers",
        metavar="N",
        help="Number of threads used to resolve modules",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more detail (repeat for debug output)",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    modules: dict[str, list[str]] = {}
    for module, pattern in opts.glob:
        modules.setdefault(module, []).append(pattern)

    options = Options(
        resources=opts.resources,
        modules=modules,
        root=opts.root,
        alias_prefixes=opts.alias_prefixes,
        module_directories=opts.module_directories,
        exclude=opts.exclude,
        extend_exclude=opts.extend_exclude,
        case_sensitive=opts.case_sensitive,
        dot=opts.dot,
        max_workers=opts.max_workers,
        verbose=opts.verbose,
        version=opts.version,
    )
    explicit_flags = {name for name in _TRACKED_FLAGS if getattr(options, name) is not None}
    return options, explicit_flags


def _setup_logging(verbose: int) -> None:
    """Log warnings by default; `-v` for info, `-vv` for debug."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level, format="%(levelname)s: %(name)s: %(message)s", stream=sys.stderr
    )


def _resolver_config(options: Options) -> ResolverConfig:
    extra: dict[str, Any] = {}
    if options.module_directories is not None:
        extra["module_directories"] = tuple(options.module_directories)
    return ResolverConfig(
        module_globs=options.modules,
        root=options.root,
        alias_prefixes=options.alias_prefixes,
        exclude=options.exclude,
        extend_exclude=options.extend_exclude or (),
        case_sensitive=options.case_sensitive if options.case_sensitive is not None else True,
        dot=bool(options.dot),
        max_workers=options.max_workers,
        **extra,
    )


def _configured_resources(resolver: ModuleGlobResolver) -> Iterator[Path]:
    # A generator, so the resource map is read after before-compile has run.
    yield from resolver.resources


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the globdeps CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)
    _setup_logging(options.verbose)

    if options.version:
        try:
            version = importlib.metadata.version("globdeps")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    try:
        config_path = find_config_file(Path.cwd())
        if config_path:
            log.info("Using config file %s", config_path)
            merge_cli_with_config(options, load_config(config_path), explicit_flags)

        config = _resolver_config(options)
        if not config.module_globs:
            print(
                "Error: No module globs configured. Use --glob MODULE=PATTERN or a"
                " [modules] table in globdeps.toml. Use --help for more options.",
                file=sys.stderr,
            )
            return 1

        resolver = ModuleGlobResolver(config)
        build = BuildPass()
        resolver.apply(build)
        if options.resources:
            results = build.run(Path(r).resolve() for r in options.resources)
        else:
            results = build.run(_configured_resources(resolver))
    except GlobDepsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    for resource, dependencies in results.items():
        print(_display_path(resource, resolver.root))
        for dependency in dependencies:
            print(f"  {dependency}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
