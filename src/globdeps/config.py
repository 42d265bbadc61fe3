"""
TOML-based config file loading for globdeps.

Searches for `.globdeps.toml`, `globdeps.toml`, or `pyproject.toml [tool.globdeps]`
walking up from the current directory. Config values are merged with CLI flags
using three-way precedence: explicit CLI flags > config file > built-in defaults.

Example::

    root = "."
    module-directories = ["src", "node_modules"]

    [modules]
    widgets = ["assets/*.png", "assets/*.jpg"]
    "./src/theme" = "styles/**/*.css"
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

from globdeps.errors import ConfigError

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

log = logging.getLogger(__name__)


@dataclass
class GlobDepsConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    modules: dict[str, list[str]] | None = None
    root: Path | None = None
    alias_prefixes: list[str] | None = None
    module_directories: list[str] | None = None
    exclude: list[str] | None = None
    extend_exclude: list[str] | None = None
    case_sensitive: bool | None = None
    dot: bool | None = None
    max_workers: int | None = None


# Checked in order in each directory; the nearest directory with a match wins.
_CONFIG_FILENAMES = [".globdeps.toml", "globdeps.toml", "pyproject.toml"]

_VALID_FIELDS = {f.name for f in fields(GlobDepsConfig)}

_LIST_FIELDS = {"alias_prefixes", "module_directories", "exclude", "extend_exclude"}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.globdeps.toml` >
    `globdeps.toml` > `pyproject.toml` (only if it has `[tool.globdeps]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_globdeps_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_globdeps_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.globdeps] section."""
    try:
        data = tomllib.loads(path.read_text())
        return "globdeps" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> GlobDepsConfig:
    """
    Load a `GlobDepsConfig` from a TOML file. Supports both standalone
    `globdeps.toml` / `.globdeps.toml` and `pyproject.toml` (extracts
    `[tool.globdeps]`). A relative `root` is taken relative to the config file.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("globdeps", {})

    config = _parse_config_data(data)
    if config.root is not None and not config.root.is_absolute():
        config.root = config_path.parent / config.root
    return config


def _parse_config_data(data: dict[str, Any]) -> GlobDepsConfig:
    """Parse a TOML dict into GlobDepsConfig, validating value types."""
    mapped: dict[str, Any] = {}
    for key, value in data.items():
        # TOML keys are kebab-case.
        snake_key = key.replace("-", "_")
        if snake_key not in _VALID_FIELDS:
            log.warning("Ignoring unrecognized config key: %s", key)
            continue
        if snake_key == "modules":
            mapped["modules"] = _parse_modules(value)
        elif snake_key == "root":
            mapped["root"] = Path(_expect(key, value, str))
        elif snake_key in _LIST_FIELDS:
            mapped[snake_key] = _parse_string_list(key, value)
        elif snake_key in ("case_sensitive", "dot"):
            mapped[snake_key] = _expect(key, value, bool)
        elif snake_key == "max_workers":
            mapped[snake_key] = _expect(key, value, int)

    return GlobDepsConfig(**mapped)


def _parse_modules(value: Any) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        raise ConfigError("`modules` must be a table of module -> glob(s)")
    modules: dict[str, list[str]] = {}
    for module, globs in cast(dict[str, Any], value).items():
        if isinstance(globs, str):
            modules[module] = [globs]
        else:
            modules[module] = _parse_string_list(f"modules.{module}", globs)
    return modules


def _parse_string_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"`{key}` must be a list of strings")
    return list(cast(list[str], value))


_V = TypeVar("_V")


def _expect(key: str, value: Any, kind: type[_V]) -> _V:
    # bool is a subclass of int; don't accept `true` for an integer setting.
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"`{key}` must be of type {kind.__name__}")
    return value


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: GlobDepsConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    Module globs are combined instead: CLI `--glob` entries are added to the
    config's modules, replacing a module's globs only when both name it.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(GlobDepsConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue

        if cfg_field.name == "modules" and hasattr(cli_opts, "modules"):
            merged = dict(cfg_value)
            merged.update(getattr(cli_opts, "modules"))
            setattr(cli_opts, "modules", merged)
            continue

        # A flag given on the command line keeps its value.
        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
