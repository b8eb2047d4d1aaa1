"""
Target enumeration — which targets a run operates on.

A target is defined either by ``<dir>/<name>.json`` (a command set) or
by a bare ``<dir>/<name>/`` script directory. When both exist the JSON
definition wins, and the script directory is still used for any
operation whose template is empty.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pkgctl.core.config.loader import (
    COMMAND_SET_SUFFIX,
    PINNED_VERSIONS_FILE,
    ConfigError,
    load_command_set,
)
from pkgctl.core.models.command_set import NamedCommandSet

logger = logging.getLogger(__name__)


def load_target(config_dir: Path, name: str) -> NamedCommandSet:
    """Load a single named target.

    Raises:
        ConfigError: If neither ``<name>.json`` nor ``<name>/`` exists.
    """
    json_path = config_dir / f"{name}{COMMAND_SET_SUFFIX}"
    if json_path.is_file():
        return NamedCommandSet(name=name, command_set=load_command_set(json_path))

    script_dir = config_dir / name
    if script_dir.is_dir():
        return NamedCommandSet(name=name)

    raise ConfigError(f"file {str(json_path)!r} or directory {str(script_dir)!r} must exist")


def discover_targets(config_dir: Path) -> list[NamedCommandSet]:
    """Every target in the configuration directory, sorted by name.

    Names defined by both a JSON file and a directory appear once, with
    the JSON command set.

    Raises:
        ConfigError: If the directory cannot be listed or a file is invalid.
    """
    try:
        entries = sorted(config_dir.iterdir())
    except OSError as e:
        raise ConfigError(f"Cannot list {config_dir}: {e}") from e

    from_files: dict[str, NamedCommandSet] = {}
    from_dirs: dict[str, NamedCommandSet] = {}

    for entry in entries:
        if entry.is_dir():
            from_dirs[entry.name] = NamedCommandSet(name=entry.name)
        elif (
            entry.is_file()
            and entry.name.endswith(COMMAND_SET_SUFFIX)
            and entry.name != PINNED_VERSIONS_FILE
        ):
            name = entry.name[: -len(COMMAND_SET_SUFFIX)]
            from_files[name] = NamedCommandSet(name=name, command_set=load_command_set(entry))

    merged = {**from_dirs, **from_files}
    targets = [merged[name] for name in sorted(merged)]
    logger.info("Discovered %d target(s) in %s", len(targets), config_dir)
    return targets


def enumerate_targets(config_dir: Path, target: str | None = None) -> list[NamedCommandSet]:
    """A single named target, or all targets when ``target`` is empty."""
    if target:
        return [load_target(config_dir, target)]
    return discover_targets(config_dir)
