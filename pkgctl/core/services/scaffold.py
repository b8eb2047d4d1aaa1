"""
Scaffold — create the files for a new target.

Creates ``<dir>/<name>.json`` with four empty templates and a script
directory with one stub per operation. Existing files are left alone.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import sys
from pathlib import Path

from pkgctl.core.config.loader import COMMAND_SET_SUFFIX, ConfigError
from pkgctl.core.models.command_set import CommandSet, Operation

logger = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/bash"


def script_extension() -> str:
    return ".ps1" if sys.platform.startswith("win") else ".sh"


def _create_exclusive(path: Path, content: str, executable: bool = False) -> bool:
    """Write ``content`` to a new file. Returns False if it already exists."""
    try:
        with path.open("x", encoding="utf-8") as f:
            f.write(content)
    except FileExistsError:
        logger.debug("Keeping existing %s", path)
        return False
    if executable:
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return True


def scaffold_target(config_dir: Path, name: str) -> list[Path]:
    """Create the command set file and script stubs for ``name``.

    Returns:
        The paths that were created (existing ones are skipped).

    Raises:
        ConfigError: If the name is not a plain path segment or the
            files cannot be created.
    """
    if not name or name != name.strip() or Path(name).name != name or name in (".", ".."):
        raise ConfigError(f"invalid target name: {name!r}")

    created: list[Path] = []
    try:
        config_dir.mkdir(parents=True, exist_ok=True)

        json_path = config_dir / f"{name}{COMMAND_SET_SUFFIX}"
        body = json.dumps(CommandSet().model_dump(), indent=4) + "\n"
        if _create_exclusive(json_path, body):
            created.append(json_path)

        script_dir = config_dir / name
        if not script_dir.is_dir():
            script_dir.mkdir()
            created.append(script_dir)

        shebang = f"#!{os.environ.get('SHELL') or DEFAULT_SHELL}\n"
        for operation in Operation:
            script = script_dir / f"{operation.value}{script_extension()}"
            if _create_exclusive(script, shebang, executable=True):
                created.append(script)
    except OSError as e:
        raise ConfigError(f"Cannot scaffold {name!r} in {config_dir}: {e}") from e

    logger.info("Scaffolded %s: %d path(s) created", name, len(created))
    return created
