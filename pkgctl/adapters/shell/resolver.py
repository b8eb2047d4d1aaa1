"""
Command resolver — turn (target, operation) into an argument vector.

Template mode: the command set has a non-empty template for the
operation; placeholders are substituted and the result is returned
without touching the filesystem.

Discovery mode: the template is empty; the first existing file among
``<config_dir>/<target>/<operation><ext>`` is returned, trying the
extensions in ``SCRIPT_EXTENSIONS`` order on every platform.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pkgctl.adapters.shell.placeholders import placeholder_values, substitute
from pkgctl.core.models.command_set import NamedCommandSet, Operation

logger = logging.getLogger(__name__)

SCRIPT_EXTENSIONS = ("", ".sh", ".exe", ".bat", ".ps1")


class CommandNotFoundError(Exception):
    """Raised when neither a template nor a script exists for an operation."""

    def __init__(self, target: str, operation: Operation):
        super().__init__("command not found")
        self.target = target
        self.operation = operation


def script_candidates(config_dir: Path, target: str, operation: Operation) -> list[Path]:
    """Paths checked in discovery mode, in precedence order."""
    base = config_dir / target
    return [base / f"{operation.value}{ext}" for ext in SCRIPT_EXTENSIONS]


def discover_script(config_dir: Path, target: str, operation: Operation) -> Path | None:
    """Return the first existing script for an operation, or None."""
    for candidate in script_candidates(config_dir, target, operation):
        if candidate.exists():
            return candidate
    return None


def resolve_command(
    config_dir: Path,
    named_set: NamedCommandSet,
    operation: Operation,
    version: str = "",
) -> list[str]:
    """Resolve the argument vector for one operation of one target.

    Raises:
        CommandNotFoundError: no template and no discoverable script.
    """
    template = named_set.command_set.select(operation)
    if template:
        args = substitute(template, placeholder_values(version))
        logger.info("%s:%s → template %s", named_set.name, operation, args)
        return args

    script = discover_script(config_dir, named_set.name, operation)
    if script is None:
        raise CommandNotFoundError(named_set.name, operation)
    logger.info("%s:%s → script %s", named_set.name, operation, script)
    return [str(script)]
