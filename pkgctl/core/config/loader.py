"""
Configuration loader — reads command sets and pinned versions.

Layout of a configuration directory:

    <dir>/<target>.json   command set (templates per operation)
    <dir>/<target>/       scripts: ver, checklatest, install, update
    <dir>/.pin.json       {"<target>": "<pinned version>"}

Everything is validated with Pydantic and surfaced as ``ConfigError``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import click
from pydantic import TypeAdapter, ValidationError

from pkgctl.core.models.command_set import CommandSet

logger = logging.getLogger(__name__)

APP_NAME = "pkgctl"
COMMAND_SET_SUFFIX = ".json"
PINNED_VERSIONS_FILE = ".pin.json"
CONFIG_DIR_ENV = "PKGCTL_DIR"

_PINS = TypeAdapter(dict[str, str])


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


class PinValidationError(ConfigError):
    """Raised when a pinned entry carries leading or trailing whitespace."""


def resolve_config_dir(explicit: str | Path | None = None) -> Path:
    """Pick the configuration directory.

    Precedence: explicit argument > ``PKGCTL_DIR`` > the platform's
    per-user config directory (``click.get_app_dir``).
    """
    if explicit:
        return Path(explicit)
    from_env = os.environ.get(CONFIG_DIR_ENV)
    if from_env:
        return Path(from_env)
    return Path(click.get_app_dir(APP_NAME))


def _read_json(path: Path) -> object:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def load_command_set(path: Path) -> CommandSet:
    """Load and validate one ``<target>.json`` file.

    Raises:
        ConfigError: If the file cannot be read or does not match the schema.
    """
    logger.debug("Loading command set from %s", path)
    data = _read_json(path)
    try:
        return CommandSet.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid command set in {path}: {e}") from e


def validate_pinned_versions(pins: dict[str, str]) -> None:
    """Reject names or versions with surrounding whitespace.

    Raises:
        PinValidationError: On the first offending entry.
    """
    for name, version in pins.items():
        if name != name.strip() or version != version.strip():
            raise PinValidationError(
                f"pinned version {name!r} has space prefix and/or suffix in name or version"
            )


def load_pinned_versions(config_dir: Path) -> dict[str, str]:
    """Load ``.pin.json``. A missing file means no pins.

    Raises:
        ConfigError: If the file exists but is unreadable or malformed.
        PinValidationError: If an entry has stray whitespace.
    """
    path = config_dir / PINNED_VERSIONS_FILE
    if not path.exists():
        logger.debug("No pin file at %s", path)
        return {}

    data = _read_json(path)
    try:
        pins = _PINS.validate_python(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid pinned versions in {path}: {e}") from e

    validate_pinned_versions(pins)
    logger.info("Loaded %d pinned version(s)", len(pins))
    return pins
