"""
Shared test fixtures and configuration.
"""

import json
import stat
import sys
from pathlib import Path

import pytest

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="uses /bin/sh scripts")


def write_script(config_dir: Path, target: str, name: str, body: str) -> Path:
    """Create an executable ``/bin/sh`` script under ``<config_dir>/<target>/``."""
    script_dir = config_dir / target
    script_dir.mkdir(parents=True, exist_ok=True)
    path = script_dir / name
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def write_command_set(config_dir: Path, target: str, data: dict) -> Path:
    """Create ``<config_dir>/<target>.json``."""
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / f"{target}.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Return an empty configuration directory."""
    d = tmp_path / "config"
    d.mkdir()
    return d
