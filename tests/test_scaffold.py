"""
Tests for scaffolding a new target.
"""

import json
import os
from pathlib import Path

import pytest

from pkgctl.core.config.loader import ConfigError, load_command_set
from pkgctl.core.services.scaffold import script_extension, scaffold_target


class TestScaffold:
    def test_creates_everything(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/zsh")
        created = scaffold_target(tmp_path, "gh")
        ext = script_extension()

        data = json.loads((tmp_path / "gh.json").read_text())
        assert data == {"ver": [], "checklatest": [], "install": [], "update": []}
        assert load_command_set(tmp_path / "gh.json").is_zero
        assert (tmp_path / "gh.json").read_text().startswith('{\n    "ver"')

        for op in ("ver", "checklatest", "install", "update"):
            script = tmp_path / "gh" / f"{op}{ext}"
            assert script.read_text() == "#!/bin/zsh\n"
            assert script in created
            if os.name == "posix":
                assert os.access(script, os.X_OK)

    def test_default_shell(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("SHELL", raising=False)
        scaffold_target(tmp_path, "gh")
        script = tmp_path / "gh" / f"ver{script_extension()}"
        assert script.read_text() == "#!/bin/bash\n"

    def test_existing_files_kept(self, tmp_path: Path):
        (tmp_path / "gh.json").write_text('{"ver": ["gh", "--version"]}')
        (tmp_path / "gh").mkdir()
        existing = tmp_path / "gh" / f"ver{script_extension()}"
        existing.write_text("echo 1\n")

        created = scaffold_target(tmp_path, "gh")

        assert (tmp_path / "gh.json").read_text() == '{"ver": ["gh", "--version"]}'
        assert existing.read_text() == "echo 1\n"
        assert len(created) == 3

    def test_idempotent(self, tmp_path: Path):
        scaffold_target(tmp_path, "gh")
        assert scaffold_target(tmp_path, "gh") == []

    @pytest.mark.parametrize("name", ["", " gh", "a/b", "..", "."])
    def test_invalid_names(self, tmp_path: Path, name: str):
        with pytest.raises(ConfigError):
            scaffold_target(tmp_path, name)
