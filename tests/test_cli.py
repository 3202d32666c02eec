"""
Unit tests for CLI functionality.

Tests the pawn-context command-line interface commands: parse, resolve,
init and status.
"""

import json
import os
import pytest
import tempfile
import shutil
from pathlib import Path
from click.testing import CliRunner

from pawn_context import __version__
from pawn_context.cli import main
from core.models.config import CompilerSettings, GlobalSettings
from pawn_context.cli import _build_settings


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Keep the caller's environment out of the commands"""
    for name in list(os.environ):
        if name.startswith("PAWN_CONTEXT_"):
            monkeypatch.delenv(name)


class TestUtilityFunctions:
    """Test CLI utility functions"""

    def test_build_settings_overrides(self):
        settings = _build_settings(
            GlobalSettings(_env_file=None), Path("/opt/pawncc"), ("-d3",)
        )

        assert settings.path == Path("/opt/pawncc")
        assert settings.options == ["-d3"]

    def test_build_settings_keeps_defaults(self):
        settings = _build_settings(GlobalSettings(_env_file=None), None, ())

        assert settings == CompilerSettings()


class TestCommands:
    """Test CLI commands"""

    def setup_method(self):
        """Setup test environment"""
        self.runner = CliRunner()
        self.temp_dir = tempfile.mkdtemp()
        self.workspace = Path(self.temp_dir) / "gamemode"
        self.workspace.mkdir()
        (self.workspace / "main.pwn").write_text("main() {}\n")

    def teardown_method(self):
        """Cleanup test environment"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_version(self):
        result = self.runner.invoke(main, ['--version'])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_parse_without_compiler(self):
        """parse fails early when pawncc is missing"""
        result = self.runner.invoke(main, ['parse', str(self.workspace / "main.pwn")])

        assert result.exit_code == 1
        assert "Compiler not found" in result.output

    def test_resolve_main_file(self):
        """A workspace main file belongs to the workspace"""
        result = self.runner.invoke(main, [
            'resolve', str(self.workspace / "main.pwn"),
            '--workspace', str(self.workspace)
        ])

        assert result.exit_code == 0
        assert "(workspace)" in result.output

    def test_resolve_outside_workspace(self):
        loose = Path(self.temp_dir) / "loose.pwn"
        result = self.runner.invoke(main, [
            'resolve', str(loose),
            '--workspace', str(self.workspace)
        ])

        assert result.exit_code == 0
        assert f"{loose.absolute()} (standalone)" in result.output

    def test_init_writes_config(self, monkeypatch):
        monkeypatch.chdir(self.workspace)
        result = self.runner.invoke(main, ['init', '--option=-d3'])

        assert result.exit_code == 0
        config_file = self.workspace / ".pawn-context" / "config.json"
        assert json.loads(config_file.read_text(encoding="utf-8")) == {
            "options": ["-d3"],
            "main_file": "main.pwn"
        }

    def test_init_existing_requires_force(self, monkeypatch):
        config_file = self.workspace / ".pawn-context" / "config.json"
        config_file.parent.mkdir()
        config_file.write_text("{}")

        monkeypatch.chdir(self.workspace)
        result = self.runner.invoke(main, ['init'])

        assert result.exit_code == 0
        assert "already initialized" in result.output
        assert config_file.read_text() == "{}"

    def test_status(self, monkeypatch):
        monkeypatch.chdir(self.workspace)
        result = self.runner.invoke(main, ['status'])

        assert result.exit_code == 0
        assert "Not configured" in result.output
        assert "main.pwn" in result.output
