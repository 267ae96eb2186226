"""
Tests for the click CLI — invoked through CliRunner against a throwaway HOME.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from termsetup import __version__
from termsetup.core.services.packages import Platform
from termsetup.main import cli


@pytest.fixture
def run(home: Path):
    """Invoke the CLI with HOME pointing at the throwaway home."""
    runner = CliRunner()
    env = {"HOME": str(home), "ZSH_CUSTOM": "", "TERMSETUP_CONFIG": "", "SHELL": "/bin/bash"}

    def invoke(*args: str):
        return runner.invoke(cli, list(args), obj={}, env=env)

    return invoke


class TestCliBasics:
    def test_help(self, run):
        result = run("--help")
        assert result.exit_code == 0
        for command in ("install", "status", "plugins", "zshrc"):
            assert command in result.output

    def test_version(self, run):
        result = run("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config(self, run, tmp_path: Path):
        result = run("--config", str(tmp_path / "nope.yml"), "status")
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestZshrcCommands:
    def test_patch_creates_file(self, run, home: Path):
        result = run("zshrc", "patch", "--no-prompt")
        assert result.exit_code == 0, result.output
        text = (home / ".zshrc").read_text()
        assert "plugins=(git zsh-autosuggestions" in text
        assert "starship" not in text

    def test_patch_twice_is_noop(self, run, home: Path):
        run("zshrc", "patch", "--no-prompt")
        result = run("zshrc", "patch", "--no-prompt")
        assert result.exit_code == 0
        assert "already up to date" in result.output

    def test_patch_dry_run_json(self, run, home: Path):
        target = home / "other.zshrc"
        target.write_text("plugins=(git)\n")
        result = run("zshrc", "patch", "--file", str(target), "--no-prompt", "--dry-run", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["changed"] is True
        assert "zsh-autocomplete" in data["added_plugins"]
        assert target.read_text() == "plugins=(git)\n"

    def test_patch_malformed(self, run, home: Path):
        (home / ".zshrc").write_text("plugins=(git\n")
        result = run("zshrc", "patch", "--no-prompt")
        assert result.exit_code == 1
        assert "❌" in result.output
        assert (home / ".zshrc").read_text() == "plugins=(git\n"

    def test_show(self, run, home: Path):
        (home / ".zshrc").write_text("# hi\nplugins=(git zsh-autocomplete)\n")
        result = run("zshrc", "show", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["plugins"] == ["git", "zsh-autocomplete"]
        assert data["line"] == 2
        assert data["missing_plugins"] == ["zsh-autosuggestions", "zsh-syntax-highlighting"]

    def test_show_missing_file(self, run):
        result = run("zshrc", "show")
        assert result.exit_code == 1

    def test_show_undecodable_file(self, run, home: Path):
        (home / ".zshrc").write_bytes(b"plugins=(git)\n\xff\xfe\n")
        result = run("zshrc", "show")
        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "Cannot read" in result.output


class TestPluginsCommand:
    def test_sync_rejects_stray_directory(self, run, home: Path):
        stray = home / ".oh-my-zsh" / "custom" / "plugins" / "zsh-autosuggestions"
        stray.mkdir(parents=True)
        (stray / "README").write_text("not a checkout")
        result = run("plugins", "sync", "--dry-run", "--json")
        assert result.exit_code == 1
        assert json.loads(result.output)["repo"] == "zsh-autosuggestions"

    def test_sync_dry_run(self, run):
        result = run("plugins", "sync", "--dry-run", "--json")
        assert result.exit_code == 0
        outcomes = json.loads(result.output)
        assert [o["action"] for o in outcomes] == ["skipped"] * 3
        assert "[dry-run]" in outcomes[0]["output"]


class TestStatusCommand:
    def test_json(self, run, home: Path):
        result = run("status", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["complete"] is False
        assert data["zshrc"]["exists"] is False
        assert data["login_shell"] == "/bin/bash"

    def test_human(self, run):
        result = run("status")
        assert result.exit_code == 0
        assert "Plugins:" in result.output

    def test_undecodable_zshrc(self, run, home: Path):
        (home / ".zshrc").write_bytes(b"plugins=(git)\n\xff\xfe\n")
        result = run("status")
        assert result.exit_code == 0
        assert "Cannot read" in result.output

        data = json.loads(run("status", "--json").output)
        assert "Cannot read" in data["zshrc"]["error"]


class TestInstallCommand:
    def test_dry_run_writes_nothing(self, run, home: Path):
        result = run("install", "--dry-run", "--skip-packages")
        assert result.exit_code == 0, result.output
        assert "would become" in result.output
        assert "plugins=(git zsh-autosuggestions zsh-autocomplete zsh-syntax-highlighting)" in result.output
        assert not (home / ".zshrc").exists()
        assert not (home / ".oh-my-zsh").exists()

    def test_default_command_is_install(self, run, home: Path):
        with patch("termsetup.core.use_cases.provision.detect_platform", return_value=Platform.UNSUPPORTED):
            result = run()
        assert result.exit_code == 1
        assert "Unsupported OS" in result.output

    def test_unsupported_json(self, run, home: Path):
        with patch("termsetup.core.use_cases.provision.detect_platform", return_value=Platform.UNSUPPORTED):
            result = run("install", "--json")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["ok"] is False
        assert not (home / ".zshrc").exists()
