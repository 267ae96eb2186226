"""
Tests for settings defaults and the YAML override loader.
"""

from pathlib import Path

import pytest

from termsetup.core.config.loader import ConfigError, default_config_path, load_settings
from termsetup.core.models.settings import PluginRepo, Settings


def _env(home: Path, **extra) -> dict:
    return {"HOME": str(home), **extra}


class TestSettingsDefaults:
    def test_for_home(self, home: Path):
        s = Settings.for_home(home)
        assert s.zsh_dir == home / ".oh-my-zsh"
        assert s.zsh_custom == home / ".oh-my-zsh" / "custom"
        assert s.plugins_dir == home / ".oh-my-zsh" / "custom" / "plugins"
        assert s.zshrc == home / ".zshrc"
        assert s.required_plugin_names == [
            "zsh-autosuggestions", "zsh-autocomplete", "zsh-syntax-highlighting",
        ]

    def test_root_variable_relative_to_home(self, home: Path):
        assert Settings.for_home(home).root_variable_value == '"$HOME/.oh-my-zsh"'

    def test_root_variable_outside_home(self, home: Path, tmp_path: Path):
        s = Settings.for_home(home, zsh_dir=tmp_path / "omz")
        assert str(tmp_path / "omz") in s.root_variable_value

    def test_plugin_name_single_token(self):
        with pytest.raises(ValueError):
            PluginRepo(name="two words", url="https://example.invalid/x.git")


class TestLoadSettings:
    def test_defaults_without_file(self, home: Path):
        s = load_settings(environ=_env(home))
        assert s.home == home
        assert s.zshrc == home / ".zshrc"

    def test_zsh_custom_env(self, home: Path, tmp_path: Path):
        custom = tmp_path / "custom"
        s = load_settings(environ=_env(home, ZSH_CUSTOM=str(custom)))
        assert s.plugins_dir == custom / "plugins"

    def test_default_location(self, home: Path):
        assert default_config_path(_env(home)) == home / ".config" / "termsetup" / "config.yml"

    def test_env_var_location(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "elsewhere.yml"
        assert default_config_path(_env(home, TERMSETUP_CONFIG=str(cfg))) == cfg

    def test_yaml_overrides(self, home: Path):
        cfg = home / ".config" / "termsetup" / "config.yml"
        cfg.parent.mkdir(parents=True)
        cfg.write_text(
            "zshrc: ~/dotfiles/zshrc\n"
            "plugins:\n"
            "  - name: zsh-completions\n"
            "    url: https://github.com/zsh-users/zsh-completions.git\n"
        )
        s = load_settings(environ=_env(home))
        assert s.zshrc == home / "dotfiles" / "zshrc"
        assert s.required_plugin_names == ["zsh-completions"]

    def test_yaml_zsh_custom_beats_env(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("zsh_custom: $HOME/zc\n")
        s = load_settings(cfg, environ=_env(home, ZSH_CUSTOM=str(tmp_path / "ignored")))
        assert s.zsh_custom == home / "zc"

    def test_empty_file(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("")
        assert load_settings(cfg, environ=_env(home)).zshrc == home / ".zshrc"

    def test_explicit_missing_file(self, home: Path, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yml", environ=_env(home))

    def test_invalid_yaml(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("plugins: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(cfg, environ=_env(home))

    def test_not_a_mapping(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(cfg, environ=_env(home))

    def test_unknown_key(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("colour: blue\n")
        with pytest.raises(ConfigError, match="colour"):
            load_settings(cfg, environ=_env(home))

    def test_home_not_overridable(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("home: /elsewhere\n")
        with pytest.raises(ConfigError, match="HOME"):
            load_settings(cfg, environ=_env(home))

    def test_validation_error(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text("plugins:\n  - name: bad name\n    url: x\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(cfg, environ=_env(home))

    def test_marker_block_without_marker(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text(
            "marker_blocks:\n"
            "  - name: greet\n"
            "    marker: ZZZ\n"
            "    body: \"# hi\\n\"\n"
        )
        with pytest.raises(ConfigError, match="does not occur"):
            load_settings(cfg, environ=_env(home))

    def test_custom_marker_block(self, home: Path, tmp_path: Path):
        cfg = tmp_path / "config.yml"
        cfg.write_text(
            "marker_blocks:\n"
            "  - name: direnv\n"
            "    marker: direnv hook zsh\n"
            "    body: 'eval \"$(direnv hook zsh)\"'\n"
        )
        s = load_settings(cfg, environ=_env(home))
        assert s.marker_blocks[0].body == 'eval "$(direnv hook zsh)"\n'
