"""
Configuration loader — builds the Settings for one run.

Defaults are derived from the environment (``HOME``, ``ZSH_CUSTOM``)
exactly once, here. An optional YAML file can override any Settings
field; it is looked up at ``$TERMSETUP_CONFIG`` or
``~/.config/termsetup/config.yml``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from termsetup.core.errors import ProvisionError
from termsetup.core.models.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TERMSETUP_CONFIG"
DEFAULT_CONFIG_FILE = Path(".config") / "termsetup" / "config.yml"

_PATH_KEYS = ("zsh_dir", "zsh_custom", "zshrc", "shells_file")


class ConfigError(ProvisionError):
    """Raised when the configuration file is invalid or unreadable."""


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Where the override file lives (it does not have to exist)."""
    env = os.environ if environ is None else environ
    if env.get(CONFIG_ENV_VAR):
        return Path(env[CONFIG_ENV_VAR])
    return _home(env) / DEFAULT_CONFIG_FILE


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build Settings from the environment plus the optional YAML file.

    Args:
        path: Explicit config file. Must exist when given.
        environ: Environment mapping (default: ``os.environ``).

    Raises:
        ConfigError: If the file is missing (explicit path only),
            unreadable, not YAML, or fails validation.
    """
    env = os.environ if environ is None else environ
    home = _home(env)

    explicit = path is not None
    if path is None:
        path = default_config_path(env)

    overrides: dict = {}
    if path.is_file():
        overrides = _read_overrides(path, home)
    elif explicit:
        raise ConfigError(f"Config file not found: {path}")

    zsh_custom = overrides.pop("zsh_custom", None)
    if zsh_custom is None and env.get("ZSH_CUSTOM"):
        zsh_custom = _expand(env["ZSH_CUSTOM"], home)

    try:
        settings = Settings.for_home(home, zsh_custom=zsh_custom, **overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.debug(
        "Settings: zshrc=%s zsh_custom=%s plugins=%s",
        settings.zshrc, settings.zsh_custom, settings.required_plugin_names,
    )
    return settings


def _read_overrides(path: Path, home: Path) -> dict:
    logger.debug("Loading config overrides from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    unknown = set(data) - set(Settings.model_fields) - {"home"}
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(sorted(unknown))}")
    if "home" in data:
        raise ConfigError(f"'home' cannot be overridden in {path}; set HOME instead")

    for key in _PATH_KEYS:
        if isinstance(data.get(key), str):
            data[key] = _expand(data[key], home)
    return data


def _home(env: Mapping[str, str]) -> Path:
    return Path(env["HOME"]) if env.get("HOME") else Path.home()


def _expand(value: str, home: Path) -> Path:
    """Expand a leading ``~`` or ``$HOME`` against ``home``."""
    for prefix in ("~/", "$HOME/", "${HOME}/"):
        if value.startswith(prefix):
            return home / value[len(prefix):]
    if value in ("~", "$HOME", "${HOME}"):
        return home
    return Path(value)
