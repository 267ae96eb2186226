"""
Settings model — the explicit configuration for one provisioning run.

Built once at startup by ``termsetup.core.config.loader.load_settings``
and passed to every service. Nothing below reads environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

# ── Defaults ────────────────────────────────────────────────────

FRAMEWORK_INSTALLER_URL = (
    "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
)
PROMPT_INSTALLER_URL = "https://starship.rs/install.sh"

BASELINE_PLUGIN = "git"

SYNTAX_HIGHLIGHTING_BLOCK = """\
# Ensure syntax highlighting loads (keep this near the end of ~/.zshrc)
if [ -f "${ZSH_CUSTOM:-$HOME/.oh-my-zsh/custom}/plugins/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh" ]; then
  source "${ZSH_CUSTOM:-$HOME/.oh-my-zsh/custom}/plugins/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh"
fi
"""

STARSHIP_BLOCK = """\
# Starship prompt
if command -v starship >/dev/null 2>&1; then
  eval "$(starship init zsh)"
fi
"""


class PluginRepo(BaseModel):
    """A plugin repository cloned into ``$ZSH_CUSTOM/plugins/<name>``."""

    name: str
    url: str

    @field_validator("name")
    @classmethod
    def _single_token(cls, value: str) -> str:
        if not value or any(ch.isspace() for ch in value) or "/" in value:
            raise ValueError(f"plugin name must be a single path-safe token: {value!r}")
        return value

    def target_dir(self, plugins_dir: Path) -> Path:
        return plugins_dir / self.name


class MarkerBlock(BaseModel):
    """A snippet that must appear at most once in the shell start-up file.

    Presence is detected by ``marker`` alone, so a user-edited copy of
    the block with different comments still counts.
    """

    name: str
    marker: str
    body: str
    needs_command: str | None = None   # skipped when this command is absent

    @field_validator("body")
    @classmethod
    def _terminated(cls, value: str) -> str:
        return value if value.endswith("\n") else value + "\n"

    @model_validator(mode="after")
    def _marker_in_body(self) -> MarkerBlock:
        # presence is detected by the marker, so the block must contain it
        if not self.marker or self.marker not in self.body:
            raise ValueError(f"marker {self.marker!r} does not occur in the body of block {self.name!r}")
        return self


def default_plugins() -> list[PluginRepo]:
    return [
        PluginRepo(
            name="zsh-autosuggestions",
            url="https://github.com/zsh-users/zsh-autosuggestions.git",
        ),
        PluginRepo(
            name="zsh-autocomplete",
            url="https://github.com/marlonrichert/zsh-autocomplete.git",
        ),
        PluginRepo(
            name="zsh-syntax-highlighting",
            url="https://github.com/zsh-users/zsh-syntax-highlighting.git",
        ),
    ]


def default_marker_blocks() -> list[MarkerBlock]:
    """Marker blocks in append priority order (plugins before prompt)."""
    return [
        MarkerBlock(
            name="syntax-highlighting",
            marker="zsh-syntax-highlighting.zsh",
            body=SYNTAX_HIGHLIGHTING_BLOCK,
        ),
        MarkerBlock(
            name="starship",
            marker="starship init zsh",
            body=STARSHIP_BLOCK,
            needs_command="starship",
        ),
    ]


class Settings(BaseModel):
    """Everything a provisioning run needs to know about the host layout."""

    home: Path
    zsh_dir: Path
    zsh_custom: Path
    zshrc: Path
    shells_file: Path = Path("/etc/shells")

    plugins: list[PluginRepo] = Field(default_factory=default_plugins)
    baseline_plugin: str = BASELINE_PLUGIN
    marker_blocks: list[MarkerBlock] = Field(default_factory=default_marker_blocks)

    framework_installer_url: str = FRAMEWORK_INSTALLER_URL
    prompt_installer_url: str = PROMPT_INSTALLER_URL

    @classmethod
    def for_home(cls, home: Path, zsh_custom: Path | None = None, **overrides) -> Settings:
        """Build settings with every path defaulted relative to ``home``."""
        zsh_dir = overrides.pop("zsh_dir", None) or home / ".oh-my-zsh"
        return cls(
            home=home,
            zsh_dir=zsh_dir,
            zsh_custom=zsh_custom or zsh_dir / "custom",
            zshrc=overrides.pop("zshrc", None) or home / ".zshrc",
            **overrides,
        )

    @property
    def plugins_dir(self) -> Path:
        return self.zsh_custom / "plugins"

    @property
    def required_plugin_names(self) -> list[str]:
        return [p.name for p in self.plugins]

    @property
    def root_variable_value(self) -> str:
        """Right-hand side of the ``export ZSH=`` line appended to the rc file."""
        try:
            rel = self.zsh_dir.relative_to(self.home)
        except ValueError:
            return f'"{self.zsh_dir}"'
        return f'"$HOME/{rel.as_posix()}"'
