"""
Status use case — what is already in place, without changing anything.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field

from termsetup.adapters.vcs.git import is_checkout
from termsetup.core.models.settings import Settings
from termsetup.core.persistence.atomic import read_text_exact
from termsetup.core.services.framework import framework_installed
from termsetup.core.services.packages import Platform, detect_platform
from termsetup.core.services.zshrc import inspect_document


@dataclass
class StatusResult:
    """Snapshot of the host against the desired setup."""

    platform: Platform = Platform.UNSUPPORTED
    framework: bool = False
    commands: dict[str, str | None] = field(default_factory=dict)
    plugins: list[dict] = field(default_factory=list)
    zshrc_exists: bool = False
    zshrc: dict = field(default_factory=dict)
    login_shell: str = ""

    @property
    def complete(self) -> bool:
        """Whether a provisioning run would find nothing to do."""
        markers = self.zshrc.get("markers", {})
        return (
            self.framework
            and all(p["checkout"] for p in self.plugins)
            and self.zshrc_exists
            and self.zshrc.get("root_variable", False)
            and not self.zshrc.get("missing_plugins")
            and all(markers.values())
            and not self.zshrc.get("error")
        )

    def to_dict(self) -> dict:
        return {
            "platform": str(self.platform),
            "framework": self.framework,
            "commands": self.commands,
            "plugins": self.plugins,
            "zshrc": {"exists": self.zshrc_exists, **self.zshrc},
            "login_shell": self.login_shell,
            "complete": self.complete,
        }


def get_status(settings: Settings, platform: Platform | None = None) -> StatusResult:
    result = StatusResult(platform=platform or detect_platform())
    result.framework = framework_installed(settings)
    result.commands = {cmd: shutil.which(cmd) for cmd in ("zsh", "git", "curl", "starship")}
    result.login_shell = os.environ.get("SHELL", "")

    for repo in settings.plugins:
        path = repo.target_dir(settings.plugins_dir)
        result.plugins.append({
            "name": repo.name,
            "path": str(path),
            "exists": path.exists(),
            "checkout": is_checkout(path),
        })

    result.zshrc_exists = settings.zshrc.is_file()
    try:
        text = read_text_exact(settings.zshrc) if result.zshrc_exists else ""
    except (OSError, UnicodeDecodeError) as e:
        result.zshrc = inspect_document("", settings)
        result.zshrc["error"] = f"Cannot read {settings.zshrc}: {e}"
        return result
    result.zshrc = inspect_document(text, settings)
    return result
