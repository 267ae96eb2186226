"""
Oh My Zsh install — run the upstream installer once.

The installer is an opaque external script. It is told not to start
zsh, not to change the login shell and to keep an existing .zshrc;
the login shell is offered separately at the end of the run.
"""

from __future__ import annotations

import logging

from termsetup.core.models.action import Action
from termsetup.core.models.settings import Settings
from termsetup.core.services.runner import CommandRunner

logger = logging.getLogger(__name__)

INSTALLER_ENV = {"RUNZSH": "no", "CHSH": "no", "KEEP_ZSHRC": "yes"}


def framework_installed(settings: Settings) -> bool:
    return settings.zsh_dir.is_dir()


def installer_action(settings: Settings) -> Action:
    return Action(
        id="oh-my-zsh-install",
        name="Oh My Zsh installer",
        adapter="shell",
        params={
            "command": f'sh -c "$(curl -fsSL {settings.framework_installer_url})"',
            "env": {**INSTALLER_ENV, "ZSH": str(settings.zsh_dir)},
            "stream": True,
        },
    )


def install_framework(runner: CommandRunner, settings: Settings) -> bool:
    """Install Oh My Zsh unless ``settings.zsh_dir`` already exists.

    Returns:
        True if the installer ran, False if it was skipped.

    Raises:
        StepFailed: If the installer exits non-zero.
    """
    if framework_installed(settings):
        runner.notify("info", "Oh My Zsh already installed.")
        return False

    runner.run_required(installer_action(settings))
    return True
