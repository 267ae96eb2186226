"""
Default shell — offer to make zsh the login shell.

The yes/no decision is injected so tests (and ``--yes``) can answer
without a terminal. ``prompt_yes_no`` answers "no" whenever there is
no interactive stdin.
"""

from __future__ import annotations

import logging
import shutil
import sys
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path

import click

from termsetup.core.models.action import Action
from termsetup.core.models.settings import Settings
from termsetup.core.services.packages import Platform
from termsetup.core.services.runner import CommandRunner

logger = logging.getLogger(__name__)

Decision = Callable[[str], bool]

QUESTION = "Set zsh as your default shell?"


class ShellChange(StrEnum):
    UNAVAILABLE = "unavailable"
    ALREADY_SET = "already_set"
    SKIPPED = "skipped"
    DECLINED = "declined"
    CHANGED = "changed"
    FAILED = "failed"


def prompt_yes_no(question: str) -> bool:
    """Ask on the terminal; default and non-interactive answer is no."""
    if not sys.stdin or not sys.stdin.isatty():
        logger.info("stdin is not a terminal; not asking %r", question)
        return False
    try:
        return click.confirm(question, default=False)
    except (click.Abort, EOFError):
        return False


def always_yes(question: str) -> bool:
    return True


def _listed_in(shells_file: Path, zsh_path: str) -> bool:
    try:
        lines = shells_file.read_text(encoding="utf-8").splitlines()
    except OSError:
        return False
    return zsh_path in (line.strip() for line in lines)


def offer_default_shell(
    runner: CommandRunner,
    settings: Settings,
    platform: Platform,
    decide: Decision,
    current_shell: str | None,
    zsh_path: str | None = None,
) -> ShellChange:
    """Change the login shell to zsh if the user agrees.

    A failing ``chsh`` is a warning with the manual command, not an error.
    """
    zsh_path = zsh_path or shutil.which("zsh")
    if not zsh_path:
        logger.info("zsh not on PATH; not offering a shell change")
        return ShellChange.UNAVAILABLE

    if current_shell == zsh_path:
        runner.notify("stage", "Default shell is already zsh.")
        return ShellChange.ALREADY_SET

    if not decide(QUESTION):
        runner.warn("Skipping default shell change.")
        return ShellChange.DECLINED

    runner.notify("stage", f"Setting default shell to {zsh_path}")

    if platform is Platform.MACOS and not _listed_in(settings.shells_file, zsh_path):
        runner.warn(f"{zsh_path} not found in {settings.shells_file}; adding it (requires sudo).")
        runner.run_optional(
            Action(
                id="register-shell",
                name=f"add {zsh_path} to {settings.shells_file}",
                adapter="shell",
                params={
                    "argv": ["tee", "-a", str(settings.shells_file)],
                    "input": zsh_path + "\n",
                    "sudo": True,
                },
            )
        )

    receipt = runner.run_optional(
        Action(
            id="chsh",
            name="chsh",
            adapter="shell",
            params={"argv": ["chsh", "-s", zsh_path], "stream": True},
        ),
        warning=f"chsh failed. You may need to run it manually: chsh -s {zsh_path}",
    )
    return ShellChange.FAILED if receipt.failed else ShellChange.CHANGED
