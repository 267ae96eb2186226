"""
Platform detection and prerequisite packages.

Installs zsh, git, curl and the Starship prompt with the host package
manager. Only macOS (Homebrew) and Debian-family Linux (apt) are
supported; anything else is a fatal error asking for a manual install.
"""

from __future__ import annotations

import logging
import platform as _platform
import shutil
from enum import StrEnum
from pathlib import Path

from termsetup.core.errors import ProvisionError
from termsetup.core.models.action import Action
from termsetup.core.models.settings import Settings
from termsetup.core.services.runner import CommandRunner

logger = logging.getLogger(__name__)

DEBIAN_MARKER = Path("/etc/debian_version")
BASE_PACKAGES = ("zsh", "git", "curl")
PROMPT_PACKAGE = "starship"


class Platform(StrEnum):
    MACOS = "macos"
    DEBIAN = "debian"
    UNSUPPORTED = "unsupported"


class UnsupportedPlatform(ProvisionError):
    def __init__(self, detail: str = ""):
        hint = detail + ". " if detail else ""
        super().__init__(
            f"Unsupported OS. {hint}Please install zsh, git, curl, and starship "
            "manually and re-run."
        )


class MissingPrerequisite(ProvisionError):
    """A package manager or helper the platform needs is not on PATH."""


def detect_platform(system: str | None = None, debian_marker: Path = DEBIAN_MARKER) -> Platform:
    """Classify the host into exactly one Platform."""
    system = system if system is not None else _platform.system()
    if system == "Darwin":
        return Platform.MACOS
    if system == "Linux" and debian_marker.exists():
        return Platform.DEBIAN
    return Platform.UNSUPPORTED


def have(command: str) -> bool:
    return shutil.which(command) is not None


# ── Action builders ─────────────────────────────────────────────


def _shell(action_id: str, argv: list[str], name: str = "", **params) -> Action:
    return Action(
        id=action_id,
        name=name,
        adapter="shell",
        params={"argv": argv, "stream": True, **params},
    )


def prompt_installer_action(settings: Settings) -> Action:
    """Vendor install script for Starship, non-interactive (``-y``)."""
    return Action(
        id="starship-install-script",
        name="starship install script",
        adapter="shell",
        params={
            "command": f"curl -fsSL {settings.prompt_installer_url} | sh -s -- -y",
            "stream": True,
        },
    )


def install_plan(platform: Platform, settings: Settings) -> list[tuple[str, Action, Action | None]]:
    """The ordered ``(policy, action, fallback)`` steps for ``platform``.

    ``policy`` is ``"required"``, ``"optional"`` or ``"fallback"``; only
    ``"fallback"`` steps carry a fallback action, and they always do.
    """
    if platform is Platform.MACOS:
        return [
            ("required", _shell("brew-update", ["brew", "update"], "brew update"), None),
            (
                "optional",
                _shell(
                    "brew-install",
                    ["brew", "install", *BASE_PACKAGES, PROMPT_PACKAGE],
                    "brew install",
                ),
                None,
            ),
        ]
    if platform is Platform.DEBIAN:
        return [
            (
                "required",
                _shell("apt-update", ["apt-get", "update", "-y"], "apt-get update", sudo=True),
                None,
            ),
            (
                "required",
                _shell(
                    "apt-install",
                    ["apt-get", "install", "-y", *BASE_PACKAGES],
                    "apt-get install",
                    sudo=True,
                ),
                None,
            ),
            (
                "fallback",
                _shell(
                    "apt-install-starship",
                    ["apt-get", "install", "-y", PROMPT_PACKAGE],
                    "apt-get install starship",
                    sudo=True,
                ),
                prompt_installer_action(settings),
            ),
        ]
    raise UnsupportedPlatform()


def check_prerequisites(platform: Platform, is_root: bool) -> None:
    """Fail fast when the package manager itself is missing."""
    if platform is Platform.MACOS and not have("brew"):
        raise MissingPrerequisite("Homebrew not found. Install it first: https://brew.sh/")
    if platform is Platform.DEBIAN:
        if not have("apt-get"):
            raise MissingPrerequisite("apt-get not found on this Debian-family system.")
        if not is_root and not have("sudo"):
            raise MissingPrerequisite("sudo is required to install packages as a non-root user.")


def install_packages(
    runner: CommandRunner,
    platform: Platform,
    settings: Settings,
    is_root: bool = False,
) -> None:
    """Install the prerequisite packages for ``platform``.

    Raises:
        UnsupportedPlatform: Host is neither macOS nor Debian-family.
        MissingPrerequisite: The package manager is not available.
        StepFailed: A required install step failed.
    """
    if platform is Platform.UNSUPPORTED:
        raise UnsupportedPlatform()
    if not runner.registry.dry_run:
        check_prerequisites(platform, is_root)

    manager = "brew" if platform is Platform.MACOS else "apt"
    runner.notify("stage", f"Installing packages via {manager}...")

    for policy, action, fallback in install_plan(platform, settings):
        if fallback is not None:
            runner.run_with_fallback(
                action,
                fallback,
                warning=(
                    f"{PROMPT_PACKAGE} not available via apt on this system; "
                    "installing via official script..."
                ),
            )
        elif policy == "optional":
            runner.run_optional(action)
        else:
            runner.run_required(action)
