"""
Provision use case — the full terminal setup, in order.

    packages → Oh My Zsh → plugin repos → ~/.zshrc → login shell

Every step is idempotent, so a failed run is fixed by re-running:
fatal errors stop the sequence and are reported in the result, and
completed steps are left in place.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field

from termsetup.adapters.registry import AdapterRegistry, build_registry
from termsetup.core.errors import ProvisionError
from termsetup.core.models.settings import Settings
from termsetup.core.services.default_shell import (
    Decision,
    ShellChange,
    offer_default_shell,
    prompt_yes_no,
)
from termsetup.core.services.framework import install_framework
from termsetup.core.services.packages import Platform, detect_platform, install_packages
from termsetup.core.services.plugin_sync import SyncOutcome, sync_all
from termsetup.core.services.runner import CommandRunner
from termsetup.core.services.zshrc import PatchResult, patch_file

logger = logging.getLogger(__name__)

NEXT_STEP = "Next: start a new terminal, or run: exec zsh"


@dataclass
class ProvisionResult:
    """What a provisioning run did."""

    platform: Platform | None = None
    dry_run: bool = False
    framework_installed: bool = False
    synced: list[SyncOutcome] = field(default_factory=list)
    patch: PatchResult | None = None
    shell_change: ShellChange | None = None
    warnings: list[str] = field(default_factory=list)
    stages: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {
            "ok": self.ok,
            "dry_run": self.dry_run,
            "platform": str(self.platform) if self.platform else None,
            "framework_installed": self.framework_installed,
            "plugins": [s.to_dict() for s in self.synced],
            "zshrc": self.patch.to_dict() if self.patch else None,
            "shell_change": str(self.shell_change) if self.shell_change else None,
            "warnings": self.warnings,
        }
        if self.error:
            result["error"] = self.error
        return result


def _is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def run_provision(
    settings: Settings,
    registry: AdapterRegistry | None = None,
    decide: Decision | None = None,
    platform: Platform | None = None,
    notify: Callable[[str, str], None] | None = None,
    skip_packages: bool = False,
    skip_shell: bool = False,
    dry_run: bool = False,
    current_shell: str | None = None,
) -> ProvisionResult:
    """Run the full provisioning sequence.

    Args:
        settings: Paths, plugin list and marker blocks for this run.
        registry: Adapter registry (default: shell + git adapters).
        decide: Answers the login-shell question (default: terminal prompt).
        platform: Override host detection.
        notify: ``(level, message)`` callback for stage banners and warnings.
        skip_packages: Do not touch the package manager.
        skip_shell: Never offer the login-shell change.
        dry_run: Validate commands and compute edits without applying them.
        current_shell: Current login shell (default: ``$SHELL``).

    Returns:
        ProvisionResult; ``error`` is set if a fatal step failed.
    """
    result = ProvisionResult(dry_run=dry_run)
    registry = registry or build_registry(dry_run=dry_run)
    if dry_run:
        registry.dry_run = True

    def _notify(level: str, message: str) -> None:
        if level == "stage":
            result.stages.append(message)
        if notify:
            notify(level, message)

    runner = CommandRunner(registry, notify=_notify)
    decide = decide or prompt_yes_no

    try:
        result.platform = platform or detect_platform()
        logger.info("Platform: %s", result.platform)

        _notify("stage", "Installing prerequisites...")
        if skip_packages:
            _notify("info", "Skipping package installation.")
        else:
            install_packages(runner, result.platform, settings, is_root=_is_root())

        _notify("stage", "Installing Oh My Zsh...")
        result.framework_installed = install_framework(runner, settings)

        _notify("stage", "Installing/Updating plugins...")
        for repo in settings.plugins:
            _notify("info", f"{repo.name} -> {repo.target_dir(settings.plugins_dir)}")
        result.synced = sync_all(registry, settings)

        _notify("stage", f"Updating {settings.zshrc}...")
        include_prompt = dry_run or shutil.which("starship") is not None
        if not include_prompt:
            runner.warn("starship command not found; skipping starship init.")
        result.patch = patch_file(
            settings.zshrc, settings, include_prompt=include_prompt, dry_run=dry_run
        )
        if not result.patch.changed:
            _notify("info", f"{settings.zshrc} already up to date.")
    except ProvisionError as e:
        logger.debug("Provisioning aborted", exc_info=True)
        result.error = str(e)
        result.warnings = runner.warnings
        return result

    _notify("stage", "Done.")
    _notify("info", NEXT_STEP)

    if skip_shell or dry_run:
        result.shell_change = ShellChange.SKIPPED
    else:
        if current_shell is None:
            current_shell = os.environ.get("SHELL", "")
        result.shell_change = offer_default_shell(
            runner, settings, result.platform, decide, current_shell
        )

    result.warnings = runner.warnings
    return result
