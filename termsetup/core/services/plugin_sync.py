"""
Plugin sync — clone or fast-forward each plugin repository.

A directory with git metadata is updated with ``pull --ff-only``;
anything else is treated as absent and shallow-cloned. Diverged
history is an error, never silently merged or re-cloned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from termsetup.adapters.registry import AdapterRegistry
from termsetup.adapters.vcs.git import is_checkout
from termsetup.core.errors import ProvisionError
from termsetup.core.models.action import Action
from termsetup.core.models.settings import PluginRepo, Settings

logger = logging.getLogger(__name__)


class SyncError(ProvisionError):
    """A plugin repository could not be cloned or updated."""

    def __init__(self, repo: str, message: str):
        self.repo = repo
        super().__init__(f"{repo}: {message}")


@dataclass
class SyncOutcome:
    name: str
    path: Path
    action: str          # "cloned" | "updated" | "skipped" (dry run)
    output: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": str(self.path),
            "action": self.action,
            "output": self.output,
        }


def _non_empty_dir(path: Path) -> bool:
    return path.is_dir() and any(path.iterdir())


def sync_repo(registry: AdapterRegistry, repo: PluginRepo, target_dir: Path) -> SyncOutcome:
    """Make ``target_dir`` an up-to-date checkout of ``repo.url``.

    Raises:
        SyncError: On pull/clone failure, including a non fast-forward
            update or a non-empty directory that is not a checkout.
    """
    if is_checkout(target_dir):
        action = Action(
            id=f"pull:{repo.name}",
            name=f"update {repo.name}",
            adapter="git",
            params={"operation": "pull", "path": str(target_dir)},
        )
        verb = "updated"
    else:
        if _non_empty_dir(target_dir):
            raise SyncError(
                repo.name,
                f"{target_dir} exists, is not empty and has no git metadata; "
                "move it aside and re-run",
            )
        action = Action(
            id=f"clone:{repo.name}",
            name=f"clone {repo.name}",
            adapter="git",
            params={
                "operation": "clone",
                "url": repo.url,
                "path": str(target_dir),
                "depth": 1,
            },
        )
        verb = "cloned"

    logger.info("%s %s -> %s", action.name, repo.url, target_dir)
    receipt = registry.execute_action(action)
    if receipt.failed:
        reason = receipt.error or "git failed"
        if verb == "updated":
            reason = f"fast-forward update failed (local history diverged?): {reason}"
        raise SyncError(repo.name, reason)

    if receipt.status == "skipped":
        verb = "skipped"
    return SyncOutcome(name=repo.name, path=target_dir, action=verb, output=receipt.output)


def sync_all(registry: AdapterRegistry, settings: Settings) -> list[SyncOutcome]:
    """Sync every configured plugin, in order. The first failure aborts."""
    if not registry.dry_run and not registry.is_available("git"):
        raise SyncError("git", "git is not installed or not on PATH")

    outcomes = []
    for repo in settings.plugins:
        outcomes.append(sync_repo(registry, repo, repo.target_dir(settings.plugins_dir)))
    return outcomes
