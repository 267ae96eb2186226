"""
Adapter registry — dispatches Actions to the ``shell`` and ``git`` adapters.

Every external command in a provisioning run goes through
``execute_action``, which is also where dry-run happens: actions are
validated, then answered with a ``skipped`` receipt instead of running.
"""

from __future__ import annotations

import logging
import time

from termsetup.adapters.base import Adapter, ExecutionContext
from termsetup.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the run-wide dry-run switch.

    Args:
        dry_run: Validate actions but never execute them. Can be
            overridden per call.
    """

    def __init__(self, dry_run: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self.dry_run = dry_run

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered adapter: %s", adapter.name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def is_available(self, name: str) -> bool:
        """Whether ``name`` is registered and its program is on PATH."""
        adapter = self._adapters.get(name)
        if adapter is None:
            return False
        try:
            return adapter.is_available()
        except Exception:
            logger.debug("is_available() raised for %s", name, exc_info=True)
            return False

    # ── Dispatch ────────────────────────────────────────────────

    def execute_action(
        self,
        action: Action,
        cwd: str | None = None,
        dry_run: bool | None = None,
    ) -> Receipt:
        """Validate and run ``action``; never raises.

        Args:
            action: The step to run.
            cwd: Working directory when the action sets none.
            dry_run: Validate only. Defaults to ``self.dry_run``.
        """
        dry_run = self.dry_run if dry_run is None else dry_run
        start = time.monotonic()

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                action.adapter, action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(action=action, cwd=cwd, dry_run=dry_run, params=action.params)

        rejected = self._validate(adapter, context)
        if rejected is not None:
            return rejected

        if dry_run:
            logger.info("[dry-run] %s", action.label)
            return Receipt.skip(
                action.adapter,
                action.id,
                reason=f"[dry-run] Would execute {action.adapter}:{action.id}",
                metadata={"dry_run": True},
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised during execution: %s", action.adapter, e)
            receipt = Receipt.failure(action.adapter, action.id, error=f"Unexpected error: {e}")

        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt

    @staticmethod
    def _validate(adapter: Adapter, context: ExecutionContext) -> Receipt | None:
        """A failed receipt if the action is rejected, else None."""
        action = context.action
        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            return Receipt.failure(action.adapter, action.id, error=f"Validation error: {e}")
        if not valid:
            return Receipt.failure(action.adapter, action.id, error=f"Validation failed: {reason}")
        return None


def build_registry(dry_run: bool = False) -> AdapterRegistry:
    """Registry with the production adapters (shell + git) registered."""
    from termsetup.adapters.shell.command import ShellCommandAdapter
    from termsetup.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry(dry_run=dry_run)
    registry.register(ShellCommandAdapter())
    registry.register(GitAdapter())
    return registry
