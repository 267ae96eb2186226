"""
Command runner — execution policies over the adapter registry.

Three ways to run an action, and no retry loops:

- ``run_required``: failure aborts the run (``StepFailed``).
- ``run_optional``: failure is a warning; the run continues.
- ``run_with_fallback``: the fallback runs only if the primary fails,
  and its own failure is fatal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from termsetup.adapters.registry import AdapterRegistry
from termsetup.core.errors import ProvisionError
from termsetup.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]


class StepFailed(ProvisionError):
    """A required action failed."""

    def __init__(self, action: Action, receipt: Receipt):
        self.action = action
        self.receipt = receipt
        detail = receipt.error or "failed"
        super().__init__(f"{action.label}: {detail}")


def _silent(level: str, message: str) -> None:
    pass


class CommandRunner:
    """Runs actions through a registry and applies a failure policy.

    Args:
        registry: Where actions are dispatched.
        notify: ``(level, message)`` callback for user-visible
            warnings; level is ``"stage"``, ``"info"`` or ``"warn"``.
    """

    def __init__(self, registry: AdapterRegistry, notify: Notify | None = None):
        self.registry = registry
        self.notify = notify or _silent
        self.warnings: list[str] = []
        self.receipts: list[Receipt] = []

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
        self.notify("warn", message)

    def _run(self, action: Action) -> Receipt:
        logger.info("Running %s", action.label)
        receipt = self.registry.execute_action(action)
        self.receipts.append(receipt)
        if receipt.failed:
            logger.debug("%s failed: %s", action.label, receipt.error)
        return receipt

    def run_required(self, action: Action) -> Receipt:
        receipt = self._run(action)
        if receipt.failed:
            raise StepFailed(action, receipt)
        return receipt

    def run_optional(self, action: Action, warning: str | None = None) -> Receipt:
        receipt = self._run(action)
        if receipt.failed:
            self.warn(warning or f"{action.label} failed: {receipt.summary}")
        return receipt

    def run_with_fallback(
        self,
        primary: Action,
        fallback: Action,
        warning: str | None = None,
    ) -> Receipt:
        receipt = self._run(primary)
        if not receipt.failed:
            return receipt
        self.warn(warning or f"{primary.label} failed; trying {fallback.label}")
        return self.run_required(fallback)
