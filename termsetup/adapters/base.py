"""
Adapter base — how provisioning steps reach external programs.

An adapter wraps one family of external commands (plain processes,
git). Services never spawn processes themselves: they build Actions
and the registry hands each one to the adapter named in
``action.adapter``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from termsetup.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """An Action plus the run-wide settings it executes under."""

    action: Action
    cwd: str | None = None
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str | None:
        """``params["cwd"]`` if the action sets one, else the run's cwd."""
        return self.action.params.get("cwd", self.cwd)


class Adapter(ABC):
    """One family of external commands.

    ``execute`` reports every outcome (non-zero exit, timeout, missing
    program) as a Receipt; the caller decides whether it is fatal.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, matched against ``Action.adapter``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying program is on PATH."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check params before anything runs; ``(ok, reason)``."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action. Failures come back as ``failed`` receipts."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
