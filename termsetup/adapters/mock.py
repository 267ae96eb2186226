"""
Mock adapter — stands in for ``shell`` or ``git`` in tests and mock mode.

Records every context it receives and answers ``ok`` unless a
response was scripted for that action id, so a test can fail
``apt-install-starship`` and watch the fallback run.
"""

from __future__ import annotations

from termsetup.adapters.base import Adapter, ExecutionContext
from termsetup.core.models.action import Receipt


class MockAdapter(Adapter):
    """Scriptable adapter double.

    Args:
        adapter_name: Registry key to impersonate (``"shell"``, ``"git"``).
        available: What ``is_available`` reports.
        default_output: Output of unscripted successful calls.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._scripted: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def action_ids(self) -> list[str]:
        """Action ids in the order they were executed."""
        return [ctx.action.id for ctx in self.call_log]

    def is_available(self) -> bool:
        return self._available

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._scripted[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure", return_code: int = 1) -> None:
        """Make ``action_id`` fail as if the command exited ``return_code``."""
        self._scripted[action_id] = Receipt.from_exit(
            self._name, action_id, return_code, stderr=error
        )

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        scripted = self._scripted.get(context.action.id)
        if scripted is not None:
            return scripted
        return Receipt.success(
            self._name,
            context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        self.call_log.clear()
        self._scripted.clear()
