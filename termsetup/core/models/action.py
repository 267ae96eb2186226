"""
Action and Receipt models — one provisioning step and its outcome.

Services describe each step (``brew update``, ``clone:zsh-autocomplete``,
``chsh``) as an Action and hand it to the adapter registry. The adapter
answers with a Receipt; a failed command is a ``failed`` receipt, not
an exception.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

Status = Literal["ok", "skipped", "failed"]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """One step for an adapter to run.

    ``id`` is stable across runs and is what tests and logs key on,
    e.g. ``apt-install-starship`` or ``clone:zsh-autocomplete``.
    """

    id: str
    name: str = ""                  # shown in banners and warnings
    adapter: str                    # "shell" | "git"
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.name or self.id


class Receipt(BaseModel):
    """What happened when an Action ran (or was skipped)."""

    adapter: str
    action_id: str
    status: Status = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    # command, return_code, stderr/stdout, operation, dry_run ...
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def return_code(self) -> int | None:
        """Exit status of the underlying process, when one ran."""
        return self.metadata.get("return_code")

    @property
    def summary(self) -> str:
        """Last non-empty line of the error, for one-line warnings."""
        lines = [ln for ln in (self.error or "").splitlines() if ln.strip()]
        return lines[-1].strip() if lines else self.status

    # ── Constructors ────────────────────────────────────────────

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)

    @classmethod
    def from_exit(
        cls,
        adapter: str,
        action_id: str,
        return_code: int,
        stdout: str = "",
        stderr: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Receipt for a finished process: exit 0 is ok, anything else failed.

        On failure stderr becomes the error (or a generic exit-code
        message when the process printed nothing to stderr).
        """
        metadata = {"return_code": return_code, **kwargs.pop("metadata", {})}
        if return_code == 0:
            metadata["stderr"] = stderr
            return cls.success(adapter, action_id, output=stdout, metadata=metadata, **kwargs)
        metadata["stdout"] = stdout
        return cls.failure(
            adapter,
            action_id,
            error=stderr or f"Command exited with code {return_code}",
            metadata=metadata,
            **kwargs,
        )
