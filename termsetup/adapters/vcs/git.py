"""
Git adapter — plugin checkout operations.

Provides shallow clone and fast-forward pull through the adapter
protocol. Uses the git CLI — never raw API calls.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from termsetup.adapters.base import Adapter, ExecutionContext
from termsetup.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300  # seconds


def is_checkout(path: Path) -> bool:
    """Whether ``path`` holds git metadata (``.git`` dir, or file for worktrees)."""
    return (path / ".git").exists()


class GitAdapter(Adapter):
    """Git operations for plugin checkouts.

    Action params:
        operation (str): One of 'clone', 'pull'.
        url (str): Remote URL (for 'clone').
        path (str): Checkout directory.
        depth (int): Clone depth (for 'clone', default: 1).
        timeout (int): Timeout in seconds (default: DEFAULT_TIMEOUT).
    """

    VALID_OPS = {"clone", "pull"}

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in self.VALID_OPS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self.VALID_OPS))}"

        if not context.action.params.get("path"):
            return False, "Missing required param: 'path'"

        if operation == "clone" and not context.action.params.get("url"):
            return False, "Missing required param: 'url' for clone operation"

        return True, ""

    def build_args(self, context: ExecutionContext) -> list[str]:
        """git arguments for the action (``git`` itself excluded)."""
        params = context.action.params
        path = str(params["path"])
        if params["operation"] == "pull":
            return ["-C", path, "pull", "--ff-only"]
        args = ["clone"]
        if params.get("depth", 1):
            args += ["--depth", str(params.get("depth", 1))]
        return [*args, params["url"], path]

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        operation = params["operation"]
        if operation == "clone":
            Path(params["path"]).parent.mkdir(parents=True, exist_ok=True)

        args = self.build_args(context)
        timeout = params.get("timeout", DEFAULT_TIMEOUT)
        logger.debug("git %s", " ".join(args))
        start = time.monotonic()
        try:
            result = subprocess.run(
                ["git", *args], capture_output=True, text=True, timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                self.name, context.action.id,
                error=f"git {operation} timed out after {timeout}s",
                metadata={"operation": operation},
            )
        except OSError as e:
            return Receipt.failure(
                self.name, context.action.id,
                error=f"Git error: {e}",
                metadata={"operation": operation},
            )

        stderr = result.stderr.strip()
        if result.returncode != 0:
            stderr = f"Git error: {stderr or f'git {operation} failed'}"
        return Receipt.from_exit(
            self.name,
            context.action.id,
            result.returncode,
            stdout=result.stdout.strip(),
            stderr=stderr,
            duration_ms=int((time.monotonic() - start) * 1000),
            metadata={"operation": operation, "path": str(params["path"])},
        )
