"""
Shell command adapter — run external programs.

This is the most fundamental adapter: package managers, installer
scripts and ``chsh`` all go through it. It runs a command, captures
(or streams) its output and reports the exit status in a Receipt.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from pathlib import Path

from termsetup.adapters.base import Adapter, ExecutionContext
from termsetup.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 900


def _is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


class ShellCommandAdapter(Adapter):
    """Execute commands and capture output.

    Action params:
        argv (list[str]): Program and arguments (preferred).
        command (str): A shell string, run through ``sh -c`` (for pipelines).
        env (dict[str, str]): Extra environment variables.
        sudo (bool): Prefix with ``sudo`` unless already root (default: False).
        input (str): Data piped to stdin.
        stream (bool): Let output reach the terminal instead of capturing it.
        timeout (int): Timeout in seconds (default: 900).
        cwd (str): Override working directory.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        argv = params.get("argv")
        command = params.get("command", "")
        if not argv and not command:
            return False, "Missing required param: 'argv' or 'command'"
        if argv and command:
            return False, "Params 'argv' and 'command' are mutually exclusive"

        cwd = context.working_dir
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        return True, ""

    def build_argv(self, context: ExecutionContext) -> list[str]:
        """The argv that ``execute`` will run, sudo prefix included."""
        params = context.action.params
        if params.get("argv"):
            argv = [str(a) for a in params["argv"]]
        else:
            argv = ["sh", "-c", params["command"]]
        if params.get("sudo") and not _is_root():
            argv = ["sudo", *argv]
        return argv

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        argv = self.build_argv(context)
        display = shlex.join(argv)
        timeout = params.get("timeout", DEFAULT_TIMEOUT)
        stream = params.get("stream", False)

        env = None
        if params.get("env"):
            env = os.environ.copy()
            env.update({k: str(v) for k, v in params["env"].items()})

        logger.debug("Executing: %s (cwd=%s)", display, context.working_dir)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                cwd=context.working_dir,
                env=env,
                input=params.get("input"),
                capture_output=not stream,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command timed out after {timeout}s",
                metadata={"command": display, "timeout": timeout},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command execution error: {e}",
                metadata={"command": display},
            )

        return Receipt.from_exit(
            self.name,
            context.action.id,
            result.returncode,
            stdout=(result.stdout or "").strip(),
            stderr=(result.stderr or "").strip(),
            duration_ms=int((time.monotonic() - start) * 1000),
            metadata={"command": display, "streamed": stream},
        )
