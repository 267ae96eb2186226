"""
Atomic file writes — replace a text file without a partial-write window.

Content goes to a temp file in the target's directory, is flushed to
disk, then renamed over the target. An interrupted run leaves either
the old file or the new one, never a truncated mix.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

_NEW_FILE_MODE = 0o644


def atomic_write_text(path: Path, content: str, encoding: str = "utf-8") -> Path:
    """Write ``content`` to ``path`` atomically.

    A symlinked target is resolved first, so the link survives and the
    file it points to is replaced. Permission bits of an existing
    target are carried over to the new file.

    Returns:
        The path actually written (the symlink target, if any).
    """
    target = path.resolve() if path.is_symlink() else path
    target.parent.mkdir(parents=True, exist_ok=True)

    try:
        mode = stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        mode = _NEW_FILE_MODE

    fd, tmp_path = tempfile.mkstemp(
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
    )
    tmp = Path(tmp_path)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    logger.debug("Wrote %d chars to %s", len(content), target)
    return target


def read_text_exact(path: Path, encoding: str = "utf-8") -> str:
    """Read a text file without newline translation (CRLF stays CRLF)."""
    with open(path, encoding=encoding, newline="") as fh:
        return fh.read()
