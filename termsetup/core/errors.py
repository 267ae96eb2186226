"""
Error base — the exceptions that abort a provisioning run.

Each service raises its own subclass (``PatchError``, ``SyncError``,
``StepFailed``, ...) next to the code that detects the problem. The
provision use case catches ``ProvisionError`` once and reports it.
Warnings are never exceptions: they are logged and the run continues.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """A fatal error: the run stops, completed steps stay in place."""
