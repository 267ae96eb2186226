"""Adapters — tool bindings for external programs.

Public re-exports for convenient access.
"""

from termsetup.adapters.base import Adapter, ExecutionContext
from termsetup.adapters.mock import MockAdapter
from termsetup.adapters.registry import AdapterRegistry, build_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "build_registry",
]
