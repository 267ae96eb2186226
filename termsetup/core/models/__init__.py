"""
Domain models — Pydantic types for provisioning.

All models are re-exported here for convenient access:

    from termsetup.core.models import Action, Receipt, Settings
"""

from termsetup.core.models.action import Action, Receipt
from termsetup.core.models.settings import MarkerBlock, PluginRepo, Settings

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # settings.py
    "MarkerBlock",
    "PluginRepo",
    "Settings",
]
