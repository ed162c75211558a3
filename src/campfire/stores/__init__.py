"""Persistence ports and their adapters."""

from .base import BattlePlanStore, DuelStore, FireNotFoundError, FireStore
from .memory import InMemoryCampfireStore
from .sql import SqlCampfireStore

__all__ = [
    # Ports
    "FireStore",
    "BattlePlanStore",
    "DuelStore",
    "FireNotFoundError",
    # Adapters
    "InMemoryCampfireStore",
    "SqlCampfireStore",
]
