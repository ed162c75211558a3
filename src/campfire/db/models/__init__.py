"""Database models."""

from .base import Base, TimestampMixin
from .duels import Duel
from .enums import DuelPhase, DuelRole
from .fires import BattlePlan, Fire, Message

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Enums
    "DuelPhase",
    "DuelRole",
    # Fires
    "Fire",
    "Message",
    "BattlePlan",
    # Duels
    "Duel",
]
