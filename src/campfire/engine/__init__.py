"""Duel engine module - duel state machine, write-lock gate and transcripts."""

from .duel import LOCK_ADVISORY, DuelEngine, DuelResult
from .locks import FireLocks
from .logging import DuelLog, DuelLogger, LogEntry, LogEventType
from .types import DuelData, FailureKind, FireData, MessageData, phase_of

__all__ = [
    "LOCK_ADVISORY",
    "DuelEngine",
    "DuelResult",
    "FireLocks",
    "DuelLog",
    "DuelLogger",
    "LogEntry",
    "LogEventType",
    "DuelData",
    "FailureKind",
    "FireData",
    "MessageData",
    "phase_of",
]
