"""Type definitions for the duel engine and the stores it talks to."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..db.models.base import utcnow
from ..db.models.enums import DuelPhase, DuelRole


class FailureKind(str, Enum):
    """Why an operation was refused."""

    NOT_FOUND = "not_found"  # Fire or duel missing where one is required
    CONFLICT = "conflict"  # A duel is already in progress
    IDENTITY = "identity"  # Participant names collide
    TURN = "turn"  # Wrong actor, or not the actor's turn
    STATE = "state"  # Duel not staffed yet, or no duel at all
    VALIDATION = "validation"  # Blank or out-of-range arguments
    LOCKED = "locked"  # General write attempted while a duel holds the fire


@dataclass(frozen=True)
class FireData:
    """A fire as seen by the engine and the stores."""

    id: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {"id": self.id, "createdAt": self.created_at.isoformat()}


@dataclass(frozen=True)
class MessageData:
    """A message posted to a fire."""

    id: str
    fire_id: str
    text: str
    author: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        result: dict[str, Any] = {
            "id": self.id,
            "fireId": self.fire_id,
            "text": self.text,
        }
        if self.author is not None:
            result["author"] = self.author
        result["createdAt"] = self.created_at.isoformat()
        return result


@dataclass(frozen=True)
class DuelData:
    """Snapshot of the duel holding a fire.

    Immutable: transitions build a new snapshot with dataclasses.replace()
    and hand it to the duel store.
    """

    fire_id: str
    challenger_name: str
    defender_name: str
    thesis_of_attack: str
    judge_name: str | None = None
    current_turn: DuelRole = DuelRole.CHALLENGER
    created_at: datetime = field(default_factory=utcnow)

    @property
    def phase(self) -> DuelPhase:
        """PENDING until a judge is sworn in, ACTIVE afterwards."""
        if self.judge_name is None:
            return DuelPhase.PENDING
        return DuelPhase.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "fireId": self.fire_id,
            "challengerName": self.challenger_name,
            "defenderName": self.defender_name,
            "judgeName": self.judge_name,
            "thesisOfAttack": self.thesis_of_attack,
            "currentTurn": self.current_turn.value,
            "createdAt": self.created_at.isoformat(),
        }


def phase_of(duel: DuelData | None) -> DuelPhase:
    """Derive a fire's phase from its duel record (or lack of one)."""
    if duel is None:
        return DuelPhase.DEBATING
    return duel.phase
