"""Duel transcript logging.

Records what each participant said during a duel, including the arguments
that do not change duel state:
- Thesis of the attack
- Evidence struck by the challenger
- Defense rationale and surrender flag
- The judge's ruling and plan mutation
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..db.models.enums import DuelRole


class LogEventType(str, Enum):
    """Types of transcript events."""

    # Lifecycle
    DUEL_DECLARED = "duel_declared"
    OATH_TAKEN = "oath_taken"

    # Turns
    ARGUMENT_STRUCK = "argument_struck"
    LINE_HELD = "line_held"

    # Exits
    VERDICT_DELIVERED = "verdict_delivered"
    DUEL_ABANDONED = "duel_abandoned"


@dataclass
class LogEntry:
    """A single transcript entry."""

    event_type: LogEventType
    timestamp_order: int = 0  # Order within the duel for deterministic sorting

    # Who acted and in which role
    actor: str | None = None
    role: DuelRole | None = None

    # What they said (thesis, evidence, rationale)
    text: str | None = None

    # Event-specific data
    surrender: bool | None = None
    winner: DuelRole | None = None
    plan_mutation: str | None = None
    next_turn: DuelRole | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "event_type": self.event_type.value,
            "timestamp_order": self.timestamp_order,
        }

        if self.actor is not None:
            result["actor"] = self.actor
        if self.role is not None:
            result["role"] = self.role.value
        if self.text is not None:
            result["text"] = self.text
        if self.surrender is not None:
            result["surrender"] = self.surrender
        if self.winner is not None:
            result["winner"] = self.winner.value
        if self.plan_mutation is not None:
            result["plan_mutation"] = self.plan_mutation
        if self.next_turn is not None:
            result["next_turn"] = self.next_turn.value

        return result


@dataclass
class DuelLog:
    """Complete transcript of one duel on a fire."""

    fire_id: str
    entries: list[LogEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "fire_id": self.fire_id,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    def get_entries_by_type(self, event_type: LogEventType) -> list[LogEntry]:
        """Get all entries of a specific type."""
        return [e for e in self.entries if e.event_type == event_type]

    def format_readable(self) -> str:
        """Format the transcript in a human-readable format."""
        lines: list[str] = [f"=== Duel Transcript (Fire '{self.fire_id}') ==="]
        for entry in self.entries:
            lines.append(self._format_entry(entry))
        return "\n".join(lines)

    def _format_entry(self, entry: LogEntry) -> str:
        """Format a single transcript entry."""
        match entry.event_type:
            case LogEventType.DUEL_DECLARED:
                return f"  {entry.actor} throws the gauntlet: {entry.text}"

            case LogEventType.OATH_TAKEN:
                return f"  {entry.actor} takes the oath of judgement"

            case LogEventType.ARGUMENT_STRUCK:
                return f"  [Challenger] {entry.actor}: {entry.text}"

            case LogEventType.LINE_HELD:
                suffix = " (surrenders)" if entry.surrender else ""
                return f"  [Defender] {entry.actor}{suffix}: {entry.text}"

            case LogEventType.VERDICT_DELIVERED:
                winner = entry.winner.value if entry.winner else "?"
                return f"  [Judge] {entry.actor} rules for the {winner}: {entry.text}"

            case LogEventType.DUEL_ABANDONED:
                return "  Duel abandoned without a verdict"

            case _:
                return f"  {entry.event_type.value}: {entry.text or ''}"


class DuelLogger:
    """Keeps one transcript per fire while its duel is alive.

    Usage:
        logger = DuelLogger()
        logger.log_declared("fire1", challenger="A", defender="B", thesis="...")
        logger.log_oath("fire1", judge="C")
        # ... turns ...
        log = logger.close("fire1")
        print(log.format_readable())
    """

    def __init__(self) -> None:
        self._logs: dict[str, DuelLog] = {}
        self._order_counters: dict[str, int] = {}

    def _next_order(self, fire_id: str) -> int:
        """Get the next timestamp order value for a fire."""
        self._order_counters[fire_id] = self._order_counters.get(fire_id, 0) + 1
        return self._order_counters[fire_id]

    def _append(self, fire_id: str, entry: LogEntry) -> None:
        entry.timestamp_order = self._next_order(fire_id)
        self._logs.setdefault(fire_id, DuelLog(fire_id=fire_id)).entries.append(entry)

    def get_log(self, fire_id: str) -> DuelLog:
        """Get the transcript of the fire's current duel (empty if none)."""
        return self._logs.get(fire_id, DuelLog(fire_id=fire_id))

    def close(self, fire_id: str) -> DuelLog:
        """Detach and return the transcript of a finished duel."""
        self._order_counters.pop(fire_id, None)
        return self._logs.pop(fire_id, DuelLog(fire_id=fire_id))

    def log_declared(self, fire_id: str, challenger: str, defender: str, thesis: str) -> None:
        """Log a new duel. Starts a fresh transcript for the fire."""
        self.close(fire_id)
        self._append(
            fire_id,
            LogEntry(
                event_type=LogEventType.DUEL_DECLARED,
                actor=challenger,
                role=DuelRole.CHALLENGER,
                text=f"{challenger} vs {defender}: {thesis}",
                next_turn=DuelRole.CHALLENGER,
            ),
        )

    def log_oath(self, fire_id: str, judge: str) -> None:
        """Log the judge being sworn in."""
        self._append(
            fire_id,
            LogEntry(
                event_type=LogEventType.OATH_TAKEN,
                actor=judge,
                role=DuelRole.JUDGE,
                next_turn=DuelRole.CHALLENGER,
            ),
        )

    def log_argument(self, fire_id: str, challenger: str, evidence: str) -> None:
        """Log the challenger's argument."""
        self._append(
            fire_id,
            LogEntry(
                event_type=LogEventType.ARGUMENT_STRUCK,
                actor=challenger,
                role=DuelRole.CHALLENGER,
                text=evidence,
                next_turn=DuelRole.DEFENDER,
            ),
        )

    def log_defense(self, fire_id: str, defender: str, rationale: str, surrender: bool) -> None:
        """Log the defender's reply."""
        self._append(
            fire_id,
            LogEntry(
                event_type=LogEventType.LINE_HELD,
                actor=defender,
                role=DuelRole.DEFENDER,
                text=rationale,
                surrender=surrender,
                next_turn=DuelRole.JUDGE,
            ),
        )

    def log_verdict(
        self,
        fire_id: str,
        judge: str,
        winner: DuelRole,
        rationale: str,
        plan_mutation: str,
    ) -> None:
        """Log the judge's ruling."""
        self._append(
            fire_id,
            LogEntry(
                event_type=LogEventType.VERDICT_DELIVERED,
                actor=judge,
                role=DuelRole.JUDGE,
                text=rationale,
                winner=winner,
                plan_mutation=plan_mutation,
            ),
        )

    def log_abandoned(self, fire_id: str) -> None:
        """Log the duel being abandoned."""
        self._append(fire_id, LogEntry(event_type=LogEventType.DUEL_ABANDONED))
