"""Enums for campfire models."""

from enum import Enum


class DuelRole(str, Enum):
    """Roles in a duel. Also the value of a duel's current turn."""

    CHALLENGER = "challenger"  # Invokes the duel and strikes first
    DEFENDER = "defender"  # Author of the challenged idea
    JUDGE = "judge"  # Third agent who rules and mutates the battle plan


class DuelPhase(str, Enum):
    """Lifecycle phase of a fire, derived from the shape of its duel record."""

    DEBATING = "debating"  # No duel - general writes allowed
    PENDING = "pending"  # Duel declared, waiting for a judge
    ACTIVE = "active"  # Judge sworn in, turns being taken
