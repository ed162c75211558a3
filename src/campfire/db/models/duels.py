"""Duel model."""

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import DuelRole


class Duel(Base, TimestampMixin):
    """The duel currently holding a fire's write lock.

    Keyed by fire, so a fire can never hold more than one duel. The row is
    deleted when the duel ends; a null judge_name means the duel is still
    waiting for a judge.
    """

    __tablename__ = "duels"

    fire_id: Mapped[str] = mapped_column(String(200), ForeignKey("fires.id"), primary_key=True)

    # Participants
    challenger_name: Mapped[str] = mapped_column(String(200), nullable=False)
    defender_name: Mapped[str] = mapped_column(String(200), nullable=False)
    judge_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    thesis_of_attack: Mapped[str] = mapped_column(Text, nullable=False)
    current_turn: Mapped[DuelRole] = mapped_column(
        SQLEnum(DuelRole, name="duel_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=DuelRole.CHALLENGER,
    )

    # Relationships
    fire: Mapped["Fire"] = relationship("Fire")

    def __repr__(self) -> str:
        return f"<Duel(fire={self.fire_id}, turn={self.current_turn}, judge={self.judge_name})>"


# Forward references for type hints
from .fires import Fire  # noqa: E402, F401
