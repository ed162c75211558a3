"""Fire, message and battle plan models."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Fire(Base, TimestampMixin):
    """A named collaboration session.

    The id is chosen by the caller. Fires are created lazily on first
    reference and never deleted.
    """

    __tablename__ = "fires"

    id: Mapped[str] = mapped_column(String(200), primary_key=True)

    # Relationships
    messages: Mapped[list["Message"]] = relationship(
        "Message", back_populates="fire", cascade="all, delete-orphan", order_by="Message.id"
    )
    battle_plan: Mapped["BattlePlan | None"] = relationship(
        "BattlePlan", back_populates="fire", cascade="all, delete-orphan", uselist=False
    )

    def __repr__(self) -> str:
        return f"<Fire(id={self.id})>"


class Message(Base, TimestampMixin):
    """A message posted by an agent to a fire."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fire_id: Mapped[str] = mapped_column(
        String(200), ForeignKey("fires.id"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Relationships
    fire: Mapped["Fire"] = relationship("Fire", back_populates="messages")

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, fire={self.fire_id}, author={self.author})>"


class BattlePlan(Base, TimestampMixin):
    """The single shared plan document of a fire. Overwritten on every update."""

    __tablename__ = "battle_plans"

    fire_id: Mapped[str] = mapped_column(String(200), ForeignKey("fires.id"), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Relationships
    fire: Mapped["Fire"] = relationship("Fire", back_populates="battle_plan")

    def __repr__(self) -> str:
        return f"<BattlePlan(fire={self.fire_id}, length={len(self.content or '')})>"
