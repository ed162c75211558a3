"""SQLAlchemy-backed store implementing every persistence port.

Each method runs in its own transaction, so a caller never observes a
half-applied write.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db.models.duels import Duel
from ..db.models.fires import BattlePlan, Fire, Message
from ..engine.types import DuelData, FireData, MessageData
from .base import FireNotFoundError

# INSERT .. ON CONFLICT DO NOTHING per dialect name
_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _aware(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _fire_data(fire: Fire) -> FireData:
    return FireData(id=fire.id, created_at=_aware(fire.created_at))


def _message_data(message: Message) -> MessageData:
    return MessageData(
        id=str(message.id),
        fire_id=message.fire_id,
        text=message.text,
        author=message.author,
        created_at=_aware(message.created_at),
    )


def _duel_data(duel: Duel) -> DuelData:
    return DuelData(
        fire_id=duel.fire_id,
        challenger_name=duel.challenger_name,
        defender_name=duel.defender_name,
        thesis_of_attack=duel.thesis_of_attack,
        judge_name=duel.judge_name,
        current_turn=duel.current_turn,
        created_at=_aware(duel.created_at),
    )


class SqlCampfireStore:
    """Store backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def _ensure_fire(self, session: AsyncSession, fire_id: str) -> Fire:
        """Load a fire, creating it inside the current transaction if missing.

        The insert ignores an existing row, so concurrent writers referencing
        the same new fire all see it.
        """
        insert = _INSERTS.get(session.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(Fire).values(id=fire_id).on_conflict_do_nothing(index_elements=[Fire.id])
            await session.execute(stmt)
            return await session.get(Fire, fire_id)

        fire = await session.get(Fire, fire_id)
        if fire is None:
            fire = Fire(id=fire_id)
            session.add(fire)
            await session.flush()
        return fire

    async def _upsert_battle_plan(self, session: AsyncSession, fire_id: str, content: str) -> None:
        await self._ensure_fire(session, fire_id)
        plan = await session.get(BattlePlan, fire_id)
        if plan is None:
            session.add(BattlePlan(fire_id=fire_id, content=content))
        else:
            plan.content = content
        await session.flush()

    # --- FireStore ---

    async def get_or_create_fire(self, fire_id: str) -> FireData:
        async with self.session_factory() as session, session.begin():
            fire = await self._ensure_fire(session, fire_id)
            return _fire_data(fire)

    async def get_fire(self, fire_id: str) -> FireData | None:
        async with self.session_factory() as session:
            fire = await session.get(Fire, fire_id)
            return _fire_data(fire) if fire else None

    async def post_message(self, fire_id: str, text: str, author: str | None = None) -> MessageData:
        async with self.session_factory() as session, session.begin():
            fire = await session.get(Fire, fire_id)
            if fire is None:
                raise FireNotFoundError(fire_id)
            message = Message(fire_id=fire_id, text=text, author=author)
            session.add(message)
            await session.flush()
            return _message_data(message)

    async def list_messages(self, fire_id: str) -> list[MessageData]:
        async with self.session_factory() as session:
            stmt = select(Message).where(Message.fire_id == fire_id).order_by(Message.id)
            result = await session.execute(stmt)
            return [_message_data(m) for m in result.scalars().all()]

    # --- BattlePlanStore ---

    async def get_battle_plan(self, fire_id: str) -> str | None:
        async with self.session_factory() as session:
            plan = await session.get(BattlePlan, fire_id)
            return plan.content if plan else None

    async def set_battle_plan(self, fire_id: str, content: str) -> None:
        async with self.session_factory() as session, session.begin():
            await self._upsert_battle_plan(session, fire_id, content)

    # --- DuelStore ---

    async def get_duel(self, fire_id: str) -> DuelData | None:
        async with self.session_factory() as session:
            duel = await session.get(Duel, fire_id)
            return _duel_data(duel) if duel else None

    async def save_duel(self, fire_id: str, duel: DuelData) -> None:
        async with self.session_factory() as session, session.begin():
            await self._ensure_fire(session, fire_id)
            row = await session.get(Duel, fire_id)
            if row is None:
                row = Duel(fire_id=fire_id, created_at=duel.created_at)
                session.add(row)
            row.challenger_name = duel.challenger_name
            row.defender_name = duel.defender_name
            row.judge_name = duel.judge_name
            row.thesis_of_attack = duel.thesis_of_attack
            row.current_turn = duel.current_turn

    async def clear_duel(self, fire_id: str) -> None:
        async with self.session_factory() as session, session.begin():
            await session.execute(delete(Duel).where(Duel.fire_id == fire_id))

    async def complete_duel(self, fire_id: str, battle_plan: str) -> None:
        async with self.session_factory() as session, session.begin():
            await self._upsert_battle_plan(session, fire_id, battle_plan)
            await session.execute(delete(Duel).where(Duel.fire_id == fire_id))
