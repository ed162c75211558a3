"""In-memory store implementing every persistence port."""

import uuid
from dataclasses import dataclass, field

from ..engine.types import DuelData, FireData, MessageData
from .base import FireNotFoundError


@dataclass
class _FireState:
    """Everything stored for one fire."""

    fire: FireData
    messages: list[MessageData] = field(default_factory=list)
    battle_plan: str | None = None
    duel: DuelData | None = None


class InMemoryCampfireStore:
    """Dict-backed store. State lives as long as the instance does."""

    def __init__(self) -> None:
        self._fires: dict[str, _FireState] = {}

    def _ensure_fire_state(self, fire_id: str) -> _FireState:
        state = self._fires.get(fire_id)
        if state is None:
            state = _FireState(fire=FireData(id=fire_id))
            self._fires[fire_id] = state
        return state

    # --- FireStore ---

    async def get_or_create_fire(self, fire_id: str) -> FireData:
        return self._ensure_fire_state(fire_id).fire

    async def get_fire(self, fire_id: str) -> FireData | None:
        state = self._fires.get(fire_id)
        return state.fire if state else None

    async def post_message(self, fire_id: str, text: str, author: str | None = None) -> MessageData:
        state = self._fires.get(fire_id)
        if state is None:
            raise FireNotFoundError(fire_id)
        message = MessageData(
            id=f"msg-{uuid.uuid4().hex[:12]}",
            fire_id=fire_id,
            text=text,
            author=author,
        )
        state.messages.append(message)
        return message

    async def list_messages(self, fire_id: str) -> list[MessageData]:
        state = self._fires.get(fire_id)
        if state is None:
            return []
        return list(state.messages)

    # --- BattlePlanStore ---

    async def get_battle_plan(self, fire_id: str) -> str | None:
        state = self._fires.get(fire_id)
        return state.battle_plan if state else None

    async def set_battle_plan(self, fire_id: str, content: str) -> None:
        self._ensure_fire_state(fire_id).battle_plan = content

    # --- DuelStore ---

    async def get_duel(self, fire_id: str) -> DuelData | None:
        state = self._fires.get(fire_id)
        return state.duel if state else None

    async def save_duel(self, fire_id: str, duel: DuelData) -> None:
        self._ensure_fire_state(fire_id).duel = duel

    async def clear_duel(self, fire_id: str) -> None:
        state = self._fires.get(fire_id)
        if state is not None:
            state.duel = None

    async def complete_duel(self, fire_id: str, battle_plan: str) -> None:
        state = self._ensure_fire_state(fire_id)
        state.battle_plan = battle_plan
        state.duel = None
