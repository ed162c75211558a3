"""Persistence ports consumed by the engine and the campfire service.

Every port is keyed by fire id and holds at most one record per fire.
"""

from typing import Protocol

from ..engine.types import DuelData, FireData, MessageData


class FireNotFoundError(LookupError):
    """Raised by a store when a write targets a fire that does not exist."""

    def __init__(self, fire_id: str) -> None:
        super().__init__(f"Fire with id '{fire_id}' does not exist.")
        self.fire_id = fire_id


class FireStore(Protocol):
    """Fires and their messages."""

    async def get_or_create_fire(self, fire_id: str) -> FireData: ...

    async def get_fire(self, fire_id: str) -> FireData | None: ...

    async def post_message(self, fire_id: str, text: str, author: str | None = None) -> MessageData:
        """Append a message. Raises FireNotFoundError for an unknown fire."""
        ...

    async def list_messages(self, fire_id: str) -> list[MessageData]:
        """Messages in insertion order; empty for an unknown fire."""
        ...


class BattlePlanStore(Protocol):
    """The battle plan document of each fire."""

    async def get_battle_plan(self, fire_id: str) -> str | None: ...

    async def set_battle_plan(self, fire_id: str, content: str) -> None: ...


class DuelStore(Protocol):
    """The duel (if any) holding each fire."""

    async def get_duel(self, fire_id: str) -> DuelData | None: ...

    async def save_duel(self, fire_id: str, duel: DuelData) -> None: ...

    async def clear_duel(self, fire_id: str) -> None: ...

    async def complete_duel(self, fire_id: str, battle_plan: str) -> None:
        """Overwrite the battle plan and clear the duel as one step."""
        ...
