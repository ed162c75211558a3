"""Campfire service - fires, messages and the battle plan.

Every write here is a general write: it consults the duel engine's write-lock
gate first and is refused with LOCK_ADVISORY while a duel holds the fire.
"""

import logging
from dataclasses import dataclass, field

from ..engine.duel import LOCK_ADVISORY, DuelEngine
from ..engine.types import FailureKind, FireData, MessageData
from ..stores.base import BattlePlanStore, FireNotFoundError, FireStore

logger = logging.getLogger("campfire.services")


@dataclass
class CampfireResult:
    """Result of a campfire operation."""

    success: bool
    message: str
    failure: FailureKind | None = None
    fire: FireData | None = None
    posted: MessageData | None = None
    messages: list[MessageData] = field(default_factory=list)
    battle_plan: str | None = None


class CampfireService:
    """Service for fire, message and battle plan operations."""

    def __init__(
        self,
        fires: FireStore,
        battle_plans: BattlePlanStore,
        engine: DuelEngine,
    ) -> None:
        self.fires = fires
        self.battle_plans = battle_plans
        self.engine = engine

    def _locked(self, fire_id: str) -> CampfireResult:
        logger.debug(f"General write on fire {fire_id} blocked by duel")
        return CampfireResult(success=False, message=LOCK_ADVISORY, failure=FailureKind.LOCKED)

    async def get_or_create_fire(self, fire_id: str) -> CampfireResult:
        """Get a fire, creating it on first reference."""
        async with self.engine.locks.hold(fire_id):
            fire = await self.fires.get_or_create_fire(fire_id)
        return CampfireResult(success=True, message="Fire ready", fire=fire)

    async def post_message(self, fire_id: str, text: str, author: str | None = None) -> CampfireResult:
        """Post a message to an existing fire.

        Args:
            fire_id: Fire to post to
            text: Message content, stored trimmed
            author: Optional agent name

        Returns:
            CampfireResult with the posted message, or a refusal if the fire
            is locked, missing, or the text is blank
        """
        async with self.engine.locks.hold(fire_id):
            if await self.engine.is_write_locked(fire_id):
                return self._locked(fire_id)

            trimmed = text.strip()
            if not trimmed:
                return CampfireResult(
                    success=False,
                    message="message cannot be empty.",
                    failure=FailureKind.VALIDATION,
                )

            try:
                posted = await self.fires.post_message(fire_id, trimmed, author)
            except FireNotFoundError as e:
                return CampfireResult(success=False, message=str(e), failure=FailureKind.NOT_FOUND)

        logger.info(f"Message {posted.id} posted to fire {fire_id} by {author or 'anonymous'}")
        return CampfireResult(success=True, message="Message posted", posted=posted)

    async def list_messages(self, fire_id: str) -> CampfireResult:
        """List a fire's messages in the order they were posted."""
        if await self.fires.get_fire(fire_id) is None:
            return CampfireResult(
                success=False,
                message=str(FireNotFoundError(fire_id)),
                failure=FailureKind.NOT_FOUND,
            )

        messages = await self.fires.list_messages(fire_id)
        return CampfireResult(success=True, message=f"{len(messages)} messages", messages=messages)

    async def get_battle_plan(self, fire_id: str) -> CampfireResult:
        """Read the battle plan. None means nothing has been written yet."""
        content = await self.battle_plans.get_battle_plan(fire_id)
        return CampfireResult(success=True, message="Battle plan loaded", battle_plan=content)

    async def update_battle_plan(self, fire_id: str, content: str) -> CampfireResult:
        """Overwrite the battle plan outside of a duel."""
        async with self.engine.locks.hold(fire_id):
            if await self.engine.is_write_locked(fire_id):
                return self._locked(fire_id)

            await self.battle_plans.set_battle_plan(fire_id, content)

        logger.info(f"Battle plan of fire {fire_id} updated ({len(content)} chars)")
        return CampfireResult(
            success=True,
            message="BattlePlan updated successfully.",
            battle_plan=content,
        )
