"""Duel engine - arbitrates a fire's write lock between three agents.

A duel moves through three phases, derived from its record:

    DEBATING  --declare-->  PENDING  --oath-->  ACTIVE
    ACTIVE: challenger -> defender -> judge --verdict--> DEBATING
    PENDING/ACTIVE --abandon--> DEBATING

While a duel record exists the fire is write-locked for general writes.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..db.models.enums import DuelPhase, DuelRole
from .locks import FireLocks
from .logging import DuelLog, DuelLogger
from .types import DuelData, FailureKind, phase_of

if TYPE_CHECKING:
    from ..stores.base import DuelStore, FireStore

logger = logging.getLogger("campfire.engine")

LOCK_ADVISORY = "Silence. A duel has been declared. Waiting for an impartial Judge to take the oath."


@dataclass
class DuelResult:
    """Result of a duel operation."""

    success: bool
    message: str
    failure: FailureKind | None = None
    duel: DuelData | None = None
    plan_mutated: bool = False
    duel_log: DuelLog | None = None


def _refuse(fire_id: str, failure: FailureKind, message: str) -> DuelResult:
    logger.debug(f"Duel operation refused on fire {fire_id} ({failure.value}): {message}")
    return DuelResult(success=False, message=message, failure=failure)


class DuelEngine:
    """Duel state machine over the fire and duel stores.

    The verdict rewrites the battle plan through DuelStore.complete_duel so the
    plan write and the duel removal land together.
    """

    def __init__(
        self,
        fires: "FireStore",
        duels: "DuelStore",
        locks: FireLocks | None = None,
        duel_logger: DuelLogger | None = None,
    ) -> None:
        self.fires = fires
        self.duels = duels
        self.locks = locks or FireLocks()
        self.duel_logger = duel_logger

    # --- Write-lock gate ---

    async def is_write_locked(self, fire_id: str) -> bool:
        """True while a duel (pending or active) holds the fire."""
        return await self.duels.get_duel(fire_id) is not None

    async def get_duel(self, fire_id: str) -> DuelData | None:
        """Current duel of a fire, if any."""
        return await self.duels.get_duel(fire_id)

    async def get_phase(self, fire_id: str) -> DuelPhase:
        """Current phase of a fire."""
        return phase_of(await self.duels.get_duel(fire_id))

    # --- Transitions ---

    async def declare_duel(
        self,
        fire_id: str,
        challenger_name: str,
        defender_name: str,
        thesis: str,
    ) -> DuelResult:
        """Throw the gauntlet: open a duel that waits for a judge.

        Args:
            fire_id: Fire the duel is declared on (created if missing)
            challenger_name: Agent invoking the duel
            defender_name: Author of the challenged idea
            thesis: Which principle the challenged proposal violates

        Returns:
            DuelResult with the new PENDING duel
        """
        async with self.locks.hold(fire_id):
            await self.fires.get_or_create_fire(fire_id)

            if await self.duels.get_duel(fire_id) is not None:
                return _refuse(
                    fire_id,
                    FailureKind.CONFLICT,
                    "A duel is already in progress. Resolve it (verdict or abandon_duel) before starting another.",
                )

            if challenger_name == defender_name:
                return _refuse(
                    fire_id,
                    FailureKind.IDENTITY,
                    "Challenger and Defender must be distinct identities.",
                )

            duel = DuelData(
                fire_id=fire_id,
                challenger_name=challenger_name,
                defender_name=defender_name,
                thesis_of_attack=thesis,
            )
            await self.duels.save_duel(fire_id, duel)

        if self.duel_logger:
            self.duel_logger.log_declared(fire_id, challenger_name, defender_name, thesis)
        logger.info(f"Duel declared on fire {fire_id}: {challenger_name} challenges {defender_name}")

        return DuelResult(
            success=True,
            message="Duel declared. Waiting for the Judge to take the oath.",
            duel=duel,
        )

    async def take_oath(self, fire_id: str, candidate_name: str) -> DuelResult:
        """Swear in a third agent as judge and hand the first turn to the challenger.

        Args:
            fire_id: Fire of the pending duel
            candidate_name: Agent taking the judge role

        Returns:
            DuelResult with the now ACTIVE duel
        """
        async with self.locks.hold(fire_id):
            duel = await self.duels.get_duel(fire_id)
            if duel is None:
                return _refuse(fire_id, FailureKind.NOT_FOUND, f"No pending duel on fire '{fire_id}'.")

            if duel.judge_name is not None:
                return _refuse(
                    fire_id,
                    FailureKind.STATE,
                    "The tribunal is already complete. The duel is active.",
                )

            if candidate_name in (duel.challenger_name, duel.defender_name):
                registered_as = "Challenger" if candidate_name == duel.challenger_name else "Defender"
                return _refuse(
                    fire_id,
                    FailureKind.IDENTITY,
                    f"character_name '{candidate_name}' is already registered as {registered_as}. "
                    "The Judge must be a third agent with a different name.",
                )

            updated = dataclasses.replace(duel, judge_name=candidate_name, current_turn=DuelRole.CHALLENGER)
            await self.duels.save_duel(fire_id, updated)

        if self.duel_logger:
            self.duel_logger.log_oath(fire_id, candidate_name)
        logger.info(f"Judge {candidate_name} sworn in on fire {fire_id}")

        return DuelResult(
            success=True,
            message="The tribunal is complete. Let the duel begin.",
            duel=updated,
        )

    async def strike_argument(self, fire_id: str, actor_name: str, evidence: str) -> DuelResult:
        """Challenger presents the technical attack and yields to the defender."""
        async with self.locks.hold(fire_id):
            duel = await self.duels.get_duel(fire_id)
            if duel is None or duel.judge_name is None:
                return _refuse(
                    fire_id,
                    FailureKind.STATE,
                    "Duel is not active. Waiting for the Judge to take the oath.",
                )

            if duel.current_turn != DuelRole.CHALLENGER:
                return _refuse(
                    fire_id,
                    FailureKind.TURN,
                    f"Not your turn. Expected Challenger ({duel.challenger_name}). "
                    "Your role does not match the current turn.",
                )

            if actor_name != duel.challenger_name:
                return _refuse(
                    fire_id,
                    FailureKind.TURN,
                    f"Only the Challenger ({duel.challenger_name}) may use strike_argument this turn. "
                    f"You invoked as '{actor_name}'.",
                )

            updated = dataclasses.replace(duel, current_turn=DuelRole.DEFENDER)
            await self.duels.save_duel(fire_id, updated)

        if self.duel_logger:
            self.duel_logger.log_argument(fire_id, actor_name, evidence)
        logger.info(f"Challenger {actor_name} struck on fire {fire_id}")

        return DuelResult(success=True, message="Argument struck. The Defender holds the turn.", duel=updated)

    async def hold_the_line(
        self,
        fire_id: str,
        actor_name: str,
        rationale: str,
        surrender: bool,
    ) -> DuelResult:
        """Defender argues back (or surrenders) and yields to the judge.

        A surrender is recorded for the judge but does not end the duel.
        """
        async with self.locks.hold(fire_id):
            duel = await self.duels.get_duel(fire_id)
            if duel is None or duel.judge_name is None:
                return _refuse(fire_id, FailureKind.STATE, "Duel is not active.")

            if duel.current_turn != DuelRole.DEFENDER:
                return _refuse(
                    fire_id,
                    FailureKind.TURN,
                    f"Not your turn. Expected Defender ({duel.defender_name}).",
                )

            if actor_name != duel.defender_name:
                return _refuse(
                    fire_id,
                    FailureKind.TURN,
                    f"Only the Defender ({duel.defender_name}) may use hold_the_line this turn. "
                    f"You invoked as '{actor_name}'.",
                )

            updated = dataclasses.replace(duel, current_turn=DuelRole.JUDGE)
            await self.duels.save_duel(fire_id, updated)

        if self.duel_logger:
            self.duel_logger.log_defense(fire_id, actor_name, rationale, surrender)
        logger.info(f"Defender {actor_name} held the line on fire {fire_id} (surrender={surrender})")

        return DuelResult(success=True, message="Defense recorded. The Judge holds the turn.", duel=updated)

    async def deliver_verdict(
        self,
        fire_id: str,
        actor_name: str,
        winner: DuelRole | str,
        rationale: str,
        plan_mutation: str,
    ) -> DuelResult:
        """Judge rules, overwrites the battle plan and ends the duel.

        Args:
            fire_id: Fire of the active duel
            actor_name: Must be the sworn judge
            winner: "challenger" or "defender"
            rationale: Reasoning behind the ruling
            plan_mutation: New battle plan content, stored verbatim

        Returns:
            DuelResult with the duel as it was before the ruling and plan_mutated=True
        """
        async with self.locks.hold(fire_id):
            duel = await self.duels.get_duel(fire_id)
            if duel is None or duel.judge_name is None:
                return _refuse(fire_id, FailureKind.STATE, "Duel is not active.")

            if duel.current_turn != DuelRole.JUDGE:
                return _refuse(
                    fire_id,
                    FailureKind.TURN,
                    f"Not your turn. Expected Judge ({duel.judge_name}).",
                )

            if actor_name != duel.judge_name:
                return _refuse(
                    fire_id,
                    FailureKind.TURN,
                    f"Only the Judge ({duel.judge_name}) may use deliver_verdict. You invoked as '{actor_name}'.",
                )

            try:
                winner_role = DuelRole(winner)
            except ValueError:
                winner_role = None
            if winner_role not in (DuelRole.CHALLENGER, DuelRole.DEFENDER):
                return _refuse(
                    fire_id,
                    FailureKind.VALIDATION,
                    f"winner must be 'challenger' or 'defender', got '{winner}'.",
                )

            await self.duels.complete_duel(fire_id, plan_mutation)

        duel_log = None
        if self.duel_logger:
            self.duel_logger.log_verdict(fire_id, actor_name, winner_role, rationale, plan_mutation)
            duel_log = self.duel_logger.close(fire_id)
        logger.info(f"Verdict on fire {fire_id}: {winner_role.value} wins, battle plan rewritten")

        return DuelResult(
            success=True,
            message="Verdict delivered. State reverted to DEBATING.",
            duel=duel,
            plan_mutated=True,
            duel_log=duel_log,
        )

    async def abandon_duel(self, fire_id: str) -> DuelResult:
        """Drop the duel without a verdict. The battle plan is left untouched.

        This is the way out when no judge ever shows up.
        """
        async with self.locks.hold(fire_id):
            duel = await self.duels.get_duel(fire_id)
            if duel is None:
                return _refuse(fire_id, FailureKind.NOT_FOUND, f"No duel on fire '{fire_id}' to abandon.")

            await self.duels.clear_duel(fire_id)

        duel_log = None
        if self.duel_logger:
            self.duel_logger.log_abandoned(fire_id)
            duel_log = self.duel_logger.close(fire_id)
        logger.info(f"Duel abandoned on fire {fire_id} ({duel.phase.value})")

        return DuelResult(
            success=True,
            message="Duel abandoned. State reverted to DEBATING. No BattlePlan mutation.",
            duel=duel,
            duel_log=duel_log,
        )
