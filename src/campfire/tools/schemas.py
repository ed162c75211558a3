"""Argument schemas for the campfire tools.

Field names and aliases follow the wire names agents already send
(fireId, challenger_name, ...). Unknown arguments are rejected.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ToolArgs(BaseModel):
    """Base class for tool argument models."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, strict=True)


class FireArgs(ToolArgs):
    """Arguments naming a single fire."""

    fire_id: str = Field(alias="fireId", description="Unique fire id (planning session)")


# =============================================================================
# Utility tools
# =============================================================================


class PingArgs(ToolArgs):
    """No arguments."""


class EchoArgs(ToolArgs):
    message: str = Field(description="Message to return")


# =============================================================================
# Fire tools
# =============================================================================


class PostMessageArgs(FireArgs):
    text: str = Field(description="Message content")
    author: str | None = Field(default=None, description="Agent/author id (optional)")


class UpdateBattlePlanArgs(FireArgs):
    content: str = Field(description="New BattlePlan content")


# =============================================================================
# Duel tools
# =============================================================================


class ThrowGauntletArgs(FireArgs):
    challenger_name: str = Field(description="Challenger name (who invokes the duel)")
    target_name: str = Field(description="Defender name (author of the challenged idea)")
    thesis_of_attack: str = Field(description="Thesis of the attack: which principle the proposal violates")


class TakeOathArgs(FireArgs):
    character_name: str = Field(description="Name of the agent taking the Judge role")


class StrikeArgumentArgs(FireArgs):
    character_name: str = Field(description="Challenger name")
    technical_evidence: str = Field(description="Technical evidence of the attack")


class HoldTheLineArgs(FireArgs):
    character_name: str = Field(description="Defender name")
    defense_rationale: str = Field(description="Defense argument")
    surrender: bool = Field(description="True if the Defender surrenders to the evidence")


class DeliverVerdictArgs(FireArgs):
    character_name: str = Field(description="Judge name")
    winner: Literal["challenger", "defender"] = Field(description="Duel winner")
    ruling_rationale: str = Field(description="Rationale for the ruling")
    required_plan_mutation: str = Field(description="Mutation to apply to the master BattlePlan")
