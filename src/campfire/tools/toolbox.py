"""Tool dispatch - named operations over the campfire service and duel engine.

Two failure channels:
- Protocol failures (unknown tool, arguments that do not match the schema)
  raise ProtocolError.
- Business failures (a refused transition, a locked fire, a missing fire)
  come back as a ToolResult with is_error=True and a readable message the
  calling agent can act on.
"""

import functools
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from ..config import Settings, get_settings
from ..engine.duel import DuelEngine, DuelResult
from ..services.campfire import CampfireResult, CampfireService
from .schemas import (
    DeliverVerdictArgs,
    EchoArgs,
    FireArgs,
    HoldTheLineArgs,
    PingArgs,
    PostMessageArgs,
    StrikeArgumentArgs,
    TakeOathArgs,
    ThrowGauntletArgs,
    ToolArgs,
    UpdateBattlePlanArgs,
)

logger = logging.getLogger("campfire.tools")


class ProtocolError(Exception):
    """The request itself is malformed; no tool was run."""


class UnknownToolError(ProtocolError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: '{name}'")
        self.name = name


class InvalidArgumentsError(ProtocolError):
    """Arguments do not match the tool's schema."""

    def __init__(self, name: str, error: ValidationError) -> None:
        super().__init__(f"Invalid arguments for tool '{name}': {error}")
        self.name = name
        self.errors = error.errors()


@dataclass
class ToolResult:
    """Outcome of a tool call: text content plus an error flag."""

    text: str
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


def _json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _error(result: DuelResult | CampfireResult) -> ToolResult:
    return ToolResult(text=result.message, is_error=True)


ToolHandler = Callable[[Any], Awaitable[ToolResult]]


def safe_tool(func: ToolHandler) -> ToolHandler:
    """Decorator to turn unexpected handler exceptions into error results.

    The exception is logged with its traceback; the caller only sees the
    first line of the exception message.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> ToolResult:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            logger.exception(f"Tool handler error in {func.__name__}: {e}")
            # first line only; driver errors append the failing statement
            lines = str(e).strip().splitlines()
            return ToolResult(text=lines[0] if lines else type(e).__name__, is_error=True)

    return wrapper


@dataclass
class Tool:
    """A registered tool."""

    name: str
    description: str
    arguments: type[ToolArgs]
    handler: ToolHandler

    def to_dict(self) -> dict[str, Any]:
        """Describe the tool for discovery."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.arguments.model_json_schema(by_alias=True),
        }


class Toolbox:
    """Registry of campfire tools."""

    def __init__(
        self,
        service: CampfireService,
        engine: DuelEngine,
        settings: Settings | None = None,
    ) -> None:
        self.service = service
        self.engine = engine
        self.settings = settings or get_settings()
        self._tools: dict[str, Tool] = {}
        self._register_all()

    def register(
        self,
        name: str,
        description: str,
        arguments: type[ToolArgs],
        handler: ToolHandler,
    ) -> None:
        """Register a tool under a unique name."""
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")
        self._tools[name] = Tool(name=name, description=description, arguments=arguments, handler=handler)

    def list_tools(self) -> list[dict[str, Any]]:
        """Describe every registered tool."""
        return [tool.to_dict() for tool in self._tools.values()]

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Validate the arguments and run a tool.

        Raises:
            UnknownToolError: no tool by that name
            InvalidArgumentsError: arguments fail schema validation
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)

        try:
            args = tool.arguments.model_validate(arguments or {})
        except ValidationError as e:
            raise InvalidArgumentsError(name, e) from e

        logger.debug(f"Calling tool {name}")
        result = await tool.handler(args)
        if result.is_error:
            logger.info(f"Tool {name} refused: {result.text}")
        return result

    def _register_all(self) -> None:
        self.register(
            "campfire_ping",
            "Health check of the campfire server. Returns pong and a timestamp.",
            PingArgs,
            self._ping,
        )
        self.register(
            "campfire_echo",
            "Returns the received message (useful to test connectivity).",
            EchoArgs,
            self._echo,
        )
        self.register(
            "campfire_get_or_create_fire",
            "Gets or creates a fire (planning session) by id. Returns the fire as JSON.",
            FireArgs,
            self._get_or_create_fire,
        )
        self.register(
            "campfire_post_message",
            "Posts a message to an existing fire. Requires fireId and text; author optional. "
            "Blocked during a duel (PENDING/ACTIVE). Returns the created message as JSON.",
            PostMessageArgs,
            self._post_message,
        )
        self.register(
            "campfire_list_messages",
            "Lists messages of a fire by fireId. Returns array of messages as JSON.",
            FireArgs,
            self._list_messages,
        )
        self.register(
            "campfire_get_battle_plan",
            "Reads the fire's BattlePlan. Returns fireId and content (null if never written) as JSON.",
            FireArgs,
            self._get_battle_plan,
        )
        self.register(
            "campfire_throw_gauntlet",
            "Declares a duel: Challenger (challenger_name) challenges Defender (target_name) with a thesis. "
            "Sets state to PENDING and locks general write tools.",
            ThrowGauntletArgs,
            self._throw_gauntlet,
        )
        self.register(
            "campfire_take_oath_of_judgement",
            "Third agent (Judge) takes the oath. character_name must differ from Challenger and Defender. "
            "Activates the duel and gives turn to Challenger.",
            TakeOathArgs,
            self._take_oath,
        )
        self.register(
            "campfire_strike_argument",
            "Challenger only, on their turn. Presents the technical attack. Yields turn to Defender.",
            StrikeArgumentArgs,
            self._strike_argument,
        )
        self.register(
            "campfire_hold_the_line",
            "Defender only, on their turn. Argues in defense or surrenders (surrender: true). Yields turn to Judge.",
            HoldTheLineArgs,
            self._hold_the_line,
        )
        self.register(
            "campfire_deliver_verdict",
            "Judge only, on their turn. winner: 'challenger' or 'defender'. "
            "Applies required_plan_mutation to BattlePlan and reverts state to DEBATING.",
            DeliverVerdictArgs,
            self._deliver_verdict,
        )
        self.register(
            "campfire_abandon_duel",
            "Abandons the duel on the fire. Reverts state to DEBATING without mutating BattlePlan. "
            "Deadlock exit if Judge never appears.",
            FireArgs,
            self._abandon_duel,
        )
        self.register(
            "campfire_speak_to_party",
            "Posts a message to the fire. Blocked during duel (PENDING/ACTIVE); returns fixed message.",
            PostMessageArgs,
            self._post_message,
        )
        self.register(
            "campfire_update_battle_plan",
            "Updates the fire's BattlePlan. Blocked during duel (PENDING/ACTIVE); returns fixed message.",
            UpdateBattlePlanArgs,
            self._update_battle_plan,
        )

    # --- Utility handlers ---

    @safe_tool
    async def _ping(self, args: PingArgs) -> ToolResult:
        now = datetime.now(timezone.utc).isoformat()
        return ToolResult(text=f"pong @ {now} ({self.settings.service_name})")

    @safe_tool
    async def _echo(self, args: EchoArgs) -> ToolResult:
        if not args.message.strip():
            return ToolResult(text="message cannot be empty.", is_error=True)
        return ToolResult(text=args.message)

    # --- Fire handlers ---

    @safe_tool
    async def _get_or_create_fire(self, args: FireArgs) -> ToolResult:
        result = await self.service.get_or_create_fire(args.fire_id)
        return ToolResult(text=_json(result.fire.to_dict()))

    @safe_tool
    async def _post_message(self, args: PostMessageArgs) -> ToolResult:
        result = await self.service.post_message(args.fire_id, args.text, args.author)
        if not result.success:
            return _error(result)
        return ToolResult(text=_json(result.posted.to_dict()))

    @safe_tool
    async def _list_messages(self, args: FireArgs) -> ToolResult:
        result = await self.service.list_messages(args.fire_id)
        if not result.success:
            return _error(result)
        return ToolResult(text=_json([m.to_dict() for m in result.messages]))

    @safe_tool
    async def _get_battle_plan(self, args: FireArgs) -> ToolResult:
        result = await self.service.get_battle_plan(args.fire_id)
        return ToolResult(text=_json({"fireId": args.fire_id, "content": result.battle_plan}))

    @safe_tool
    async def _update_battle_plan(self, args: UpdateBattlePlanArgs) -> ToolResult:
        result = await self.service.update_battle_plan(args.fire_id, args.content)
        if not result.success:
            return _error(result)
        return ToolResult(text=result.message)

    # --- Duel handlers ---

    @safe_tool
    async def _throw_gauntlet(self, args: ThrowGauntletArgs) -> ToolResult:
        result = await self.engine.declare_duel(
            args.fire_id,
            args.challenger_name,
            args.target_name,
            args.thesis_of_attack,
        )
        if not result.success:
            return _error(result)
        return ToolResult(text=_json({"duel": result.duel.to_dict(), "message": result.message}))

    @safe_tool
    async def _take_oath(self, args: TakeOathArgs) -> ToolResult:
        result = await self.engine.take_oath(args.fire_id, args.character_name)
        if not result.success:
            return _error(result)
        return ToolResult(text=result.message)

    @safe_tool
    async def _strike_argument(self, args: StrikeArgumentArgs) -> ToolResult:
        result = await self.engine.strike_argument(args.fire_id, args.character_name, args.technical_evidence)
        if not result.success:
            return _error(result)
        return ToolResult(text=_json(result.duel.to_dict()))

    @safe_tool
    async def _hold_the_line(self, args: HoldTheLineArgs) -> ToolResult:
        result = await self.engine.hold_the_line(
            args.fire_id,
            args.character_name,
            args.defense_rationale,
            args.surrender,
        )
        if not result.success:
            return _error(result)
        return ToolResult(text=_json(result.duel.to_dict()))

    @safe_tool
    async def _deliver_verdict(self, args: DeliverVerdictArgs) -> ToolResult:
        result = await self.engine.deliver_verdict(
            args.fire_id,
            args.character_name,
            args.winner,
            args.ruling_rationale,
            args.required_plan_mutation,
        )
        if not result.success:
            return _error(result)
        return ToolResult(
            text=_json(
                {
                    "message": result.message,
                    "winner": args.winner,
                    "planMutated": result.plan_mutated,
                }
            )
        )

    @safe_tool
    async def _abandon_duel(self, args: FireArgs) -> ToolResult:
        result = await self.engine.abandon_duel(args.fire_id)
        if not result.success:
            return _error(result)
        return ToolResult(text=result.message)
