"""Tests for the tool dispatch layer."""

import asyncio
import json

import pytest

from campfire.engine import LOCK_ADVISORY
from campfire.tools import InvalidArgumentsError, Toolbox, ToolResult, UnknownToolError


async def run_duel(toolbox: Toolbox, fire_id: str, plan: str) -> ToolResult:
    """Drive a duel through the tools. Returns the verdict result."""
    await toolbox.call(
        "campfire_throw_gauntlet",
        {"fireId": fire_id, "challenger_name": "A", "target_name": "B", "thesis_of_attack": "thesis"},
    )
    await toolbox.call("campfire_take_oath_of_judgement", {"fireId": fire_id, "character_name": "C"})
    await toolbox.call(
        "campfire_strike_argument",
        {"fireId": fire_id, "character_name": "A", "technical_evidence": "evidence"},
    )
    await toolbox.call(
        "campfire_hold_the_line",
        {"fireId": fire_id, "character_name": "B", "defense_rationale": "rationale", "surrender": False},
    )
    return await toolbox.call(
        "campfire_deliver_verdict",
        {
            "fireId": fire_id,
            "character_name": "C",
            "winner": "challenger",
            "ruling_rationale": "rationale",
            "required_plan_mutation": plan,
        },
    )


class TestRegistry:
    """Tests for tool discovery and protocol errors."""

    def test_lists_every_tool(self, toolbox: Toolbox):
        """Test all campfire tools are registered."""
        names = {tool["name"] for tool in toolbox.list_tools()}

        assert names == {
            "campfire_ping",
            "campfire_echo",
            "campfire_get_or_create_fire",
            "campfire_post_message",
            "campfire_list_messages",
            "campfire_get_battle_plan",
            "campfire_throw_gauntlet",
            "campfire_take_oath_of_judgement",
            "campfire_strike_argument",
            "campfire_hold_the_line",
            "campfire_deliver_verdict",
            "campfire_abandon_duel",
            "campfire_speak_to_party",
            "campfire_update_battle_plan",
        }

    def test_schema_uses_wire_names(self, toolbox: Toolbox):
        """Test input schemas expose fireId rather than fire_id."""
        tools = {tool["name"]: tool for tool in toolbox.list_tools()}
        schema = tools["campfire_throw_gauntlet"]["inputSchema"]

        assert "fireId" in schema["properties"]
        assert set(schema["required"]) == {"fireId", "challenger_name", "target_name", "thesis_of_attack"}

    def test_duplicate_registration_rejected(self, toolbox: Toolbox):
        """Test tool names are unique."""
        with pytest.raises(ValueError):
            toolbox.register("campfire_ping", "again", toolbox._tools["campfire_ping"].arguments, toolbox._ping)

    async def test_unknown_tool(self, toolbox: Toolbox):
        """Test an unknown tool is a protocol error, not a tool result."""
        with pytest.raises(UnknownToolError) as exc_info:
            await toolbox.call("campfire_self_destruct", {})

        assert exc_info.value.name == "campfire_self_destruct"

    async def test_missing_argument(self, toolbox: Toolbox):
        """Test schema mismatches are protocol errors."""
        with pytest.raises(InvalidArgumentsError):
            await toolbox.call("campfire_throw_gauntlet", {"fireId": "fire1"})

    async def test_extra_argument(self, toolbox: Toolbox):
        """Test unknown arguments are rejected."""
        with pytest.raises(InvalidArgumentsError):
            await toolbox.call("campfire_abandon_duel", {"fireId": "fire1", "force": True})

    async def test_wrong_argument_type(self, toolbox: Toolbox):
        """Test types are not coerced."""
        with pytest.raises(InvalidArgumentsError):
            await toolbox.call(
                "campfire_hold_the_line",
                {"fireId": "fire1", "character_name": "B", "defense_rationale": "r", "surrender": "yes"},
            )

    async def test_invalid_winner(self, toolbox: Toolbox):
        """Test the winner must be challenger or defender."""
        with pytest.raises(InvalidArgumentsError):
            await toolbox.call(
                "campfire_deliver_verdict",
                {
                    "fireId": "fire1",
                    "character_name": "C",
                    "winner": "judge",
                    "ruling_rationale": "r",
                    "required_plan_mutation": "p",
                },
            )


class TestUtilityTools:
    """Tests for ping and echo."""

    async def test_ping(self, toolbox: Toolbox):
        """Test ping reports the service name."""
        result = await toolbox.call("campfire_ping")

        assert result.is_error is False
        assert result.text.startswith("pong @ ")
        assert result.text.endswith("(test-campfire)")

    async def test_echo(self, toolbox: Toolbox):
        """Test echo returns the message unchanged."""
        result = await toolbox.call("campfire_echo", {"message": " hi "})

        assert result.is_error is False
        assert result.text == " hi "

    async def test_echo_blank(self, toolbox: Toolbox):
        """Test echo refuses a blank message."""
        result = await toolbox.call("campfire_echo", {"message": "   "})

        assert result.is_error is True
        assert result.text == "message cannot be empty."

    def test_result_wire_shape(self):
        """Test the wire form of a tool result."""
        assert ToolResult(text="oops", is_error=True).to_dict() == {
            "content": [{"type": "text", "text": "oops"}],
            "isError": True,
        }


class TestFireTools:
    """Tests for fire, message and plan tools."""

    async def test_post_and_list(self, toolbox: Toolbox):
        """Test messages posted through the tools come back as JSON."""
        fire = json.loads((await toolbox.call("campfire_get_or_create_fire", {"fireId": "fire1"})).text)
        await toolbox.call("campfire_post_message", {"fireId": "fire1", "text": "hello", "author": "scout"})
        await toolbox.call("campfire_speak_to_party", {"fireId": "fire1", "text": "world"})

        result = await toolbox.call("campfire_list_messages", {"fireId": "fire1"})
        messages = json.loads(result.text)

        assert fire["id"] == "fire1"
        assert "createdAt" in fire
        assert [m["text"] for m in messages] == ["hello", "world"]
        assert messages[0]["author"] == "scout"
        assert "author" not in messages[1]
        assert messages[0]["fireId"] == "fire1"

    async def test_list_unknown_fire(self, toolbox: Toolbox):
        """Test listing an unknown fire is a business error."""
        result = await toolbox.call("campfire_list_messages", {"fireId": "missing"})

        assert result.is_error is True
        assert result.text == "Fire with id 'missing' does not exist."

    async def test_update_and_read_plan(self, toolbox: Toolbox):
        """Test plan updates are readable."""
        update = await toolbox.call("campfire_update_battle_plan", {"fireId": "fire1", "content": "plan"})
        read = await toolbox.call("campfire_get_battle_plan", {"fireId": "fire1"})

        assert update.text == "BattlePlan updated successfully."
        assert json.loads(read.text) == {"fireId": "fire1", "content": "plan"}


class TestDuelTools:
    """Tests for the duel tools."""

    async def test_full_duel(self, toolbox: Toolbox):
        """Test a full duel through the tools rewrites the plan."""
        result = await run_duel(toolbox, "fire1", "NEW PLAN")
        payload = json.loads(result.text)

        assert result.is_error is False
        assert payload == {
            "message": "Verdict delivered. State reverted to DEBATING.",
            "winner": "challenger",
            "planMutated": True,
        }
        plan = json.loads((await toolbox.call("campfire_get_battle_plan", {"fireId": "fire1"})).text)
        assert plan["content"] == "NEW PLAN"

    async def test_throw_gauntlet_payload(self, toolbox: Toolbox):
        """Test the declared duel is returned in wire form."""
        result = await toolbox.call(
            "campfire_throw_gauntlet",
            {"fireId": "fire1", "challenger_name": "A", "target_name": "B", "thesis_of_attack": "thesis"},
        )
        payload = json.loads(result.text)

        assert payload["message"] == "Duel declared. Waiting for the Judge to take the oath."
        assert payload["duel"]["challengerName"] == "A"
        assert payload["duel"]["defenderName"] == "B"
        assert payload["duel"]["judgeName"] is None
        assert payload["duel"]["currentTurn"] == "challenger"

    async def test_oath_message(self, toolbox: Toolbox):
        """Test the oath confirmation text."""
        await toolbox.call(
            "campfire_throw_gauntlet",
            {"fireId": "fire1", "challenger_name": "A", "target_name": "B", "thesis_of_attack": "thesis"},
        )

        result = await toolbox.call("campfire_take_oath_of_judgement", {"fireId": "fire1", "character_name": "C"})

        assert result.text == "The tribunal is complete. Let the duel begin."

    async def test_judge_identity_violation(self, toolbox: Toolbox):
        """Test a participant swearing in as judge gets a readable error."""
        await toolbox.call(
            "campfire_throw_gauntlet",
            {"fireId": "fire3", "challenger_name": "A", "target_name": "B", "thesis_of_attack": "thesis"},
        )

        result = await toolbox.call("campfire_take_oath_of_judgement", {"fireId": "fire3", "character_name": "A"})

        assert result.is_error is True
        assert result.text == (
            "character_name 'A' is already registered as Challenger. "
            "The Judge must be a third agent with a different name."
        )

    async def test_locked_writes_return_advisory(self, toolbox: Toolbox):
        """Test blocked writes return the advisory verbatim."""
        await toolbox.call(
            "campfire_throw_gauntlet",
            {"fireId": "fire2", "challenger_name": "A", "target_name": "B", "thesis_of_attack": "thesis"},
        )

        for name, args in [
            ("campfire_speak_to_party", {"fireId": "fire2", "text": "hi"}),
            ("campfire_post_message", {"fireId": "fire2", "text": "hi"}),
            ("campfire_update_battle_plan", {"fireId": "fire2", "content": "plan"}),
        ]:
            result = await toolbox.call(name, args)
            assert result.is_error is True
            assert result.text == (
                "Silence. A duel has been declared. Waiting for an impartial Judge to take the oath."
            )
            assert result.text == LOCK_ADVISORY

        abandoned = await toolbox.call("campfire_abandon_duel", {"fireId": "fire2"})
        assert abandoned.text == "Duel abandoned. State reverted to DEBATING. No BattlePlan mutation."

        result = await toolbox.call("campfire_speak_to_party", {"fireId": "fire2", "text": "hi"})
        assert result.is_error is False

    async def test_abandon_without_duel(self, toolbox: Toolbox):
        """Test abandon on an idle fire is a business error."""
        result = await toolbox.call("campfire_abandon_duel", {"fireId": "fire1"})

        assert result.is_error is True
        assert result.text == "No duel on fire 'fire1' to abandon."


class TestHandlerErrors:
    """Tests for unexpected exceptions inside handlers."""

    async def test_exception_becomes_error_result(self, toolbox: Toolbox, monkeypatch):
        """Test a crashing store surfaces as an error result, not an exception."""

        async def broken(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(toolbox.engine, "declare_duel", broken)

        result = await toolbox.call(
            "campfire_throw_gauntlet",
            {"fireId": "fire1", "challenger_name": "A", "target_name": "B", "thesis_of_attack": "thesis"},
        )

        assert result.is_error is True
        assert result.text == "store unavailable"

    async def test_error_result_keeps_first_line(self, toolbox: Toolbox, monkeypatch):
        """Test multi-line exception text is cut to its first line."""

        async def broken(*args, **kwargs):
            raise RuntimeError("UNIQUE constraint failed: fires.id\n[SQL: INSERT INTO fires (id) VALUES (?)]")

        monkeypatch.setattr(toolbox.service, "get_or_create_fire", broken)

        result = await toolbox.call("campfire_get_or_create_fire", {"fireId": "fire1"})

        assert result.is_error is True
        assert result.text == "UNIQUE constraint failed: fires.id"


class TestConcurrentCalls:
    """Tests for tools racing on a fire that does not exist yet."""

    async def test_racing_fire_creation(self, toolbox: Toolbox):
        """Test every concurrent caller gets the same fire."""
        results = await asyncio.gather(
            *(toolbox.call("campfire_get_or_create_fire", {"fireId": "fresh"}) for _ in range(3))
        )

        assert all(r.is_error is False for r in results)
        fires = [json.loads(r.text) for r in results]
        assert {f["id"] for f in fires} == {"fresh"}
        assert len({f["createdAt"] for f in fires}) == 1

    async def test_gauntlet_racing_fire_creation(self, toolbox: Toolbox):
        """Test a gauntlet thrown while the fire is being created is accepted."""
        created, declared = await asyncio.gather(
            toolbox.call("campfire_get_or_create_fire", {"fireId": "fresh"}),
            toolbox.call(
                "campfire_throw_gauntlet",
                {"fireId": "fresh", "challenger_name": "A", "target_name": "B", "thesis_of_attack": "thesis"},
            ),
        )

        assert created.is_error is False
        assert declared.is_error is False
        assert json.loads(declared.text)["message"] == "Duel declared. Waiting for the Judge to take the oath."
