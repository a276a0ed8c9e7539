"""Tests for tool sets and the tool registry."""

import asyncio
import json

import pytest
from pydantic import BaseModel

from agentflow.errors import ErrorKind
from agentflow.models.messages import ToolCall
from agentflow.services.travel import MockTravelService
from agentflow.tools.base import ToolDefinition, ToolSet, serialize_result
from agentflow.tools.debug import ToolDebugCollector
from agentflow.tools.registry import ToolSetRegistry
from agentflow.tools.travel import TravelToolSet
from agentflow.tools.users import UserToolSet


class EchoInput(BaseModel):
    text: str


class FlakyToolSet(ToolSet):
    """Tool set with misbehaving tools."""

    toolset_id = "flaky-toolset"

    def _build_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="explode", description="Always fails", input_schema_class=EchoInput, handler=self._explode
            ),
            ToolDefinition(
                name="slow",
                description="Never finishes in time",
                input_schema_class=EchoInput,
                handler=self._slow,
                timeout_ms=20,
            ),
            ToolDefinition(
                name="limited",
                description="Two calls per minute",
                input_schema_class=EchoInput,
                handler=self._echo,
                requests_per_minute=2,
            ),
        ]

    async def _explode(self, params: EchoInput) -> str:
        raise RuntimeError(f"cannot handle {params.text}")

    async def _slow(self, params: EchoInput) -> str:
        await asyncio.sleep(1)
        return params.text

    async def _echo(self, params: EchoInput) -> str:
        return params.text


@pytest.fixture
def travel_tools() -> TravelToolSet:
    return TravelToolSet(MockTravelService())


class TestToolDefinitions:
    """Tests for tool catalogues."""

    def test_travel_tools(self, travel_tools):
        names = [tool.name for tool in travel_tools.list_tools()]
        assert names == ["search_travels_by_country", "search_travels_advanced", "get_travel_details"]

    def test_json_schema_shape(self, travel_tools):
        """Test that tool input schemas are flat object schemas."""
        schema = travel_tools.get_tool("search_travels_by_country").get_json_schema()
        assert schema["type"] == "object"
        assert schema["required"] == ["country"]
        assert schema["properties"]["country"]["type"] == "string"

    def test_schema_uses_wire_names(self, travel_tools):
        schema = travel_tools.get_tool("get_travel_details").get_json_schema()
        assert "travelId" in schema["properties"]
        assert schema["required"] == ["travelId"]

    def test_optional_parameters_are_not_required(self, travel_tools):
        schema = travel_tools.get_tool("search_travels_advanced").get_json_schema()
        assert schema["required"] == []

    def test_annotations(self, travel_tools, user_directory):
        assert travel_tools.get_tool("search_travels_by_country").annotations.read_only_hint is True
        user_tools = UserToolSet(user_directory)
        annotations = user_tools.get_tool("add_user_comment").annotations
        assert annotations.read_only_hint is False
        assert annotations.idempotent_hint is False

    def test_supports_and_validate(self, travel_tools):
        assert travel_tools.supports("get_travel_details")
        assert not travel_tools.supports("update_user_name")
        assert travel_tools.validate(ToolCall(name="search_travels_by_country", arguments={"country": "Peru"}))
        assert not travel_tools.validate(ToolCall(name="search_travels_by_country", arguments={}))


class TestToolExecution:
    """Tests for executing tool calls."""

    @pytest.mark.asyncio
    async def test_search_by_country_returns_json_array(self, travel_tools):
        call = ToolCall(name="search_travels_by_country", arguments={"country": "Spain"})
        response = await travel_tools.execute(call)

        assert response.success
        assert response.tool_call_id == call.id
        results = json.loads(response.content)
        assert [r["name"] for r in results] == ["Adventure in Spain", "Cultural Tour Spain", "Luxury Experience Spain"]

    @pytest.mark.asyncio
    async def test_advanced_search_defaults(self, travel_tools):
        response = await travel_tools.execute(ToolCall(name="search_travels_advanced"))
        results = json.loads(response.content)
        assert results[0]["duration"] == "7 days"
        assert results[0]["price"] == "$1000"
        assert results[1]["interests"] == "adventure"

    @pytest.mark.asyncio
    async def test_travel_details_by_wire_name(self, travel_tools):
        response = await travel_tools.execute(ToolCall(name="get_travel_details", arguments={"travelId": "travel_002"}))
        assert json.loads(response.content)["id"] == "travel_002"

    @pytest.mark.asyncio
    async def test_user_tools_update_directory(self, user_directory):
        user_tools = UserToolSet(user_directory)
        response = await user_tools.execute(
            ToolCall(name="add_user_comment", arguments={"id": "u1", "travelId": "travel_001", "comment": "Great"})
        )
        assert response.success
        assert response.content == "Comment added successfully for user u1 on travel travel_001"
        assert (await user_directory.get_user("u1")).comments == {"travel_001": "Great"}

    @pytest.mark.asyncio
    async def test_unknown_tool(self, travel_tools):
        response = await travel_tools.execute(ToolCall(name="book_flight"))
        assert not response.success
        assert response.error_kind == ErrorKind.TOOL_NOT_FOUND

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, travel_tools):
        """Test that schema violations come back as invalid input."""
        response = await travel_tools.execute(ToolCall(name="search_travels_advanced", arguments={"days": "many"}))
        assert not response.success
        assert response.error_kind == ErrorKind.INVALID_INPUT
        assert "days" in response.error_message

    @pytest.mark.asyncio
    async def test_handler_exception_is_contained(self):
        response = await FlakyToolSet().execute(ToolCall(name="explode", arguments={"text": "x"}))
        assert not response.success
        assert response.error_kind == ErrorKind.TOOL_EXECUTION_FAILED
        assert "cannot handle x" in response.content

    @pytest.mark.asyncio
    async def test_timeout(self):
        response = await FlakyToolSet().execute(ToolCall(name="slow", arguments={"text": "x"}))
        assert not response.success
        assert "timed out" in response.error_message

    @pytest.mark.asyncio
    async def test_caller_timeout_tightens_tool_timeout(self):
        toolset = FlakyToolSet()
        response = await toolset.execute(ToolCall(name="slow", arguments={"text": "x"}), timeout_ms=5)
        assert "5 ms" in response.error_message

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        toolset = FlakyToolSet()
        responses = [await toolset.execute(ToolCall(name="limited", arguments={"text": "x"})) for _ in range(3)]
        assert [r.success for r in responses] == [True, True, False]
        assert "Rate limit exceeded" in responses[2].error_message

    @pytest.mark.asyncio
    async def test_debug_sink_records_success_and_error(self, travel_tools):
        collector = ToolDebugCollector()
        await travel_tools.execute(ToolCall(name="search_travels_by_country", arguments={"country": "Peru"}), collector)
        await travel_tools.execute(ToolCall(name="search_travels_by_country", arguments={}), collector)

        entries = collector.drain()
        assert entries[0].startswith("🔧 Tool Executed: search_travels_by_country from travel-search-toolset")
        assert "country=Peru" in entries[0]
        assert entries[1].startswith("❌ Tool Error: search_travels_by_country")
        assert collector.drain() == []

    @pytest.mark.asyncio
    async def test_failing_debug_sink_does_not_fail_the_call(self, travel_tools):
        class BrokenSink:
            def on_tool_executed(self, *args):
                raise RuntimeError("sink down")

            def on_tool_error(self, *args):
                raise RuntimeError("sink down")

        response = await travel_tools.execute(
            ToolCall(name="search_travels_by_country", arguments={"country": "Peru"}), BrokenSink()
        )
        assert response.success

    def test_debug_collector_truncates_results(self):
        collector = ToolDebugCollector()
        collector.on_tool_executed("t", "set", "(none)", "x" * 500)
        assert collector.entries[0].endswith("x" * 200 + "...")

    def test_serialize_result(self):
        assert serialize_result("plain") == "plain"
        assert serialize_result({"a": 1}) == '{"a": 1}'
        assert serialize_result(EchoInput(text="hi")) == '{"text":"hi"}'


class TestToolSetRegistry:
    """Tests for the tool registry."""

    def test_resolve_by_tool_name(self, registry):
        assert registry.resolve("update_user_tag").toolset_id == "user-management-toolset"
        assert registry.resolve("search_travels_by_country").toolset_id == "travel-search-toolset"
        assert registry.resolve("book_flight") is None

    def test_rejects_duplicate_tool_names(self, registry):
        """Test that a tool name can only be provided by one tool set."""

        class ShadowTravelToolSet(TravelToolSet):
            toolset_id = "shadow-travel-toolset"

        with pytest.raises(ValueError, match="already provided"):
            registry.register(ShadowTravelToolSet(MockTravelService()))

    def test_rejects_duplicate_toolset_ids(self, registry):
        with pytest.raises(ValueError, match="already registered"):
            registry.register(TravelToolSet(MockTravelService()))

    def test_unregister_releases_tool_names(self, registry):
        assert registry.unregister("travel-search-toolset")
        assert registry.resolve("search_travels_by_country") is None
        registry.register(TravelToolSet(MockTravelService()))
        assert registry.resolve("search_travels_by_country") is not None

    def test_tools_for_mixed_identifiers(self, registry):
        """Test resolving tool set ids and single tool names together."""
        tools = registry.tools_for(["update_user_name", "travel-search-toolset", "missing", "update_user_name"])
        assert [tool.name for tool in tools] == [
            "update_user_name",
            "search_travels_by_country",
            "search_travels_advanced",
            "get_travel_details",
        ]

    def test_llm_tools_for(self, registry):
        tools = registry.llm_tools_for(["user-management-toolset"])
        assert {tool.name for tool in tools} == {"update_user_tag", "update_user_name", "add_user_comment"}
        assert tools[0].parameters["type"] == "object"

    def test_empty_registry(self):
        registry = ToolSetRegistry()
        assert registry.tools_for(["travel-search-toolset"]) == []
        assert registry.list_toolsets() == []
