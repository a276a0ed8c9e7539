"""Tests for multi-agent orchestration."""

import pytest

from agentflow.errors import ErrorKind, OrchestratorNotConfiguredError
from agentflow.models.agents import AgentConfiguration, AgentResponse, AgentState
from agentflow.models.context import ConversationContext
from agentflow.models.llm import LLMCompletion
from agentflow.models.messages import Message, ToolCall, ToolResponse
from agentflow.services.agent_executor import AgentExecutor
from agentflow.services.llm_orchestrator import NO_AGENTS_MESSAGE, NO_CONTENT_MESSAGE, LLMOrchestrator


class RecordingExecutor:
    """Executor that returns canned responses and records what each agent saw."""

    def __init__(self, responses: dict[str, AgentResponse | Exception] | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, ConversationContext]] = []

    async def execute(self, agent, context, debug_sink=None) -> AgentResponse:
        self.calls.append((agent.agent_id, context))
        # Simulate an executor that writes into the context it was handed
        context.add_message(Message.assistant(context.conversation_id, f"scratch from {agent.agent_id}"))

        response = self.responses.get(agent.agent_id)
        if isinstance(response, Exception):
            raise response
        return response or AgentResponse(agent_id=agent.agent_id, content=f"reply from {agent.agent_id}")

    @property
    def agent_order(self) -> list[str]:
        return [agent_id for agent_id, _ in self.calls]


def make_context() -> ConversationContext:
    context = ConversationContext(conversation_id="conv-1")
    context.add_message(Message.user("conv-1", "Hello"))
    return context


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def orchestrator(executor) -> LLMOrchestrator:
    return LLMOrchestrator(executor)


class TestAgentRegistry:
    """Tests for registering and toggling agents."""

    def test_register_and_list(self, orchestrator):
        orchestrator.register_agent(AgentConfiguration(agent_id="a"))
        orchestrator.register_agent(AgentConfiguration(agent_id="b", enabled=False))

        assert [agent.agent_id for agent in orchestrator.list_agents()] == ["a", "b"]
        assert orchestrator.list_active_agents() == ["a"]

    def test_register_replaces_same_id(self, orchestrator):
        orchestrator.register_agent(AgentConfiguration(agent_id="a", model_name="m1"))
        orchestrator.register_agent(AgentConfiguration(agent_id="a", model_name="m2"))

        assert len(orchestrator.list_agents()) == 1
        assert orchestrator.get_agent("a").model_name == "m2"

    def test_register_rejects_blank_id(self, orchestrator):
        with pytest.raises(ValueError):
            orchestrator.register_agent(AgentConfiguration.model_construct(agent_id="  "))

    def test_enable_disable(self, orchestrator):
        orchestrator.register_agent(AgentConfiguration(agent_id="a"))

        assert orchestrator.disable_agent("a")
        assert not orchestrator.is_enabled("a")
        assert orchestrator.enable_agent("a")
        assert orchestrator.is_enabled("a")
        assert not orchestrator.enable_agent("missing")

    def test_remove_and_clear(self, orchestrator):
        orchestrator.set_agents([AgentConfiguration(agent_id="a"), AgentConfiguration(agent_id="b")])

        assert orchestrator.remove_agent("a")
        assert not orchestrator.remove_agent("a")
        assert orchestrator.list_active_agents() == ["b"]

        orchestrator.clear_agents()
        assert orchestrator.list_agents() == []

    def test_priority_then_registration_order(self, orchestrator):
        """Test that lower priority values run first and ties keep registration order."""
        orchestrator.register_agent(AgentConfiguration(agent_id="late", priority=5))
        orchestrator.register_agent(AgentConfiguration(agent_id="first-tie", priority=1))
        orchestrator.register_agent(AgentConfiguration(agent_id="second-tie", priority=1))
        orchestrator.register_agent(AgentConfiguration(agent_id="early", priority=-1))

        assert orchestrator.list_active_agents() == ["early", "first-tie", "second-tie", "late"]


class TestProcess:
    """Tests for running agents for a turn."""

    @pytest.mark.asyncio
    async def test_requires_executor(self):
        with pytest.raises(OrchestratorNotConfiguredError):
            await LLMOrchestrator().process(make_context())

    @pytest.mark.asyncio
    async def test_no_active_agents(self, orchestrator, executor):
        orchestrator.register_agent(AgentConfiguration(agent_id="a", enabled=False))

        result = await orchestrator.process(make_context())

        assert result.success is False
        assert result.error_kind == ErrorKind.NO_ACTIVE_AGENTS
        assert result.content == NO_AGENTS_MESSAGE
        assert executor.calls == []

    @pytest.mark.asyncio
    async def test_runs_active_agents_in_order_and_merges_content(self, orchestrator, executor):
        orchestrator.register_agent(AgentConfiguration(agent_id="second", priority=2))
        orchestrator.register_agent(AgentConfiguration(agent_id="first", priority=1))

        result = await orchestrator.process(make_context())

        assert executor.agent_order == ["first", "second"]
        assert result.success
        assert result.content == "reply from first\n\nreply from second"
        assert result.agent_ids == ["first", "second"]

    @pytest.mark.asyncio
    async def test_agents_see_the_same_snapshot(self, orchestrator, executor):
        """Test that no agent sees another agent's output within a turn."""
        orchestrator.set_agents([AgentConfiguration(agent_id="a"), AgentConfiguration(agent_id="b")])
        context = make_context()

        await orchestrator.process(context)

        seen = [ctx for _, ctx in executor.calls]
        assert seen[0] is not seen[1]
        assert [m.content for m in seen[1].messages] == ["Hello", "scratch from b"]
        assert len(context.messages) == 1

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_successful_content(self, orchestrator, executor):
        executor.responses["broken"] = AgentResponse(
            agent_id="broken", state=AgentState.ERROR, error_message="LLM call failed after 1 attempts: reset"
        )
        orchestrator.set_agents([AgentConfiguration(agent_id="ok"), AgentConfiguration(agent_id="broken")])

        result = await orchestrator.process(make_context())

        assert result.success is False
        assert result.content == "reply from ok"
        assert result.error_kind == ErrorKind.LLM_CALL_FAILED
        assert result.error_message == "Agents failed: broken: LLM call failed after 1 attempts: reset"

    @pytest.mark.asyncio
    async def test_executor_exception_becomes_agent_error(self, orchestrator, executor):
        executor.responses["a"] = RuntimeError("boom")
        orchestrator.set_agents([AgentConfiguration(agent_id="a"), AgentConfiguration(agent_id="b")])

        result = await orchestrator.process(make_context())

        assert executor.agent_order == ["a", "b"]
        assert result.success is False
        assert "a: boom" in result.error_message
        assert result.content == "reply from b"

    @pytest.mark.asyncio
    async def test_no_content_placeholder(self, orchestrator, executor):
        executor.responses["a"] = AgentResponse(agent_id="a", content="   ")
        orchestrator.register_agent(AgentConfiguration(agent_id="a"))

        result = await orchestrator.process(make_context())

        assert result.success
        assert result.content == NO_CONTENT_MESSAGE

    @pytest.mark.asyncio
    async def test_tool_activity_and_usage_are_merged(self, orchestrator, executor):
        call_a = ToolCall(id="call_a", name="search_travels_by_country", arguments={"country": "Peru"})
        call_b = ToolCall(id="call_b", name="update_user_tag", arguments={"id": "u1", "tag": "vip"})
        executor.responses["a"] = AgentResponse(
            agent_id="a",
            content="trips",
            tool_calls=[call_a],
            tool_responses=[ToolResponse.ok(call_a, "[]")],
            usage={"prompt_tokens": 10, "completion_tokens": 2, "cost": 0.5},
        )
        executor.responses["b"] = AgentResponse(
            agent_id="b",
            content="tagged",
            tool_calls=[call_b],
            tool_responses=[ToolResponse.ok(call_b, "done")],
            usage={"prompt_tokens": 5, "completion_tokens": 1},
        )
        orchestrator.set_agents([AgentConfiguration(agent_id="a"), AgentConfiguration(agent_id="b")])

        result = await orchestrator.process(make_context())

        assert [call.id for call in result.tool_calls] == ["call_a", "call_b"]
        assert [r.tool_call_id for r in result.tool_responses] == ["call_a", "call_b"]
        assert result.usage == {"prompt_tokens": 15, "completion_tokens": 3, "cost": 0.5}


class TestWithAgentExecutor:
    """Tests running the orchestrator over the real agent executor."""

    @pytest.mark.asyncio
    async def test_agents_run_against_pre_turn_history(self, scripted_client, registry):
        """Test that the second agent's request carries only the pre-turn history."""
        scripted_client.script = [LLMCompletion(content="first"), LLMCompletion(content="second")]
        orchestrator = LLMOrchestrator(AgentExecutor(scripted_client, registry, retry_delay=0))
        orchestrator.set_agents(
            [
                AgentConfiguration(agent_id="a", system_prompt="You are A.", max_retries=0),
                AgentConfiguration(agent_id="b", system_prompt="You are B.", max_retries=0),
            ]
        )

        result = await orchestrator.process(make_context())

        assert result.content == "first\n\nsecond"
        second_request = scripted_client.requests[1]
        assert [m.content for m in second_request.messages] == ["You are B.", "Hello"]
