"""Multi-agent orchestration for a single turn."""

import logging

from agentflow.errors import ErrorKind, OrchestratorNotConfiguredError
from agentflow.models.agents import AgentConfiguration, AgentResponse, AgentState
from agentflow.models.context import ConversationContext
from agentflow.models.llm import LLMResponse
from agentflow.services.agent_executor import AgentExecutor
from agentflow.tools.base import ToolDebugSink
from agentflow.utils.logging import get_logger

NO_AGENTS_MESSAGE = "Unable to process message: no agents are configured"
NO_CONTENT_MESSAGE = "No content generated by agents"


class LLMOrchestrator:
    """Owns the agent set and runs every active agent for a turn.

    Active agents run in ``(priority, registration order)`` order, each against the
    same pre-turn snapshot, so no agent sees another's output within a turn. Their
    responses are merged into one ``LLMResponse``; a failing agent marks the turn as
    unsuccessful without hiding what the other agents produced.
    """

    def __init__(self, executor: AgentExecutor | None = None, logger: logging.Logger | None = None):
        """Initialize orchestrator.

        Args:
            executor: Agent executor (required before ``process`` is called)
            logger: Logger to use (defaults to the module logger)
        """
        self.executor = executor
        self.logger = logger or get_logger(__name__)
        self._agents: dict[str, AgentConfiguration] = {}
        self._enabled: dict[str, bool] = {}
        self._registration_order: dict[str, int] = {}
        self._next_registration = 0

    def register_agent(self, config: AgentConfiguration) -> None:
        """Register an agent, replacing any agent with the same id.

        Raises:
            ValueError: If the agent id is blank
        """
        if not config.agent_id or not config.agent_id.strip():
            raise ValueError("Agent id cannot be empty")

        if config.agent_id not in self._registration_order:
            self._registration_order[config.agent_id] = self._next_registration
            self._next_registration += 1

        self._agents[config.agent_id] = config
        self._enabled[config.agent_id] = config.enabled
        self.logger.info(f"Agent registered: {config.agent_id} (enabled={config.enabled}, priority={config.priority})")

    def remove_agent(self, agent_id: str) -> bool:
        if self._agents.pop(agent_id, None) is None:
            return False
        self._enabled.pop(agent_id, None)
        self._registration_order.pop(agent_id, None)
        self.logger.info(f"Agent removed: {agent_id}")
        return True

    def clear_agents(self) -> None:
        self._agents.clear()
        self._enabled.clear()
        self._registration_order.clear()
        self.logger.info("All agents cleared")

    def set_agents(self, configs: list[AgentConfiguration]) -> None:
        """Replace the agent set."""
        self.clear_agents()
        for config in configs:
            self.register_agent(config)

    def enable_agent(self, agent_id: str) -> bool:
        return self._set_enabled(agent_id, True)

    def disable_agent(self, agent_id: str) -> bool:
        return self._set_enabled(agent_id, False)

    def get_agent(self, agent_id: str) -> AgentConfiguration | None:
        return self._agents.get(agent_id)

    def list_agents(self) -> list[AgentConfiguration]:
        """Every registered agent in execution order, enabled or not."""
        return sorted(self._agents.values(), key=self._order_key)

    def is_enabled(self, agent_id: str) -> bool:
        return self._enabled.get(agent_id, False)

    def list_active_agents(self) -> list[str]:
        """Ids of enabled agents in execution order."""
        return [config.agent_id for config in self.list_agents() if self._enabled[config.agent_id]]

    async def process(self, context: ConversationContext, debug_sink: ToolDebugSink | None = None) -> LLMResponse:
        """Run every active agent against a snapshot of the context and merge the results.

        Args:
            context: Conversation as it stood before this turn
            debug_sink: Optional observer for tool executions

        Returns:
            Merged response. Never raises for agent or tool failures.

        Raises:
            OrchestratorNotConfiguredError: If no executor was provided
        """
        if self.executor is None:
            raise OrchestratorNotConfiguredError("LLMOrchestrator requires an AgentExecutor")

        active_agents = [self._agents[agent_id] for agent_id in self.list_active_agents()]
        if not active_agents:
            self.logger.warning("No active agents available")
            return LLMResponse(
                content=NO_AGENTS_MESSAGE,
                success=False,
                error_message=NO_AGENTS_MESSAGE,
                error_kind=ErrorKind.NO_ACTIVE_AGENTS,
            )

        snapshot = context.snapshot()
        self.logger.info(
            f"Processing conversation {context.conversation_id} with agents: "
            f"{', '.join(agent.agent_id for agent in active_agents)}"
        )

        responses: list[AgentResponse] = []
        for agent in active_agents:
            responses.append(await self._run_agent(agent, snapshot.snapshot(), debug_sink))

        return self._merge(responses)

    async def _run_agent(
        self, agent: AgentConfiguration, snapshot: ConversationContext, debug_sink: ToolDebugSink | None
    ) -> AgentResponse:
        try:
            return await self.executor.execute(agent, snapshot, debug_sink)
        except Exception as e:
            self.logger.error(f"Agent {agent.agent_id} raised during execution: {e}", exc_info=True)
            return AgentResponse(agent_id=agent.agent_id, state=AgentState.ERROR, error_message=str(e))

    def _merge(self, responses: list[AgentResponse]) -> LLMResponse:
        contents = [response.content for response in responses if response.content.strip()]
        failed = [response for response in responses if response.state == AgentState.ERROR]

        usage: dict[str, float] = {}
        for response in responses:
            for key, value in response.usage.items():
                usage[key] = usage.get(key, 0) + value

        error_message = None
        error_kind = None
        if failed:
            details = "; ".join(
                f"{response.agent_id}: {response.error_message or 'unknown error'}" for response in failed
            )
            error_message = f"Agents failed: {details}"
            error_kind = ErrorKind.LLM_CALL_FAILED
            self.logger.warning(error_message)

        return LLMResponse(
            content="\n\n".join(contents) if contents else NO_CONTENT_MESSAGE,
            tool_calls=[call for response in responses for call in response.tool_calls],
            tool_responses=[result for response in responses for result in response.tool_responses],
            success=not failed,
            error_message=error_message,
            error_kind=error_kind,
            usage=usage,
            agent_ids=[response.agent_id for response in responses],
        )

    def _order_key(self, config: AgentConfiguration) -> tuple[int, int]:
        return config.priority, self._registration_order[config.agent_id]

    def _set_enabled(self, agent_id: str, enabled: bool) -> bool:
        if agent_id not in self._agents:
            self.logger.warning(f"Agent not found: {agent_id}")
            return False
        self._enabled[agent_id] = enabled
        self.logger.info(f"Agent {'enabled' if enabled else 'disabled'}: {agent_id}")
        return True
