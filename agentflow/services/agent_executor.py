"""Agent execution: one agent's LLM call, tool loop and follow-up."""

import logging
from typing import Any

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from agentflow.clients.base import LLMClient, complete_with_retries
from agentflow.errors import ErrorKind, LLMCallFailedError
from agentflow.graphs.edges import route_request_output, route_tool_output
from agentflow.graphs.state import AgentRunState
from agentflow.models.agents import AgentConfiguration, AgentResponse, AgentState
from agentflow.models.context import ConversationContext
from agentflow.models.llm import LLMCompletion, LLMRequest
from agentflow.models.messages import Message, ToolCall, ToolResponse
from agentflow.tools.base import ToolDebugSink
from agentflow.tools.registry import ToolSetRegistry
from agentflow.utils.logging import get_logger, log_agent_execution, log_prompt_construction
from agentflow.utils.tokens import estimate_tokens


class AgentExecutor:
    """Runs a single agent against a conversation snapshot.

    The flow is a compiled graph::

        request -> tools -> follow_up -> END

    ``request`` calls the LLM with the agent's prompt, the conversation and its tool
    catalogue. ``tools`` executes the requested calls through the registry and
    appends them to the agent's working copy of the conversation. ``follow_up``
    asks the LLM for the final text. Tool failures never abort the turn; an LLM
    failure ends it with an error response carrying whatever content exists.
    """

    def __init__(
        self,
        client: LLMClient,
        registry: ToolSetRegistry,
        retry_delay: float = 1.0,
        logger: logging.Logger | None = None,
    ):
        """Initialize agent executor.

        Args:
            client: LLM client used for every call
            registry: Tool sets available to agents
            retry_delay: Base delay for LLM retry backoff, in seconds
            logger: Logger to use (defaults to the module logger)
        """
        self.client = client
        self.registry = registry
        self.retry_delay = retry_delay
        self.logger = logger or get_logger(__name__)
        self.graph = self._build_graph()

    def _build_graph(self):
        workflow = StateGraph(AgentRunState)

        workflow.add_node("request", self._request_node)
        workflow.add_node("tools", self._tools_node)
        workflow.add_node("follow_up", self._follow_up_node)

        workflow.set_entry_point("request")

        workflow.add_conditional_edges("request", route_request_output, {"tools": "tools", "end": END})
        workflow.add_conditional_edges("tools", route_tool_output, {"follow_up": "follow_up", "end": END})
        workflow.add_edge("follow_up", END)

        return workflow.compile()

    async def execute(
        self,
        agent: AgentConfiguration,
        context: ConversationContext,
        debug_sink: ToolDebugSink | None = None,
    ) -> AgentResponse:
        """Execute one agent against a conversation snapshot.

        Args:
            agent: Agent configuration
            context: Conversation snapshot; it is read, never modified
            debug_sink: Optional observer for tool executions

        Returns:
            Completed or error response for this agent
        """
        log_agent_execution(self.logger, agent.agent_id, "Starting agent execution")

        messages = context.get_messages()
        if agent.system_prompt:
            messages.insert(0, Message.system(context.conversation_id, agent.system_prompt))

        tools = self.registry.llm_tools_for(agent.tool_ids) if agent.can_execute_tools else []
        log_prompt_construction(
            self.logger,
            agent.agent_id,
            len(messages),
            sum(estimate_tokens(message.content) for message in messages),
        )

        initial_state = AgentRunState(
            agent_id=agent.agent_id, conversation_id=context.conversation_id, messages=messages, tools=tools
        )
        config: RunnableConfig = {"configurable": {"agent": agent, "debug_sink": debug_sink}}

        try:
            result = await self.graph.ainvoke(initial_state.model_dump(), config)
            final_state = AgentRunState.model_validate(result)
        except Exception as e:
            self.logger.error(f"Agent execution failed for {agent.agent_id}: {e}", exc_info=True)
            return AgentResponse(
                agent_id=agent.agent_id,
                state=AgentState.ERROR,
                error_message=f"Agent execution failed: {e}",
            )

        usage = final_state.usage.as_dict(agent.input_token_cost, agent.output_token_cost)

        if final_state.error:
            log_agent_execution(self.logger, agent.agent_id, f"Agent execution failed: {final_state.error}")
            return AgentResponse(
                agent_id=agent.agent_id,
                content=final_state.content,
                tool_calls=final_state.tool_calls,
                tool_responses=final_state.tool_responses,
                state=AgentState.ERROR,
                error_message=final_state.error,
                usage=usage,
            )

        log_agent_execution(self.logger, agent.agent_id, "Agent execution completed successfully")
        return AgentResponse(
            agent_id=agent.agent_id,
            content=final_state.content,
            tool_calls=final_state.tool_calls,
            tool_responses=final_state.tool_responses,
            state=AgentState.COMPLETED,
            usage=usage,
        )

    async def _request_node(self, state: AgentRunState, config: RunnableConfig) -> dict[str, Any]:
        agent: AgentConfiguration = config["configurable"]["agent"]

        try:
            completion = await self._call_llm(agent, state)
        except LLMCallFailedError as e:
            return {"error": str(e), "next_step": "end"}

        tool_calls = self._accept_tool_calls(agent, completion.tool_calls)
        updates: dict[str, Any] = {
            "content": completion.content,
            "tool_calls": tool_calls,
            "prompt_tokens": state.prompt_tokens + completion.usage.prompt_tokens,
            "completion_tokens": state.completion_tokens + completion.usage.completion_tokens,
        }

        if tool_calls:
            self.logger.info(f"Agent {agent.agent_id} requesting {len(tool_calls)} tool calls")
            return {**updates, "next_step": "tools"}

        return {**updates, "next_step": "end"}

    async def _tools_node(self, state: AgentRunState, config: RunnableConfig) -> dict[str, Any]:
        agent: AgentConfiguration = config["configurable"]["agent"]
        debug_sink: ToolDebugSink | None = config["configurable"].get("debug_sink")
        conversation_id = state.conversation_id
        offered = {tool.name for tool in state.tools}

        tool_responses: list[ToolResponse] = []
        for tool_call in state.tool_calls:
            tool_responses.append(await self._execute_tool_call(agent, tool_call, offered, debug_sink))

        messages = [
            *state.messages,
            Message.assistant(conversation_id, state.content, state.tool_calls),
            *(
                Message.tool(conversation_id, response.content, response.tool_call_id)
                for response in tool_responses
            ),
        ]

        return {
            "messages": messages,
            "tool_responses": tool_responses,
            "next_step": "follow_up" if agent.follow_up else "end",
        }

    async def _follow_up_node(self, state: AgentRunState, config: RunnableConfig) -> dict[str, Any]:
        agent: AgentConfiguration = config["configurable"]["agent"]

        try:
            completion = await self._call_llm(agent, state)
        except LLMCallFailedError as e:
            return {"error": str(e), "next_step": "end"}

        if completion.has_tool_calls:
            self.logger.warning(
                f"Agent {agent.agent_id} requested {len(completion.tool_calls)} more tool calls in follow-up; ignoring"
            )

        return {
            "content": completion.content or state.content,
            "prompt_tokens": state.prompt_tokens + completion.usage.prompt_tokens,
            "completion_tokens": state.completion_tokens + completion.usage.completion_tokens,
            "next_step": "end",
        }

    async def _call_llm(self, agent: AgentConfiguration, state: AgentRunState) -> LLMCompletion:
        request = LLMRequest(
            model=agent.model_name,
            messages=state.messages,
            tools=state.tools,
            temperature=agent.temperature,
            max_tokens=agent.max_tokens,
        )
        self.logger.debug(f"Calling LLM with {len(request.messages)} messages and {len(request.tools)} tools")

        return await complete_with_retries(
            self.client,
            request,
            max_retries=agent.max_retries,
            retry_delay=self.retry_delay,
            timeout=agent.timeout_seconds,
            logger=self.logger,
        )

    def _accept_tool_calls(self, agent: AgentConfiguration, tool_calls: list[ToolCall]) -> list[ToolCall]:
        if not tool_calls:
            return []

        if not agent.can_execute_tools:
            self.logger.warning(f"Agent {agent.agent_id} cannot execute tools; dropping {len(tool_calls)} tool calls")
            return []

        if len(tool_calls) > agent.max_tool_calls:
            dropped = [call.name for call in tool_calls[agent.max_tool_calls :]]
            self.logger.warning(
                f"Agent {agent.agent_id} exceeded max_tool_calls ({agent.max_tool_calls}); "
                f"dropping: {', '.join(dropped)}"
            )
            return tool_calls[: agent.max_tool_calls]

        return tool_calls

    async def _execute_tool_call(
        self,
        agent: AgentConfiguration,
        tool_call: ToolCall,
        offered: set[str],
        debug_sink: ToolDebugSink | None,
    ) -> ToolResponse:
        toolset = self.registry.resolve(tool_call.name) if tool_call.name in offered else None

        if toolset is None:
            self.logger.error(f"No ToolSet found for tool {tool_call.name} (agent {agent.agent_id})")
            response = ToolResponse.failure(
                tool_call, f"Tool not found: {tool_call.name}", ErrorKind.TOOL_NOT_FOUND
            )
            if debug_sink is not None:
                try:
                    debug_sink.on_tool_error(tool_call.name, "", response.error_message or "")
                except Exception as e:
                    self.logger.warning(f"Tool debug sink failed for {tool_call.name}: {e}")
            return response

        return await toolset.execute(tool_call, debug_sink=debug_sink, timeout_ms=agent.timeout_ms)
