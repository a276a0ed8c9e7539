"""Edge logic and routing for the agent graph."""

from typing import Literal

from agentflow.graphs.state import AgentRunState
from agentflow.utils.logging import get_logger

logger = get_logger(__name__)


def route_request_output(state: AgentRunState) -> Literal["tools", "end"]:
    """Route from the first LLM call.

    Ends on error or when the model asked for no tools.
    """
    if state.error:
        logger.warning(f"Agent {state.agent_id} ending after failed LLM call: {state.error}")
        return "end"

    if state.next_step == "tools" and state.tool_calls:
        return "tools"

    return "end"


def route_tool_output(state: AgentRunState) -> Literal["follow_up", "end"]:
    """Route from tool execution: follow up unless the agent skips it."""
    if state.next_step == "follow_up":
        return "follow_up"
    return "end"
