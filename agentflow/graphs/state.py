"""State definitions for the per-agent LangGraph flow."""

from typing import Literal

from pydantic import BaseModel, Field

from agentflow.models.llm import LLMToolDefinition, LLMUsage
from agentflow.models.messages import Message, ToolCall, ToolResponse


class AgentRunState(BaseModel):
    """State of one agent's turn.

    ``messages`` is the agent's working copy of the conversation: the system prompt,
    the snapshot messages and anything appended during the turn. The live
    conversation is never touched.
    """

    agent_id: str
    conversation_id: str
    messages: list[Message] = Field(default_factory=list)
    tools: list[LLMToolDefinition] = Field(default_factory=list)

    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_responses: list[ToolResponse] = Field(default_factory=list)

    # Control flow
    next_step: Literal["tools", "follow_up", "end"] | None = None
    error: str | None = None

    # Token usage tracking
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def usage(self) -> LLMUsage:
        return LLMUsage(prompt_tokens=self.prompt_tokens, completion_tokens=self.completion_tokens)
