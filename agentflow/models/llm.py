"""LLM-related data models and types (provider-agnostic)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agentflow.errors import ErrorKind
from agentflow.models.messages import Message, ToolCall, ToolResponse, utc_now


class LLMToolDefinition(BaseModel):
    """Tool description sent to the LLM."""

    name: str
    description: str
    parameters: dict[str, Any]


class LLMRequest(BaseModel):
    """A completion request for the LLM client."""

    model: str
    messages: list[Message]
    tools: list[LLMToolDefinition] = Field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int = 2048

    class Config:
        frozen = True

    @property
    def tool_names(self) -> set[str]:
        return {tool.name for tool in self.tools}


@dataclass
class LLMUsage:
    """Token usage information from the LLM provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def add(self, other: "LLMUsage") -> None:
        self.prompt_tokens += other.prompt_tokens
        self.completion_tokens += other.completion_tokens

    def cost(self, input_token_cost: float = 0.0, output_token_cost: float = 0.0) -> float:
        """Price this usage with per-token costs."""
        return self.prompt_tokens * input_token_cost + self.completion_tokens * output_token_cost

    def as_dict(self, input_token_cost: float = 0.0, output_token_cost: float = 0.0) -> dict[str, float]:
        """Numeric counters keyed by name, ready to be summed across agents."""
        usage: dict[str, float] = {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }
        if input_token_cost or output_token_cost:
            usage["cost"] = self.cost(input_token_cost, output_token_cost)
        return usage


@dataclass
class LLMCompletion:
    """Provider-agnostic response from the LLM client."""

    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: LLMUsage = field(default_factory=LLMUsage)
    success: bool = True
    error: str | None = None
    model: str = ""

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class LLMResponse(BaseModel):
    """Merged outcome of a turn, returned to callers of the chat orchestrator."""

    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_responses: list[ToolResponse] = Field(default_factory=list)
    success: bool = True
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    usage: dict[str, float] = Field(default_factory=dict)
    agent_ids: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utc_now)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @property
    def has_error(self) -> bool:
        return not self.success or bool(self.error_message)
