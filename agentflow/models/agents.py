"""Agent configuration and per-agent result models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from agentflow.models.messages import ToolCall, ToolResponse, utc_now


class AgentState(StrEnum):
    IDLE = "idle"
    PROCESSING = "processing"
    WAITING_FOR_TOOLS = "waiting_for_tools"
    COMPLETED = "completed"
    ERROR = "error"


class ServiceProvider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    QWEN = "qwen"
    SIMULATED = "simulated"
    CUSTOM = "custom"


class AgentConfiguration(BaseModel):
    """Resolved configuration for one agent. Immutable once loaded."""

    agent_id: str = Field(..., min_length=1)
    agent_name: str = ""
    description: str = ""
    system_prompt: str = ""

    provider: ServiceProvider = ServiceProvider.CUSTOM
    model_name: str = "default"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2048, gt=0)
    timeout_ms: int = Field(default=10_000, gt=0)
    max_retries: int = Field(default=3, ge=0)

    tool_ids: list[str] = Field(default_factory=list)
    can_execute_tools: bool = True
    max_tool_calls: int = Field(default=5, ge=0)
    follow_up: bool = True

    enabled: bool = True
    priority: int = 0

    # Cost per token, used to price usage
    input_token_cost: float = 0.0
    output_token_cost: float = 0.0

    class Config:
        frozen = True
        protected_namespaces = ()

    @field_validator("agent_id")
    @classmethod
    def validate_agent_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("agent_id cannot be empty or whitespace only")
        return v.strip()

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class AgentResponse(BaseModel):
    """Outcome of one agent's contribution to a turn."""

    agent_id: str
    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_responses: list[ToolResponse] = Field(default_factory=list)
    state: AgentState = AgentState.COMPLETED
    error_message: str | None = None
    usage: dict[str, float] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utc_now)

    @property
    def has_error(self) -> bool:
        return self.state == AgentState.ERROR
