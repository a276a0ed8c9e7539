"""API request and response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from agentflow.errors import ErrorKind
from agentflow.models.messages import Message, ToolCall, ToolResponse


class ConversationRequest(BaseModel):
    """Request model for conversation endpoint."""

    message: str
    conversation_id: str | None = None


class ConversationResponse(BaseModel):
    """Response model for conversation endpoint."""

    response: str
    conversation_id: str
    success: bool = True
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_responses: list[ToolResponse] = Field(default_factory=list)
    agent_ids: list[str] = Field(default_factory=list)
    usage: dict[str, float] = Field(default_factory=dict)


class ConversationHistoryResponse(BaseModel):
    """Response model for conversation history."""

    conversation_id: str
    created_at: datetime
    last_updated: datetime
    messages: list[Message]


class AgentInfo(BaseModel):
    """Public view of a registered agent."""

    agent_id: str
    agent_name: str
    description: str
    model_name: str
    enabled: bool
    priority: int
    tool_ids: list[str]

    class Config:
        protected_namespaces = ()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
    active_agents: int = 0
