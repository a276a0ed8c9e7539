"""Message and tool call data models."""

import json
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from cuid2 import cuid_wrapper
from pydantic import BaseModel, Field, field_validator, model_validator

from agentflow.errors import ErrorKind

cuid = cuid_wrapper()

type ToolValue = str | int | float | bool | None | list[ToolValue] | dict[str, ToolValue]


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    SYSTEM = "system"


class MessageType(StrEnum):
    TEXT = "text"
    TOOL_CALL = "tool_call"
    TOOL_RESPONSE = "tool_response"
    SYSTEM_PROMPT = "system_prompt"


class ToolCall(BaseModel):
    """A tool call requested by the assistant."""

    id: str = Field(default_factory=lambda: f"call_{cuid()}")
    name: str = Field(..., min_length=1)
    arguments: dict[str, ToolValue] = Field(default_factory=dict)
    call_timestamp: datetime = Field(default_factory=utc_now)

    class Config:
        frozen = True

    @field_validator("id", mode="before")
    @classmethod
    def fill_blank_id(cls, v: Any) -> Any:
        """Providers sometimes send calls without an id; give those a fresh one."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return f"call_{cuid()}"
        return v

    @field_validator("arguments", mode="before")
    @classmethod
    def decode_wire_arguments(cls, v: Any) -> Any:
        """Accept arguments as a JSON object encoded in a string (the wire form)."""
        if v is None:
            return {}
        if isinstance(v, str | bytes):
            if not v.strip():
                return {}
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"Tool arguments are not valid JSON: {e.msg}") from e
        if not isinstance(v, dict):
            raise ValueError("Tool arguments must be a JSON object")
        return v


class ToolResponse(BaseModel):
    """Result of executing a tool call."""

    tool_call_id: str
    tool_name: str
    content: str
    success: bool = True
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    response_timestamp: datetime = Field(default_factory=utc_now)

    class Config:
        frozen = True

    @classmethod
    def ok(cls, tool_call: ToolCall, content: str) -> Self:
        """Build a successful response for a tool call."""
        return cls(tool_call_id=tool_call.id, tool_name=tool_call.name, content=content)

    @classmethod
    def failure(cls, tool_call: ToolCall, error: str, kind: ErrorKind = ErrorKind.TOOL_EXECUTION_FAILED) -> Self:
        """Build a failed response; the content carries the error so the model can react to it."""
        return cls(
            tool_call_id=tool_call.id,
            tool_name=tool_call.name,
            content=f"Error: {error}",
            success=False,
            error_message=error,
            error_kind=kind,
        )


class Message(BaseModel):
    """An immutable message in a conversation."""

    id: str = Field(default_factory=cuid)
    role: MessageRole
    type: MessageType = MessageType.TEXT
    content: str = ""
    tool_call_id: str | None = None
    tool_calls: list[ToolCall] | None = None
    timestamp: datetime = Field(default_factory=utc_now)
    conversation_id: str

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_tool_linkage(self) -> Self:
        """Tool messages must reference the call that produced them."""
        if self.role == MessageRole.TOOL and not self.tool_call_id:
            raise ValueError("Tool messages require a tool_call_id")
        if self.tool_calls and self.role != MessageRole.ASSISTANT:
            raise ValueError("Only assistant messages can carry tool calls")
        return self

    @classmethod
    def user(cls, conversation_id: str, content: str) -> Self:
        return cls(role=MessageRole.USER, type=MessageType.TEXT, content=content, conversation_id=conversation_id)

    @classmethod
    def assistant(cls, conversation_id: str, content: str, tool_calls: list[ToolCall] | None = None) -> Self:
        message_type = MessageType.TOOL_CALL if tool_calls else MessageType.TEXT
        return cls(
            role=MessageRole.ASSISTANT,
            type=message_type,
            content=content,
            tool_calls=tool_calls or None,
            conversation_id=conversation_id,
        )

    @classmethod
    def system(cls, conversation_id: str, content: str) -> Self:
        return cls(
            role=MessageRole.SYSTEM, type=MessageType.SYSTEM_PROMPT, content=content, conversation_id=conversation_id
        )

    @classmethod
    def tool(cls, conversation_id: str, content: str, tool_call_id: str) -> Self:
        return cls(
            role=MessageRole.TOOL,
            type=MessageType.TOOL_RESPONSE,
            content=content,
            tool_call_id=tool_call_id,
            conversation_id=conversation_id,
        )
