"""Base types and definitions for tool sets."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from limits import RateLimitItem, parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from pydantic import BaseModel, ValidationError

from agentflow.errors import ErrorKind
from agentflow.models.llm import LLMToolDefinition
from agentflow.models.messages import ToolCall, ToolResponse
from agentflow.utils.logging import format_arguments, get_logger, log_tool_call, log_tool_response

ToolHandler = Callable[[Any], Awaitable[Any]]


class ToolAnnotations(BaseModel):
    """Behavioral hints describing a tool to clients."""

    title: str = ""
    read_only_hint: bool = False
    destructive_hint: bool = False
    idempotent_hint: bool = False
    open_world_hint: bool = False


@dataclass
class ToolDefinition:
    """Definition of a tool available to agents."""

    name: str
    description: str
    input_schema_class: type[BaseModel]
    handler: ToolHandler
    annotations: ToolAnnotations = field(default_factory=ToolAnnotations)
    timeout_ms: int = 5000
    requests_per_minute: int | None = None

    def get_json_schema(self) -> dict[str, Any]:
        """Get the JSON schema for this tool's input as a flat object schema."""
        schema = self.input_schema_class.model_json_schema()
        return {
            "type": "object",
            "properties": schema.get("properties", {}),
            "required": schema.get("required", []),
        }

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input)

    def to_llm_tool(self) -> LLMToolDefinition:
        return LLMToolDefinition(name=self.name, description=self.description, parameters=self.get_json_schema())

    @property
    def rate_limit(self) -> RateLimitItem | None:
        if not self.requests_per_minute:
            return None
        return parse(f"{self.requests_per_minute}/minute")


class ToolDebugSink(Protocol):
    """Observer notified about every tool execution."""

    def on_tool_executed(self, tool_name: str, toolset_id: str, arguments: str, response: str) -> None: ...

    def on_tool_error(self, tool_name: str, toolset_id: str, error: str) -> None: ...


class ToolSet(ABC):
    """A named provider of related tools.

    Subclasses declare their tools in ``_build_tools``. ``execute`` never raises:
    unknown tools, invalid arguments, handler errors, timeouts and rate limiting
    all come back as failed ``ToolResponse`` values.
    """

    toolset_id: str

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or get_logger(__name__)
        self._rate_limiter = MovingWindowRateLimiter(MemoryStorage())
        self._tools: dict[str, ToolDefinition] = {tool.name: tool for tool in self._build_tools()}
        self.logger.info(f"{type(self).__name__} initialized with tools: {', '.join(self._tools)}")

    @abstractmethod
    def _build_tools(self) -> list[ToolDefinition]:
        """Return the tools provided by this set."""
        ...

    def list_tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def get_tool(self, tool_name: str) -> ToolDefinition | None:
        return self._tools.get(tool_name)

    def supports(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def validate(self, tool_call: ToolCall) -> bool:
        """Check that the call targets a tool of this set with valid arguments."""
        tool = self._tools.get(tool_call.name)
        if tool is None:
            return False
        try:
            tool.parse_input(tool_call.arguments)
        except ValidationError:
            return False
        return True

    async def execute(
        self,
        tool_call: ToolCall,
        debug_sink: ToolDebugSink | None = None,
        timeout_ms: int | None = None,
    ) -> ToolResponse:
        """Execute a tool call.

        Args:
            tool_call: The call to execute
            debug_sink: Optional observer for the outcome
            timeout_ms: Caller deadline; the tighter of this and the tool's own timeout applies

        Returns:
            Successful or failed tool response
        """
        log_tool_call(self.logger, tool_call.name, tool_call.arguments)

        response = await self._execute(tool_call, timeout_ms)

        log_tool_response(self.logger, tool_call.name, response.content)
        if debug_sink is not None:
            self._notify_debug_sink(debug_sink, tool_call, response)

        return response

    async def _execute(self, tool_call: ToolCall, timeout_ms: int | None) -> ToolResponse:
        tool = self._tools.get(tool_call.name)
        if tool is None:
            return ToolResponse.failure(tool_call, f"Unknown tool: {tool_call.name}", ErrorKind.TOOL_NOT_FOUND)

        if not self._check_rate_limit(tool):
            self.logger.warning(f"Rate limit exceeded for tool {tool.name}")
            return ToolResponse.failure(tool_call, f"Rate limit exceeded for tool {tool.name}")

        try:
            params = tool.parse_input(tool_call.arguments)
        except ValidationError as e:
            details = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            return ToolResponse.failure(
                tool_call, f"Invalid arguments for {tool.name}: {details}", ErrorKind.INVALID_INPUT
            )

        effective_timeout_ms = min(tool.timeout_ms, timeout_ms) if timeout_ms else tool.timeout_ms
        try:
            result = await asyncio.wait_for(tool.handler(params), timeout=effective_timeout_ms / 1000)
        except TimeoutError:
            self.logger.error(f"Tool {tool.name} timed out after {effective_timeout_ms} ms")
            return ToolResponse.failure(tool_call, f"Tool {tool.name} timed out after {effective_timeout_ms} ms")
        except Exception as e:
            self.logger.error(f"Tool {tool.name} failed: {e}", exc_info=True)
            return ToolResponse.failure(tool_call, f"Tool execution failed: {e}")

        return ToolResponse.ok(tool_call, serialize_result(result))

    def _check_rate_limit(self, tool: ToolDefinition) -> bool:
        limit = tool.rate_limit
        if limit is None:
            return True
        return self._rate_limiter.hit(limit, self.toolset_id, tool.name)

    def _notify_debug_sink(self, debug_sink: ToolDebugSink, tool_call: ToolCall, response: ToolResponse) -> None:
        try:
            if response.success:
                debug_sink.on_tool_executed(
                    tool_call.name, self.toolset_id, format_arguments(tool_call.arguments), response.content
                )
            else:
                debug_sink.on_tool_error(tool_call.name, self.toolset_id, response.error_message or response.content)
        except Exception as e:
            self.logger.warning(f"Tool debug sink failed for {tool_call.name}: {e}")


def serialize_result(result: Any) -> str:
    """Serialize a handler result to the text handed back to the model."""
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        return result.model_dump_json()
    return json.dumps(result, default=str)
