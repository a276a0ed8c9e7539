"""Offline keyword-driven LLM client."""

import asyncio
import json
import logging
from typing import ClassVar

from agentflow.models.llm import LLMCompletion, LLMRequest, LLMUsage
from agentflow.models.messages import Message, MessageRole, ToolCall
from agentflow.utils.logging import get_logger
from agentflow.utils.tokens import estimate_tokens


class SimulatedLLMClient:
    """Simulated chat model for running the service without a provider.

    Requests a travel search when the user mentions a travel or trip, a user name
    update when they ask to update their name, and summarizes tool results when the
    conversation ends with tool messages. Only tools offered in the request are used.
    """

    COUNTRIES: ClassVar[list[str]] = ["Spain", "France", "Italy", "Japan", "Thailand", "Peru"]
    DEFAULT_COUNTRY = "Spain"

    def __init__(self, latency_seconds: float = 0.0, logger: logging.Logger | None = None):
        self.latency_seconds = latency_seconds
        self.logger = logger or get_logger(__name__)

    async def complete(self, request: LLMRequest) -> LLMCompletion:
        self.logger.info(f"Calling simulated LLM: {request.model}")
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        if request.messages and request.messages[-1].role == MessageRole.TOOL:
            content = self._summarize_tool_results(request.messages)
            tool_calls: list[ToolCall] = []
        else:
            text = self._last_user_text(request.messages)
            tool_calls = self._plan_tool_calls(text, request.tool_names)
            content = self._reply_for(text, request.tool_names)

        prompt_tokens = sum(estimate_tokens(message.content) for message in request.messages)
        return LLMCompletion(
            content=content,
            tool_calls=tool_calls,
            usage=LLMUsage(prompt_tokens=prompt_tokens, completion_tokens=estimate_tokens(content)),
            model=request.model,
        )

    def _plan_tool_calls(self, text: str, available: set[str]) -> list[ToolCall]:
        lowered = text.lower()

        if "update" in lowered and "name" in lowered and "update_user_name" in available:
            return [ToolCall(name="update_user_name", arguments={"id": "user123", "name": "John Doe"})]

        if ("travel" in lowered or "trip" in lowered) and "search_travels_by_country" in available:
            return [ToolCall(name="search_travels_by_country", arguments={"country": self._detect_country(text)})]

        return []

    def _detect_country(self, text: str) -> str:
        lowered = text.lower()
        for country in self.COUNTRIES:
            if country.lower() in lowered:
                return country
        return self.DEFAULT_COUNTRY

    @staticmethod
    def _reply_for(text: str, available: set[str]) -> str:
        lowered = text.lower()
        wants_user = "user" in lowered or "profile" in lowered or ("update" in lowered and "name" in lowered)
        if wants_user and available & {"update_user_name", "update_user_tag", "add_user_comment"}:
            return "I'll help you with user management. Let me update your information."
        if ("travel" in lowered or "trip" in lowered) and "search_travels_by_country" in available:
            return "I'll search for travel options for you. Let me find the best matches."
        return "I understand your request and I'm here to help you with that."

    @staticmethod
    def _last_user_text(messages: list[Message]) -> str:
        for message in reversed(messages):
            if message.role == MessageRole.USER:
                return message.content
        return ""

    @staticmethod
    def _summarize_tool_results(messages: list[Message]) -> str:
        results: list[str] = []
        for message in reversed(messages):
            if message.role != MessageRole.TOOL:
                break
            results.insert(0, message.content)

        lines = ["Here is what I found:"]
        for content in results:
            if content.startswith("Error:"):
                lines.append(f"- I couldn't complete that step ({content.removeprefix('Error:').strip()}).")
                continue
            try:
                payload = json.loads(content)
            except json.JSONDecodeError:
                lines.append(f"- {content}")
                continue
            if isinstance(payload, list):
                for item in payload:
                    if isinstance(item, dict) and "name" in item:
                        details = ", ".join(str(item[key]) for key in ("duration", "price") if key in item)
                        lines.append(f"- {item['name']} ({details})" if details else f"- {item['name']}")
                    else:
                        lines.append(f"- {item}")
            elif isinstance(payload, dict) and "name" in payload:
                lines.append(f"- {payload['name']}: {payload.get('description', '')}".rstrip(": "))
            else:
                lines.append(f"- {content}")

        return "\n".join(lines)
