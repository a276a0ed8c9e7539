"""LLM client contract and request helpers."""

import asyncio
import logging
from typing import Protocol, runtime_checkable

from agentflow.errors import LLMCallFailedError
from agentflow.models.llm import LLMCompletion, LLMRequest
from agentflow.utils.logging import get_logger


@runtime_checkable
class LLMClient(Protocol):
    """Interface for chat completion backends."""

    async def complete(self, request: LLMRequest) -> LLMCompletion:
        """Run one completion.

        Args:
            request: Model, messages and tool catalogue

        Returns:
            Completion with text and/or tool calls. Backends report failures either by
            raising or by returning ``success=False``.
        """
        ...


async def complete_with_retries(
    client: LLMClient,
    request: LLMRequest,
    max_retries: int = 3,
    retry_delay: float = 1.0,
    timeout: float | None = None,
    logger: logging.Logger | None = None,
) -> LLMCompletion:
    """Execute a completion with a per-attempt timeout and retry logic.

    The request is immutable, so retries never duplicate conversation messages.

    Args:
        client: LLM client
        request: Request to send
        max_retries: Retries after the first attempt
        retry_delay: Base delay for exponential backoff, in seconds
        timeout: Per-attempt timeout in seconds

    Returns:
        The first successful completion

    Raises:
        LLMCallFailedError: If every attempt failed
    """
    logger = logger or get_logger(__name__)
    attempts = max_retries + 1
    last_error = "unknown error"

    for attempt in range(attempts):
        try:
            completion = await asyncio.wait_for(client.complete(request), timeout=timeout)
            if completion.success:
                return completion
            last_error = completion.error or "LLM returned an unsuccessful completion"
            logger.warning(f"LLM call to {request.model} unsuccessful (attempt {attempt + 1}/{attempts}): {last_error}")
        except TimeoutError:
            last_error = f"LLM call timed out after {timeout}s"
            logger.warning(f"LLM call to {request.model} timed out (attempt {attempt + 1}/{attempts})")
        except Exception as e:
            last_error = str(e) or type(e).__name__
            logger.warning(f"LLM call to {request.model} failed (attempt {attempt + 1}/{attempts}): {last_error}")

        if attempt < attempts - 1:
            await asyncio.sleep(retry_delay * (2**attempt))

    raise LLMCallFailedError(f"LLM call failed after {attempts} attempts: {last_error}")
