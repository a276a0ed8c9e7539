"""Chat orchestration: the entry point for one conversational turn."""

import asyncio
import logging

from agentflow.errors import ErrorKind
from agentflow.models.context import ConversationContext
from agentflow.models.llm import LLMResponse
from agentflow.services.context_manager import ContextManager
from agentflow.services.llm_orchestrator import LLMOrchestrator
from agentflow.services.persistence import ConversationRepository
from agentflow.tools.debug import ToolDebugCollector
from agentflow.utils.locks import KeyedLock
from agentflow.utils.logging import get_logger
from agentflow.utils.tokens import estimate_tokens

APOLOGY_MESSAGE = "I apologize, but I encountered an error processing your request."


class ChatOrchestrator:
    """Service for handling conversational turns.

    A turn appends the user message, runs the agents on a snapshot of the
    conversation, records their tool activity and reply, and saves the result.
    Turns on the same conversation run one at a time. Callers always get an
    ``LLMResponse`` back, never an exception.
    """

    def __init__(
        self,
        context_manager: ContextManager,
        llm_orchestrator: LLMOrchestrator,
        repository: ConversationRepository | None = None,
        tool_debug: bool = False,
        max_message_tokens: int = 1000,
        persistence_timeout: float = 5.0,
        logger: logging.Logger | None = None,
    ):
        """Initialize chat orchestrator.

        Args:
            context_manager: Owner of the live conversations
            llm_orchestrator: Runs the agents for a turn
            repository: Optional store for conversation snapshots
            tool_debug: Append tool debug lines to the conversation as system messages
            max_message_tokens: Longest accepted user message
            persistence_timeout: Seconds allowed for saving a conversation
            logger: Logger to use (defaults to the module logger)
        """
        self.context_manager = context_manager
        self.llm_orchestrator = llm_orchestrator
        self.repository = repository
        self.tool_debug = tool_debug
        self.max_message_tokens = max_message_tokens
        self.persistence_timeout = persistence_timeout
        self.logger = logger or get_logger(__name__)
        self._turn_locks = KeyedLock()

        self.logger.info("ChatOrchestrator initialized")

    def new_conversation_id(self) -> str:
        return self.context_manager.new_conversation_id()

    async def process_user_message(self, conversation_id: str, message: str) -> LLMResponse:
        """Process a user message and return the merged agent response.

        Args:
            conversation_id: Conversation identifier
            message: User's message

        Returns:
            Response for the turn. Rejected input comes back with
            ``error_kind=invalid_input`` and leaves the conversation untouched.
        """
        rejection = self._validate_message(message)
        if rejection is not None:
            return rejection

        async with self._turn_locks.hold(conversation_id):
            try:
                return await self._process_turn(conversation_id, message)
            except Exception as e:
                self.logger.error(f"Turn processing failed for conversation {conversation_id}: {e}", exc_info=True)
                return LLMResponse(content=APOLOGY_MESSAGE, success=False, error_message=str(e))

    async def get_conversation_context(self, conversation_id: str) -> ConversationContext:
        """Snapshot of a conversation, restored from the repository if it is not live."""
        await self._ensure_loaded(conversation_id)
        return await self.context_manager.snapshot(conversation_id)

    async def clear_conversation(self, conversation_id: str) -> None:
        """Empty a conversation and drop its saved copy."""
        async with self._turn_locks.hold(conversation_id):
            await self.context_manager.clear(conversation_id)
            await self._delete_saved(conversation_id)

    async def delete_conversation(self, conversation_id: str) -> bool:
        """Delete a conversation and its saved copy.

        Returns:
            True if a live or saved conversation was deleted
        """
        async with self._turn_locks.hold(conversation_id):
            deleted = await self.context_manager.delete(conversation_id)
            deleted = await self._delete_saved(conversation_id) or deleted
        return deleted

    async def _process_turn(self, conversation_id: str, message: str) -> LLMResponse:
        await self._ensure_loaded(conversation_id)
        await self.context_manager.add_user_message(conversation_id, message)

        snapshot = await self.context_manager.snapshot(conversation_id)
        debug_collector = ToolDebugCollector() if self.tool_debug else None

        result = await self.llm_orchestrator.process(snapshot, debug_collector)

        if result.tool_calls:
            await self.context_manager.add_assistant_message(conversation_id, "", tool_calls=result.tool_calls)
            for tool_response in result.tool_responses:
                await self.context_manager.add_tool_message(
                    conversation_id, tool_response.content, tool_response.tool_call_id
                )

        if debug_collector is not None:
            for line in debug_collector.drain():
                await self.context_manager.add_system_message(conversation_id, line)

        if result.success and result.content.strip():
            await self.context_manager.add_assistant_message(conversation_id, result.content)

        if result.usage:
            self.logger.info(
                f"Token usage - Prompt: {result.usage.get('prompt_tokens', 0):.0f}, "
                f"Completion: {result.usage.get('completion_tokens', 0):.0f}"
            )

        await self._save(conversation_id)
        return result

    def _validate_message(self, message: str) -> LLMResponse | None:
        if not message or not message.strip():
            return LLMResponse(
                content="Please enter a message.",
                success=False,
                error_message="Message cannot be empty",
                error_kind=ErrorKind.INVALID_INPUT,
            )

        token_count = estimate_tokens(message)
        if token_count > self.max_message_tokens:
            error = f"Your message is too long. Please keep messages under {self.max_message_tokens} tokens."
            self.logger.warning(f"Rejected message with {token_count} tokens (limit {self.max_message_tokens})")
            return LLMResponse(content=error, success=False, error_message=error, error_kind=ErrorKind.INVALID_INPUT)

        return None

    async def _ensure_loaded(self, conversation_id: str) -> None:
        if self.repository is None or await self.context_manager.exists(conversation_id):
            return

        try:
            saved = await asyncio.wait_for(self.repository.load(conversation_id), timeout=self.persistence_timeout)
        except Exception as e:
            self.logger.warning(f"Failed to load conversation {conversation_id}: {e}")
            return

        if saved is not None:
            self.context_manager.restore(saved)
            self.logger.info(f"Conversation restored: {conversation_id} ({len(saved.messages)} messages)")

    async def _save(self, conversation_id: str) -> None:
        if self.repository is None:
            return

        snapshot = await self.context_manager.snapshot(conversation_id)
        try:
            await asyncio.wait_for(self.repository.save(snapshot), timeout=self.persistence_timeout)
        except Exception as e:
            self.logger.warning(f"Failed to save conversation {conversation_id}: {e}")

    async def _delete_saved(self, conversation_id: str) -> bool:
        if self.repository is None:
            return False

        try:
            return await asyncio.wait_for(self.repository.delete(conversation_id), timeout=self.persistence_timeout)
        except Exception as e:
            self.logger.warning(f"Failed to delete saved conversation {conversation_id}: {e}")
            return False
