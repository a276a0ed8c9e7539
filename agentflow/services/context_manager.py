"""Conversation context management for in-memory storage."""

import logging

from cuid2 import cuid_wrapper

from agentflow.models.context import ConversationContext
from agentflow.models.messages import Message, ToolCall
from agentflow.utils.locks import KeyedLock
from agentflow.utils.logging import get_logger, log_message_received

cuid = cuid_wrapper()


class ContextManager:
    """Owns the live conversation contexts.

    Contexts are created by ``get`` or the first mutation; reads of an unknown id
    return an empty copy and store nothing. Every operation on a conversation is
    serialized through a lock keyed by its id, so concurrent turns on different
    conversations never wait on each other.
    """

    def __init__(self, logger: logging.Logger | None = None):
        """Initialize context manager.

        Args:
            logger: Logger to use (defaults to the module logger)
        """
        self.logger = logger or get_logger(__name__)
        self.contexts: dict[str, ConversationContext] = {}
        self._locks = KeyedLock()

    def new_conversation_id(self) -> str:
        """Generate a new CUID-based conversation ID."""
        return cuid()

    async def get(self, conversation_id: str) -> ConversationContext:
        """Get the live context for a conversation, creating it on first access.

        Args:
            conversation_id: Conversation identifier

        Returns:
            The same context object on every call for this id
        """
        async with self._locks.hold(conversation_id):
            return self._get_or_create(conversation_id)

    async def exists(self, conversation_id: str) -> bool:
        return conversation_id in self.contexts

    async def clear(self, conversation_id: str) -> None:
        """Empty a conversation's messages and reset its timestamps."""
        async with self._locks.hold(conversation_id):
            self._get_or_create(conversation_id).clear()
        self.logger.info(f"Conversation cleared: {conversation_id}")

    async def delete(self, conversation_id: str) -> bool:
        """Delete a conversation.

        Returns:
            True if the conversation was deleted, False if not found
        """
        async with self._locks.hold(conversation_id):
            deleted = self.contexts.pop(conversation_id, None) is not None

        if deleted:
            self.logger.info(f"Conversation deleted: {conversation_id}")
        return deleted

    async def snapshot(self, conversation_id: str) -> ConversationContext:
        """Independent copy of a conversation as it is now."""
        async with self._locks.hold(conversation_id):
            return self._peek(conversation_id).snapshot()

    async def add_message(self, conversation_id: str, message: Message) -> Message:
        """Append a message to a conversation.

        Raises:
            ValueError: If the message is rejected by the context
        """
        async with self._locks.hold(conversation_id):
            self._get_or_create(conversation_id).add_message(message)
        log_message_received(self.logger, conversation_id, message.role)
        return message

    async def add_user_message(self, conversation_id: str, content: str) -> Message:
        return await self.add_message(conversation_id, Message.user(conversation_id, content))

    async def add_assistant_message(
        self, conversation_id: str, content: str, tool_calls: list[ToolCall] | None = None
    ) -> Message:
        return await self.add_message(conversation_id, Message.assistant(conversation_id, content, tool_calls))

    async def add_system_message(self, conversation_id: str, content: str) -> Message:
        return await self.add_message(conversation_id, Message.system(conversation_id, content))

    async def add_tool_message(self, conversation_id: str, content: str, tool_call_id: str) -> Message:
        return await self.add_message(conversation_id, Message.tool(conversation_id, content, tool_call_id))

    async def get_all_messages(self, conversation_id: str) -> list[Message]:
        """Messages of a conversation in order, as a copy."""
        async with self._locks.hold(conversation_id):
            return self._peek(conversation_id).get_messages()

    async def get_message_count(self, conversation_id: str) -> int:
        async with self._locks.hold(conversation_id):
            return len(self._peek(conversation_id).messages)

    async def list_conversation_ids(self) -> list[str]:
        return list(self.contexts)

    def restore(self, context: ConversationContext) -> None:
        """Install a previously persisted context, replacing any live one."""
        self.contexts[context.conversation_id] = context.snapshot()

    def get_conversation_count(self) -> int:
        """Get current number of live conversations."""
        return len(self.contexts)

    def _get_or_create(self, conversation_id: str) -> ConversationContext:
        context = self.contexts.get(conversation_id)
        if context is None:
            context = ConversationContext(conversation_id=conversation_id)
            self.contexts[conversation_id] = context
            self.logger.debug(f"Conversation created: {conversation_id}")
        return context

    def _peek(self, conversation_id: str) -> ConversationContext:
        """Live context for reading; unknown ids read as empty without being stored."""
        context = self.contexts.get(conversation_id)
        if context is None:
            return ConversationContext(conversation_id=conversation_id)
        return context
