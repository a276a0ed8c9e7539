"""Conversation persistence interface and implementations."""

import asyncio
from typing import Protocol

from agentflow.models.context import ConversationContext


class ConversationRepository(Protocol):
    """Interface for storing conversation snapshots."""

    async def save(self, context: ConversationContext) -> None:
        """Store a snapshot of a conversation, replacing any earlier one."""
        ...

    async def load(self, conversation_id: str) -> ConversationContext | None:
        """Load a stored conversation.

        Args:
            conversation_id: Conversation identifier

        Returns:
            The stored snapshot, or None if nothing was saved under this id
        """
        ...

    async def delete(self, conversation_id: str) -> bool:
        """Delete a stored conversation. Returns True if something was deleted."""
        ...

    async def exists(self, conversation_id: str) -> bool: ...

    async def load_all(self) -> list[ConversationContext]: ...

    async def clear_all(self) -> None: ...


class InMemoryConversationRepository:
    """In-memory conversation repository.

    Stores independent snapshots so later changes to a live context never leak
    into what was saved.
    """

    def __init__(self):
        self.conversations: dict[str, ConversationContext] = {}
        self._lock = asyncio.Lock()

    async def save(self, context: ConversationContext) -> None:
        async with self._lock:
            self.conversations[context.conversation_id] = context.snapshot()

    async def load(self, conversation_id: str) -> ConversationContext | None:
        async with self._lock:
            context = self.conversations.get(conversation_id)
            return context.snapshot() if context else None

    async def delete(self, conversation_id: str) -> bool:
        async with self._lock:
            return self.conversations.pop(conversation_id, None) is not None

    async def exists(self, conversation_id: str) -> bool:
        return conversation_id in self.conversations

    async def load_all(self) -> list[ConversationContext]:
        async with self._lock:
            return [context.snapshot() for context in self.conversations.values()]

    async def clear_all(self) -> None:
        async with self._lock:
            self.conversations.clear()
