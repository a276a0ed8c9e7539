"""Conversation context model."""

from dataclasses import dataclass, field
from datetime import datetime

from agentflow.models.messages import Message, MessageRole, utc_now


@dataclass
class ConversationContext:
    """Ordered, append-only log of messages for one conversation."""

    conversation_id: str
    messages: list[Message] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    last_updated: datetime = field(default_factory=utc_now)

    def add_message(self, message: Message) -> None:
        """Append a message.

        Raises:
            ValueError: If the message belongs to another conversation or is a tool
                message with no matching tool call in a prior assistant message
        """
        if message.conversation_id != self.conversation_id:
            raise ValueError(
                f"Message for conversation {message.conversation_id} cannot be added to {self.conversation_id}"
            )
        if message.role == MessageRole.TOOL and message.tool_call_id not in self.tool_call_ids():
            raise ValueError(f"Tool message references unknown tool call {message.tool_call_id}")

        self.messages.append(message)
        self.last_updated = utc_now()

    def tool_call_ids(self) -> set[str]:
        """Ids of every tool call requested by assistant messages so far."""
        return {call.id for message in self.messages if message.tool_calls for call in message.tool_calls}

    def get_messages(self) -> list[Message]:
        """Return a copy of the messages; mutating it does not affect the context."""
        return list(self.messages)

    def clear(self) -> None:
        """Empty the messages and reset timestamps."""
        self.messages.clear()
        now = utc_now()
        self.created_at = now
        self.last_updated = now

    def snapshot(self) -> "ConversationContext":
        """Independent copy of this context. Messages are immutable and shared."""
        return ConversationContext(
            conversation_id=self.conversation_id,
            messages=list(self.messages),
            created_at=self.created_at,
            last_updated=self.last_updated,
        )

    def as_dict(self) -> dict:
        """Return the context as a JSON-compatible dictionary."""
        return {
            "conversation_id": self.conversation_id,
            "created_at": self.created_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "messages": [message.model_dump(mode="json") for message in self.messages],
        }
