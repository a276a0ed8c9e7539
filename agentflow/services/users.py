"""User directory service interface and implementations."""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class UserRecord:
    """User profile data model."""

    id: str
    name: str | None = None
    tag: str | None = None
    comments: dict[str, str] = field(default_factory=dict)  # travel id -> comment


class UserDirectory(Protocol):
    """Interface for user profile management."""

    async def update_tag(self, user_id: str, tag: str) -> UserRecord:
        """Set a user's tag, creating the user if needed."""
        ...

    async def update_name(self, user_id: str, name: str) -> UserRecord:
        """Set a user's display name, creating the user if needed."""
        ...

    async def add_comment(self, user_id: str, travel_id: str, comment: str) -> UserRecord:
        """Attach a comment from a user to a travel package."""
        ...

    async def get_user(self, user_id: str) -> UserRecord | None:
        """Get a user by id."""
        ...


class InMemoryUserDirectory:
    """In-memory user directory."""

    def __init__(self):
        self.users: dict[str, UserRecord] = {}

    async def update_tag(self, user_id: str, tag: str) -> UserRecord:
        user = self._get_or_create(user_id)
        user.tag = tag
        return user

    async def update_name(self, user_id: str, name: str) -> UserRecord:
        user = self._get_or_create(user_id)
        user.name = name
        return user

    async def add_comment(self, user_id: str, travel_id: str, comment: str) -> UserRecord:
        user = self._get_or_create(user_id)
        user.comments[travel_id] = comment
        return user

    async def get_user(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)

    def _get_or_create(self, user_id: str) -> UserRecord:
        if user_id not in self.users:
            self.users[user_id] = UserRecord(id=user_id)
        return self.users[user_id]
