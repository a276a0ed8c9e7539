"""User management tools."""

import logging

from pydantic import BaseModel, Field

from agentflow.services.users import UserDirectory
from agentflow.tools.base import ToolAnnotations, ToolDefinition, ToolSet


class UpdateUserTagInput(BaseModel):
    id: str = Field(..., description="User ID", min_length=1, max_length=100)
    tag: str = Field(..., description="New user tag", min_length=1, max_length=100)


class UpdateUserNameInput(BaseModel):
    id: str = Field(..., description="User ID", min_length=1, max_length=100)
    name: str = Field(..., description="New user name", min_length=1, max_length=200)


class AddUserCommentInput(BaseModel):
    id: str = Field(..., description="User ID", min_length=1, max_length=100)
    travel_id: str = Field(..., alias="travelId", description="Travel ID", min_length=1, max_length=50)
    comment: str = Field(..., description="User comment", min_length=1, max_length=2000)

    class Config:
        populate_by_name = True


class UserToolSet(ToolSet):
    """Tools for updating user profiles."""

    toolset_id = "user-management-toolset"

    def __init__(self, user_directory: UserDirectory, logger: logging.Logger | None = None):
        self.user_directory = user_directory
        super().__init__(logger)

    def _build_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="update_user_tag",
                description="Set the tag of a user profile.",
                input_schema_class=UpdateUserTagInput,
                handler=self._update_user_tag,
                annotations=ToolAnnotations(title="Update User Tag", idempotent_hint=True),
            ),
            ToolDefinition(
                name="update_user_name",
                description="Change the display name of a user. Use when the user asks to update their name.",
                input_schema_class=UpdateUserNameInput,
                handler=self._update_user_name,
                annotations=ToolAnnotations(title="Update User Name", idempotent_hint=True),
            ),
            ToolDefinition(
                name="add_user_comment",
                description="Record a user's comment about a travel package.",
                input_schema_class=AddUserCommentInput,
                handler=self._add_user_comment,
                annotations=ToolAnnotations(title="Add User Comment"),
            ),
        ]

    async def _update_user_tag(self, params: UpdateUserTagInput) -> str:
        await self.user_directory.update_tag(params.id, params.tag)
        return f"User tag updated successfully for user {params.id}"

    async def _update_user_name(self, params: UpdateUserNameInput) -> str:
        await self.user_directory.update_name(params.id, params.name)
        return f"User name updated successfully for user {params.id}"

    async def _add_user_comment(self, params: AddUserCommentInput) -> str:
        await self.user_directory.add_comment(params.id, params.travel_id, params.comment)
        return f"Comment added successfully for user {params.id} on travel {params.travel_id}"
