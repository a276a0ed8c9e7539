"""Registry of tool sets keyed by the tool names they provide."""

import logging

from agentflow.models.llm import LLMToolDefinition
from agentflow.tools.base import ToolDefinition, ToolSet
from agentflow.utils.logging import get_logger


class ToolSetRegistry:
    """Registry for managing tool sets.

    Every tool name is claimed by at most one tool set, so a tool call resolves to
    its provider with a single lookup.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or get_logger(__name__)
        self._toolsets: dict[str, ToolSet] = {}
        self._by_tool_name: dict[str, ToolSet] = {}

    def register(self, toolset: ToolSet) -> None:
        """Register a tool set.

        Raises:
            ValueError: If the tool set id is taken or one of its tools is already
                provided by another tool set
        """
        if toolset.toolset_id in self._toolsets:
            raise ValueError(f"ToolSet already registered: {toolset.toolset_id}")

        for tool in toolset.list_tools():
            owner = self._by_tool_name.get(tool.name)
            if owner is not None:
                raise ValueError(f"Tool {tool.name} is already provided by {owner.toolset_id}")

        self._toolsets[toolset.toolset_id] = toolset
        for tool in toolset.list_tools():
            self._by_tool_name[tool.name] = toolset

        self.logger.info(f"ToolSet registered: {toolset.toolset_id}")

    def unregister(self, toolset_id: str) -> bool:
        """Remove a tool set and release its tool names."""
        toolset = self._toolsets.pop(toolset_id, None)
        if toolset is None:
            return False

        for tool in toolset.list_tools():
            self._by_tool_name.pop(tool.name, None)

        self.logger.info(f"ToolSet unregistered: {toolset_id}")
        return True

    def resolve(self, tool_name: str) -> ToolSet | None:
        """Find the tool set that provides a tool."""
        return self._by_tool_name.get(tool_name)

    def get_toolset(self, toolset_id: str) -> ToolSet | None:
        return self._toolsets.get(toolset_id)

    def list_toolsets(self) -> list[ToolSet]:
        return list(self._toolsets.values())

    def tools_for(self, tool_ids: list[str]) -> list[ToolDefinition]:
        """Resolve configured identifiers to tool definitions.

        Each identifier is either a tool set id (all of its tools) or a single tool
        name. Unknown identifiers are skipped. Order follows the identifiers and
        duplicates are dropped.
        """
        tools: dict[str, ToolDefinition] = {}

        for tool_id in tool_ids:
            toolset = self._toolsets.get(tool_id)
            if toolset is not None:
                for tool in toolset.list_tools():
                    tools.setdefault(tool.name, tool)
                continue

            owner = self._by_tool_name.get(tool_id)
            if owner is not None:
                tool = owner.get_tool(tool_id)
                if tool is not None:
                    tools.setdefault(tool.name, tool)
                continue

            self.logger.warning(f"ToolSet not found: {tool_id}")

        return list(tools.values())

    def llm_tools_for(self, tool_ids: list[str]) -> list[LLMToolDefinition]:
        """Tool catalogue for an LLM request."""
        return [tool.to_llm_tool() for tool in self.tools_for(tool_ids)]
