"""Tool sets available to agents."""

from agentflow.tools.base import ToolAnnotations, ToolDebugSink, ToolDefinition, ToolSet
from agentflow.tools.debug import ToolDebugCollector
from agentflow.tools.registry import ToolSetRegistry
from agentflow.tools.travel import TravelToolSet
from agentflow.tools.users import UserToolSet

__all__ = [
    "ToolAnnotations",
    "ToolDebugCollector",
    "ToolDebugSink",
    "ToolDefinition",
    "ToolSet",
    "ToolSetRegistry",
    "TravelToolSet",
    "UserToolSet",
]
