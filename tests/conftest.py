"""Shared fixtures."""

import pytest

from agentflow.models.agents import AgentConfiguration
from agentflow.services.agent_executor import AgentExecutor
from agentflow.services.travel import MockTravelService
from agentflow.services.users import InMemoryUserDirectory
from agentflow.tools.registry import ToolSetRegistry
from agentflow.tools.travel import TravelToolSet
from agentflow.tools.users import UserToolSet
from tests.fakes import ScriptedLLMClient


@pytest.fixture
def scripted_client() -> ScriptedLLMClient:
    return ScriptedLLMClient()


@pytest.fixture
def user_directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture
def registry(user_directory) -> ToolSetRegistry:
    """Registry with the travel and user management tool sets."""
    registry = ToolSetRegistry()
    registry.register(TravelToolSet(MockTravelService()))
    registry.register(UserToolSet(user_directory))
    return registry


@pytest.fixture
def executor(scripted_client, registry) -> AgentExecutor:
    return AgentExecutor(client=scripted_client, registry=registry, retry_delay=0)


@pytest.fixture
def travel_agent() -> AgentConfiguration:
    return AgentConfiguration(
        agent_id="travel-agent",
        agent_name="Travel Agent",
        system_prompt="You are a travel assistant.",
        model_name="test-model",
        max_retries=0,
        tool_ids=["travel-search-toolset"],
    )
