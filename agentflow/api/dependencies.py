"""Service wiring for the API."""

from functools import lru_cache

from agentflow.clients.simulated import SimulatedLLMClient
from agentflow.config import Settings, get_agent_configurations
from agentflow.services.agent_executor import AgentExecutor
from agentflow.services.chat_orchestrator import ChatOrchestrator
from agentflow.services.context_manager import ContextManager
from agentflow.services.llm_orchestrator import LLMOrchestrator
from agentflow.services.persistence import InMemoryConversationRepository
from agentflow.services.travel import MockTravelService
from agentflow.services.users import InMemoryUserDirectory
from agentflow.tools.registry import ToolSetRegistry
from agentflow.tools.travel import TravelToolSet
from agentflow.tools.users import UserToolSet
from agentflow.utils.logging import get_logger

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def get_tool_registry() -> ToolSetRegistry:
    """Get or create the tool registry with the reference tool sets."""
    registry = ToolSetRegistry()
    registry.register(TravelToolSet(MockTravelService()))
    registry.register(UserToolSet(InMemoryUserDirectory()))
    return registry


@lru_cache
def get_llm_orchestrator() -> LLMOrchestrator:
    """Get or create the orchestrator with the configured agents."""
    settings = get_settings()
    executor = AgentExecutor(
        client=SimulatedLLMClient(),
        registry=get_tool_registry(),
        retry_delay=settings.llm_retry_delay,
    )
    orchestrator = LLMOrchestrator(executor)
    orchestrator.set_agents(get_agent_configurations(settings))
    logger.info(f"Agents configured: {', '.join(orchestrator.list_active_agents()) or '(none)'}")
    return orchestrator


@lru_cache
def get_chat_orchestrator() -> ChatOrchestrator:
    """Get or create the chat orchestrator."""
    settings = get_settings()
    return ChatOrchestrator(
        context_manager=ContextManager(),
        llm_orchestrator=get_llm_orchestrator(),
        repository=InMemoryConversationRepository(),
        tool_debug=settings.tool_debug,
        max_message_tokens=settings.max_message_tokens,
        persistence_timeout=settings.persistence_timeout,
    )
