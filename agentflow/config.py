"""Service configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, TypeAdapter

from agentflow.models.agents import AgentConfiguration, ServiceProvider

_agent_list_adapter = TypeAdapter(list[AgentConfiguration])


class AgentsFile(BaseModel):
    """Agent configuration file wrapped in an object."""

    agents: list[AgentConfiguration]


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Runtime settings, read from the environment by ``from_env``."""

    agents_file: Path | None = None
    tool_debug: bool = False
    max_message_tokens: int = 1000
    persistence_timeout: float = 5.0
    llm_retry_delay: float = 1.0
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        agents_file = os.getenv("AGENTFLOW_AGENTS_FILE")
        return cls(
            agents_file=Path(agents_file) if agents_file else None,
            tool_debug=_env_flag("AGENTFLOW_TOOL_DEBUG"),
            max_message_tokens=int(os.getenv("AGENTFLOW_MAX_MESSAGE_TOKENS", "1000")),
            persistence_timeout=float(os.getenv("AGENTFLOW_PERSISTENCE_TIMEOUT", "5.0")),
            llm_retry_delay=float(os.getenv("AGENTFLOW_LLM_RETRY_DELAY", "1.0")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def load_agent_configurations(path: Path) -> list[AgentConfiguration]:
    """Load agent configurations from a JSON file.

    The file holds a JSON array of agent objects, or an object with an ``agents`` array.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If an agent record is invalid
    """
    raw = path.read_text(encoding="utf-8")
    if raw.lstrip().startswith("{"):
        return AgentsFile.model_validate_json(raw).agents

    return _agent_list_adapter.validate_json(raw)


def default_agent_configurations() -> list[AgentConfiguration]:
    """Built-in agents: a travel assistant and a user profile assistant."""
    return [
        AgentConfiguration(
            agent_id="travel-agent",
            agent_name="Travel Agent",
            description="Finds travel packages and answers questions about them",
            system_prompt=(
                "You are a helpful travel assistant. Use the travel search tools to find packages "
                "that match the user's destination, budget and interests, then summarize the best "
                "options clearly. Do not invent packages that the tools did not return."
            ),
            provider=ServiceProvider.SIMULATED,
            model_name="simulated-travel",
            temperature=0.7,
            max_tokens=2000,
            tool_ids=["travel-search-toolset"],
            priority=0,
        ),
        AgentConfiguration(
            agent_id="user-agent",
            agent_name="User Profile Agent",
            description="Updates user names, tags and travel comments",
            system_prompt=(
                "You manage user profiles. When the user asks to change their name or tag, or to "
                "leave a comment on a travel package, call the matching user management tool and "
                "confirm the change."
            ),
            provider=ServiceProvider.SIMULATED,
            model_name="simulated-users",
            temperature=0.3,
            max_tokens=1000,
            tool_ids=["user-management-toolset"],
            priority=1,
        ),
    ]


def get_agent_configurations(settings: Settings) -> list[AgentConfiguration]:
    """Agents from the configured file, or the built-in defaults."""
    if settings.agents_file is not None:
        return load_agent_configurations(settings.agents_file)
    return default_agent_configurations()
