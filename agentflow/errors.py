"""Error taxonomy for the orchestration pipeline."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Kinds of failure surfaced as data in tool, agent and turn results."""

    TOOL_NOT_FOUND = "tool_not_found"
    TOOL_EXECUTION_FAILED = "tool_execution_failed"
    LLM_CALL_FAILED = "llm_call_failed"
    NO_ACTIVE_AGENTS = "no_active_agents"
    INVALID_INPUT = "invalid_input"


class AgentflowError(Exception):
    """Base class for errors raised by this package."""


class OrchestratorNotConfiguredError(AgentflowError, RuntimeError):
    """A component was used before its required collaborators were wired."""


class LLMCallFailedError(AgentflowError):
    """The LLM client failed, timed out or returned an unusable completion."""
