"""LLM clients."""

from agentflow.clients.base import LLMClient, complete_with_retries
from agentflow.clients.simulated import SimulatedLLMClient

__all__ = ["LLMClient", "SimulatedLLMClient", "complete_with_retries"]
