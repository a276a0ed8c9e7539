"""API endpoints for the chat orchestration service."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from agentflow import __version__
from agentflow.api.dependencies import get_chat_orchestrator, get_llm_orchestrator
from agentflow.errors import ErrorKind
from agentflow.models.conversation import (
    AgentInfo,
    ConversationHistoryResponse,
    ConversationRequest,
    ConversationResponse,
    HealthResponse,
)
from agentflow.services.chat_orchestrator import ChatOrchestrator
from agentflow.services.llm_orchestrator import LLMOrchestrator
from agentflow.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

ChatOrchestratorDep = Annotated[ChatOrchestrator, Depends(get_chat_orchestrator)]
LLMOrchestratorDep = Annotated[LLMOrchestrator, Depends(get_llm_orchestrator)]


@router.post("/conversation", response_model=ConversationResponse, tags=["Conversation"])
async def handle_conversation(request: ConversationRequest, chat: ChatOrchestratorDep) -> ConversationResponse:
    """Handle a conversation message and return the agents' merged response.

    A new conversation is started when no ``conversation_id`` is given.
    """
    conversation_id = request.conversation_id or chat.new_conversation_id()
    logger.info(f"Processing message for conversation {conversation_id}: {request.message[:50]}...")

    result = await chat.process_user_message(conversation_id, request.message)

    if result.error_kind == ErrorKind.INVALID_INPUT:
        logger.warning(f"Message validation error for conversation {conversation_id}: {result.error_message}")
        raise HTTPException(status_code=400, detail=result.error_message)

    logger.info(f"Generated response for conversation {conversation_id}: {result.content[:50]}...")
    return ConversationResponse(
        response=result.content,
        conversation_id=conversation_id,
        success=result.success,
        error_message=result.error_message,
        error_kind=result.error_kind,
        tool_calls=result.tool_calls,
        tool_responses=result.tool_responses,
        agent_ids=result.agent_ids,
        usage=result.usage,
    )


@router.get("/conversation/{conversation_id}", response_model=ConversationHistoryResponse, tags=["Conversation"])
async def get_conversation(conversation_id: str, chat: ChatOrchestratorDep) -> ConversationHistoryResponse:
    """Return the messages of a conversation."""
    context = await chat.get_conversation_context(conversation_id)
    return ConversationHistoryResponse(
        conversation_id=context.conversation_id,
        created_at=context.created_at,
        last_updated=context.last_updated,
        messages=context.get_messages(),
    )


@router.delete("/conversation/{conversation_id}", status_code=204, tags=["Conversation"])
async def delete_conversation(conversation_id: str, chat: ChatOrchestratorDep) -> None:
    """Delete a conversation."""
    if not await chat.delete_conversation(conversation_id):
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")


@router.get("/agents", response_model=list[AgentInfo], tags=["Agents"])
async def list_agents(orchestrator: LLMOrchestratorDep) -> list[AgentInfo]:
    """List registered agents in execution order."""
    return [
        AgentInfo(
            agent_id=agent.agent_id,
            agent_name=agent.agent_name,
            description=agent.description,
            model_name=agent.model_name,
            enabled=orchestrator.is_enabled(agent.agent_id),
            priority=agent.priority,
            tool_ids=agent.tool_ids,
        )
        for agent in orchestrator.list_agents()
    ]


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(orchestrator: LLMOrchestratorDep) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
        active_agents=len(orchestrator.list_active_agents()),
    )
