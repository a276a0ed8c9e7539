"""Main FastAPI application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentflow import __version__
from agentflow.api.dependencies import get_settings
from agentflow.api.endpoints import router
from agentflow.utils.logging import LogConfig, setup_logging

settings = get_settings()
setup_logging(LogConfig(level=settings.log_level))

# Create FastAPI application
app = FastAPI(
    title="Agentflow",
    description=(
        "A multi-agent chat service: each message is handled by the configured agents, "
        "which may call tools before their replies are merged into one response."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    tags_metadata=[
        {
            "name": "Conversation",
            "description": "Send messages to the agents and inspect or delete conversations.",
        },
        {
            "name": "Agents",
            "description": "Configured agents and their tools.",
        },
        {
            "name": "Health",
            "description": "Service health monitoring and status checks.",
        },
    ],
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("agentflow.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
