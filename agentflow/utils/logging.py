"""Logging configuration."""

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: LogConfig | None = None) -> None:
    """Set up logging configuration for the application."""
    if config is None:
        config = LogConfig(level=os.getenv("LOG_LEVEL", "INFO"))

    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    # Set specific log levels for third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    log_level = level if level else os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(log_level.upper())

    return logger


def format_arguments(arguments: Mapping[str, Any] | None) -> str:
    """Render tool arguments as ``key=value`` pairs for log lines."""
    if not arguments:
        return "(none)"
    return ", ".join(f"{key}={value}" for key, value in arguments.items())


def log_agent_execution(logger: logging.Logger, agent_id: str, message: str) -> None:
    logger.info(f"[AGENT:{agent_id}] {message}")


def log_tool_call(logger: logging.Logger, tool_name: str, arguments: Mapping[str, Any] | None) -> None:
    logger.info(f"[TOOL_CALL:{tool_name}] Arguments: {format_arguments(arguments)}")


def log_tool_response(logger: logging.Logger, tool_name: str, response: str) -> None:
    logger.info(f"[TOOL_RESPONSE:{tool_name}] Response: {response[:200]}")


def log_prompt_construction(logger: logging.Logger, agent_id: str, message_count: int, token_count: int) -> None:
    logger.info(f"[PROMPT:{agent_id}] Messages: {message_count}, estimated tokens: {token_count}")


def log_message_received(logger: logging.Logger, conversation_id: str, role: str) -> None:
    logger.info(f"[MESSAGE:{conversation_id}] Role: {role}")
