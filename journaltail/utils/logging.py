"""
Structured logging infrastructure using structlog.

Records emitted by the tailer are written to stdout, so application logs
default to stderr. Supports:
- JSON formatting for production
- Console formatting for development
- Context variables (e.g. the sincedb path of a running input)
- Output to stdout, stderr or a file
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "journaltail"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application context to log entries."""
    event_dict["app"] = APP_NAME
    return event_dict


def _handler_for(log_output: str) -> logging.Handler:
    if log_output == "stdout":
        return logging.StreamHandler(sys.stdout)
    if log_output == "stderr":
        return logging.StreamHandler(sys.stderr)
    return logging.FileHandler(log_output)


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_output: str = "stderr",
) -> None:
    """
    Configure structured logging for the application.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_output: Output destination (stdout, stderr, or file path)
    """
    logging.basicConfig(
        format="%(message)s",
        handlers=[_handler_for(log_output)],
        level=getattr(logging, log_level.upper()),
        force=True,
    )
    
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_app_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    
    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:  # console format
        renderer = structlog.dev.ConsoleRenderer(colors=log_output != "stdout")
    
    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.
    
    Args:
        name: Logger name (typically __name__)
    
    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
