"""
Structured logging for the extraction accuracy harness.

Every module gets a logger bound to its component and module name:

    from shared.logging import get_logger

    log = get_logger("accuracy", "harness")
    log.info("accuracy.harness.setup", scenario="Paraphrase Detection", notes=3)

Events are dotted names; context travels as keyword arguments.
configure_logging() is called once by the launcher. Library modules never
configure logging themselves.
"""

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.types import EventDict, WrappedLogger


# =============================================================================
# Processors
# =============================================================================

def add_timestamp_iso(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ISO 8601 timestamp with timezone."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def rename_event_key(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Rename 'event' to 'message' for JSON consumers."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


# =============================================================================
# Configuration
# =============================================================================

def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure structlog and route stdlib logging through the same renderer.

    Args:
        level: DEBUG, INFO, WARNING, ERROR. Defaults to LOG_LEVEL env var or INFO.
        json_output: Emit JSON lines. Defaults to LOG_FORMAT=json.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()

    if json_output is None:
        json_output = os.getenv("LOG_FORMAT", "").lower() == "json"

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_timestamp_iso,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        shared_processors.extend([
            rename_event_key,
            structlog.processors.format_exc_info,
        ])
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    # Logs go to stderr so report and CI output on stdout stay clean
    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    ))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # Quiet chatty client libraries
    for noisy in ("aiohttp", "anthropic", "httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(component: str, name: str):
    """
    Get a structured logger bound to a component and module.

    Args:
        component: Top-level component ("shared", "llm", "accuracy")
        name: Module path within the component ("strategies.hybrid")
    """
    return structlog.get_logger(f"{component}.{name}").bind(
        component=component,
        module=name,
    )
