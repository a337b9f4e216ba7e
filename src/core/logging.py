from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_CONFIGURED = False


def setup_logging(level: int | None = None) -> None:
    """Configure structlog to emit JSON logs with contextvars support.

    When ``level`` is omitted the ``LOG_LEVEL`` setting decides.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if level is None:
        from src.core.config import get_settings

        level = get_settings().log_level_value

    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def bind_actor(user_id: str, roles: list[str]) -> None:
    """Attach the acting principal to every log line of the current request."""
    structlog.contextvars.bind_contextvars(actor_id=user_id, actor_roles=roles)
