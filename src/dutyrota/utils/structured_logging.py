"""
Structured Logging
==================
structlog integration. Events are routed through the standard ``dutyrota``
logger hierarchy, so the handlers installed by ``setup_logging`` (console,
rotating file) receive them too.

Usage:
    from dutyrota.utils.structured_logging import get_structured_logger

    log = get_structured_logger("dutyrota.solver")
    log.info("run_started", unit_id="U1", dates=14)
"""
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
import structlog.contextvars


def configure_structlog(json_output: bool = False) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, render events as JSON (for log shipping).
                     If False, render key=value pairs.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=True)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level proxies must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )


def get_structured_logger(name: str) -> Any:
    """
    Get a structured logger bound to the stdlib logger ``name``.

    Configures structlog with key=value output on first use if the
    application has not configured it yet.
    """
    if not structlog.is_configured():
        configure_structlog()
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Bind context variables for all subsequent log calls (e.g. run_id="...")."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def bound_context(**kwargs) -> Iterator[None]:
    """Bind context variables for the duration of a block only."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
