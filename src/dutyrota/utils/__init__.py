"""Utilities package for Duty Rota."""
from .logging_setup import (
    TRACE,
    RunLogger,
    get_logger,
    log_check,
    log_function_call,
    parse_level,
    setup_logging,
    verbosity_to_level,
)
from .structured_logging import (
    bind_context,
    bound_context,
    clear_context,
    configure_structlog,
    get_structured_logger,
)

__all__ = [
    "setup_logging",
    "parse_level",
    "verbosity_to_level",
    "get_logger",
    "log_function_call",
    "log_check",
    "RunLogger",
    "TRACE",
    "configure_structlog",
    "get_structured_logger",
    "bind_context",
    "bound_context",
    "clear_context",
]
