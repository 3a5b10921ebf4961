"""
PURPOSE: Structured logging setup for the relay.

Every log line is one JSON object: event name, level, ISO timestamp, the
module that emitted it and any keyword context. Secret-bearing keys are
masked before rendering so request logs can carry headers verbatim.
"""

import logging
from typing import Any, MutableMapping

import structlog

# Context keys whose values never reach the log output
SECRET_KEYS = frozenset({"api_secret", "webhook_token", "token", "X-BAPI-SIGN"})
MASK = "***"


def mask_secrets(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """structlog processor: replace secret values, including inside a `headers` mapping."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = MASK

    headers = event_dict.get("headers")
    if isinstance(headers, dict):
        event_dict["headers"] = {k: (MASK if k in SECRET_KEYS else v) for k, v in headers.items()}
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """
    PURPOSE: Configure structlog for JSON output filtered at `log_level`.

    Unknown level names fall back to INFO.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            mask_secrets,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # Module loggers are lazy proxies and setup_logging may run more than once
        cache_logger_on_first_use=False,
    )


def get_logger(module_name: str) -> Any:
    """
    PURPOSE: Return a lazy logger with `module` bound, e.g. get_logger(__name__).

    The proxy resolves the structlog configuration on every call, so loggers
    created at import time still honour a later setup_logging().
    """
    return structlog.get_logger(module=module_name)
