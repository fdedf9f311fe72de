"""Logging configuration using structlog.

Event dicts pass through ``redact_secrets`` before rendering, so key
material handed to a logger by mistake is masked rather than written out.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from soltrader.config.settings import get_settings

REDACTED = "[REDACTED]"

# Lower-cased event keys whose values are always masked
SECRET_KEYS = frozenset({"private_key", "secret_key", "keypair", "mnemonic", "seed", "api_key"})

# Chatty third-party loggers kept at WARNING unless debugging
NOISY_LOGGERS = ("httpx", "httpcore", "solana")


def redact_secrets(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking secret-bearing keys."""
    for key in event_dict:
        if key.lower() in SECRET_KEYS:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for the application.

    Args:
        level: Override for the configured log level, e.g. from a CLI flag.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_secrets,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            # JSON lines unless debugging
            structlog.dev.ConsoleRenderer()
            if settings.debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    if not settings.debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
