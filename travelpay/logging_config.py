"""
Structured logging configuration using structlog.

Every entry is a JSON object carrying the app name, environment and, inside
a request, the request id. Gateway credentials and signatures are masked
before rendering.
"""
import logging
import sys
from typing import Any, Dict, Optional

import structlog

from travelpay.config import settings

# Keys whose values must never reach the log stream.
SENSITIVE_KEYS = frozenset({
    "api_key",
    "client_secret",
    "secret_key",
    "verify_key",
    "webhook_secret",
    "skey",
    "vcode",
    "vrfkey",
    "stripe_signature",
})
MASK = "***"


def add_app_context(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Add application context to log entries."""
    event_dict['app'] = settings.APP_NAME
    event_dict['version'] = settings.APP_VERSION
    event_dict['environment'] = settings.ENVIRONMENT
    return event_dict


def redact_sensitive(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Mask credentials and signatures, including one level of nested dicts."""
    for key, value in list(event_dict.items()):
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = MASK
        elif isinstance(value, dict):
            event_dict[key] = {
                k: MASK if str(k).lower() in SENSITIVE_KEYS else v for k, v in value.items()
            }
    return event_dict


def configure_logging(level: Optional[int] = None):
    """Configure stdlib logging and structlog; DEBUG follows settings.DEBUG."""
    if level is None:
        level = logging.DEBUG if settings.DEBUG else logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_app_context,
            redact_sensitive,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str = __name__):
    return structlog.get_logger(name)
