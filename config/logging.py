import logging.config
from typing import Any, Dict, Optional

import structlog

SERVICE_NAME = "insight-explorer"

# Third-party loggers that are too chatty at the application's level
QUIET_LOGGERS = ("uvicorn.access", "aiohttp.access")


def _add_service(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Route structlog and stdlib logging through a single handler.

    Records from uvicorn and aiohttp go through the same processors as
    the explorer's own events, so every line has the same shape.

    Args:
        log_level: Level for the root logger
        json_logs: Render JSON lines, or coloured console output when False
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    loggers: Dict[str, Dict[str, Any]] = {
        "": {
            "handlers": ["default"],
            "level": log_level,
            "propagate": True,
        },
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": renderer,
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "default": {
                "level": log_level,
                "class": "logging.StreamHandler",
                "formatter": "structured",
            },
        },
        "loggers": loggers,
    })

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def log_error(logger: Any, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an explorer error with its type and any request context."""
    error_details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **(context or {})
    }
    code = getattr(error, "code", None)
    if code is not None:
        error_details.setdefault("code", code)
    logger.error("explorer_error", **error_details)
