import logging
import sys
from typing import Any, Dict
import structlog
from pythonjsonlogger import jsonlogger

from paytiko_gateway.core.config import Settings

SECRET_HEADER = "X-Merchant-Secret"


def setup_logging(settings: Settings):
    """
    Configure structured logging for the application.

    The ``json`` channel hands the structlog event dict to the stdlib record
    and renders it with python-json-logger, so third-party loggers (uvicorn,
    sqlalchemy, httpx) share the same JSON lines. ``console`` renders for humans.
    """
    handler = logging.StreamHandler(sys.stdout)
    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.PAYTIKO_LOG_CHANNEL == "console":
        handler.setFormatter(logging.Formatter("%(message)s"))
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]
    else:
        handler.setFormatter(
            jsonlogger.JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        )
        processors = shared_processors + [structlog.stdlib.render_to_log_kwargs]

    logging.basicConfig(
        handlers=[handler],
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class ContextLogger:
    """
    Logger with context support for tracing webhooks and gateway calls.

    When ``enabled`` is False, info and debug records are dropped; warnings
    and errors are always emitted.
    """

    def __init__(self, name: str, enabled: bool = True, logger: Any = None):
        self.name = name
        self.logger = logger if logger is not None else structlog.get_logger(name)
        self.enabled = enabled

    def with_context(self, **kwargs) -> "ContextLogger":
        """Copy of this logger with ``kwargs`` bound to every record."""
        return ContextLogger(self.name, enabled=self.enabled, logger=self.logger.bind(**kwargs))

    def info(self, message: str, **kwargs):
        if self.enabled:
            self.logger.info(message, **kwargs)

    def debug(self, message: str, **kwargs):
        if self.enabled:
            self.logger.debug(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)


def get_logger(name: str, enabled: bool = True) -> ContextLogger:
    """
    Get a context-aware logger instance.
    """
    return ContextLogger(name, enabled=enabled)


def mask_secret(value: Any, visible: int = 4) -> str:
    """Keep only the last ``visible`` characters of a secret for log output."""
    if not value:
        return ""
    text = str(value)
    if len(text) <= visible:
        return "*" * len(text)
    return "*" * (len(text) - visible) + text[-visible:]


def redact_headers(headers: Dict[str, str]) -> Dict[str, str]:
    return {
        key: mask_secret(value) if key.lower() == SECRET_HEADER.lower() else value
        for key, value in headers.items()
    }


def redact_webhook_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a webhook payload safe to log on rejection."""
    redacted = dict(payload)
    if "Signature" in redacted:
        redacted["Signature"] = mask_secret(redacted["Signature"])
    if "MaskedPan" in redacted:
        redacted["MaskedPan"] = mask_secret(redacted["MaskedPan"])
    return redacted
