"""
core/logging.py - Structured JSON logging.

Every entry carries timestamp, level, logger name and message. Contextual
fields (pool_id, venue, latency_ms, ...) are passed ONLY via
extra={"context": {...}}, never as ad-hoc logger kwargs.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Added to every entry, e.g. service name and version
_global_context: dict[str, Any] = {}

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    {
        "timestamp": "2026-10-18T12:00:00.000+00:00",
        "level": "WARNING",
        "logger": "dex.reserves.resolver",
        "message": "Decoder failed",
        "context": {"pool_id": "58oQ...", "decoder": "amm_v4"}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = dict(_global_context)
        if getattr(record, "context", None):
            context.update(record.context)
        if record.exc_info:
            context["exception"] = self.formatException(record.exc_info)

        if context:
            entry["context"] = context

        return json.dumps(entry, default=str)


class ContextAdapter(logging.LoggerAdapter):
    """Merges the adapter's bound context with per-call context."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra") or {}
        context = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = {"context": context}
        return msg, kwargs


def set_global_context(**kwargs: Any) -> None:
    """
    Set fields added to all log entries.

    Example:
        set_global_context(service="swaplens-cli", version="0.1.0")
    """
    _global_context.update(kwargs)


def clear_global_context() -> None:
    _global_context.clear()


def get_logger(name: str, **context: Any) -> ContextAdapter:
    """
    Get a logger with optional bound context.

    Example:
        logger = get_logger(__name__, venue="orca")
        logger.info("Quote fetched", extra={"context": {"latency_ms": 50}})
    """
    return ContextAdapter(logging.getLogger(name), context)


def setup_logging(
    level: str = "INFO",
    json_output: bool = True,
    log_file: str | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_output: JSON lines (True) or a human-readable format (False)
        log_file: Optional extra file sink using the same formatter
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    if json_output:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def log_fallback(
    logger: ContextAdapter,
    source: str,
    error: BaseException,
    **extra: Any,
) -> None:
    """Log a failed source that the caller recovers from by moving on."""
    logger.warning(
        f"{source} failed: {error}",
        extra={
            "context": {
                "source": source,
                "error_type": type(error).__name__,
                "error": str(error),
                **extra,
            }
        },
    )
