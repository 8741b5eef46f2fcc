"""
Structured Logging
==================

JSON logs on stdout, one object per line.

Every record carries ``timestamp``, ``environment`` and, inside a request,
``correlation_id``. Secrets are redacted and customer contact details are
masked before a record is written.

Usage:
    from feedback_triage.shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Feedback imported", extra={"feedback_id": "fb_001"})
"""

import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from contextlib import contextmanager

from pythonjsonlogger import jsonlogger


REDACTED = "***REDACTED***"
SECRET_MARKERS = ("password", "api_key", "secret", "authorization")
CONTACT_FIELDS = ("customer_email", "customer_phone")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def mask_contact(value: str) -> str:
    """
    Mask an email address or phone number for logging.

    ``ahmad.rahman@email.com`` -> ``a***@email.com``,
    ``+60123456789`` -> ``***6789``.
    """
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:1]}***@{domain}"
    digits = "".join(ch for ch in value if ch.isdigit())
    return f"***{digits[-4:]}" if len(digits) > 4 else "***"


def _is_secret(key: str) -> bool:
    lowered = key.lower()
    if any(marker in lowered for marker in SECRET_MARKERS):
        return True
    # max_tokens / tokens_used are counters, not credentials
    return "token" in lowered and "tokens" not in lowered


class EnvironmentFilter(logging.Filter):
    """Stamps every record with the deployment environment."""

    def __init__(self, environment: str):
        super().__init__()
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "environment"):
            record.environment = self.environment
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, environment and redaction."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        if hasattr(record, "correlation_id"):
            log_record["correlation_id"] = record.correlation_id

        log_record["environment"] = getattr(record, "environment", "unknown")

        for key, value in list(log_record.items()):
            if not isinstance(value, str):
                continue
            if key in CONTACT_FIELDS:
                log_record[key] = mask_contact(value)
            elif _is_secret(key):
                log_record[key] = REDACTED


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
    json_format: bool = True,
) -> None:
    """
    Configure root logging for the service.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: Environment name stamped on every record
        json_format: JSON lines when true, plain text otherwise
    """
    log_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(EnvironmentFilter(environment))
    if json_format:
        handler.setFormatter(CustomJsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root_logger.addHandler(handler)

    # Request logs come from RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("watchdog").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def log_latency(logger: logging.Logger, operation: str, **extra_context: Any):
    """
    Log how long a block took.

    Logs ``<operation> completed`` at INFO, or ``<operation> failed`` at
    WARNING when the block raises; the exception propagates.

    Usage:
        with log_latency(logger, "csv_import", size_bytes=len(content)):
            records, errors = importer.parse(content)
    """
    start = time.perf_counter()
    outcome = "completed"
    try:
        yield
    except Exception:
        outcome = "failed"
        raise
    finally:
        latency_ms = (time.perf_counter() - start) * 1000
        log = logger.info if outcome == "completed" else logger.warning
        log(
            f"{operation} {outcome}",
            extra={
                "operation": operation,
                "latency_ms": round(latency_ms, 2),
                **extra_context,
            },
        )
