"""Tests for structured log formatting."""

import json
import logging

import pytest

from feedback_triage.shared.infrastructure.logging import (
    CustomJsonFormatter,
    EnvironmentFilter,
    log_latency,
    mask_contact,
)


def _format(**extra) -> dict:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "Feedback created", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    EnvironmentFilter("test").filter(record)
    return json.loads(CustomJsonFormatter().format(record))


class TestMaskContact:

    def test_email(self):
        assert mask_contact("ahmad.rahman@email.com") == "a***@email.com"

    def test_phone(self):
        assert mask_contact("+60 12-345 6789") == "***6789"

    def test_short_value(self):
        assert mask_contact("123") == "***"


class TestJsonFormatter:

    def test_adds_context_fields(self):
        data = _format(correlation_id="req-1")

        assert data["message"] == "Feedback created"
        assert data["correlation_id"] == "req-1"
        assert data["environment"] == "test"
        assert data["timestamp"]

    def test_masks_contacts_and_redacts_secrets(self):
        data = _format(customer_email="siti@email.com", openai_api_key="sk-123", max_tokens=600)

        assert data["customer_email"] == "s***@email.com"
        assert data["openai_api_key"] == "***REDACTED***"
        assert data["max_tokens"] == 600


class TestLogLatency:

    def test_logs_completion(self, caplog):
        logger = logging.getLogger("latency-test")

        with caplog.at_level(logging.INFO, logger="latency-test"):
            with log_latency(logger, "csv_import", size_bytes=10):
                pass

        record = caplog.records[-1]
        assert record.getMessage() == "csv_import completed"
        assert record.size_bytes == 10

    def test_logs_failure_and_reraises(self, caplog):
        logger = logging.getLogger("latency-test")

        with caplog.at_level(logging.INFO, logger="latency-test"):
            with pytest.raises(ValueError):
                with log_latency(logger, "csv_import"):
                    raise ValueError("bad row")

        assert caplog.records[-1].levelno == logging.WARNING
        assert caplog.records[-1].getMessage() == "csv_import failed"
