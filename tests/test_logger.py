# tests/test_logger.py
"""Unit tests for the log redaction helpers."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.utils.logger import mask_email, redact


class TestMaskEmail:
    def test_keeps_first_and_last_character(self):
        assert mask_email("johnson@example.com") == "j*****n@example.com"

    def test_short_local_part(self):
        assert mask_email("jo@example.com") == "***@example.com"

    def test_missing(self):
        assert mask_email(None) == "no-email"
        assert mask_email("not-an-email") == "***@unknown"


class TestRedact:
    def test_nested_sensitive_keys(self):
        data = {"vin": "1M8GDM9AXKP042788",
                "headers": {"Authorization": "Bearer abc", "accept": "json"},
                "items": [{"apiKey": "k-1", "rating": 5}]}
        assert redact(data) == {"vin": "1M8GDM9AXKP042788",
                                "headers": {"Authorization": "[REDACTED]", "accept": "json"},
                                "items": [{"apiKey": "[REDACTED]", "rating": 5}]}

    def test_scalars_pass_through(self):
        assert redact("plain") == "plain"
        assert redact(42) == 42
