"""Tests for the logging formatter, Sentry scrubbing and production config checks."""

import json
import logging

import pytest

from app.core import config
from app.core.logging import JSONFormatter
from app.core.sentry import scrub_event


class TestJsonFormatter:
    def test_extra_fields(self):
        record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "audit %s", ("x",), None)
        record.audit_url = "https://example.com"
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "audit x"
        assert data["level"] == "INFO"
        assert data["audit_url"] == "https://example.com"
        assert "request_id" not in data


class TestScrubEvent:
    def test_drops_body_and_cookies(self):
        event = {"request": {"url": "/api/v1/geo-audit/send-report", "data": {"email": "a@b.c"}, "cookies": "x"}}
        assert scrub_event(event, {}) == {"request": {"url": "/api/v1/geo-audit/send-report"}}

    def test_event_without_request(self):
        assert scrub_event({"message": "m"}, {}) == {"message": "m"}


class TestProductionValidation:
    def test_development_passes(self, monkeypatch):
        monkeypatch.setattr(config.settings, "app_env", "development")
        config.validate_settings_for_production()

    def test_production_rejects_unsafe_defaults(self, monkeypatch):
        monkeypatch.setattr(config.settings, "app_env", "production")
        monkeypatch.setattr(config.settings, "allowed_origins", "*")
        monkeypatch.setattr(config.settings, "app_debug", True)
        with pytest.raises(SystemExit) as exc_info:
            config.validate_settings_for_production()
        message = str(exc_info.value)
        assert "ALLOWED_ORIGINS" in message
        assert "APP_DEBUG" in message

    def test_production_ok(self, monkeypatch):
        monkeypatch.setattr(config.settings, "app_env", "production")
        monkeypatch.setattr(config.settings, "allowed_origins", "https://audit.example.com")
        monkeypatch.setattr(config.settings, "app_debug", False)
        monkeypatch.setattr(config.settings, "resend_api_key", "re_live")
        config.validate_settings_for_production()

    def test_production_without_email_key_starts(self, monkeypatch):
        monkeypatch.setattr(config.settings, "app_env", "production")
        monkeypatch.setattr(config.settings, "allowed_origins", "https://audit.example.com")
        monkeypatch.setattr(config.settings, "app_debug", False)
        monkeypatch.setattr(config.settings, "resend_api_key", "")
        config.validate_settings_for_production()
