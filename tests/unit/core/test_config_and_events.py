"""Tests para la configuración y los eventos estructurados."""

import json
import logging

import pytest
from pydantic import ValidationError

from app.core.config import Settings, get_missing_settings
from app.core.events import (
    CollectingEventSink,
    ErrorKind,
    LoggingEventSink,
    ReconcileEvent,
    ReconcileOutcome,
)
from app.core.logging_config import StructuredFormatter, get_logging_configuration


class TestSettings:
    def test_legacy_environment_names(self, monkeypatch):
        for name in ("SHOPIFY_WEBHOOK_SECRET", "SHOPIFY_SHOP_URL", "SHOPIFY_ACCESS_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("WEBHOOK_SECRET", "legacy-secret")
        monkeypatch.setenv("SHOP_DOMAIN", "legacy-shop.myshopify.com")
        monkeypatch.setenv("ADMIN_API_TOKEN", "shpat_legacy")

        settings = Settings(_env_file=None)

        assert settings.SHOPIFY_WEBHOOK_SECRET == "legacy-secret"
        assert settings.SHOPIFY_SHOP_URL == "https://legacy-shop.myshopify.com"
        assert settings.SHOPIFY_ACCESS_TOKEN == "shpat_legacy"

    def test_api_base_url(self, settings):
        assert settings.shopify_api_base_url == "https://test-shop.myshopify.com/admin/api/2025-01"

    def test_shopify_headers(self, settings):
        headers = settings.get_shopify_headers()
        assert headers["X-Shopify-Access-Token"] == "shpat_test_token"

    def test_blank_tag_marker_disables_filter(self):
        settings = Settings(_env_file=None, ORDER_TAG_MARKER="  ")
        assert settings.ORDER_TAG_MARKER is None

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="LOUD")

    def test_missing_settings(self, settings):
        assert get_missing_settings(settings) == []

        empty = Settings(
            _env_file=None,
            SHOPIFY_SHOP_URL="your-shop.myshopify.com",
            SHOPIFY_ACCESS_TOKEN=None,
            SHOPIFY_WEBHOOK_SECRET=None,
        )
        assert get_missing_settings(empty) == ["SHOPIFY_WEBHOOK_SECRET", "SHOPIFY_ACCESS_TOKEN", "SHOPIFY_SHOP_URL"]


class TestReconcileOutcome:
    def test_status_codes(self):
        assert ReconcileOutcome.MISSING_CREDENTIALS.status_code == 401
        assert ReconcileOutcome.BAD_HMAC.status_code == 401
        assert ReconcileOutcome.BAD_JSON.status_code == 400
        others = set(ReconcileOutcome) - {
            ReconcileOutcome.MISSING_CREDENTIALS,
            ReconcileOutcome.BAD_HMAC,
            ReconcileOutcome.BAD_JSON,
        }
        assert {outcome.status_code for outcome in others} == {200}


class TestEventSinks:
    def test_collecting_sink(self):
        sink = CollectingEventSink()
        sink(ReconcileEvent.for_outcome(ReconcileOutcome.DONE, order_id=1))
        sink(ReconcileEvent.for_error(ErrorKind.ORDER_UPDATE_ERROR, order_id=1))

        assert sink.kinds == ["done", "order_update_error"]
        assert len(sink.errors) == 1

    def test_logging_sink_writes_structured_fields(self, caplog):
        sink = LoggingEventSink()
        event = ReconcileEvent.for_error(
            ErrorKind.ORDER_UPDATE_ERROR, order_id=5551234, draft_order_id=998877, details={"api_response_code": 422}
        )

        with caplog.at_level(logging.INFO, logger="app.webhooks.events"):
            sink(event)

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.event_kind == "order_update_error"
        assert record.order_id == 5551234
        assert record.event_details == {"api_response_code": 422}

    def test_outcome_levels(self, caplog):
        sink = LoggingEventSink()

        with caplog.at_level(logging.INFO, logger="app.webhooks.events"):
            sink(ReconcileEvent.for_outcome(ReconcileOutcome.BAD_HMAC))
            sink(ReconcileEvent.for_outcome(ReconcileOutcome.NO_DRAFT_LINK, order_id=1))

        assert [r.levelno for r in caplog.records[-2:]] == [logging.WARNING, logging.INFO]

    def test_event_to_dict(self):
        data = ReconcileEvent.for_outcome(ReconcileOutcome.NO_CHANGES, order_id=1).to_dict()
        assert data["kind"] == "no_changes"
        assert data["category"] == "outcome"
        assert isinstance(data["timestamp"], str)
        assert "exc_info" not in data


class TestLoggingConfiguration:
    def test_json_console_when_enabled(self):
        config = get_logging_configuration(Settings(_env_file=None, LOG_JSON=True))
        assert config["handlers"]["console"]["formatter"] == "json"
        assert "file" not in config["handlers"]

    def test_file_handler_when_path_set(self, tmp_path):
        config = get_logging_configuration(Settings(_env_file=None, LOG_FILE_PATH=str(tmp_path / "app.log")))
        assert config["root"]["handlers"] == ["console", "file"]

    def test_structured_formatter_includes_extra(self):
        formatter = StructuredFormatter(app_name="test-app")
        record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "hello", None, None)
        record.event_kind = "done"

        entry = json.loads(formatter.format(record))

        assert entry["message"] == "hello"
        assert entry["app_name"] == "test-app"
        assert entry["extra"]["event_kind"] == "done"
