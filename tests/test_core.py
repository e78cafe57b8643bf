"""Tests for settings, request context and log processors."""

from studynotion.config.settings import Settings
from studynotion.core.context import (
    clear_context,
    get_context,
    set_correlation_id,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from studynotion.core.logging import add_context_processor, filter_sensitive_data


class TestSettings:
    """Tests for Settings defaults and derived properties."""

    def test_payment_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.payment_success_redirect == "/enrollment-success"
        assert settings.payment_currency_subunits == 100
        assert settings.brand_name == "Study Notion"

    def test_environment_flags(self) -> None:
        settings = Settings(_env_file=None, environment="production")

        assert settings.is_production
        assert not settings.is_development
        assert not settings.is_testing

    def test_email_configured(self) -> None:
        assert not Settings(_env_file=None, email_enabled=False).email_configured
        assert Settings(_env_file=None, email_enabled=True).email_configured


class TestContext:
    """Tests for request context variables."""

    def test_set_and_clear(self) -> None:
        request_id = set_request_id()
        set_user_id("user-1")
        set_correlation_id("checkout-9")
        set_trace_id("trace-7")

        assert get_context() == {
            "request_id": request_id,
            "user_id": "user-1",
            "trace_id": "trace-7",
            "correlation_id": "checkout-9",
        }

        clear_context()
        assert get_context() == {}

    def test_processor_adds_context(self) -> None:
        set_request_id("req-1")
        try:
            event = add_context_processor(None, "info", {"event": "x"})
        finally:
            clear_context()

        assert event["request_id"] == "req-1"


class TestFilterSensitiveData:
    """Tests for filter_sensitive_data."""

    def test_masks_secrets(self) -> None:
        event = filter_sensitive_data(
            None,
            "info",
            {
                "event": "x",
                "razorpay_signature": "abcdef123456",
                "authorization": "abc",
                "payment_id": "pay_123",
            },
        )

        assert event["razorpay_signature"] == "ab********56"
        assert event["authorization"] == "***"
        assert event["payment_id"] == "pay_123"

    def test_masks_nested(self) -> None:
        event = filter_sensitive_data(
            None, "info", {"event": "x", "headers": {"token": "abcdefgh"}}
        )

        assert event["headers"]["token"] == "ab****gh"


class TestRun:
    """Tests for the uvicorn entry point."""

    def test_uses_api_settings(self) -> None:
        """Host, port and workers come from the api_* settings."""
        from unittest.mock import patch

        from studynotion.config import get_settings
        from studynotion.main import run

        settings = get_settings()
        with patch("uvicorn.run") as uvicorn_run:
            run()

        args, kwargs = uvicorn_run.call_args
        assert args == ("studynotion.main:app",)
        assert kwargs["host"] == settings.api_host
        assert kwargs["port"] == settings.api_port
        assert kwargs["workers"] == settings.api_workers
        # Reload is only honoured in development; tests run as "testing"
        assert kwargs["reload"] is False
        assert kwargs["log_config"] is None
