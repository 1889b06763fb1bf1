"""Tests for EmailService – coupon email composition, SMTP sending, and no-op behavior."""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from app.services.email_service import (
    EmailService,
    _format_amount,
    _format_date,
    _format_percentage,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_user(**overrides):  # type: ignore[no-untyped-def]
    defaults = {"id": "user-001", "name": "Ana Buyer", "email": "ana@example.com"}
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _make_coupon(**overrides):  # type: ignore[no-untyped-def]
    defaults = {
        "code": "SAVE10K7Q2123",
        "description": "Excellent! You earned 10% off",
        "discount_value": Decimal("10.00"),
        "max_discount": Decimal("50.00"),
        "expires_at": datetime(2026, 1, 25, 10, 0, tzinfo=UTC),
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


# ---------------------------------------------------------------------------
# Tests for helper functions
# ---------------------------------------------------------------------------


class TestFormatAmount:
    def test_none_returns_zero(self) -> None:
        assert _format_amount(None) == "0.00"

    def test_decimal(self) -> None:
        assert _format_amount(Decimal("123.4567")) == "123.46"

    def test_string(self) -> None:
        assert _format_amount("600") == "600.00"


class TestFormatPercentage:
    def test_strips_trailing_zeros(self) -> None:
        assert _format_percentage(Decimal("15.00")) == "15"

    def test_keeps_fraction(self) -> None:
        assert _format_percentage(Decimal("7.50")) == "7.5"

    def test_none(self) -> None:
        assert _format_percentage(None) == "0"


class TestFormatDate:
    def test_none_returns_empty(self) -> None:
        assert _format_date(None) == ""

    def test_datetime(self) -> None:
        assert _format_date(datetime(2026, 1, 25, 10, 0, tzinfo=UTC)) == "2026-01-25"


# ---------------------------------------------------------------------------
# Tests for EmailService.send_email – SMTP not configured (no-op)
# ---------------------------------------------------------------------------


class TestSendEmailNoop:
    @pytest.mark.asyncio
    async def test_noop_when_smtp_not_configured(self) -> None:
        mock_send = AsyncMock()
        with (
            patch("app.services.email_service.settings") as mock_settings,
            patch("aiosmtplib.send", mock_send),
        ):
            mock_settings.SMTP_HOST = ""
            result = await EmailService().send_email(
                to="test@example.com",
                subject="Test",
                html_body="<p>Hello</p>",
            )
        assert result is True
        mock_send.assert_not_called()


# ---------------------------------------------------------------------------
# Tests for EmailService.send_email – SMTP configured
# ---------------------------------------------------------------------------


class TestSendEmailSmtp:
    """When SMTP_HOST is set, send_email should call aiosmtplib.send."""

    @pytest.mark.asyncio
    async def test_sends_email_via_smtp(self) -> None:
        mock_send = AsyncMock()
        with (
            patch("app.services.email_service.settings") as mock_settings,
            patch("aiosmtplib.send", mock_send),
        ):
            mock_settings.SMTP_HOST = "smtp.example.com"
            mock_settings.SMTP_PORT = 587
            mock_settings.SMTP_USERNAME = "user"
            mock_settings.SMTP_PASSWORD = "pass"
            mock_settings.SMTP_FROM_EMAIL = "rewards@example.com"
            mock_settings.SMTP_FROM_NAME = "Shop Rewards"
            mock_settings.SMTP_USE_TLS = True

            result = await EmailService().send_email(
                to="test@example.com",
                subject="Test Subject",
                html_body="<p>Hello</p>",
            )

        assert result is True
        mock_send.assert_called_once()
        msg = mock_send.call_args[0][0]
        assert msg["To"] == "test@example.com"
        assert msg["From"] == "Shop Rewards <rewards@example.com>"
        call_kwargs = mock_send.call_args[1]
        assert call_kwargs["hostname"] == "smtp.example.com"
        assert call_kwargs["port"] == 587
        assert call_kwargs["username"] == "user"
        assert call_kwargs["password"] == "pass"
        assert call_kwargs["start_tls"] is True

    @pytest.mark.asyncio
    async def test_empty_credentials_become_none(self) -> None:
        mock_send = AsyncMock()
        with (
            patch("app.services.email_service.settings") as mock_settings,
            patch("aiosmtplib.send", mock_send),
        ):
            mock_settings.SMTP_HOST = "smtp.example.com"
            mock_settings.SMTP_PORT = 25
            mock_settings.SMTP_USERNAME = ""
            mock_settings.SMTP_PASSWORD = ""
            mock_settings.SMTP_FROM_EMAIL = "rewards@example.com"
            mock_settings.SMTP_FROM_NAME = "Shop Rewards"
            mock_settings.SMTP_USE_TLS = False

            await EmailService().send_email(to="a@example.com", subject="S", html_body="<p/>")

        call_kwargs = mock_send.call_args[1]
        assert call_kwargs["username"] is None
        assert call_kwargs["password"] is None
        assert call_kwargs["start_tls"] is False

    @pytest.mark.asyncio
    async def test_smtp_errors_propagate(self) -> None:
        with (
            patch("app.services.email_service.settings") as mock_settings,
            patch("aiosmtplib.send", AsyncMock(side_effect=OSError("connection refused"))),
        ):
            mock_settings.SMTP_HOST = "smtp.example.com"
            mock_settings.SMTP_PORT = 587
            mock_settings.SMTP_USERNAME = ""
            mock_settings.SMTP_PASSWORD = ""
            mock_settings.SMTP_FROM_EMAIL = "rewards@example.com"
            mock_settings.SMTP_FROM_NAME = "Shop Rewards"
            mock_settings.SMTP_USE_TLS = True
            with pytest.raises(OSError):
                await EmailService().send_email(to="a@example.com", subject="S", html_body="<p/>")


# ---------------------------------------------------------------------------
# Tests for EmailService.send_coupon_email
# ---------------------------------------------------------------------------


class TestSendCouponEmail:
    @pytest.mark.asyncio
    async def test_composes_coupon_email(self) -> None:
        service = EmailService()
        with patch.object(service, "send_email", new_callable=AsyncMock) as mock_send:
            mock_send.return_value = True
            result = await service.send_coupon_email(
                _make_user(), _make_coupon(), Decimal("600")
            )

        assert result is True
        kwargs = mock_send.call_args[1]
        assert kwargs["to"] == "ana@example.com"
        assert kwargs["subject"] == "You earned a 10% discount coupon!"
        body = kwargs["html_body"]
        assert "SAVE10K7Q2123" in body
        assert "Ana Buyer" in body
        assert "$600.00" in body
        assert "$50.00" in body
        assert "2026-01-25" in body
        assert "Excellent! You earned 10% off" in body

    @pytest.mark.asyncio
    async def test_omits_cap_when_uncapped(self) -> None:
        service = EmailService()
        with patch.object(service, "send_email", new_callable=AsyncMock) as mock_send:
            await service.send_coupon_email(
                _make_user(), _make_coupon(max_discount=None), Decimal("600")
            )
        assert "Maximum discount" not in mock_send.call_args[1]["html_body"]

    @pytest.mark.asyncio
    async def test_skips_user_without_email(self) -> None:
        service = EmailService()
        with patch.object(service, "send_email", new_callable=AsyncMock) as mock_send:
            result = await service.send_coupon_email(
                _make_user(email=None), _make_coupon(), Decimal("600")
            )
        assert result is False
        mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_to_generic_greeting(self) -> None:
        service = EmailService()
        with patch.object(service, "send_email", new_callable=AsyncMock) as mock_send:
            await service.send_coupon_email(_make_user(name=""), _make_coupon(), "250")
        body = mock_send.call_args[1]["html_body"]
        assert "Thank you for your purchase, Customer!" in body
        assert "$250.00" in body
