"""Email service for sending transactional emails via SMTP."""

from __future__ import annotations

import logging
from decimal import Decimal
from email.message import EmailMessage
from typing import TYPE_CHECKING

from app.core.config import settings

if TYPE_CHECKING:
    from app.models.coupon import Coupon
    from app.models.user import User

logger = logging.getLogger(__name__)


def _format_amount(value: object) -> str:
    """Format a monetary amount to two decimal places."""
    if value is None:
        return "0.00"
    return f"{Decimal(str(value)):.2f}"


def _format_percentage(value: object) -> str:
    """Format a percentage without trailing zeros (15.00 -> 15)."""
    if value is None:
        return "0"
    return f"{Decimal(str(value)).normalize():f}"


def _format_date(dt: object) -> str:
    """Format a datetime to YYYY-MM-DD, or return empty string if None."""
    if dt is None:
        return ""
    return str(dt)[:10]


class EmailService:
    """Service for sending transactional emails via SMTP."""

    async def send_email(self, to: str, subject: str, html_body: str) -> bool:
        """Send an email via SMTP.

        Args:
            to: Recipient email address.
            subject: Email subject line.
            html_body: HTML content of the email.

        Returns:
            True if sent successfully (or no-op when SMTP unconfigured).
        """
        if not settings.SMTP_HOST:
            logger.info("SMTP not configured, skipping email to %s: %s", to, subject)
            return True

        import aiosmtplib

        msg = EmailMessage()
        msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("Please view this email in an HTML-capable client.")
        msg.add_alternative(html_body, subtype="html")

        await aiosmtplib.send(
            msg,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=settings.SMTP_USE_TLS,
        )
        logger.info("Email sent to %s: %s", to, subject)
        return True

    async def send_coupon_email(
        self,
        user: User,
        coupon: Coupon,
        base_amount: object,
    ) -> bool:
        """Tell a user about the reward coupon their order earned.

        Args:
            user: The coupon owner.
            coupon: The newly issued coupon.
            base_amount: Order amount that earned the reward.

        Returns:
            True if sent successfully.
        """
        if not user.email:
            logger.warning("User %s has no email, skipping coupon email", user.id)
            return False

        percentage = _format_percentage(coupon.discount_value)
        subject = f"You earned a {percentage}% discount coupon!"

        max_discount_row = ""
        if coupon.max_discount is not None:
            max_discount_row = (
                f"<tr><td><strong>Maximum discount:</strong></td>"
                f"<td>${_format_amount(coupon.max_discount)}</td></tr>"
            )

        html_body = (
            f"<h2>Thank you for your purchase, {user.name or 'Customer'}!</h2>"
            f"<p>Your order of ${_format_amount(base_amount)} earned you a reward.</p>"
            f"<p>{coupon.description}</p>"
            f"<div><strong>{coupon.code}</strong></div>"
            f"<table>"
            f"<tr><td><strong>Discount:</strong></td><td>{percentage}%</td></tr>"
            f"{max_discount_row}"
            f"<tr><td><strong>Valid until:</strong></td>"
            f"<td>{_format_date(coupon.expires_at)}</td></tr>"
            f"</table>"
            f"<p>Enter the code at checkout on your next order. "
            f"It can be used once.</p>"
        )

        return await self.send_email(to=str(user.email), subject=subject, html_body=html_body)
