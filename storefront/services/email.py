"""Outbound account email (verification, password reset) via AWS SES."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storefront.core.config import get_settings

if TYPE_CHECKING:
    from storefront.core.config import Settings

logger = logging.getLogger(__name__)

TEMPLATES: dict[str, dict[str, str]] = {
    "verify_email": {
        "subject": "Confirm your registration - Storefront",
        "html": """
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">Welcome, {username}!</h2>
            <p>Please confirm your email address to finish registering.</p>
            <p style="text-align: center; margin: 30px 0;">
                <a href="{verify_url}" style="background-color: #667eea; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; display: inline-block;">
                    Confirm Email
                </a>
            </p>
            <p>If the button does not work, copy this link into your browser:</p>
            <p style="word-break: break-all; color: #667eea;">{verify_url}</p>
        </div>
        """,
        "text": """
Welcome, {username}!

Please confirm your email address by visiting:
{verify_url}
        """,
    },
    "password_reset": {
        "subject": "Password reset - Storefront",
        "html": """
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">Password reset</h2>
            <p>Hello, {username}! We received a request to reset your password.</p>
            <p style="text-align: center; margin: 30px 0;">
                <a href="{reset_url}" style="background-color: #667eea; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; display: inline-block;">
                    Reset Password
                </a>
            </p>
            <p style="word-break: break-all; color: #667eea;">{reset_url}</p>
            <p style="color: #666; font-size: 12px;">
                This link expires in {expire_minutes} minutes. If you did not request a reset, ignore this email.
            </p>
        </div>
        """,
        "text": """
Hello, {username}!

Reset your password by visiting:
{reset_url}

This link expires in {expire_minutes} minutes. If you did not request a reset, ignore this email.
        """,
    },
}


class EmailService:
    """Render a template and send it through SES; log-only when EMAIL_ENABLED is false."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._client = None

    @property
    def is_configured(self) -> bool:
        return self.settings.EMAIL_ENABLED and bool(self.settings.AWS_SES_FROM_EMAIL)

    @property
    def client(self) -> Any:
        """Lazy-load the SES client."""
        if self._client is None:
            secret = self.settings.AWS_SECRET_ACCESS_KEY
            self._client = boto3.client(
                "ses",
                region_name=self.settings.AWS_REGION,
                aws_access_key_id=self.settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=secret.get_secret_value() if secret else None,
            )
        return self._client

    def send(self, to: str, template: str, data: dict[str, Any]) -> bool:
        """
        Send one templated email. Returns True when SES accepted it.

        Delivery failures are logged and reported as False; they never fail
        the request that triggered the email.
        """
        tpl = TEMPLATES[template]
        text_body = tpl["text"].format(**data)
        if not self.is_configured:
            logger.info(
                "Email disabled; not sending %s to %s", template, to,
                extra={"email_template": template, "email_body": text_body.strip()},
            )
            return False
        try:
            response = self.client.send_email(
                Source=self.settings.AWS_SES_FROM_EMAIL,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": tpl["subject"], "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": tpl["html"].format(**data), "Charset": "UTF-8"},
                        "Text": {"Data": text_body, "Charset": "UTF-8"},
                    },
                },
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to send %s email to %s: %s", template, to, e)
            return False
        logger.info("Email sent: %s to %s (MessageId=%s)", template, to, response.get("MessageId"))
        return True

    def send_verification_email(self, email: str, token: str, username: str) -> bool:
        verify_url = f"{self.settings.BASE_URL}/auth/verify-email?token={token}"
        return self.send(email, "verify_email", {"username": username, "verify_url": verify_url})

    def send_password_reset_email(self, email: str, token: str, username: str) -> bool:
        reset_url = f"{self.settings.FRONTEND_URL}/reset-password?token={token}"
        return self.send(
            email,
            "password_reset",
            {
                "username": username,
                "reset_url": reset_url,
                "expire_minutes": self.settings.PASSWORD_RESET_EXPIRE_MINUTES,
            },
        )


@lru_cache
def get_email_service() -> EmailService:
    """Email service configured from settings (safe to call from dependencies)."""
    return EmailService(get_settings())
