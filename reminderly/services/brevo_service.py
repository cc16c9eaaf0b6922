"""Brevo transactional email client.

Implements the engine's ``EmailSender`` contract on top of Brevo's
``/v3/smtp/email`` endpoint and exposes the account check and test email
used by the settings screen.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from reminderly.core.config import BaseAppSettings, settings
from reminderly.core.exceptions import EmailNotConfiguredError
from reminderly.models.entities import EmailMessage, SendResult

logger = logging.getLogger(__name__)

_template_dir = Path(__file__).parent.parent / "templates" / "email"
_jinja_env = Environment(
    loader=FileSystemLoader(str(_template_dir)),
    autoescape=select_autoescape(["html", "xml"]),
)

TEST_EMAIL_SUBJECT = "Test Email from Employee Reminder System"


@dataclass(frozen=True)
class BrevoConfig:
    api_key: str | None
    sender_email: str | None
    sender_name: str
    send_url: str
    account_url: str
    timeout: float = 15.0

    @classmethod
    def from_settings(cls, app_settings: BaseAppSettings | None = None) -> BrevoConfig:
        source = app_settings or settings
        return cls(
            api_key=source.BREVO_API_KEY,
            sender_email=source.EMAIL_FROM,
            sender_name=source.EMAIL_FROM_NAME,
            send_url=source.BREVO_API_URL,
            account_url=source.BREVO_ACCOUNT_URL,
            timeout=source.EMAIL_SEND_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender_email)

    def masked(self) -> dict:
        return {
            "api_key": "********" if self.api_key else "",
            "from_email": self.sender_email or "",
            "from_name": self.sender_name,
            "configured": self.configured,
        }


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = {}
    message = data.get("message") if isinstance(data, dict) else None
    return message or f"Brevo API error: {response.status_code} {response.reason_phrase}"


class BrevoEmailSender:
    """One HTTP call per ``send``; failures come back as ``SendResult``."""

    def __init__(self, config: BrevoConfig, client: httpx.Client | None = None):
        self.config = config
        self._client = client or httpx.Client(timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict[str, str]:
        if not self.config.api_key:
            raise EmailNotConfiguredError("BREVO_API_KEY")
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "api-key": self.config.api_key,
        }

    def _payload(self, recipients: list[dict], subject: str, html: str) -> dict:
        if not self.config.sender_email:
            raise EmailNotConfiguredError("EMAIL_FROM")
        return {
            "sender": {"name": self.config.sender_name, "email": self.config.sender_email},
            "to": recipients,
            "subject": subject,
            "htmlContent": html,
        }

    def _post(self, payload: dict) -> SendResult:
        try:
            response = self._client.post(self.config.send_url, headers=self._headers(), json=payload)
        except httpx.TimeoutException:
            logger.warning("Brevo send timed out after %ss", self.config.timeout)
            return SendResult(success=False, error="timed out")
        except httpx.HTTPError as exc:
            logger.warning("Brevo send failed: %s", exc)
            return SendResult(success=False, error=str(exc))

        if response.is_success:
            data = response.json() if response.content else {}
            return SendResult(success=True, message_id=data.get("messageId"), details=data)
        error = _error_message(response)
        logger.warning("Brevo rejected email | status=%s error=%s", response.status_code, error)
        return SendResult(success=False, error=error, details={"status_code": response.status_code})

    def send(self, message: EmailMessage) -> SendResult:
        recipients = [
            {"email": recipient.email, "name": recipient.display_name} for recipient in message.recipients
        ]
        return self._post(self._payload(recipients, message.subject, message.html_body))

    def check_account(self) -> tuple[bool, str]:
        """Verify the API key against Brevo's account endpoint."""
        if not self.config.api_key:
            return False, "API key is required"
        if not self.config.sender_email:
            return False, "From email is required"
        try:
            response = self._client.get(self.config.account_url, headers=self._headers())
        except httpx.HTTPError as exc:
            return False, f"Connection failed: {exc}"
        if not response.is_success:
            return False, _error_message(response)
        data = response.json()
        account = data.get("email") or data.get("firstName") or "Unknown"
        return True, f"Successfully connected to Brevo API. Account: {account}"

    def send_test_email(self, to: str, now: dt.datetime | None = None) -> tuple[bool, str]:
        if not self.config.api_key:
            return False, "Brevo API key is not configured"
        html = _jinja_env.get_template("test_email.html").render(
            sent_at=(now or dt.datetime.now(dt.timezone.utc)).strftime("%Y-%m-%d %H:%M:%S %Z"),
            sender_name=self.config.sender_name,
        )
        result = self._post(self._payload([{"email": to}], TEST_EMAIL_SUBJECT, html))
        if not result.success:
            return False, result.error or "Failed to send test email"
        return True, f"Test email sent successfully to {to}. Message ID: {result.message_id or 'Unknown'}"


def get_email_sender() -> BrevoEmailSender:
    return BrevoEmailSender(BrevoConfig.from_settings())
