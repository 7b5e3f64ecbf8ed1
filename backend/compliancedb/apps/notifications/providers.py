from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.request
from typing import Optional, Sequence, Tuple

from compliancedb.utils.identifiers import generate_uuid7

logger = logging.getLogger(__name__)

RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
DEFAULT_FROM = os.getenv("EMAIL_FROM", "AIHireLaw Training <training@aihirelaw.com>")

try:
    SEND_TIMEOUT_SEC: float = float(os.getenv("EMAIL_SEND_TIMEOUT_SEC", "15"))
except ValueError:
    SEND_TIMEOUT_SEC = 15.0


class DeliveryError(Exception):
    """Raised by a provider when a message was not accepted for delivery."""


class EmailProvider:
    """
    Outbound email capability. `send` returns the provider's message id, or
    None when the message was not accepted.
    """

    name = "base"

    def send(
        self,
        *,
        recipients: Sequence[str],
        subject: str,
        html: str,
        correlation_id: str | None,
    ) -> Optional[str]:
        raise NotImplementedError


class NoopProvider(EmailProvider):
    name = "none"

    def send(
        self,
        *,
        recipients: Sequence[str],
        subject: str,
        html: str,
        correlation_id: str | None,
    ) -> Optional[str]:
        return None


class LogProvider(EmailProvider):
    """Development fallback: writes the message to the log and returns a local id."""

    name = "log"

    def send(
        self,
        *,
        recipients: Sequence[str],
        subject: str,
        html: str,
        correlation_id: str | None,
    ) -> Optional[str]:
        logger.info(
            "Email would be sent (no delivery provider configured)",
            extra={
                "recipients": list(recipients),
                "subject": subject,
                "correlation_id": correlation_id,
            },
        )
        return f"logged_{generate_uuid7()}"


class ResendProvider(EmailProvider):
    name = "resend"

    def __init__(self, api_key: str, *, sender: str = DEFAULT_FROM, timeout: float = SEND_TIMEOUT_SEC) -> None:
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def send(
        self,
        *,
        recipients: Sequence[str],
        subject: str,
        html: str,
        correlation_id: str | None,
    ) -> Optional[str]:
        payload = {
            "from": self.sender,
            "to": list(recipients),
            "subject": subject,
            "html": html,
        }
        req = urllib.request.Request(RESEND_API_URL, data=json.dumps(payload).encode("utf-8"), method="POST")
        req.add_header("Authorization", f"Bearer {self.api_key}")
        req.add_header("Content-Type", "application/json")
        if correlation_id:
            req.add_header("Idempotency-Key", correlation_id[:256])
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise DeliveryError(f"Resend rejected message ({exc.code}): {detail}") from exc
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise DeliveryError(f"Resend request failed: {exc}") from exc

        try:
            return json.loads(body).get("id") or None
        except ValueError as exc:
            raise DeliveryError("Resend returned an unreadable response") from exc


def get_email_provider() -> Tuple[EmailProvider, bool]:
    provider_name = (
        os.getenv("NOTIFICATIONS_EMAIL_PROVIDER")
        or os.getenv("EMAIL_PROVIDER")
        or "log"
    ).strip().lower()
    if provider_name in {"none", "noop", "disabled"}:
        return NoopProvider(), False
    if provider_name == "log":
        return LogProvider(), True
    if provider_name == "resend":
        api_key = os.getenv("RESEND_API_KEY")
        if not api_key:
            logger.warning("RESEND_API_KEY missing; falling back to log provider")
            return LogProvider(), True
        return ResendProvider(api_key), True
    raise ValueError(f"Unsupported email provider: {provider_name}")
