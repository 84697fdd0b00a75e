"""Email delivery through the Resend HTTP API (async)."""

import base64
import logging
from dataclasses import dataclass

import httpx

from app.core.config import settings
from app.core.exceptions import EmailDeliveryError, ServiceNotConfiguredError
from app.core.metrics import EMAILS_SENT

logger = logging.getLogger(__name__)


@dataclass
class EmailAttachment:
    filename: str
    content: bytes

    def to_payload(self) -> dict[str, str]:
        return {
            "filename": self.filename,
            "content": base64.b64encode(self.content).decode("ascii"),
        }


async def send_email(
    to: str,
    subject: str,
    html: str,
    attachments: list[EmailAttachment] | None = None,
    api_key: str | None = None,
) -> str | None:
    """Send one email via Resend. Returns the provider message id.

    Raises ServiceNotConfiguredError without an API key and EmailDeliveryError
    when the provider rejects the message or cannot be reached.
    """
    api_key = api_key if api_key is not None else settings.resend_api_key
    if not api_key:
        logger.error("Resend API key not configured")
        raise ServiceNotConfiguredError("Email service not configured")

    payload: dict = {
        "from": settings.email_from,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    if settings.email_reply_to:
        payload["reply_to"] = settings.email_reply_to
    if attachments:
        payload["attachments"] = [a.to_payload() for a in attachments]

    try:
        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.post(
                settings.resend_api_url,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            )
    except httpx.HTTPError as e:
        EMAILS_SENT.labels(status="error").inc()
        logger.error("Resend send error: %s", e)
        raise EmailDeliveryError("Failed to send email") from e

    if resp.status_code >= 300:
        EMAILS_SENT.labels(status="error").inc()
        logger.error("Resend send failed (%d): %s", resp.status_code, resp.text[:500])
        raise EmailDeliveryError("Failed to send email")

    message_id = (resp.json() or {}).get("id")
    EMAILS_SENT.labels(status="ok").inc()
    logger.info("Email sent successfully: %s", message_id)
    return message_id
