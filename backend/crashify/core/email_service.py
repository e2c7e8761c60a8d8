import base64
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from crashify.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class EmailAttachment:
    filename: str
    content: bytes


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    html: str
    attachments: List[EmailAttachment] = field(default_factory=list)
    reply_to: Optional[str] = None


class EmailService:
    """Sends transactional email through the Resend HTTP API."""

    def __init__(self):
        self.api_key = settings.RESEND_API_KEY
        self.sender = settings.RESEND_EMAIL_FROM
        self.base_url = "https://api.resend.com/emails"

    async def send(self, email: OutgoingEmail) -> EmailResult:
        if not self.api_key:
            logger.warning("RESEND_API_KEY not configured")
            return EmailResult(success=False, error="Email provider is not configured")

        payload = {
            "from": self.sender,
            "to": [email.to],
            "subject": email.subject,
            "html": email.html,
        }
        if email.reply_to:
            payload["reply_to"] = email.reply_to
        if email.attachments:
            payload["attachments"] = [
                {
                    "filename": a.filename,
                    "content": base64.b64encode(a.content).decode("ascii"),
                }
                for a in email.attachments
            ]

        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(
                    self.base_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[Email] Provider rejected mail to {email.to}: {e.response.status_code} {e.response.text}")
            return EmailResult(success=False, error=f"Email provider error ({e.response.status_code})")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[Email] Failed to send mail to {email.to}: {e}")
            return EmailResult(success=False, error=str(e))

        logger.info(f"[Email] Sent '{email.subject}' to {email.to}")
        return EmailResult(success=True, message_id=data.get("id"))


email_service = EmailService()
