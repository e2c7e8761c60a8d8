import logging

from fastapi import APIRouter, HTTPException

from crashify.core.config import settings
from crashify.core.email_service import OutgoingEmail, email_service
from crashify.core.email_templates import render_contact_email
from crashify.schemas.contact import ContactMessage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sendEmail")
async def send_contact_email(body: ContactMessage):
    """Forward a website contact message to the Crashify inbox."""
    first = (body.FirstName or "").strip()
    last = (body.LastName or "").strip()
    message = (body.message or "").strip()
    if not first or not last or not body.email or not message:
        raise HTTPException(status_code=400, detail="Missing required fields")

    name = f"{first} {last}"
    result = await email_service.send(OutgoingEmail(
        to=settings.CONTACT_INBOX,
        subject=f"New Contact Message from {name}",
        html=render_contact_email(name, body.email, message),
        reply_to=body.email,
    ))
    if not result.success:
        logger.error(f"[Contact] Failed to forward message from {body.email}: {result.error}")
        raise HTTPException(status_code=502, detail="Failed to send message")

    return {"success": True, "message": "Email sent successfully"}
