"""
Input rules shared by the API and the admin console.

Nothing here touches settings or the database so the console can import it
without a configured backend.
"""

import re
from typing import List, Optional


EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PDF_MIME_TYPE = "application/pdf"
MAX_DOCUMENT_SIZE_BYTES = 10 * 1024 * 1024  # 10MB

# File picker accept filter for claim attachments
ACCEPTED_UPLOAD_EXTENSIONS = (".pdf", ".doc", ".docx")
ACCEPTED_UPLOAD_MIME_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


def is_valid_email(email: Optional[str]) -> bool:
    if not email or len(email) > 254:
        return False
    return bool(EMAIL_REGEX.match(email))


def sanitize_email(email: str) -> str:
    return email.strip().lower()


def is_pdf(filename: str, content_type: Optional[str]) -> bool:
    """A document counts as PDF by MIME type or by extension."""
    return content_type == PDF_MIME_TYPE or filename.lower().endswith(".pdf")


def is_accepted_upload(filename: str, content_type: Optional[str]) -> bool:
    """Mirror of the upload picker filter: images, pdf, doc, docx."""
    if content_type and content_type.startswith("image/"):
        return True
    if content_type in ACCEPTED_UPLOAD_MIME_TYPES:
        return True
    return filename.lower().endswith(ACCEPTED_UPLOAD_EXTENSIONS)


def validate_password_strength(password: str) -> List[str]:
    """Return the list of unmet password rules (empty when the password is fine)."""
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if len(password) > 128:
        errors.append("Password must be at most 128 characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain an uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain a lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain a number")
    return errors
