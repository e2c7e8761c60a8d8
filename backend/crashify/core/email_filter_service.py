import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from crashify.models.email_filter import EmailFilter

logger = logging.getLogger(__name__)


@dataclass
class EmailFilterResult:
    is_whitelisted: bool = False
    is_blacklisted: bool = False
    filter_type: Optional[str] = None
    reason: Optional[str] = None


def _match(db: Session, filter_type: str, email: str, domain: str) -> Optional[EmailFilter]:
    return (
        db.query(EmailFilter)
        .filter(
            EmailFilter.type == filter_type,
            EmailFilter.is_active.is_(True),
            or_(EmailFilter.email_address == email, EmailFilter.email_domain == domain),
        )
        .first()
    )


def check_email_filter(db: Session, email: str) -> EmailFilterResult:
    """Whitelist wins over blacklist; matches exact address or sender domain."""
    email = email.strip().lower()
    domain = email.split("@", 1)[1] if "@" in email else ""

    allowed = _match(db, "whitelist", email, domain)
    if allowed:
        return EmailFilterResult(True, False, "whitelist", allowed.reason or "Email is whitelisted")

    denied = _match(db, "blacklist", email, domain)
    if denied:
        logger.info(f"[EmailFilters] {email} matched blacklist rule {denied.id}")
        return EmailFilterResult(False, True, "blacklist", denied.reason or "Email is blacklisted")

    return EmailFilterResult()
