"""
Audit Trail Service

Records who did what to which claim. Audit writes never fail the request
that triggered them: errors are logged and the caller carries on.

ACTIONS:
- assessment_created / assessment_deleted
- files_uploaded / photos_zip_downloaded
- emails_sent
- email_filter_created / email_filter_updated / email_filter_deleted
- marked_entered_iq_controls
- login_success / login_failed
"""

import logging
from typing import Optional, Dict, Any
from uuid import UUID
from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from crashify.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def client_ip(request: Optional[Request]) -> Optional[str]:
    """First hop of X-Forwarded-For, falling back to the socket peer."""
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first[:64]
    return request.client.host if request.client else None


class AuditService:
    """Service to write audit trail entries."""

    def log_event(
        self,
        db: Session,
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
        user_id: Optional[UUID] = None,
        details: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
        success: bool = True,
    ) -> Optional[AuditLog]:
        """
        Persist an audit entry.

        Args:
            action: Short verb-style name, e.g. 'emails_sent'
            resource_id: Id of the affected record (stored as string)
            request: Used for IP address and user agent
        """
        log = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=details,
            success=success,
            ip_address=client_ip(request),
            user_agent=(request.headers.get("user-agent") or None) if request else None,
        )

        try:
            db.add(log)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Audit] Failed to record {action} for {resource_id}: {e}")
            return None

        logger.info(f"[Audit] {action} resource={log.resource_id} user={user_id} success={success}")
        return log


audit_service = AuditService()
