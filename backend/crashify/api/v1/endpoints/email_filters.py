"""
Email Filters API

Whitelist/blacklist rules for inbound email senders. Each rule targets either
a whole domain or one address. Mutations require a CSRF token.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from crashify.core.audit_service import audit_service
from crashify.core.csrf import require_csrf_token
from crashify.core.dependencies import require_permission
from crashify.core.email_filter_service import check_email_filter
from crashify.db.base import get_db
from crashify.models.email_filter import FILTER_TYPES, EmailFilter
from crashify.models.user import User
from crashify.schemas.email_filter import (
    EmailFilterCheckResponse,
    EmailFilterCreate,
    EmailFilterResponse,
    EmailFilterUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _normalize(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip().lower()
    return value or None


def _get_filter(db: Session, filter_id: UUID) -> EmailFilter:
    email_filter = db.query(EmailFilter).filter(EmailFilter.id == filter_id).first()
    if not email_filter:
        raise HTTPException(status_code=404, detail="Email filter not found")
    return email_filter


@router.get("")
def list_email_filters(
    filter_type: Optional[str] = Query(None, alias="type"),
    is_active: Optional[bool] = None,
    current_user: User = Depends(require_permission("email_filters.read")),
    db: Session = Depends(get_db),
):
    """All rules, newest first."""
    query = db.query(EmailFilter)
    if filter_type in FILTER_TYPES:
        query = query.filter(EmailFilter.type == filter_type)
    if is_active is not None:
        query = query.filter(EmailFilter.is_active.is_(is_active))

    filters = query.order_by(EmailFilter.created_at.desc()).all()
    return {"success": True, "data": [EmailFilterResponse.model_validate(f) for f in filters]}


@router.get("/check", response_model=EmailFilterCheckResponse)
def check_email(
    email: str = Query(..., min_length=3),
    current_user: User = Depends(require_permission("email_filters.read")),
    db: Session = Depends(get_db),
):
    """How the rules classify a sender address."""
    result = check_email_filter(db, email)
    return EmailFilterCheckResponse(
        isWhitelisted=result.is_whitelisted,
        isBlacklisted=result.is_blacklisted,
        filterType=result.filter_type,
        reason=result.reason,
    )


@router.post("", status_code=201, dependencies=[Depends(require_csrf_token)])
def create_email_filter(
    body: EmailFilterCreate,
    request: Request,
    current_user: User = Depends(require_permission("email_filters.write")),
    db: Session = Depends(get_db),
):
    if body.type not in FILTER_TYPES:
        raise HTTPException(status_code=400, detail='Invalid type. Must be "whitelist" or "blacklist"')

    domain = _normalize(body.email_domain)
    address = _normalize(body.email_address)
    if not domain and not address:
        raise HTTPException(status_code=400, detail="Either email_domain or email_address is required")
    if domain and address:
        raise HTTPException(status_code=400, detail="Cannot specify both email_domain and email_address")

    email_filter = EmailFilter(
        type=body.type,
        email_domain=domain,
        email_address=address,
        reason=(body.reason or "").strip() or None,
        is_active=body.is_active,
        created_by=current_user.id,
    )
    db.add(email_filter)
    db.commit()
    db.refresh(email_filter)

    audit_service.log_event(
        db, "email_filter_created", resource_type="email_filter", resource_id=email_filter.id,
        user_id=current_user.id, details={"type": email_filter.type, "target": domain or address},
        request=request,
    )
    logger.info(f"[EmailFilters] {current_user.email} added {email_filter.type} rule for {domain or address}")

    return {"success": True, "data": EmailFilterResponse.model_validate(email_filter)}


@router.patch("/{filter_id}", dependencies=[Depends(require_csrf_token)])
def update_email_filter(
    filter_id: UUID,
    body: EmailFilterUpdate,
    request: Request,
    current_user: User = Depends(require_permission("email_filters.write")),
    db: Session = Depends(get_db),
):
    """Toggle a rule on/off or change its reason."""
    email_filter = _get_filter(db, filter_id)

    if body.is_active is not None:
        email_filter.is_active = body.is_active
    if body.reason is not None:
        email_filter.reason = body.reason.strip() or None
    email_filter.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(email_filter)

    audit_service.log_event(
        db, "email_filter_updated", resource_type="email_filter", resource_id=email_filter.id,
        user_id=current_user.id, details=body.model_dump(exclude_unset=True), request=request,
    )
    return {"success": True, "data": EmailFilterResponse.model_validate(email_filter)}


@router.delete("/{filter_id}", dependencies=[Depends(require_csrf_token)])
def delete_email_filter(
    filter_id: UUID,
    request: Request,
    current_user: User = Depends(require_permission("email_filters.write")),
    db: Session = Depends(get_db),
):
    email_filter = _get_filter(db, filter_id)
    target = email_filter.email_domain or email_filter.email_address
    db.delete(email_filter)
    db.commit()

    audit_service.log_event(
        db, "email_filter_deleted", resource_type="email_filter", resource_id=filter_id,
        user_id=current_user.id, details={"target": target}, request=request,
    )
    return {"success": True}
