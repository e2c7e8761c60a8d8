"""
User Management API

Admins create, edit and deactivate back-office users; managers may list them.
"""

import logging
import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from crashify.core.dependencies import require_permission
from crashify.core.security import get_password_hash
from crashify.core.validation import is_valid_email, sanitize_email, validate_password_strength
from crashify.db.base import get_db
from crashify.models.user import USER_ROLES, User
from crashify.schemas.user import (
    UserCreate,
    UserListPagination,
    UserListResponse,
    UserUpdate,
    user_to_response,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/list", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[str] = None,
    search: Optional[str] = None,
    active_only: bool = Query(True, alias="activeOnly"),
    current_user: User = Depends(require_permission("users.read")),
    db: Session = Depends(get_db),
):
    """List users, newest first."""
    query = db.query(User)
    if active_only:
        query = query.filter(User.is_active.is_(True))
    if role in USER_ROLES:
        query = query.filter(User.role == role)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.email.ilike(pattern), User.name.ilike(pattern)))

    total = query.count()
    users = (
        query.order_by(User.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return UserListResponse(
        users=[user_to_response(u) for u in users],
        pagination=UserListPagination(
            page=page,
            limit=limit,
            total=total,
            totalPages=math.ceil(total / limit) if total else 0,
        ),
    )


@router.post("/create", status_code=201)
def create_user(
    request: UserCreate,
    current_user: User = Depends(require_permission("users.create")),
    db: Session = Depends(get_db),
):
    """Create a back-office user."""
    if not is_valid_email(request.email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    password_errors = validate_password_strength(request.password)
    if password_errors:
        raise HTTPException(status_code=400, detail=", ".join(password_errors))

    if request.role not in USER_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role specified")

    email = sanitize_email(request.email)
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(
        email=email,
        name=request.name,
        hashed_password=get_password_hash(request.password),
        role=request.role,
        two_factor_enabled=request.twoFactorEnabled,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"[Users] {current_user.email} created {user.email} ({user.role})")
    return {"success": True, "user": user_to_response(user)}


@router.patch("/{user_id}")
def update_user(
    user_id: UUID,
    request: UserUpdate,
    current_user: User = Depends(require_permission("users.update")),
    db: Session = Depends(get_db),
):
    """Update name, role, active flag or password."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if request.name is not None:
        user.name = request.name
    if request.role is not None:
        user.role = request.role
    if request.isActive is not None:
        user.is_active = request.isActive
    if request.password:
        password_errors = validate_password_strength(request.password)
        if password_errors:
            raise HTTPException(status_code=400, detail=", ".join(password_errors))
        user.hashed_password = get_password_hash(request.password)

    db.commit()
    db.refresh(user)

    return {"success": True, "user": user_to_response(user)}


@router.delete("/{user_id}")
def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_permission("users.delete")),
    db: Session = Depends(get_db),
):
    """Deactivate a user. Accounts are kept for the audit trail."""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.is_active = False
    db.commit()

    logger.info(f"[Users] {current_user.email} deactivated {user.email}")
    return {"success": True, "message": "User deleted successfully"}
