import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from crashify.core.audit_service import audit_service
from crashify.core.config import settings
from crashify.core.dependencies import SESSION_COOKIE_NAME, get_current_user
from crashify.core.security import create_access_token, verify_password
from crashify.core.validation import sanitize_email
from crashify.db.base import get_db
from crashify.models.user import User
from crashify.schemas.user import Token, UserLogin, user_to_response

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/login", response_model=Token)
def login(
    credentials: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Sign in with email and password.

    Unknown, inactive and wrong-password logins get the same 401 so the
    response does not reveal which accounts exist.
    """
    email = sanitize_email(credentials.email)
    user = db.query(User).filter(User.email == email, User.is_active.is_(True)).first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        audit_service.log_event(
            db, "login_failed", resource_type="user",
            resource_id=user.id if user else None,
            user_id=user.id if user else None,
            details={"email": email},
            request=request, success=False,
        )
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    access_token = create_access_token({"sub": str(user.id), "role": user.role})
    response.set_cookie(
        SESSION_COOKIE_NAME,
        access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        path="/",
    )

    audit_service.log_event(db, "login_success", resource_type="user", resource_id=user.id,
                            user_id=user.id, request=request)
    logger.info(f"[Auth] {user.email} signed in as {user.role}")

    return Token(access_token=access_token, token_type="bearer", user=user_to_response(user))


@router.post("/logout")
def logout(response: Response):
    """Drop the session cookie. Bearer tokens simply expire."""
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"success": True}


@router.get("/session")
def get_session(current_user: User = Depends(get_current_user)):
    """Current signed-in user."""
    return {"user": user_to_response(current_user)}
