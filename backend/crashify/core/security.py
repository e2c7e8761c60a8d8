"""
Admin passwords and session tokens.

Passwords are SHA256 pre-hashed before bcrypt so long passphrases are not
silently truncated at bcrypt's 72 byte limit. Session tokens are HS256 JWTs
carrying the user id (`sub`) and role.
"""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from crashify.core.config import settings


def _prehash(password: str) -> bytes:
    return hashlib.sha256(password.encode("utf-8", errors="replace")).hexdigest().encode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    stored = hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(_prehash(plain_password), stored)
    except ValueError:
        # not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a session token; defaults to ACCESS_TOKEN_EXPIRE_MINUTES."""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    issued_at = datetime.now(timezone.utc)
    claims = {**data, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Claims of a valid, unexpired token; None for anything else."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

# Role-based access: which roles may perform which back-office actions
ROLE_PERMISSIONS = {
    "admin": {
        "users.create", "users.read", "users.update", "users.delete",
        "assessments.read", "assessments.update", "assessments.delete", "assessments.export",
        "email_filters.read", "email_filters.write",
        "settings.read", "settings.update",
        "reports.send",
    },
    "manager": {
        "users.read",
        "assessments.read", "assessments.update", "assessments.export",
        "reports.send",
    },
    "reviewer": {
        "assessments.read", "assessments.update",
    },
}


def has_permission(role: Optional[str], permission: str) -> bool:
    """Check whether a role grants a permission; unknown roles grant nothing."""
    return permission in ROLE_PERMISSIONS.get(role or "", set())
