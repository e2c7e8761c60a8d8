"""
CSRF protection for state-changing admin requests.

The token handed to the client is random; the cookie carries the same token
plus an HMAC signature so a forged cookie is rejected. Mutating requests must
echo the token in the `x-csrf-token` header.
"""

import hashlib
import hmac
import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Request, Response, status

from crashify.core.config import settings

logger = logging.getLogger(__name__)

CSRF_TOKEN_BYTES = 32
CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "x-csrf-token"
PROTECTED_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def _sign(token: str) -> str:
    return hmac.new(settings.CSRF_SECRET.encode(), token.encode(), hashlib.sha256).hexdigest()


def issue_csrf_token(response: Response) -> str:
    """Generate a token, set its signed form as a cookie, return the bare token."""
    token = secrets.token_hex(CSRF_TOKEN_BYTES)
    response.set_cookie(
        CSRF_COOKIE_NAME,
        f"{token}.{_sign(token)}",
        max_age=settings.CSRF_TOKEN_MAX_AGE,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="strict",
        path="/",
    )
    return token


def read_csrf_cookie(request: Request) -> Optional[str]:
    """Return the token stored in the cookie if its signature checks out."""
    signed = request.cookies.get(CSRF_COOKIE_NAME)
    if not signed or "." not in signed:
        return None
    token, signature = signed.split(".", 1)
    if not token or not hmac.compare_digest(_sign(token), signature):
        return None
    return token


def require_csrf_token(request: Request) -> None:
    """Dependency rejecting mutating requests without a matching CSRF token."""
    if request.method.upper() not in PROTECTED_METHODS:
        return

    cookie_token = read_csrf_cookie(request)
    header_token = request.headers.get(CSRF_HEADER_NAME)
    if not cookie_token or not header_token or not hmac.compare_digest(cookie_token, header_token):
        logger.warning(f"[CSRF] Rejected {request.method} {request.url.path}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or missing CSRF token")
