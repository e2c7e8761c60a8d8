from fastapi import APIRouter, Response

from crashify.core.csrf import issue_csrf_token

router = APIRouter()


@router.get("/csrf-token")
def get_csrf_token(response: Response):
    """Issue a CSRF token; the signed copy travels back in a cookie."""
    return {"token": issue_csrf_token(response)}
