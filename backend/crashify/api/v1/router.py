from fastapi import APIRouter
from crashify.api.v1.endpoints import assessments, auth, contact, csrf, email_filters, files, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/auth/users", tags=["users"])
api_router.include_router(assessments.router, prefix="/assessments", tags=["assessments"])
api_router.include_router(files.router, prefix="/assessments", tags=["files"])
api_router.include_router(email_filters.router, prefix="/admin/email-filters", tags=["email-filters"])
api_router.include_router(csrf.router, tags=["csrf"])
api_router.include_router(contact.router, tags=["contact"])
