from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime
from uuid import UUID


Role = Literal["admin", "manager", "reviewer"]


class UserLogin(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class UserCreate(BaseModel):
    email: str
    name: str = Field(..., min_length=1, max_length=255)
    password: str
    role: str
    twoFactorEnabled: bool = False


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[Role] = None
    isActive: Optional[bool] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """User shape shared with the admin console (camelCase on the wire)."""
    id: UUID
    name: str
    email: str
    role: Role
    isActive: bool
    twoFactorEnabled: bool
    lastLogin: Optional[datetime] = None
    createdAt: Optional[datetime] = None


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse


class UserListPagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: UserListPagination


def user_to_response(user) -> UserResponse:
    """Convert a User row to its API shape."""
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        isActive=user.is_active,
        twoFactorEnabled=user.two_factor_enabled,
        lastLogin=user.last_login,
        createdAt=user.created_at,
    )
