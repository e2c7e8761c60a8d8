from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime
from uuid import UUID


FilterType = Literal["whitelist", "blacklist"]


class EmailFilterCreate(BaseModel):
    type: Optional[str] = None
    email_domain: Optional[str] = Field(None, max_length=255)
    email_address: Optional[str] = Field(None, max_length=255)
    reason: Optional[str] = None
    is_active: bool = True


class EmailFilterUpdate(BaseModel):
    is_active: Optional[bool] = None
    reason: Optional[str] = None


class EmailFilterResponse(BaseModel):
    id: UUID
    type: FilterType
    email_domain: Optional[str] = None
    email_address: Optional[str] = None
    reason: Optional[str] = None
    is_active: bool
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmailFilterCheckResponse(BaseModel):
    isWhitelisted: bool
    isBlacklisted: bool
    filterType: Optional[FilterType] = None
    reason: Optional[str] = None
