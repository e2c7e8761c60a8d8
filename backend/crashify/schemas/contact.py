from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class ContactMessage(BaseModel):
    """Public website contact form. Field names follow the site form."""
    FirstName: Optional[str] = Field(None, max_length=100)
    LastName: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    message: Optional[str] = Field(None, max_length=5000)
