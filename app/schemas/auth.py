"""Authentication and user schemas."""

import re
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field


def validate_email_lenient(v: str) -> str:
    """Validate email with lenient rules that allow .local domains for testing."""
    if not v or "@" not in v:
        raise ValueError("Invalid email address")
    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(pattern, v.strip()):
        raise ValueError("Invalid email address format")
    return v.strip().lower()


LenientEmail = Annotated[str, AfterValidator(validate_email_lenient)]


class LoginRequest(BaseModel):
    """Login request with email and password."""

    email: LenientEmail
    password: str = Field(min_length=8, max_length=128)


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class UserCreate(BaseModel):
    """Schema for creating a console user (super-admin only)."""

    email: LenientEmail
    password: str = Field(min_length=8, max_length=128)
    display_name: str | None = Field(None, max_length=200)
    is_superadmin: bool = False


class UserRead(BaseModel):
    """Schema for reading user data."""

    id: str
    email: str
    display_name: str | None
    is_superadmin: bool
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
