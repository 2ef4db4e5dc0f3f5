"""Pydantic schemas for authentication and profile endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field("", max_length=64)
    bio: str = Field("", max_length=1024)
    picture: str = Field("", max_length=1024)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """Public view of a user. The password hash is never exposed."""

    id: str
    email: str
    name: str
    bio: str
    picture: str
    phone: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    access_token: str = Field(..., description="Short-lived access token")
    refresh_token: str = Field(..., description="Long-lived refresh token")
    token_type: str = Field("bearer")
    expires_at: datetime = Field(..., description="Access token expiry (UTC)")
    refresh_expires_at: datetime = Field(..., description="Refresh token expiry (UTC)")
    user: UserResponse


class UpdateProfileRequest(BaseModel):
    """Empty or omitted fields leave the stored value unchanged."""

    name: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = Field(None, max_length=1024)
    picture: Optional[str] = Field(None, max_length=1024)
    phone: Optional[str] = Field(None, max_length=64)
