"""Authentication schema definitions."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from vending_info.core.schemas.user import Role, User


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint"""

    # Blank values are rejected by the handler with a single message
    email: str = Field("", max_length=255)
    password: str = Field("", max_length=1024)


class LoginResponse(BaseModel):
    message: str
    user: User
    token: str = Field(..., description="Session token, also set as the session cookie")
    expires_at: datetime


class MeResponse(BaseModel):
    message: str = "Authenticated"
    authenticated: bool = True
    user: User


class MessageResponse(BaseModel):
    message: str


class RegisterRequest(BaseModel):
    """Schema for creating an account (admin only)"""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=72)
    name: str = Field(..., min_length=1, max_length=255)
    role: Role = "OWNER"

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain or " " in v:
            raise ValueError("Invalid email address")
        return v


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=72)
