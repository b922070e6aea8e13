"""User schema definitions."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["ADMIN", "OWNER"]


class UserSummary(BaseModel):
    """Minimal user reference embedded in other payloads"""

    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class User(UserSummary):
    """Schema for User response. Never carries the password hash."""

    email: str
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None


class UserUpdate(BaseModel):
    """Schema for admin updates of a User"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
