"""Review schema definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vending_info.core.schemas.user import UserSummary


class ReviewCreate(BaseModel):
    """Schema for creating a Review"""

    machine_id: int
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: str = Field(..., min_length=1, max_length=2000)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment is required")
        return v


class ReviewUpdate(BaseModel):
    """Moderation update"""

    is_approved: bool


class Review(BaseModel):
    """Schema for Review response"""

    id: int
    rating: int
    comment: str
    is_approved: bool
    machine_id: int
    user_id: int
    user: Optional[UserSummary] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
