import enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from vending_info.db.base import Base

if TYPE_CHECKING:
    from vending_info.db.models.machine import VendingMachine
    from vending_info.db.models.review import Review
    from vending_info.db.models.user_session import UserSession


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    OWNER = "OWNER"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(Base):
    """Model for admin and machine owner accounts"""

    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.OWNER.value
    )  # "ADMIN" or "OWNER"
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    sessions: Mapped[List["UserSession"]] = relationship(
        "UserSession", back_populates="user", cascade="all, delete-orphan"
    )
    machines: Mapped[List["VendingMachine"]] = relationship(
        "VendingMachine", back_populates="owner"
    )
    reviews: Mapped[List["Review"]] = relationship("Review", back_populates="user")

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return normalize_email(value)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
