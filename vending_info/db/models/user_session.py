from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vending_info.db.base import Base

if TYPE_CHECKING:
    from vending_info.db.models.user import User


class UserSession(Base):
    """Server-side login session identified by an opaque bearer token."""

    __tablename__ = "session"

    # Base provides: id, created_at, updated_at
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False
    )
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="sessions")

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<UserSession(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"
