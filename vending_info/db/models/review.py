from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vending_info.db.base import Base

if TYPE_CHECKING:
    from vending_info.db.models.machine import VendingMachine
    from vending_info.db.models.user import User


class Review(Base):
    """Customer rating of a machine"""

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id"), index=True, nullable=False
    )
    machine_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vending_machine.id", ondelete="CASCADE"), index=True, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="reviews")
    machine: Mapped["VendingMachine"] = relationship("VendingMachine", back_populates="reviews")

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, machine_id={self.machine_id}, rating={self.rating})>"
