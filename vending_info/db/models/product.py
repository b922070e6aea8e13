from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vending_info.db.base import Base

if TYPE_CHECKING:
    from vending_info.db.models.machine import MachineProduct


class Product(Base):
    """Model for catalog products shared between machines"""

    name: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # No cascade: a product referenced by a machine cannot be deleted
    machine_links: Mapped[List["MachineProduct"]] = relationship(
        "MachineProduct", back_populates="product", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
