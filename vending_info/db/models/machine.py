from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vending_info.db.base import Base

if TYPE_CHECKING:
    from vending_info.db.models.product import Product
    from vending_info.db.models.review import Review
    from vending_info.db.models.user import User


class VendingMachine(Base):
    """Model for vending machines"""

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    coordinates: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # "lat,lng"
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id"), index=True, nullable=False
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="machines")
    products: Mapped[List["MachineProduct"]] = relationship(
        "MachineProduct", back_populates="machine", cascade="all, delete-orphan"
    )
    payment_methods: Mapped[List["MachinePaymentMethod"]] = relationship(
        "MachinePaymentMethod", back_populates="machine", cascade="all, delete-orphan"
    )
    photos: Mapped[List["Photo"]] = relationship(
        "Photo", back_populates="machine", cascade="all, delete-orphan"
    )
    reviews: Mapped[List["Review"]] = relationship(
        "Review", back_populates="machine", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<VendingMachine(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"


class MachineProduct(Base):
    """Per-machine listing of a catalog product with its own price and availability"""

    __table_args__ = (UniqueConstraint("machine_id", "product_id"),)

    machine_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vending_machine.id", ondelete="CASCADE"), index=True, nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("product.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    slot_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Relationships
    machine: Mapped["VendingMachine"] = relationship(
        "VendingMachine", back_populates="products"
    )
    product: Mapped["Product"] = relationship("Product", back_populates="machine_links")

    def __repr__(self) -> str:
        return (
            f"<MachineProduct(id={self.id}, machine_id={self.machine_id}, "
            f"product_id={self.product_id})>"
        )


class PaymentMethodType(Base):
    """Catalog of payment methods a machine can accept"""

    type: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<PaymentMethodType(id={self.id}, type='{self.type}')>"


class MachinePaymentMethod(Base):
    """Payment method accepted by a machine"""

    __table_args__ = (UniqueConstraint("machine_id", "payment_method_type_id"),)

    machine_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vending_machine.id", ondelete="CASCADE"), index=True, nullable=False
    )
    payment_method_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("payment_method_type.id"), nullable=False
    )
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    machine: Mapped["VendingMachine"] = relationship(
        "VendingMachine", back_populates="payment_methods"
    )
    payment_method_type: Mapped["PaymentMethodType"] = relationship(
        "PaymentMethodType", lazy="joined"
    )

    @property
    def type(self) -> str:
        return self.payment_method_type.type

    @property
    def name(self) -> str:
        return self.payment_method_type.name

    def __repr__(self) -> str:
        return (
            f"<MachinePaymentMethod(id={self.id}, machine_id={self.machine_id}, "
            f"payment_method_type_id={self.payment_method_type_id})>"
        )


class Photo(Base):
    """Gallery image or video of a machine"""

    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    caption: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    media_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default="image"
    )  # "image" or "video"
    original_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    storage_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    machine_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vending_machine.id", ondelete="CASCADE"), index=True, nullable=False
    )

    machine: Mapped["VendingMachine"] = relationship("VendingMachine", back_populates="photos")

    def __repr__(self) -> str:
        return f"<Photo(id={self.id}, machine_id={self.machine_id}, media_type='{self.media_type}')>"
