"""Vending machine schema definitions."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vending_info.core.schemas.payment_method import MachinePaymentMethod
from vending_info.core.schemas.product import Product
from vending_info.core.schemas.review import Review
from vending_info.core.schemas.upload import Photo
from vending_info.core.schemas.user import UserSummary


def normalize_coordinates(v: Optional[str]) -> Optional[str]:
    """Accept "lat,lng" and store it in a canonical form."""
    if v is None or not v.strip():
        return None
    parts = [part.strip() for part in v.split(",")]
    if len(parts) != 2:
        raise ValueError("Coordinates must be 'lat,lng'")
    lat, lng = float(parts[0]), float(parts[1])
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValueError("Coordinates out of range")
    return f"{lat},{lng}"


def require_text(v: Optional[str]) -> Optional[str]:
    """Strip a required text field; whitespace alone counts as missing."""
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("Value must not be blank")
    return v


class MachineProductInput(BaseModel):
    """Product listing submitted with a machine"""

    product_id: int
    price: Optional[float] = Field(None, ge=0, description="Overrides the catalog price")
    is_available: bool = True
    slot_code: Optional[str] = Field(None, max_length=20)


class MachineBase(BaseModel):
    """Base schema for VendingMachine"""

    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=1024)
    coordinates: Optional[str] = Field(None, max_length=100, description="'lat,lng'")
    is_active: bool = True

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: Optional[str]) -> Optional[str]:
        return normalize_coordinates(v)

    @field_validator("name", "location")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        return require_text(v)


class MachineCreate(MachineBase):
    """Schema for creating a VendingMachine"""

    owner_id: Optional[int] = Field(None, description="Only honoured for admins")
    products: List[MachineProductInput] = Field(default_factory=list)
    payment_methods: List[str] = Field(
        default_factory=list, description="Payment method types, e.g. COIN"
    )


class MachineUpdate(BaseModel):
    """Partial update. Lists, when present, replace the existing ones."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=1024)
    coordinates: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
    products: Optional[List[MachineProductInput]] = None
    payment_methods: Optional[List[str]] = None

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: Optional[str]) -> Optional[str]:
        return normalize_coordinates(v)

    @field_validator("name", "location")
    @classmethod
    def validate_required_text(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v)


class MachineProduct(BaseModel):
    id: int
    product_id: int
    price: Optional[float] = None
    is_available: bool
    slot_code: Optional[str] = None
    product: Product

    model_config = ConfigDict(from_attributes=True)


class OwnerDetail(UserSummary):
    email: str


class MachineSummary(MachineBase):
    """Schema for machine lists"""

    id: int
    owner_id: int
    owner: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MachineDetail(MachineSummary):
    """Machine with its products, payment methods, gallery and reviews"""

    products: List[MachineProduct] = []
    payment_methods: List[MachinePaymentMethod] = []
    photos: List[Photo] = []
    reviews: List[Review] = []


class AdminMachine(MachineDetail):
    owner: OwnerDetail
