"""Product schema definitions."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    """Base schema for Product"""

    name: str = Field(..., max_length=255, description="Product name, unique across the catalog")
    description: Optional[str] = Field(None, description="Product description")
    photo: Optional[str] = Field(None, max_length=1024, description="Photo URL")
    price: Optional[float] = Field(None, ge=0, description="Default price")
    is_available: bool = True


class ProductCreate(ProductBase):
    """Schema for creating a Product"""

    pass


class ProductUpdate(BaseModel):
    """Schema for updating a Product"""

    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    photo: Optional[str] = Field(None, max_length=1024)
    price: Optional[float] = Field(None, ge=0)
    is_available: Optional[bool] = None


class Product(ProductBase):
    """Schema for Product response"""

    id: int

    model_config = ConfigDict(from_attributes=True)
