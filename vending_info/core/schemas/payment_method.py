"""Payment method schema definitions."""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PaymentMethodType(BaseModel):
    """Catalog entry"""

    id: int
    type: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class MachinePaymentMethod(BaseModel):
    """Payment method as listed on a machine"""

    id: int
    type: str
    name: str
    available: bool

    model_config = ConfigDict(from_attributes=True)
