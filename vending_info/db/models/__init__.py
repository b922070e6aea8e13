"""Database models"""

from vending_info.db.models.machine import (
    MachinePaymentMethod,
    MachineProduct,
    PaymentMethodType,
    Photo,
    VendingMachine,
)
from vending_info.db.models.product import Product
from vending_info.db.models.review import Review
from vending_info.db.models.user import User, UserRole
from vending_info.db.models.user_session import UserSession

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "VendingMachine",
    "MachineProduct",
    "PaymentMethodType",
    "MachinePaymentMethod",
    "Photo",
    "Product",
    "Review",
]
