"""
Vending machine operations that span several tables.

Product and payment method lists are replaced wholesale: the caller sends
the complete desired list and the existing join rows are swapped out in
the same transaction as the rest of the update.
"""

import logging
from typing import Iterable, List, Sequence, Type, TypeVar

from sqlalchemy.orm import Session

from vending_info.core.schemas.machine import MachineDetail, MachineProductInput
from vending_info.core.utils.file_storage import FileStorage
from vending_info.db.models.machine import (
    MachinePaymentMethod,
    MachineProduct,
    PaymentMethodType,
    VendingMachine,
)
from vending_info.db.models.product import Product

logger = logging.getLogger(__name__)

DetailSchema = TypeVar("DetailSchema", bound=MachineDetail)


class MachineInputError(ValueError):
    """Submitted products or payment methods reference unknown catalog rows."""


def replace_products(
    db: Session, machine: VendingMachine, items: Sequence[MachineProductInput]
) -> None:
    """
    Swap the machine's product listings for ``items``.

    Raises:
        MachineInputError: On unknown or repeated product ids
    """
    product_ids = [item.product_id for item in items]
    if len(set(product_ids)) != len(product_ids):
        raise MachineInputError("Each product can only be listed once per machine")

    if product_ids:
        known = {
            row.id for row in db.query(Product.id).filter(Product.id.in_(product_ids))
        }
        missing = sorted(set(product_ids) - known)
        if missing:
            raise MachineInputError(f"Unknown product ids: {missing}")

    machine.products.clear()
    # Old rows must be gone before the unique (machine, product) rows come back
    db.flush()
    for item in items:
        machine.products.append(
            MachineProduct(
                product_id=item.product_id,
                price=item.price,
                is_available=item.is_available,
                slot_code=item.slot_code,
            )
        )


def replace_payment_methods(
    db: Session, machine: VendingMachine, payment_types: Iterable[str]
) -> None:
    """
    Swap the machine's accepted payment methods for ``payment_types``.

    Raises:
        MachineInputError: On types missing from the catalog
    """
    requested: List[str] = []
    for payment_type in payment_types:
        normalized = payment_type.strip().upper()
        if normalized not in requested:
            requested.append(normalized)

    catalog = {
        row.type: row
        for row in db.query(PaymentMethodType).filter(PaymentMethodType.type.in_(requested))
    } if requested else {}
    missing = [payment_type for payment_type in requested if payment_type not in catalog]
    if missing:
        raise MachineInputError(f"Unknown payment methods: {missing}")

    machine.payment_methods.clear()
    db.flush()
    for payment_type in requested:
        machine.payment_methods.append(
            MachinePaymentMethod(payment_method_type=catalog[payment_type], available=True)
        )


def delete_machine(db: Session, machine: VendingMachine, storage: FileStorage) -> None:
    """Delete a machine with all dependent rows, then its gallery files."""
    storage_paths = [photo.storage_path for photo in machine.photos if photo.storage_path]
    machine_id = machine.id

    db.delete(machine)
    db.commit()

    for storage_path in storage_paths:
        storage.delete(storage_path)

    logger.info("Machine deleted", extra={
        "machine_id": machine_id,
        "files_removed": len(storage_paths),
    })


def build_machine_detail(
    machine: VendingMachine,
    schema: Type[DetailSchema] = MachineDetail,  # type: ignore[assignment]
    approved_reviews_only: bool = True,
) -> DetailSchema:
    """Serialize a machine with ordered child collections."""
    detail = schema.model_validate(machine)

    reviews = detail.reviews
    if approved_reviews_only:
        reviews = [review for review in reviews if review.is_approved]
    detail.reviews = sorted(reviews, key=lambda r: (r.created_at, r.id), reverse=True)

    sort_order = {
        link.id: link.payment_method_type.sort_order for link in machine.payment_methods
    }
    detail.payment_methods = sorted(detail.payment_methods, key=lambda pm: sort_order[pm.id])
    detail.products = sorted(detail.products, key=lambda p: p.product.name.lower())
    return detail
