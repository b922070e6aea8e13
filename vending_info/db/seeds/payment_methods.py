#!/usr/bin/env python3
"""
Seed file for the payment method catalog
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from vending_info.db.models.machine import PaymentMethodType

logger = logging.getLogger("vending_info.seeds")

# Display order is the list order
PAYMENT_METHOD_CATALOG: List[Dict[str, Any]] = [
    {
        "type": "COIN",
        "name": "Coins",
        "description": "Cash coins",
        "icon": "🪙",
    },
    {
        "type": "BANKNOTE",
        "name": "Banknotes",
        "description": "Cash banknotes",
        "icon": "💵",
    },
    {
        "type": "GIROCARD",
        "name": "Girocard",
        "description": "German debit card",
        "icon": "🏧",
    },
    {
        "type": "CREDIT_CARD",
        "name": "Creditcard",
        "description": "Credit card",
        "icon": "💳",
    },
]

PAYMENT_METHOD_TYPES = [entry["type"] for entry in PAYMENT_METHOD_CATALOG]


def seed_payment_methods(db: Session) -> List[PaymentMethodType]:
    """
    Create or update the payment method catalog.

    Safe to run on every startup: existing rows are updated in place.
    """
    existing = {row.type: row for row in db.query(PaymentMethodType).all()}
    created = 0

    for sort_order, entry in enumerate(PAYMENT_METHOD_CATALOG):
        row = existing.get(entry["type"])
        if row is None:
            row = PaymentMethodType(type=entry["type"])
            db.add(row)
            existing[entry["type"]] = row
            created += 1
        row.name = entry["name"]
        row.description = entry["description"]
        row.icon = entry["icon"]
        row.sort_order = sort_order

    db.commit()

    logger.info("Seeded payment method catalog", extra={
        "created_count": created,
        "total_count": len(PAYMENT_METHOD_CATALOG),
    })
    return [existing[payment_type] for payment_type in PAYMENT_METHOD_TYPES]
