"""Payment method catalog endpoint."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vending_info.core.schemas.payment_method import PaymentMethodType
from vending_info.db.models.machine import PaymentMethodType as PaymentMethodTypeModel
from vending_info.db.session import get_db

router = APIRouter()


@router.get("", response_model=List[PaymentMethodType])
async def list_payment_methods(db: Session = Depends(get_db)) -> List[PaymentMethodType]:
    """Coins, banknotes, Girocard, credit card; always in that order"""
    rows = (
        db.query(PaymentMethodTypeModel)
        .order_by(PaymentMethodTypeModel.sort_order, PaymentMethodTypeModel.id)
        .all()
    )
    return [PaymentMethodType.model_validate(row) for row in rows]
