"""
Vending machine endpoints.

Browsing is public and limited to active machines. Owners manage their own
machines; admins manage all of them.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from vending_info.api.deps import (
    AuthContext,
    require_admin,
    require_auth,
    require_machine_owner_or_admin,
)
from vending_info.core.config import settings
from vending_info.core.limiter import limiter
from vending_info.core.schemas.auth import MessageResponse
from vending_info.core.schemas.machine import (
    AdminMachine,
    MachineCreate,
    MachineDetail,
    MachineSummary,
    MachineUpdate,
)
from vending_info.core.utils.file_storage import FileStorage, get_file_storage
from vending_info.db.models.machine import VendingMachine
from vending_info.db.models.user import User as UserModel
from vending_info.db.session import get_db
from vending_info.services.machines import (
    MachineInputError,
    build_machine_detail,
    delete_machine as delete_machine_with_files,
    replace_payment_methods,
    replace_products,
)

router = APIRouter()

# Columns that cannot be cleared through a partial update
_REQUIRED_FIELDS = {"name", "location", "is_active"}


def _get_machine_or_404(db: Session, machine_id: int) -> VendingMachine:
    machine = db.get(VendingMachine, machine_id)
    if not machine:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Machine with ID {machine_id} not found",
        )
    return machine


@router.get("/machines", response_model=List[MachineSummary])
async def list_machines(db: Session = Depends(get_db)) -> List[MachineSummary]:
    """List active machines with their owner"""
    machines = (
        db.query(VendingMachine)
        .options(selectinload(VendingMachine.owner))
        .filter(VendingMachine.is_active.is_(True))
        .order_by(VendingMachine.name, VendingMachine.id)
        .all()
    )
    return [MachineSummary.model_validate(machine) for machine in machines]


@router.get("/machines/{machine_id}", response_model=MachineDetail)
async def get_machine(machine_id: int, db: Session = Depends(get_db)) -> MachineDetail:
    """Public detail of an active machine with approved reviews, newest first"""
    machine = db.get(VendingMachine, machine_id)
    if not machine or not machine.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Machine with ID {machine_id} not found",
        )
    return build_machine_detail(machine)


@router.post("/machines", response_model=MachineDetail, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_write_endpoints)
async def create_machine(
    request: Request,
    payload: MachineCreate,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
) -> MachineDetail:
    """
    Create a machine owned by the caller.

    Admins may assign another owner through ``owner_id``.
    """
    owner_id = auth.user.id
    if payload.owner_id is not None and payload.owner_id != auth.user.id:
        if not auth.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only admins can assign machines to other users",
            )
        if db.get(UserModel, payload.owner_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User with ID {payload.owner_id} not found",
            )
        owner_id = payload.owner_id

    machine = VendingMachine(
        **payload.model_dump(exclude={"owner_id", "products", "payment_methods"}),
        owner_id=owner_id,
    )
    db.add(machine)
    try:
        replace_products(db, machine, payload.products)
        replace_payment_methods(db, machine, payload.payment_methods)
        db.commit()
    except MachineInputError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(machine)
    return build_machine_detail(machine)


@router.put("/machines/{machine_id}", response_model=MachineDetail)
@limiter.limit(settings.rate_limit_write_endpoints)
async def update_machine(
    request: Request,
    machine_id: int,
    payload: MachineUpdate,
    auth: AuthContext = Depends(require_machine_owner_or_admin),
    db: Session = Depends(get_db),
) -> MachineDetail:
    """
    Partially update a machine.

    ``products`` and ``payment_methods``, when sent, replace the current
    lists in the same transaction as the field changes.
    """
    machine = _get_machine_or_404(db, machine_id)

    changes = payload.model_dump(exclude_unset=True, exclude={"products", "payment_methods"})
    try:
        for field, value in changes.items():
            if value is None and field in _REQUIRED_FIELDS:
                continue
            setattr(machine, field, value)

        if payload.products is not None:
            replace_products(db, machine, payload.products)
        if payload.payment_methods is not None:
            replace_payment_methods(db, machine, payload.payment_methods)
        db.commit()
    except MachineInputError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(machine)
    return build_machine_detail(machine)


@router.delete("/machines/{machine_id}", response_model=MessageResponse)
@limiter.limit(settings.rate_limit_write_endpoints)
async def delete_machine(
    request: Request,
    machine_id: int,
    auth: AuthContext = Depends(require_machine_owner_or_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
) -> MessageResponse:
    """Delete a machine with its listings, gallery and reviews"""
    machine = _get_machine_or_404(db, machine_id)
    delete_machine_with_files(db, machine, storage)
    return MessageResponse(message="Machine deleted successfully")


@router.get("/my-machines", response_model=List[MachineDetail])
async def list_my_machines(
    auth: AuthContext = Depends(require_auth), db: Session = Depends(get_db)
) -> List[MachineDetail]:
    """The caller's machines, including inactive ones"""
    machines = (
        db.query(VendingMachine)
        .filter(VendingMachine.owner_id == auth.user.id)
        .order_by(VendingMachine.created_at.desc(), VendingMachine.id.desc())
        .all()
    )
    return [build_machine_detail(machine) for machine in machines]


@router.get("/admin/machines", response_model=List[AdminMachine])
async def list_all_machines(
    auth: AuthContext = Depends(require_admin), db: Session = Depends(get_db)
) -> List[AdminMachine]:
    """Every machine including inactive ones, with all reviews and owner email"""
    machines = (
        db.query(VendingMachine)
        .options(selectinload(VendingMachine.owner))
        .order_by(VendingMachine.created_at.desc(), VendingMachine.id.desc())
        .all()
    )
    return [
        build_machine_detail(machine, schema=AdminMachine, approved_reviews_only=False)
        for machine in machines
    ]
