"""User administration endpoints (admin only)."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from vending_info.api.deps import AuthContext, get_client_ip, require_admin
from vending_info.core.config import settings
from vending_info.core.limiter import limiter
from vending_info.core.logging_config import log_security_event
from vending_info.core.schemas.user import User, UserUpdate
from vending_info.db.models.user import User as UserModel
from vending_info.db.models.user import UserRole
from vending_info.db.session import get_db
from vending_info.services.sessions import revoke_user_sessions

router = APIRouter()


@router.get("", response_model=List[User])
async def list_users(
    auth: AuthContext = Depends(require_admin), db: Session = Depends(get_db)
) -> List[User]:
    """List all accounts, oldest first"""
    users = db.query(UserModel).order_by(UserModel.id).all()
    return [User.model_validate(user) for user in users]


@router.patch("/{user_id}", response_model=User)
@limiter.limit(settings.rate_limit_write_endpoints)
async def update_user(
    request: Request,
    user_id: int,
    payload: UserUpdate,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> User:
    """
    Update name, role or active flag of an account.

    Deactivating an account ends all of its sessions. Admins cannot lock
    themselves out by deactivating or demoting their own account.
    """
    user = db.get(UserModel, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with ID {user_id} not found",
        )

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if user.id == auth.user.id and (
        changes.get("is_active") is False
        or changes.get("role", UserRole.ADMIN.value) != UserRole.ADMIN.value
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate or demote your own account",
        )

    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)

    if changes.get("is_active") is False:
        revoke_user_sessions(db, user.id)

    log_security_event(
        "user_updated",
        "Account updated by admin",
        user_id=auth.user.id,
        ip_address=get_client_ip(request),
        extra_data={"target_user_id": user.id, "fields": sorted(changes)},
    )
    return User.model_validate(user)
