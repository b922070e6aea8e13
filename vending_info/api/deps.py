"""
Authentication dependencies shared by the API routers.

A request authenticates with ``Authorization: Bearer <token>`` or with the
session cookie set at login. The header wins when both are present.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from vending_info.core.config import settings
from vending_info.core.logging_config import log_security_event
from vending_info.db.models.machine import VendingMachine
from vending_info.db.models.user import User
from vending_info.db.models.user_session import UserSession
from vending_info.db.session import get_db
from vending_info.services.sessions import verify_session


@dataclass
class AuthContext:
    user: User
    session: UserSession

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin


def get_client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def extract_session_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def require_auth(request: Request, db: Session = Depends(get_db)) -> AuthContext:
    """Resolve the caller's session or fail with 401."""
    token = extract_session_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    user_session = verify_session(db, token)
    if user_session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    user = user_session.user
    if not user.is_active:
        log_security_event(
            "inactive_account_rejected",
            "Request with session of a deactivated account",
            user_id=user.id,
            ip_address=get_client_ip(request),
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )

    request.state.user = user
    request.state.session = user_session
    return AuthContext(user=user, session=user_session)


def require_admin(request: Request, auth: AuthContext = Depends(require_auth)) -> AuthContext:
    """Authenticated caller with the ADMIN role, else 403."""
    if not auth.is_admin:
        log_security_event(
            "forbidden",
            "Admin access denied",
            user_id=auth.user.id,
            ip_address=get_client_ip(request),
            extra_data={"path": request.url.path},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return auth


def require_machine_owner_or_admin(
    request: Request,
    machine_id: int,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
) -> AuthContext:
    """
    Caller must own the machine in the ``machine_id`` path parameter.

    Admins pass without a lookup; the handler reports a missing machine.
    """
    if auth.is_admin:
        return auth

    owner_id = (
        db.query(VendingMachine.owner_id)
        .filter(VendingMachine.id == machine_id)
        .scalar()
    )
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Machine not found",
        )

    if owner_id != auth.user.id:
        log_security_event(
            "forbidden",
            "Machine access denied",
            user_id=auth.user.id,
            ip_address=get_client_ip(request),
            extra_data={"machine_id": machine_id},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    return auth
