"""
Authentication API endpoints.

Login issues a server-side session whose token is set as an HttpOnly cookie
and also returned in the body for bearer clients. The same handlers are
reachable through ``/api/auth?action=login|logout|me`` for clients of the
single-endpoint form.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from vending_info.api.deps import (
    AuthContext,
    extract_session_token,
    get_client_ip,
    require_admin,
    require_auth,
)
from vending_info.core.config import settings
from vending_info.core.limiter import limiter
from vending_info.core.logging_config import log_security_event
from vending_info.core.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RegisterRequest,
)
from vending_info.core.schemas.user import User
from vending_info.core.security import verify_password
from vending_info.db.models.user_session import UserSession
from vending_info.db.session import get_db
from vending_info.services.sessions import create_session, revoke_session, revoke_user_sessions
from vending_info.services.users import (
    DuplicateEmailError,
    authenticate,
    create_user,
    set_password,
)

# Create router for authentication endpoints
router = APIRouter()

# action -> allowed method for the query-parameter form
ACTION_METHODS = {"login": "POST", "logout": "POST", "me": "GET"}


def _secure_cookies() -> bool:
    return settings.SESSION_COOKIE_SECURE or settings.is_production


def set_session_cookie(response: Response, user_session: UserSession) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=user_session.token,
        max_age=settings.session_max_age,
        path="/",
        secure=_secure_cookies(),
        httponly=True,
        samesite="strict",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        secure=_secure_cookies(),
        httponly=True,
        samesite="strict",
    )


@router.post("/login", response_model=LoginResponse)
@limiter.shared_limit(settings.rate_limit_login_endpoints, scope="login")
def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
) -> LoginResponse:
    """
    Exchange email and password for a session.

    Rate limit: login limit per IP address, shared with the ?action=login form.
    """
    email = credentials.email.strip()
    if not email or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    client_ip = get_client_ip(request)
    user = authenticate(db, email, credentials.password)
    if user is None:
        log_security_event("login_failure", "Invalid login attempt", ip_address=client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        log_security_event(
            "login_failure",
            "Login attempt on deactivated account",
            user_id=user.id,
            ip_address=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )

    user_session = create_session(db, user.id)
    set_session_cookie(response, user_session)
    log_security_event("login_success", "User logged in", user_id=user.id, ip_address=client_ip)

    return LoginResponse(
        message="Login successful",
        user=User.model_validate(user),
        token=user_session.token,
        expires_at=user_session.expires_at,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)) -> MessageResponse:
    """End the presented session, if any. Always succeeds."""
    token = extract_session_token(request)
    if revoke_session(db, token):
        log_security_event("logout", "User logged out", ip_address=get_client_ip(request))
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
def me(auth: AuthContext = Depends(require_auth)) -> MeResponse:
    """Return the authenticated user"""
    return MeResponse(user=User.model_validate(auth.user))


@router.api_route("", methods=["GET", "POST"], include_in_schema=False)
def auth_action(
    request: Request,
    response: Response,
    action: Optional[str] = Query(None),
    credentials: Optional[LoginRequest] = Body(None),
    db: Session = Depends(get_db),
):
    """Dispatch ``?action=`` to the login, logout and me handlers."""
    if action not in ACTION_METHODS or request.method != ACTION_METHODS[action]:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail="Method not allowed",
        )

    if action == "login":
        return login(
            request=request,
            response=response,
            credentials=credentials or LoginRequest(),
            db=db,
        )
    if action == "logout":
        return logout(request=request, response=response, db=db)
    return me(auth=require_auth(request, db))


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_write_endpoints)
def register(
    request: Request,
    payload: RegisterRequest,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> User:
    """Create an owner or admin account (admin only)"""
    try:
        user = create_user(db, payload.email, payload.password, payload.name, payload.role)
    except DuplicateEmailError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    log_security_event(
        "user_created",
        "Account created by admin",
        user_id=auth.user.id,
        ip_address=get_client_ip(request),
        extra_data={"created_user_id": user.id, "role": user.role},
    )
    return User.model_validate(user)


@router.post("/change-password", response_model=MessageResponse)
@limiter.limit(settings.rate_limit_login_endpoints)
def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """
    Replace the caller's password.

    Every other session of the account is revoked; the current one stays.
    """
    if not verify_password(payload.current_password, auth.user.password_hash):
        log_security_event(
            "password_change_failure",
            "Wrong current password on password change",
            user_id=auth.user.id,
            ip_address=get_client_ip(request),
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    try:
        set_password(db, auth.user, payload.new_password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    revoked = revoke_user_sessions(db, auth.user.id, keep_token=auth.session.token)
    log_security_event(
        "password_changed",
        "Password changed",
        user_id=auth.user.id,
        ip_address=get_client_ip(request),
        extra_data={"sessions_revoked": revoked},
    )
    return MessageResponse(message="Password changed successfully")
