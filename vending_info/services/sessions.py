"""
Server-side session management.

Sessions are rows in the ``session`` table keyed by an opaque random token.
A session is valid until ``expires_at``; the first lookup after that point
deletes the row. There is no renewal.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from vending_info.core.config import settings
from vending_info.core.security import generate_session_token
from vending_info.db.models.user_session import UserSession

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_session(
    db: Session, user_id: int, lifetime: Optional[timedelta] = None
) -> UserSession:
    """
    Issue a new session for a user.

    Each call yields a fresh token; existing sessions of the user stay valid.
    Expired rows of the same user are purged on the way.
    """
    now = utcnow()
    lifetime = lifetime or timedelta(hours=settings.SESSION_LIFETIME_HOURS)

    db.query(UserSession).filter(
        UserSession.user_id == user_id, UserSession.expires_at <= now
    ).delete(synchronize_session=False)

    user_session = UserSession(
        user_id=user_id,
        token=generate_session_token(),
        expires_at=now + lifetime,
    )
    db.add(user_session)
    db.commit()
    db.refresh(user_session)

    logger.info("Session created", extra={
        "user_id": user_id,
        "session_id": user_session.id,
        "expires_at": user_session.expires_at.isoformat(),
    })
    return user_session


def verify_session(db: Session, token: Optional[str]) -> Optional[UserSession]:
    """
    Resolve a token to its live session.

    Returns None for unknown tokens. An expired session is deleted and also
    yields None.
    """
    if not token:
        return None

    user_session = (
        db.query(UserSession)
        .options(joinedload(UserSession.user))
        .filter(UserSession.token == token)
        .first()
    )
    if user_session is None:
        return None

    if user_session.is_expired(utcnow()):
        logger.info("Expired session removed", extra={
            "user_id": user_session.user_id,
            "session_id": user_session.id,
        })
        db.delete(user_session)
        db.commit()
        return None

    return user_session


def revoke_session(db: Session, token: Optional[str]) -> bool:
    """Delete the session with this token. Returns False if there was none."""
    if not token:
        return False

    deleted = (
        db.query(UserSession)
        .filter(UserSession.token == token)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def revoke_user_sessions(
    db: Session, user_id: int, keep_token: Optional[str] = None
) -> int:
    """Delete every session of a user, optionally sparing the current one."""
    query = db.query(UserSession).filter(UserSession.user_id == user_id)
    if keep_token:
        query = query.filter(UserSession.token != keep_token)

    deleted = query.delete(synchronize_session=False)
    db.commit()

    logger.info("User sessions revoked", extra={"user_id": user_id, "count": deleted})
    return deleted


def clean_expired_sessions(db: Session) -> int:
    """Bulk-delete all expired sessions. Returns the number removed."""
    deleted = (
        db.query(UserSession)
        .filter(UserSession.expires_at <= utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()

    if deleted:
        logger.info(f"Removed {deleted} expired sessions")
    return deleted
