"""User account operations shared by the API and the admin script."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from vending_info.core.security import hash_password, verify_password
from vending_info.db.models.user import User, UserRole, normalize_email

logger = logging.getLogger(__name__)


class DuplicateEmailError(ValueError):
    """Raised when an account with the same email already exists."""


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """
    Return the user when the password matches, else None.

    The active flag is not checked here; callers decide how to report a
    deactivated account.
    """
    user = get_user_by_email(db, email)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role: str = UserRole.OWNER.value,
) -> User:
    """
    Create an account with a bcrypt password hash.

    Raises:
        DuplicateEmailError: If the normalized email is taken
        ValueError: If the password cannot be hashed
    """
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmailError(f"User with email {normalize_email(email)} already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User created", extra={"user_id": user.id, "role": user.role})
    return user


def set_password(db: Session, user: User, new_password: str) -> None:
    user.password_hash = hash_password(new_password)
    db.commit()
