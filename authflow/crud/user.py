"""
Credential store: persistence operations for User records.

Email uniqueness is enforced by the database constraint at insert time,
not by a prior lookup, so concurrent registrations cannot both succeed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authflow.core.exceptions import DuplicateEmailError, UserNotFoundError
from authflow.core.security import verify_password
from authflow.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(db: Session, name: str, email: str, hashed_password: str) -> User:
    """
    Insert a new, unverified user.

    Raises:
        DuplicateEmailError: If the email is already registered
    """
    user = User(
        id=uuid.uuid4(),
        name=name,
        email=normalize_email(email),
        hashed_password=hashed_password,
        email_verified_at=None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Registration rejected, email already taken: {user.email}")
        raise DuplicateEmailError()

    db.refresh(user)
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User:
    """
    Raises:
        UserNotFoundError: If no user has this id
    """
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UserNotFoundError()
    return user


def mark_email_verified(db: Session, user: User, now: Optional[datetime] = None) -> bool:
    """
    Set email_verified_at once.

    Returns:
        bool: True if the user was unverified before this call
    """
    if user.is_verified:
        return False

    user.email_verified_at = now or datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return True


def verify_user_password(user: User, plain_password: str) -> bool:
    return verify_password(plain_password, user.hashed_password)
