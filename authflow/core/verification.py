"""
Core email verification logic.

Verification links are not stored. A link is derived from the user id, a
hash of the user's email and an expiry, and is proven authentic by its
signature (see authflow.core.signed_urls). Verifying is idempotent: a link
replayed after verification reports "already verified" and changes nothing.
"""

import enum
import hmac
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from authflow.core.celery_utils import queue_task_safely
from authflow.core.config import settings
from authflow.core.exceptions import InvalidLinkError, UserNotFoundError
from authflow.core.security import email_hash
from authflow.core.signed_urls import sign_path, signed_url
from authflow.crud import user as user_crud
from authflow.models.user import User
from authflow.tasks.email_tasks import send_verification_email_task

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class VerificationOutcome(str, enum.Enum):
    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"


class ResendOutcome(str, enum.Enum):
    SENT = "sent"
    ALREADY_VERIFIED = "already_verified"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VerificationLink:
    user_id: uuid.UUID
    hash: str
    expires: int
    signature: str
    url: str


def verification_path(user_id: uuid.UUID, hash_value: str) -> str:
    return f"{settings.API_PREFIX}/email/verify/{user_id}/{hash_value}"


class VerificationService:
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build_link(self, user: User) -> VerificationLink:
        expires_at = self.clock() + timedelta(minutes=settings.VERIFICATION_LINK_EXPIRE_MINUTES)
        hash_value = email_hash(user.email)
        path = verification_path(user.id, hash_value)
        params = sign_path(path, expires_at)

        return VerificationLink(
            user_id=user.id,
            hash=hash_value,
            expires=params["expires"],
            signature=params["signature"],
            url=signed_url(path, expires_at),
        )

    def send_verification(self, user: User) -> bool:
        """
        Queue the verification email.

        Fire-and-forget: a queueing failure is logged and reported as False;
        the user can ask for another link later.
        """
        link = self.build_link(user)
        queued = queue_task_safely(
            send_verification_email_task,
            to_email=user.email,
            verification_url=link.url,
            user_name=user.name,
        )
        if queued:
            logger.info(f"Verification email queued for {user.email}")
        else:
            logger.error(f"Failed to queue verification email for {user.email}")
        return queued

    def verify(self, user_id: uuid.UUID, hash_value: str) -> VerificationOutcome:
        """
        Mark the user's email verified if the link matches them.

        Signature and expiry are checked by the route before this is called.

        Raises:
            InvalidLinkError: Unknown user or hash not matching their email
        """
        try:
            user = user_crud.get_user_by_id(self.db, user_id)
        except UserNotFoundError:
            raise InvalidLinkError()

        if not hmac.compare_digest(email_hash(user.email), hash_value):
            raise InvalidLinkError()

        if not user_crud.mark_email_verified(self.db, user, self.clock()):
            return VerificationOutcome.ALREADY_VERIFIED

        logger.info(f"User {user.email} verified their email")
        return VerificationOutcome.VERIFIED

    def resend(self, email: str) -> ResendOutcome:
        user = user_crud.get_user_by_email(self.db, email)
        if user is None:
            logger.info(f"Verification resend requested for unknown email: {email}")
            return ResendOutcome.UNKNOWN

        if user.is_verified:
            return ResendOutcome.ALREADY_VERIFIED

        self.send_verification(user)
        return ResendOutcome.SENT
