"""
Authentication session lifecycle.

States a user-facing session moves through:

    ANONYMOUS --register--> PENDING_VERIFICATION
    PENDING_VERIFICATION --verify link--> AUTHENTICATABLE
    AUTHENTICATABLE --login--> AUTHENTICATED
    AUTHENTICATED --refresh--> AUTHENTICATED (new token, old one revoked)
    AUTHENTICATED --logout | token expiry | client inactivity--> ANONYMOUS

Login is refused for unverified users, and a successful login revokes every
earlier token so that at most one token per user stays active.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from authflow.core.exceptions import EmailNotVerifiedError, InvalidCredentialsError
from authflow.core.security import get_password_hash
from authflow.core.verification import VerificationService
from authflow.crud import user as user_crud
from authflow.models.user import User
from authflow.services.token_issuer import IssuedToken, Principal, TokenIssuer

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    ANONYMOUS = "anonymous"
    PENDING_VERIFICATION = "pending_verification"
    AUTHENTICATABLE = "authenticatable"
    AUTHENTICATED = "authenticated"


def session_state(user: Optional[User], principal: Optional[Principal] = None) -> SessionState:
    """State of a session given the known user and the live principal, if any."""
    if principal is not None:
        return SessionState.AUTHENTICATED
    if user is None:
        return SessionState.ANONYMOUS
    if not user.is_verified:
        return SessionState.PENDING_VERIFICATION
    return SessionState.AUTHENTICATABLE


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: IssuedToken


class AuthSessionService:
    def __init__(
        self,
        db: Session,
        issuer: Optional[TokenIssuer] = None,
        verification: Optional[VerificationService] = None,
    ):
        self.db = db
        self.issuer = issuer or TokenIssuer(db)
        self.verification = verification or VerificationService(db, clock=self.issuer.clock)

    def register(self, name: str, email: str, password: str) -> User:
        """
        Create an unverified user and queue the verification email.

        No token is issued; the user must verify before logging in.

        Raises:
            DuplicateEmailError: Email already registered
        """
        user = user_crud.create_user(
            self.db,
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
        )
        logger.info(f"New user registered: {user.email} ({user.id})")

        self.verification.send_verification(user)
        return user

    def login(self, email: str, password: str) -> LoginResult:
        """
        Raises:
            InvalidCredentialsError: Unknown email or wrong password (same error for both)
            EmailNotVerifiedError: Credentials valid but email not verified
        """
        user = user_crud.get_user_by_email(self.db, email)
        if user is None or not user_crud.verify_user_password(user, password):
            raise InvalidCredentialsError()

        if not user.is_verified:
            self._end_partial_session(user)
            logger.info(f"Login refused for unverified user {user.email}")
            raise EmailNotVerifiedError()

        self.issuer.revoke_all(user)
        token = self.issuer.issue(user)

        logger.info(f"User logged in: {user.email}")
        return LoginResult(user=user, token=token)

    def logout(self, principal: Principal) -> None:
        """Revoke only the token presented on this request."""
        self.issuer.revoke(principal.token)
        logger.info(f"User logged out: {principal.user.email}")

    def refresh(self, principal: Principal) -> IssuedToken:
        """Swap the presented token for a fresh one with a full TTL."""
        self.issuer.revoke(principal.token)
        token = self.issuer.issue(principal.user)
        logger.info(f"Token refreshed for {principal.user.email}")
        return token

    def _end_partial_session(self, user: User) -> None:
        # Token-based login never opens a session before the verification
        # check, so there is nothing to tear down; existing tokens are kept.
        logger.debug(f"No partial session to end for {user.email}")
