"""
Bearer token issuance, resolution and revocation.

Tokens are opaque "<id>|<secret>" strings. The secret is disclosed once, at
issuance; only its SHA-256 digest is stored. Resolution does not check
expiry: an expired token still resolves so that the request guards can
reject it as expired rather than as unknown. Only live tokens get their
last_used_at stamped.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session

from authflow.core.config import settings
from authflow.core.exceptions import InvalidTokenError
from authflow.core.security import (
    format_plaintext_token,
    generate_token_secret,
    hash_token_secret,
    split_plaintext_token,
    token_hashes_match,
)
from authflow.models.access_token import PersonalAccessToken
from authflow.models.user import User

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IssuedToken:
    token_id: int
    plaintext: str
    expires_at: Optional[datetime]


@dataclass(frozen=True)
class Principal:
    """The authenticated user together with the token presented on this request."""
    user: User
    token: PersonalAccessToken


class TokenIssuer:
    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    @property
    def default_ttl(self) -> timedelta:
        return timedelta(minutes=settings.TOKEN_TTL_MINUTES)

    def issue(
        self,
        user: User,
        abilities: Iterable[str] = ("*",),
        ttl: Optional[timedelta] = None,
        name: Optional[str] = None,
    ) -> IssuedToken:
        now = self.clock()
        secret = generate_token_secret()
        token = PersonalAccessToken(
            user_id=user.id,
            name=name or settings.TOKEN_NAME,
            token_hash=hash_token_secret(secret),
            abilities=list(abilities),
            expires_at=now + (ttl if ttl is not None else self.default_ttl),
            created_at=now,
        )
        self.db.add(token)
        self.db.commit()
        self.db.refresh(token)

        logger.info(f"Issued token {token.id} for user {user.id} (expires {token.expires_at})")
        return IssuedToken(
            token_id=token.id,
            plaintext=format_plaintext_token(token.id, secret),
            expires_at=token.expires_at,
        )

    def revoke_all(self, user: User) -> int:
        revoked = (
            self.db.query(PersonalAccessToken)
            .filter(PersonalAccessToken.user_id == user.id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if revoked:
            logger.info(f"Revoked {revoked} token(s) for user {user.id}")
        return revoked

    def revoke(self, token: PersonalAccessToken) -> None:
        token_id = token.id
        self.db.delete(token)
        self.db.commit()
        logger.info(f"Revoked token {token_id}")

    def resolve(self, plaintext: str) -> Principal:
        """
        Look up the token a client presented.

        Raises:
            InvalidTokenError: Malformed, unknown or revoked token
        """
        token = self._find(plaintext)
        if token is None or token.user is None:
            raise InvalidTokenError()

        now = self.clock()
        if not token.is_expired(now):
            token.last_used_at = now
            self.db.commit()
        return Principal(user=token.user, token=token)

    def is_expired(self, token: PersonalAccessToken) -> bool:
        return token.is_expired(self.clock())

    def _find(self, plaintext: str) -> Optional[PersonalAccessToken]:
        if not plaintext:
            return None

        token_id, secret = split_plaintext_token(plaintext)
        if not secret:
            return None

        if token_id is None:
            return (
                self.db.query(PersonalAccessToken)
                .filter(PersonalAccessToken.token_hash == hash_token_secret(secret))
                .first()
            )

        token = self.db.query(PersonalAccessToken).filter(PersonalAccessToken.id == token_id).first()
        if token is None or not token_hashes_match(secret, token.token_hash):
            return None
        return token
