"""
Security utilities for password hashing and bearer token secrets.

Passwords are hashed using bcrypt. Bearer tokens are opaque random secrets;
only their SHA-256 digest is ever stored.
"""

import hashlib
import hmac
import secrets
from typing import Optional, Tuple

from passlib.context import CryptContext

# Password hashing context (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_SECRET_LENGTH = 40
TOKEN_SEPARATOR = "|"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    # Bcrypt has a 72-byte limit - truncate if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return pwd_context.verify(password_bytes, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Note: Bcrypt has a 72-byte limit. Passwords longer than 72 bytes
    are automatically truncated to comply with this limitation.
    """
    password_bytes = password.encode('utf-8')[:72]
    return pwd_context.hash(password_bytes)


def generate_token_secret() -> str:
    """Random URL-safe secret for a new bearer token."""
    return secrets.token_urlsafe(TOKEN_SECRET_LENGTH)[:TOKEN_SECRET_LENGTH]


def hash_token_secret(secret: str) -> str:
    """SHA-256 hex digest stored in place of the secret."""
    return hashlib.sha256(secret.encode('utf-8')).hexdigest()


def token_hashes_match(secret: str, token_hash: str) -> bool:
    return hmac.compare_digest(hash_token_secret(secret), token_hash)


def format_plaintext_token(token_id: int, secret: str) -> str:
    """Plaintext handed to the client: "<token id>|<secret>"."""
    return f"{token_id}{TOKEN_SEPARATOR}{secret}"


def split_plaintext_token(plaintext: str) -> Tuple[Optional[int], str]:
    """
    Split "<id>|<secret>" into its parts.

    A bare secret (no separator) yields (None, secret). A non-numeric id
    yields (None, "") so that the caller treats it as malformed.
    """
    if TOKEN_SEPARATOR not in plaintext:
        return None, plaintext

    raw_id, secret = plaintext.split(TOKEN_SEPARATOR, 1)
    if not raw_id.isdigit():
        return None, ""
    return int(raw_id), secret


def email_hash(email: str) -> str:
    """Stable per-user value embedded in verification links."""
    return hashlib.sha1(email.lower().encode('utf-8')).hexdigest()
