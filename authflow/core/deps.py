"""
FastAPI dependencies for bearer authentication.

The resolved Principal (user + presented token) is returned to the route and
passed explicitly into the services; nothing reads an ambient "current token".
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from authflow.core.database import get_db
from authflow.core.guards import DEFAULT_GUARDS, GuardRequest, raise_for_rejection, run_guards
from authflow.models.user import User
from authflow.services.token_issuer import Principal, TokenIssuer

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme (Authorization: Bearer <token>); missing header is
# handled by the guards so every failure gets the same JSON error shape.
security = HTTPBearer(auto_error=False)


def get_token_issuer(db: Session = Depends(get_db)) -> TokenIssuer:
    return TokenIssuer(db)


def get_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Principal:
    """
    Resolve the bearer token and run the guard chain.

    Raises:
        InvalidTokenError 401: Token malformed, unknown or revoked
        TokenExpiredError 401: Token past its expiry
        UnauthenticatedError 401: No bearer token
    """
    principal = None
    if credentials is not None:
        principal = issuer.resolve(credentials.credentials)

    result = run_guards(
        DEFAULT_GUARDS,
        GuardRequest(path=request.url.path, now=issuer.clock()),
        principal,
    )
    if not result.allowed:
        logger.info(f"Rejected {request.url.path}: {result.reason.value}")
    raise_for_rejection(result)
    return principal


def get_current_user(principal: Principal = Depends(get_principal)) -> User:
    return principal.user
