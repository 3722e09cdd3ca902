"""
Authentication endpoints.

- POST /register: Create an unverified account and send the verification link
- POST /login: Exchange verified credentials for a one-hour bearer token
- POST /refresh: Replace the presented token with a fresh one
- GET /me: Current user profile
- POST /logout: Revoke the presented token
"""

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from authflow.core.database import get_db
from authflow.core.deps import get_principal, get_current_user
from authflow.models.user import User
from authflow.schemas.auth import LoginResponse, MessageResponse, TokenResponse
from authflow.schemas.user import UserLoginRequest, UserRegisterRequest, UserResponse
from authflow.services.auth_session import AuthSessionService
from authflow.services.token_issuer import Principal

router = APIRouter(tags=["Authentication"])
logger = logging.getLogger(__name__)


def get_auth_service(db: Session = Depends(get_db)) -> AuthSessionService:
    return AuthSessionService(db)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
def register(
    request: UserRegisterRequest,
    service: AuthSessionService = Depends(get_auth_service)
):
    """
    Register a new user account.

    The account starts unverified and no token is returned; a verification
    link is queued for delivery by email.
    """
    service.register(request.name, request.email, request.password)
    return MessageResponse(
        message="Registration successful. Please check your email to verify your account."
    )


@router.post("/login", response_model=LoginResponse)
def login(
    request: UserLoginRequest,
    service: AuthSessionService = Depends(get_auth_service)
):
    """
    Authenticate a verified user.

    Revokes any earlier tokens for the user and returns a new one.
    """
    result = service.login(request.email, request.password)
    return LoginResponse(
        user=UserResponse.model_validate(result.user),
        token=result.token.plaintext,
    )


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    principal: Principal = Depends(get_principal),
    service: AuthSessionService = Depends(get_auth_service)
):
    """Revoke the presented token and issue a new one-hour token."""
    token = service.refresh(principal)
    return TokenResponse(token=token.plaintext)


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(
    current_user: User = Depends(get_current_user)
):
    return current_user


@router.post("/logout", response_model=MessageResponse)
def logout(
    principal: Principal = Depends(get_principal),
    service: AuthSessionService = Depends(get_auth_service)
):
    """Revoke the token used for this request only."""
    service.logout(principal)
    return MessageResponse(message="Logged out")
