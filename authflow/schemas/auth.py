"""
Pydantic schemas for token and message responses.
"""

from pydantic import BaseModel, EmailStr

from authflow.schemas.user import UserResponse


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    """Login response: the user and a bearer token valid for one hour."""
    user: UserResponse
    token: str


class TokenResponse(BaseModel):
    token: str


class ResendVerificationRequest(BaseModel):
    email: EmailStr
