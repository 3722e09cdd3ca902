"""
Pydantic schemas for registration, login and user profiles.
"""

from pydantic import BaseModel, EmailStr, Field, UUID4, ValidationInfo, field_validator
from typing import Optional
from datetime import datetime

MAX_FIELD_LENGTH = 255
MIN_PASSWORD_LENGTH = 8


class UserRegisterRequest(BaseModel):
    """Request schema for user registration."""
    name: str = Field(..., max_length=MAX_FIELD_LENGTH)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    password_confirmation: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('The name field is required.')
        return v

    @field_validator('email')
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        if len(v) > MAX_FIELD_LENGTH:
            raise ValueError(f'The email must not be greater than {MAX_FIELD_LENGTH} characters.')
        return v

    @field_validator('password_confirmation')
    @classmethod
    def validate_confirmation(cls, v: str, info: ValidationInfo) -> str:
        """Confirmation must equal the password exactly."""
        password = info.data.get('password')
        if password is not None and v != password:
            raise ValueError('The password field confirmation does not match.')
        return v


class UserLoginRequest(BaseModel):
    """Request schema for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User profile response (no sensitive data)."""
    id: UUID4
    name: str
    email: str
    email_verified_at: Optional[datetime]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
