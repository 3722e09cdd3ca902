"""
Database models package.
"""

from authflow.models.user import User
from authflow.models.access_token import PersonalAccessToken

__all__ = ["User", "PersonalAccessToken"]
