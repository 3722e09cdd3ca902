"""
CRUD operations package.
"""

from authflow.crud import user

__all__ = ["user"]
