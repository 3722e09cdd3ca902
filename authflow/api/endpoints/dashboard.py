"""
Example protected route.
"""

from fastapi import APIRouter, Depends

from authflow.core.deps import get_current_user
from authflow.models.user import User
from authflow.schemas.auth import MessageResponse

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard", response_model=MessageResponse)
def dashboard(current_user: User = Depends(get_current_user)):
    return MessageResponse(message="Welcome to the protected dashboard!")
