"""
Email verification endpoints.

- GET /email/verify/{id}/{hash}: Signed link from the verification email
- POST /email/verification-notification: Send a new verification link
"""

import logging
import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from authflow.core.database import get_db
from authflow.core.rate_limiter import throttle_verification_resend
from authflow.core.signed_urls import require_signed_request
from authflow.core.verification import ResendOutcome, VerificationOutcome, VerificationService
from authflow.schemas.auth import MessageResponse, ResendVerificationRequest

router = APIRouter(prefix="/email", tags=["Email Verification"])
logger = logging.getLogger(__name__)

VERIFIED_MESSAGE = "Email verified successfully. You can now log in."
ALREADY_VERIFIED_MESSAGE = "Your email address is already verified."
# Returned for unknown and for unverified accounts alike
GENERIC_RESEND_MESSAGE = "If your account exists, a new verification link has been sent."


def get_verification_service(db: Session = Depends(get_db)) -> VerificationService:
    return VerificationService(db)


@router.get(
    "/verify/{user_id}/{hash_value}",
    response_model=MessageResponse,
    dependencies=[Depends(require_signed_request)],
)
def verify_email(
    user_id: uuid.UUID,
    hash_value: str,
    service: VerificationService = Depends(get_verification_service)
):
    """
    Verify the user's email from a signed link.

    Replaying a link after verification is harmless and reports that the
    address is already verified.
    """
    outcome = service.verify(user_id, hash_value)
    if outcome == VerificationOutcome.ALREADY_VERIFIED:
        return MessageResponse(message=ALREADY_VERIFIED_MESSAGE)
    return MessageResponse(message=VERIFIED_MESSAGE)


@router.post(
    "/verification-notification",
    response_model=MessageResponse,
    dependencies=[Depends(throttle_verification_resend)],
)
def resend_verification(
    request: ResendVerificationRequest,
    service: VerificationService = Depends(get_verification_service)
):
    """
    Send a fresh verification link.

    Does not reveal whether an account exists, except that an already
    verified address is told so.
    """
    outcome = service.resend(request.email)
    if outcome == ResendOutcome.ALREADY_VERIFIED:
        return MessageResponse(message=ALREADY_VERIFIED_MESSAGE)
    return MessageResponse(message=GENERIC_RESEND_MESSAGE)
