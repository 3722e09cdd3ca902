"""
Celery tasks for email operations.

Handles asynchronous verification email sending with retry logic.
"""

import logging
from typing import Optional
from celery import shared_task
from authflow.services.email_service import email_service

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """SES refused or failed to deliver a message."""


@shared_task(
    bind=True,
    name="send_verification_email_task",
    max_retries=3,
    default_retry_delay=60,  # Retry after 60 seconds
    autoretry_for=(EmailDeliveryError,),
    retry_backoff=True,
    retry_backoff_max=600,  # Max 10 minutes between retries
    retry_jitter=True
)
def send_verification_email_task(
    self,
    to_email: str,
    verification_url: str,
    user_name: Optional[str] = None
):
    """
    Send a verification link email.

    Retried up to 3 times with exponential backoff and jitter.
    """
    logger.info(f"Sending verification email to {to_email} (attempt {self.request.retries + 1})")

    success = email_service.send_verification_email(
        to_email=to_email,
        verification_url=verification_url,
        user_name=user_name
    )

    if not success:
        if self.request.retries >= self.max_retries:
            logger.error(f"All retry attempts exhausted for {to_email}")
        raise EmailDeliveryError(f"Failed to send verification email to {to_email}")

    logger.info(f"Verification email sent successfully to {to_email}")
    return {"status": "success", "email": to_email}
