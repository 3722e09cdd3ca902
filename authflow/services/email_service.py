"""
AWS SES email service for verification links.

Handles email formatting and AWS SES delivery.
"""

import logging
from html import escape
from typing import Optional
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from authflow.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Service for sending emails via AWS SES.
    """

    def __init__(self):
        session_kwargs = {
            'region_name': settings.AWS_REGION,
        }

        # Add credentials if provided (otherwise uses IAM role)
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            session_kwargs['aws_access_key_id'] = settings.AWS_ACCESS_KEY_ID
            session_kwargs['aws_secret_access_key'] = settings.AWS_SECRET_ACCESS_KEY

        self.ses_client = boto3.client('ses', **session_kwargs)

    def send_verification_email(
        self,
        to_email: str,
        verification_url: str,
        user_name: Optional[str] = None
    ) -> bool:
        """
        Send the email verification link to a user.

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        subject = f"Verify Email Address - {settings.PROJECT_NAME}"

        html_body = self._build_verification_html(verification_url, user_name)
        text_body = self._build_verification_text(verification_url, user_name)

        try:
            response = self.ses_client.send_email(
                Source=f"{settings.AWS_SES_FROM_NAME} <{settings.AWS_SES_FROM_EMAIL}>",
                Destination={'ToAddresses': [to_email]},
                Message={
                    'Subject': {'Data': subject, 'Charset': 'UTF-8'},
                    'Body': {
                        'Html': {'Data': html_body, 'Charset': 'UTF-8'},
                        'Text': {'Data': text_body, 'Charset': 'UTF-8'}
                    }
                }
            )

            message_id = response.get('MessageId')
            logger.info(f"Verification email sent to {to_email} (MessageId: {message_id})")
            return True

        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            logger.error(f"AWS SES ClientError: {error_code} - {error_message}")

            if error_code == 'MessageRejected':
                logger.error(f"Email rejected: {error_message}")
            elif error_code == 'MailFromDomainNotVerified':
                logger.error("Sender email not verified in SES")

            return False

        except BotoCoreError as e:
            logger.error(f"AWS BotoCoreError: {str(e)}")
            return False

    def _build_verification_html(self, url: str, user_name: Optional[str] = None) -> str:
        greeting = f"Hello {escape(user_name)}," if user_name else "Hello!"
        link = escape(url, quote=True)
        minutes = settings.VERIFICATION_LINK_EXPIRE_MINUTES

        return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Verify Email Address</title>
</head>
<body style="margin: 0; padding: 40px 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; padding: 40px;">
        <h1 style="margin: 0 0 20px 0; color: #333333; font-size: 24px;">Verify Email Address</h1>
        <p style="color: #666666; font-size: 16px; line-height: 1.5;">{greeting}</p>
        <p style="color: #666666; font-size: 16px; line-height: 1.5;">
            Please click the button below to verify your email address.
        </p>
        <p style="text-align: center; margin: 30px 0;">
            <a href="{link}" style="background-color: #4F46E5; color: #ffffff; padding: 12px 24px; border-radius: 6px; text-decoration: none;">
                Verify Email Address
            </a>
        </p>
        <p style="color: #666666; font-size: 14px;">This link will expire in <strong>{minutes} minutes</strong>.</p>
        <p style="color: #999999; font-size: 13px;">If you did not create an account, no further action is required.</p>
    </div>
</body>
</html>
"""

    def _build_verification_text(self, url: str, user_name: Optional[str] = None) -> str:
        greeting = f"Hello {user_name}," if user_name else "Hello!"
        minutes = settings.VERIFICATION_LINK_EXPIRE_MINUTES

        return f"""{greeting}

Please open the link below to verify your email address:

{url}

This link will expire in {minutes} minutes.

If you did not create an account, no further action is required.
"""


# Singleton instance
email_service = EmailService()
