"""
Celery tasks package.

- email_tasks: verification email delivery
"""

from authflow.tasks import email_tasks

__all__ = ["email_tasks"]
