"""
Tests for email verification.

Tests:
- Signed link verification, replay, tampering and expiry
- Resend-verification responses for unknown, unverified and verified emails
- VerificationService outcomes
- The Celery email task and the SES email service
"""

from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit

import pytest
from botocore.exceptions import ClientError

from authflow.api.endpoints.verification import (
    ALREADY_VERIFIED_MESSAGE,
    GENERIC_RESEND_MESSAGE,
    VERIFIED_MESSAGE,
)
from authflow.core.exceptions import InvalidLinkError
from authflow.core.signed_urls import has_valid_signature, sign_path
from authflow.core.verification import (
    ResendOutcome,
    VerificationOutcome,
    VerificationService,
    verification_path,
)


def relative(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.path}?{parts.query}"


class TestVerifyLink:
    def test_valid_link_verifies_user(self, client, db_session, make_user):
        user = make_user(verified=False)
        link = VerificationService(db_session).build_link(user)

        response = client.get(relative(link.url))

        assert response.status_code == 200
        assert response.json()["message"] == VERIFIED_MESSAGE
        db_session.refresh(user)
        assert user.email_verified_at is not None

    def test_replayed_link_reports_already_verified(self, client, db_session, make_user):
        user = make_user(verified=False)
        link = VerificationService(db_session).build_link(user)

        client.get(relative(link.url))
        db_session.refresh(user)
        first_verified_at = user.email_verified_at

        response = client.get(relative(link.url))

        assert response.status_code == 200
        assert response.json()["message"] == ALREADY_VERIFIED_MESSAGE
        db_session.refresh(user)
        assert user.email_verified_at == first_verified_at

    def test_tampered_signature_rejected(self, client, db_session, make_user):
        user = make_user(verified=False)
        link = VerificationService(db_session).build_link(user)
        path = verification_path(user.id, link.hash)

        response = client.get(f"{path}?expires={link.expires}&signature={'0' * 64}")

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidLinkError"
        db_session.refresh(user)
        assert user.email_verified_at is None

    def test_missing_signature_rejected(self, client, db_session, make_user):
        user = make_user(verified=False)
        link = VerificationService(db_session).build_link(user)

        response = client.get(verification_path(user.id, link.hash))

        assert response.status_code == 400

    def test_expired_link_rejected(self, client, db_session, make_user):
        user = make_user(verified=False)
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        link = VerificationService(db_session, clock=lambda: past).build_link(user)

        response = client.get(relative(link.url))

        assert response.status_code == 400

    def test_hash_for_another_email_rejected(self, client, db_session, make_user):
        user = make_user(verified=False)
        path = verification_path(user.id, "0" * 40)
        params = sign_path(path, datetime.now(timezone.utc) + timedelta(minutes=10))

        response = client.get(path, params=params)

        assert response.status_code == 400
        db_session.refresh(user)
        assert user.email_verified_at is None

    def test_verification_does_not_log_in(self, client, db_session, make_user):
        from authflow.models.access_token import PersonalAccessToken

        user = make_user(verified=False)
        link = VerificationService(db_session).build_link(user)

        response = client.get(relative(link.url))

        assert "token" not in response.json()
        assert db_session.query(PersonalAccessToken).count() == 0


class TestResendVerification:
    def test_unknown_email_gets_generic_message(self, client, queued_emails):
        response = client.post(
            "/api/email/verification-notification",
            json={"email": "ghost@example.com"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == GENERIC_RESEND_MESSAGE
        assert queued_emails == []

    def test_unverified_email_gets_same_generic_message(self, client, make_user, queued_emails):
        make_user(email="pending@example.com", verified=False)

        response = client.post(
            "/api/email/verification-notification",
            json={"email": "pending@example.com"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == GENERIC_RESEND_MESSAGE
        assert len(queued_emails) == 1

    def test_verified_email_gets_distinct_message(self, client, make_user, queued_emails):
        make_user(email="done@example.com", verified=True)

        verified = client.post(
            "/api/email/verification-notification",
            json={"email": "done@example.com"},
        )
        unknown = client.post(
            "/api/email/verification-notification",
            json={"email": "ghost@example.com"},
        )

        assert verified.status_code == unknown.status_code == 200
        assert verified.json()["message"] == ALREADY_VERIFIED_MESSAGE
        assert verified.json()["message"] != unknown.json()["message"]
        assert queued_emails == []


class TestVerificationService:
    def test_verify_outcomes(self, db_session, make_user):
        user = make_user(verified=False)
        service = VerificationService(db_session)
        link = service.build_link(user)

        assert service.verify(user.id, link.hash) == VerificationOutcome.VERIFIED
        assert service.verify(user.id, link.hash) == VerificationOutcome.ALREADY_VERIFIED

    def test_verify_unknown_user(self, db_session):
        import uuid

        with pytest.raises(InvalidLinkError):
            VerificationService(db_session).verify(uuid.uuid4(), "0" * 40)

    def test_resend_outcomes(self, db_session, make_user):
        make_user(email="pending@example.com", verified=False)
        make_user(email="done@example.com", verified=True)
        service = VerificationService(db_session)

        assert service.resend("ghost@example.com") == ResendOutcome.UNKNOWN
        assert service.resend("pending@example.com") == ResendOutcome.SENT
        assert service.resend("done@example.com") == ResendOutcome.ALREADY_VERIFIED

    def test_link_signature_round_trip(self, db_session, make_user):
        user = make_user(verified=False)
        link = VerificationService(db_session).build_link(user)
        path = verification_path(user.id, link.hash)

        assert has_valid_signature(path, str(link.expires), link.signature)
        assert not has_valid_signature(path + "x", str(link.expires), link.signature)
        assert not has_valid_signature(path, str(link.expires + 1), link.signature)
        assert not has_valid_signature(
            path,
            str(link.expires),
            link.signature,
            now=datetime.fromtimestamp(link.expires + 1, tz=timezone.utc),
        )


class TestEmailDelivery:
    def test_task_sends_link(self, monkeypatch):
        from authflow.tasks.email_tasks import send_verification_email_task

        sent = []

        def fake_send(to_email, verification_url, user_name=None):
            sent.append((to_email, verification_url, user_name))
            return True

        monkeypatch.setattr(
            "authflow.tasks.email_tasks.email_service.send_verification_email",
            fake_send,
        )

        result = send_verification_email_task(
            to_email="a@x.com",
            verification_url="http://localhost:8000/api/email/verify/1/abc?expires=1&signature=s",
            user_name="Alice",
        )

        assert result == {"status": "success", "email": "a@x.com"}
        assert sent[0][0] == "a@x.com"

    def test_task_raises_when_delivery_fails(self, monkeypatch):
        from authflow.tasks.email_tasks import EmailDeliveryError, send_verification_email_task

        monkeypatch.setattr(
            "authflow.tasks.email_tasks.email_service.send_verification_email",
            lambda **kwargs: False,
        )

        with pytest.raises(EmailDeliveryError):
            send_verification_email_task(to_email="a@x.com", verification_url="http://x")

    def test_email_service_builds_ses_message(self):
        from authflow.services.email_service import EmailService

        calls = []

        class FakeSes:
            def send_email(self, **kwargs):
                calls.append(kwargs)
                return {"MessageId": "msg-1"}

        service = EmailService()
        service.ses_client = FakeSes()

        assert service.send_verification_email("a@x.com", "http://link/verify?x=1", "Alice")
        message = calls[0]["Message"]
        assert calls[0]["Destination"] == {"ToAddresses": ["a@x.com"]}
        assert "http://link/verify?x=1" in message["Body"]["Text"]["Data"]
        assert "Hello Alice," in message["Body"]["Html"]["Data"]

    def test_email_service_reports_ses_rejection(self):
        from authflow.services.email_service import EmailService

        class RejectingSes:
            def send_email(self, **kwargs):
                raise ClientError(
                    {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified."}},
                    "SendEmail",
                )

        service = EmailService()
        service.ses_client = RejectingSes()

        assert service.send_verification_email("a@x.com", "http://link") is False


class TestQueueing:
    class FakeTask:
        name = "fake_task"

        def __init__(self, error=None):
            self.error = error
            self.calls = []

        def apply_async(self, args, kwargs, **options):
            self.calls.append(kwargs)
            if self.error is not None:
                raise self.error

            class Result:
                id = "task-1"
            return Result()

    def test_queued(self):
        from authflow.core.celery_utils import queue_task_safely

        task = self.FakeTask()

        assert queue_task_safely(task, to_email="a@x.com") is True
        assert task.calls == [{"to_email": "a@x.com"}]

    def test_broker_failure_is_reported_not_raised(self):
        from authflow.core.celery_utils import queue_task_safely

        task = self.FakeTask(error=ConnectionError("broker down"))

        assert queue_task_safely(task, to_email="a@x.com") is False

