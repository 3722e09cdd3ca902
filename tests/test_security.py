"""
Unit tests for password hashing and token secret helpers.
"""

import hashlib

from authflow.core.security import (
    email_hash,
    format_plaintext_token,
    generate_token_secret,
    get_password_hash,
    hash_token_secret,
    split_plaintext_token,
    token_hashes_match,
    verify_password,
)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = get_password_hash("pw123456")

        assert hashed != "pw123456"
        assert verify_password("pw123456", hashed)
        assert not verify_password("pw1234567", hashed)

    def test_long_passwords_are_truncated_to_72_bytes(self):
        password = "a" * 100
        hashed = get_password_hash(password)

        assert verify_password("a" * 72, hashed)
        assert verify_password(password, hashed)


class TestTokenSecrets:
    def test_secrets_are_random_and_fixed_length(self):
        first, second = generate_token_secret(), generate_token_secret()

        assert len(first) == 40
        assert first != second

    def test_digest(self):
        assert hash_token_secret("abc") == hashlib.sha256(b"abc").hexdigest()
        assert token_hashes_match("abc", hash_token_secret("abc"))
        assert not token_hashes_match("abd", hash_token_secret("abc"))

    def test_format_and_split(self):
        assert split_plaintext_token(format_plaintext_token(7, "s3cret")) == (7, "s3cret")

    def test_split_edge_cases(self):
        assert split_plaintext_token("bare-secret") == (None, "bare-secret")
        assert split_plaintext_token("x|secret") == (None, "")
        assert split_plaintext_token("1|a|b") == (1, "a|b")


def test_email_hash_ignores_case():
    assert email_hash("Alice@Example.com") == email_hash("alice@example.com")
    assert email_hash("alice@example.com") == hashlib.sha1(b"alice@example.com").hexdigest()


class TestLogRedaction:
    def test_plaintext_tokens_are_redacted(self):
        from authflow.core.logging_config import REDACTED, redact_tokens

        text = redact_tokens("issued 12|" + "a" * 40 + " to alice")

        assert "a" * 40 not in text
        assert f"12|{REDACTED}" in text

    def test_bearer_header_is_redacted(self):
        from authflow.core.logging_config import redact_tokens

        assert "s3cret" not in redact_tokens("Authorization: Bearer s3cret")

    def test_filter_rewrites_record(self):
        import logging

        from authflow.core.logging_config import TokenRedactionFilter

        record = logging.LogRecord(
            "authflow", logging.INFO, __file__, 1, "token %s", ("7|" + "b" * 40,), None
        )

        assert TokenRedactionFilter().filter(record) is True
        assert "b" * 40 not in record.getMessage()
