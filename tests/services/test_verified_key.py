"""
Unit tests for signed blob key tokens.
"""
from datetime import datetime, timezone

import jwt

from app.config import settings
from app.services.verified_key import decode_key, encode_key


class TestVerifiedKey:
    """Test suite for encode_key() / decode_key()."""

    def test_round_trip_with_expiry(self):
        before = int(datetime.now(timezone.utc).timestamp())

        payload = decode_key(encode_key("abc123", expires_in=60))

        assert payload["key"] == "abc123"
        assert before + 60 <= payload["exp"] <= before + 61

    def test_token_without_expiry_does_not_expire(self):
        payload = decode_key(encode_key("abc123"))

        assert payload["key"] == "abc123"
        assert "exp" not in payload

    def test_expired_token_is_rejected(self):
        token = encode_key("abc123", expires_in=-10)

        assert decode_key(token) is None

    def test_tampered_token_is_rejected(self):
        token = encode_key("abc123", expires_in=60)
        header, body, signature = token.split(".")
        forged_body = jwt.utils.base64url_encode(b'{"key":"other","pur":"blob_key"}').decode()

        assert decode_key(f"{header}.{forged_body}.{signature}") is None

    def test_token_signed_with_other_secret_is_rejected(self):
        token = jwt.encode(
            {"key": "abc123", "pur": "blob_key"},
            "not-the-storage-secret-key-0123456789",
            algorithm=settings.STORAGE_TOKEN_ALGORITHM,
        )

        assert decode_key(token) is None

    def test_purpose_must_match(self):
        token = encode_key("abc123", expires_in=60, purpose="blob_upload")

        assert decode_key(token) is None
        assert decode_key(token, purpose="blob_upload")["key"] == "abc123"

    def test_extra_claims_are_carried(self):
        token = encode_key("abc123", purpose="blob_upload", content_type="text/plain")

        assert decode_key(token, purpose="blob_upload")["content_type"] == "text/plain"
