"""
Security Utility Tests
"""

from datetime import timedelta


class TestAccessTokens:
    """Tests for JWT encode/decode."""

    def test_decode_returns_subject(self):
        from app.core.security import create_access_token, decode_access_token

        payload = decode_access_token(create_access_token("admin-1"))

        assert payload["sub"] == "admin-1"

    def test_expired_token_is_rejected(self):
        from app.core.security import create_access_token, decode_access_token

        token = create_access_token("admin-1", expires_delta=timedelta(seconds=-10))

        assert decode_access_token(token) is None

    def test_garbage_is_rejected(self):
        from app.core.security import decode_access_token

        assert decode_access_token("not-a-jwt") is None


class TestTokenSubject:
    def test_valid_token(self):
        from app.core.security import create_access_token, token_subject

        assert token_subject(create_access_token("admin-1")) == "admin-1"

    def test_missing_token(self):
        from app.core.security import token_subject

        assert token_subject(None) is None
        assert token_subject("") is None
