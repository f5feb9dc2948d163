"""
Bearer token tests.

Verifies:
- A freshly issued token decodes to the same user id
- Expired, tampered, foreign-key and claim-less tokens are rejected
- Expiry is TOKEN_LIFETIME_DAYS after issuance
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from laundry_api.errors import InvalidTokenError, TokenExpiredError
from laundry_api.services import token_service


class TestIssueAndDecode:

    def test_round_trip_returns_user_id(self, customer):
        token, _ = token_service.issue_token(customer)
        claims = token_service.decode_token(token)
        assert claims["sub"] == customer.id
        assert claims["email"] == customer.email
        assert claims["role"] == "CUSTOMER"

    def test_expiry_is_seven_days(self, customer):
        issued = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        _, expires_at = token_service.issue_token(customer, now=issued)
        assert expires_at.tzinfo is None
        assert expires_at == datetime(2026, 3, 8, 12, 0)

    def test_lifetime_follows_config(self, app, customer):
        app.config["TOKEN_LIFETIME_DAYS"] = 1
        try:
            issued = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
            _, expires_at = token_service.issue_token(customer, now=issued)
            assert expires_at == datetime(2026, 3, 2, 12, 0)
        finally:
            app.config["TOKEN_LIFETIME_DAYS"] = 7


class TestRejectedTokens:

    def test_expired_token(self, customer):
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        token, _ = token_service.issue_token(customer, now=issued)
        with pytest.raises(TokenExpiredError) as exc:
            token_service.decode_token(token)
        assert exc.value.status_code == 401
        assert exc.value.reason == "token_expired"

    def test_tampered_token(self, customer):
        token, _ = token_service.issue_token(customer)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(InvalidTokenError):
            token_service.decode_token(tampered)

    def test_token_signed_with_other_key(self, customer):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": str(customer.id), "iat": int(now.timestamp()),
             "exp": int((now + timedelta(days=1)).timestamp())},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            token_service.decode_token(token)

    def test_missing_subject(self, app):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": int(now.timestamp()), "exp": int((now + timedelta(days=1)).timestamp())},
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            token_service.decode_token(token)

    def test_non_numeric_subject(self, app):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "not-a-user", "iat": int(now.timestamp()),
             "exp": int((now + timedelta(days=1)).timestamp())},
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            token_service.decode_token(token)

    def test_garbage(self, app):
        with pytest.raises(InvalidTokenError) as exc:
            token_service.decode_token("definitely.not.a-jwt")
        assert exc.value.reason == "invalid_token"
