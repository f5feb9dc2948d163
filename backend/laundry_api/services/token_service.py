# Overview: Service-layer operations for bearer tokens; issues and verifies signed JWTs.

"""
Bearer Token Service

Tokens are HS256 JWTs signed with JWT_SECRET_KEY and handed to the client at
sign-in. Nothing is stored server-side: a token is valid while its signature
verifies and its exp claim is in the future.

CLAIMS:
- sub:   user id (string, per RFC 7519)
- email, name, role: snapshot at issuance, informational only
- iat, exp: issued-at and expiry (iat + TOKEN_LIFETIME_DAYS, default 7)

The role claim is never used for authorization. access_service re-reads the
user row on every request so role changes and suspensions apply immediately.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from ..errors import InvalidTokenError, TokenExpiredError
from ..models import User


REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def token_lifetime() -> timedelta:
    return timedelta(days=current_app.config.get("TOKEN_LIFETIME_DAYS", 7))


def _secret() -> str:
    return current_app.config["JWT_SECRET_KEY"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def issue_token(user: User, *, now: datetime | None = None) -> tuple[str, datetime]:
    """
    Sign a token for user.

    Returns (token, expires_at) where expires_at is UTC-naive like every
    other timestamp in the database layer.
    """
    issued_at = now or datetime.now(timezone.utc)
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=timezone.utc)
    expires_at = issued_at + token_lifetime()

    payload = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name or "",
        "role": user.role.value,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(payload, _secret(), algorithm=_algorithm())
    return token, expires_at.replace(tzinfo=None)


def decode_token(token: str) -> dict:
    """
    Verify signature and expiry and return the claims.

    Raises:
        TokenExpiredError: signature valid but exp has passed
        InvalidTokenError: anything else (bad signature, garbage, missing claims)
    """
    try:
        claims = jwt.decode(
            token,
            _secret(),
            algorithms=[_algorithm()],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Invalid or expired token")
    except jwt.InvalidTokenError:
        raise InvalidTokenError("Invalid or expired token")

    try:
        claims["sub"] = int(claims["sub"])
    except (TypeError, ValueError):
        raise InvalidTokenError("Invalid or expired token")

    return claims
