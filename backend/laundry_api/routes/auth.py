# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/laundry_api/routes/auth.py
"""
Authentication API routes

- POST /api/auth/register  self-registration (CUSTOMER or ADMIN)
- POST /api/auth/signin    email + password -> bearer token (7 days)
- GET  /api/auth/session   the current principal, re-read from the database
"""

from flask import Blueprint, request, g, current_app

from ..errors import ApiError
from ..responses import api_error_response, error_response, success_response
from ..services import auth_service, token_service
from ..decorators import require_auth
from ..time_utils import to_utc_z
from ..validation import parse_string, require_json


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    try:
        data = require_json(request.get_json(silent=True))
        user = auth_service.register_user(
            email=parse_string(data.get("email"), "email"),
            password=parse_string(data.get("password"), "password", strip=False),
            name=parse_string(data.get("name"), "name"),
            phone=parse_string(data.get("phone"), "phone", max_length=32),
            role=parse_string(data.get("role"), "role"),
        )
        return success_response(user.to_dict(), "User created successfully", 201)

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to register user")
        return error_response("Internal server error", 500)


@auth_bp.post("/signin")
def signin_route():
    """
    Authenticate with email/password and issue a bearer token.

    The token goes in the Authorization header of every protected request:
        Authorization: Bearer <accessToken>
    """
    data = None
    try:
        data = require_json(request.get_json(silent=True))
        email = parse_string(data.get("email"), "email")
        password = parse_string(data.get("password"), "password", strip=False)

        if not email or not password:
            return error_response("Email and password required", 400)

        user = auth_service.sign_in(email, password)
        token, expires_at = token_service.issue_token(user)

        return success_response({
            "user": {
                "id": user.id,
                "email": user.email,
                "name": user.name,
                "role": user.role.value,
            },
            "accessToken": token,
            "tokenType": "Bearer",
            "expiresIn": f"{token_service.token_lifetime().days}d",
            "expiresAt": to_utc_z(expires_at),
        }, "Login successful")

    except ApiError as e:
        if e.status_code == 401:
            current_app.logger.info("Sign-in failed for %r", (data or {}).get("email"))
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to sign in user")
        return error_response("Internal server error", 500)


@auth_bp.get("/session")
@require_auth
def session_route():
    """Return the caller as the server sees it right now."""
    return success_response({"user": g.principal.to_dict()}, "Session retrieved successfully")
