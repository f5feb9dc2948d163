# Overview: Domain error hierarchy shared by services and the HTTP layer.

"""
API error taxonomy.

Every failure the services raise carries the HTTP status it maps to and a
short machine-readable reason code. Routes never build error responses for
these by hand: the handlers registered in create_app() render them into the
standard {success: false, message, ...} envelope.

    Unauthenticated   401  no/invalid/expired credential, user deleted
    Forbidden         403  role, suspension, tenant or ownership violation
    NotFound          404  referenced resource absent
    InvalidTransition 409  illegal order status edge
    Conflict          409  conditional write lost against a concurrent writer
    ValidationError   400  malformed request payload
    ConflictError     409  business duplicate (email taken, already suspended)
"""

from __future__ import annotations


class ApiError(Exception):
    status_code = 500
    reason = "internal_error"

    def __init__(self, message: str, *, reason: str | None = None, errors=None):
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason
        self.errors = errors

    def payload(self) -> dict:
        """Extra envelope fields beyond success/message/errors."""
        return {}


class Unauthenticated(ApiError):
    status_code = 401
    reason = "unauthenticated"


class InvalidTokenError(Unauthenticated):
    reason = "invalid_token"


class TokenExpiredError(Unauthenticated):
    reason = "token_expired"


class UserNotFound(Unauthenticated):
    reason = "user_not_found"


class Forbidden(ApiError):
    status_code = 403
    reason = "forbidden"


class AccountSuspended(Forbidden):
    reason = "account_suspended"

    def __init__(self, suspension_reason: str | None):
        self.suspension_reason = suspension_reason or "Account temporarily suspended"
        super().__init__(f"Account suspended: {self.suspension_reason}")

    def payload(self) -> dict:
        return {"reason": self.suspension_reason}


class NotFound(ApiError):
    status_code = 404
    reason = "not_found"


class InvalidTransition(ApiError):
    status_code = 409
    reason = "invalid_transition"

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Invalid status transition from {current_status} to {requested_status}"
        )

    def payload(self) -> dict:
        return {
            "current_status": self.current_status,
            "requested_status": self.requested_status,
        }


class Conflict(ApiError):
    """The row changed under us; the caller may reload and retry."""
    status_code = 409
    reason = "conflict"


class ValidationError(ApiError):
    status_code = 400
    reason = "validation_error"


class ConflictError(ApiError):
    """409-level business rule conflict (e.g., duplicate email)."""
    status_code = 409
    reason = "duplicate"
