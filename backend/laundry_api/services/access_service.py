# Overview: Service-layer operations for authentication and authorization of API callers.

"""
Session & Access Control

Every protected request goes through two steps before any handler logic:

    principal = authenticate(request.headers.get("Authorization"))
    authorize(principal, {UserRole.ADMIN}, AccessOptions(require_tenant=True))

and handlers that load a specific resource add one of:

    authorize_ownership(principal, order.customer_id, order.laundry_id)
    authorize_tenant_access(principal, laundry.id)

RULES:
1. The principal is rebuilt from the users table on every request. Role,
   laundry association and suspension come from the live row, not from the
   token, so a role change or suspension applies on the next request.
2. SUPER_ADMIN bypasses the role allow-list unless allow_elevated=False.
3. ADMIN acts only inside its own laundry; SUPER_ADMIN is exempt.
4. CUSTOMER owns only rows whose owner id equals its own id.
5. Every failure raises; nothing here returns a partial result.

Nothing in this module writes to the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from flask import current_app

from ..errors import (
    AccountSuspended,
    Forbidden,
    NotFound,
    Unauthenticated,
    UserNotFound,
)
from ..extensions import db
from ..models import Laundry, Order, User, UserRole
from . import token_service


@dataclass(frozen=True)
class Principal:
    """The authenticated caller for one request. Never cached across requests."""
    id: int
    email: str
    name: str
    role: UserRole
    laundry_id: int | None = None
    is_suspended: bool = False
    suspension_reason: str | None = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name or "",
            role=user.role,
            laundry_id=user.laundry_id,
            is_suspended=user.is_suspended,
            suspension_reason=user.suspension_reason,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "laundry_id": self.laundry_id,
            "is_suspended": self.is_suspended,
            "suspension_reason": self.suspension_reason,
        }


@dataclass(frozen=True)
class AccessOptions:
    """
    Per-route authorization flags.

    require_tenant: an ADMIN must be bound to a laundry.
    allow_elevated: SUPER_ADMIN passes regardless of the allow-list.
    """
    require_tenant: bool = False
    allow_elevated: bool = True


DEFAULT_OPTIONS = AccessOptions()


def _deny_auth(reason: str, message: str, exc_class=Unauthenticated):
    current_app.logger.info("Authentication failed: %s", reason)
    return exc_class(message, reason=reason)


def _deny(principal: Principal, reason: str, message: str, exc_class=Forbidden):
    current_app.logger.warning(
        "Access denied for user %s (%s): %s", principal.id, principal.role.value, reason
    )
    return exc_class(message, reason=reason)


def extract_bearer_token(authorization_header: str | None) -> str:
    """
    Pull the token out of an Authorization header value.

    A missing header and a malformed one raise with different reason codes
    so the logs tell them apart; both map to 401.
    """
    if not authorization_header:
        raise _deny_auth("missing_credential", "Authorization header required")

    scheme, _, token = authorization_header.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise _deny_auth("malformed_credential", "Authentication token required")

    return token


def authenticate(authorization_header: str | None) -> Principal:
    """
    Resolve the calling principal from an Authorization header.

    Raises:
        Unauthenticated: missing/malformed header, bad or expired token,
            user no longer exists
        AccountSuspended: user is suspended (carries the suspension reason)
    """
    token = extract_bearer_token(authorization_header)

    try:
        claims = token_service.decode_token(token)
    except Unauthenticated as exc:
        current_app.logger.info("Authentication failed: %s", exc.reason)
        raise

    user = db.session.get(User, claims["sub"])
    if user is None:
        raise _deny_auth("user_not_found", "User not found", UserNotFound)

    if user.is_suspended:
        current_app.logger.info("Authentication failed: account_suspended (user %s)", user.id)
        raise AccountSuspended(user.suspension_reason)

    return Principal.from_user(user)


def authorize(
    principal: Principal,
    allowed_roles: Iterable[UserRole],
    options: AccessOptions = DEFAULT_OPTIONS,
) -> Principal:
    """
    Gate on role.

    Every rule in the API is expressed as (allowed_roles, options). Returns
    the principal unchanged so calls can be chained.
    """
    if options.allow_elevated and principal.is_super_admin:
        return principal

    if principal.role not in set(allowed_roles):
        raise _deny(principal, "role_not_allowed", "Insufficient permissions")

    if options.require_tenant and principal.role == UserRole.ADMIN and principal.laundry_id is None:
        raise _deny(principal, "tenant_required", "Admin must be associated with a laundry")

    return principal


def authorize_ownership(principal: Principal, owner_id: int, tenant_id: int | None = None) -> None:
    """
    Check access to a resource with a single owning user.

    CUSTOMER must be the owner. ADMIN gets in through tenant scoping only:
    the resource's laundry must be the admin's laundry, even though the admin
    outranks the customer.
    """
    if principal.is_super_admin:
        return

    if principal.role == UserRole.CUSTOMER:
        if principal.id != owner_id:
            raise _deny(principal, "not_owner", "Access denied: You can only access your own resources")
        return

    if principal.role == UserRole.ADMIN:
        if principal.laundry_id is None or tenant_id != principal.laundry_id:
            raise _deny(principal, "cross_tenant", "Access denied: Resource not associated with your laundry")
        return

    raise _deny(principal, "role_not_allowed", "Insufficient permissions")


def authorize_tenant_access(principal: Principal, tenant_id: int) -> None:
    """SUPER_ADMIN always; ADMIN only for its own laundry; nobody else."""
    if principal.is_super_admin:
        return

    if principal.role == UserRole.ADMIN and principal.laundry_id is not None \
            and principal.laundry_id == tenant_id:
        return

    raise _deny(principal, "cross_tenant", "Access denied: You can only access your own laundry")


def require_order_access(principal: Principal, order_id: int) -> Order:
    """Load an order and check the principal may see it (404 before 403)."""
    if not principal.is_super_admin:
        authorize(principal, {UserRole.CUSTOMER, UserRole.ADMIN})

    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")

    authorize_ownership(principal, order.customer_id, order.laundry_id)
    return order


def require_laundry(principal: Principal, laundry_id: int) -> Laundry:
    """Load a laundry and check tenant access."""
    authorize(principal, {UserRole.ADMIN})

    laundry = db.session.get(Laundry, laundry_id)
    if laundry is None:
        raise NotFound("Laundry not found")

    authorize_tenant_access(principal, laundry.id)
    return laundry
