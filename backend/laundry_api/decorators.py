# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import request, g

from .errors import ApiError
from .models import UserRole
from .responses import api_error_response, error_response
from .services import access_service
from .services.access_service import AccessOptions


def _is_authenticated() -> bool:
    return hasattr(g, 'principal')


def require_auth(f):
    """
    Require a valid bearer token and establish the request principal.

    Sets g.principal to a fresh access_service.Principal built from the live
    users row.

    Returns 401 if:
    - No Authorization header, or not a Bearer header
    - Invalid or expired token
    - User no longer exists

    Returns 403 if the account is suspended (body carries the reason).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            g.principal = access_service.authenticate(request.headers.get("Authorization"))
        except ApiError as e:
            return api_error_response(e)

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: UserRole, require_tenant: bool = False, allow_elevated: bool = True):
    """
    Require the principal's role to be one of roles.

    SUPER_ADMIN passes unless allow_elevated=False. With require_tenant, an
    ADMIN not bound to a laundry is refused. Must be stacked under
    @require_auth.
    """
    options = AccessOptions(require_tenant=require_tenant, allow_elevated=allow_elevated)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return error_response("Authentication required", 401)

            try:
                access_service.authorize(g.principal, roles, options)
            except ApiError as e:
                return api_error_response(e)

            return f(*args, **kwargs)

        return decorated_function
    return decorator
