# Overview: Flask API routes for super-admin user administration.

# backend/laundry_api/routes/users.py
"""
Super-admin user administration

- POST  /api/super-admin/users/<id>/suspend     {"reason": "..."}
- POST  /api/super-admin/users/<id>/reinstate
- PATCH /api/super-admin/users/<id>/role        {"role": "ADMIN"}

Changes apply on the target's next request; no token revocation needed.
"""

from flask import Blueprint, request, g, current_app

from ..errors import ApiError
from ..models import UserRole
from ..responses import api_error_response, error_response, success_response
from ..services import auth_service, suspension_service
from ..decorators import require_auth, require_role
from ..validation import parse_string, require_json


super_admin_users_bp = Blueprint("super_admin_users", __name__, url_prefix="/api/super-admin/users")


@super_admin_users_bp.post("/<int:user_id>/suspend")
@require_auth
@require_role(UserRole.SUPER_ADMIN)
def suspend_user_route(user_id: int):
    try:
        data = require_json(request.get_json(silent=True))
        user = suspension_service.suspend_user(
            user_id, parse_string(data.get("reason"), "reason"), actor=g.principal
        )
        return success_response(user.to_dict(), "User suspended successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to suspend user")
        return error_response("Failed to suspend user", 500)


@super_admin_users_bp.post("/<int:user_id>/reinstate")
@require_auth
@require_role(UserRole.SUPER_ADMIN)
def reinstate_user_route(user_id: int):
    try:
        user = suspension_service.reinstate_user(user_id, actor=g.principal)
        return success_response(user.to_dict(), "User reinstated successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to reinstate user")
        return error_response("Failed to reinstate user", 500)


@super_admin_users_bp.patch("/<int:user_id>/role")
@require_auth
@require_role(UserRole.SUPER_ADMIN)
def change_role_route(user_id: int):
    try:
        data = require_json(request.get_json(silent=True))
        role = auth_service.parse_role(parse_string(data.get("role"), "role"))
        user = suspension_service.change_role(user_id, role, actor=g.principal)
        return success_response(user.to_dict(), "User role updated successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to change user role")
        return error_response("Failed to change user role", 500)
