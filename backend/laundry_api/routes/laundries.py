# Overview: Flask API routes for laundry tenants; admin view and super-admin administration.

# backend/laundry_api/routes/laundries.py
"""
Laundry routes

- GET  /api/admin/laundries/<id>                      own laundry (ADMIN) or any (SUPER_ADMIN)
- POST /api/super-admin/laundries/<id>/suspend        SUPER_ADMIN
- POST /api/super-admin/laundries/<id>/reactivate     SUPER_ADMIN
- GET  /api/super-admin/laundries/<id>/activity       SUPER_ADMIN, paginated feed
"""

from flask import Blueprint, request, g, current_app

from ..errors import ApiError
from ..extensions import db
from ..models import Order, UserRole
from ..responses import api_error_response, error_response, success_response
from ..services import access_service, order_query_service, suspension_service
from ..services.order_lifecycle_service import ACTIVE_STATUSES
from ..decorators import require_auth, require_role
from ..validation import parse_bool, parse_pagination, parse_string, require_json


admin_laundries_bp = Blueprint("admin_laundries", __name__, url_prefix="/api/admin/laundries")
super_admin_laundries_bp = Blueprint(
    "super_admin_laundries", __name__, url_prefix="/api/super-admin/laundries"
)


@admin_laundries_bp.get("/<int:laundry_id>")
@require_auth
@require_role(UserRole.ADMIN, require_tenant=True)
def get_laundry_route(laundry_id: int):
    try:
        laundry = access_service.require_laundry(g.principal, laundry_id)

        active_orders = db.session.query(Order).filter(
            Order.laundry_id == laundry.id,
            Order.status.in_(list(ACTIVE_STATUSES)),
        ).count()

        data = laundry.to_dict()
        data["active_orders"] = active_orders
        return success_response(data, "Laundry retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to retrieve laundry")
        return error_response("Failed to retrieve laundry", 500)


@super_admin_laundries_bp.post("/<int:laundry_id>/suspend")
@require_auth
@require_role(UserRole.SUPER_ADMIN)
def suspend_laundry_route(laundry_id: int):
    """
    Suspend a laundry.

    Body:
        {"reason": "at least 10 characters", "suspendAdmin": false, "additionalNotes": "..."}

    PENDING and CONFIRMED orders are cancelled in the same transaction.
    """
    try:
        data = require_json(request.get_json(silent=True))
        result = suspension_service.suspend_laundry(
            laundry_id,
            parse_string(data.get("reason"), "reason"),
            actor=g.principal,
            suspend_admin=parse_bool(data.get("suspendAdmin"), "suspendAdmin"),
            notes=parse_string(data.get("additionalNotes"), "additionalNotes"),
        )
        return success_response(result, "Laundry suspended successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to suspend laundry")
        return error_response("Failed to suspend laundry", 500)


@super_admin_laundries_bp.post("/<int:laundry_id>/reactivate")
@require_auth
@require_role(UserRole.SUPER_ADMIN)
def reactivate_laundry_route(laundry_id: int):
    try:
        laundry = suspension_service.reactivate_laundry(laundry_id, actor=g.principal)
        return success_response(laundry.to_dict(), "Laundry reactivated successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to reactivate laundry")
        return error_response("Failed to reactivate laundry", 500)


@super_admin_laundries_bp.get("/<int:laundry_id>/activity")
@require_auth
@require_role(UserRole.SUPER_ADMIN)
def laundry_activity_route(laundry_id: int):
    """Recent activity of one laundry and its orders, newest first."""
    try:
        page, limit = parse_pagination(request.args)
        result = order_query_service.list_laundry_activity(laundry_id, page=page, limit=limit)
        return success_response(result, "Laundry activity retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to retrieve laundry activity")
        return error_response("Failed to retrieve laundry activity", 500)
