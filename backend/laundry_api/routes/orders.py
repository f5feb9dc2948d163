# Overview: Flask API routes for orders; parses input and returns JSON responses.

# backend/laundry_api/routes/orders.py
"""
Order API routes

Customer side:
- POST /api/user/orders             place a PENDING order
- GET  /api/user/orders             own orders, paginated (?status=, ?search=)
- GET  /api/user/orders/active      own orders still in progress
- GET  /api/user/orders/history     own delivered, completed, canceled or refunded orders
- GET  /api/user/orders/<id>        own order only

Laundry admin side (SUPER_ADMIN passes everywhere):
- GET   /api/admin/orders          orders of the admin's own laundry, paginated
- GET   /api/admin/orders/<id>      order of the admin's own laundry
- PATCH /api/admin/orders/<id>      status transition and field updates

Platform side:
- GET   /api/super-admin/orders    every laundry's orders (?laundryId= to narrow)

SECURITY:
- The acting user recorded on activity rows is g.principal, never a body field
- Order access is checked after the order is loaded: 404 for a missing
  order, 403 for someone else's
"""

from flask import Blueprint, request, g, current_app

from ..errors import ApiError
from ..extensions import db
from ..models import Activity, UserRole
from ..responses import api_error_response, error_response, success_response
from ..services import access_service, order_lifecycle_service, order_query_service
from ..decorators import require_auth, require_role
from ..validation import (
    parse_amount,
    parse_datetime_field,
    parse_int,
    parse_notes,
    parse_pagination,
    parse_string,
    require_json,
)


user_orders_bp = Blueprint("user_orders", __name__, url_prefix="/api/user/orders")
admin_orders_bp = Blueprint("admin_orders", __name__, url_prefix="/api/admin/orders")
super_admin_orders_bp = Blueprint("super_admin_orders", __name__, url_prefix="/api/super-admin/orders")


def _timeline(order_id: int, limit: int | None = None) -> list[dict]:
    q = db.session.query(Activity).filter_by(order_id=order_id).order_by(
        Activity.created_at.desc(), Activity.id.desc()
    )
    if limit:
        q = q.limit(limit)
    return [a.to_dict() for a in q.all()]


@user_orders_bp.post("")
@require_auth
@require_role(UserRole.CUSTOMER, allow_elevated=False)
def create_order_route():
    """
    Place an order.

    Body:
        {"laundryId": 1, "totalAmount": 120.5, "deliveryFee": 10,
         "discount": 0, "notes": "...", "pickupDate": "...", "deliveryDate": "..."}
    """
    try:
        data = require_json(request.get_json(silent=True))
        if data.get("laundryId") is None:
            return error_response("laundryId is required", 400)

        order = order_lifecycle_service.create_order(
            g.principal,
            parse_int(data.get("laundryId"), "laundryId"),
            total_amount=parse_amount(data.get("totalAmount"), "totalAmount", required=True),
            delivery_fee=parse_amount(data.get("deliveryFee"), "deliveryFee") or 0,
            discount=parse_amount(data.get("discount"), "discount") or 0,
            notes=parse_notes(data.get("notes"), max_length=500),
            pickup_date=parse_datetime_field(data.get("pickupDate"), "pickupDate"),
            delivery_date=parse_datetime_field(data.get("deliveryDate"), "deliveryDate"),
        )
        return success_response(order.to_dict(), "Order created successfully", 201)

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return error_response("Failed to create order", 500)


@user_orders_bp.get("/<int:order_id>")
@require_auth
def get_user_order_route(order_id: int):
    try:
        order = access_service.require_order_access(g.principal, order_id)

        data = order.to_dict()
        data["delivery"] = {
            "can_track": order.status in order_lifecycle_service.ACTIVE_STATUSES,
            "is_completed": order.status.value in ("DELIVERED", "COMPLETED"),
            "is_cancelled": order.status.value == "CANCELED",
        }
        data["timeline"] = _timeline(order.id, limit=10)
        return success_response(data, "Order details retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to retrieve order")
        return error_response("Failed to retrieve order details", 500)


@admin_orders_bp.get("/<int:order_id>")
@require_auth
@require_role(UserRole.ADMIN, require_tenant=True)
def get_admin_order_route(order_id: int):
    try:
        order = access_service.require_order_access(g.principal, order_id)

        data = order.to_dict()
        data["customer"] = {
            "id": order.customer.id,
            "name": order.customer.name,
            "email": order.customer.email,
            "phone": order.customer.phone,
        }
        data["activity_history"] = _timeline(order.id)
        data["actions"] = order_lifecycle_service.describe_actions(order)
        return success_response(data, "Order details retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to retrieve order")
        return error_response("Failed to retrieve order details", 500)


@admin_orders_bp.patch("/<int:order_id>")
@require_auth
@require_role(UserRole.ADMIN, require_tenant=True)
def update_admin_order_route(order_id: int):
    """
    Update an order, moving its status if requested.

    Body (all optional):
        {"status": "CONFIRMED", "expectedStatus": "PENDING",
         "notes": "...", "pickupDate": "...", "deliveryDate": "..."}

    Error responses:
        401: Not authenticated
        403: Not an admin of this order's laundry
        404: Order not found
        409: Illegal transition, or the order changed concurrently
        400: Validation error
    """
    try:
        access_service.require_order_access(g.principal, order_id)

        data = require_json(request.get_json(silent=True))

        order = order_lifecycle_service.transition(
            order_id,
            data.get("status"),
            actor=g.principal,
            notes=parse_notes(data.get("notes")),
            pickup_date=parse_datetime_field(data.get("pickupDate"), "pickupDate"),
            delivery_date=parse_datetime_field(data.get("deliveryDate"), "deliveryDate"),
            expected_status=data.get("expectedStatus"),
        )

        return success_response(order.to_dict(), "Order updated successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update order")
        return error_response("Failed to update order", 500)


def _list_filters(args) -> dict:
    page, limit = parse_pagination(args)
    return {
        "page": page,
        "limit": limit,
        "statuses": order_query_service.resolve_status_filter(args.get("status")),
        "search": parse_string(args.get("search"), "search", max_length=100),
    }


@user_orders_bp.get("")
@require_auth
@require_role(UserRole.CUSTOMER, allow_elevated=False)
def list_user_orders_route():
    try:
        result = order_query_service.list_orders(
            customer_id=g.principal.id, **_list_filters(request.args)
        )
        return success_response(result, "Orders retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return error_response("Failed to retrieve orders", 500)


@user_orders_bp.get("/active")
@require_auth
@require_role(UserRole.CUSTOMER, allow_elevated=False)
def list_active_orders_route():
    try:
        page, limit = parse_pagination(request.args)
        result = order_query_service.list_active_orders(g.principal.id, page=page, limit=limit)
        for order in result["orders"]:
            order["can_track"] = order["status"] != "PENDING"
        return success_response(result, "Active orders retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list active orders")
        return error_response("Failed to retrieve active orders", 500)


@user_orders_bp.get("/history")
@require_auth
@require_role(UserRole.CUSTOMER, allow_elevated=False)
def list_order_history_route():
    try:
        page, limit = parse_pagination(request.args)
        result = order_query_service.list_order_history(
            g.principal.id, page=page, limit=limit, status=request.args.get("status"),
        )
        for order in result["orders"]:
            order["can_reorder"] = order["status"] in ("DELIVERED", "COMPLETED")
        return success_response(result, "Order history retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list order history")
        return error_response("Failed to retrieve order history", 500)


@admin_orders_bp.get("")
@require_auth
@require_role(UserRole.ADMIN, require_tenant=True)
def list_admin_orders_route():
    """
    Orders of the caller's laundry.

    The laundry comes from g.principal. SUPER_ADMIN has no laundry and may
    pass ?laundryId= to narrow; an ADMIN passing another laundry's id gets 403.
    """
    try:
        principal = g.principal
        laundry_id = principal.laundry_id
        requested = request.args.get("laundryId")
        if requested is not None:
            laundry_id = parse_int(requested, "laundryId")
            access_service.authorize_tenant_access(principal, laundry_id)

        result = order_query_service.list_orders(laundry_id=laundry_id, **_list_filters(request.args))
        result["filters"] = {"laundry_id": laundry_id, "status": request.args.get("status")}
        return success_response(result, "Orders retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list laundry orders")
        return error_response("Failed to retrieve orders", 500)


@super_admin_orders_bp.get("")
@require_auth
@require_role(UserRole.SUPER_ADMIN)
def list_all_orders_route():
    try:
        laundry_id = request.args.get("laundryId")
        if laundry_id is not None:
            laundry_id = parse_int(laundry_id, "laundryId")

        result = order_query_service.list_orders(laundry_id=laundry_id, **_list_filters(request.args))
        return success_response(result, "Orders retrieved successfully")

    except ApiError as e:
        return api_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list all orders")
        return error_response("Failed to retrieve orders", 500)
