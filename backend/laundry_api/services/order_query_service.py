# Overview: Service-layer read queries for order lists and laundry activity feeds.

"""
Order and Activity Listings

================================================================================
PURPOSE: Paginated collections, always narrowed to what the caller may see
================================================================================

SCOPING:
- Callers pass the scope explicitly (laundry_id / customer_id). Routes take it
  from g.principal, never from the query string, except for SUPER_ADMIN.
- A scope of None means "no restriction" and is only passed for SUPER_ADMIN.

ORDERING:
- Newest first; ties broken by id so pages never overlap.
================================================================================
"""

from __future__ import annotations

import math

from sqlalchemy import or_

from ..errors import NotFound, ValidationError
from ..extensions import db
from ..models import Activity, Laundry, Order, OrderStatus
from .order_lifecycle_service import ACTIVE_STATUSES, validate_status


# Orders the customer sees under "history"
HISTORY_STATUSES = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELED,
    OrderStatus.REFUNDED,
})


def _pagination(page: int, limit: int, total: int) -> dict:
    pages = math.ceil(total / limit) if total else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": pages,
        "has_next": page < pages,
        "has_previous": page > 1,
    }


def resolve_status_filter(value, allowed=None) -> set[OrderStatus] | None:
    """
    Turn a ?status= query value into a set of statuses.

    None/"" and "ALL" mean no extra filter. With allowed set, a status outside
    it is a ValidationError rather than an empty page.
    """
    if value is None or value == "" or value == "ALL":
        return None
    status = validate_status(value)
    if allowed is not None and status not in allowed:
        raise ValidationError(
            f"Invalid status '{status.value}'. Must be one of: "
            f"{', '.join(s.value for s in OrderStatus if s in allowed)}"
        )
    return {status}


def list_orders(
    *,
    page: int,
    limit: int,
    laundry_id: int | None = None,
    customer_id: int | None = None,
    statuses=None,
    search: str | None = None,
) -> dict:
    """
    One page of orders, newest first.

    statuses narrows to a set of OrderStatus values; search matches the
    order number case-insensitively.
    """
    q = db.session.query(Order)
    if laundry_id is not None:
        q = q.filter(Order.laundry_id == laundry_id)
    if customer_id is not None:
        q = q.filter(Order.customer_id == customer_id)
    if statuses is not None:
        q = q.filter(Order.status.in_(list(statuses)))
    if search:
        q = q.filter(Order.order_number.ilike(f"%{search}%"))

    total = q.count()
    rows = (
        q.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "orders": [order.to_dict() for order in rows],
        "pagination": _pagination(page, limit, total),
    }


def list_active_orders(customer_id: int, *, page: int, limit: int) -> dict:
    return list_orders(page=page, limit=limit, customer_id=customer_id, statuses=ACTIVE_STATUSES)


def list_order_history(customer_id: int, *, page: int, limit: int, status=None) -> dict:
    statuses = resolve_status_filter(status, HISTORY_STATUSES) or HISTORY_STATUSES
    return list_orders(page=page, limit=limit, customer_id=customer_id, statuses=statuses)


def list_laundry_activity(laundry_id: int, *, page: int, limit: int) -> dict:
    """
    Activity feed of one laundry: rows tagged with the laundry plus rows of
    its orders, newest first, with a per-type count over the whole feed.

    Raises:
        NotFound: laundry does not exist
    """
    laundry = db.session.get(Laundry, laundry_id)
    if laundry is None:
        raise NotFound("Laundry not found")

    q = (
        db.session.query(Activity)
        .outerjoin(Order, Activity.order_id == Order.id)
        .filter(or_(Activity.laundry_id == laundry_id, Order.laundry_id == laundry_id))
    )

    total = q.count()
    rows = (
        q.order_by(Activity.created_at.desc(), Activity.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    counts = (
        q.with_entities(Activity.type, db.func.count(Activity.id))
        .group_by(Activity.type)
        .all()
    )

    return {
        "laundry": {"id": laundry.id, "name": laundry.name, "status": laundry.status.value},
        "activities": [activity.to_dict() for activity in rows],
        "summary": {activity_type.value: count for activity_type, count in counts},
        "pagination": _pagination(page, limit, total),
    }
