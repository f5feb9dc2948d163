# Overview: Service-layer operations for the order lifecycle; encapsulates business logic and database work.

"""
Order Lifecycle Guard

================================================================================
PURPOSE: Move an order's status only along the edges of a fixed graph
================================================================================

STATE MACHINE:

    PENDING -> CONFIRMED -> IN_PROGRESS -> READY_FOR_PICKUP -> OUT_FOR_DELIVERY
        -> DELIVERED -> COMPLETED

    Every state before DELIVERED may also go to CANCELED.
    COMPLETED, CANCELED and REFUNDED are terminal.

RULES:
1. No skipping, no going back. Cancellation is the only side exit.
2. COMPLETED is reachable only from DELIVERED.
3. Requesting the current status is a field update, not a transition: no
   error, no activity row.
4. The edge is validated before anything is written.
5. The status write and its activity row commit together or not at all.
6. The write is conditional on the status read just before validation. If
   another writer got there first, the caller gets Conflict, never a silent
   overwrite. There is no internal retry.
================================================================================
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from flask import current_app

from ..errors import Conflict, InvalidTransition, NotFound, ValidationError
from ..extensions import db
from ..models import Activity, ActivityType, Laundry, LaundryStatus, Order, OrderStatus
from ..time_utils import utcnow


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.READY_FOR_PICKUP, OrderStatus.CANCELED}),
    OrderStatus.READY_FOR_PICKUP: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Orders a laundry still has to work on
ACTIVE_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PROGRESS,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.OUT_FOR_DELIVERY,
})

_ACTIVITY_FOR_STATUS = {
    OrderStatus.CONFIRMED: ActivityType.ORDER_CONFIRMED,
    OrderStatus.DELIVERED: ActivityType.ORDER_DELIVERED,
    OrderStatus.COMPLETED: ActivityType.ORDER_COMPLETED,
    OrderStatus.CANCELED: ActivityType.ORDER_CANCELED,
}


def validate_status(value) -> OrderStatus:
    """
    Coerce a client value to OrderStatus.

    Raises:
        ValidationError: value is not one of the known statuses
    """
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(
            f"Invalid status '{value}'. Must be one of: {', '.join(s.value for s in OrderStatus)}"
        )


def allowed_next_statuses(status) -> list[OrderStatus]:
    current = validate_status(status)
    return [s for s in OrderStatus if s in ALLOWED_TRANSITIONS[current]]


def can_transition(from_status, to_status) -> bool:
    """True if to_status is reachable in one step (or is the same status)."""
    current = validate_status(from_status)
    requested = validate_status(to_status)
    if current == requested:
        return True
    return requested in ALLOWED_TRANSITIONS[current]


def check_transition(from_status, to_status) -> None:
    """
    Raise InvalidTransition unless the edge is allowed.

    Same-status requests always pass.
    """
    current = validate_status(from_status)
    requested = validate_status(to_status)
    if current != requested and requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current.value, requested.value)


def describe_actions(order: Order) -> dict:
    """Which buttons an admin UI should offer for this order."""
    targets = ALLOWED_TRANSITIONS[order.status]
    return {
        "can_confirm": OrderStatus.CONFIRMED in targets,
        "can_start_progress": OrderStatus.IN_PROGRESS in targets,
        "can_mark_ready": OrderStatus.READY_FOR_PICKUP in targets,
        "can_dispatch": OrderStatus.OUT_FOR_DELIVERY in targets,
        "can_deliver": OrderStatus.DELIVERED in targets,
        "can_complete": OrderStatus.COMPLETED in targets,
        "can_cancel": OrderStatus.CANCELED in targets,
        "next_statuses": [s.value for s in allowed_next_statuses(order.status)],
    }


def _read_current_row(order_id: int):
    """
    Fresh (status, order_number, laundry_id) straight from the database.

    Column queries bypass the session identity map, so this sees the
    committed value even if an Order instance is already loaded.
    """
    return (
        db.session.query(Order.status, Order.order_number, Order.laundry_id)
        .filter(Order.id == order_id)
        .first()
    )


def _record_transition(
    *,
    order_id: int,
    order_number: str,
    laundry_id: int,
    previous: OrderStatus,
    new: OrderStatus,
    actor,
    occurred_at: datetime,
) -> Activity:
    activity = Activity(
        type=_ACTIVITY_FOR_STATUS.get(new, ActivityType.ORDER_UPDATED),
        title=f"Status updated: {new.value}",
        description=f"Order {order_number} moved from {previous.value} to {new.value}",
        details={
            "previous_status": previous.value,
            "new_status": new.value,
            "updated_by": actor.id,
            "updated_by_name": actor.name,
            "timestamp": occurred_at.isoformat() + "Z",
        },
        user_id=actor.id,
        laundry_id=laundry_id,
        order_id=order_id,
        created_at=occurred_at,
    )
    db.session.add(activity)
    return activity


def transition(
    order_id: int,
    requested_status,
    *,
    actor,
    notes: str | None = None,
    pickup_date: datetime | None = None,
    delivery_date: datetime | None = None,
    expected_status=None,
) -> Order:
    """
    Apply an order update that may include a status change.

    Args:
        order_id: order to update
        requested_status: target status; None or the current status means
            "no transition", only the other fields are updated
        actor: acting Principal; recorded on the activity row
        notes, pickup_date, delivery_date: optional field updates
        expected_status: status the caller last saw; mismatch -> Conflict

    Returns:
        The reloaded Order

    Raises:
        ValidationError: unknown status value
        NotFound: order does not exist
        InvalidTransition: edge not in ALLOWED_TRANSITIONS
        Conflict: status changed since it was read
    """
    row = _read_current_row(order_id)
    if row is None:
        raise NotFound("Order not found")
    current, order_number, laundry_id = row

    requested = current if requested_status is None else validate_status(requested_status)

    if expected_status is not None and validate_status(expected_status) != current:
        raise Conflict(
            f"Order {order_number} is now {current.value}; reload and retry",
            reason="stale_status",
        )

    check_transition(current, requested)

    now = utcnow()
    is_transition = requested != current

    changes = {Order.updated_at: now}
    if is_transition:
        changes[Order.status] = requested
    if notes is not None:
        changes[Order.notes] = notes
    if pickup_date is not None:
        changes[Order.pickup_date] = pickup_date
    if delivery_date is not None:
        changes[Order.delivery_date] = delivery_date

    try:
        updated = (
            db.session.query(Order)
            .filter(Order.id == order_id, Order.status == current)
            .update(changes, synchronize_session=False)
        )
        if updated != 1:
            raise Conflict(
                f"Order {order_number} was modified concurrently; reload and retry",
                reason="concurrent_update",
            )

        if is_transition:
            _record_transition(
                order_id=order_id,
                order_number=order_number,
                laundry_id=laundry_id,
                previous=current,
                new=requested,
                actor=actor,
                occurred_at=now,
            )

        db.session.commit()
    except Conflict:
        db.session.rollback()
        current_app.logger.warning(
            "Order %s transition %s -> %s lost a concurrent update",
            order_id, current.value, requested.value,
        )
        raise
    except Exception:
        db.session.rollback()
        raise

    if is_transition:
        current_app.logger.info(
            "Order %s moved %s -> %s by user %s",
            order_id, current.value, requested.value, actor.id,
        )

    return db.session.get(Order, order_id)


def cancel_for_laundry_suspension(laundry_id: int, reason: str, *, actor) -> int:
    """
    Cancel a suspended laundry's orders that have not started processing.

    Runs inside the caller's transaction: flushes but does not commit.
    PENDING and CONFIRMED both have a CANCELED edge, and each update is
    conditional on the status it was read with.
    """
    now = utcnow()
    cancelable = [OrderStatus.PENDING, OrderStatus.CONFIRMED]
    rows = (
        db.session.query(Order.id, Order.status, Order.order_number)
        .filter(Order.laundry_id == laundry_id, Order.status.in_(cancelable))
        .all()
    )

    canceled = 0
    for order_id, status, order_number in rows:
        check_transition(status, OrderStatus.CANCELED)
        updated = (
            db.session.query(Order)
            .filter(Order.id == order_id, Order.status == status)
            .update(
                {
                    Order.status: OrderStatus.CANCELED,
                    Order.notes: f"Order cancelled due to laundry suspension: {reason}",
                    Order.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        if updated != 1:
            raise Conflict(
                f"Order {order_number} was modified concurrently; reload and retry",
                reason="concurrent_update",
            )
        _record_transition(
            order_id=order_id,
            order_number=order_number,
            laundry_id=laundry_id,
            previous=status,
            new=OrderStatus.CANCELED,
            actor=actor,
            occurred_at=now,
        )
        canceled += 1

    return canceled


def _provisional_order_number() -> str:
    return f"TMP-{uuid.uuid4().hex[:24]}"


def format_order_number(order_id: int) -> str:
    return f"ORD-{order_id:06d}"


def create_order(
    customer,
    laundry_id: int,
    *,
    total_amount: Decimal,
    delivery_fee: Decimal = Decimal("0"),
    discount: Decimal = Decimal("0"),
    notes: str | None = None,
    pickup_date: datetime | None = None,
    delivery_date: datetime | None = None,
) -> Order:
    """
    Create a PENDING order for customer at an ACTIVE laundry.

    The order number is derived from the row id once the insert has been
    flushed, so concurrent creates never compete for the same number. The
    ORDER_CREATED activity commits with the order.
    """
    laundry = db.session.get(Laundry, laundry_id)
    if laundry is None or laundry.status != LaundryStatus.ACTIVE:
        raise NotFound("Laundry not found or inactive")

    if total_amount < 0 or delivery_fee < 0 or discount < 0:
        raise ValidationError("Amounts must not be negative")

    final_amount = total_amount + delivery_fee - discount
    if final_amount < 0:
        raise ValidationError("Discount cannot exceed order total")

    now = utcnow()
    order = Order(
        order_number=_provisional_order_number(),
        status=OrderStatus.PENDING,
        total_amount=total_amount,
        delivery_fee=delivery_fee,
        discount=discount,
        final_amount=final_amount,
        notes=notes,
        pickup_date=pickup_date,
        delivery_date=delivery_date,
        customer_id=customer.id,
        laundry_id=laundry.id,
        created_at=now,
        updated_at=now,
    )

    try:
        db.session.add(order)
        db.session.flush()
        order.order_number = format_order_number(order.id)
        db.session.add(Activity(
            type=ActivityType.ORDER_CREATED,
            title="New order",
            description=f"Order {order.order_number} created",
            details={"order_number": order.order_number, "final_amount": str(final_amount)},
            user_id=customer.id,
            laundry_id=laundry.id,
            order_id=order.id,
            created_at=now,
        ))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return order
