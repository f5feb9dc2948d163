# Overview: Service-layer operations for account and laundry suspension and role changes.

"""
Platform administration writes: user suspension, role changes, laundry
suspension.

Each operation is one commit together with its Activity row. None of them
touch tokens: access_service re-reads the user on every request, so the
effect is visible on the caller's next request.
"""

from __future__ import annotations

from flask import current_app

from ..errors import ConflictError, NotFound, ValidationError
from ..extensions import db
from ..models import (
    Activity,
    ActivityType,
    Laundry,
    LaundryStatus,
    LaundrySuspension,
    User,
    UserRole,
)
from ..time_utils import utcnow
from . import order_lifecycle_service


MIN_REASON_LENGTH = 10
MAX_REASON_LENGTH = 500


def _validate_reason(reason: str | None) -> str:
    if reason is not None and not isinstance(reason, str):
        raise ValidationError("reason must be a string")
    reason = (reason or "").strip()
    if len(reason) < MIN_REASON_LENGTH:
        raise ValidationError(f"Suspension reason must be at least {MIN_REASON_LENGTH} characters")
    if len(reason) > MAX_REASON_LENGTH:
        raise ValidationError(f"Suspension reason cannot exceed {MAX_REASON_LENGTH} characters")
    return reason


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def _get_laundry(laundry_id: int) -> Laundry:
    laundry = db.session.get(Laundry, laundry_id)
    if laundry is None:
        raise NotFound("Laundry not found")
    return laundry


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def suspend_user(user_id: int, reason: str, *, actor) -> User:
    """Suspend an account; the next request with any of its tokens gets 403."""
    reason = _validate_reason(reason)
    user = _get_user(user_id)

    if user.id == actor.id:
        raise ValidationError("Cannot suspend your own account")
    if user.is_suspended:
        raise ConflictError("User is already suspended")

    now = utcnow()
    user.suspended_at = now
    user.suspension_reason = reason
    db.session.add(Activity(
        type=ActivityType.USER_SUSPENDED,
        title="User suspended",
        description=f"{user.email} suspended",
        details={"reason": reason, "suspended_by": actor.id, "target_user_id": user.id},
        user_id=actor.id,
        laundry_id=user.laundry_id,
        created_at=now,
    ))
    _commit()

    current_app.logger.info("User %s suspended by %s", user.id, actor.id)
    return user


def reinstate_user(user_id: int, *, actor) -> User:
    user = _get_user(user_id)
    if not user.is_suspended:
        raise ConflictError("User is not suspended")

    previous_reason = user.suspension_reason
    now = utcnow()
    user.suspended_at = None
    user.suspension_reason = None
    db.session.add(Activity(
        type=ActivityType.USER_REINSTATED,
        title="User reinstated",
        description=f"{user.email} reinstated",
        details={"previous_reason": previous_reason, "reinstated_by": actor.id, "target_user_id": user.id},
        user_id=actor.id,
        laundry_id=user.laundry_id,
        created_at=now,
    ))
    _commit()

    current_app.logger.info("User %s reinstated by %s", user.id, actor.id)
    return user


def change_role(user_id: int, role: UserRole, *, actor) -> User:
    """
    Change a user's role.

    An admin that still owns a laundry cannot be moved to another role;
    the laundry would be left without an owner.
    """
    user = _get_user(user_id)
    if user.id == actor.id:
        raise ValidationError("Cannot change your own role")

    previous = user.role
    if previous == role:
        return user

    if previous == UserRole.ADMIN and user.laundry is not None:
        raise ConflictError("User still administers a laundry")

    now = utcnow()
    user.role = role
    db.session.add(Activity(
        type=ActivityType.USER_ROLE_CHANGED,
        title="User role changed",
        description=f"{user.email}: {previous.value} -> {role.value}",
        details={"previous_role": previous.value, "new_role": role.value, "target_user_id": user.id},
        user_id=actor.id,
        created_at=now,
    ))
    _commit()

    current_app.logger.info("User %s role %s -> %s by %s", user.id, previous.value, role.value, actor.id)
    return user


def suspend_laundry(
    laundry_id: int,
    reason: str,
    *,
    actor,
    suspend_admin: bool = False,
    notes: str | None = None,
) -> dict:
    """
    Suspend a laundry.

    In one transaction:
    1. laundry -> SUSPENDED
    2. LaundrySuspension history row
    3. PENDING / CONFIRMED orders -> CANCELED (with activity rows)
    4. optionally suspend the admin account
    5. LAUNDRY_SUSPENDED activity
    """
    reason = _validate_reason(reason)
    laundry = _get_laundry(laundry_id)

    if laundry.status == LaundryStatus.SUSPENDED:
        raise ConflictError("Laundry is already suspended")

    previous_status = laundry.status
    now = utcnow()

    try:
        laundry.status = LaundryStatus.SUSPENDED
        laundry.suspended_at = now
        laundry.suspension_reason = reason

        canceled = order_lifecycle_service.cancel_for_laundry_suspension(
            laundry.id, reason, actor=actor
        )

        admin_suspended = False
        if suspend_admin and not laundry.admin.is_suspended:
            laundry.admin.suspended_at = now
            laundry.admin.suspension_reason = f"Laundry suspended: {reason}"
            admin_suspended = True

        details = {
            "previous_status": previous_status.value,
            "canceled_orders": canceled,
            "admin_suspended": admin_suspended,
            "notes": notes,
        }
        suspension = LaundrySuspension(
            laundry_id=laundry.id,
            reason=reason,
            suspended_by_id=actor.id,
            suspended_at=now,
            is_active=True,
            details=details,
        )
        db.session.add(suspension)
        db.session.add(Activity(
            type=ActivityType.LAUNDRY_SUSPENDED,
            title="Laundry suspended",
            description=f'Laundry "{laundry.name}" has been suspended',
            details={"reason": reason, "suspended_by": actor.id, **details},
            user_id=actor.id,
            laundry_id=laundry.id,
            created_at=now,
        ))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Laundry %s suspended by %s (%s orders canceled)", laundry.id, actor.id, canceled
    )
    return {
        "laundry": laundry.to_dict(),
        "suspension": suspension.to_dict(),
        "canceled_orders": canceled,
        "admin_suspended": admin_suspended,
    }


def reactivate_laundry(laundry_id: int, *, actor) -> Laundry:
    """
    Lift a laundry suspension.

    The admin account, if it was suspended along with the laundry, stays
    suspended until reinstated explicitly.
    """
    laundry = _get_laundry(laundry_id)
    if laundry.status != LaundryStatus.SUSPENDED:
        raise ConflictError("Laundry is not suspended")

    now = utcnow()
    laundry.status = LaundryStatus.ACTIVE
    laundry.suspended_at = None
    laundry.suspension_reason = None

    active = db.session.query(LaundrySuspension).filter_by(
        laundry_id=laundry.id, is_active=True
    ).all()
    for suspension in active:
        suspension.is_active = False
        suspension.lifted_at = now
        suspension.lifted_by_id = actor.id

    db.session.add(Activity(
        type=ActivityType.LAUNDRY_ACTIVATED,
        title="Laundry reactivated",
        description=f'Laundry "{laundry.name}" has been reactivated',
        details={"reactivated_by": actor.id},
        user_id=actor.id,
        laundry_id=laundry.id,
        created_at=now,
    ))
    _commit()

    current_app.logger.info("Laundry %s reactivated by %s", laundry.id, actor.id)
    return laundry
