from __future__ import annotations

import enum

from ..extensions import db
from ..time_utils import to_utc_z


class ActivityType(str, enum.Enum):
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_UPDATED = "ORDER_UPDATED"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    ORDER_DELIVERED = "ORDER_DELIVERED"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    ORDER_CANCELED = "ORDER_CANCELED"
    LAUNDRY_SUSPENDED = "LAUNDRY_SUSPENDED"
    LAUNDRY_ACTIVATED = "LAUNDRY_ACTIVATED"
    USER_REGISTERED = "USER_REGISTERED"
    USER_SUSPENDED = "USER_SUSPENDED"
    USER_REINSTATED = "USER_REINSTATED"
    USER_ROLE_CHANGED = "USER_ROLE_CHANGED"


class Activity(db.Model):
    """
    Append-only audit trail.

    Rows are written in the same transaction as the change they describe, so
    an activity exists if and only if its change was committed. user_id is the
    acting principal, never a value taken from the request body.
    """
    __tablename__ = "activities"
    __table_args__ = (
        db.Index("ix_activities_order_created", "order_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(
        db.Enum(ActivityType, name="activity_type", native_enum=False, length=32),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    details = db.Column(db.JSON, nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    laundry_id = db.Column(db.Integer, db.ForeignKey("laundries.id", ondelete="SET NULL"), nullable=True, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "details": self.details,
            "user_id": self.user_id,
            "laundry_id": self.laundry_id,
            "order_id": self.order_id,
            "created_at": to_utc_z(self.created_at),
        }
