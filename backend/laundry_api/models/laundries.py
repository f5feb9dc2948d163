from __future__ import annotations

import enum

from ..extensions import db
from ..time_utils import to_utc_z


class LaundryStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING = "PENDING"


class Laundry(db.Model):
    """
    Tenant root: every laundry shop is a tenant with exactly one admin owner.

    Orders belong to a laundry (orders.laundry_id). An ADMIN principal may
    only act on rows whose laundry_id equals the laundry it owns.
    """
    __tablename__ = "laundries"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    phone = db.Column(db.String(32), nullable=False)
    description = db.Column(db.Text, nullable=True)

    status = db.Column(
        db.Enum(LaundryStatus, name="laundry_status", native_enum=False, length=16),
        nullable=False,
        default=LaundryStatus.ACTIVE,
        index=True,
    )

    # One admin per laundry, one laundry per admin
    admin_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)

    suspended_at = db.Column(db.DateTime(timezone=True), nullable=True)
    suspension_reason = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    admin = db.relationship("User", back_populates="laundry", foreign_keys=[admin_id])

    def __repr__(self) -> str:
        return f"<Laundry id={self.id} name={self.name!r} status={self.status.value}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "description": self.description,
            "status": self.status.value,
            "admin_id": self.admin_id,
            "suspended_at": to_utc_z(self.suspended_at),
            "suspension_reason": self.suspension_reason,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class LaundrySuspension(db.Model):
    """History of laundry suspensions; at most one row per laundry is active."""
    __tablename__ = "laundry_suspensions"
    __table_args__ = (
        db.Index("ix_laundry_suspensions_laundry_active", "laundry_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    laundry_id = db.Column(
        db.Integer, db.ForeignKey("laundries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reason = db.Column(db.Text, nullable=False)
    suspended_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    suspended_at = db.Column(db.DateTime(timezone=True), nullable=False)
    lifted_at = db.Column(db.DateTime(timezone=True), nullable=True)
    lifted_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    details = db.Column(db.JSON, nullable=True)

    laundry = db.relationship("Laundry", backref=db.backref("suspensions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "laundry_id": self.laundry_id,
            "reason": self.reason,
            "suspended_by_id": self.suspended_by_id,
            "suspended_at": to_utc_z(self.suspended_at),
            "lifted_at": to_utc_z(self.lifted_at),
            "lifted_by_id": self.lifted_by_id,
            "is_active": self.is_active,
            "details": self.details,
        }
