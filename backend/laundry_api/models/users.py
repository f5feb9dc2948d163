from __future__ import annotations

import enum

from ..extensions import db
from ..time_utils import to_utc_z


class UserRole(str, enum.Enum):
    """
    Closed set of platform roles.

    DELIVERY_GUY is defined but no route grants it anything yet; keeping it in
    the enum means every authorization table stays exhaustive.
    """
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"
    DELIVERY_GUY = "DELIVERY_GUY"


class User(db.Model):
    """
    Platform accounts: customers, laundry admins and super admins.

    An ADMIN is bound to at most one laundry through Laundry.admin_id; that
    link is the admin's tenant association. Suspension is recorded on the row
    itself (suspended_at + suspension_reason) and is checked on every request.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    # Bcrypt hashed password (nullable for accounts created by external providers)
    password_hash = db.Column(db.String(255), nullable=True)

    role = db.Column(
        db.Enum(UserRole, name="user_role", native_enum=False, length=32),
        nullable=False,
        default=UserRole.CUSTOMER,
    )

    suspended_at = db.Column(db.DateTime(timezone=True), nullable=True)
    suspension_reason = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    laundry = db.relationship("Laundry", back_populates="admin", uselist=False, foreign_keys="Laundry.admin_id")

    @property
    def laundry_id(self) -> int | None:
        return self.laundry.id if self.laundry is not None else None

    @property
    def is_suspended(self) -> bool:
        return self.suspended_at is not None

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role.value}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role.value,
            "laundry_id": self.laundry_id,
            "is_suspended": self.is_suspended,
            "suspension_reason": self.suspension_reason,
            "suspended_at": to_utc_z(self.suspended_at),
            "created_at": to_utc_z(self.created_at),
        }
