# Overview: Service-layer operations for accounts; password hashing, registration and sign-in.

"""
Account Service

Passwords are hashed with bcrypt (cost factor 12 unless configured).
Sign-in only checks credentials; the bearer token is produced by token_service and every later
request is resolved by access_service.authenticate.
"""

import bcrypt
from flask import current_app

from ..errors import AccountSuspended, ConflictError, Unauthenticated, ValidationError
from ..extensions import db
from ..models import Activity, ActivityType, User, UserRole
from ..time_utils import utcnow


MIN_PASSWORD_LENGTH = 6

# Roles a visitor may pick for themselves
SELF_REGISTRATION_ROLES = {UserRole.CUSTOMER, UserRole.ADMIN}


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def hash_password(password: str) -> str:
    """Hash password using bcrypt (cost factor BCRYPT_LOG_ROUNDS, default 12)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_LOG_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    Accounts without a password hash (external provider sign-up) never match.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def parse_role(value, *, default: UserRole | None = None) -> UserRole:
    if value is None and default is not None:
        return default
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        raise ValidationError(
            f"Invalid role '{value}'. Must be one of: {', '.join(r.value for r in UserRole)}"
        )


def register_user(
    email: str,
    password: str,
    name: str,
    phone: str | None = None,
    role=UserRole.CUSTOMER,
) -> User:
    """
    Self-registration.

    Raises:
        ValidationError: bad email/name/role or weak password
        ConflictError: email already registered
    """
    email = (email or "").strip().lower()
    name = (name or "").strip()
    if not email or "@" not in email:
        raise ValidationError("Invalid email format")
    if not name:
        raise ValidationError("Name is required")

    role = parse_role(role, default=UserRole.CUSTOMER)
    if role not in SELF_REGISTRATION_ROLES:
        raise ValidationError("Role cannot be self-assigned")

    if db.session.query(User).filter_by(email=email).first():
        raise ConflictError("User already exists with this email")

    password_hash = hash_password(password)

    user = User(
        email=email,
        name=name,
        phone=phone,
        role=role,
        password_hash=password_hash,
    )

    try:
        db.session.add(user)
        db.session.flush()
        db.session.add(Activity(
            type=ActivityType.USER_REGISTERED,
            title="New user registered",
            description=f"{user.email} registered as {role.value}",
            user_id=user.id,
            created_at=utcnow(),
        ))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return user


def create_user(
    email: str,
    password: str,
    name: str,
    role: UserRole,
    phone: str | None = None,
) -> User:
    """Operator-side account creation (CLI); any role allowed."""
    email = (email or "").strip().lower()
    if db.session.query(User).filter_by(email=email).first():
        raise ConflictError("User already exists with this email")

    user = User(
        email=email,
        name=name,
        phone=phone,
        role=parse_role(role),
        password_hash=hash_password(password),
    )
    db.session.add(user)
    db.session.commit()
    return user


def sign_in(email: str, password: str) -> User:
    """
    Check credentials.

    Unknown email and wrong password give the same error so the endpoint
    does not reveal which accounts exist.
    """
    email = (email or "").strip().lower()
    user = db.session.query(User).filter_by(email=email).first()

    if user is None or not verify_password(password or "", user.password_hash):
        raise Unauthenticated("Invalid credentials", reason="invalid_credentials")

    if user.is_suspended:
        raise AccountSuspended(user.suspension_reason)

    return user
