"""
Pytest fixtures for the laundry marketplace backend tests.

Provides test database setup, two tenants with their admins, customers,
a super admin, orders, and bearer-token helpers.
"""

from decimal import Decimal

import pytest
from laundry_api import create_app
from laundry_api.extensions import db
from laundry_api.models import Laundry, LaundryStatus, Order, OrderStatus, User, UserRole
from laundry_api.services import token_service
from laundry_api.services.access_service import Principal
from laundry_api.services.auth_service import hash_password
from laundry_api.time_utils import utcnow


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'JWT_SECRET_KEY': 'test-jwt-secret',
        'BCRYPT_LOG_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.expunge_all()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_user(session, email, role=UserRole.CUSTOMER, name=None):
    user = User(
        email=email,
        name=name or email.split("@")[0],
        role=role,
        password_hash=hash_password(PASSWORD),
    )
    session.add(user)
    session.commit()
    return user


def make_laundry(session, admin, name, status=LaundryStatus.ACTIVE):
    laundry = Laundry(
        name=name,
        email=f"contact@{name.lower().replace(' ', '-')}.test",
        phone="0600000000",
        admin_id=admin.id,
        status=status,
    )
    session.add(laundry)
    session.commit()
    return laundry


def make_order(session, customer, laundry, status=OrderStatus.PENDING, number=None):
    count = session.query(Order).count()
    now = utcnow()
    order = Order(
        order_number=number or f"TEST-{count + 1:04d}",
        status=status,
        total_amount=Decimal("100.00"),
        delivery_fee=Decimal("10.00"),
        discount=Decimal("0.00"),
        final_amount=Decimal("110.00"),
        customer_id=customer.id,
        laundry_id=laundry.id,
        created_at=now,
        updated_at=now,
    )
    session.add(order)
    session.commit()
    return order


@pytest.fixture(scope='function')
def customer(db_session):
    return make_user(db_session, "customer@example.com", UserRole.CUSTOMER, "Casey Customer")


@pytest.fixture(scope='function')
def other_customer(db_session):
    return make_user(db_session, "other@example.com", UserRole.CUSTOMER, "Olive Other")


@pytest.fixture(scope='function')
def admin_a(db_session):
    """ADMIN of laundry A."""
    return make_user(db_session, "admin_a@laundry-a.test", UserRole.ADMIN, "Alex Admin")


@pytest.fixture(scope='function')
def laundry_a(db_session, admin_a):
    return make_laundry(db_session, admin_a, "Laundry A")


@pytest.fixture(scope='function')
def admin_b(db_session):
    """ADMIN of laundry B."""
    return make_user(db_session, "admin_b@laundry-b.test", UserRole.ADMIN, "Blair Admin")


@pytest.fixture(scope='function')
def laundry_b(db_session, admin_b):
    return make_laundry(db_session, admin_b, "Laundry B")


@pytest.fixture(scope='function')
def unbound_admin(db_session):
    """ADMIN with no laundry."""
    return make_user(db_session, "unbound@example.com", UserRole.ADMIN, "Una Bound")


@pytest.fixture(scope='function')
def super_admin(db_session):
    return make_user(db_session, "root@example.com", UserRole.SUPER_ADMIN, "Root")


@pytest.fixture(scope='function')
def delivery_guy(db_session):
    return make_user(db_session, "driver@example.com", UserRole.DELIVERY_GUY, "Dee Driver")


@pytest.fixture(scope='function')
def order_a(db_session, customer, laundry_a):
    """PENDING order placed by customer at laundry A."""
    return make_order(db_session, customer, laundry_a)


@pytest.fixture(scope='function')
def order_b(db_session, other_customer, laundry_b):
    """PENDING order placed by other_customer at laundry B."""
    return make_order(db_session, other_customer, laundry_b)


def principal_for(user) -> Principal:
    return Principal.from_user(user)


def token_for(user) -> str:
    token, _ = token_service.issue_token(user)
    return token


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def headers_for(user) -> dict:
    return auth_headers(token_for(user))
