"""
Order list and activity feed tests.

Verifies:
- An admin's order list only ever holds its own laundry's rows
- Customers list their own orders, split into active and history
- SUPER_ADMIN lists across laundries and may narrow by laundryId
- Status filters and pagination bounds are validated (400)
- The laundry activity feed covers the laundry and its orders, nothing else
"""

from decimal import Decimal

import pytest

from conftest import headers_for, make_order, principal_for
from laundry_api.models import Activity, ActivityType, OrderStatus
from laundry_api.services.order_lifecycle_service import create_order, transition
from laundry_api.time_utils import utcnow


S = OrderStatus


def _ids(resp):
    return {order["id"] for order in resp.json["data"]["orders"]}


# =============================================================================
# ADMIN: OWN LAUNDRY ONLY
# =============================================================================


class TestAdminOrderList:

    def test_admin_sees_only_own_laundry(self, client, db_session, customer, other_customer,
                                         admin_a, laundry_a, laundry_b):
        own = [
            make_order(db_session, customer, laundry_a),
            make_order(db_session, other_customer, laundry_a, status=S.CONFIRMED),
        ]
        foreign = [
            make_order(db_session, customer, laundry_b),
            make_order(db_session, other_customer, laundry_b, status=S.DELIVERED),
        ]

        resp = client.get("/api/admin/orders", headers=headers_for(admin_a))
        assert resp.status_code == 200
        assert _ids(resp) == {o.id for o in own}
        assert not _ids(resp) & {o.id for o in foreign}
        assert resp.json["data"]["pagination"]["total"] == 2
        assert resp.json["data"]["filters"]["laundry_id"] == laundry_a.id

    def test_other_admin_sees_the_other_half(self, client, db_session, customer, admin_b,
                                            laundry_a, laundry_b, order_a, order_b):
        resp = client.get("/api/admin/orders", headers=headers_for(admin_b))
        assert resp.status_code == 200
        assert _ids(resp) == {order_b.id}

    def test_admin_cannot_ask_for_other_laundry(self, client, admin_a, laundry_a, order_b):
        resp = client.get(f"/api/admin/orders?laundryId={order_b.laundry_id}", headers=headers_for(admin_a))
        assert resp.status_code == 403

    def test_admin_may_name_own_laundry(self, client, admin_a, laundry_a, order_a):
        resp = client.get(f"/api/admin/orders?laundryId={laundry_a.id}", headers=headers_for(admin_a))
        assert resp.status_code == 200
        assert _ids(resp) == {order_a.id}

    def test_status_filter(self, client, db_session, customer, admin_a, laundry_a, order_a):
        confirmed = make_order(db_session, customer, laundry_a, status=S.CONFIRMED)

        resp = client.get("/api/admin/orders?status=CONFIRMED", headers=headers_for(admin_a))
        assert resp.status_code == 200
        assert _ids(resp) == {confirmed.id}

    def test_status_filter_does_not_widen_scope(self, client, db_session, customer, admin_a,
                                                laundry_a, laundry_b):
        make_order(db_session, customer, laundry_b, status=S.CONFIRMED)

        resp = client.get("/api/admin/orders?status=CONFIRMED", headers=headers_for(admin_a))
        assert resp.status_code == 200
        assert resp.json["data"]["orders"] == []

    def test_invalid_status(self, client, admin_a, laundry_a):
        resp = client.get("/api/admin/orders?status=LOST", headers=headers_for(admin_a))
        assert resp.status_code == 400

    def test_search_by_order_number(self, client, db_session, customer, admin_a, laundry_a):
        make_order(db_session, customer, laundry_a, number="TEST-ALPHA")
        wanted = make_order(db_session, customer, laundry_a, number="TEST-BRAVO")

        resp = client.get("/api/admin/orders?search=bravo", headers=headers_for(admin_a))
        assert _ids(resp) == {wanted.id}

    def test_super_admin_sees_all_and_may_narrow(self, client, super_admin, order_a, order_b):
        headers = headers_for(super_admin)
        assert _ids(client.get("/api/admin/orders", headers=headers)) == {order_a.id, order_b.id}

        resp = client.get(f"/api/admin/orders?laundryId={order_b.laundry_id}", headers=headers)
        assert _ids(resp) == {order_b.id}

    @pytest.mark.parametrize("user_fixture", ["customer", "delivery_guy", "unbound_admin"])
    def test_refused_roles(self, request, client, order_a, user_fixture):
        user = request.getfixturevalue(user_fixture)
        resp = client.get("/api/admin/orders", headers=headers_for(user))
        assert resp.status_code == 403


# =============================================================================
# PAGINATION
# =============================================================================


class TestPagination:

    def test_pages(self, client, db_session, customer, admin_a, laundry_a):
        orders = [make_order(db_session, customer, laundry_a) for _ in range(3)]
        headers = headers_for(admin_a)

        first = client.get("/api/admin/orders?limit=2&page=1", headers=headers).json["data"]
        second = client.get("/api/admin/orders?limit=2&page=2", headers=headers).json["data"]

        assert len(first["orders"]) == 2
        assert len(second["orders"]) == 1
        assert first["pagination"] == {
            "page": 1, "limit": 2, "total": 3, "pages": 2,
            "has_next": True, "has_previous": False,
        }
        seen = {o["id"] for o in first["orders"]} | {o["id"] for o in second["orders"]}
        assert seen == {o.id for o in orders}

    def test_newest_first(self, client, db_session, customer, admin_a, laundry_a):
        older = make_order(db_session, customer, laundry_a)
        newer = make_order(db_session, customer, laundry_a)

        resp = client.get("/api/admin/orders", headers=headers_for(admin_a))
        assert [o["id"] for o in resp.json["data"]["orders"]] == [newer.id, older.id]

    @pytest.mark.parametrize("query", ["page=0", "limit=0", "limit=101", "page=abc", "limit=2.5"])
    def test_bad_bounds(self, client, admin_a, laundry_a, query):
        resp = client.get(f"/api/admin/orders?{query}", headers=headers_for(admin_a))
        assert resp.status_code == 400


# =============================================================================
# CUSTOMER: OWN ORDERS
# =============================================================================


class TestUserOrderList:

    def test_customer_sees_only_own_orders(self, client, db_session, customer, other_customer,
                                           laundry_a, laundry_b):
        mine = [make_order(db_session, customer, laundry_a), make_order(db_session, customer, laundry_b)]
        make_order(db_session, other_customer, laundry_a)

        resp = client.get("/api/user/orders", headers=headers_for(customer))
        assert resp.status_code == 200
        assert _ids(resp) == {o.id for o in mine}

    def test_active_and_history_split(self, client, db_session, customer, other_customer, laundry_a):
        pending = make_order(db_session, customer, laundry_a)
        in_progress = make_order(db_session, customer, laundry_a, status=S.IN_PROGRESS)
        delivered = make_order(db_session, customer, laundry_a, status=S.DELIVERED)
        canceled = make_order(db_session, customer, laundry_a, status=S.CANCELED)
        make_order(db_session, other_customer, laundry_a, status=S.DELIVERED)
        headers = headers_for(customer)

        active = client.get("/api/user/orders/active", headers=headers)
        assert active.status_code == 200
        assert _ids(active) == {pending.id, in_progress.id}
        tracked = {o["id"]: o["can_track"] for o in active.json["data"]["orders"]}
        assert tracked == {pending.id: False, in_progress.id: True}

        history = client.get("/api/user/orders/history", headers=headers)
        assert history.status_code == 200
        assert _ids(history) == {delivered.id, canceled.id}
        reorder = {o["id"]: o["can_reorder"] for o in history.json["data"]["orders"]}
        assert reorder == {delivered.id: True, canceled.id: False}

    def test_history_status_filter(self, client, db_session, customer, laundry_a):
        make_order(db_session, customer, laundry_a, status=S.DELIVERED)
        canceled = make_order(db_session, customer, laundry_a, status=S.CANCELED)
        headers = headers_for(customer)

        resp = client.get("/api/user/orders/history?status=CANCELED", headers=headers)
        assert _ids(resp) == {canceled.id}

        assert client.get("/api/user/orders/history?status=ALL", headers=headers).status_code == 200
        assert client.get("/api/user/orders/history?status=PENDING", headers=headers).status_code == 400

    @pytest.mark.parametrize("path", ["/api/user/orders", "/api/user/orders/active", "/api/user/orders/history"])
    def test_customer_routes_refuse_other_roles(self, client, admin_a, super_admin, path):
        assert client.get(path, headers=headers_for(admin_a)).status_code == 403
        assert client.get(path, headers=headers_for(super_admin)).status_code == 403


# =============================================================================
# SUPER ADMIN: ALL ORDERS
# =============================================================================


class TestSuperAdminOrderList:

    def test_lists_every_laundry(self, client, super_admin, order_a, order_b):
        resp = client.get("/api/super-admin/orders", headers=headers_for(super_admin))
        assert resp.status_code == 200
        assert _ids(resp) == {order_a.id, order_b.id}

    def test_narrow_by_laundry_and_status(self, client, db_session, super_admin, customer,
                                          laundry_a, order_a, order_b):
        confirmed = make_order(db_session, customer, laundry_a, status=S.CONFIRMED)
        headers = headers_for(super_admin)

        resp = client.get(f"/api/super-admin/orders?laundryId={laundry_a.id}", headers=headers)
        assert _ids(resp) == {order_a.id, confirmed.id}

        resp = client.get(f"/api/super-admin/orders?laundryId={laundry_a.id}&status=CONFIRMED", headers=headers)
        assert _ids(resp) == {confirmed.id}

    def test_admin_refused(self, client, admin_a, laundry_a):
        resp = client.get("/api/super-admin/orders", headers=headers_for(admin_a))
        assert resp.status_code == 403


# =============================================================================
# LAUNDRY ACTIVITY FEED
# =============================================================================


class TestLaundryActivity:

    def test_feed_covers_laundry_and_its_orders(self, client, db_session, super_admin, customer,
                                                admin_a, admin_b, laundry_a, laundry_b):
        order = create_order(principal_for(customer), laundry_a.id, total_amount=Decimal("20.00"))
        transition(order.id, S.CONFIRMED, actor=principal_for(admin_a))
        foreign = create_order(principal_for(customer), laundry_b.id, total_amount=Decimal("20.00"))
        transition(foreign.id, S.CONFIRMED, actor=principal_for(admin_b))

        # Tagged only through its order
        db_session.add(Activity(
            type=ActivityType.ORDER_UPDATED,
            title="Order updated",
            order_id=order.id,
            created_at=utcnow(),
        ))
        db_session.commit()

        resp = client.get(f"/api/super-admin/laundries/{laundry_a.id}/activity", headers=headers_for(super_admin))
        assert resp.status_code == 200
        data = resp.json["data"]

        assert data["laundry"]["id"] == laundry_a.id
        assert {a["order_id"] for a in data["activities"]} == {order.id}
        assert data["summary"] == {"ORDER_CREATED": 1, "ORDER_CONFIRMED": 1, "ORDER_UPDATED": 1}
        assert data["pagination"]["total"] == 3
        assert data["activities"][0]["type"] == "ORDER_UPDATED"

    def test_feed_paginates(self, client, db_session, super_admin, customer, laundry_a):
        for _ in range(3):
            create_order(principal_for(customer), laundry_a.id, total_amount=Decimal("5.00"))

        resp = client.get(
            f"/api/super-admin/laundries/{laundry_a.id}/activity?limit=2&page=2",
            headers=headers_for(super_admin),
        )
        data = resp.json["data"]
        assert len(data["activities"]) == 1
        assert data["pagination"]["pages"] == 2
        assert data["summary"] == {"ORDER_CREATED": 3}

    def test_unknown_laundry(self, client, super_admin):
        resp = client.get("/api/super-admin/laundries/99999/activity", headers=headers_for(super_admin))
        assert resp.status_code == 404

    def test_admin_refused_even_for_own_laundry(self, client, admin_a, laundry_a):
        resp = client.get(f"/api/super-admin/laundries/{laundry_a.id}/activity", headers=headers_for(admin_a))
        assert resp.status_code == 403
