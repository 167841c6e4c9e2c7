from copy import deepcopy
from decimal import Decimal

import pytest

from coffee_ops.core.errors import ConflictError
from coffee_ops.models.member import Member, MemberTransaction
from coffee_ops.models.order import Order
from coffee_ops.models.order_item import OrderItem
from coffee_ops.services import orders as order_service
from tests.fixtures_data import GUEST_ORDER_PAYLOAD


def _member_state(session, member_id=10):
    session.expire_all()
    return session.query(Member).filter(Member.id == member_id).one()


def test_guest_order_persists_order_and_lines(client, session, menu_items):
    response = client.post("/api/orders", json=GUEST_ORDER_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["total_amount"] == 12.5
    assert body["status"] == "pending"
    assert body["points_earned"] == 0
    assert len(body["items"]) == 2
    assert body["items"][0]["subtotal"] == 9.0
    assert session.query(OrderItem).filter(OrderItem.order_id == body["id"]).count() == 2


def test_order_line_price_defaults_to_menu_price(client, menu_items):
    payload = {"items": [{"menuItemId": 1, "qty": 3}]}

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 201
    assert response.json()["total_amount"] == 13.5
    assert response.json()["items"][0]["menu_item_name"] == "Latte"


def test_order_rejects_unavailable_menu_item(client, session, menu_items):
    response = client.post("/api/orders", json={"items": [{"menu_item_id": 3, "quantity": 1}]})

    assert response.status_code == 409
    assert session.query(Order).count() == 0


def test_order_requires_items(client):
    response = client.post("/api/orders", json={"customer_name": "Nobody", "items": []})

    assert response.status_code == 400
    assert response.json()["error"] == "Order must contain at least one item"


def test_order_rejects_unknown_payment_method(client, menu_items):
    payload = deepcopy(GUEST_ORDER_PAYLOAD)
    payload["payment_method"] = "iou"

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid payment method")


def test_account_balance_order_debits_member_and_awards_points(client, session, menu_items, member):
    payload = deepcopy(GUEST_ORDER_PAYLOAD)
    payload.update({"member_id": 10, "payment_method": "account_balance"})

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 201
    assert response.json()["points_earned"] == 12
    state = _member_state(session)
    assert state.balance == Decimal("37.50")
    assert state.points == 12
    entry = session.query(MemberTransaction).one()
    assert entry.transaction_type == "purchase"
    assert entry.order_id == response.json()["id"]
    assert entry.balance_after == Decimal("37.50")


def test_account_balance_order_with_insufficient_funds_is_rolled_back(client, session, menu_items, member):
    payload = {
        "member_id": 10,
        "payment_method": "account_balance",
        "items": [{"menu_item_id": 1, "quantity": 12}],
    }

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 409
    assert response.json() == {"error": "Insufficient balance"}
    assert _member_state(session).balance == Decimal("50.00")
    assert _member_state(session).points == 0
    assert session.query(Order).count() == 0
    assert session.query(OrderItem).count() == 0


def test_account_balance_requires_member(client, menu_items):
    payload = deepcopy(GUEST_ORDER_PAYLOAD)
    payload["payment_method"] = "account_balance"

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 400


def test_redeeming_more_points_than_held_is_rejected(client, session, menu_items, member):
    payload = deepcopy(GUEST_ORDER_PAYLOAD)
    payload.update({"member_id": 10, "points_used": 500})

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 409
    assert response.json() == {"error": "Insufficient points"}
    assert session.query(Order).count() == 0


def test_status_moves_forward_only(client, menu_items):
    order_id = client.post("/api/orders", json=GUEST_ORDER_PAYLOAD).json()["id"]

    confirmed = client.patch(f"/api/orders/{order_id}", json={"status": "confirmed"})
    backwards = client.patch(f"/api/orders/{order_id}", json={"status": "pending"})
    invalid = client.patch(f"/api/orders/{order_id}", json={"status": "lost"})

    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"
    assert backwards.status_code == 409
    assert invalid.status_code == 400
    assert invalid.json()["error"].startswith("Invalid status. Must be one of:")


def test_completed_order_cannot_be_cancelled(client, menu_items):
    order_id = client.post("/api/orders", json=GUEST_ORDER_PAYLOAD).json()["id"]
    client.patch(f"/api/orders/{order_id}", json={"status": "completed"})

    response = client.patch(f"/api/orders/{order_id}", json={"status": "cancelled"})

    assert response.status_code == 409


def test_cancelling_balance_order_refunds_member(client, session, menu_items, member):
    payload = deepcopy(GUEST_ORDER_PAYLOAD)
    payload.update({"member_id": 10, "payment_method": "account_balance"})
    order_id = client.post("/api/orders", json=payload).json()["id"]

    response = client.patch(f"/api/orders/{order_id}", json={"status": "cancelled"})

    assert response.status_code == 200
    assert _member_state(session).balance == Decimal("50.00")
    types = [entry.transaction_type for entry in session.query(MemberTransaction).order_by(MemberTransaction.id)]
    assert types == ["purchase", "refund"]


def test_list_orders_filters_and_stats(client, menu_items, member):
    client.post("/api/orders", json=GUEST_ORDER_PAYLOAD)
    member_payload = deepcopy(GUEST_ORDER_PAYLOAD)
    member_payload["memberId"] = 10
    member_order = client.post("/api/orders", json=member_payload).json()
    client.patch(f"/api/orders/{member_order['id']}", json={"status": "confirmed"})

    pending = client.get("/api/orders", params={"status": "pending"}).json()
    mine = client.get("/api/orders/member", params={"memberId": 10}).json()
    stats = client.get("/api/orders/stats").json()

    assert len(pending) == 1
    assert [order["id"] for order in mine] == [member_order["id"]]
    assert stats["pending"] == 1
    assert stats["confirmed"] == 1
    assert stats["cancelled"] == 0


def test_member_orders_require_member_id(client):
    response = client.get("/api/orders/member")

    assert response.status_code == 400
    assert response.json() == {"error": "Member ID is required"}


def test_get_missing_order(client):
    response = client.get("/api/orders/123")

    assert response.status_code == 404
    assert response.json() == {"error": "Order not found"}


def test_order_total_is_sum_of_line_prices(client):
    payload = {
        "items": [
            {"name": "Sandwich", "price": 6, "quantity": 1},
            {"name": "Muffin", "price": 3.5, "quantity": 1},
            {"name": "Drip", "price": 3, "quantity": 1},
        ]
    }

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 201
    assert response.json()["total_amount"] == 12.5
    assert response.json()["status"] == "pending"
    assert [item["menu_item_id"] for item in response.json()["items"]] == [None, None, None]


def test_points_earned_by_the_order_cannot_fund_its_own_redemption(client, session, menu_items, member):
    payload = {
        "member_id": 10,
        "items": [
            {"menu_item_id": 1, "quantity": 1, "price": 6},
            {"menu_item_id": 2, "quantity": 1, "price": 3.5},
            {"menu_item_id": 2, "quantity": 1, "price": 3},
        ],
        "points_used": 5,
    }

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 409
    assert response.json() == {"error": "Insufficient points"}
    assert session.query(Order).count() == 0
    assert _member_state(session).points == 0


def test_stale_cancel_does_not_refund_twice(client, session, menu_items, member):
    payload = deepcopy(GUEST_ORDER_PAYLOAD)
    payload.update({"member_id": 10, "payment_method": "account_balance"})
    order_id = client.post("/api/orders", json=payload).json()["id"]
    assert session.get(Order, order_id).status == "pending"

    first = client.patch(f"/api/orders/{order_id}", json={"status": "cancelled"})
    assert first.status_code == 200

    # This session still holds the order as pending
    with pytest.raises(ConflictError):
        order_service.update_status(session, order_id, "cancelled")

    assert _member_state(session).balance == Decimal("50.00")
    refunds = session.query(MemberTransaction).filter(MemberTransaction.transaction_type == "refund").count()
    assert refunds == 1
