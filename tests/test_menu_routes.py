from coffee_ops.models.menu_item import MenuItem
from coffee_ops.models.order import Order
from coffee_ops.models.order_item import OrderItem
from coffee_ops.models.wishlist import WishlistItem
from tests.fixtures_data import MENU_ITEM_PAYLOAD


def test_list_menu_filters_by_category_and_availability(client, menu_items):
    pastries = client.get("/api/menu", params={"category": "Pastry"}).json()
    available = client.get("/api/menu", params={"available": "true"}).json()

    assert [item["name"] for item in pastries] == ["Croissant", "Seasonal Tart"]
    assert {item["name"] for item in available} == {"Latte", "Croissant"}


def test_menu_categories_are_distinct_and_sorted(client, menu_items):
    response = client.get("/api/menu/categories")

    assert response.status_code == 200
    assert response.json() == ["Coffee", "Pastry"]


def test_create_menu_item_returns_created_row(client):
    response = client.post("/api/menu", json=MENU_ITEM_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] > 0
    assert body["price"] == 4.25
    assert body["is_available"] is True


def test_create_menu_item_requires_core_fields(client):
    response = client.post("/api/menu", json={"name": "Mystery"})

    assert response.status_code == 400
    assert response.json()["error"] == "Name, price, and category are required"


def test_get_missing_menu_item_returns_not_found(client):
    response = client.get("/api/menu/404")

    assert response.status_code == 404
    assert response.json() == {"error": "Menu item not found"}


def test_update_menu_item_changes_only_sent_fields(client, menu_items):
    response = client.put("/api/menu/1", json={"price": 4.95})

    assert response.status_code == 200
    body = response.json()
    assert body["price"] == 4.95
    assert body["name"] == "Latte"


def test_toggle_availability_flips_flag(client, menu_items):
    first = client.put("/api/menu/3/toggle-availability")
    second = client.put("/api/menu/3/toggle-availability")

    assert first.json()["is_available"] is True
    assert second.json()["is_available"] is False


def test_delete_menu_item_detaches_orders_and_wishlist(client, session, menu_items):
    order = Order(total_amount=4.5, status="completed")
    order.items.append(OrderItem(menu_item_id=1, menu_item_name="Latte", quantity=1, unit_price=4.5, subtotal=4.5))
    session.add(order)
    session.add(WishlistItem(menu_item_id=1, guest_id="guest-1"))
    session.commit()

    response = client.delete("/api/menu/1")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    session.expire_all()
    assert session.query(MenuItem).filter(MenuItem.id == 1).first() is None
    assert session.query(WishlistItem).count() == 0
    line = session.query(OrderItem).one()
    assert line.menu_item_id is None
    assert line.menu_item_name == "Latte"


def test_create_menu_item_without_category(client):
    response = client.post("/api/menu", json={"name": "Latte", "price": 4.5})

    assert response.status_code == 400
    assert response.json()["error"] == "Name, price, and category are required"


def test_update_menu_item_clears_nullable_fields_only(client, session, menu_items):
    client.put("/api/menu/1", json={"description": "Double shot"})

    cleared = client.put("/api/menu/1", json={"description": None})
    rejected = client.put("/api/menu/1", json={"name": None})

    assert cleared.status_code == 200
    assert cleared.json()["description"] is None
    assert rejected.status_code == 400
    assert rejected.json() == {"error": "name cannot be null"}
    session.expire_all()
    assert session.get(MenuItem, 1).name == "Latte"
