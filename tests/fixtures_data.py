"""Reusable payloads for backend test scenarios."""

MENU_ITEM_PAYLOAD = {
    "name": "Flat White",
    "price": 4.25,
    "category": "Coffee",
    "description": "Ristretto with microfoam",
}

GUEST_ORDER_PAYLOAD = {
    "customer_name": "Walk-in",
    "order_type": "takeout",
    "payment_method": "cash",
    "items": [
        {"menu_item_id": 1, "quantity": 2, "price": 4.50},
        {"menu_item_id": 2, "quantity": 1, "price": 3.50},
    ],
}

INVENTORY_ITEM_PAYLOAD = {
    "name": "Oat Milk",
    "sku": "OAT-001",
    "category": "Ingredients",
    "current_stock": 12,
    "minimum_stock": 4,
    "unit": "liters",
    "cost_per_unit": 3.10,
    "supplier": "Oatly",
}

RESERVATION_PAYLOAD = {
    "customer_name": "John Smith",
    "customer_phone": "555-123-4567",
    "party_size": 4,
    "reservation_time": "2031-05-20T18:00:00Z",
}

MEMBER_PAYLOAD = {
    "name": "Bruno",
    "email": "Bruno@Example.com",
    "phone": "555-0199",
}

USER_PAYLOAD = {
    "email": "Carla@Example.com",
    "password": "latte-art-42",
    "name": "Carla",
}
