def test_add_and_check_wishlist(client, menu_items):
    added = client.post("/api/wishlist", json={"menuItemId": 1, "guestId": "guest-1"})
    check = client.get("/api/wishlist/check", params={"menuItemId": 1, "guestId": "guest-1"})
    other = client.get("/api/wishlist/check", params={"menuItemId": 1, "userId": "user-9"})

    assert added.status_code == 201
    assert added.json()["menu_item"]["name"] == "Latte"
    assert check.json() == {"isInWishlist": True}
    assert other.json() == {"isInWishlist": False}


def test_duplicate_wishlist_entry_conflicts(client, menu_items):
    client.post("/api/wishlist", json={"menuItemId": 1, "userId": "user-1"})

    response = client.post("/api/wishlist", json={"menuItemId": 1, "userId": "user-1"})

    assert response.status_code == 409
    assert response.json() == {"error": "Item already in wishlist"}


def test_wishlist_requires_owner(client, menu_items):
    response = client.post("/api/wishlist", json={"menuItemId": 1})

    assert response.status_code == 400
    assert response.json()["error"] == "Menu item ID and user ID or guest ID are required"


def test_wishlist_unknown_menu_item(client):
    response = client.post("/api/wishlist", json={"menuItemId": 404, "guestId": "g"})

    assert response.status_code == 404


def test_remove_from_wishlist(client, menu_items):
    client.post("/api/wishlist", json={"menuItemId": 2, "guestId": "g"})

    removed = client.delete("/api/wishlist", params={"menuItemId": 2, "guestId": "g"})
    again = client.delete("/api/wishlist", params={"menuItemId": 2, "guestId": "g"})

    assert removed.json() == {"success": True}
    assert again.status_code == 404
    assert again.json() == {"error": "Item not found in wishlist"}


def test_counts_top_and_user_list(client, menu_items):
    client.post("/api/wishlist", json={"menuItemId": 2, "guestId": "a"})
    client.post("/api/wishlist", json={"menuItemId": 2, "guestId": "b"})
    client.post("/api/wishlist", json={"menuItemId": 1, "guestId": "a"})

    counts = client.get("/api/wishlist").json()
    top = client.get("/api/wishlist/top", params={"limit": 1}).json()
    mine = client.get("/api/wishlist/user", params={"guestId": "a"}).json()

    assert counts == [{"menu_item_id": 2, "count": 2}, {"menu_item_id": 1, "count": 1}]
    assert [(item["name"], item["wishlist_count"]) for item in top] == [("Croissant", 2)]
    assert {entry["menu_item_id"] for entry in mine} == {1, 2}


def test_user_wishlist_requires_owner(client):
    response = client.get("/api/wishlist/user")

    assert response.status_code == 400
