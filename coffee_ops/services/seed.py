from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from coffee_ops.models.category import Category
from coffee_ops.models.inventory import InventoryItem
from coffee_ops.models.member import Member
from coffee_ops.models.menu_item import MenuItem
from coffee_ops.models.reservation import Reservation

logger = logging.getLogger(__name__)

SAMPLE_CATEGORIES = [
    ("Coffee", "Espresso drinks and brewed coffee"),
    ("Pastry", "Baked fresh every morning"),
    ("Food", "Breakfast and light lunch"),
]

SAMPLE_MENU = [
    ("Espresso", "3.50", "Coffee", "Strong black coffee made by forcing steam through ground coffee beans"),
    ("Cappuccino", "4.50", "Coffee", "Espresso with steamed milk and foam"),
    ("Latte", "4.75", "Coffee", "Espresso with steamed milk"),
    ("Americano", "3.75", "Coffee", "Espresso with hot water"),
    ("Mocha", "5.25", "Coffee", "Espresso with chocolate and steamed milk"),
    ("Croissant", "3.25", "Pastry", "Buttery, flaky pastry"),
    ("Blueberry Muffin", "3.50", "Pastry", "Moist muffin filled with blueberries"),
    ("Chocolate Chip Cookie", "2.50", "Pastry", "Classic cookie with chocolate chips"),
    ("Avocado Toast", "8.50", "Food", "Toasted bread with avocado spread"),
    ("Breakfast Sandwich", "7.50", "Food", "Egg, cheese, and bacon on a bagel"),
]

SAMPLE_INVENTORY = [
    ("Coffee Beans (Arabica)", "CB-ARA-001", "Ingredients", "50", "10", "kg", "15.00"),
    ("Milk", "MILK-001", "Ingredients", "30", "5", "liters", "2.50"),
    ("Sugar", "SUGAR-001", "Ingredients", "25", "5", "kg", "1.75"),
    ("Chocolate Syrup", "CHOC-SYR-001", "Ingredients", "10", "2", "bottles", "4.50"),
    ("Paper Cups (Small)", "CUP-SM-001", "Supplies", "200", "50", "pieces", "0.10"),
    ("Paper Cups (Medium)", "CUP-MD-001", "Supplies", "150", "30", "pieces", "0.15"),
    ("Paper Cups (Large)", "CUP-LG-001", "Supplies", "100", "20", "pieces", "0.20"),
    ("Napkins", "NAP-001", "Supplies", "500", "100", "pieces", "0.02"),
    ("Coffee Filters", "FILT-001", "Supplies", "300", "50", "pieces", "0.05"),
    ("To-Go Lids", "LID-001", "Supplies", "400", "75", "pieces", "0.08"),
]

SAMPLE_RESERVATIONS = [
    ("John Smith", "555-123-4567", 2, 1, "confirmed"),
    ("Jane Doe", "555-987-6543", 4, 2, "confirmed"),
    ("Mike Johnson", "555-456-7890", 6, 3, "pending"),
]

DEMO_MEMBER = {
    "name": "Demo Member",
    "email": "demo@coffeeshop.test",
    "phone": "555-000-0000",
    "membership_level": "Gold",
    "points": 350,
    "balance": Decimal("45.50"),
}


def seed_sample_data(db: Session) -> dict[str, int]:
    """Insert sample rows that are not already present; safe to run repeatedly."""
    created = {"categories": 0, "menu_items": 0, "inventory_items": 0, "members": 0, "reservations": 0}

    existing_categories = {name for (name,) in db.query(Category.name).all()}
    for position, (name, description) in enumerate(SAMPLE_CATEGORIES, start=1):
        if name in existing_categories:
            continue
        db.add(Category(name=name, description=description, display_order=position, is_active=True))
        created["categories"] += 1

    existing_menu = {name for (name,) in db.query(MenuItem.name).all()}
    for name, price, category, description in SAMPLE_MENU:
        if name in existing_menu:
            continue
        db.add(MenuItem(name=name, price=Decimal(price), category=category, description=description))
        created["menu_items"] += 1

    existing_skus = {sku for (sku,) in db.query(InventoryItem.sku).all()}
    for name, sku, category, stock, minimum, unit, cost in SAMPLE_INVENTORY:
        if sku in existing_skus:
            continue
        db.add(
            InventoryItem(
                name=name,
                sku=sku,
                category=category,
                current_stock=Decimal(stock),
                minimum_stock=Decimal(minimum),
                unit=unit,
                cost_per_unit=Decimal(cost),
            )
        )
        created["inventory_items"] += 1

    if not db.query(Member.id).filter(Member.email == DEMO_MEMBER["email"]).first():
        db.add(Member(**DEMO_MEMBER))
        created["members"] += 1

    if not db.query(Reservation.id).first():
        now = datetime.now(timezone.utc).replace(tzinfo=None, minute=0, second=0, microsecond=0)
        for name, phone, party_size, days_ahead, status in SAMPLE_RESERVATIONS:
            db.add(
                Reservation(
                    customer_name=name,
                    customer_phone=phone,
                    party_size=party_size,
                    reservation_time=now + timedelta(days=days_ahead),
                    status=status,
                )
            )
            created["reservations"] += 1

    db.flush()
    logger.info("sample data seeded %s", created)
    return created
