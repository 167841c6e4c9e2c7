from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from coffee_ops.core.database import Database
from coffee_ops.core.metrics import request_metrics
from coffee_ops.main import create_app
from coffee_ops.models.inventory import InventoryItem
from coffee_ops.models.member import Member
from coffee_ops.models.menu_item import MenuItem


@pytest.fixture
def database():
    db = Database("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
    db.open()
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def client(database):
    request_metrics.reset()
    return TestClient(create_app(database=database))


@pytest.fixture
def session(database):
    db = database.session()
    yield db
    db.close()


@pytest.fixture
def menu_items(session):
    items = [
        MenuItem(id=1, name="Latte", price=Decimal("4.50"), category="Coffee"),
        MenuItem(id=2, name="Croissant", price=Decimal("3.50"), category="Pastry"),
        MenuItem(id=3, name="Seasonal Tart", price=Decimal("6.00"), category="Pastry", is_available=False),
    ]
    session.add_all(items)
    session.commit()
    return items


@pytest.fixture
def member(session):
    record = Member(id=10, name="Ana", email="ana@example.com", phone="555-0100", balance=Decimal("50.00"), points=0)
    session.add(record)
    session.commit()
    return record


@pytest.fixture
def inventory_item(session):
    item = InventoryItem(
        id=5,
        name="Milk",
        sku="MILK-001",
        category="Ingredients",
        current_stock=Decimal("10"),
        minimum_stock=Decimal("5"),
        unit="liters",
        cost_per_unit=Decimal("2.50"),
    )
    session.add(item)
    session.commit()
    return item
