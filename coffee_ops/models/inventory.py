from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from coffee_ops.core.database import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), unique=True, nullable=False)
    category = Column(String(100), index=True, nullable=False)
    current_stock = Column(Numeric(10, 2), default=0, nullable=False)
    minimum_stock = Column(Numeric(10, 2), default=0, nullable=False)
    unit = Column(String(50), nullable=False)
    cost_per_unit = Column(Numeric(10, 2), nullable=False)
    supplier = Column(String(255), nullable=True)
    last_restock_date = Column(DateTime(timezone=True), nullable=True)
    expiry_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    transactions = relationship("InventoryTransaction", back_populates="inventory_item")


class InventoryTransaction(Base):
    __tablename__ = "inventory_transactions"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_inventory_transactions_quantity_positive"),)

    id = Column(Integer, primary_key=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), index=True, nullable=False)
    type = Column(String(20), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_cost = Column(Numeric(10, 2), nullable=True)
    total_cost = Column(Numeric(10, 2), nullable=True)
    reason = Column(Text, nullable=True)
    reference_id = Column(String(100), nullable=True)
    created_by = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    inventory_item = relationship("InventoryItem", back_populates="transactions")
