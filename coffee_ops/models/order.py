from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from coffee_ops.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey("members.id"), index=True, nullable=True)

    # Guest checkout fields; members also get a snapshot here
    customer_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)

    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), default="pending", index=True, nullable=False)
    order_type = Column(String(20), default="dine-in", nullable=False)
    payment_method = Column(String(30), default="cash", nullable=False)
    notes = Column(Text, nullable=True)
    points_earned = Column(Integer, default=0, nullable=False)
    points_used = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    member = relationship("Member", back_populates="orders")
