from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from coffee_ops.core.database import Base


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_members_balance_non_negative"),
        CheckConstraint("points >= 0", name="ck_members_points_non_negative"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(50), unique=True, nullable=True)
    membership_level = Column(String(20), default="Bronze", nullable=False)
    points = Column(Integer, default=0, nullable=False)
    balance = Column(Numeric(10, 2), default=0, nullable=False)
    member_since = Column(Date, server_default=func.current_date(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    transactions = relationship("MemberTransaction", back_populates="member")
    orders = relationship("Order", back_populates="member")


class MemberTransaction(Base):
    __tablename__ = "member_transactions"

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey("members.id"), index=True, nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=True)
    transaction_type = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    balance_after = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    member = relationship("Member", back_populates="transactions")
