from coffee_ops.models.menu_item import MenuItem
from coffee_ops.models.category import Category
from coffee_ops.models.inventory import InventoryItem, InventoryTransaction
from coffee_ops.models.member import Member, MemberTransaction
from coffee_ops.models.order import Order
from coffee_ops.models.order_item import OrderItem
from coffee_ops.models.reservation import Reservation
from coffee_ops.models.user import User
from coffee_ops.models.wishlist import WishlistItem

__all__ = [
    "Category",
    "InventoryItem",
    "InventoryTransaction",
    "Member",
    "MemberTransaction",
    "MenuItem",
    "Order",
    "OrderItem",
    "Reservation",
    "User",
    "WishlistItem",
]
