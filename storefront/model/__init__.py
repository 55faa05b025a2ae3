# ------ storefront/model/__init__.py ------

from .user import User, CartItem
from .product import Product
from .coupon import Coupon
from .order import Order, OrderItem
from .types import GUID, Role, parse_guid

__all__ = [
    "User",
    "CartItem",
    "Product",
    "Coupon",
    "Order",
    "OrderItem",
    "GUID",
    "Role",
    "parse_guid",
]
