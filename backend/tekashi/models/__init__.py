"""
Database table models (schema definition)
"""
from .user import User
from .product import ProductType, Product, Image
from .order import Order, OrderItem
from .engagement import Favorite, Wishlist, WishlistItem, Notification, Review

__all__ = [
    "User",
    "ProductType",
    "Product",
    "Image",
    "Order",
    "OrderItem",
    "Favorite",
    "Wishlist",
    "WishlistItem",
    "Notification",
    "Review",
]
