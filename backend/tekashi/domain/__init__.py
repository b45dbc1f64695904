"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.

Author: Tekashi
Date: 2025-10-21
"""
from tekashi.domain.user import User
from tekashi.domain.product import Product
from tekashi.domain.product_type import ProductType
from tekashi.domain.order import Order, OrderItem, OrderStatus
from tekashi.domain.favorite import Favorite
from tekashi.domain.wishlist import Wishlist, WishlistItem
from tekashi.domain.notification import Notification
from tekashi.domain.review import Review
from tekashi.domain.image import Image

__all__ = [
    'User',
    'Product',
    'ProductType',
    'Order',
    'OrderItem',
    'OrderStatus',
    'Favorite',
    'Wishlist',
    'WishlistItem',
    'Notification',
    'Review',
    'Image',
]
