"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.

Author: Tekashi
Date: 2025-10-26
"""
from tekashi.repositories.user_repository import UserRepository
from tekashi.repositories.product_repository import ProductRepository
from tekashi.repositories.product_type_repository import ProductTypeRepository
from tekashi.repositories.order_repository import OrderRepository
from tekashi.repositories.favorite_repository import FavoriteRepository
from tekashi.repositories.wishlist_repository import WishlistRepository
from tekashi.repositories.notification_repository import NotificationRepository
from tekashi.repositories.review_repository import ReviewRepository
from tekashi.repositories.image_repository import ImageRepository

__all__ = [
    'UserRepository',
    'ProductRepository',
    'ProductTypeRepository',
    'OrderRepository',
    'FavoriteRepository',
    'WishlistRepository',
    'NotificationRepository',
    'ReviewRepository',
    'ImageRepository',
]
