"""
Service Layer - Business rules that span several repositories

Author: Tekashi
Date: 2025-10-30
"""
from tekashi.services.order_service import OrderService
from tekashi.services.catalog_service import CatalogService
from tekashi.services.review_service import ReviewService
from tekashi.services.wishlist_service import WishlistService

__all__ = [
    'OrderService',
    'CatalogService',
    'ReviewService',
    'WishlistService',
]
