"""
Favorite Repository - Data Access Layer for Favorites

Author: Tekashi
Date: 2025-10-28
"""
from typing import List, Optional, Tuple

from tekashi.domain.favorite import Favorite, FavoriteCreate
from tekashi.repositories.base import BaseRepository
from tekashi.repositories.product_repository import ProductRepository, ON_OFFER_CONDITION

FAVORITE_COLUMNS = """
    f.id, f.user_id, f.product_id, f.is_active, f.notes, f.priority,
    f.notify_offer, f.notify_stock, f.view_count, f.last_viewed_at,
    f.created_at, f.updated_at
"""


class FavoriteRepository(BaseRepository):
    """Repository for Favorite data access"""

    def __init__(self, product_repository: Optional[ProductRepository] = None):
        self.products = product_repository or ProductRepository()

    @staticmethod
    def _map_row_to_favorite(row: dict) -> Favorite:
        return Favorite(
            id=row['id'],
            user_id=row['user_id'],
            product_id=row['product_id'],
            is_active=row['is_active'],
            notes=row['notes'],
            priority=row['priority'],
            notify_offer=row['notify_offer'],
            notify_stock=row['notify_stock'],
            view_count=row['view_count'],
            last_viewed_at=row['last_viewed_at'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def _with_products(self, favorites: List[Favorite]) -> List[Favorite]:
        """Attach products with one batch query"""
        products = self.products.find_by_ids(f.product_id for f in favorites)
        for favorite in favorites:
            favorite.product = products.get(favorite.product_id)
        return favorites

    def find(self, user_id: int, product_id: int) -> Optional[Favorite]:
        """Favorite for the pair, active or not"""
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {FAVORITE_COLUMNS}
                FROM favorites f
                WHERE f.user_id = %s AND f.product_id = %s
            """, (user_id, product_id))
            row = cursor.fetchone()
            return self._map_row_to_favorite(row) if row else None

    def find_by_user(self, user_id: int, limit: int = 20, offset: int = 0) -> Tuple[List[Favorite], int]:
        """Active favorites of a user, highest priority and newest first"""
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT COUNT(*) as total
                FROM favorites
                WHERE user_id = %s AND is_active = TRUE
            """, (user_id,))
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {FAVORITE_COLUMNS}
                FROM favorites f
                WHERE f.user_id = %s AND f.is_active = TRUE
                ORDER BY f.priority DESC, f.created_at DESC
                LIMIT %s OFFSET %s
            """, (user_id, limit, offset))
            favorites = [self._map_row_to_favorite(row) for row in cursor.fetchall()]

        return self._with_products(favorites), total

    def find_by_product(self, product_id: int, limit: int = 20, offset: int = 0) -> Tuple[List[dict], int]:
        """Users who have the product as an active favorite"""
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT COUNT(*) as total
                FROM favorites
                WHERE product_id = %s AND is_active = TRUE
            """, (product_id,))
            total = cursor.fetchone()['total']

            cursor.execute("""
                SELECT u.id AS user_id, u.name, u.email, f.priority, f.created_at
                FROM favorites f
                JOIN users u ON u.id = f.user_id
                WHERE f.product_id = %s AND f.is_active = TRUE
                ORDER BY f.created_at DESC
                LIMIT %s OFFSET %s
            """, (product_id, limit, offset))
            return [dict(row) for row in cursor.fetchall()], total

    def add(self, user_id: int, data: FavoriteCreate) -> Favorite:
        """Insert, or reactivate a previously removed favorite for the same pair"""
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                INSERT INTO favorites AS f (
                    user_id, product_id, notes, priority, notify_offer, notify_stock
                ) VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (user_id, product_id) DO UPDATE SET
                    is_active = TRUE,
                    notes = EXCLUDED.notes,
                    priority = EXCLUDED.priority,
                    notify_offer = EXCLUDED.notify_offer,
                    notify_stock = EXCLUDED.notify_stock,
                    created_at = NOW(),
                    updated_at = NOW()
                RETURNING {FAVORITE_COLUMNS}
            """, (
                user_id, data.product_id, data.notes, data.priority,
                data.notify_offer, data.notify_stock
            ))
            return self._map_row_to_favorite(cursor.fetchone())

    def _update_active(self, user_id: int, product_id: int, set_clause: str, params: list) -> Optional[Favorite]:
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                UPDATE favorites AS f SET {set_clause}
                WHERE f.user_id = %s AND f.product_id = %s AND f.is_active = TRUE
                RETURNING {FAVORITE_COLUMNS}
            """, params + [user_id, product_id])
            row = cursor.fetchone()
            return self._map_row_to_favorite(row) if row else None

    def remove(self, user_id: int, product_id: int) -> Optional[Favorite]:
        """Soft delete; None when there was no active favorite"""
        return self._update_active(user_id, product_id, "is_active = FALSE, updated_at = NOW()", [])

    def update(self, user_id: int, product_id: int, fields: dict) -> Optional[Favorite]:
        if not fields:
            favorite = self.find(user_id, product_id)
            return favorite if favorite and favorite.is_active else None
        set_clause, params = self._set_clause(fields)
        return self._update_active(user_id, product_id, set_clause, params)

    def record_view(self, user_id: int, product_id: int) -> Optional[Favorite]:
        return self._update_active(
            user_id, product_id,
            "view_count = view_count + 1, last_viewed_at = NOW()", []
        )

    def get_stats(self, user_id: int) -> dict:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT
                    COUNT(*) AS total,
                    COUNT(DISTINCT product_id) AS unique_products,
                    COUNT(*) FILTER (WHERE notify_offer) AS notify_offer,
                    COUNT(*) FILTER (WHERE notify_stock) AS notify_stock
                FROM favorites
                WHERE user_id = %s AND is_active = TRUE
            """, (user_id,))
            totals = cursor.fetchone()

            cursor.execute("""
                SELECT priority, COUNT(*) AS count
                FROM favorites
                WHERE user_id = %s AND is_active = TRUE
                GROUP BY priority
            """, (user_id,))
            by_priority = {priority: 0 for priority in range(1, 6)}
            for row in cursor.fetchall():
                by_priority[row['priority']] = row['count']

            return {
                'total': totals['total'],
                'unique_products': totals['unique_products'],
                'notify_offer': totals['notify_offer'],
                'notify_stock': totals['notify_stock'],
                'by_priority': by_priority,
            }

    def find_on_offer(self, user_id: int) -> List[Favorite]:
        """Active favorites with offer alerts whose product has a running offer"""
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {FAVORITE_COLUMNS}
                FROM favorites f
                JOIN products p ON p.id = f.product_id
                WHERE f.user_id = %s AND f.is_active = TRUE AND f.notify_offer = TRUE
                  AND p.is_active = TRUE AND {ON_OFFER_CONDITION}
                ORDER BY p.offer_discount DESC
            """, (user_id,))
            favorites = [self._map_row_to_favorite(row) for row in cursor.fetchall()]

        return self._with_products(favorites)

    def find_low_stock(self, user_id: int, threshold: int) -> List[Favorite]:
        """Active favorites with stock alerts whose product has stock <= threshold"""
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {FAVORITE_COLUMNS}
                FROM favorites f
                JOIN products p ON p.id = f.product_id
                WHERE f.user_id = %s AND f.is_active = TRUE AND f.notify_stock = TRUE
                  AND p.is_active = TRUE AND p.stock <= %s
                ORDER BY p.stock ASC
            """, (user_id, threshold))
            favorites = [self._map_row_to_favorite(row) for row in cursor.fetchall()]

        return self._with_products(favorites)
