"""
Wishlist Repository - Data Access Layer for Wishlists and their items

Author: Tekashi
Date: 2025-10-28
"""
from typing import List, Optional, Dict

from psycopg2.extras import Json

from tekashi.domain.wishlist import (
    Wishlist, WishlistItem, WishlistCreate, WishlistItemCreate, ShareSettings, NotifySettings,
)
from tekashi.repositories.base import BaseRepository
from tekashi.repositories.product_repository import ProductRepository

WISHLIST_COLUMNS = """
    id, user_id, name, description, is_active, is_public,
    share_code, share_expires_at, share_max_uses, share_use_count,
    notify, views, last_viewed_at, created_at, updated_at
"""

ITEM_COLUMNS = "id, wishlist_id, product_id, notes, priority, quantity, added_at"


class WishlistRepository(BaseRepository):
    """Repository for Wishlist data access"""

    def __init__(self, product_repository: Optional[ProductRepository] = None):
        self.products = product_repository or ProductRepository()

    @staticmethod
    def _map_row_to_item(row: dict) -> WishlistItem:
        return WishlistItem(
            id=row['id'],
            wishlist_id=row['wishlist_id'],
            product_id=row['product_id'],
            notes=row['notes'],
            priority=row['priority'],
            quantity=row['quantity'],
            added_at=row['added_at']
        )

    @staticmethod
    def _map_row_to_wishlist(row: dict, items: List[WishlistItem]) -> Wishlist:
        return Wishlist(
            id=row['id'],
            user_id=row['user_id'],
            name=row['name'],
            description=row['description'],
            items=items,
            is_active=row['is_active'],
            is_public=row['is_public'],
            share=ShareSettings(
                code=row['share_code'],
                expires_at=row['share_expires_at'],
                max_uses=row['share_max_uses'],
                use_count=row['share_use_count'],
            ),
            notify=NotifySettings(**(row['notify'] or {})),
            views=row['views'],
            last_viewed_at=row['last_viewed_at'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def _hydrate(self, cursor, rows: List[dict]) -> List[Wishlist]:
        """Load items for the given wishlist rows and attach their products"""
        wishlist_ids = [row['id'] for row in rows]
        items_by_list: Dict[int, List[WishlistItem]] = {wishlist_id: [] for wishlist_id in wishlist_ids}

        if wishlist_ids:
            cursor.execute(f"""
                SELECT {ITEM_COLUMNS}
                FROM wishlist_items
                WHERE wishlist_id = ANY(%s)
                ORDER BY priority DESC, added_at
            """, (wishlist_ids,))
            for row in cursor.fetchall():
                items_by_list[row['wishlist_id']].append(self._map_row_to_item(row))

        all_items = [item for items in items_by_list.values() for item in items]
        products = self.products.find_by_ids(item.product_id for item in all_items)
        for item in all_items:
            item.product = products.get(item.product_id)

        return [self._map_row_to_wishlist(row, items_by_list[row['id']]) for row in rows]

    def _select_one(self, column: str, value) -> Optional[Wishlist]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {WISHLIST_COLUMNS}
                FROM wishlists
                WHERE {column} = %s AND is_active = TRUE
            """, (value,))
            row = cursor.fetchone()
            if not row:
                return None
            return self._hydrate(cursor, [row])[0]

    def find_by_id(self, wishlist_id: int) -> Optional[Wishlist]:
        """Active wishlist by id"""
        return self._select_one("id", wishlist_id)

    def find_by_share_code(self, code: str) -> Optional[Wishlist]:
        return self._select_one("share_code", code.upper())

    def find_by_user(self, user_id: int) -> List[Wishlist]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {WISHLIST_COLUMNS}
                FROM wishlists
                WHERE user_id = %s AND is_active = TRUE
                ORDER BY updated_at DESC
            """, (user_id,))
            return self._hydrate(cursor, cursor.fetchall())

    def create(self, user_id: int, data: WishlistCreate) -> Wishlist:
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                INSERT INTO wishlists (user_id, name, description, is_public, notify)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {WISHLIST_COLUMNS}
            """, (
                user_id, data.name, data.description, data.is_public,
                Json(data.notify.model_dump())
            ))
            return self._map_row_to_wishlist(cursor.fetchone(), [])

    def update(self, wishlist_id: int, fields: dict) -> bool:
        """Update wishlist columns; False when the list doesn't exist"""
        if not fields:
            return True
        set_clause, params = self._set_clause(fields, json_columns=['notify'])
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                UPDATE wishlists SET {set_clause}
                WHERE id = %s AND is_active = TRUE
                RETURNING id
            """, params + [wishlist_id])
            return cursor.fetchone() is not None

    def deactivate(self, wishlist_id: int) -> bool:
        return self.update(wishlist_id, {'is_active': False})

    def record_view(self, wishlist_id: int) -> None:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                UPDATE wishlists
                SET views = views + 1, last_viewed_at = NOW()
                WHERE id = %s
            """, (wishlist_id,))

    def consume_share_use(self, wishlist_id: int) -> bool:
        """
        Count a visit through the share link and use up one share use

        The use limit and expiry are checked in the same UPDATE, so concurrent
        visits cannot go past max_uses.

        Returns:
            False when the link is no longer shareable (nothing is changed)
        """
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                UPDATE wishlists
                SET views = views + 1,
                    last_viewed_at = NOW(),
                    share_use_count = share_use_count + 1
                WHERE id = %s
                  AND is_active = TRUE
                  AND is_public = TRUE
                  AND share_code IS NOT NULL
                  AND (share_expires_at IS NULL OR share_expires_at > NOW())
                  AND (share_max_uses = 0 OR share_use_count < share_max_uses)
                RETURNING id
            """, (wishlist_id,))
            return cursor.fetchone() is not None

    def add_item(self, wishlist_id: int, data: WishlistItemCreate) -> Optional[WishlistItem]:
        """Insert an item; None when the product is already in the list"""
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                INSERT INTO wishlist_items (wishlist_id, product_id, notes, priority, quantity)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (wishlist_id, product_id) DO NOTHING
                RETURNING {ITEM_COLUMNS}
            """, (wishlist_id, data.product_id, data.notes, data.priority, data.quantity))
            row = cursor.fetchone()
            if not row:
                return None
            cursor.execute("UPDATE wishlists SET updated_at = NOW() WHERE id = %s", (wishlist_id,))
            return self._map_row_to_item(row)

    def update_item(self, wishlist_id: int, product_id: int, fields: dict) -> Optional[WishlistItem]:
        assignments = [f"{column} = %s" for column in fields]
        params = list(fields.values())
        set_clause = ", ".join(assignments) if assignments else "product_id = product_id"

        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                UPDATE wishlist_items SET {set_clause}
                WHERE wishlist_id = %s AND product_id = %s
                RETURNING {ITEM_COLUMNS}
            """, params + [wishlist_id, product_id])
            row = cursor.fetchone()
            return self._map_row_to_item(row) if row else None

    def remove_item(self, wishlist_id: int, product_id: int) -> bool:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                DELETE FROM wishlist_items
                WHERE wishlist_id = %s AND product_id = %s
                RETURNING id
            """, (wishlist_id, product_id))
            removed = cursor.fetchone() is not None
            if removed:
                cursor.execute("UPDATE wishlists SET updated_at = NOW() WHERE id = %s", (wishlist_id,))
            return removed
