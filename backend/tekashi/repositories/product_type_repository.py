"""
Product Type Repository - Data Access Layer for catalog categories

Author: Tekashi
Date: 2025-10-26
"""
from typing import List, Optional

from psycopg2.extras import Json

from tekashi.domain.catalog import slugify
from tekashi.domain.product_type import ProductType, ProductTypeCreate, ProductTypeUpdate
from tekashi.repositories.base import BaseRepository

TYPE_COLUMNS = """
    id, name, description, is_active, sort_order, translations, slug,
    meta_description, keywords, product_count, created_at, updated_at
"""


class ProductTypeRepository(BaseRepository):
    """Repository for ProductType data access"""

    @staticmethod
    def _map_row_to_type(row: dict) -> ProductType:
        return ProductType(
            id=row['id'],
            name=row['name'],
            description=row['description'],
            is_active=row['is_active'],
            sort_order=row['sort_order'],
            translations=row['translations'] or {},
            slug=row['slug'],
            meta_description=row['meta_description'],
            keywords=row['keywords'] or [],
            product_count=row['product_count'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def _select_one(self, cursor, column: str, value) -> Optional[ProductType]:
        cursor.execute(f"""
            SELECT {TYPE_COLUMNS}
            FROM product_types
            WHERE {column} = %s
        """, (value,))
        row = cursor.fetchone()
        return self._map_row_to_type(row) if row else None

    def find_by_id(self, type_id: int, conn=None) -> Optional[ProductType]:
        with self._cursor(conn) as cursor:
            return self._select_one(cursor, "id", type_id)

    def find_by_slug(self, slug: str) -> Optional[ProductType]:
        with self._cursor() as cursor:
            return self._select_one(cursor, "slug", slug)

    def find_by_name(self, name: str) -> Optional[ProductType]:
        """Case-insensitive name lookup (names are unique)"""
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {TYPE_COLUMNS}
                FROM product_types
                WHERE LOWER(name) = LOWER(%s)
            """, (name,))
            row = cursor.fetchone()
            return self._map_row_to_type(row) if row else None

    def find_all(self, is_active: Optional[bool] = None) -> List[ProductType]:
        """All types ordered by sort_order then name"""
        conditions = []
        params = []

        if is_active is not None:
            conditions.append("is_active = %s")
            params.append(is_active)

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {TYPE_COLUMNS}
                FROM product_types
                WHERE {where_clause}
                ORDER BY sort_order, name
            """, params)
            return [self._map_row_to_type(row) for row in cursor.fetchall()]

    def find_active(self) -> List[ProductType]:
        return self.find_all(is_active=True)

    def create(self, data: ProductTypeCreate) -> ProductType:
        translations = data.model_dump(mode="json")['translations']

        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                INSERT INTO product_types (
                    name, description, sort_order, translations, slug,
                    meta_description, keywords
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING {TYPE_COLUMNS}
            """, (
                data.name, data.description, data.sort_order, Json(translations),
                slugify(data.name), data.meta_description, data.keywords
            ))
            return self._map_row_to_type(cursor.fetchone())

    def update(self, type_id: int, data: ProductTypeUpdate) -> Optional[ProductType]:
        fields = data.model_dump(exclude_unset=True, mode="json")
        if 'name' in fields:
            fields['slug'] = slugify(fields['name'])
        return self._update_columns(type_id, fields)

    def _update_columns(self, type_id: int, fields: dict) -> Optional[ProductType]:
        if not fields:
            return self.find_by_id(type_id)

        set_clause, params = self._set_clause(fields, json_columns=['translations'])

        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                UPDATE product_types SET {set_clause}
                WHERE id = %s
                RETURNING {TYPE_COLUMNS}
            """, params + [type_id])
            row = cursor.fetchone()
            return self._map_row_to_type(row) if row else None

    def set_active(self, type_id: int, is_active: bool) -> Optional[ProductType]:
        return self._update_columns(type_id, {'is_active': is_active})

    def set_sort_order(self, type_id: int, sort_order: int) -> Optional[ProductType]:
        return self._update_columns(type_id, {'sort_order': sort_order})

    def delete(self, type_id: int) -> bool:
        with self._cursor(commit=True) as cursor:
            cursor.execute("DELETE FROM product_types WHERE id = %s RETURNING id", (type_id,))
            return cursor.fetchone() is not None

    def count_active_products(self, type_id: int) -> int:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT COUNT(*) as total
                FROM products
                WHERE product_type_id = %s AND is_active = TRUE
            """, (type_id,))
            return cursor.fetchone()['total']

    def refresh_product_count(self, type_id: int, conn=None) -> Optional[int]:
        """Store the number of active products on the type; returns the new count"""
        with self._cursor(conn, commit=True) as cursor:
            cursor.execute("""
                UPDATE product_types
                SET product_count = (
                    SELECT COUNT(*) FROM products
                    WHERE product_type_id = %s AND is_active = TRUE
                ), updated_at = NOW()
                WHERE id = %s
                RETURNING product_count
            """, (type_id, type_id))
            row = cursor.fetchone()
            return row['product_count'] if row else None

    def get_stats(self) -> List[dict]:
        """Per-type product statistics over active products"""
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT
                    pt.id,
                    pt.name,
                    COUNT(p.id) AS product_count,
                    COALESCE(ROUND(AVG(p.price), 2), 0) AS average_price,
                    COALESCE(MIN(p.price), 0) AS min_price,
                    COALESCE(MAX(p.price), 0) AS max_price,
                    COALESCE(SUM(p.stock), 0) AS total_stock,
                    COUNT(p.id) FILTER (WHERE p.is_featured) AS featured_count,
                    COUNT(p.id) FILTER (
                        WHERE p.offer_active
                        AND (p.offer_starts_at IS NULL OR p.offer_starts_at <= NOW())
                        AND (p.offer_ends_at IS NULL OR p.offer_ends_at >= NOW())
                    ) AS on_offer_count
                FROM product_types pt
                LEFT JOIN products p ON p.product_type_id = pt.id AND p.is_active = TRUE
                GROUP BY pt.id, pt.name, pt.sort_order
                ORDER BY pt.sort_order, pt.name
            """)

            stats = []
            for row in cursor.fetchall():
                stats.append({
                    'id': row['id'],
                    'name': row['name'],
                    'product_count': row['product_count'],
                    'average_price': float(row['average_price']),
                    'min_price': float(row['min_price']),
                    'max_price': float(row['max_price']),
                    'total_stock': int(row['total_stock']),
                    'featured_count': row['featured_count'],
                    'on_offer_count': row['on_offer_count'],
                })
            return stats
