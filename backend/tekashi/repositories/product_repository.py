"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.

Author: Tekashi
Date: 2025-10-26
"""
import logging
from typing import List, Optional, Tuple, Dict, Iterable

from psycopg2.extras import Json

from tekashi.domain.catalog import slugify
from tekashi.domain.product import Product, ProductCreate, ProductUpdate, ProductOffer
from tekashi.repositories.base import BaseRepository, like_pattern

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = """
    p.id, p.name, p.description, p.price, p.stock, p.product_type_id,
    pt.name AS product_type_name, p.brand, p.model, p.material, p.sizes, p.colors,
    p.gender, p.age_group, p.season, p.is_active, p.is_featured,
    p.offer_active, p.offer_discount, p.offer_price, p.offer_starts_at, p.offer_ends_at,
    p.slug, p.meta_description, p.keywords, p.views, p.sales_count,
    p.rating_average, p.rating_count, p.translations, p.created_at, p.updated_at
"""

PRODUCT_FROM = "products p LEFT JOIN product_types pt ON pt.id = p.product_type_id"

# Offer switched on and NOW() inside its window
ON_OFFER_CONDITION = """(
    p.offer_active
    AND (p.offer_starts_at IS NULL OR p.offer_starts_at <= NOW())
    AND (p.offer_ends_at IS NULL OR p.offer_ends_at >= NOW())
)"""

SORT_COLUMNS = {
    "name": "p.name",
    "price": "p.price",
    "created_at": "p.created_at",
    "rating": "p.rating_average",
    "sales": "p.sales_count",
    "views": "p.views",
    "stock": "p.stock",
}


def search_condition() -> str:
    """Text match on name, description, brand and any translated text (5 params)"""
    return """(
        p.name ILIKE %s OR p.description ILIKE %s OR p.brand ILIKE %s
        OR EXISTS (
            SELECT 1 FROM jsonb_each(p.translations) t
            WHERE t.value->>'name' ILIKE %s OR t.value->>'description' ILIKE %s
        )
    )"""


def search_params(search: str) -> List[str]:
    term = like_pattern(search)
    return [term, term, term, term, term]


class ProductRepository(BaseRepository):
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        """Map a products row (joined with its type name) to the domain model"""
        return Product(
            id=row['id'],
            name=row['name'],
            description=row['description'],
            price=row['price'],
            stock=row['stock'],
            product_type_id=row['product_type_id'],
            product_type_name=row.get('product_type_name'),
            brand=row['brand'],
            model=row['model'],
            material=row['material'],
            sizes=row['sizes'] or [],
            colors=row['colors'] or [],
            gender=row['gender'],
            age_group=row['age_group'],
            season=row['season'],
            is_active=row['is_active'],
            is_featured=row['is_featured'],
            offer=ProductOffer(
                active=row['offer_active'],
                discount=row['offer_discount'] or 0,
                offer_price=row['offer_price'],
                starts_at=row['offer_starts_at'],
                ends_at=row['offer_ends_at'],
            ),
            slug=row['slug'],
            meta_description=row['meta_description'],
            keywords=row['keywords'] or [],
            views=row['views'],
            sales_count=row['sales_count'],
            rating_average=row['rating_average'] or 0,
            rating_count=row['rating_count'],
            translations=row['translations'] or {},
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def find_by_id(self, product_id: int, conn=None) -> Optional[Product]:
        """
        Find product by ID (active or not)

        Args:
            product_id: Internal product ID

        Returns:
            Product or None if not found
        """
        with self._cursor(conn) as cursor:
            return self._select_by_id(cursor, product_id)

    def _select_by_id(self, cursor, product_id: int) -> Optional[Product]:
        cursor.execute(f"""
            SELECT {PRODUCT_COLUMNS}
            FROM {PRODUCT_FROM}
            WHERE p.id = %s
        """, (product_id,))

        row = cursor.fetchone()
        if not row:
            return None

        return self._map_row_to_product(row)

    def find_by_ids(self, product_ids: Iterable[int], conn=None) -> Dict[int, Product]:
        """
        Batch fetch products (avoids N+1 when hydrating favorites/wishlists)

        Returns:
            Dict of product_id -> Product
        """
        product_ids = list(set(product_ids))
        if not product_ids:
            return {}

        with self._cursor(conn) as cursor:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM {PRODUCT_FROM}
                WHERE p.id = ANY(%s)
            """, (product_ids,))

            return {row['id']: self._map_row_to_product(row) for row in cursor.fetchall()}

    def lock_for_order(self, product_ids: Iterable[int], conn) -> Dict[int, Product]:
        """
        Lock product rows for the rest of the caller's transaction.

        Rows are locked in id order so concurrent checkouts touching the
        same products queue up instead of deadlocking.
        """
        product_ids = sorted(set(product_ids))

        with self._cursor(conn) as cursor:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM {PRODUCT_FROM}
                WHERE p.id = ANY(%s)
                ORDER BY p.id
                FOR UPDATE OF p
            """, (product_ids,))

            return {row['id']: self._map_row_to_product(row) for row in cursor.fetchall()}

    def find_all(
        self,
        product_type_id: Optional[int] = None,
        gender: Optional[str] = None,
        brand: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        is_featured: Optional[bool] = None,
        on_offer: Optional[bool] = None,
        search: Optional[str] = None,
        include_inactive: bool = False,
        sort: str = "created_at",
        direction: str = "desc",
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters

        Args:
            product_type_id: Filter by product type
            gender: Filter by target gender
            brand: Filter by brand (case-insensitive, partial)
            min_price / max_price: Price range on the list price
            is_featured: Only featured (or non-featured) products
            on_offer: Only products with a running offer
            search: Text search on name/description/brand/translations
            include_inactive: Admin listing of soft-deleted products
            sort: One of SORT_COLUMNS
            direction: asc or desc
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        conditions = []
        params = []

        if not include_inactive:
            conditions.append("p.is_active = TRUE")

        if product_type_id is not None:
            conditions.append("p.product_type_id = %s")
            params.append(product_type_id)

        if gender:
            conditions.append("p.gender = %s")
            params.append(gender)

        if brand:
            conditions.append("p.brand ILIKE %s")
            params.append(like_pattern(brand))

        if min_price is not None:
            conditions.append("p.price >= %s")
            params.append(min_price)

        if max_price is not None:
            conditions.append("p.price <= %s")
            params.append(max_price)

        if is_featured is not None:
            conditions.append("p.is_featured = %s")
            params.append(is_featured)

        if on_offer:
            conditions.append(ON_OFFER_CONDITION)

        if search:
            conditions.append(search_condition())
            params.extend(search_params(search))

        where_clause = " AND ".join(conditions) if conditions else "1=1"
        order_column = SORT_COLUMNS.get(sort, "p.created_at")
        order_direction = "ASC" if direction.lower() == "asc" else "DESC"

        with self._cursor() as cursor:
            # Get total count
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products p
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            # Get products
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM {PRODUCT_FROM}
                WHERE {where_clause}
                ORDER BY {order_column} {order_direction}, p.id
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]

            return products, total

    def search(self, text: str, limit: int = 20, offset: int = 0) -> Tuple[List[Product], int]:
        """Text search over active products, best sellers first"""
        return self.find_all(search=text, sort="sales", direction="desc", limit=limit, offset=offset)

    def find_featured(self, limit: int = 10) -> List[Product]:
        products, _ = self.find_all(is_featured=True, sort="sales", limit=limit)
        return products

    def find_on_offer(self, limit: int = 20, offset: int = 0) -> Tuple[List[Product], int]:
        """Active products with a running offer, biggest discount first"""
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products p
                WHERE p.is_active = TRUE AND {ON_OFFER_CONDITION}
            """)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM {PRODUCT_FROM}
                WHERE p.is_active = TRUE AND {ON_OFFER_CONDITION}
                ORDER BY p.offer_discount DESC, p.id
                LIMIT %s OFFSET %s
            """, (limit, offset))

            return [self._map_row_to_product(row) for row in cursor.fetchall()], total

    def create(self, data: ProductCreate, conn=None) -> Product:
        """Insert a product; the slug is derived from the name"""
        offer = data.offer or ProductOffer()
        translations = data.model_dump(mode="json")['translations']

        with self._cursor(conn, commit=True) as cursor:
            cursor.execute("""
                INSERT INTO products (
                    name, description, price, stock, product_type_id,
                    brand, model, material, sizes, colors,
                    gender, age_group, season, is_featured,
                    offer_active, offer_discount, offer_price, offer_starts_at, offer_ends_at,
                    slug, meta_description, keywords, translations
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s
                )
                RETURNING id
            """, (
                data.name, data.description, data.price, data.stock, data.product_type_id,
                data.brand, data.model, data.material, data.sizes, data.colors,
                data.gender.value if data.gender else None,
                data.age_group.value if data.age_group else None,
                data.season.value if data.season else None,
                data.is_featured,
                offer.active, offer.discount, offer.offer_price, offer.starts_at, offer.ends_at,
                slugify(data.name), data.meta_description, data.keywords, Json(translations)
            ))
            product_id = cursor.fetchone()['id']

            return self._select_by_id(cursor, product_id)

    def update(self, product_id: int, data: ProductUpdate, conn=None) -> Optional[Product]:
        """Apply the fields present in data; returns None if the product doesn't exist"""
        fields = data.model_dump(exclude_unset=True, mode="json")
        if 'name' in fields:
            fields['slug'] = slugify(fields['name'])
        if not fields:
            return self.find_by_id(product_id, conn=conn)

        set_clause, params = self._set_clause(fields, json_columns=['translations'])

        with self._cursor(conn, commit=True) as cursor:
            cursor.execute(f"""
                UPDATE products SET {set_clause}
                WHERE id = %s
                RETURNING id
            """, params + [product_id])
            if not cursor.fetchone():
                return None

            return self._select_by_id(cursor, product_id)

    def _update_columns(self, product_id: int, fields: dict, conn=None) -> Optional[Product]:
        set_clause, params = self._set_clause(fields)
        with self._cursor(conn, commit=True) as cursor:
            cursor.execute(f"""
                UPDATE products SET {set_clause}
                WHERE id = %s
                RETURNING id
            """, params + [product_id])
            if not cursor.fetchone():
                return None
            return self._select_by_id(cursor, product_id)

    def deactivate(self, product_id: int, conn=None) -> Optional[Product]:
        """Soft delete"""
        return self._update_columns(product_id, {'is_active': False}, conn=conn)

    def set_featured(self, product_id: int, is_featured: bool) -> Optional[Product]:
        return self._update_columns(product_id, {'is_featured': is_featured})

    def set_offer(self, product_id: int, offer: ProductOffer) -> Optional[Product]:
        return self._update_columns(product_id, {
            'offer_active': offer.active,
            'offer_discount': offer.discount,
            'offer_price': offer.offer_price,
            'offer_starts_at': offer.starts_at,
            'offer_ends_at': offer.ends_at,
        })

    def set_stock(self, product_id: int, stock: int) -> Optional[Product]:
        return self._update_columns(product_id, {'stock': stock})

    def increment_views(self, product_id: int) -> None:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                UPDATE products SET views = views + 1 WHERE id = %s
            """, (product_id,))

    def decrement_stock(self, product_id: int, quantity: int, conn) -> bool:
        """
        Take units out of stock inside the caller's transaction.

        Returns:
            False when the product lacks the units (nothing is changed)
        """
        with self._cursor(conn) as cursor:
            cursor.execute("""
                UPDATE products
                SET stock = stock - %s, sales_count = sales_count + %s, updated_at = NOW()
                WHERE id = %s AND stock >= %s
                RETURNING stock
            """, (quantity, quantity, product_id, quantity))
            return cursor.fetchone() is not None

    def restore_stock(self, product_id: int, quantity: int, conn) -> None:
        """Put units back after a cancellation (inside the caller's transaction)"""
        with self._cursor(conn) as cursor:
            cursor.execute("""
                UPDATE products
                SET stock = stock + %s,
                    sales_count = GREATEST(sales_count - %s, 0),
                    updated_at = NOW()
                WHERE id = %s
            """, (quantity, quantity, product_id))

    def refresh_rating(self, product_id: int, conn=None) -> None:
        """Recompute rating_average (1 decimal) and rating_count from active reviews"""
        with self._cursor(conn, commit=True) as cursor:
            cursor.execute("""
                UPDATE products p
                SET rating_average = COALESCE(r.average, 0),
                    rating_count = r.total,
                    updated_at = NOW()
                FROM (
                    SELECT ROUND(AVG(rating)::numeric, 1) AS average, COUNT(*) AS total
                    FROM reviews
                    WHERE product_id = %s AND is_active = TRUE
                ) r
                WHERE p.id = %s
            """, (product_id, product_id))
            logger.debug(f"Refreshed rating for product {product_id}")
