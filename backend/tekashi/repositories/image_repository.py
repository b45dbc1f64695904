"""
Image Repository - Data Access Layer for image metadata

Author: Tekashi
Date: 2025-10-30
"""
from typing import List, Optional, Tuple

from psycopg2.extras import Json

from tekashi.domain.image import Image, ImageCreate
from tekashi.repositories.base import BaseRepository

IMAGE_COLUMNS = """
    id, url, name, description, product_type_id, product_id, kind, sort_order,
    is_active, image_metadata, optimized_url, thumbnail_url, provider,
    external_id, alt, title, created_at, updated_at
"""


class ImageRepository(BaseRepository):
    """Repository for Image data access"""

    @staticmethod
    def _map_row_to_image(row: dict) -> Image:
        return Image(
            id=row['id'],
            url=row['url'],
            name=row['name'],
            description=row['description'],
            product_type_id=row['product_type_id'],
            product_id=row['product_id'],
            kind=row['kind'],
            sort_order=row['sort_order'],
            is_active=row['is_active'],
            metadata=row['image_metadata'] or {},
            optimized_url=row['optimized_url'],
            thumbnail_url=row['thumbnail_url'],
            provider=row['provider'],
            external_id=row['external_id'],
            alt=row['alt'],
            title=row['title'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def find_by_id(self, image_id: int, conn=None) -> Optional[Image]:
        """Active image by id"""
        with self._cursor(conn) as cursor:
            cursor.execute(f"""
                SELECT {IMAGE_COLUMNS}
                FROM images
                WHERE id = %s AND is_active = TRUE
            """, (image_id,))
            row = cursor.fetchone()
            return self._map_row_to_image(row) if row else None

    def find_all(
        self,
        product_type_id: Optional[int] = None,
        product_id: Optional[int] = None,
        kind: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Image], int]:
        """
        Find active images with filters, ordered for galleries

        Returns:
            Tuple of (list of images, total count)
        """
        conditions = ["is_active = TRUE"]
        params = []

        if product_type_id is not None:
            conditions.append("product_type_id = %s")
            params.append(product_type_id)

        if product_id is not None:
            conditions.append("product_id = %s")
            params.append(product_id)

        if kind:
            conditions.append("kind = %s")
            params.append(kind)

        where_clause = " AND ".join(conditions)

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM images
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {IMAGE_COLUMNS}
                FROM images
                WHERE {where_clause}
                ORDER BY sort_order, created_at
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            return [self._map_row_to_image(row) for row in cursor.fetchall()], total

    def create(self, data: ImageCreate) -> Image:
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                INSERT INTO images (
                    url, name, description, product_type_id, product_id, kind,
                    sort_order, image_metadata, provider, external_id, alt, title
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {IMAGE_COLUMNS}
            """, (
                data.url, data.name, data.description, data.product_type_id,
                data.product_id, data.kind.value, data.sort_order,
                Json(data.metadata.model_dump(mode="json")), data.provider.value,
                data.external_id, data.alt, data.title
            ))
            return self._map_row_to_image(cursor.fetchone())

    def update(self, image_id: int, fields: dict, conn=None) -> Optional[Image]:
        """Update columns of an active image; None when it doesn't exist"""
        if not fields:
            return self.find_by_id(image_id, conn=conn)

        set_clause, params = self._set_clause(fields, json_columns=['image_metadata'])

        with self._cursor(conn, commit=True) as cursor:
            cursor.execute(f"""
                UPDATE images SET {set_clause}
                WHERE id = %s AND is_active = TRUE
                RETURNING {IMAGE_COLUMNS}
            """, params + [image_id])
            row = cursor.fetchone()
            return self._map_row_to_image(row) if row else None

    def deactivate(self, image_id: int) -> bool:
        return self.update(image_id, {'is_active': False}) is not None

    def demote_main_images(self, image: Image, conn) -> int:
        """Turn the other main images of the same product (or type) into gallery images"""
        owner_column, owner_id = (
            ("product_id", image.product_id) if image.product_id is not None
            else ("product_type_id", image.product_type_id)
        )
        with self._cursor(conn) as cursor:
            cursor.execute(f"""
                UPDATE images SET kind = 'gallery', updated_at = NOW()
                WHERE {owner_column} = %s AND kind = 'main' AND id <> %s AND is_active = TRUE
            """, (owner_id, image.id))
            return cursor.rowcount
