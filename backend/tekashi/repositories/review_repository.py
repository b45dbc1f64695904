"""
Review Repository - Data Access Layer for product reviews

Author: Tekashi
Date: 2025-10-29
"""
from typing import List, Optional, Tuple

from tekashi.domain.review import Review, ReviewCreate, ReviewStats
from tekashi.repositories.base import BaseRepository

REVIEW_COLUMNS = """
    r.id, r.product_id, r.user_id, u.name AS user_name, r.rating, r.title, r.comment,
    r.pros, r.cons, r.recommends, r.helpful_count, r.not_helpful_count,
    r.verified, r.purchase_verified, r.is_active, r.reported, r.report_reason,
    r.admin_reply, r.created_at, r.updated_at
"""

REVIEW_FROM = "reviews r LEFT JOIN users u ON u.id = r.user_id"

SORT_COLUMNS = {
    "created_at": "r.created_at",
    "rating": "r.rating",
    "helpful": "r.helpful_count",
}


class ReviewRepository(BaseRepository):
    """Repository for Review data access"""

    @staticmethod
    def _map_row_to_review(row: dict) -> Review:
        return Review(
            id=row['id'],
            product_id=row['product_id'],
            user_id=row['user_id'],
            user_name=row.get('user_name'),
            rating=row['rating'],
            title=row['title'],
            comment=row['comment'],
            pros=row['pros'] or [],
            cons=row['cons'] or [],
            recommends=row['recommends'],
            helpful_count=row['helpful_count'],
            not_helpful_count=row['not_helpful_count'],
            verified=row['verified'],
            purchase_verified=row['purchase_verified'],
            is_active=row['is_active'],
            reported=row['reported'],
            report_reason=row['report_reason'],
            admin_reply=row['admin_reply'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def _select_by_id(self, cursor, review_id: int) -> Optional[Review]:
        cursor.execute(f"""
            SELECT {REVIEW_COLUMNS}
            FROM {REVIEW_FROM}
            WHERE r.id = %s AND r.is_active = TRUE
        """, (review_id,))
        row = cursor.fetchone()
        return self._map_row_to_review(row) if row else None

    def find_by_id(self, review_id: int) -> Optional[Review]:
        """Active review by id"""
        with self._cursor() as cursor:
            return self._select_by_id(cursor, review_id)

    def find_active(self, user_id: int, product_id: int) -> Optional[Review]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {REVIEW_COLUMNS}
                FROM {REVIEW_FROM}
                WHERE r.user_id = %s AND r.product_id = %s AND r.is_active = TRUE
            """, (user_id, product_id))
            row = cursor.fetchone()
            return self._map_row_to_review(row) if row else None

    def find_all(
        self,
        product_id: Optional[int] = None,
        user_id: Optional[int] = None,
        rating: Optional[int] = None,
        reported: Optional[bool] = None,
        sort: str = "created_at",
        direction: str = "desc",
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Review], int]:
        """
        Find active reviews with filters

        Returns:
            Tuple of (list of reviews, total count)
        """
        conditions = ["r.is_active = TRUE"]
        params = []

        if product_id is not None:
            conditions.append("r.product_id = %s")
            params.append(product_id)

        if user_id is not None:
            conditions.append("r.user_id = %s")
            params.append(user_id)

        if rating is not None:
            conditions.append("r.rating = %s")
            params.append(rating)

        if reported is not None:
            conditions.append("r.reported = %s")
            params.append(reported)

        where_clause = " AND ".join(conditions)
        order_column = SORT_COLUMNS.get(sort, "r.created_at")
        order_direction = "ASC" if direction.lower() == "asc" else "DESC"

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM reviews r
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {REVIEW_COLUMNS}
                FROM {REVIEW_FROM}
                WHERE {where_clause}
                ORDER BY {order_column} {order_direction}, r.id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            return [self._map_row_to_review(row) for row in cursor.fetchall()], total

    def create(self, user_id: int, data: ReviewCreate, purchase_verified: bool, conn=None) -> Review:
        with self._cursor(conn, commit=True) as cursor:
            cursor.execute("""
                INSERT INTO reviews (
                    product_id, user_id, rating, title, comment, pros, cons,
                    recommends, purchase_verified
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (
                data.product_id, user_id, data.rating, data.title, data.comment,
                data.pros, data.cons, data.recommends, purchase_verified
            ))
            review_id = cursor.fetchone()['id']
            return self._select_by_id(cursor, review_id)

    def update(self, review_id: int, fields: dict, conn=None) -> Optional[Review]:
        """Update columns of an active review; None when it doesn't exist"""
        set_clause, params = self._set_clause(fields, json_columns=['admin_reply'])

        with self._cursor(conn, commit=True) as cursor:
            cursor.execute(f"""
                UPDATE reviews SET {set_clause}
                WHERE id = %s AND is_active = TRUE
                RETURNING id
            """, params + [review_id])
            if not cursor.fetchone():
                return None
            return self._select_by_id(cursor, review_id)

    def deactivate(self, review_id: int, conn=None) -> bool:
        with self._cursor(conn, commit=True) as cursor:
            cursor.execute("""
                UPDATE reviews SET is_active = FALSE, updated_at = NOW()
                WHERE id = %s AND is_active = TRUE
                RETURNING id
            """, (review_id,))
            return cursor.fetchone() is not None

    def vote(self, review_id: int, helpful: bool) -> Optional[Review]:
        column = "helpful_count" if helpful else "not_helpful_count"
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                UPDATE reviews SET {column} = {column} + 1
                WHERE id = %s AND is_active = TRUE
                RETURNING id
            """, (review_id,))
            if not cursor.fetchone():
                return None
            return self._select_by_id(cursor, review_id)

    def set_admin_reply(self, review_id: int, reply: dict) -> Optional[Review]:
        return self.update(review_id, {'admin_reply': reply})

    def get_product_stats(self, product_id: int) -> ReviewStats:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT
                    COUNT(*) AS total,
                    COALESCE(ROUND(AVG(rating)::numeric, 1), 0) AS average,
                    COALESCE(SUM(helpful_count), 0) AS helpful_total,
                    COALESCE(SUM(not_helpful_count), 0) AS not_helpful_total,
                    COUNT(*) FILTER (WHERE verified) AS verified_count,
                    COUNT(*) FILTER (WHERE purchase_verified) AS purchase_verified_count,
                    COUNT(*) FILTER (WHERE recommends) AS recommend_count
                FROM reviews
                WHERE product_id = %s AND is_active = TRUE
            """, (product_id,))
            totals = cursor.fetchone()

            cursor.execute("""
                SELECT rating, COUNT(*) AS count
                FROM reviews
                WHERE product_id = %s AND is_active = TRUE
                GROUP BY rating
            """, (product_id,))
            distribution = {star: 0 for star in range(1, 6)}
            for row in cursor.fetchall():
                distribution[row['rating']] = row['count']

            return ReviewStats(
                total=totals['total'],
                average=float(totals['average']),
                distribution=distribution,
                helpful_total=int(totals['helpful_total']),
                not_helpful_total=int(totals['not_helpful_total']),
                verified_count=totals['verified_count'],
                purchase_verified_count=totals['purchase_verified_count'],
                recommend_count=totals['recommend_count'],
            )
