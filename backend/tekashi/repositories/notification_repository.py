"""
Notification Repository - Data Access Layer for Notifications

Author: Tekashi
Date: 2025-10-29
"""
from typing import List, Optional, Tuple, Iterable

from psycopg2.extras import Json, execute_values

from tekashi.domain.notification import Notification, NotificationCreate
from tekashi.repositories.base import BaseRepository

NOTIFICATION_COLUMNS = """
    id, user_id, title, message, type, category, is_read, read_at,
    action_url, action_text, priority, expires_at, group_id, translations,
    click_count, last_clicked_at, created_at
"""

NOT_EXPIRED = "(expires_at IS NULL OR expires_at > NOW())"


class NotificationRepository(BaseRepository):
    """Repository for Notification data access"""

    @staticmethod
    def _map_row_to_notification(row: dict) -> Notification:
        return Notification(
            id=row['id'],
            user_id=row['user_id'],
            title=row['title'],
            message=row['message'],
            type=row['type'],
            category=row['category'],
            is_read=row['is_read'],
            read_at=row['read_at'],
            action_url=row['action_url'],
            action_text=row['action_text'],
            priority=row['priority'],
            expires_at=row['expires_at'],
            group_id=row['group_id'],
            translations=row['translations'] or {},
            click_count=row['click_count'],
            last_clicked_at=row['last_clicked_at'],
            created_at=row['created_at']
        )

    def find_by_id(self, notification_id: int) -> Optional[Notification]:
        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT {NOTIFICATION_COLUMNS}
                FROM notifications
                WHERE id = %s
            """, (notification_id,))
            row = cursor.fetchone()
            return self._map_row_to_notification(row) if row else None

    def find_by_user(
        self,
        user_id: int,
        unread_only: bool = False,
        type: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Notification], int]:
        """
        Non-expired notifications of a user, most urgent and newest first

        Returns:
            Tuple of (list of notifications, total count)
        """
        conditions = ["user_id = %s", NOT_EXPIRED]
        params = [user_id]

        if unread_only:
            conditions.append("is_read = FALSE")

        if type:
            conditions.append("type = %s")
            params.append(type)

        if category:
            conditions.append("category = %s")
            params.append(category)

        where_clause = " AND ".join(conditions)

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM notifications
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {NOTIFICATION_COLUMNS}
                FROM notifications
                WHERE {where_clause}
                ORDER BY priority DESC, created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            return [self._map_row_to_notification(row) for row in cursor.fetchall()], total

    def create(self, user_id: int, data: NotificationCreate, group_id: Optional[str] = None) -> Notification:
        translations = data.model_dump(mode="json")['translations']

        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                INSERT INTO notifications (
                    user_id, title, message, type, category, action_url, action_text,
                    priority, expires_at, group_id, translations
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {NOTIFICATION_COLUMNS}
            """, (
                user_id, data.title, data.message, data.type.value, data.category.value,
                data.action_url, data.action_text, data.priority, data.expires_at,
                group_id, Json(translations)
            ))
            return self._map_row_to_notification(cursor.fetchone())

    def create_many(self, user_ids: Iterable[int], data: NotificationCreate, group_id: str) -> int:
        """Insert the same notification for several users in one statement"""
        translations = Json(data.model_dump(mode="json")['translations'])
        rows = [
            (
                user_id, data.title, data.message, data.type.value, data.category.value,
                data.action_url, data.action_text, data.priority, data.expires_at,
                group_id, translations
            )
            for user_id in user_ids
        ]

        with self._cursor(commit=True) as cursor:
            execute_values(cursor, """
                INSERT INTO notifications (
                    user_id, title, message, type, category, action_url, action_text,
                    priority, expires_at, group_id, translations
                ) VALUES %s
            """, rows)
            return len(rows)

    def _update_owned(self, notification_id: int, user_id: int, set_clause: str) -> Optional[Notification]:
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                UPDATE notifications SET {set_clause}
                WHERE id = %s AND user_id = %s
                RETURNING {NOTIFICATION_COLUMNS}
            """, (notification_id, user_id))
            row = cursor.fetchone()
            return self._map_row_to_notification(row) if row else None

    def mark_read(self, notification_id: int, user_id: int) -> Optional[Notification]:
        return self._update_owned(
            notification_id, user_id,
            "is_read = TRUE, read_at = COALESCE(read_at, NOW())"
        )

    def record_click(self, notification_id: int, user_id: int) -> Optional[Notification]:
        return self._update_owned(
            notification_id, user_id,
            "click_count = click_count + 1, last_clicked_at = NOW(), "
            "is_read = TRUE, read_at = COALESCE(read_at, NOW())"
        )

    def mark_all_read(self, user_id: int) -> int:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                UPDATE notifications SET is_read = TRUE, read_at = NOW()
                WHERE user_id = %s AND is_read = FALSE
            """, (user_id,))
            return cursor.rowcount

    def delete(self, notification_id: int, user_id: int) -> bool:
        with self._cursor(commit=True) as cursor:
            cursor.execute("""
                DELETE FROM notifications WHERE id = %s AND user_id = %s
                RETURNING id
            """, (notification_id, user_id))
            return cursor.fetchone() is not None

    def delete_all(self, user_id: int) -> int:
        with self._cursor(commit=True) as cursor:
            cursor.execute("DELETE FROM notifications WHERE user_id = %s", (user_id,))
            return cursor.rowcount

    def get_stats(self, user_id: Optional[int] = None) -> dict:
        """Totals and per-type counts for one user, or for everybody when user_id is None"""
        condition = "user_id = %s" if user_id is not None else "1=1"
        params = [user_id] if user_id is not None else []

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT
                    COUNT(*) AS total,
                    COUNT(*) FILTER (WHERE NOT is_read) AS unread,
                    COUNT(*) FILTER (WHERE is_read) AS read,
                    COUNT(*) FILTER (WHERE expires_at IS NOT NULL AND expires_at <= NOW()) AS expired
                FROM notifications
                WHERE {condition}
            """, params)
            totals = cursor.fetchone()

            cursor.execute(f"""
                SELECT type, COUNT(*) AS count
                FROM notifications
                WHERE {condition}
                GROUP BY type
                ORDER BY type
            """, params)
            by_type = {row['type']: row['count'] for row in cursor.fetchall()}

            return {
                'total': totals['total'],
                'unread': totals['unread'],
                'read': totals['read'],
                'expired': totals['expired'],
                'by_type': by_type,
            }
