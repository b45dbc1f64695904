"""
User Repository - Data Access Layer for accounts

Author: Tekashi
Date: 2025-10-27
"""
import logging
from typing import List, Optional, Tuple

from tekashi.core.exceptions import ConflictError
from tekashi.domain.user import User, UserCreate, Location
from tekashi.repositories.base import BaseRepository, like_pattern

logger = logging.getLogger(__name__)

USER_COLUMNS = """
    id, auth_uid, name, email, phone, address, role, is_active, loyalty_points,
    location, language, last_login_at, created_at, updated_at
"""

SORT_COLUMNS = {
    "name": "name",
    "email": "email",
    "created_at": "created_at",
    "last_login_at": "last_login_at",
}


class UserRepository(BaseRepository):
    """Repository for User data access"""

    @staticmethod
    def _map_row_to_user(row: dict) -> User:
        return User(
            id=row['id'],
            auth_uid=row['auth_uid'],
            name=row['name'],
            email=row['email'],
            phone=row['phone'],
            address=row['address'],
            role=row['role'],
            is_active=row['is_active'],
            loyalty_points=row['loyalty_points'],
            location=row['location'],
            language=row['language'],
            last_login_at=row['last_login_at'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    def _select_one(self, cursor, column: str, value) -> Optional[User]:
        cursor.execute(f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE {column} = %s
        """, (value,))
        row = cursor.fetchone()
        return self._map_row_to_user(row) if row else None

    def find_by_id(self, user_id: int, conn=None) -> Optional[User]:
        with self._cursor(conn) as cursor:
            return self._select_one(cursor, "id", user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        with self._cursor() as cursor:
            return self._select_one(cursor, "email", email.strip().lower())

    def find_or_create_from_token(self, auth_uid: str, email: str, name: Optional[str] = None) -> User:
        """
        Resolve a token identity to an account, creating it on first login

        Lookup order is auth_uid, then email. The email match only links an
        account that has no identity yet (admin-created accounts). New
        accounts get the customer role.

        Raises:
            ConflictError: the email belongs to an account bound to another identity
        """
        email = email.strip().lower()

        with self._cursor(commit=True) as cursor:
            user = self._select_one(cursor, "auth_uid", auth_uid)

            if user is None:
                user = self._select_one(cursor, "email", email)
                if user is not None:
                    if user.auth_uid is not None:
                        logger.warning(
                            f"Token identity {auth_uid} claims {email}, "
                            f"already linked to account {user.id}"
                        )
                        raise ConflictError("Email is linked to another identity")
                    cursor.execute("""
                        UPDATE users SET auth_uid = %s, updated_at = NOW()
                        WHERE id = %s AND auth_uid IS NULL
                    """, (auth_uid, user.id))
                    user.auth_uid = auth_uid

            if user is None:
                cursor.execute(f"""
                    INSERT INTO users (auth_uid, name, email, role)
                    VALUES (%s, %s, %s, 'customer')
                    RETURNING {USER_COLUMNS}
                """, (auth_uid, name or email.split("@")[0], email))
                user = self._map_row_to_user(cursor.fetchone())
                logger.info(f"Created account {user.id} for {email} on first login")

            cursor.execute("""
                UPDATE users SET last_login_at = NOW() WHERE id = %s
                RETURNING last_login_at
            """, (user.id,))
            user.last_login_at = cursor.fetchone()['last_login_at']

            return user

    def find_all(
        self,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        sort: str = "created_at",
        direction: str = "desc",
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[User], int]:
        """
        Find users with filters

        Returns:
            Tuple of (list of users, total count)
        """
        conditions = []
        params = []

        if role:
            conditions.append("role = %s")
            params.append(role)

        if is_active is not None:
            conditions.append("is_active = %s")
            params.append(is_active)

        if search:
            conditions.append("(name ILIKE %s OR email ILIKE %s)")
            search_term = like_pattern(search)
            params.extend([search_term, search_term])

        where_clause = " AND ".join(conditions) if conditions else "1=1"
        order_column = SORT_COLUMNS.get(sort, "created_at")
        order_direction = "ASC" if direction.lower() == "asc" else "DESC"

        with self._cursor() as cursor:
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM users
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE {where_clause}
                ORDER BY {order_column} {order_direction}, id
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            return [self._map_row_to_user(row) for row in cursor.fetchall()], total

    def create(self, data: UserCreate, password_hash: str) -> User:
        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                INSERT INTO users (name, email, password_hash, phone, address, role)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {USER_COLUMNS}
            """, (
                data.name, data.email, password_hash, data.phone, data.address,
                data.role.value
            ))
            return self._map_row_to_user(cursor.fetchone())

    def update(self, user_id: int, fields: dict) -> Optional[User]:
        """Update the given columns; returns None if the user doesn't exist"""
        if not fields:
            return self.find_by_id(user_id)

        set_clause, params = self._set_clause(fields, json_columns=['location'])

        with self._cursor(commit=True) as cursor:
            cursor.execute(f"""
                UPDATE users SET {set_clause}
                WHERE id = %s
                RETURNING {USER_COLUMNS}
            """, params + [user_id])
            row = cursor.fetchone()
            return self._map_row_to_user(row) if row else None

    def set_active(self, user_id: int, is_active: bool) -> Optional[User]:
        return self.update(user_id, {'is_active': is_active})

    def set_role(self, user_id: int, role: str) -> Optional[User]:
        return self.update(user_id, {'role': role})

    def set_location(self, user_id: int, location: Location) -> Optional[User]:
        return self.update(user_id, {'location': location.model_dump()})

    def set_language(self, user_id: int, language: str) -> Optional[User]:
        return self.update(user_id, {'language': language})

    def debit_points(self, user_id: int, points: int, conn) -> bool:
        """
        Spend loyalty points inside the caller's transaction.

        Returns:
            False when the balance is too low (nothing is changed)
        """
        with self._cursor(conn) as cursor:
            cursor.execute("""
                UPDATE users
                SET loyalty_points = loyalty_points - %s, updated_at = NOW()
                WHERE id = %s AND loyalty_points >= %s
                RETURNING loyalty_points
            """, (points, user_id, points))
            return cursor.fetchone() is not None

    def credit_points(self, user_id: int, points: int, conn) -> None:
        with self._cursor(conn) as cursor:
            cursor.execute("""
                UPDATE users
                SET loyalty_points = loyalty_points + %s, updated_at = NOW()
                WHERE id = %s
            """, (points, user_id))
