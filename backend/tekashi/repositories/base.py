"""
Shared connection handling for repositories

Every repository method accepts an optional psycopg2 connection. Without one
the method opens its own connection, commits its writes and closes it; with
one it joins the caller's transaction and leaves commit/rollback to the caller.

Author: Tekashi
Date: 2025-10-26
"""
from contextlib import contextmanager
from typing import Iterable, List, Tuple

from psycopg2.extras import Json

from tekashi.core.database import get_db_connection_dict


class BaseRepository:

    @contextmanager
    def _cursor(self, conn=None, commit: bool = False):
        should_close = conn is None
        if conn is None:
            conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            yield cursor
            if commit and should_close:
                conn.commit()
        except Exception:
            if should_close:
                conn.rollback()
            raise
        finally:
            cursor.close()
            if should_close:
                conn.close()

    @staticmethod
    def _set_clause(fields: dict, json_columns: Iterable[str] = (), touch: bool = True) -> Tuple[str, List]:
        """
        Build "col = %s, ..." for a dynamic UPDATE

        Args:
            fields: column -> new value
            json_columns: columns stored as JSONB
            touch: also bump updated_at

        Returns:
            Tuple of (SET clause, params)
        """
        json_columns = set(json_columns)
        assignments = []
        params = []
        for column, value in fields.items():
            assignments.append(f"{column} = %s")
            params.append(Json(value) if column in json_columns and value is not None else value)
        if touch:
            assignments.append("updated_at = NOW()")
        return ", ".join(assignments), params


def like_pattern(text: str) -> str:
    """Substring pattern for ILIKE with the user's wildcards escaped"""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
