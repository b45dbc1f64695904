"""
Integration checks against a real PostgreSQL database

Skipped unless DATABASE_URL is set. Run scripts/init_db.py first.

Author: Tekashi
Date: 2025-11-03
"""
import pytest

from tekashi.core.database import get_db_connection_with_retry, transaction


@pytest.mark.integration
def test_database_answers(database_url):
    conn = get_db_connection_with_retry(max_retries=1)
    try:
        cursor = conn.cursor()
        cursor.execute("SELECT 1")
        assert cursor.fetchone()[0] == 1
    finally:
        conn.close()


@pytest.mark.integration
@pytest.mark.parametrize("table", [
    "users", "product_types", "products", "orders", "order_items",
    "favorites", "wishlists", "wishlist_items", "notifications", "reviews", "images",
])
def test_schema_tables_exist(database_url, table):
    with transaction() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT to_regclass(%s) AS name", (f"public.{table}",))
        assert cursor.fetchone()['name'] is not None
