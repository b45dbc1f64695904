"""
Pytest fixtures and configuration for Tekashi backend tests

Unit tests never touch a real database: repositories get a mocked psycopg2
connection, services get mocked repositories, and the API is exercised
through TestClient with the auth dependencies overridden.

Author: Tekashi
Date: 2025-11-03
"""
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from dotenv import load_dotenv

from tekashi.domain.order import Order, OrderItem, PaymentInfo, ShippingAddress
from tekashi.domain.product import Product, ProductOffer
from tekashi.domain.user import User

# Load environment variables for tests
load_dotenv()

NOW = datetime(2025, 11, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def database_url():
    """
    Provides the database URL for integration tests

    Scope: session (created once per test session)
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not configured")
    return url


@pytest.fixture
def mock_db():
    """
    Patches the connection factory used by every repository.

    Yields (connection, cursor) mocks; set cursor.fetchone / fetchall
    return values to feed rows.
    """
    with patch('tekashi.repositories.base.get_db_connection_dict') as mock_get_conn:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        yield mock_conn, mock_cursor


@pytest.fixture
def fake_transaction():
    """A transaction() replacement that yields a mock connection"""
    conn = MagicMock(name="transaction_conn")

    @contextmanager
    def _transaction():
        yield conn

    _transaction.conn = conn
    return _transaction


@pytest.fixture
def api_client():
    """
    TestClient for the full app.

    Tests set app.dependency_overrides to act as a given account; overrides
    and rate limit counters are cleared afterwards.
    """
    from fastapi.testclient import TestClient
    from tekashi.core.rate_limit import rate_limiter
    from tekashi.main import app

    rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    rate_limiter.reset()


def make_product(**overrides) -> Product:
    data = dict(
        id=1,
        name="Runner X",
        description="Lightweight running shoe",
        price=Decimal("100.00"),
        stock=10,
        product_type_id=1,
        product_type_name="Sneakers",
        brand="Tekashi",
        sizes=["40", "41", "42"],
        colors=["black"],
        is_active=True,
        offer=ProductOffer(),
    )
    data.update(overrides)
    return Product(**data)


def make_user(**overrides) -> User:
    data = dict(
        id=7,
        auth_uid="uid-7",
        name="Ana",
        email="ana@example.com",
        role="customer",
        is_active=True,
        loyalty_points=50,
    )
    data.update(overrides)
    return User(**data)


def make_admin(**overrides) -> User:
    return make_user(**{"id": 1, "auth_uid": "uid-admin", "name": "Admin",
                        "email": "admin@example.com", "role": "admin", **overrides})


def make_order(**overrides) -> Order:
    data = dict(
        id=100,
        order_number="TK1730635200000ABCDE",
        user_id=7,
        items=[OrderItem(
            id=1, order_id=100, product_id=1, product_name="Runner X",
            quantity=2, unit_price=Decimal("100.00"), subtotal=Decimal("200.00")
        )],
        shipping_address=ShippingAddress(
            name="Ana", email="ana@example.com", phone="3001234567",
            address="Calle 1 #2-3", city="Bogota", postal_code="110111"
        ),
        payment_info=PaymentInfo(method="cash_on_delivery"),
        subtotal=Decimal("200.00"),
        tax=Decimal("38.00"),
        total=Decimal("238.00"),
        status="pending",
        loyalty_points_used=0,
        ordered_at=NOW,
    )
    data.update(overrides)
    return Order(**data)


def product_row(**overrides) -> dict:
    """A products row as returned by RealDictCursor"""
    row = {
        'id': 1,
        'name': 'Runner X',
        'description': 'Lightweight running shoe',
        'price': Decimal('100.00'),
        'stock': 10,
        'product_type_id': 1,
        'product_type_name': 'Sneakers',
        'brand': 'Tekashi',
        'model': 'RX-1',
        'material': 'mesh',
        'sizes': ['40', '41'],
        'colors': ['black'],
        'gender': 'unisex',
        'age_group': 'adult',
        'season': 'all_year',
        'is_active': True,
        'is_featured': False,
        'offer_active': False,
        'offer_discount': Decimal('0'),
        'offer_price': None,
        'offer_starts_at': None,
        'offer_ends_at': None,
        'slug': 'runner-x',
        'meta_description': None,
        'keywords': [],
        'views': 3,
        'sales_count': 1,
        'rating_average': Decimal('4.5'),
        'rating_count': 2,
        'translations': {'en': {'name': 'Runner X', 'description': 'Running shoe'}},
        'created_at': NOW,
        'updated_at': None,
    }
    row.update(overrides)
    return row
