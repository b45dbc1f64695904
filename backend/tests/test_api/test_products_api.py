"""
API tests for /api/v1/products and the service endpoints in main

Author: Tekashi
Date: 2025-11-03
"""
from decimal import Decimal
from unittest.mock import patch

from tekashi.core.auth import get_current_account, get_optional_account
from tekashi.core.exceptions import NotFoundError, ValidationError
from tekashi.domain.product import ProductOffer
from tekashi.main import app

from conftest import make_admin, make_product, make_user


def act_as(account):
    app.dependency_overrides[get_current_account] = lambda: account
    app.dependency_overrides[get_optional_account] = lambda: account


class TestServiceEndpoints:

    def test_root(self, api_client):
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "online"

    @patch('tekashi.main.get_db_connection_with_retry')
    def test_health_degraded_without_database(self, mock_connect, api_client):
        mock_connect.side_effect = Exception("connection refused")

        body = api_client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["database"]["status"] == "disconnected"


class TestCatalogBrowsing:

    @patch('tekashi.api.products.ProductRepository')
    def test_list_products(self, mock_repo_class, api_client):
        mock_repo_class.return_value.find_all.return_value = (
            [make_product(offer=ProductOffer(active=True, discount=Decimal("10")))], 1
        )

        response = api_client.get("/api/v1/products/?gender=unisex&sort=price&direction=asc")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["count"] == 1
        assert body["data"][0]["final_price"] == 90.0
        kwargs = mock_repo_class.return_value.find_all.call_args.kwargs
        assert kwargs["gender"] == "unisex"
        assert kwargs["direction"] == "asc"

    def test_bad_direction_is_422(self, api_client):
        assert api_client.get("/api/v1/products/?direction=sideways").status_code == 422

    @patch('tekashi.api.products.ProductRepository')
    def test_search_requires_text(self, mock_repo_class, api_client):
        assert api_client.get("/api/v1/products/search").status_code == 422

        mock_repo_class.return_value.search.return_value = ([], 0)
        assert api_client.get("/api/v1/products/search?q=boot").status_code == 200

    @patch('tekashi.api.products.CatalogService')
    def test_signed_in_view_is_counted(self, mock_service_class, api_client):
        act_as(make_user())
        mock_service_class.return_value.get_product.return_value = make_product()

        api_client.get("/api/v1/products/1")

        mock_service_class.return_value.get_product.assert_called_once_with(1, count_view=True)

    @patch('tekashi.api.products.CatalogService')
    def test_anonymous_view_is_not_counted(self, mock_service_class, api_client):
        act_as(None)
        mock_service_class.return_value.get_product.return_value = make_product()

        api_client.get("/api/v1/products/1")

        mock_service_class.return_value.get_product.assert_called_once_with(1, count_view=False)

    @patch('tekashi.api.products.CatalogService')
    def test_missing_product_is_404(self, mock_service_class, api_client):
        act_as(None)
        mock_service_class.return_value.get_product.side_effect = NotFoundError("Product 9 not found")

        response = api_client.get("/api/v1/products/9")

        assert response.status_code == 404
        assert response.json() == {"detail": "Product 9 not found"}


class TestCatalogManagement:

    def test_customers_cannot_create_products(self, api_client):
        act_as(make_user())
        response = api_client.post(
            "/api/v1/products/", json={"name": "Boot", "price": 10, "product_type_id": 1}
        )
        assert response.status_code == 403

    @patch('tekashi.api.products.CatalogService')
    def test_admin_creates_product(self, mock_service_class, api_client):
        act_as(make_admin())
        mock_service_class.return_value.create_product.return_value = make_product(id=12, name="Boot")

        response = api_client.post(
            "/api/v1/products/", json={"name": "Boot", "price": 10, "product_type_id": 1}
        )

        assert response.status_code == 201
        assert response.json()["data"]["id"] == 12

    @patch('tekashi.api.products.CatalogService')
    def test_unknown_type_is_400(self, mock_service_class, api_client):
        act_as(make_admin())
        mock_service_class.return_value.create_product.side_effect = ValidationError(
            "Product type 9 does not exist"
        )

        response = api_client.post(
            "/api/v1/products/", json={"name": "Boot", "price": 10, "product_type_id": 9}
        )

        assert response.status_code == 400

    @patch('tekashi.api.products.ProductRepository')
    def test_negative_stock_is_rejected(self, mock_repo_class, api_client):
        act_as(make_admin())

        response = api_client.patch("/api/v1/products/1/stock", json={"stock": -1})

        assert response.status_code == 422
        mock_repo_class.return_value.set_stock.assert_not_called()

    @patch('tekashi.api.products.ProductRepository')
    def test_offer_on_missing_product_is_404(self, mock_repo_class, api_client):
        act_as(make_admin())
        mock_repo_class.return_value.set_offer.return_value = None

        response = api_client.patch("/api/v1/products/99/offer", json={"active": True, "discount": 20})

        assert response.status_code == 404

    def test_offer_window_is_validated(self, api_client):
        act_as(make_admin())

        response = api_client.patch("/api/v1/products/1/offer", json={
            "active": True,
            "starts_at": "2025-12-01T00:00:00Z",
            "ends_at": "2025-11-01T00:00:00Z",
        })

        assert response.status_code == 422
