"""
API tests for /api/v1/wishlists

Author: Tekashi
Date: 2025-11-04
"""
from unittest.mock import patch

from tekashi.core.auth import get_current_account, get_optional_account
from tekashi.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from tekashi.domain.wishlist import ShareSettings, Wishlist, WishlistItem
from tekashi.main import app

from conftest import NOW, make_product, make_user


def act_as(account):
    app.dependency_overrides[get_current_account] = lambda: account
    app.dependency_overrides[get_optional_account] = lambda: account


def act_as_guest():
    app.dependency_overrides[get_optional_account] = lambda: None


def make_wishlist(**overrides) -> Wishlist:
    data = dict(
        id=5, user_id=7, name="Birthday", is_public=True,
        share=ShareSettings(code="ABCD1234", max_uses=3, use_count=1),
        items=[WishlistItem(id=21, wishlist_id=5, product_id=1, quantity=2, product=make_product())],
        created_at=NOW,
    )
    data.update(overrides)
    return Wishlist(**data)


class TestSharedWishlists:

    @patch('tekashi.api.wishlists.WishlistService')
    def test_shared_code_is_public(self, mock_service_class, api_client):
        act_as_guest()
        mock_service_class.return_value.find_shared.return_value = make_wishlist()

        response = api_client.get("/api/v1/wishlists/shared/abcd1234")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["item_count"] == 1
        assert data["total_value"] == 200.0
        mock_service_class.return_value.find_shared.assert_called_once_with("abcd1234")

    @patch('tekashi.api.wishlists.WishlistService')
    def test_used_up_share_code_is_404(self, mock_service_class, api_client):
        mock_service_class.return_value.find_shared.side_effect = NotFoundError("Shared wishlist not found")

        response = api_client.get("/api/v1/wishlists/shared/ABCD1234")

        assert response.status_code == 404
        assert response.json()["detail"] == "Shared wishlist not found"

    @patch('tekashi.api.wishlists.WishlistService')
    def test_private_wishlist_is_403_for_guests(self, mock_service_class, api_client):
        act_as_guest()
        mock_service_class.return_value.view.side_effect = PermissionDeniedError("This wishlist is private")

        response = api_client.get("/api/v1/wishlists/5")

        assert response.status_code == 403
        mock_service_class.return_value.view.assert_called_once_with(5, None)


class TestWishlistItems:

    @patch('tekashi.api.wishlists.WishlistService')
    def test_add_item(self, mock_service_class, api_client):
        user = make_user()
        act_as(user)
        mock_service_class.return_value.add_item.return_value = WishlistItem(
            id=22, wishlist_id=5, product_id=2, priority=5
        )

        response = api_client.post("/api/v1/wishlists/5/items", json={"product_id": 2, "priority": 5})

        assert response.status_code == 201
        assert response.json()["data"]["product_id"] == 2
        wishlist_id, account, data = mock_service_class.return_value.add_item.call_args.args
        assert (wishlist_id, account.id, data.priority) == (5, 7, 5)

    @patch('tekashi.api.wishlists.WishlistService')
    def test_duplicate_item_is_400(self, mock_service_class, api_client):
        act_as(make_user())
        mock_service_class.return_value.add_item.side_effect = ConflictError("Product is already in this wishlist")

        response = api_client.post("/api/v1/wishlists/5/items", json={"product_id": 1})

        assert response.status_code == 400

    @patch('tekashi.api.wishlists.WishlistService')
    def test_quantity_must_be_positive(self, mock_service_class, api_client):
        act_as(make_user())

        response = api_client.put("/api/v1/wishlists/5/items/1", json={"quantity": 0})

        assert response.status_code == 422
        mock_service_class.return_value.update_item.assert_not_called()


class TestSharingSettings:

    @patch('tekashi.api.wishlists.WishlistService')
    def test_configure_sharing(self, mock_service_class, api_client):
        act_as(make_user())
        mock_service_class.return_value.configure_sharing.return_value = make_wishlist()

        response = api_client.put("/api/v1/wishlists/5/share", json={"is_public": True, "max_uses": 3})

        assert response.status_code == 200
        assert response.json()["data"]["share"]["code"] == "ABCD1234"
        share = mock_service_class.return_value.configure_sharing.call_args.args[2]
        assert share.max_uses == 3

    @patch('tekashi.api.wishlists.WishlistRepository')
    def test_other_users_lists_require_admin(self, mock_repo_class, api_client):
        act_as(make_user())

        assert api_client.get("/api/v1/wishlists/user/8").status_code == 403
        mock_repo_class.return_value.find_by_user.assert_not_called()
