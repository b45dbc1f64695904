"""
Unit tests for wishlists, notifications, reviews and images

Author: Tekashi
Date: 2025-11-03
"""
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from tekashi.domain.common import utcnow
from tekashi.domain.image import Image, StorageProvider, optimized_urls
from tekashi.domain.notification import Notification, elapsed_text
from tekashi.domain.product import ProductOffer
from tekashi.domain.review import ReviewStats, helpfulness_percent
from tekashi.domain.wishlist import ShareSettings, Wishlist, WishlistItem, generate_share_code

from conftest import make_product


def make_wishlist(**overrides) -> Wishlist:
    data = dict(id=5, user_id=7, name="Birthday", is_public=True, share=ShareSettings(code="ABCD1234"))
    data.update(overrides)
    return Wishlist(**data)


class TestWishlistSharing:

    def test_share_code_format(self):
        assert re.fullmatch(r"[0-9A-F]{8}", generate_share_code())

    def test_public_list_with_code_can_be_shared(self):
        assert make_wishlist().can_share()

    def test_private_list_cannot_be_shared(self):
        assert not make_wishlist(is_public=False).can_share()

    def test_list_without_code_cannot_be_shared(self):
        assert not make_wishlist(share=ShareSettings()).can_share()

    def test_expired_code_cannot_be_shared(self):
        share = ShareSettings(code="ABCD1234", expires_at=utcnow() - timedelta(hours=1))
        assert not make_wishlist(share=share).can_share()

    def test_use_limit(self):
        assert not make_wishlist(share=ShareSettings(code="ABCD1234", max_uses=3, use_count=3)).can_share()
        assert make_wishlist(share=ShareSettings(code="ABCD1234", max_uses=3, use_count=2)).can_share()
        assert make_wishlist(share=ShareSettings(code="ABCD1234", max_uses=0, use_count=500)).can_share()


class TestWishlistValues:

    def test_total_value_uses_final_price_of_active_products(self):
        wishlist = make_wishlist(items=[
            WishlistItem(product_id=1, quantity=2, product=make_product(id=1, price=Decimal("10.00"))),
            WishlistItem(product_id=2, quantity=1, product=make_product(
                id=2, price=Decimal("50.00"), offer=ProductOffer(active=True, discount=Decimal("10"))
            )),
            WishlistItem(product_id=3, quantity=5, product=make_product(id=3, is_active=False)),
            WishlistItem(product_id=4, quantity=1, product=None),
        ])

        assert wishlist.total_value == Decimal("65.00")
        assert [item.product_id for item in wishlist.items_on_offer] == [2]

    def test_find_item(self):
        wishlist = make_wishlist(items=[WishlistItem(product_id=9)])
        assert wishlist.find_item(9).product_id == 9
        assert wishlist.find_item(10) is None


class TestNotifications:
    now = datetime(2025, 11, 3, 12, 0, tzinfo=timezone.utc)

    def test_elapsed_text(self):
        assert elapsed_text(self.now - timedelta(seconds=20), self.now) == "just now"
        assert elapsed_text(self.now - timedelta(minutes=1), self.now) == "1 minute ago"
        assert elapsed_text(self.now - timedelta(minutes=45), self.now) == "45 minutes ago"
        assert elapsed_text(self.now - timedelta(hours=3), self.now) == "3 hours ago"
        assert elapsed_text(self.now - timedelta(days=2, hours=5), self.now) == "2 days ago"

    def test_expiry(self):
        expired = Notification(id=1, user_id=7, title="t", message="m", expires_at=utcnow() - timedelta(days=1))
        current = Notification(id=2, user_id=7, title="t", message="m")
        assert expired.is_expired
        assert not current.is_expired

    def test_translation_with_fallback(self):
        notification = Notification(
            id=1, user_id=7, title="Pedido enviado", message="Tu pedido va en camino",
            translations={"en": {"title": "Order shipped"}}
        )

        data = notification.to_dict("en")
        assert data['title'] == "Order shipped"
        assert data['message'] == "Tu pedido va en camino"
        assert notification.to_dict()['title'] == "Pedido enviado"


class TestReviewHelpfulness:

    def test_percent(self):
        assert helpfulness_percent(0, 0) == 0
        assert helpfulness_percent(3, 1) == 75
        assert helpfulness_percent(2, 1) == 67

    def test_stats_default_distribution(self):
        stats = ReviewStats()
        assert stats.distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
        assert stats.helpfulness == 0


class TestImageUrls:

    def test_cloudinary_transformations(self):
        url = "https://res.cloudinary.com/tekashi/image/upload/v1/shoes/runner.jpg"
        optimized, thumbnail = optimized_urls(url, StorageProvider.CLOUDINARY)

        assert optimized == (
            "https://res.cloudinary.com/tekashi/image/upload/"
            "w_800,h_600,c_fill,q_auto,f_auto/v1/shoes/runner.jpg"
        )
        assert thumbnail == (
            "https://res.cloudinary.com/tekashi/image/upload/"
            "w_300,h_300,c_fill,q_auto,f_auto/v1/shoes/runner.jpg"
        )

    def test_s3_folders(self):
        url = "https://bucket.s3.amazonaws.com/original/runner.jpg"
        optimized, thumbnail = optimized_urls(url, StorageProvider.AWS_S3)

        assert optimized == "https://bucket.s3.amazonaws.com/optimized/runner.jpg"
        assert thumbnail == "https://bucket.s3.amazonaws.com/thumbnails/runner.jpg"

    def test_other_providers_reuse_url(self):
        assert optimized_urls("/img/a.png", StorageProvider.LOCAL) == ("/img/a.png", "/img/a.png")

    def test_full_url_prefixes_relative_paths(self):
        image = Image(id=1, url="/uploads/runner.jpg", name="Runner", product_type_id=1)

        assert image.full_url("http://localhost:8080/") == "http://localhost:8080/uploads/runner.jpg"
        assert image.urls("http://localhost:8080")["thumbnail"] == "http://localhost:8080/uploads/runner.jpg"

    def test_full_url_keeps_absolute_urls(self):
        image = Image(id=1, url="https://cdn.example.com/a.jpg", name="A", product_type_id=1)
        assert image.full_url("http://localhost:8080") == "https://cdn.example.com/a.jpg"
