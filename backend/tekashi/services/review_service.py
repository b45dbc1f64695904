"""
Review Service
Product reviews: one active review per user and product, purchase
verification, and keeping the product rating in step with its reviews

Author: Tekashi
Date: 2025-10-31
"""
import logging
from typing import Optional

from tekashi.core.database import transaction
from tekashi.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from tekashi.domain.common import utcnow
from tekashi.domain.review import AdminReply, Review, ReviewCreate, ReviewUpdate
from tekashi.domain.user import User
from tekashi.repositories.order_repository import OrderRepository
from tekashi.repositories.product_repository import ProductRepository
from tekashi.repositories.review_repository import ReviewRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """Review rules on top of ReviewRepository"""

    def __init__(
        self,
        review_repository: Optional[ReviewRepository] = None,
        product_repository: Optional[ProductRepository] = None,
        order_repository: Optional[OrderRepository] = None
    ):
        self.reviews = review_repository or ReviewRepository()
        self.products = product_repository or ProductRepository()
        self.orders = order_repository or OrderRepository()

    def get_review(self, review_id: int) -> Review:
        review = self.reviews.find_by_id(review_id)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        return review

    def _get_editable(self, review_id: int, account: User) -> Review:
        review = self.get_review(review_id)
        if not account.is_admin and review.user_id != account.id:
            raise PermissionDeniedError("You can only modify your own reviews")
        return review

    def create_review(self, account: User, data: ReviewCreate) -> Review:
        """
        Raises:
            NotFoundError: the product doesn't exist
            ConflictError: the user already has an active review for it
        """
        if self.products.find_by_id(data.product_id) is None:
            raise NotFoundError(f"Product {data.product_id} not found")

        if self.reviews.find_active(account.id, data.product_id) is not None:
            raise ConflictError("You have already reviewed this product")

        purchase_verified = self.orders.has_delivered_product(account.id, data.product_id)

        with transaction() as conn:
            review = self.reviews.create(account.id, data, purchase_verified, conn=conn)
            self.products.refresh_rating(data.product_id, conn=conn)

        logger.info(f"User {account.id} reviewed product {data.product_id} ({data.rating} stars)")
        return review

    def update_review(self, review_id: int, account: User, data: ReviewUpdate) -> Review:
        current = self._get_editable(review_id, account)
        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return current

        with transaction() as conn:
            review = self.reviews.update(review_id, fields, conn=conn)
            if review is None:
                raise NotFoundError(f"Review {review_id} not found")
            if 'rating' in fields:
                self.products.refresh_rating(review.product_id, conn=conn)
        return review

    def delete_review(self, review_id: int, account: User) -> None:
        review = self._get_editable(review_id, account)
        with transaction() as conn:
            if not self.reviews.deactivate(review_id, conn=conn):
                raise NotFoundError(f"Review {review_id} not found")
            self.products.refresh_rating(review.product_id, conn=conn)
        logger.info(f"Review {review_id} removed by user {account.id}")

    def vote(self, review_id: int, helpful: bool) -> Review:
        review = self.reviews.vote(review_id, helpful)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        return review

    def report(self, review_id: int, reason: Optional[str] = None) -> Review:
        review = self.reviews.update(review_id, {'reported': True, 'report_reason': reason})
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        logger.warning(f"Review {review_id} reported: {reason or 'no reason given'}")
        return review

    def reply(self, review_id: int, admin: User, text: str) -> Review:
        reply = AdminReply(text=text, replied_at=utcnow(), admin_id=admin.id)
        review = self.reviews.set_admin_reply(review_id, reply.model_dump(mode="json"))
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        return review

    def verify(self, review_id: int, verified: bool = True) -> Review:
        review = self.reviews.update(review_id, {'verified': verified})
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")
        return review
