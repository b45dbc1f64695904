"""
Unit tests for ReviewRepository

Author: Tekashi
Date: 2025-11-04
"""
from decimal import Decimal

from tekashi.repositories.review_repository import ReviewRepository

from conftest import NOW


def review_row(**overrides) -> dict:
    row = {
        'id': 31,
        'product_id': 1,
        'user_id': 7,
        'user_name': 'Ana',
        'rating': 4,
        'title': 'Comfortable',
        'comment': 'Good for long runs',
        'pros': None,
        'cons': None,
        'recommends': True,
        'helpful_count': 3,
        'not_helpful_count': 1,
        'verified': False,
        'purchase_verified': True,
        'is_active': True,
        'reported': False,
        'report_reason': None,
        'admin_reply': None,
        'created_at': NOW,
        'updated_at': None,
    }
    row.update(overrides)
    return row


class TestReviewRepository:

    def test_find_by_id_maps_joined_author(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = review_row()

        review = ReviewRepository().find_by_id(31)

        assert review.user_name == "Ana"
        assert review.pros == []
        assert review.helpfulness == 75

    def test_product_stats_fill_every_star(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = {
            'total': 3,
            'average': Decimal('4.3'),
            'helpful_total': Decimal('6'),
            'not_helpful_total': Decimal('2'),
            'verified_count': 1,
            'purchase_verified_count': 2,
            'recommend_count': 3,
        }
        mock_cursor.fetchall.return_value = [
            {'rating': 5, 'count': 1},
            {'rating': 4, 'count': 2},
        ]

        stats = ReviewRepository().get_product_stats(1)

        assert stats.total == 3
        assert stats.average == 4.3
        assert stats.distribution == {1: 0, 2: 0, 3: 0, 4: 2, 5: 1}
        assert stats.helpfulness == 75

        for call in mock_cursor.execute.call_args_list:
            sql, params = call.args
            assert "is_active = TRUE" in sql
            assert params == (1,)

    def test_vote_on_missing_review_returns_none(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert ReviewRepository().vote(99, helpful=False) is None

        sql = mock_cursor.execute.call_args.args[0]
        assert "not_helpful_count = not_helpful_count + 1" in sql
