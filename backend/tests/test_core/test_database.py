"""
Tests for the transaction() unit of work and connection retries

Author: Tekashi
Date: 2025-11-03
"""
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from tekashi.core import database


class TestTransaction:

    @patch('tekashi.core.database.get_db_connection_dict_with_retry')
    def test_commits_on_success(self, mock_connect):
        conn = MagicMock()
        mock_connect.return_value = conn

        with database.transaction() as tx:
            assert tx is conn

        conn.commit.assert_called_once()
        conn.rollback.assert_not_called()
        conn.close.assert_called_once()

    @patch('tekashi.core.database.get_db_connection_dict_with_retry')
    def test_rolls_back_and_reraises(self, mock_connect):
        conn = MagicMock()
        mock_connect.return_value = conn

        with pytest.raises(ValueError):
            with database.transaction():
                raise ValueError("stock went negative")

        conn.commit.assert_not_called()
        conn.rollback.assert_called_once()
        conn.close.assert_called_once()


class TestRetry:

    @patch('tekashi.core.database.time.sleep')
    @patch('tekashi.core.database.psycopg2.connect')
    def test_retries_operational_errors(self, mock_connect, mock_sleep):
        conn = MagicMock()
        mock_connect.side_effect = [psycopg2.OperationalError("starting up"), conn]

        assert database.get_db_connection_with_retry(max_retries=3, retry_delay=0.5) is conn
        mock_sleep.assert_called_once_with(0.5)

    @patch('tekashi.core.database.time.sleep')
    @patch('tekashi.core.database.psycopg2.connect')
    def test_gives_up_after_max_retries(self, mock_connect, mock_sleep):
        mock_connect.side_effect = psycopg2.OperationalError("down")

        with pytest.raises(psycopg2.OperationalError):
            database.get_db_connection_with_retry(max_retries=2, retry_delay=0.1)

        assert mock_connect.call_count == 2
