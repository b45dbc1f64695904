"""
Tests for the sliding-window rate limiter and its middleware

Author: Tekashi
Date: 2025-11-03
"""
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tekashi.core.config import settings
from tekashi.core.rate_limit import RateLimiter, RateLimitMiddleware, rate_limiter


class TestRateLimiter:

    def test_allows_up_to_limit(self):
        limiter = RateLimiter()

        results = [limiter.is_allowed("ip:1.2.3.4", max_requests=3) for _ in range(4)]

        assert [allowed for allowed, _, _ in results] == [True, True, True, False]
        assert [remaining for _, remaining, _ in results] == [2, 1, 0, 0]
        assert 1 <= results[-1][2] <= 61

    def test_callers_are_counted_separately(self):
        limiter = RateLimiter()
        limiter.is_allowed("ip:a", max_requests=1)

        assert limiter.is_allowed("ip:b", max_requests=1)[0]
        assert not limiter.is_allowed("ip:a", max_requests=1)[0]

    def test_window_slides(self):
        limiter = RateLimiter()
        with patch('tekashi.core.rate_limit.time.time', return_value=1000.0):
            assert limiter.is_allowed("ip:a", max_requests=1, window_seconds=60)[0]
            assert not limiter.is_allowed("ip:a", max_requests=1, window_seconds=60)[0]
        with patch('tekashi.core.rate_limit.time.time', return_value=1061.0):
            assert limiter.is_allowed("ip:a", max_requests=1, window_seconds=60)[0]

    def test_reset(self):
        limiter = RateLimiter()
        limiter.is_allowed("ip:a", max_requests=1)
        limiter.reset()
        assert limiter.is_allowed("ip:a", max_requests=1)[0]


class TestRateLimitMiddleware:

    @pytest.fixture
    def client(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_UNAUTHENTICATED", 2)
        monkeypatch.setattr(settings, "RATE_LIMIT_AUTHENTICATED", 5)
        rate_limiter.reset()

        app = FastAPI()
        app.add_middleware(RateLimitMiddleware)

        @app.get("/items")
        async def items():
            return {"ok": True}

        @app.get("/health")
        async def health():
            return {"ok": True}

        yield TestClient(app)
        rate_limiter.reset()

    def test_anonymous_limit(self, client):
        first = client.get("/items")
        client.get("/items")
        third = client.get("/items")

        assert first.headers["X-RateLimit-Limit"] == "2"
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert third.status_code == 429
        assert "Retry-After" in third.headers

    def test_bearer_callers_get_higher_limit(self, client):
        headers = {"Authorization": "Bearer abc"}
        responses = [client.get("/items", headers=headers) for _ in range(3)]

        assert all(r.status_code == 200 for r in responses)
        assert responses[0].headers["X-RateLimit-Limit"] == "5"

    def test_forwarded_ip_is_used(self, client):
        client.get("/items", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
        client.get("/items", headers={"X-Forwarded-For": "10.0.0.1"})

        assert client.get("/items", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
        assert client.get("/items", headers={"X-Forwarded-For": "10.0.0.2"}).status_code == 200

    def test_health_is_exempt(self, client):
        responses = [client.get("/health") for _ in range(5)]
        assert all(r.status_code == 200 for r in responses)
        assert "X-RateLimit-Limit" not in responses[0].headers
