# app/tests/test_rate_limiter.py
"""
Tests for rate limiting functionality.

These tests verify:
1. Hits within the quota are allowed
2. The hit after the quota is limited until the window resets
3. Keys are independent
4. Injected window maps are shared between limiters
5. Login, pet and memorial endpoints answer 429 with Retry-After
"""
from unittest.mock import MagicMock

import pytest

from app.rate_limiter import (
    DEFAULT_POLICY,
    LOGIN_POLICY,
    MEMORIAL_CREATE_POLICY,
    PET_CREATE_POLICY,
    RateLimiter,
    RateLimitPolicy,
    RateLimitResult,
    get_client_ip,
)


class TestPolicies:
    """The named policies carry the documented quotas."""

    def test_quotas(self):
        assert (LOGIN_POLICY.points, LOGIN_POLICY.window_seconds) == (5, 60)
        assert (MEMORIAL_CREATE_POLICY.points, MEMORIAL_CREATE_POLICY.window_seconds) == (10, 60)
        assert (PET_CREATE_POLICY.points, PET_CREATE_POLICY.window_seconds) == (20, 60)
        assert (DEFAULT_POLICY.points, DEFAULT_POLICY.window_seconds) == (20, 60)


class TestFixedWindow:
    """Tests for RateLimiter.consume."""

    def test_first_hit_opens_window(self, clock):
        limiter = RateLimiter(clock=clock)
        result = limiter.consume("k", RateLimitPolicy(points=3, window_seconds=60))

        assert result.limited is False
        assert result.remaining == 2
        assert result.reset_at == clock.now + 60

    def test_quota_then_limited(self, clock):
        limiter = RateLimiter(clock=clock)
        policy = RateLimitPolicy(points=3, window_seconds=60)

        remaining = [limiter.consume("k", policy).remaining for _ in range(3)]
        assert remaining == [2, 1, 0]

        blocked = limiter.consume("k", policy)
        assert blocked.limited is True
        assert blocked.remaining == 0

    def test_limited_hits_do_not_extend_window(self, clock):
        limiter = RateLimiter(clock=clock)
        policy = RateLimitPolicy(points=1, window_seconds=60)

        first = limiter.consume("k", policy)
        clock.advance(30)
        blocked = limiter.consume("k", policy)

        assert blocked.limited
        assert blocked.reset_at == first.reset_at

    def test_window_resets(self, clock):
        limiter = RateLimiter(clock=clock)
        policy = RateLimitPolicy(points=2, window_seconds=60)

        limiter.consume("k", policy)
        limiter.consume("k", policy)
        assert limiter.consume("k", policy).limited

        clock.advance(60)
        result = limiter.consume("k", policy)
        assert result.limited is False
        assert result.remaining == 1

    def test_keys_are_independent(self, clock):
        limiter = RateLimiter(clock=clock)
        policy = RateLimitPolicy(points=1, window_seconds=60)

        limiter.consume("login:1.1.1.1", policy)
        assert limiter.consume("login:1.1.1.1", policy).limited
        assert not limiter.consume("login:2.2.2.2", policy).limited

    def test_default_policy(self, clock):
        limiter = RateLimiter(clock=clock)
        results = [limiter.consume("k") for _ in range(21)]

        assert not any(r.limited for r in results[:20])
        assert results[20].limited

    def test_shared_window_map(self, clock):
        shared = {}
        policy = RateLimitPolicy(points=2, window_seconds=60)
        first = RateLimiter(clock=clock, windows=shared)
        second = RateLimiter(clock=clock, windows=shared)

        first.consume("k", policy)
        second.consume("k", policy)
        assert first.consume("k", policy).limited

    def test_reset_clears_windows(self, clock):
        limiter = RateLimiter(clock=clock)
        policy = RateLimitPolicy(points=1, window_seconds=60)

        limiter.consume("k", policy)
        limiter.reset()
        assert not limiter.consume("k", policy).limited


class TestRetryAfter:

    def test_rounds_up(self):
        result = RateLimitResult(limited=True, remaining=0, reset_at=100.2)
        assert result.retry_after(now=90.0) == 11

    def test_at_least_one_second(self):
        result = RateLimitResult(limited=True, remaining=0, reset_at=100.0)
        assert result.retry_after(now=100.0) == 1


class TestGetClientIp:

    def test_direct_peer(self):
        request = MagicMock()
        request.client.host = "10.0.0.7"
        request.headers = {}
        assert get_client_ip(request) == "10.0.0.7"

    def test_forwarded_for_fallback(self):
        request = MagicMock()
        request.client = None
        request.headers = {"x-forwarded-for": "203.0.113.5, 10.0.0.1"}
        assert get_client_ip(request) == "203.0.113.5"

    def test_unknown(self):
        request = MagicMock()
        request.client = None
        request.headers = {}
        assert get_client_ip(request) == "unknown"


class TestEndpointLimits:

    def test_login_limited_after_five_attempts(self, client, clock):
        body = {"email": "owner@example.com", "password": "wrong-password-xyz"}
        statuses = [client.post("/api/auth/login", json=body).status_code for _ in range(5)]
        assert statuses == [401] * 5

        response = client.post("/api/auth/login", json=body)
        assert response.status_code == 429
        assert response.json()["error"] == "Too many login attempts. Please wait before retrying."
        assert response.headers["Retry-After"] == "60"

    def test_login_limit_lifts_after_window(self, client, clock):
        body = {"email": "owner@example.com", "password": "wrong-password-xyz"}
        for _ in range(5):
            client.post("/api/auth/login", json=body)
        assert client.post("/api/auth/login", json=body).status_code == 429

        clock.advance(60)
        assert client.post("/api/auth/login", json=body).status_code == 401

    def test_retry_after_counts_down(self, client, clock):
        body = {"email": "owner@example.com", "password": "wrong-password-xyz"}
        for _ in range(5):
            client.post("/api/auth/login", json=body)

        clock.advance(45.5)
        response = client.post("/api/auth/login", json=body)
        assert response.headers["Retry-After"] == "15"

    def test_pet_creation_limited(self, logged_in_client):
        for index in range(20):
            response = logged_in_client.post("/api/pets", json={"name": f"Pet {index}", "species": "dog"})
            assert response.status_code == 201

        response = logged_in_client.post("/api/pets", json={"name": "One too many", "species": "dog"})
        assert response.status_code == 429
        assert "Retry-After" in response.headers

    def test_health_is_not_limited(self, client):
        for _ in range(30):
            assert client.get("/health").status_code == 200
