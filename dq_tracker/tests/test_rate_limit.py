"""
Tests for the per-IP sliding-window rate limiter and the security headers.

The limiter takes an injectable clock, so window expiry is tested by moving a
fake clock instead of sleeping.
"""

from typing import List

from fastapi import FastAPI
from fastapi.testclient import TestClient

from dq_tracker.middleware import (
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
    SlidingWindowLimiter,
)
from dq_tracker.middleware.rate_limit import RATE_LIMIT_MESSAGE


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def build_app(limiter: SlidingWindowLimiter) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/api/ping")
    async def ping() -> dict:
        return {"success": True}

    @app.get("/health")
    async def health() -> dict:
        return {"success": True}

    return app


class TestSlidingWindowLimiter:

    def test_admits_up_to_max_then_rejects(self) -> None:
        limiter = SlidingWindowLimiter(3, 60, clock=FakeClock())

        results: List[bool] = [limiter.hit("10.0.0.1") for _ in range(4)]

        assert results == [True, True, True, False]

    def test_keys_are_independent(self) -> None:
        limiter = SlidingWindowLimiter(1, 60, clock=FakeClock())

        assert limiter.hit("10.0.0.1") is True
        assert limiter.hit("10.0.0.2") is True
        assert limiter.hit("10.0.0.1") is False

    def test_window_slides(self) -> None:
        clock = FakeClock()
        limiter = SlidingWindowLimiter(2, 60, clock=clock)

        limiter.hit("ip")
        clock.now += 30
        limiter.hit("ip")
        assert limiter.hit("ip") is False

        # first request ages out; the second is still inside the window
        clock.now += 31
        assert limiter.hit("ip") is True
        assert limiter.hit("ip") is False

    def test_retry_after_counts_down_to_oldest_expiry(self) -> None:
        clock = FakeClock()
        limiter = SlidingWindowLimiter(1, 900, clock=clock)

        limiter.hit("ip")
        clock.now += 100

        assert limiter.retry_after("ip") == 800
        assert limiter.retry_after("unknown") == 0

    def test_idle_clients_are_dropped_from_the_table(self) -> None:
        clock = FakeClock()
        limiter = SlidingWindowLimiter(5, 60, clock=clock)

        limiter.hit("10.0.0.1")
        limiter.hit("10.0.0.2")
        clock.now += 50
        limiter.hit("10.0.0.3")
        assert limiter.tracked_keys == 3

        # .1 and .2 have aged out; .3 is still inside its window
        clock.now += 11
        limiter.hit("10.0.0.4")

        assert limiter.tracked_keys == 2
        assert limiter.remaining("10.0.0.1") == 5
        assert limiter.remaining("10.0.0.3") == 4

    def test_rejected_requests_do_not_extend_the_window(self) -> None:
        clock = FakeClock()
        limiter = SlidingWindowLimiter(1, 60, clock=clock)

        limiter.hit("ip")
        for _ in range(5):
            clock.now += 10
            limiter.hit("ip")

        clock.now += 11
        assert limiter.hit("ip") is True


class TestRateLimitMiddleware:

    def test_over_limit_gets_429_envelope(self) -> None:
        client = TestClient(build_app(SlidingWindowLimiter(2, 900, clock=FakeClock())))

        assert client.get("/api/ping").status_code == 200
        assert client.get("/api/ping").status_code == 200
        response = client.get("/api/ping")

        assert response.status_code == 429
        assert response.json() == {"success": False, "message": RATE_LIMIT_MESSAGE}
        assert response.headers["Retry-After"] == "900"

    def test_rate_limit_headers_on_admitted_requests(self) -> None:
        client = TestClient(build_app(SlidingWindowLimiter(5, 900, clock=FakeClock())))

        response = client.get("/api/ping")

        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Remaining"] == "4"

    def test_paths_outside_api_are_not_limited(self) -> None:
        client = TestClient(build_app(SlidingWindowLimiter(1, 900, clock=FakeClock())))

        for _ in range(3):
            assert client.get("/health").status_code == 200


class TestSecurityHeaders:

    def test_headers_on_every_response(self) -> None:
        client = TestClient(build_app(SlidingWindowLimiter(1, 900, clock=FakeClock())))

        ok = client.get("/health")
        client.get("/api/ping")
        limited = client.get("/api/ping")

        for response in (ok, limited):
            assert response.headers["X-Content-Type-Options"] == "nosniff"
            assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
