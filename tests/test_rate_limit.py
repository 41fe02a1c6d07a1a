# =============================================================================
# tests/test_rate_limit.py - Rate Limiting Tests
# =============================================================================

from foodapi.middleware.rate_limit import RATE_LIMIT_MESSAGE, FixedWindowRateLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestFixedWindowRateLimiter:
    """Test the in-memory counter."""

    def test_counts_until_limit(self):
        limiter = FixedWindowRateLimiter(window_seconds=900, max_requests=3, clock=FakeClock())

        results = [limiter.hit("1.2.3.4") for _ in range(4)]

        assert [r.exceeded for r in results] == [False, False, False, True]
        assert [r.remaining for r in results] == [2, 1, 0, 0]

    def test_rejected_hits_still_count(self):
        limiter = FixedWindowRateLimiter(window_seconds=900, max_requests=1, clock=FakeClock())
        limiter.hit("ip")
        limiter.hit("ip")
        assert limiter.hit("ip").count == 3

    def test_window_resets(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(window_seconds=900, max_requests=1, clock=clock)
        limiter.hit("ip")
        assert limiter.hit("ip").exceeded

        clock.advance(900)

        result = limiter.hit("ip")
        assert not result.exceeded
        assert result.count == 1
        assert result.reset_after == 900

    def test_window_starts_at_first_hit(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(window_seconds=900, max_requests=5, clock=clock)
        limiter.hit("ip")
        clock.advance(600)
        assert limiter.hit("ip").reset_after == 300

    def test_clients_are_independent(self):
        limiter = FixedWindowRateLimiter(window_seconds=900, max_requests=1, clock=FakeClock())
        limiter.hit("a")
        assert limiter.hit("a").exceeded
        assert not limiter.hit("b").exceeded

    def test_expired_windows_are_swept(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(window_seconds=10, max_requests=5, clock=clock)
        for key in ("a", "b", "c"):
            limiter.hit(key)
        assert len(limiter) == 3

        clock.advance(10)
        limiter.hit("d")

        assert len(limiter) == 1

    def test_reset(self):
        limiter = FixedWindowRateLimiter(window_seconds=900, max_requests=1, clock=FakeClock())
        limiter.hit("a")
        limiter.hit("b")
        limiter.reset("a")
        assert len(limiter) == 1
        limiter.reset()
        assert len(limiter) == 0


class TestRateLimitMiddleware:
    """Test the rate limit stage over HTTP."""

    def test_101st_request_is_rejected(self, client):
        for _ in range(100):
            assert client.get("/api/health").status_code == 200

        response = client.get("/api/health")

        assert response.status_code == 429
        assert response.json() == {"success": False, "message": RATE_LIMIT_MESSAGE}
        assert response.json()["message"] == "Too many requests from this IP, please try again later."
        assert int(response.headers["Retry-After"]) > 0
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_any_api_path_counts(self, make_client):
        client = make_client(RATE_LIMIT_MAX=2)
        client.get("/api/health")
        client.get("/api/nonexistent")
        assert client.get("/api/dishes").status_code == 429

    def test_headers_on_allowed_request(self, make_client):
        response = make_client(RATE_LIMIT_MAX=5).get("/api/health")

        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Remaining"] == "4"
        assert "X-RateLimit-Reset" in response.headers

    def test_paths_outside_api_are_not_limited(self, make_client):
        client = make_client(RATE_LIMIT_MAX=1)
        for _ in range(5):
            response = client.get("/uploads/missing.png")
            assert response.status_code == 404
            assert "X-RateLimit-Limit" not in response.headers

    def test_prefix_match_is_exact(self, make_client):
        """Test /apiary is not treated as part of /api."""
        client = make_client(RATE_LIMIT_MAX=1)
        for _ in range(3):
            assert client.get("/apiary").status_code == 404

    def test_forwarded_for_when_proxy_trusted(self, make_client):
        client = make_client(RATE_LIMIT_MAX=1, TRUST_PROXY=True)

        assert client.get("/api/health", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
        assert client.get("/api/health", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"}).status_code == 200
        assert client.get("/api/health", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429

    def test_forwarded_for_ignored_by_default(self, make_client):
        client = make_client(RATE_LIMIT_MAX=1)

        client.get("/api/health", headers={"X-Forwarded-For": "10.0.0.1"})

        response = client.get("/api/health", headers={"X-Forwarded-For": "10.0.0.2"})
        assert response.status_code == 429
