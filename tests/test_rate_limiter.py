import pytest

from remodra import config, rate_limiter


class FakeRedis:
    """Records what the limiter syncs; starts with counts from another worker"""

    def __init__(self, counts=None):
        self.counts = dict(counts or {})
        self.writes = []

    def get(self, key):
        return self.counts.get(key)

    def ttl(self, key):
        return 30 if key in self.counts else -2

    def set(self, key, value, ex=None):
        self.counts[key] = value
        self.writes.append((key, value, ex))


@pytest.fixture(autouse=True)
def clean_cache():
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


def test_memory_only_limit():
    results = [rate_limiter.check_rate_limit("t:memory", 3, 60)[0] for _ in range(4)]
    assert results == [True, True, True, False]

    allowed, count, ttl = rate_limiter.check_rate_limit("t:memory", 3, 60)
    assert allowed is False
    assert count == 3
    assert 0 < ttl <= 60


def test_window_reset(monkeypatch):
    now = [1_000_000]
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now[0])

    for _ in range(2):
        rate_limiter.check_rate_limit("t:window", 2, 60)
    assert rate_limiter.check_rate_limit("t:window", 2, 60)[0] is False

    now[0] += 61
    assert rate_limiter.check_rate_limit("t:window", 2, 60)[0] is True


def test_counts_loaded_from_redis():
    fake = FakeRedis({"t:shared": "4"})
    allowed, count, ttl = rate_limiter.check_rate_limit("t:shared", 5, 60, fake)
    assert allowed is True
    assert count == 5
    assert ttl == 30
    assert rate_limiter.check_rate_limit("t:shared", 5, 60, fake)[0] is False


def test_counts_synced_to_redis(monkeypatch):
    now = [2_000_000]
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now[0])
    fake = FakeRedis()

    rate_limiter.check_rate_limit("t:sync", 10, 60, fake)
    assert fake.writes == []

    now[0] += rate_limiter.MEMORY_CACHE_SYNC_INTERVAL
    rate_limiter.check_rate_limit("t:sync", 10, 60, fake)
    assert fake.writes == [("t:sync", 2, 60)]


def test_login_is_rate_limited(client, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "_get_redis_or_none", lambda: None)

    for _ in range(10):
        res = client.post("/api/auth/login", json={"username": "nobody", "password": "nope"})
        assert res.status_code == 401

    res = client.post("/api/auth/login", json={"username": "nobody", "password": "nope"})
    assert res.status_code == 429
    assert res.json()["detail"]["limit"] == 10
    assert int(res.headers["Retry-After"]) > 0


def test_limits_are_per_ip(client, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "_get_redis_or_none", lambda: None)

    for _ in range(10):
        client.post("/api/auth/login", json={"username": "nobody", "password": "nope"}, headers={"X-Forwarded-For": "10.0.0.1"})

    blocked = client.post(
        "/api/auth/login", json={"username": "nobody", "password": "nope"}, headers={"X-Forwarded-For": "10.0.0.1"}
    )
    other = client.post(
        "/api/auth/login", json={"username": "nobody", "password": "nope"}, headers={"X-Forwarded-For": "10.0.0.2"}
    )
    assert blocked.status_code == 429
    assert other.status_code == 401
