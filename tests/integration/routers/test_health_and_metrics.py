from __future__ import annotations

from fastapi.testclient import TestClient

from indexes_api.adapters.routers.health_router import probe_provider
from indexes_api.main import create_app


class _DownProbe:
    async def redis(self) -> tuple[bool | None, str | None]:
        return False, "ConnectionError: refused"


def test_liveness() -> None:
    with TestClient(create_app()) as client:
        r = client.get("/health/liveness")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_readiness_skips_redis_in_test_mode() -> None:
    with TestClient(create_app()) as client:
        r = client.get("/health/readiness")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["checks"][0]["name"] == "redis"
    assert body["checks"][0]["status"] == "skipped"


def test_readiness_degraded_when_redis_down() -> None:
    app = create_app()
    app.dependency_overrides[probe_provider] = lambda: _DownProbe()
    with TestClient(app) as client:
        r = client.get("/health/readiness")
    assert r.status_code == 503
    body = r.json()
    assert body["status"] == "degraded"
    assert body["checks"][0]["status"] == "down"


def test_metrics_exposes_collectors() -> None:
    with TestClient(create_app()) as client:
        client.get("/health/liveness")
        r = client.get("/metrics")
    assert r.status_code == 200
    assert "indexes_readyz_redis_latency_seconds_bucket" in r.text
    assert "indexes_cache_hits_total" in r.text or "indexes_cache_misses_total" in r.text
