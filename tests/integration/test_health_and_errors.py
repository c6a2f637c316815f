import pytest
from httpx import ASGITransport, AsyncClient

from readyforms.main import create_app


@pytest.mark.asyncio
async def test_health_endpoints(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["environment"] == "test"

    assert (await client.get("/healthz")).json() == {"status": "ok"}

    resp = await client.get("/health/db")
    assert resp.status_code == 200
    assert resp.json()["db"]["dialect"] == "sqlite"
    assert resp.json()["db"]["reachable"] is True

    resp = await client.get("/api/v1/health/ping")
    assert resp.json()["message"] == "pong"


@pytest.mark.asyncio
async def test_every_response_carries_a_request_id(client: AsyncClient):
    resp = await client.get("/healthz", headers={"X-Request-ID": "trace-123"})
    assert resp.headers["X-Request-ID"] == "trace-123"

    resp = await client.get("/api/v1/templates/not-a-uuid")
    assert resp.status_code == 400
    assert resp.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient):
    await client.get("/healthz")
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "readyforms_http_requests_total" in resp.text


@pytest.mark.asyncio
async def test_rate_limit_returns_429_envelope(settings, engine):
    limited = create_app(
        settings.model_copy(update={"RATE_LIMIT_ENABLED": True, "RATE_LIMIT_REQUESTS_PER_WINDOW": 2, "RATE_LIMIT_WINDOW_SECONDS": 3600}),
        engine=engine,
    )
    async with AsyncClient(transport=ASGITransport(app=limited), base_url="http://testserver") as client:
        statuses = [(await client.get("/api/v1/topics")).status_code for _ in range(2)]
        assert statuses == [200, 200]

        resp = await client.get("/api/v1/topics")
        assert resp.status_code == 429
        assert resp.json()["error"] == "TOO_MANY_REQUESTS"
        assert resp.json()["details"]["limit"] == 2
