import uuid

import pytest

from readyforms.utils.metrics import HTTP_REQUESTS_TOTAL, RouteLabeler


def _counter_value(labels: dict[str, str]) -> float:
    # `.labels(...)` would create the series we want to prove absent.
    for metric in HTTP_REQUESTS_TOTAL.collect():
        for sample in metric.samples:
            if sample.name == "readyforms_http_requests_total" and sample.labels == labels:
                return float(sample.value)
    return 0.0


@pytest.mark.asyncio
async def test_unmatched_route_uses_fixed_path_label(client):
    random_path = f"/random/{uuid.uuid4()}"

    unmatched_labels = {"method": "GET", "path": "__unmatched__", "status": "404"}
    raw_labels = {"method": "GET", "path": random_path, "status": "404"}

    before_unmatched = _counter_value(unmatched_labels)
    before_raw = _counter_value(raw_labels)

    resp = await client.get(random_path)
    assert resp.status_code == 404

    assert _counter_value(unmatched_labels) == before_unmatched + 1
    assert _counter_value(raw_labels) == before_raw


@pytest.mark.asyncio
async def test_matched_route_uses_route_template(client, alice):
    template_id = uuid.uuid4()
    labels = {"method": "GET", "path": "/api/v1/templates/{id}", "status": "404"}
    before = _counter_value(labels)

    resp = await client.get(f"/api/v1/templates/{template_id}", headers=alice["headers"])
    assert resp.status_code == 404

    assert _counter_value(labels) == before + 1
    assert _counter_value({**labels, "path": f"/api/v1/templates/{template_id}"}) == 0.0


@pytest.mark.asyncio
async def test_prefix_root_route_is_labelled_with_full_path(client, alice):
    labels = {"method": "GET", "path": "/api/v1/topics", "status": "200"}
    before = _counter_value(labels)

    resp = await client.get("/api/v1/topics", headers=alice["headers"])
    assert resp.status_code == 200

    assert _counter_value(labels) == before + 1


@pytest.mark.asyncio
async def test_same_relative_path_in_different_routers_gets_distinct_labels(client, alice):
    missing = uuid.uuid4()
    topic_labels = {"method": "GET", "path": "/api/v1/topics/{id}", "status": "404"}
    tag_labels = {"method": "GET", "path": "/api/v1/tags/{id}", "status": "404"}
    before_topic = _counter_value(topic_labels)
    before_tag = _counter_value(tag_labels)

    assert (await client.get(f"/api/v1/topics/{missing}", headers=alice["headers"])).status_code == 404
    assert (await client.get(f"/api/v1/tags/{missing}", headers=alice["headers"])).status_code == 404

    assert _counter_value(topic_labels) == before_topic + 1
    assert _counter_value(tag_labels) == before_tag + 1


@pytest.mark.asyncio
async def test_route_labeler_prefers_declaration_order_and_method(app):
    labeler = RouteLabeler(app)

    assert labeler.label("GET", "/api/v1/templates/search") == "/api/v1/templates/search"
    assert labeler.label("GET", f"/api/v1/templates/{uuid.uuid4()}") == "/api/v1/templates/{id}"
    assert labeler.label("POST", "/api/v1/templates") == "/api/v1/templates"
    assert labeler.label("PATCH", "/api/v1/templates") == "__unmatched__"
    assert labeler.label("GET", "/health/ping") == "/health/ping"
    assert labeler.label("GET", "/metrics") == "/metrics"
