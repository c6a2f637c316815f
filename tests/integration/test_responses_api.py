import pytest
from httpx import AsyncClient

from tests.helpers import create_template, delete_json, quiz_payload


async def _quiz(client: AsyncClient, headers: dict, topic_id: str, **overrides) -> dict:
    resp = await client.post("/api/v1/templates", json=quiz_payload(topic_id, **overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_quiz_submission_is_scored(client: AsyncClient, alice, bob, topic):
    quiz = await _quiz(client, alice["headers"], topic["id"])

    resp = await client.post(
        "/api/v1/responses",
        json={
            "template_id": quiz["id"],
            "custom_string1_answer": " paris ",
            "custom_int1_answer": 5,
            "custom_checkbox1_answer": True,
        },
        headers=bob["headers"],
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["score"] == 3
    assert body["total_possible_points"] == 4
    assert body["score_viewed"] is False
    assert body["version"] == 1
    assert body["template"]["title"] == "Capitals quiz"
    assert body["user"]["name"] == "Bob"


@pytest.mark.asyncio
async def test_plain_template_is_not_scored(client: AsyncClient, alice, bob, topic):
    template = await create_template(client, alice["headers"], topic["id"])
    resp = await client.post(
        "/api/v1/responses", json={"template_id": template["id"], "custom_string1_answer": "Bob"}, headers=bob["headers"]
    )
    assert resp.status_code == 201
    assert resp.json()["score"] is None
    assert resp.json()["total_possible_points"] is None


@pytest.mark.asyncio
async def test_answers_for_disabled_questions_are_rejected(client: AsyncClient, alice, bob, topic):
    template = await create_template(client, alice["headers"], topic["id"])
    resp = await client.post(
        "/api/v1/responses", json={"template_id": template["id"], "custom_text3_answer": "sneaky"}, headers=bob["headers"]
    )
    assert resp.status_code == 400
    assert resp.json()["details"]["fields"] == ["custom_text3_answer"]


@pytest.mark.asyncio
async def test_private_template_rejects_outsiders(client: AsyncClient, alice, bob, topic):
    template = await create_template(client, alice["headers"], topic["id"], is_public=False)
    resp = await client.post("/api/v1/responses", json={"template_id": template["id"]}, headers=bob["headers"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_submitter_edits_rescore_and_stale_edits_conflict(client: AsyncClient, alice, bob, topic):
    quiz = await _quiz(client, alice["headers"], topic["id"])
    created = (
        await client.post(
            "/api/v1/responses",
            json={"template_id": quiz["id"], "custom_string1_answer": "Lyon"},
            headers=bob["headers"],
        )
    ).json()
    assert created["score"] == 0
    url = f"/api/v1/responses/{created['id']}"

    resp = await client.put(url, json={"version": 1, "custom_string1_answer": "Paris"}, headers=alice["headers"])
    assert resp.status_code == 403

    resp = await client.put(url, json={"version": 1, "custom_string1_answer": "Paris"}, headers=bob["headers"])
    assert resp.status_code == 200, resp.text
    assert resp.json()["score"] == 2
    assert resp.json()["version"] == 2

    resp = await client.put(url, json={"version": 1, "custom_int1_answer": 4}, headers=bob["headers"])
    assert resp.status_code == 409

    resp = await client.post(f"{url}/score-viewed", json={"version": 2}, headers=bob["headers"])
    assert resp.status_code == 200
    assert resp.json()["score_viewed"] is True
    assert resp.json()["version"] == 3


@pytest.mark.asyncio
async def test_response_visibility_and_listing(client: AsyncClient, alice, bob, admin, topic):
    template = await create_template(client, alice["headers"], topic["id"])
    created = (
        await client.post("/api/v1/responses", json={"template_id": template["id"], "custom_int1_answer": 7}, headers=bob["headers"])
    ).json()
    url = f"/api/v1/responses/{created['id']}"

    for who in (alice, bob, admin):
        assert (await client.get(url, headers=who["headers"])).status_code == 200

    resp = await client.get(f"/api/v1/responses/template/{template['id']}", headers=alice["headers"])
    assert [r["id"] for r in resp.json()["items"]] == [created["id"]]
    resp = await client.get(f"/api/v1/responses/template/{template['id']}", headers=bob["headers"])
    assert resp.status_code == 403

    resp = await client.get("/api/v1/responses/user", headers=bob["headers"])
    assert [r["id"] for r in resp.json()["items"]] == [created["id"]]
    resp = await client.get(f"/api/v1/responses/user/{bob['id']}", headers=alice["headers"])
    assert resp.status_code == 403
    resp = await client.get(f"/api/v1/responses/user/{bob['id']}", headers=admin["headers"])
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_response_delete_is_versioned(client: AsyncClient, alice, bob, topic):
    template = await create_template(client, alice["headers"], topic["id"])
    created = (
        await client.post("/api/v1/responses", json={"template_id": template["id"]}, headers=bob["headers"])
    ).json()
    url = f"/api/v1/responses/{created['id']}"

    assert (await delete_json(client, url, {"version": 0}, headers=alice["headers"])).status_code == 409
    assert (await delete_json(client, url, {"version": 1}, headers=alice["headers"])).status_code == 200
    assert (await client.get(url, headers=bob["headers"])).status_code == 404


@pytest.mark.asyncio
async def test_aggregate(client: AsyncClient, alice, bob, admin, topic):
    quiz = await _quiz(client, alice["headers"], topic["id"])
    answers = [
        (bob, {"custom_string1_answer": "Paris", "custom_int1_answer": 4, "custom_checkbox1_answer": True}),
        (admin, {"custom_string1_answer": "paris", "custom_int1_answer": 6, "custom_checkbox1_answer": False}),
        (alice, {"custom_string1_answer": "Rome"}),
    ]
    for who, body in answers:
        resp = await client.post("/api/v1/responses", json={"template_id": quiz["id"], **body}, headers=who["headers"])
        assert resp.status_code == 201, resp.text

    resp = await client.get(f"/api/v1/responses/template/{quiz['id']}/aggregate")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_responses"] == 3
    assert data["checkbox_stats"]["custom_checkbox1"] == 1
    assert data["int_stats"]["custom_int1"] == 5.0
    assert data["int_stats"]["custom_int2"] is None
    assert {a["answer"]: a["count"] for a in data["string_stats"]["custom_string1"]} == {
        "Paris": 1,
        "paris": 1,
        "Rome": 1,
    }
    # Scores: 4, 2 (paris matches), 0.
    assert data["avg_score"] == 2.0
    assert data["avg_total_points"] == 4.0
