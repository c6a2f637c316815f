import uuid

import pytest
from httpx import AsyncClient

from tests.helpers import create_template, delete_json


@pytest.mark.asyncio
async def test_comment_lifecycle(client: AsyncClient, alice, bob, topic):
    template = await create_template(client, alice["headers"], topic["id"])

    resp = await client.post(
        "/api/v1/comments", json={"template_id": template["id"], "content": "  Great form  "}, headers=bob["headers"]
    )
    assert resp.status_code == 201, resp.text
    comment = resp.json()
    assert comment["content"] == "Great form"
    assert comment["version"] == 1
    assert comment["user"]["name"] == "Bob"

    resp = await client.get(f"/api/v1/comments/template/{template['id']}")
    assert [c["id"] for c in resp.json()["items"]] == [comment["id"]]

    url = f"/api/v1/comments/{comment['id']}"
    resp = await client.put(url, json={"version": 1, "content": "Edited"}, headers=alice["headers"])
    assert resp.status_code == 403

    resp = await client.put(url, json={"version": 1, "content": "Edited"}, headers=bob["headers"])
    assert resp.status_code == 200
    assert resp.json()["version"] == 2

    resp = await delete_json(client, url, {"version": 1}, headers=bob["headers"])
    assert resp.status_code == 409

    resp = await delete_json(client, url, {"version": 2}, headers=bob["headers"])
    assert resp.status_code == 200
    assert (await client.get(f"/api/v1/comments/template/{template['id']}")).json()["items"] == []


@pytest.mark.asyncio
async def test_template_owner_and_admin_can_delete_others_comments(client: AsyncClient, alice, bob, admin, topic):
    template = await create_template(client, alice["headers"], topic["id"])
    ids = []
    for text in ("first", "second"):
        resp = await client.post("/api/v1/comments", json={"template_id": template["id"], "content": text}, headers=bob["headers"])
        ids.append(resp.json()["id"])

    resp = await delete_json(client, f"/api/v1/comments/{ids[0]}", {"version": 1}, headers=alice["headers"])
    assert resp.status_code == 200
    resp = await delete_json(client, f"/api/v1/comments/{ids[1]}", {"version": 1}, headers=admin["headers"])
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_stranger_cannot_delete_comment(client: AsyncClient, alice, bob, topic):
    template = await create_template(client, alice["headers"], topic["id"])
    resp = await client.post("/api/v1/comments", json={"template_id": template["id"], "content": "mine"}, headers=alice["headers"])

    resp = await delete_json(client, f"/api/v1/comments/{resp.json()['id']}", {"version": 1}, headers=bob["headers"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_comment_on_missing_or_private_template(client: AsyncClient, alice, bob, topic):
    resp = await client.post("/api/v1/comments", json={"template_id": str(uuid.uuid4()), "content": "x"}, headers=bob["headers"])
    assert resp.status_code == 404

    private = await create_template(client, alice["headers"], topic["id"], is_public=False)
    resp = await client.post("/api/v1/comments", json={"template_id": private["id"], "content": "x"}, headers=bob["headers"])
    assert resp.status_code == 403

    resp = await client.post("/api/v1/comments", json={"template_id": private["id"], "content": ""}, headers=alice["headers"])
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_blank_comment_is_rejected(client: AsyncClient, alice, topic):
    template = await create_template(client, alice["headers"], topic["id"])

    resp = await client.post(
        "/api/v1/comments", json={"template_id": template["id"], "content": "   "}, headers=alice["headers"]
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"
