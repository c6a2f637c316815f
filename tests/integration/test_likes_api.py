import pytest
from httpx import AsyncClient

from tests.helpers import create_template


@pytest.mark.asyncio
async def test_like_toggle_round_trip(client: AsyncClient, alice, bob, topic):
    template = await create_template(client, alice["headers"], topic["id"])
    tid = template["id"]

    resp = await client.post(f"/api/v1/likes/template/{tid}", headers=bob["headers"])
    assert resp.status_code == 201
    assert resp.json() == {"message": "Template liked", "liked": True, "count": 1}

    assert (await client.get(f"/api/v1/likes/check/{tid}", headers=bob["headers"])).json() == {"liked": True}
    assert (await client.get(f"/api/v1/likes/count/{tid}")).json() == {"count": 1}

    resp = await client.get(f"/api/v1/likes/template/{tid}")
    body = resp.json()
    assert body["likes_count"] == 1
    assert body["items"][0]["user_id"] == bob["id"]
    assert body["items"][0]["version"] == 1

    resp = await client.post(f"/api/v1/likes/template/{tid}", headers=bob["headers"])
    assert resp.status_code == 200
    assert resp.json() == {"message": "Template unliked", "liked": False, "count": 0}
    assert (await client.get(f"/api/v1/likes/check/{tid}", headers=bob["headers"])).json() == {"liked": False}


@pytest.mark.asyncio
async def test_likes_require_auth_and_visible_template(client: AsyncClient, alice, bob, topic):
    public = await create_template(client, alice["headers"], topic["id"])
    private = await create_template(client, alice["headers"], topic["id"], is_public=False)

    assert (await client.post(f"/api/v1/likes/template/{public['id']}")).status_code == 401
    assert (await client.post(f"/api/v1/likes/template/{private['id']}", headers=bob["headers"])).status_code == 403
    assert (await client.get(f"/api/v1/likes/count/{private['id']}")).status_code == 403
