import asyncio

import pytest
from httpx import AsyncClient

from tests.helpers import auth_headers, login, register


@pytest.mark.asyncio
async def test_register_login_me(client: AsyncClient):
    created = await register(client, "Alice", "Alice@Example.COM")
    assert created["user"]["email"] == "alice@example.com"
    assert created["user"]["version"] == 1
    assert created["tokens"]["token_type"] == "Bearer"
    assert "password_hash" not in created["user"]

    tokens = await login(client, "alice@example.com", "secret-pass")
    resp = await client.get("/api/v1/auth/me", headers=auth_headers(tokens))
    assert resp.status_code == 200, resp.text
    assert resp.json()["name"] == "Alice"
    assert resp.json()["last_login_at"] is not None


@pytest.mark.asyncio
async def test_duplicate_email_is_a_conflict(client: AsyncClient):
    await register(client, "Alice", "alice@example.com")
    resp = await client.post(
        "/api/v1/auth/register",
        json={"name": "Other", "email": "ALICE@example.com", "password": "secret-pass"},
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "CONFLICT"


@pytest.mark.asyncio
async def test_self_service_admin_flag_is_ignored_outside_dev(client: AsyncClient):
    created = await register(client, "Mallory", "mallory@example.com", is_admin=True)
    assert created["user"]["is_admin"] is False


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_user_are_unauthorized(client: AsyncClient, alice):
    for email, password in (("alice@example.com", "nope"), ("ghost@example.com", "secret-pass")):
        resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_invalid_registration_payload_is_a_400(client: AsyncClient):
    resp = await client.post("/api/v1/auth/register", json={"name": "X", "email": "not-an-email", "password": "1"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"]["errors"]


@pytest.mark.asyncio
async def test_me_requires_a_token(client: AsyncClient):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401

    resp = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_refresh_rotates_and_reuse_is_rejected(client: AsyncClient, alice):
    refresh_token = alice["tokens"]["refresh_token"]

    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 200, resp.text
    assert resp.json()["access_token"]

    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_access_token_cannot_be_used_as_refresh_token(client: AsyncClient, alice):
    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": alice["tokens"]["access_token"]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_the_access_token(client: AsyncClient, alice):
    resp = await client.post("/api/v1/auth/logout", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json() == {"status": "success", "message": "Logged out"}

    resp = await client.get("/api/v1/auth/me", headers=alice["headers"])
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_preferences_update_bumps_version(client: AsyncClient, alice):
    version = alice["user"]["version"]
    resp = await client.put(
        "/api/v1/auth/preferences",
        json={"language": "ru", "theme": "dark", "version": version},
        headers=alice["headers"],
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert (body["language"], body["theme"]) == ("ru", "dark")
    assert body["version"] == version + 1

    resp = await client.put(
        "/api/v1/auth/preferences", json={"theme": "neon", "version": version + 1}, headers=alice["headers"]
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_preferences_update_requires_current_version(client: AsyncClient, alice):
    resp = await client.put("/api/v1/auth/preferences", json={"theme": "dark"}, headers=alice["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"

    stale = alice["user"]["version"] - 1
    resp = await client.put(
        "/api/v1/auth/preferences", json={"theme": "dark", "version": stale}, headers=alice["headers"]
    )
    assert resp.status_code == 409
    assert resp.json()["details"]["current_version"] == alice["user"]["version"]


@pytest.mark.asyncio
async def test_blocked_user_cannot_log_in_or_use_tokens(client: AsyncClient, alice, admin):
    resp = await client.put(
        f"/api/v1/admin/users/{alice['id']}/block", json={"version": alice["user"]["version"]}, headers=admin["headers"]
    )
    assert resp.status_code == 200, resp.text

    resp = await client.get("/api/v1/auth/me", headers=alice["headers"])
    assert resp.status_code == 403

    resp = await client.post("/api/v1/auth/login", json={"email": "alice@example.com", "password": "secret-pass"})
    assert resp.status_code == 403
    assert resp.json()["error"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_concurrent_logins_all_succeed_without_bumping_version(client: AsyncClient, alice):
    credentials = {"email": "alice@example.com", "password": "secret-pass"}
    responses = await asyncio.gather(*(client.post("/api/v1/auth/login", json=credentials) for _ in range(6)))

    assert [r.status_code for r in responses] == [200] * 6
    assert {r.json()["user"]["version"] for r in responses} == {alice["user"]["version"]}

    resp = await client.get("/api/v1/auth/me", headers=alice["headers"])
    assert resp.json()["version"] == alice["user"]["version"]


@pytest.mark.asyncio
async def test_login_does_not_invalidate_an_admin_held_version(client: AsyncClient, alice, admin):
    held_version = alice["user"]["version"]
    await login(client, "alice@example.com", "secret-pass")

    resp = await client.put(
        f"/api/v1/admin/users/{alice['id']}/block", json={"version": held_version}, headers=admin["headers"]
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["user"]["blocked"] is True


@pytest.mark.asyncio
async def test_password_hashing_runs_off_the_event_loop(client: AsyncClient, monkeypatch):
    offloaded = []
    original = asyncio.to_thread

    async def recording_to_thread(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return await original(func, *args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)

    await register(client, "Carol", "carol@example.com")
    await login(client, "carol@example.com", "secret-pass")

    assert "hash_password" in offloaded
    assert "verify_password" in offloaded
