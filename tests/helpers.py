from httpx import AsyncClient


def auth_headers(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


async def register(client: AsyncClient, name: str, email: str, password: str = "secret-pass", **extra) -> dict:
    resp = await client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password, **extra},
    )
    assert resp.status_code == 201, resp.text
    tokens = resp.json()
    return {"id": tokens["user"]["id"], "user": tokens["user"], "tokens": tokens, "headers": auth_headers(tokens)}


async def login(client: AsyncClient, email: str, password: str) -> dict:
    resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def template_payload(topic_id: str, **overrides) -> dict:
    payload = {
        "title": "Course feedback",
        "description": "Tell us how the course went",
        "topic_id": topic_id,
        "is_public": True,
        "custom_string1_state": True,
        "custom_string1_question": "Your name?",
        "custom_int1_state": True,
        "custom_int1_question": "Rate the course 1-10",
        "custom_checkbox1_state": True,
        "custom_checkbox1_question": "Would you recommend it?",
    }
    payload.update(overrides)
    return payload


def quiz_payload(topic_id: str, **overrides) -> dict:
    payload = template_payload(
        topic_id,
        title="Capitals quiz",
        is_quiz=True,
        custom_string1_question="Capital of France?",
        custom_int1_question="2 + 2?",
        custom_checkbox1_question="Is Madrid in Spain?",
        scoring_criteria={
            "custom_string1": {"answer": "Paris", "points": 2},
            "custom_int1": {"answer": 4, "points": 1},
            "custom_checkbox1": {"answer": True, "points": 1},
        },
    )
    payload.update(overrides)
    return payload


async def create_template(client: AsyncClient, headers: dict, topic_id: str, **overrides) -> dict:
    resp = await client.post("/api/v1/templates", json=template_payload(topic_id, **overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def delete_json(client: AsyncClient, url: str, body: dict, headers: dict | None = None):
    return await client.request("DELETE", url, json=body, headers=headers)
