import json

from starlette.requests import Request

from app.main import unhandled_error_handler
from conftest import ADMIN, PARTICIPANT, auth


async def test_login_creates_participant(client, db):
    response = await client.post(
        "/user",
        headers=auth("New.User@x.com"),
        json={"name": "New User", "photo": "https://img.test/me.png"}
    )

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["email"] == "new.user@x.com"
    assert user["role"] == "participant"

    role = await client.get("/user/role", headers=auth("new.user@x.com"))
    assert role.json()["data"]["role"] == "participant"


async def test_repeat_login_keeps_role(client, db, users):
    response = await client.post("/user", headers=auth(ADMIN), json={"name": "Renamed Admin"})

    user = response.json()["data"]["user"]
    assert user["role"] == "admin"
    assert user["name"] == "Renamed Admin"
    assert await db.users.count_documents({"email": ADMIN}) == 1


async def test_role_of_unknown_user_is_none(client, users):
    response = await client.get("/user/role", headers=auth("ghost@x.com"))

    assert response.status_code == 200
    assert response.json()["data"]["role"] is None


async def test_profile_update(client, users):
    response = await client.patch("/user/profile", headers=auth(PARTICIPANT), json={"bio": "Painter"})
    empty = await client.patch("/user/profile", headers=auth(PARTICIPANT), json={})
    profile = await client.get("/user/profile", headers=auth(PARTICIPANT))

    assert response.status_code == 200
    assert empty.status_code == 400
    assert profile.json()["data"]["user"]["bio"] == "Painter"


async def test_creator_request_flow(client, db, users):
    first = await client.post("/become-creator", headers=auth(PARTICIPANT))
    second = await client.post("/become-creator", headers=auth(PARTICIPANT))

    assert first.status_code == 201
    assert second.status_code == 409

    requests = await client.get("/creator-requests", headers=auth(ADMIN))
    assert [r["email"] for r in requests.json()["data"]["requests"]] == [PARTICIPANT]

    promoted = await client.patch(
        "/update-role",
        headers=auth(ADMIN),
        json={"email": PARTICIPANT, "role": "contestCreator"}
    )
    assert promoted.status_code == 200
    assert promoted.json()["data"]["user"]["role"] == "contestCreator"
    assert await db.creator_requests.count_documents({}) == 0


async def test_non_participant_cannot_request_creator_role(client, users):
    response = await client.post("/become-creator", headers=auth(ADMIN))

    assert response.status_code == 400


async def test_update_role_validation(client, users):
    invalid = await client.patch("/update-role", headers=auth(ADMIN), json={"email": PARTICIPANT, "role": "superuser"})
    missing = await client.patch("/update-role", headers=auth(ADMIN), json={"email": "ghost@x.com", "role": "admin"})

    assert invalid.status_code == 400
    assert missing.status_code == 404


async def test_users_listing_is_paginated(client, users):
    response = await client.get("/users", headers=auth(ADMIN), params={"page": 1, "limit": 3})

    data = response.json()["data"]
    assert len(data["users"]) == 3
    assert data["pagination"] == {"page": 1, "limit": 3, "total": 4, "pages": 2}


async def test_contact_message_requires_fields(client, db):
    response = await client.post("/contact", json={"name": "Ann", "email": "  "})

    assert response.status_code == 400
    assert "email" in response.json()["message"]
    assert "message" in response.json()["message"]
    assert await db.contact_messages.count_documents({}) == 0


async def test_contact_inbox(client, users):
    created = await client.post(
        "/contact",
        json={"name": "Ann", "email": "Ann@x.com", "message": "Hello"}
    )
    message_id = created.json()["data"]["message"]["id"]

    marked = await client.patch(f"/contact-messages/{message_id}/read", headers=auth(ADMIN))
    inbox = await client.get("/contact-messages", headers=auth(ADMIN))
    missing = await client.patch("/contact-messages/nope/read", headers=auth(ADMIN))

    assert created.status_code == 201
    assert marked.json()["data"]["message"]["is_read"] is True
    assert inbox.json()["data"]["messages"][0]["email"] == "ann@x.com"
    assert missing.status_code == 404


async def test_health_endpoints(client):
    root = await client.get("/")
    health = await client.get("/health")

    assert root.status_code == 200
    assert health.json() == {"status": "healthy"}


async def test_login_stores_plain_values(client, db):
    await client.post("/user", headers=auth("fresh@x.com"), json={})

    stored = await db.users.find_one({"email": "fresh@x.com"})
    assert type(stored["role"]) is str
    assert stored["role"] == "participant"
    assert stored["created_at"] is not None
    assert stored["bio"] is None


async def test_unhandled_error_renders_internal_error():
    request = Request({
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("test", 80),
        "path": "/boom",
        "root_path": "",
        "query_string": b"",
        "headers": []
    })

    response = await unhandled_error_handler(request, RuntimeError("boom"))

    assert response.status_code == 500
    assert json.loads(response.body) == {"success": False, "message": "Internal server error"}
