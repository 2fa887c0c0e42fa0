from conftest import ADMIN, CREATOR, PARTICIPANT, auth


async def test_missing_credential_is_unauthorized(client, users):
    response = await client.get("/admin-stats")

    assert response.status_code == 401
    assert response.json()["success"] is False


async def test_invalid_credential_is_unauthorized(client, users):
    response = await client.get("/my-stats", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401


async def test_admin_gate_reports_actual_role(client, users):
    response = await client.get("/admin-stats", headers=auth(PARTICIPANT))

    assert response.status_code == 403
    assert response.json()["role"] == "participant"


async def test_creator_gate_rejects_admin(client, users):
    response = await client.get("/creator-stats", headers=auth(ADMIN))

    assert response.status_code == 403
    assert response.json()["role"] == "admin"


async def test_gate_with_unknown_user_reports_no_role(client, users):
    response = await client.get("/admin-stats", headers=auth("ghost@x.com"))

    assert response.status_code == 403
    assert response.json()["role"] is None


async def test_gates_let_matching_roles_through(client, users):
    admin_response = await client.get("/admin-stats", headers=auth(ADMIN))
    creator_response = await client.get("/creator-stats", headers=auth(CREATOR))

    assert admin_response.status_code == 200
    assert creator_response.status_code == 200
