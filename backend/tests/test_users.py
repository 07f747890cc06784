from fastapi.testclient import TestClient


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _create(client: TestClient, token: str, **body):
    payload = {"name": "Someone", "password": "pass"}
    payload.update(body)
    return client.post("/admin/users", json=payload, headers=_auth(token))


def test_create_user(client, admin_token):
    response = _create(client, admin_token, username="testcreate", role="deaf")
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "testcreate"
    assert data["role"] == "deaf"
    assert "password_hash" not in data
    assert "id" in data


def test_admin_can_create_admin(client, admin_token):
    response = _create(client, admin_token, username="second-admin", role="admin")
    assert response.status_code == 201
    assert response.json()["role"] == "admin"

    login = client.post(
        "/login", json={"username": "second-admin", "password": "pass"}
    )
    assert login.json()["user"]["role"] == "admin"


def test_create_user_default_role(client, admin_token):
    response = _create(client, admin_token, username="plain")
    assert response.json()["role"] == "officer"


def test_create_user_invalid_role(client, admin_token):
    response = _create(client, admin_token, username="bad", role="superuser")
    assert response.status_code == 400
    assert "Invalid role" in response.json()["detail"]


def test_create_user_missing_password(client, admin_token):
    response = client.post(
        "/admin/users",
        json={"name": "No Pass", "username": "nopass"},
        headers=_auth(admin_token),
    )
    assert response.status_code == 400


def test_list_users(client, admin_token):
    _create(client, admin_token, username="older")
    _create(client, admin_token, username="newer")
    response = client.get("/admin/users", headers=_auth(admin_token))
    assert response.status_code == 200
    users = response.json()
    assert [u["username"] for u in users][:2] == ["newer", "older"]
    # Ensure no password hashes leak
    for u in users:
        assert "password_hash" not in u
        assert "password" not in u


def test_delete_user_cascades_transcripts(client, admin_token):
    created = _create(client, admin_token, username="todelete")
    uid = created.json()["id"]
    for content in ("one", "two"):
        client.post(
            "/admin/transcripts",
            json={"user_id": uid, "content": content},
            headers=_auth(admin_token),
        )

    response = client.delete(f"/admin/users/{uid}", headers=_auth(admin_token))
    assert response.status_code == 200
    assert response.json()["detail"] == "User deleted"

    users = client.get("/admin/users", headers=_auth(admin_token)).json()
    assert all(u["username"] != "todelete" for u in users)

    leftover = client.get(f"/transcripts/{uid}", headers=_auth(admin_token))
    assert leftover.status_code == 200
    assert leftover.json() == []


def test_delete_keeps_other_users_transcripts(
    client, admin_token, officer_token, officer
):
    client.post("/transcripts", json={"content": "keep"}, headers=_auth(officer_token))
    victim = _create(client, admin_token, username="victim").json()["id"]
    client.post(
        "/admin/transcripts",
        json={"user_id": victim, "content": "gone"},
        headers=_auth(admin_token),
    )
    client.delete(f"/admin/users/{victim}", headers=_auth(admin_token))

    kept = client.get(f"/transcripts/{officer.id}", headers=_auth(officer_token))
    assert [t["content"] for t in kept.json()] == ["keep"]


def test_delete_nonexistent_user(client, admin_token):
    response = client.delete("/admin/users/99999", headers=_auth(admin_token))
    assert response.status_code == 404


def test_create_duplicate_user(client, admin_token):
    _create(client, admin_token, username="dupuser")
    response = _create(client, admin_token, username="dupuser")
    assert response.status_code == 409


def test_non_admin_cannot_manage_users(client, officer_token, deaf_token, officer):
    for token in (officer_token, deaf_token):
        assert client.get("/admin/users", headers=_auth(token)).status_code == 403
        assert _create(client, token, username="x").status_code == 403
        response = client.delete(f"/admin/users/{officer.id}", headers=_auth(token))
        assert response.status_code == 403


def test_admin_routes_require_token(client):
    assert client.get("/admin/users").status_code == 401
    assert client.get("/admin/stats").status_code == 401


def test_stats(client, admin_token, officer_token, officer, deaf_user):
    for content in ("a", "b", "c", "d", "e", "f"):
        client.post(
            "/transcripts", json={"content": content}, headers=_auth(officer_token)
        )
    response = client.get("/admin/stats", headers=_auth(admin_token))
    assert response.status_code == 200
    data = response.json()
    assert data["total_users"] == 3
    assert data["users_by_role"] == {"admin": 1, "officer": 1, "deaf": 1}
    assert data["total_transcripts"] == 6
    recent = data["recent_transcripts"]
    assert [t["content"] for t in recent] == ["f", "e", "d", "c", "b"]
    assert all(t["user_name"] == "Officer Olsen" for t in recent)


def test_stats_forbidden_for_non_admin(client, deaf_token):
    response = client.get("/admin/stats", headers=_auth(deaf_token))
    assert response.status_code == 403
