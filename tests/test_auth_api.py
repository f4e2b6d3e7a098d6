# tests/test_auth_api.py
# PURPOSE: register/login/profile/logout flows and guard behaviour over HTTP.

from datetime import timedelta

from taskboard.auth import create_access_token, decode_access_token


def test_register_returns_token_for_created_user(client):
    r = client.post(
        "/api/v1/auth/register",
        json={"name": " Ada <b> ", "email": "Ada@Example.COM", "password": "Passw0rd"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["token_type"] == "bearer"
    user = body["user"]
    # email normalized, name sanitized, no password material in the response
    assert user["email"] == "ada@example.com"
    assert user["name"] == "Ada b"
    assert user["role"] == "user"
    assert "password" not in user and "password_hash" not in user
    # token resolves back to the created user
    assert decode_access_token(body["token"]) == user["id"]


def test_register_duplicate_email_case_insensitive(client, register):
    register(email="dup@example.com")
    r = client.post(
        "/api/v1/auth/register",
        json={"name": "Other", "email": "DUP@example.com", "password": "Passw0rd"},
    )
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert "exists" in r.json()["message"]


def test_register_rejects_invalid_input(client):
    bad_email = client.post(
        "/api/v1/auth/register", json={"name": "X", "email": "not-an-email", "password": "Passw0rd"}
    )
    assert bad_email.status_code == 400

    for weak in ("abc12", "abcdefgh", "12345678"):
        r = client.post(
            "/api/v1/auth/register", json={"name": "X", "email": "x@example.com", "password": weak}
        )
        assert r.status_code == 400, weak
        assert "Password" in r.json()["message"]

    missing = client.post("/api/v1/auth/register", json={"email": "x@example.com"})
    assert missing.status_code == 400
    assert missing.json()["success"] is False


def test_login_success_updates_last_login(client, register):
    _, user = register(email="login@example.com")
    assert user["last_login"] is None

    r = client.post("/api/v1/auth/login", json={"email": "LOGIN@example.com", "password": "Passw0rd"})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"]["last_login"] is not None
    assert decode_access_token(body["token"]) == user["id"]


def test_login_failures_are_indistinguishable(client, register):
    register(email="known@example.com")
    wrong_pw = client.post("/api/v1/auth/login", json={"email": "known@example.com", "password": "Wr0ngpass"})
    unknown = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "Passw0rd"})
    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json()["message"] == unknown.json()["message"] == "Invalid credentials"


def test_profile_requires_token(client):
    r = client.get("/api/v1/auth/profile")
    assert r.status_code == 401
    assert r.headers.get("WWW-Authenticate") == "Bearer"


def test_profile_get_and_update(client, register):
    headers, user = register(email="me@example.com", name="Me")

    r = client.get("/api/v1/auth/profile", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["id"] == user["id"]

    r2 = client.put(
        "/api/v1/auth/profile",
        headers=headers,
        json={"name": "New Name", "email": "New@Example.com", "avatar": "https://img/x.png"},
    )
    assert r2.status_code == 200
    data = r2.json()["data"]
    assert data["name"] == "New Name"
    assert data["email"] == "new@example.com"
    assert data["avatar"] == "https://img/x.png"

    # keeping your own email is not a conflict
    r3 = client.put("/api/v1/auth/profile", headers=headers, json={"email": "new@example.com"})
    assert r3.status_code == 200


def test_profile_update_rejects_taken_email(client, register):
    register(email="first@example.com")
    headers, _ = register(email="second@example.com")

    r = client.put("/api/v1/auth/profile", headers=headers, json={"email": "FIRST@example.com"})
    assert r.status_code == 400
    assert r.json()["message"] == "Email is already taken"

    # failed update leaves the profile unchanged
    me = client.get("/api/v1/auth/profile", headers=headers).json()["data"]
    assert me["email"] == "second@example.com"


def test_profile_update_invalid_email_changes_nothing(client, register):
    headers, _ = register(email="keep@example.com", name="Keep")
    r = client.put("/api/v1/auth/profile", headers=headers, json={"name": "Changed", "email": "bad"})
    assert r.status_code == 400
    me = client.get("/api/v1/auth/profile", headers=headers).json()["data"]
    assert me["name"] == "Keep"


def test_malformed_and_expired_tokens_are_unauthorized(client, register):
    _, user = register(email="tok@example.com")
    client.cookies.clear()

    garbage = client.get("/api/v1/tasks", headers={"Authorization": "Bearer garbage"})
    assert garbage.status_code == 401

    expired = create_access_token(user["id"], expires_delta=timedelta(seconds=-30))
    r = client.get("/api/v1/tasks", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_token_for_unknown_user_is_unauthorized(client):
    token = create_access_token(4242)
    r = client.get("/api/v1/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_logout_clears_cookie_but_token_stays_valid(client, register):
    headers, _ = register(email="bye@example.com")

    r = client.post("/api/v1/auth/logout", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Logout successful"}
    assert "access_token=" in r.headers.get("set-cookie", "")

    # stateless tokens: a copy held by the client keeps working until it expires
    assert client.get("/api/v1/auth/profile", headers=headers).status_code == 200


def test_logout_requires_auth(client):
    assert client.post("/api/v1/auth/logout").status_code == 401
