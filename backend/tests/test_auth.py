from crewboard.core.security import verify_websocket_token, create_access_token

async def register(client, email="player@example.com", name="Player One", password="hunter22"):
    return await client.post("/v1/auth/register", json={"email": email, "name": name, "password": password})

async def login(client, email="player@example.com", password="hunter22"):
    return await client.post("/v1/auth/login", json={"email": email, "password": password})

async def test_register_and_login(client):
    registered = await register(client)
    assert registered.status_code == 201
    user_id = registered.json()["user_id"]

    logged_in = await login(client)
    assert logged_in.status_code == 200
    body = logged_in.json()
    assert body["user_id"] == user_id
    assert body["name"] == "Player One"
    assert body["is_admin"] is False

    me = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "player@example.com"

async def test_duplicate_email(client):
    await register(client)
    again = await register(client, name="Someone Else")

    assert again.status_code == 400

async def test_bad_credentials(client):
    await register(client)

    wrong_password = await login(client, password="nope-nope")
    unknown = await login(client, email="ghost@example.com")

    assert wrong_password.status_code == 401
    assert unknown.status_code == 401

async def test_token_form_login(client):
    await register(client)

    response = await client.post("/v1/auth/token", data={"username": "player@example.com", "password": "hunter22"})

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"

def test_websocket_token():
    token = create_access_token({"sub": "alice"})

    assert verify_websocket_token(token) == "alice"
    assert verify_websocket_token(f"Bearer {token}") == "alice"
    assert verify_websocket_token("garbage") is None
    assert verify_websocket_token(None) is None

# --- Profile ---

async def test_basic_profile_without_saved_profile(client, make_user, auth_headers):
    await make_user("alice", email="alice.plays@example.com", with_profile=False)

    response = await client.get("/v1/users/me/profile", headers=auth_headers("alice"))

    assert response.status_code == 200
    body = response.json()
    assert body["display_name"] == "alice.plays"
    assert body["is_saved"] is False
    assert body["total_posts"] == 0

async def test_update_profile_merges(client, make_user, auth_headers):
    await make_user("alice", name="Alice")

    first = await client.put(
        "/v1/users/me/profile", json={"bio": "Support main", "platforms": ["PC"]}, headers=auth_headers("alice")
    )
    second = await client.put("/v1/users/me/profile", json={"location": "Berlin"}, headers=auth_headers("alice"))

    assert first.status_code == 200
    body = second.json()
    assert body["display_name"] == "Alice"
    assert body["bio"] == "Support main"
    assert body["platforms"] == ["PC"]
    assert body["location"] == "Berlin"
    assert body["is_saved"] is True

async def test_update_profile_rejects_unknown_platform(client, make_user, auth_headers):
    await make_user("alice")

    response = await client.put(
        "/v1/users/me/profile", json={"platforms": ["PC", "Dreamcast"]}, headers=auth_headers("alice")
    )

    assert response.status_code == 422

async def test_public_profile_counts_posts(client, make_user, auth_headers):
    await make_user("alice")
    await make_user("bob")
    await client.post(
        "/v1/posts/",
        json={"game": "CS2", "platform": "PC", "description": "Faceit grind, need a fifth"},
        headers=auth_headers("alice"),
    )

    response = await client.get("/v1/users/alice/profile", headers=auth_headers("bob"))
    missing = await client.get("/v1/users/ghost/profile", headers=auth_headers("bob"))

    assert response.json()["total_posts"] == 1
    assert missing.status_code == 404

async def test_delete_own_account(client, make_user, auth_headers):
    await make_user("alice")

    deleted = await client.delete("/v1/users/me", headers=auth_headers("alice"))
    profile = await client.get("/v1/users/alice/profile", headers=auth_headers("alice"))

    assert deleted.status_code == 204
    assert profile.status_code == 404
