from sqlalchemy import select, func

from crewboard.db.models.chat_data import ChatRoom, ChatMessage
from crewboard.db.models.game import Game
from crewboard.db.models.post import Post
from crewboard.db.models.user import User, UserProfile
from crewboard.schemas.post import PostCreate
from crewboard.services import chat_service, game_service, post_service

async def count_rows(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()

def lfg_post(game="Valorant") -> PostCreate:
    return PostCreate(game=game, platform="PC", description="Need two more for a five stack")

async def test_admin_routes_require_role(client, make_user, auth_headers):
    await make_user("alice")

    anonymous = await client.get("/v1/admin/users")
    regular = await client.get("/v1/admin/users", headers=auth_headers("alice"))

    assert anonymous.status_code == 401
    assert regular.status_code == 403

async def test_admin_lists_users(client, make_user, auth_headers):
    await make_user("root", is_admin=True)
    await make_user("alice", name="Alice")

    response = await client.get("/v1/admin/users", headers=auth_headers("root"))

    assert response.status_code == 200
    names = {u["id"]: u["display_name"] for u in response.json()}
    assert names["alice"] == "Alice"

async def test_delete_user_removes_everything(client, db, make_user, auth_headers):
    await make_user("root", is_admin=True)
    await make_user("alice")
    await make_user("bob")
    await make_user("carol")
    await post_service.create_post(db, "alice", lfg_post())
    await post_service.create_post(db, "bob", lfg_post())
    with_bob = await chat_service.ensure_room(db, "alice", "bob")
    await chat_service.send_message(db, with_bob, "bob", "hey")
    with_carol = await chat_service.ensure_room(db, "carol", "alice")
    await chat_service.send_message(db, with_carol, "alice", "hi")
    untouched = await chat_service.ensure_room(db, "bob", "carol")
    await chat_service.send_message(db, untouched, "carol", "yo")

    response = await client.delete("/v1/admin/users/alice", headers=auth_headers("root"))

    assert response.status_code == 200
    assert response.json()["deleted"] == {"posts": 1, "chats": 2, "messages": 2}
    assert (await db.execute(select(User.id).where(User.id == "alice"))).first() is None
    assert (await db.execute(select(UserProfile.user_id).where(UserProfile.user_id == "alice"))).first() is None
    assert (await db.execute(select(ChatRoom.id))).scalars().all() == [untouched]
    assert await count_rows(db, ChatMessage) == 1
    assert await count_rows(db, Post) == 1

async def test_delete_unknown_user(client, make_user, auth_headers):
    await make_user("root", is_admin=True)

    response = await client.delete("/v1/admin/users/ghost", headers=auth_headers("root"))

    assert response.status_code == 404

async def test_unverify_game_removes_its_posts(client, db, make_user, auth_headers):
    await make_user("root", is_admin=True)
    await make_user("alice")
    await game_service.seed_verified_games(db)
    await post_service.create_post(db, "alice", lfg_post("Valorant"))
    await post_service.create_post(db, "alice", lfg_post("CS2"))

    response = await client.patch(
        "/v1/admin/games/valorant/verify", json={"verify": False}, headers=auth_headers("root")
    )

    assert response.status_code == 200
    assert response.json() == {"game_id": "valorant", "is_verified": False, "deleted_posts": 1}
    game = (await db.execute(
        select(Game).where(Game.id == "valorant").execution_options(populate_existing=True)
    )).scalar_one()
    assert game.is_verified is False
    assert (await db.execute(select(Post.game))).scalars().all() == ["CS2"]

async def test_verify_submitted_game(client, db, make_user, auth_headers):
    await make_user("root", is_admin=True)
    await make_user("alice")
    await post_service.create_post(
        db, "alice", PostCreate(game="Other", custom_game="Lethal Company", platform="PC",
                                description="Need a crew for quota runs")
    )

    response = await client.patch(
        "/v1/admin/games/lethal_company/verify", json={"verify": True}, headers=auth_headers("root")
    )

    assert response.json()["deleted_posts"] == 0
    games = await client.get("/v1/games/")
    assert "Lethal Company" in [g["name"] for g in games.json()]

async def test_delete_game_and_post(client, db, make_user, auth_headers):
    await make_user("root", is_admin=True)
    await make_user("alice")
    await game_service.seed_verified_games(db)
    doomed = await post_service.create_post(db, "alice", lfg_post("Rust"))
    other = await post_service.create_post(db, "alice", lfg_post("CS2"))

    deleted_game = await client.delete("/v1/admin/games/rust", headers=auth_headers("root"))
    deleted_post = await client.delete(f"/v1/admin/posts/{other.id}", headers=auth_headers("root"))
    missing_post = await client.delete(f"/v1/admin/posts/{doomed.id}", headers=auth_headers("root"))

    assert deleted_game.json()["deleted_posts"] == 1
    assert deleted_post.status_code == 204
    assert missing_post.status_code == 404
    assert await count_rows(db, Post) == 0

async def test_maintenance_clears(client, db, make_user, auth_headers):
    await make_user("root", is_admin=True)
    await make_user("alice")
    await make_user("bob")
    await post_service.create_post(db, "alice", lfg_post())
    room_id = await chat_service.ensure_room(db, "alice", "bob")
    await chat_service.send_message(db, room_id, "alice", "one")
    await chat_service.send_message(db, room_id, "bob", "two")

    chats = await client.post("/v1/admin/maintenance/clear-chats", headers=auth_headers("root"))
    assert chats.json() == {"messages": 2, "chats": 1}

    everything = await client.post("/v1/admin/maintenance/clear-data", headers=auth_headers("root"))
    assert everything.json() == {"posts": 1, "messages": 0, "chats": 0, "total": 1}
    assert await count_rows(db, User) == 3
