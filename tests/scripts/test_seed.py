# tests/scripts/test_seed.py
"""Tests for the demo data loader."""

from fastapi import status

from social_backend.models import FriendRequest, Friendship, FriendSuggestion, Post, User
from social_backend.models.user import PRESENCE_OFFLINE, PRESENCE_ONLINE
from social_backend.scripts.seed import DEMO_PASSWORD, FRIENDSHIPS, POSTS, REQUESTS, SUGGESTIONS, USERS, seed_database


def test_seed_populates_every_table(db_session) -> None:
    counts = seed_database(db_session)

    assert db_session.query(User).count() == len(USERS) == counts["users"]
    assert db_session.query(Friendship).count() == len(FRIENDSHIPS)
    assert db_session.query(FriendSuggestion).count() == len(SUGGESTIONS)
    assert db_session.query(FriendRequest).count() == len(REQUESTS)
    assert db_session.query(Post).count() == len(POSTS)


def test_seed_replaces_previous_rows(db_session, make_user) -> None:
    make_user("leftover")
    seed_database(db_session)
    seed_database(db_session)

    assert db_session.query(User).filter_by(username="leftover").count() == 0
    assert db_session.query(User).count() == len(USERS)


def test_seeded_account_sees_demo_graph(client, db_session) -> None:
    seed_database(db_session)

    login = client.post("/auth/login", json={"username": "alex", "password": DEMO_PASSWORD})
    assert login.status_code == status.HTTP_200_OK
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    friends = client.get("/friends", headers=headers).json()
    assert [f["username"] for f in friends["data"]] == [
        "alex_johnson",
        "david_brown",
        "emma_davis",
        "mike_williams",
        "sarah_chen",
    ]

    suggestions = client.get("/friends/suggestions", headers=headers).json()
    assert suggestions["pagination"]["total"] == 5

    requests = client.get("/friends/requests", headers=headers).json()["data"]
    assert [(r["username"], r["type"]) for r in requests] == [
        ("chris_miller", "incoming"),
        ("amanda_white", "incoming"),
        ("benjamin_clark", "outgoing"),
        ("thomas_moore", "outgoing"),
        ("natalie_kim", "incoming"),
    ]

    feed = client.get("/posts", headers=headers).json()
    assert feed["data"][0]["text"] == "Just finished a great workout! 💪"
    assert feed["data"][0]["likedByCurrentUser"] is False
    assert feed["data"][0]["comments"][0]["likedByCurrentUser"] is True


def test_profile_users_cannot_login(client, db_session) -> None:
    seed_database(db_session)
    response = client.post("/auth/login", json={"username": "emma_davis", "password": DEMO_PASSWORD})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_seed_presence_uses_known_values(client, db_session) -> None:
    seed_database(db_session)

    presences = {user.status for user in db_session.query(User)}
    assert presences == {PRESENCE_ONLINE, PRESENCE_OFFLINE}

    login = client.post("/auth/login", json={"username": "alex", "password": DEMO_PASSWORD})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}
    offline = client.get("/friends", params={"status": PRESENCE_OFFLINE}, headers=headers).json()
    assert [f["username"] for f in offline["data"]] == ["david_brown", "mike_williams"]
