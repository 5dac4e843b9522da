# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")
# Minimum bcrypt cost keeps the suite fast.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from social_backend.core.security import create_access_token, hash_password
from social_backend.db.session import Base, enable_sqlite_foreign_keys
from social_backend.db.session import get_db as app_get_session
from social_backend.db.time import utcnow
from social_backend.main import app as fastapi_app
from social_backend.models import (
    Comment,
    FriendRequest,
    Friendship,
    FriendSuggestion,
    Post,
    User,
)

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret-pass"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test ends by emptying the tables.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


# ==================== Factories ====================

@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users; ``password`` makes them able to log in."""

    def _make_user(
        username: str,
        *,
        password: str | None = None,
        status: str | None = "online",
        profile_image: str | None = "👤",
    ) -> User:
        user = User(
            username=username.lower(),
            password_hash=hash_password(password) if password else None,
            profile_image=profile_image,
            status=status,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        token = create_access_token(user.id, user.username)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice", password=TEST_PASSWORD)


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob", password=TEST_PASSWORD, status="offline", profile_image="👨")


@pytest.fixture()
def alice_headers(alice: User, auth_headers: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return auth_headers(alice)


@pytest.fixture()
def bob_headers(bob: User, auth_headers: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return auth_headers(bob)


@pytest.fixture()
def make_friendship(db_session: Session) -> Callable[..., Friendship]:
    def _make_friendship(
        user: User,
        friend: User,
        *,
        status: str | None = "online",
        mutual_friends: int = 0,
    ) -> Friendship:
        friendship = Friendship(
            user_id=user.id,
            friend_user_id=friend.id,
            status=status,
            mutual_friends=mutual_friends,
        )
        db_session.add(friendship)
        db_session.commit()
        db_session.refresh(friendship)
        return friendship

    return _make_friendship


@pytest.fixture()
def make_suggestion(db_session: Session) -> Callable[..., FriendSuggestion]:
    def _make_suggestion(
        user: User,
        suggested: User,
        *,
        mutual_friends: int = 0,
        created_at: datetime | None = None,
    ) -> FriendSuggestion:
        suggestion = FriendSuggestion(
            user_id=user.id,
            suggested_user_id=suggested.id,
            mutual_friends=mutual_friends,
            created_at=created_at or utcnow(),
        )
        db_session.add(suggestion)
        db_session.commit()
        db_session.refresh(suggestion)
        return suggestion

    return _make_suggestion


@pytest.fixture()
def make_request(db_session: Session) -> Callable[..., FriendRequest]:
    def _make_request(
        sender: User,
        receiver: User,
        *,
        mutual_friends: int = 0,
        age: timedelta = timedelta(0),
    ) -> FriendRequest:
        request = FriendRequest(
            sender_user_id=sender.id,
            receiver_user_id=receiver.id,
            mutual_friends=mutual_friends,
            created_at=utcnow() - age,
        )
        db_session.add(request)
        db_session.commit()
        db_session.refresh(request)
        return request

    return _make_request


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    def _make_post(author: User, text: str = "Test post content", *, age: timedelta = timedelta(0)) -> Post:
        post = Post(user_id=author.id, text=text, created_at=utcnow() - age)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    def _make_comment(
        post: Post,
        author: User,
        text: str = "Test comment",
        *,
        age: timedelta = timedelta(0),
    ) -> Comment:
        comment = Comment(post_id=post.id, user_id=author.id, text=text, created_at=utcnow() - age)
        db_session.add(comment)
        db_session.commit()
        db_session.refresh(comment)
        return comment

    return _make_comment
