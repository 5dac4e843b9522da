"""Load the demo social graph into the configured database.

Usage:
  python -m social_backend.scripts.seed            # create tables, replace all rows
  python -m social_backend.scripts.seed --drop     # drop and recreate tables first

Two accounts can log in (``alex`` and ``sarah``, password ``password``); the
remaining profile users exist only to populate friends, suggestions, requests
and the feed. Friend suggestions are never derived by the API, so this is the
only way they get populated.
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from social_backend.core.security import hash_password
from social_backend.core.settings import settings
from social_backend.db import Base, SessionLocal, create_tables, drop_tables
from social_backend.db.time import utcnow
from social_backend.models import (
    Comment,
    CommentLike,
    FriendRequest,
    Friendship,
    FriendSuggestion,
    Post,
    PostLike,
    User,
)
from social_backend.models.friendship import REQUEST_STATUS_PENDING
from social_backend.models.user import PRESENCE_OFFLINE, PRESENCE_ONLINE

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"
LOGIN_USERS = ("alex", "sarah")

# (username, profile image, presence)
USERS: list[tuple[str, str, str]] = [
    ("alex", "👨", PRESENCE_ONLINE),
    ("sarah", "👩", PRESENCE_ONLINE),
    ("alex_johnson", "👨", PRESENCE_ONLINE),
    ("sarah_chen", "👩", PRESENCE_ONLINE),
    ("mike_williams", "👨", PRESENCE_OFFLINE),
    ("emma_davis", "👩", PRESENCE_ONLINE),
    ("david_brown", "👨", PRESENCE_OFFLINE),
    ("lisa_anderson", "👩", PRESENCE_ONLINE),
    ("james_wilson", "👨", PRESENCE_ONLINE),
    ("olivia_martinez", "👩", PRESENCE_ONLINE),
    ("ryan_taylor", "👨", PRESENCE_ONLINE),
    ("sophia_lee", "👩", PRESENCE_ONLINE),
    ("chris_miller", "👨", PRESENCE_ONLINE),
    ("amanda_white", "👩", PRESENCE_ONLINE),
    ("benjamin_clark", "👨", PRESENCE_ONLINE),
    ("natalie_kim", "👩", PRESENCE_ONLINE),
    ("thomas_moore", "👨", PRESENCE_ONLINE),
]

# (user, friend, status, mutual friends)
FRIENDSHIPS: list[tuple[str, str, str, int]] = [
    ("alex", "alex_johnson", PRESENCE_ONLINE, 5),
    ("alex", "sarah_chen", PRESENCE_ONLINE, 8),
    ("alex", "mike_williams", PRESENCE_OFFLINE, 3),
    ("alex", "emma_davis", PRESENCE_ONLINE, 12),
    ("alex", "david_brown", PRESENCE_OFFLINE, 7),
    ("sarah", "alex_johnson", PRESENCE_ONLINE, 8),
    ("sarah", "emma_davis", PRESENCE_ONLINE, 12),
    ("sarah", "david_brown", PRESENCE_OFFLINE, 9),
]

# (user, suggested user, mutual friends)
SUGGESTIONS: list[tuple[str, str, int]] = [
    ("alex", "lisa_anderson", 4),
    ("alex", "james_wilson", 6),
    ("alex", "olivia_martinez", 2),
    ("alex", "ryan_taylor", 9),
    ("alex", "sophia_lee", 5),
    ("sarah", "mike_williams", 3),
    ("sarah", "lisa_anderson", 7),
    ("sarah", "james_wilson", 5),
]

# (sender, receiver, mutual friends, age)
REQUESTS: list[tuple[str, str, int, timedelta]] = [
    ("chris_miller", "alex", 3, timedelta(hours=2)),
    ("amanda_white", "alex", 7, timedelta(hours=5)),
    ("alex", "benjamin_clark", 4, timedelta(days=1)),
    ("natalie_kim", "alex", 2, timedelta(days=3)),
    ("alex", "thomas_moore", 6, timedelta(days=2)),
    ("ryan_taylor", "sarah", 4, timedelta(hours=1)),
    ("sarah", "sophia_lee", 6, timedelta(hours=12)),
]


@dataclass
class SeedComment:
    author: str
    text: str
    age: timedelta
    liked_by: list[str] = field(default_factory=list)


@dataclass
class SeedPost:
    author: str
    text: str
    age: timedelta
    liked_by: list[str] = field(default_factory=list)
    comments: list[SeedComment] = field(default_factory=list)


POSTS: list[SeedPost] = [
    SeedPost(
        "alex_johnson",
        "Just finished a great workout! 💪",
        timedelta(hours=1),
        ["sarah", "mike_williams", "emma_davis"],
        [
            SeedComment("sarah_chen", "Nice work!", timedelta(minutes=30), ["alex", "mike_williams"]),
            SeedComment("mike_williams", "Keep it up!", timedelta(minutes=18), ["sarah"]),
        ],
    ),
    SeedPost(
        "sarah_chen",
        "Beautiful sunset today 🌅",
        timedelta(hours=3),
        ["alex", "emma_davis", "david_brown"],
        [
            SeedComment(
                "emma_davis",
                "Stunning!",
                timedelta(hours=2),
                ["alex", "sarah", "david_brown", "mike_williams", "emma_davis"],
            ),
        ],
    ),
    SeedPost(
        "emma_davis",
        "New recipe turned out amazing! 🍰",
        timedelta(hours=5),
        ["alex", "sarah", "david_brown"],
    ),
    SeedPost(
        "sarah_chen",
        "Exploring the city with friends 🏙️",
        timedelta(hours=2),
        ["alex", "emma_davis", "david_brown"],
        [
            SeedComment(
                "emma_davis",
                "So much fun!",
                timedelta(hours=1),
                ["alex", "sarah", "david_brown", "mike_williams", "emma_davis"],
            ),
            SeedComment(
                "alex_johnson",
                "Next time invite me!",
                timedelta(minutes=30),
                ["sarah", "emma_davis", "david_brown"],
            ),
        ],
    ),
    SeedPost(
        "emma_davis",
        "Weekend baking session 🍪",
        timedelta(hours=6),
        ["alex", "sarah", "david_brown"],
    ),
]


def clear_all(db: Session) -> None:
    """Delete every row, children before parents."""
    for table in reversed(Base.metadata.sorted_tables):
        db.execute(table.delete())
    # Rows were removed behind the ORM's back; SQLite may hand their ids out again.
    db.expunge_all()


def seed_database(db: Session, now: datetime | None = None) -> dict[str, int]:
    """Replace the database contents with the demo graph.

    Timestamps are placed relative to ``now`` so relative times in the feed
    read naturally right after seeding. Returns row counts per table.
    """
    now = now or utcnow()
    clear_all(db)

    password_hash = hash_password(DEMO_PASSWORD)
    users: dict[str, User] = {}
    for username, image, presence in USERS:
        user = User(
            username=username,
            password_hash=password_hash if username in LOGIN_USERS else None,
            profile_image=image,
            status=presence,
            created_at=now - timedelta(days=30),
        )
        db.add(user)
        users[username] = user
    db.flush()

    for owner, friend, presence, mutual in FRIENDSHIPS:
        db.add(
            Friendship(
                user_id=users[owner].id,
                friend_user_id=users[friend].id,
                status=presence,
                mutual_friends=mutual,
                created_at=now - timedelta(hours=2),
            )
        )

    for owner, suggested, mutual in SUGGESTIONS:
        db.add(
            FriendSuggestion(
                user_id=users[owner].id,
                suggested_user_id=users[suggested].id,
                mutual_friends=mutual,
                created_at=now - timedelta(hours=1),
            )
        )

    for sender, receiver, mutual, age in REQUESTS:
        db.add(
            FriendRequest(
                sender_user_id=users[sender].id,
                receiver_user_id=users[receiver].id,
                mutual_friends=mutual,
                status=REQUEST_STATUS_PENDING,
                created_at=now - age,
            )
        )

    for seed_post in POSTS:
        post = Post(user_id=users[seed_post.author].id, text=seed_post.text, created_at=now - seed_post.age)
        db.add(post)
        db.flush()
        for liker in seed_post.liked_by:
            db.add(PostLike(post_id=post.id, user_id=users[liker].id, created_at=now - timedelta(minutes=6)))

        for seed_comment in seed_post.comments:
            comment = Comment(
                post_id=post.id,
                user_id=users[seed_comment.author].id,
                text=seed_comment.text,
                created_at=now - seed_comment.age,
            )
            db.add(comment)
            db.flush()
            for liker in seed_comment.liked_by:
                db.add(
                    CommentLike(
                        comment_id=comment.id,
                        user_id=users[liker].id,
                        created_at=now - timedelta(minutes=3),
                    )
                )

    db.commit()

    counts = {
        "users": len(USERS),
        "friendships": len(FRIENDSHIPS),
        "friend_suggestions": len(SUGGESTIONS),
        "friend_requests": len(REQUESTS),
        "posts": len(POSTS),
        "comments": sum(len(post.comments) for post in POSTS),
    }
    logger.info("Seeded demo data: %s", counts)
    return counts


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Load demo data into the configured database.")
    parser.add_argument(
        "--drop",
        action="store_true",
        help="drop and recreate all tables before seeding",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())

    if args.drop:
        drop_tables()
    create_tables()

    with SessionLocal() as db:
        counts = seed_database(db)

    print(f"[seed] Seeded {settings.database_url}: " + ", ".join(f"{k}={v}" for k, v in counts.items()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
