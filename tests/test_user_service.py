"""
tests/test_user_service.py — Members, Profiles, Leaderboard & Activity Feed
=============================================================================
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from conftest import make_user
from levelup.database.models import ActivityType
from levelup.services import user_service
from levelup.services.achievement_service import get_unlocked_slugs
from levelup.services.progression_service import log_activity

WHOP_PROFILE = {"id": "user_abc", "username": "ada", "email": "ada@example.com"}


class TestUpsertWhopUser:
    def test_new_member_gets_first_steps(self, db_session):
        user, created = user_service.upsert_whop_user(
            db_session, WHOP_PROFILE, access_token="at-1", refresh_token="rt-1"
        )

        assert created is True
        assert user.whop_user_id == "user_abc"
        assert user.username == "ada"
        assert get_unlocked_slugs(db_session, user.id) == {"first_steps"}
        # 100 XP from First Steps clears level 1 exactly.
        assert (user.level, user.xp, user.total_points) == (2, 0, 100)

    def test_returning_member_is_updated_not_rewarded(self, db_session):
        first, _ = user_service.upsert_whop_user(db_session, WHOP_PROFILE, access_token="at-1")
        login_at = datetime(2026, 8, 1, tzinfo=UTC)

        again, created = user_service.upsert_whop_user(
            db_session,
            {"id": "user_abc", "username": "ada_l"},
            access_token="at-2",
            refresh_token="rt-2",
            now=login_at,
        )

        assert created is False
        assert again.id == first.id
        assert again.access_token == "at-2"
        assert again.refresh_token == "rt-2"
        assert again.username == "ada_l"
        assert again.email == "ada@example.com"
        assert again.last_login == login_at
        assert again.total_points == 100

    def test_missing_username_falls_back(self, db_session):
        user, _ = user_service.upsert_whop_user(db_session, {"id": 991}, access_token="t")
        assert user.whop_user_id == "991"
        assert user.username == "Unknown"


class TestGetProfile:
    def test_profile_fields(self, db_session):
        user = make_user(db_session, username="grace", level=3, xp=40, total_points=400, streak=2)
        profile = user_service.get_profile(db_session, user.id)

        assert profile["username"] == "grace"
        assert profile["level"] == 3
        assert profile["xp"] == 40
        assert profile["xpToNextLevel"] == 225
        assert profile["totalPoints"] == 400
        assert profile["streak"] == 2
        assert profile["rank"] == 1
        assert profile["achievements"] == 0
        assert profile["joinedDate"] is not None

    def test_tied_users_share_rank(self, db_session):
        a = make_user(db_session, "a", total_points=500)
        b = make_user(db_session, "b", total_points=500)
        c = make_user(db_session, "c", total_points=100)

        assert user_service.get_profile(db_session, a.id)["rank"] == 1
        assert user_service.get_profile(db_session, b.id)["rank"] == 1
        assert user_service.get_profile(db_session, c.id)["rank"] == 3

    def test_missing_user(self, db_session):
        with pytest.raises(LookupError):
            user_service.get_profile(db_session, 12345)


class TestLeaderboard:
    def test_ordering_badges_and_is_user(self, db_session):
        low = make_user(db_session, "low", total_points=10)
        top = make_user(db_session, "top", total_points=900)
        mid = make_user(db_session, "mid", total_points=300)
        fourth = make_user(db_session, "fourth", total_points=5)

        board = user_service.get_leaderboard(db_session, mid.id)

        assert [row["id"] for row in board] == [top.id, mid.id, low.id, fourth.id]
        assert [row["rank"] for row in board] == [1, 2, 3, 4]
        assert [row["badge"] for row in board] == ["\U0001f451", "\U0001f948", "\U0001f949", "\u2b50"]
        assert [row["isUser"] for row in board] == [False, True, False, False]

    def test_ties_broken_by_join_order(self, db_session):
        early = make_user(db_session, "early", total_points=50)
        late = make_user(db_session, "late", total_points=50)
        board = user_service.get_leaderboard(db_session, early.id)
        assert [row["id"] for row in board] == [early.id, late.id]

    def test_offset_continues_ranks(self, db_session):
        for i in range(5):
            make_user(db_session, f"u{i}", total_points=100 - i)

        page = user_service.get_leaderboard(db_session, 0, limit=2, offset=2)

        assert [row["rank"] for row in page] == [3, 4]
        assert [row["totalPoints"] for row in page] == [98, 97]
        assert page[0]["badge"] == "\U0001f949"


class TestActivityFeed:
    def test_newest_first_with_limit(self, db_session):
        user = make_user(db_session)
        log_activity(db_session, user.id, ActivityType.MESSAGE, "one", 10)
        log_activity(db_session, user.id, ActivityType.POST, "two", 50)
        log_activity(db_session, user.id, ActivityType.REACTION, "three", 5)
        db_session.flush()

        feed = user_service.get_activity(db_session, user.id, limit=2)

        assert [e["description"] for e in feed] == ["three", "two"]
        assert feed[0]["activityType"] == "reaction"
        assert feed[0]["xpEarned"] == 5

    def test_only_own_entries(self, db_session):
        alice = make_user(db_session, "alice")
        bob = make_user(db_session, "bob")
        log_activity(db_session, alice.id, ActivityType.MESSAGE, "hi", 10)
        db_session.flush()

        assert user_service.get_activity(db_session, bob.id) == []
