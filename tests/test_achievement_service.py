"""
tests/test_achievement_service.py — Achievement Unlocks & Thresholds
======================================================================
"""

from __future__ import annotations

from sqlalchemy import func, select

from conftest import make_user
from levelup.database.models import ActivityLog, ActivityType, UserAchievement
from levelup.services import achievement_service
from levelup.services.progression_service import log_activity


def _seed_activity(session, user_id: int, activity_type: ActivityType, count: int) -> None:
    for _ in range(count):
        log_activity(session, user_id, activity_type, "seeded", 0)
    session.flush()


class TestAwardAchievement:
    def test_first_unlock_grants_xp_and_logs(self, db_session):
        user = make_user(db_session)

        assert achievement_service.award_achievement(db_session, user, "chatterbox") is True

        assert user.total_points == 250
        entries = db_session.scalars(
            select(ActivityLog).where(
                ActivityLog.user_id == user.id,
                ActivityLog.activity_type == ActivityType.ACHIEVEMENT.value,
            )
        ).all()
        assert [e.description for e in entries] == ["Unlocked achievement: Chatterbox"]
        assert entries[0].xp_earned == 250

    def test_second_unlock_is_noop(self, db_session):
        user = make_user(db_session)
        achievement_service.award_achievement(db_session, user, "first_steps")

        assert achievement_service.award_achievement(db_session, user, "first_steps") is False
        assert user.total_points == 100
        count = db_session.scalar(
            select(func.count()).select_from(UserAchievement)
            .where(UserAchievement.user_id == user.id)
        )
        assert count == 1

    def test_unknown_slug_is_skipped(self, db_session):
        user = make_user(db_session)
        assert achievement_service.award_achievement(db_session, user, "no_such_thing") is False
        assert user.total_points == 0

    def test_unlocks_are_per_user(self, db_session):
        alice = make_user(db_session, "alice")
        bob = make_user(db_session, "bob")
        achievement_service.award_achievement(db_session, alice, "content_king")

        assert achievement_service.get_unlocked_slugs(db_session, alice.id) == {"content_king"}
        assert achievement_service.get_unlocked_slugs(db_session, bob.id) == set()


class TestThresholdChecks:
    def test_chatterbox_below_threshold(self, db_session):
        user = make_user(db_session)
        _seed_activity(db_session, user.id, ActivityType.MESSAGE, 49)
        assert achievement_service.check_message_achievements(db_session, user) is False

    def test_chatterbox_at_threshold(self, db_session):
        user = make_user(db_session)
        _seed_activity(db_session, user.id, ActivityType.MESSAGE, 50)
        assert achievement_service.check_message_achievements(db_session, user) is True
        assert achievement_service.check_message_achievements(db_session, user) is False

    def test_other_activity_types_do_not_count(self, db_session):
        user = make_user(db_session)
        _seed_activity(db_session, user.id, ActivityType.REACTION, 60)
        assert achievement_service.check_message_achievements(db_session, user) is False

    def test_content_king_at_threshold(self, db_session):
        user = make_user(db_session)
        _seed_activity(db_session, user.id, ActivityType.POST, 25)
        assert achievement_service.check_post_achievements(db_session, user) is True
        assert "content_king" in achievement_service.get_unlocked_slugs(db_session, user.id)


class TestListAchievements:
    def test_catalog_with_unlock_state(self, db_session):
        user = make_user(db_session)
        achievement_service.award_achievement(db_session, user, "first_steps")
        db_session.flush()

        rows = achievement_service.list_achievements(db_session, user.id)

        assert {r["slug"] for r in rows} == {
            "first_steps", "chatterbox", "week_warrior", "content_king", "month_master",
        }
        by_slug = {r["slug"]: r for r in rows}
        assert by_slug["first_steps"]["unlocked"] is True
        assert by_slug["first_steps"]["unlockedAt"] is not None
        assert by_slug["chatterbox"]["unlocked"] is False
        assert by_slug["chatterbox"]["unlockedAt"] is None
        assert by_slug["month_master"]["xpReward"] == 1000

    def test_other_users_unlocks_not_shown(self, db_session):
        alice = make_user(db_session, "alice")
        bob = make_user(db_session, "bob")
        achievement_service.award_achievement(db_session, alice, "first_steps")
        db_session.flush()

        rows = achievement_service.list_achievements(db_session, bob.id)
        assert not any(r["unlocked"] for r in rows)
        assert len(rows) == 5
