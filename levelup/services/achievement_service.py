"""
levelup.services.achievement_service — Achievement Unlocks & Threshold Checks
==============================================================================

Unlocks are idempotent: the ``(user_id, achievement_id)`` primary key of
``user_achievements`` guarantees an achievement (and its XP bonus) is
granted at most once per user.  Threshold checks count rows in the activity
log on every call.
"""

from __future__ import annotations

import logging

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from levelup.constants import (
    CHATTERBOX,
    CHATTERBOX_MESSAGES,
    CONTENT_KING,
    CONTENT_KING_POSTS,
)
from levelup.database.models import (
    Achievement,
    ActivityLog,
    ActivityType,
    User,
    UserAchievement,
)
from levelup.services.progression_service import award_xp, log_activity

logger = logging.getLogger(__name__)


def get_achievement(session: Session, slug: str) -> Achievement | None:
    return session.scalar(select(Achievement).where(Achievement.slug == slug))


def get_unlocked_slugs(session: Session, user_id: int) -> set[str]:
    """Slugs of every achievement *user_id* has unlocked."""
    rows = session.scalars(
        select(Achievement.slug)
        .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
    ).all()
    return set(rows)


def award_achievement(session: Session, user: User, slug: str) -> bool:
    """Unlock achievement *slug* for *user* unless already unlocked.

    On first unlock: records the unlock, credits the achievement's XP bonus
    through :func:`award_xp` and appends an ``achievement`` activity entry.

    Returns True if the achievement was newly unlocked.
    """
    achievement = get_achievement(session, slug)
    if achievement is None:
        logger.warning("Achievement %r is not in the catalog, skipping", slug)
        return False

    if session.get(UserAchievement, (user.id, achievement.id)) is not None:
        return False

    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(UserAchievement(user_id=user.id, achievement_id=achievement.id))
            session.flush()
    except IntegrityError:
        # A concurrent request unlocked it between our check and insert.
        return False

    award_xp(session, user, achievement.xp_reward)
    log_activity(
        session,
        user.id,
        ActivityType.ACHIEVEMENT,
        f"Unlocked achievement: {achievement.name}",
        achievement.xp_reward,
    )
    session.flush()
    logger.info("User %d unlocked %s (+%d XP)", user.id, slug, achievement.xp_reward)
    return True


def count_activity(session: Session, user_id: int, activity_type: ActivityType) -> int:
    return session.scalar(
        select(func.count())
        .select_from(ActivityLog)
        .where(
            ActivityLog.user_id == user_id,
            ActivityLog.activity_type == activity_type.value,
        )
    ) or 0


def check_message_achievements(session: Session, user: User) -> bool:
    """Unlock Chatterbox once the user has 50 logged messages."""
    if count_activity(session, user.id, ActivityType.MESSAGE) >= CHATTERBOX_MESSAGES:
        return award_achievement(session, user, CHATTERBOX)
    return False


def check_post_achievements(session: Session, user: User) -> bool:
    """Unlock Content King once the user has 25 logged posts."""
    if count_activity(session, user.id, ActivityType.POST) >= CONTENT_KING_POSTS:
        return award_achievement(session, user, CONTENT_KING)
    return False


def list_achievements(session: Session, user_id: int) -> list[dict]:
    """Full catalog with the user's unlock state."""
    rows = session.execute(
        select(Achievement, UserAchievement.unlocked_at)
        .outerjoin(
            UserAchievement,
            and_(
                UserAchievement.achievement_id == Achievement.id,
                UserAchievement.user_id == user_id,
            ),
        )
        .order_by(Achievement.category, Achievement.id)
    ).all()

    return [
        {
            "id": a.id,
            "slug": a.slug,
            "name": a.name,
            "description": a.description,
            "category": a.category,
            "icon": a.icon,
            "xpReward": a.xp_reward,
            "unlocked": unlocked_at is not None,
            "unlockedAt": unlocked_at.isoformat() if unlocked_at else None,
        }
        for a, unlocked_at in rows
    ]
