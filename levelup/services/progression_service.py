"""
levelup.services.progression_service — XP, Levels, Streaks & Activity Log
==========================================================================

Applies :mod:`levelup.engine.progression` results to ``User`` rows.  Every
function takes the caller's :class:`Session` and only flushes; the caller
owns the transaction and commits once, so a multi-step operation (task
completion, webhook event) lands atomically or not at all.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from levelup.constants import LEVEL_UP_BONUS_XP
from levelup.database.models import ActivityLog, ActivityType, User
from levelup.engine.progression import (
    LevelResult,
    apply_xp,
    next_streak,
    streak_milestone,
)

logger = logging.getLogger(__name__)


def log_activity(
    session: Session,
    user_id: int,
    activity_type: ActivityType,
    description: str,
    xp_earned: int = 0,
) -> ActivityLog:
    """Append an entry to the activity log."""
    entry = ActivityLog(
        user_id=user_id,
        activity_type=activity_type.value,
        description=description,
        xp_earned=xp_earned,
    )
    session.add(entry)
    return entry


def award_xp(session: Session, user: User, amount: int) -> LevelResult:
    """Credit *amount* XP and points to *user*.

    XP goes through the single-step level curve; points grow by exactly
    *amount*, applied as ``total_points + amount`` in the UPDATE and
    reloaded on next access.  A level-up appends a ``level_up`` activity entry carrying the
    display bonus; that bonus is not credited to XP or points.
    """
    result = apply_xp(user.level, user.xp, amount)
    old_level = user.level

    user.level = result.level
    user.xp = result.xp
    # Incremented in SQL so a concurrent redemption's debit is not overwritten.
    user.total_points = User.total_points + amount

    if result.leveled_up:
        log_activity(
            session,
            user.id,
            ActivityType.LEVEL_UP,
            f"Reached Level {result.level}",
            LEVEL_UP_BONUS_XP,
        )
        logger.info(
            "User %d leveled up: %d → %d (xp=%d)",
            user.id, old_level, result.level, result.xp,
        )

    session.flush()
    return result


def update_streak(session: Session, user: User, now: datetime | None = None) -> int:
    """Advance *user*'s daily streak for activity at *now*.

    ``last_activity`` is refreshed unconditionally, including on repeat
    activity the same day.  Reaching exactly 7 or 30 days unlocks the
    matching streak achievement.

    Returns the new streak value.
    """
    from levelup.services.achievement_service import award_achievement

    if now is None:
        now = datetime.now(UTC)

    old_streak = user.streak
    user.streak = next_streak(user.streak, user.last_activity, now)
    user.last_activity = now
    session.flush()

    if user.streak != old_streak:
        logger.debug("User %d streak %d → %d", user.id, old_streak, user.streak)

    slug = streak_milestone(user.streak)
    if slug is not None:
        award_achievement(session, user, slug)

    return user.streak
