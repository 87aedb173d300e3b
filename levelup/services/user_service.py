"""
levelup.services.user_service — Members, Profiles, Leaderboard & Feed
=======================================================================
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from levelup.constants import FIRST_STEPS, badge_for_rank, xp_for_level
from levelup.database.models import ActivityLog, User, UserAchievement
from levelup.services.achievement_service import award_achievement

logger = logging.getLogger(__name__)


def get_user_by_whop_id(session: Session, whop_user_id: str) -> User | None:
    return session.scalar(select(User).where(User.whop_user_id == whop_user_id))


def upsert_whop_user(
    session: Session,
    whop_user: dict,
    *,
    access_token: str,
    refresh_token: str | None = None,
    now: datetime | None = None,
) -> tuple[User, bool]:
    """Fetch or insert the local user for a Whop ``/me`` profile.

    New members start at level 1 with no XP, points or streak, and unlock
    First Steps.  Returning members get their tokens and login time
    refreshed.

    Returns (user, created).
    """
    if now is None:
        now = datetime.now(UTC)

    whop_user_id = str(whop_user["id"])
    user = get_user_by_whop_id(session, whop_user_id)

    if user is None:
        user = User(
            whop_user_id=whop_user_id,
            username=whop_user.get("username") or "Unknown",
            email=whop_user.get("email"),
            access_token=access_token,
            refresh_token=refresh_token,
            level=1,
            xp=0,
            total_points=0,
            streak=0,
            last_login=now,
        )
        session.add(user)
        session.flush()
        logger.info("New member %s joined as user %d", whop_user_id, user.id)

        award_achievement(session, user, FIRST_STEPS)
        return user, True

    user.access_token = access_token
    user.refresh_token = refresh_token
    user.last_login = now
    if whop_user.get("username"):
        user.username = whop_user["username"]
    if whop_user.get("email"):
        user.email = whop_user["email"]
    session.flush()
    return user, False


def get_profile(session: Session, user_id: int) -> dict:
    """Profile card for *user_id*.

    ``rank`` is 1 + the number of users with strictly more points, so tied
    users share a rank.

    Raises
    ------
    LookupError
        If the user doesn't exist.
    """
    user = session.get(User, user_id)
    if user is None:
        raise LookupError("User not found")

    ahead = session.scalar(
        select(func.count()).select_from(User).where(User.total_points > user.total_points)
    ) or 0
    unlocked = session.scalar(
        select(func.count())
        .select_from(UserAchievement)
        .where(UserAchievement.user_id == user.id)
    ) or 0

    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "level": user.level,
        "xp": user.xp,
        "xpToNextLevel": xp_for_level(user.level),
        "totalPoints": user.total_points,
        "streak": user.streak,
        "rank": ahead + 1,
        "achievements": unlocked,
        "joinedDate": user.created_at.isoformat() if user.created_at else None,
    }


def get_leaderboard(
    session: Session,
    user_id: int,
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    """Users ranked by points (ties broken by join order)."""
    rows = session.scalars(
        select(User)
        .order_by(User.total_points.desc(), User.id)
        .offset(offset)
        .limit(limit)
    ).all()

    leaderboard = []
    for i, u in enumerate(rows):
        rank = offset + i + 1
        leaderboard.append({
            "rank": rank,
            "id": u.id,
            "username": u.username,
            "totalPoints": u.total_points,
            "level": u.level,
            "badge": badge_for_rank(rank),
            "isUser": u.id == user_id,
        })
    return leaderboard


def get_activity(session: Session, user_id: int, limit: int = 20) -> list[dict]:
    """Newest-first activity feed for *user_id*."""
    logs = session.scalars(
        select(ActivityLog)
        .where(ActivityLog.user_id == user_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
    ).all()

    return [
        {
            "activityType": log.activity_type,
            "description": log.description,
            "xpEarned": log.xp_earned,
            "createdAt": log.created_at.isoformat() if log.created_at else None,
        }
        for log in logs
    ]
