"""
levelup.api.routes.profile — Profile, leaderboard & activity feed
===================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from levelup.api.deps import CurrentUser, get_config, get_current_user, get_session
from levelup.config import LevelUpConfig
from levelup.services import user_service

router = APIRouter(tags=["profile"])


@router.get("/user/profile")
def get_profile(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Level, XP, points, streak and rank of the signed-in member."""
    try:
        return user_service.get_profile(session, current.user_id)
    except LookupError as exc:
        raise HTTPException(404, str(exc))


@router.get("/leaderboard")
def get_leaderboard(
    limit: int | None = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
    cfg: LevelUpConfig = Depends(get_config),
):
    """Members ranked by total points."""
    return user_service.get_leaderboard(
        session,
        current.user_id,
        limit=limit or cfg.leaderboard_page_size,
        offset=offset,
    )


@router.get("/activity")
def get_activity(
    limit: int | None = Query(None, ge=1, le=100),
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
    cfg: LevelUpConfig = Depends(get_config),
):
    """The signed-in member's activity feed, newest first."""
    return user_service.get_activity(
        session, current.user_id, limit=limit or cfg.activity_page_size
    )
