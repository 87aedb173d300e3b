"""
levelup.api.routes.achievements — Achievement catalog
=======================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from levelup.api.deps import CurrentUser, get_current_user, get_session
from levelup.services import achievement_service

router = APIRouter(tags=["achievements"])


@router.get("/achievements")
def get_achievements(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """All achievements with the member's unlock state."""
    return achievement_service.list_achievements(session, current.user_id)
