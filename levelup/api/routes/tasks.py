"""
levelup.api.routes.tasks — Daily tasks
========================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from levelup.api.deps import CurrentUser, get_current_user, get_session
from levelup.database.models import User
from levelup.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskComplete(BaseModel):
    taskId: int


@router.get("/daily")
def get_daily_tasks(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Today's tasks with the member's completion state."""
    return task_service.list_daily_tasks(session, current.user_id)


@router.post("/complete")
def complete_task(
    body: TaskComplete,
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user = session.get(User, current.user_id)
    if user is None:
        raise HTTPException(404, "User not found")

    try:
        result = task_service.complete_task(session, user, body.taskId)
        session.commit()
    except LookupError as exc:
        session.rollback()
        raise HTTPException(404, str(exc))
    except ValueError as exc:
        session.rollback()
        raise HTTPException(400, str(exc))

    return {
        "success": True,
        "xpEarned": result.xp_earned,
        "leveledUp": result.level.leveled_up,
        "level": result.level.level,
        "xp": result.level.xp,
        "streak": result.streak,
    }
