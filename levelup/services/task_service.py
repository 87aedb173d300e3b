"""
levelup.services.task_service — Daily Tasks & Completion
==========================================================

Days are UTC calendar days.  ``user_tasks`` holds at most one row per
(user, task, day); completing a task twice on the same day is rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from levelup.database.models import ActivityType, DailyTask, User, UserTask
from levelup.engine.progression import LevelResult
from levelup.services.progression_service import award_xp, log_activity, update_streak

logger = logging.getLogger(__name__)

ALREADY_COMPLETED = "Task already completed today"


@dataclass(frozen=True, slots=True)
class TaskCompletion:
    """Outcome of completing a daily task."""

    task_id: int
    xp_earned: int
    level: LevelResult
    streak: int


def utc_today(now: datetime | None = None) -> date:
    if now is None:
        now = datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(UTC).date()


def list_daily_tasks(session: Session, user_id: int, today: date | None = None) -> list[dict]:
    """Active tasks joined with *user_id*'s completion state for *today*."""
    if today is None:
        today = utc_today()

    rows = session.execute(
        select(DailyTask, UserTask)
        .outerjoin(
            UserTask,
            and_(
                UserTask.task_id == DailyTask.id,
                UserTask.user_id == user_id,
                UserTask.day == today,
            ),
        )
        .where(DailyTask.active.is_(True))
        .order_by(DailyTask.id)
    ).all()

    return [
        {
            "id": task.id,
            "title": task.title,
            "description": task.description,
            "requiredCount": task.required_count,
            "xpReward": task.xp_reward,
            "completed": bool(entry and entry.completed),
            "progress": entry.progress if entry else 0,
            "completedAt": (
                entry.completed_at.isoformat() if entry and entry.completed_at else None
            ),
        }
        for task, entry in rows
    ]


def complete_task(
    session: Session,
    user: User,
    task_id: int,
    now: datetime | None = None,
) -> TaskCompletion:
    """Mark *task_id* done for today, award its XP and advance the streak.

    Raises
    ------
    LookupError
        If the task doesn't exist or is inactive.
    ValueError
        If the user already completed the task today.
    """
    if now is None:
        now = datetime.now(UTC)

    task = session.get(DailyTask, task_id)
    if task is None or not task.active:
        raise LookupError("Task not found")

    today = utc_today(now)
    entry = session.scalar(
        select(UserTask).where(
            UserTask.user_id == user.id,
            UserTask.task_id == task.id,
            UserTask.day == today,
        )
    )

    if entry is not None and entry.completed:
        raise ValueError(ALREADY_COMPLETED)

    if entry is None:
        try:
            with session.begin_nested():   # SAVEPOINT
                session.add(UserTask(
                    user_id=user.id,
                    task_id=task.id,
                    day=today,
                    completed=True,
                    progress=task.required_count,
                    completed_at=now,
                ))
                session.flush()
        except IntegrityError:
            # Unique (user, task, day) caught a concurrent completion.
            raise ValueError(ALREADY_COMPLETED) from None
    else:
        entry.completed = True
        entry.progress = task.required_count
        entry.completed_at = now

    log_activity(
        session,
        user.id,
        ActivityType.TASK,
        f"Completed task: {task.title}",
        task.xp_reward,
    )
    level = award_xp(session, user, task.xp_reward)
    streak = update_streak(session, user, now)

    logger.info("User %d completed task %d (+%d XP)", user.id, task.id, task.xp_reward)
    return TaskCompletion(task_id=task.id, xp_earned=task.xp_reward, level=level, streak=streak)
