"""
levelup.database.seed — Default Catalog Seeder
================================================

Baseline achievements, daily tasks and shop rewards seeded on startup so a
fresh install is immediately playable.

Idempotent: rows are matched by their natural key (achievement slug, task
title, reward name) and only missing ones are inserted.  Edits made directly
in the database are never overwritten.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from levelup.constants import (
    CHATTERBOX,
    CONTENT_KING,
    FIRST_STEPS,
    MONTH_MASTER,
    WEEK_WARRIOR,
)
from levelup.database.models import Achievement, DailyTask, Reward

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------
DEFAULT_ACHIEVEMENTS: list[dict] = [
    {
        "slug": FIRST_STEPS,
        "name": "First Steps",
        "description": "Join the community",
        "category": "onboarding",
        "icon": "\U0001f463",  # 👣
        "xp_reward": 100,
    },
    {
        "slug": CHATTERBOX,
        "name": "Chatterbox",
        "description": "Send 50 messages",
        "category": "social",
        "icon": "\U0001f4ac",  # 💬
        "xp_reward": 250,
    },
    {
        "slug": WEEK_WARRIOR,
        "name": "Week Warrior",
        "description": "Keep a 7-day streak",
        "category": "streaks",
        "icon": "\U0001f525",  # 🔥
        "xp_reward": 500,
    },
    {
        "slug": CONTENT_KING,
        "name": "Content King",
        "description": "Create 25 posts",
        "category": "social",
        "icon": "\u270d\ufe0f",  # ✍️
        "xp_reward": 750,
    },
    {
        "slug": MONTH_MASTER,
        "name": "Month Master",
        "description": "Keep a 30-day streak",
        "category": "streaks",
        "icon": "\U0001f3c6",  # 🏆
        "xp_reward": 1000,
    },
]

DEFAULT_TASKS: list[dict] = [
    {"title": "Say hello", "description": "Post a message in the community chat",
     "required_count": 1, "xp_reward": 20},
    {"title": "Share a win", "description": "Create a post about something you achieved",
     "required_count": 1, "xp_reward": 80},
    {"title": "Spread the love", "description": "React to 5 posts",
     "required_count": 5, "xp_reward": 40},
]

DEFAULT_REWARDS: list[dict] = [
    {"name": "Custom Role", "description": "A custom role in the community", "cost": 500},
    {"name": "Shoutout", "description": "A shoutout in the weekly announcement", "cost": 1000},
    {"name": "1:1 Call", "description": "A 30-minute call with the creator", "cost": 5000},
]


# ---------------------------------------------------------------------------
# Seeder
# ---------------------------------------------------------------------------
def _seed(session: Session, model, key: str, rows: list[dict]) -> int:
    column = getattr(model, key)
    existing = set(session.scalars(select(column)).all())
    inserted = 0
    for row in rows:
        if row[key] in existing:
            continue
        session.add(model(**row))
        inserted += 1
    return inserted


def seed_catalog(engine: Engine) -> None:
    """Insert catalog rows that don't yet exist."""
    session = Session(engine)
    try:
        inserted = _seed(session, Achievement, "slug", DEFAULT_ACHIEVEMENTS)
        inserted += _seed(session, DailyTask, "title", DEFAULT_TASKS)
        inserted += _seed(session, Reward, "name", DEFAULT_REWARDS)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if inserted:
        logger.info("Seeded %d catalog rows.", inserted)
