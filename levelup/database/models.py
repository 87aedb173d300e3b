"""
levelup.database.models — SQLAlchemy 2.0 Data Models
=====================================================

Tables:
- users              — Community members (local id + Whop user id)
- daily_tasks        — Static catalog of repeatable daily tasks
- user_tasks         — One completion row per (user, task, calendar day)
- achievements       — Catalog of one-time milestones, keyed by slug
- user_achievements  — Unlocked achievements (at most once per user)
- rewards            — Reward shop catalog
- user_rewards       — Permanent redemption records
- activity_log       — Append-only feed of XP-earning events
- oauth_states       — One-time CSRF tokens for the OAuth callback
"""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all LevelUp ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ActivityType(enum.StrEnum):
    """Kinds of entries written to the activity log."""
    MESSAGE = "message"
    POST = "post"
    REACTION = "reaction"
    TASK = "task"
    LEVEL_UP = "level_up"
    ACHIEVEMENT = "achievement"


# ---------------------------------------------------------------------------
# Users — one row per Whop member who has signed in
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    whop_user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    access_token: Mapped[str | None] = mapped_column(Text, default=None)
    refresh_token: Mapped[str | None] = mapped_column(Text, default=None)
    level: Mapped[int] = mapped_column(Integer, default=1)
    xp: Mapped[int] = mapped_column(Integer, default=0)
    total_points: Mapped[int] = mapped_column(Integer, default=0)
    streak: Mapped[int] = mapped_column(Integer, default=0)
    last_activity: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    tasks: Mapped[list[UserTask]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    achievements: Mapped[list[UserAchievement]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    redemptions: Mapped[list[UserReward]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    activity_logs: Mapped[list[ActivityLog]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_users_total_points", "total_points"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.username!r} lvl={self.level}>"


# ---------------------------------------------------------------------------
# DailyTask — static task catalog
# ---------------------------------------------------------------------------
class DailyTask(Base):
    __tablename__ = "daily_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    required_count: Mapped[int] = mapped_column(Integer, default=1)
    xp_reward: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<DailyTask id={self.id} title={self.title!r} xp={self.xp_reward}>"


# ---------------------------------------------------------------------------
# UserTask — per-day completion state
# ---------------------------------------------------------------------------
class UserTask(Base):
    """Completion state of one task for one user on one calendar day (UTC)."""
    __tablename__ = "user_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("daily_tasks.id", ondelete="CASCADE"), nullable=False
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    progress: Mapped[int] = mapped_column(Integer, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="tasks")
    task: Mapped[DailyTask] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "task_id", "day", name="uq_user_tasks_user_task_day"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserTask user={self.user_id} task={self.task_id} "
            f"day={self.day} completed={self.completed}>"
        )


# ---------------------------------------------------------------------------
# Achievement — catalog of one-time milestones
# ---------------------------------------------------------------------------
class Achievement(Base):
    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="general")
    icon: Mapped[str | None] = mapped_column(String(20), default=None)
    xp_reward: Mapped[int] = mapped_column(Integer, default=0)

    unlocked_by: Mapped[list[UserAchievement]] = relationship(back_populates="achievement")

    def __repr__(self) -> str:
        return f"<Achievement id={self.id} slug={self.slug!r}>"


# ---------------------------------------------------------------------------
# UserAchievement — unlocked achievements
# ---------------------------------------------------------------------------
class UserAchievement(Base):
    __tablename__ = "user_achievements"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    achievement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("achievements.id", ondelete="CASCADE"), primary_key=True
    )
    unlocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="achievements")
    achievement: Mapped[Achievement] = relationship(back_populates="unlocked_by")

    def __repr__(self) -> str:
        return f"<UserAchievement user={self.user_id} achievement={self.achievement_id}>"


# ---------------------------------------------------------------------------
# Reward — shop catalog
# ---------------------------------------------------------------------------
class Reward(Base):
    __tablename__ = "rewards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    cost: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<Reward id={self.id} name={self.name!r} cost={self.cost}>"


# ---------------------------------------------------------------------------
# UserReward — permanent redemption record
# ---------------------------------------------------------------------------
class UserReward(Base):
    __tablename__ = "user_rewards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    reward_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rewards.id", ondelete="CASCADE"), nullable=False
    )
    cost: Mapped[int] = mapped_column(Integer, nullable=False)  # price paid
    redeemed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="redemptions")
    reward: Mapped[Reward] = relationship()

    __table_args__ = (
        Index("ix_user_rewards_user_reward", "user_id", "reward_id"),
    )

    def __repr__(self) -> str:
        return f"<UserReward user={self.user_id} reward={self.reward_id}>"


# ---------------------------------------------------------------------------
# ActivityLog — append-only feed
# ---------------------------------------------------------------------------
class ActivityLog(Base):
    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    activity_type: Mapped[str] = mapped_column(String(30), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    xp_earned: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="activity_logs")

    __table_args__ = (
        Index("ix_activity_log_user_time", "user_id", "created_at"),
        Index("ix_activity_log_user_type", "user_id", "activity_type"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} user={self.user_id} type={self.activity_type}>"


# ---------------------------------------------------------------------------
# OAuthState — one-time CSRF tokens for OAuth callback validation
# ---------------------------------------------------------------------------
class OAuthState(Base):
    __tablename__ = "oauth_states"

    state: Mapped[str] = mapped_column(String(128), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_oauth_states_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<OAuthState state={self.state[:8]!r}...>"
