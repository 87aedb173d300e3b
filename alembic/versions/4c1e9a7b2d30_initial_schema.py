"""Initial LevelUp schema

Revision ID: 4c1e9a7b2d30
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1e9a7b2d30"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    """Create users, catalogs, per-user state and the activity log."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("whop_user_id", sa.String(64), nullable=False, unique=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("access_token", sa.Text(), nullable=True),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_users_total_points", "users", ["total_points"])

    op.create_table(
        "daily_tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("required_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("xp_reward", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "user_tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "task_id", sa.Integer(),
            sa.ForeignKey("daily_tasks.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.UniqueConstraint("user_id", "task_id", "day", name="uq_user_tasks_user_task_day"),
    )

    op.create_table(
        "achievements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=False, server_default="general"),
        sa.Column("icon", sa.String(20), nullable=True),
        sa.Column("xp_reward", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "user_achievements",
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "achievement_id", sa.Integer(),
            sa.ForeignKey("achievements.id", ondelete="CASCADE"), primary_key=True,
        ),
        _created_at("unlocked_at"),
    )

    op.create_table(
        "rewards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cost", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "user_rewards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "reward_id", sa.Integer(),
            sa.ForeignKey("rewards.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("cost", sa.Integer(), nullable=False),
        _created_at("redeemed_at"),
    )
    op.create_index(
        "ix_user_rewards_user_reward", "user_rewards", ["user_id", "reward_id"]
    )

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("activity_type", sa.String(30), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("xp_earned", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_index(
        "ix_activity_log_user_time", "activity_log", ["user_id", "created_at"]
    )
    op.create_index(
        "ix_activity_log_user_type", "activity_log", ["user_id", "activity_type"]
    )

    op.create_table(
        "oauth_states",
        sa.Column("state", sa.String(128), primary_key=True),
        _created_at(),
    )
    op.create_index("ix_oauth_states_created_at", "oauth_states", ["created_at"])


def downgrade() -> None:
    """Drop every LevelUp table."""
    op.drop_index("ix_oauth_states_created_at", table_name="oauth_states")
    op.drop_table("oauth_states")
    op.drop_index("ix_activity_log_user_type", table_name="activity_log")
    op.drop_index("ix_activity_log_user_time", table_name="activity_log")
    op.drop_table("activity_log")
    op.drop_index("ix_user_rewards_user_reward", table_name="user_rewards")
    op.drop_table("user_rewards")
    op.drop_table("rewards")
    op.drop_table("user_achievements")
    op.drop_table("achievements")
    op.drop_table("user_tasks")
    op.drop_table("daily_tasks")
    op.drop_index("ix_users_total_points", table_name="users")
    op.drop_table("users")
