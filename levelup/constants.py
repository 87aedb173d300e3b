"""
levelup.constants — Shared Constants & Helpers
================================================

Single source of truth for the leveling formula, leaderboard badges and the
fixed XP amounts the progression rules hand out.  Import from here instead of
duplicating numbers in services and routes.
"""

from __future__ import annotations

import math

# ---------------------------------------------------------------------------
# Leaderboard presentation
# ---------------------------------------------------------------------------
RANK_BADGES: list[str] = ["\U0001f451", "\U0001f948", "\U0001f949"]  # 👑🥈🥉
DEFAULT_BADGE = "\u2b50"  # ⭐


def badge_for_rank(rank: int) -> str:
    """Badge glyph for a 1-based leaderboard *rank*."""
    if 1 <= rank <= len(RANK_BADGES):
        return RANK_BADGES[rank - 1]
    return DEFAULT_BADGE


# ---------------------------------------------------------------------------
# Leveling formula
# ---------------------------------------------------------------------------
LEVEL_BASE_XP = 100
LEVEL_FACTOR = 1.5


def xp_for_level(level: int) -> int:
    """XP required to clear *level* (advance from ``level`` to ``level + 1``).

    Uses the exponential formula::

        required = floor(100 * 1.5 ** (level - 1))

    so level 1 → 100, level 2 → 150, level 5 → 506.  XP resets to the
    surplus on every level-up, so this is also the "XP to next level" shown
    on a user's profile.
    """
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")
    return math.floor(LEVEL_BASE_XP * LEVEL_FACTOR ** (level - 1))


# Display-only bonus written to the activity log on level-up (never credited)
LEVEL_UP_BONUS_XP = 1000

# ---------------------------------------------------------------------------
# Webhook XP
# ---------------------------------------------------------------------------
MESSAGE_XP = 10
POST_XP = 50
REACTION_XP = 5

# ---------------------------------------------------------------------------
# Achievement slugs & thresholds
# ---------------------------------------------------------------------------
FIRST_STEPS = "first_steps"
CHATTERBOX = "chatterbox"
WEEK_WARRIOR = "week_warrior"
CONTENT_KING = "content_king"
MONTH_MASTER = "month_master"

CHATTERBOX_MESSAGES = 50
CONTENT_KING_POSTS = 25

# Exact streak values that unlock an achievement
STREAK_MILESTONES: dict[int, str] = {
    7: WEEK_WARRIOR,
    30: MONTH_MASTER,
}
