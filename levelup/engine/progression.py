"""
levelup.engine.progression — XP, Level & Streak Calculations
==============================================================

Pure calculation layer: no database I/O.  The persistence side lives in
:mod:`levelup.services.progression_service`, which feeds user state in and
writes the results back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from levelup.constants import STREAK_MILESTONES, xp_for_level

__all__ = [
    "LevelResult",
    "apply_xp",
    "days_between",
    "next_streak",
    "streak_milestone",
]


# ---------------------------------------------------------------------------
# LevelResult — outcome of an XP award
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LevelResult:
    """User progression state after an XP award."""

    level: int
    xp: int
    leveled_up: bool = False


def apply_xp(level: int, xp: int, amount: int) -> LevelResult:
    """Add *amount* XP to a user at (*level*, *xp*).

    A single award advances **at most one level**: when ``xp + amount``
    reaches ``xp_for_level(level)`` the level goes up by one and the
    threshold is subtracted.  Any surplus beyond the next threshold is kept
    as XP and resolved by later awards.

    >>> apply_xp(1, 80, 80)
    LevelResult(level=2, xp=60, leveled_up=True)
    """
    if amount < 0:
        raise ValueError(f"XP amount must be non-negative, got {amount}")

    new_xp = xp + amount
    required = xp_for_level(level)
    if new_xp >= required:
        return LevelResult(level=level + 1, xp=new_xp - required, leveled_up=True)
    return LevelResult(level=level, xp=new_xp)


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------
def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored timestamp is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def days_between(earlier: datetime, later: datetime) -> int:
    """Number of UTC calendar days from *earlier* to *later* (may be negative)."""
    return (_as_utc(later).date() - _as_utc(earlier).date()).days


def next_streak(streak: int, last_activity: datetime | None, now: datetime) -> int:
    """Streak counter after activity at *now*.

    * previous activity exactly one calendar day ago → ``streak + 1``
    * gap of more than one day, or no previous activity → ``1``
    * same day (or a clock-skewed future timestamp) → unchanged
    """
    if last_activity is None:
        return 1
    diff = days_between(last_activity, now)
    if diff == 1:
        return streak + 1
    if diff > 1:
        return 1
    return streak


def streak_milestone(streak: int) -> str | None:
    """Achievement slug unlocked by reaching exactly *streak* days, if any."""
    return STREAK_MILESTONES.get(streak)
