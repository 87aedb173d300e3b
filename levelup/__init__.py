"""
LevelUp — Gamification for Whop Communities
=============================================
Tracks XP, levels, streaks, achievements, a points-redeemable reward shop
and an activity feed for members of a Whop community.  Members sign in with
Whop OAuth; community activity arrives through signed Whop webhooks.

Package layout::

    levelup/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Leveling curve, badges, fixed XP amounts
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helpers
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Achievement / task / reward catalog seeder
    ├── engine/
    │   ├── progression.py # Pure XP, level and streak math
    │   └── events.py      # WebhookEvent envelope + closed event-type enum
    ├── services/
    │   ├── progression_service.py  # award_xp, update_streak, activity log
    │   ├── achievement_service.py  # Idempotent unlocks + threshold checks
    │   ├── task_service.py         # Daily tasks + completion
    │   ├── shop_service.py         # Reward shop + redemption
    │   ├── user_service.py         # OAuth upsert, profile, leaderboard, feed
    │   └── webhook_service.py      # Signature check + event dispatch
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine/session/JWT dependencies
        ├── auth.py        # Whop OAuth2 → JWT
        ├── webhooks.py    # POST /webhooks/whop
        └── routes/        # Authenticated /api endpoints
"""

__version__ = "0.1.0"
