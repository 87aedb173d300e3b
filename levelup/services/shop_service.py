"""
levelup.services.shop_service — Reward Shop & Redemption
==========================================================

Redemptions are permanent and spend points at the reward's current cost.
Fulfillment (roles, shoutouts, calls) happens outside this service.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from levelup.database.models import Reward, User, UserReward

logger = logging.getLogger(__name__)


def list_rewards(session: Session, user_id: int) -> list[dict]:
    """Active rewards, cheapest first, with *user_id*'s redemption state."""
    rewards = session.scalars(
        select(Reward).where(Reward.active.is_(True)).order_by(Reward.cost, Reward.id)
    ).all()

    redeemed = {
        row.reward_id: row.last_redeemed
        for row in session.execute(
            select(
                UserReward.reward_id,
                func.max(UserReward.redeemed_at).label("last_redeemed"),
            )
            .where(UserReward.user_id == user_id)
            .group_by(UserReward.reward_id)
        ).all()
    }

    return [
        {
            "id": r.id,
            "name": r.name,
            "description": r.description,
            "cost": r.cost,
            "redeemed": r.id in redeemed,
            "redeemedAt": redeemed[r.id].isoformat() if redeemed.get(r.id) else None,
        }
        for r in rewards
    ]


def redeem_reward(session: Session, user_id: int, reward_id: int) -> UserReward:
    """Spend *user_id*'s points on *reward_id*.

    The user row is locked for the rest of the transaction so concurrent
    redemptions serialize on PostgreSQL.

    Raises
    ------
    LookupError
        If the reward is missing or inactive, or the user no longer exists.
    ValueError
        If the user has fewer points than the reward costs.
    """
    reward = session.scalar(
        select(Reward).where(Reward.id == reward_id, Reward.active.is_(True))
    )
    if reward is None:
        raise LookupError("Reward not found")

    user = session.scalar(select(User).where(User.id == user_id).with_for_update())
    if user is None:
        raise LookupError("User not found")

    if user.total_points < reward.cost:
        raise ValueError("Insufficient points")

    user.total_points -= reward.cost
    redemption = UserReward(user_id=user.id, reward_id=reward.id, cost=reward.cost)
    session.add(redemption)
    session.flush()

    logger.info(
        "User %d redeemed %r for %d points (%d left)",
        user.id, reward.name, reward.cost, user.total_points,
    )
    return redemption
