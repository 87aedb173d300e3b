"""
levelup.api.routes.rewards — Reward shop
==========================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from levelup.api.deps import CurrentUser, get_current_user, get_session
from levelup.services import shop_service

router = APIRouter(prefix="/rewards", tags=["rewards"])


class RewardRedeem(BaseModel):
    rewardId: int


@router.get("")
def get_rewards(
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Active rewards with the member's redemption state."""
    return shop_service.list_rewards(session, current.user_id)


@router.post("/redeem")
def redeem_reward(
    body: RewardRedeem,
    current: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        redemption = shop_service.redeem_reward(session, current.user_id, body.rewardId)
        session.commit()
    except LookupError as exc:
        session.rollback()
        raise HTTPException(404, str(exc))
    except ValueError as exc:
        session.rollback()
        raise HTTPException(400, str(exc))

    return {
        "success": True,
        "message": "Reward redeemed successfully",
        "rewardId": redemption.reward_id,
        "cost": redemption.cost,
    }
