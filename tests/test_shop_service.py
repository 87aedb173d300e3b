"""
tests/test_shop_service.py — Reward Shop & Redemption
=======================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import select

from conftest import make_user
from levelup.database.models import Reward, UserReward
from levelup.services import shop_service


def _reward(session, name: str) -> Reward:
    return session.scalar(select(Reward).where(Reward.name == name))


class TestRedeemReward:
    def test_insufficient_points_rejected(self, db_session):
        user = make_user(db_session, total_points=300)
        role = _reward(db_session, "Custom Role")

        with pytest.raises(ValueError, match="Insufficient points"):
            shop_service.redeem_reward(db_session, user.id, role.id)

        assert user.total_points == 300
        assert db_session.scalars(select(UserReward)).all() == []

    def test_successful_redemption_spends_points(self, db_session):
        user = make_user(db_session, total_points=600)
        role = _reward(db_session, "Custom Role")

        redemption = shop_service.redeem_reward(db_session, user.id, role.id)

        assert user.total_points == 100
        assert redemption.cost == 500
        assert redemption.reward_id == role.id

    def test_exact_balance_allowed(self, db_session):
        user = make_user(db_session, total_points=1000)
        shoutout = _reward(db_session, "Shoutout")
        shop_service.redeem_reward(db_session, user.id, shoutout.id)
        assert user.total_points == 0

    def test_repeat_redemption_allowed(self, db_session):
        user = make_user(db_session, total_points=1200)
        role = _reward(db_session, "Custom Role")
        shop_service.redeem_reward(db_session, user.id, role.id)
        shop_service.redeem_reward(db_session, user.id, role.id)

        assert user.total_points == 200
        assert len(db_session.scalars(select(UserReward)).all()) == 2

    def test_records_price_paid(self, db_session):
        user = make_user(db_session, total_points=600)
        role = _reward(db_session, "Custom Role")
        redemption = shop_service.redeem_reward(db_session, user.id, role.id)

        role.cost = 900
        db_session.flush()
        assert redemption.cost == 500

    def test_unknown_reward(self, db_session):
        user = make_user(db_session, total_points=10_000)
        with pytest.raises(LookupError, match="Reward not found"):
            shop_service.redeem_reward(db_session, user.id, 4242)

    def test_inactive_reward(self, db_session):
        user = make_user(db_session, total_points=10_000)
        call = _reward(db_session, "1:1 Call")
        call.active = False
        db_session.flush()

        with pytest.raises(LookupError):
            shop_service.redeem_reward(db_session, user.id, call.id)
        assert user.total_points == 10_000

    def test_unknown_user(self, db_session):
        role = _reward(db_session, "Custom Role")
        with pytest.raises(LookupError, match="User not found"):
            shop_service.redeem_reward(db_session, 777, role.id)


class TestListRewards:
    def test_cheapest_first(self, db_session):
        user = make_user(db_session)
        names = [r["name"] for r in shop_service.list_rewards(db_session, user.id)]
        assert names == ["Custom Role", "Shoutout", "1:1 Call"]

    def test_redeemed_flag(self, db_session):
        user = make_user(db_session, total_points=500)
        role = _reward(db_session, "Custom Role")
        shop_service.redeem_reward(db_session, user.id, role.id)

        by_name = {r["name"]: r for r in shop_service.list_rewards(db_session, user.id)}
        assert by_name["Custom Role"]["redeemed"] is True
        assert by_name["Custom Role"]["redeemedAt"] is not None
        assert by_name["Shoutout"]["redeemed"] is False
        assert by_name["Shoutout"]["redeemedAt"] is None

    def test_inactive_rewards_hidden(self, db_session):
        user = make_user(db_session)
        _reward(db_session, "Shoutout").active = False
        db_session.flush()

        names = [r["name"] for r in shop_service.list_rewards(db_session, user.id)]
        assert "Shoutout" not in names
