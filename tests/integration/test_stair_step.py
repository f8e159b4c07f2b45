"""
Stair-step plan integration tests.

Sales tracking, monthly rank evaluation and reversion, differential and
breakaway commissions, leadership status and ladder administration.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.models import AffiliateCurrentRank, AffiliateMonthlySales, LeadershipCommission
from app.services.stair_step import (
    LeadershipService,
    RankManager,
    SalesTracker,
    StairStepCommissionDistributor,
    StairStepConfigManager,
)
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError

MAY = date(2026, 5, 1)
JUNE = date(2026, 6, 1)
JULY = date(2026, 7, 1)
AUGUST = date(2026, 8, 1)


async def give_rank(session, user, step, fixed=False):
    session.add(AffiliateCurrentRank(user_id=user.id, current_step=step, is_fixed=fixed))
    await session.commit()


async def sales_row(session, user_id, month):
    return (
        await session.execute(
            select(AffiliateMonthlySales).where(
                AffiliateMonthlySales.user_id == user_id,
                AffiliateMonthlySales.sales_month == month,
            )
        )
    ).scalar_one_or_none()


class TestSalesTracker:

    async def test_sale_counts_for_seller_and_uplines(self, db_session, make_chain):
        top, mid, seller = await make_chain(3)

        credited = await SalesTracker(db_session).record_sale(
            seller.id, Decimal("100"), month=date(2026, 5, 17)
        )

        assert credited == 2
        own = await sales_row(db_session, seller.id, MAY)
        assert own.personal_sales == Decimal("100")
        assert own.total_sales == Decimal("100")
        for upline in (mid, top):
            row = await sales_row(db_session, upline.id, MAY)
            assert row.team_sales == Decimal("100")
            assert row.personal_sales == Decimal("0")

    async def test_sales_accumulate(self, db_session, make_user):
        user = await make_user()
        tracker = SalesTracker(db_session)

        await tracker.record_sale(user.id, Decimal("100"), month=MAY)
        await tracker.record_sale(user.id, Decimal("50"), is_personal=False, month=MAY)

        row = await sales_row(db_session, user.id, MAY)
        assert row.personal_sales == Decimal("100")
        assert row.team_sales == Decimal("50")
        assert row.total_sales == Decimal("150")

    async def test_rejects_non_positive_amount(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(ValidationError):
            await SalesTracker(db_session).record_sale(user.id, Decimal("0"))


class TestRankEvaluation:

    @pytest.fixture
    async def seller(self, db_session, make_user, make_steps):
        await make_steps(("5", "100", "0"), ("10", "500", "3"))
        return await make_user()

    async def qualify(self, session, user, month, amount="600"):
        await SalesTracker(session).record_sale(user.id, Decimal(amount), month=month)
        return await RankManager(session).evaluate(user.id, month)

    async def test_highest_step_met(self, db_session, seller):
        result = await self.qualify(db_session, seller, MAY)

        assert result.qualified_step == 2
        assert result.current_step == 2
        assert result.qualification_count == 1
        assert result.is_fixed is False

    async def test_repeat_in_same_month_does_not_count_twice(
        self, db_session, seller
    ):
        await self.qualify(db_session, seller, MAY)

        again = await RankManager(db_session).evaluate(seller.id, MAY)

        assert again.qualification_count == 1

    async def test_rank_fixed_after_consecutive_months(self, db_session, seller):
        await self.qualify(db_session, seller, MAY)
        await self.qualify(db_session, seller, JUNE)
        result = await self.qualify(db_session, seller, JULY)

        assert result.qualification_count == 3
        assert result.is_fixed is True

    async def test_gap_restarts_count(self, db_session, seller):
        await self.qualify(db_session, seller, MAY)
        result = await self.qualify(db_session, seller, JULY)

        assert result.qualification_count == 1

    async def test_fixed_rank_is_never_lowered(self, db_session, seller):
        for month in (MAY, JUNE, JULY):
            await self.qualify(db_session, seller, month)

        result = await self.qualify(db_session, seller, AUGUST, amount="150")

        assert result.qualified_step == 1
        assert result.current_step == 2
        assert result.is_fixed is True

    async def test_no_sales_no_qualification(self, db_session, seller):
        result = await RankManager(db_session).evaluate(seller.id, MAY)

        assert result.qualified is False
        assert result.current_step == 0

    async def test_evaluate_all_and_reversion(self, db_session, seller, make_user):
        other = await make_user()
        await SalesTracker(db_session).record_sale(seller.id, Decimal("600"), month=MAY)
        await SalesTracker(db_session).record_sale(other.id, Decimal("10"), month=MAY)
        manager = RankManager(db_session)

        qualified = await manager.evaluate_all(MAY)
        reverted_same_month = await manager.process_monthly_reversion(MAY)
        reverted_next_month = await manager.process_monthly_reversion(JUNE)

        assert qualified == 1
        assert reverted_same_month == 0
        assert reverted_next_month == 1
        rank = (
            await db_session.execute(
                select(AffiliateCurrentRank).where(
                    AffiliateCurrentRank.user_id == seller.id
                )
            )
        ).scalar_one()
        assert rank.current_step == 0

    async def test_fixed_rank_survives_reversion(self, db_session, make_user):
        member = await make_user()
        await give_rank(db_session, member, 2, fixed=True)

        assert await RankManager(db_session).process_monthly_reversion(JUNE) == 0


async def commissions(session):
    rows = (await session.execute(select(LeadershipCommission))).scalars().all()
    return {(row.upline_id, row.commission_type, row.amount) for row in rows}


class TestCommissionDistribution:

    async def test_differential(self, db_session, make_chain, make_steps):
        await make_steps(("5", "0", "0"), ("10", "0", "0"), ("15", "0", "3"))
        top, mid, seller = await make_chain(3)
        await give_rank(db_session, mid, 1)
        await give_rank(db_session, top, 3)

        result = await StairStepCommissionDistributor(db_session).distribute(
            seller.id, Decimal("1000"), order_id=None
        )

        assert result.total == Decimal("150")
        assert await commissions(db_session) == {
            (mid.id, "differential", Decimal("50")),
            (top.id, "differential", Decimal("100")),
        }

    async def test_seller_rate_counts_as_paid(self, db_session, make_chain, make_steps):
        await make_steps(("5", "0", "0"), ("10", "0", "0"))
        sponsor, seller = await make_chain(2)
        await give_rank(db_session, seller, 2)
        await give_rank(db_session, sponsor, 2)

        result = await StairStepCommissionDistributor(db_session).distribute(
            seller.id, Decimal("1000")
        )

        assert result.commissions == []

    async def test_breakaway_to_eligible_leader(
        self, db_session, make_chain, make_user, make_steps
    ):
        await make_steps(("5", "0", "0"), ("15", "0", "3"))
        grand, leader, seller = await make_chain(3)
        second_line = await make_user(referred_by_id=grand.id)
        for member in (grand, leader, second_line):
            await give_rank(db_session, member, 2)

        result = await StairStepCommissionDistributor(db_session).distribute(
            seller.id, Decimal("1000")
        )

        assert result.total == Decimal("180")
        assert await commissions(db_session) == {
            (leader.id, "differential", Decimal("150")),
            (grand.id, "breakaway", Decimal("30")),
        }

    async def test_no_steps_no_commissions(self, db_session, make_chain):
        _, seller = await make_chain(2)

        result = await StairStepCommissionDistributor(db_session).distribute(
            seller.id, Decimal("1000")
        )

        assert result.total == Decimal("0")


class TestLeadership:

    async def test_status_of_eligible_leader(
        self, db_session, make_user, make_steps
    ):
        await make_steps(("5", "0", "0"), ("15", "0", "3"))
        leader = await make_user()
        lines = [await make_user(referred_by_id=leader.id) for _ in range(2)]
        for member in (leader, *lines):
            await give_rank(db_session, member, 2)
        service = LeadershipService(db_session)

        status = await service.get_status(leader.id)

        assert status["is_top_step"] is True
        assert status["qualified_lines"] == 2
        assert status["is_eligible"] is True
        assert await service.is_eligible(leader.id)

    async def test_single_line_is_not_enough(self, db_session, make_chain, make_steps):
        await make_steps(("5", "0", "0"), ("15", "0", "3"))
        leader, direct, deep = await make_chain(3)
        for member in (leader, deep):
            await give_rank(db_session, member, 2)

        assert not await LeadershipService(db_session).is_eligible(leader.id)

    async def test_tree(self, db_session, make_chain, make_steps):
        await make_steps(("5", "0", "0"))
        top, mid, seller = await make_chain(3)
        await give_rank(db_session, mid, 1)

        tree = await LeadershipService(db_session).get_tree(top.id)

        assert tree["user_id"] == top.id
        child = tree["children"][0]
        assert child["user_id"] == mid.id
        assert child["step_name"] == "Step 1"
        assert child["children"][0]["user_id"] == seller.id


class TestConfigManager:

    async def test_add_numbers_steps(self, db_session):
        manager = StairStepConfigManager(db_session)

        first = await manager.add_step(Decimal("5"), Decimal("100"))
        second = await manager.add_step(Decimal("10"), Decimal("500"), step_name="Gold")

        assert (first.step_number, first.step_name) == (1, "Step 1")
        assert (second.step_number, second.step_name) == (2, "Gold")

    async def test_duplicate_number(self, db_session):
        manager = StairStepConfigManager(db_session)
        await manager.add_step(Decimal("5"), Decimal("100"), step_number=1)

        with pytest.raises(ConflictError):
            await manager.add_step(Decimal("6"), Decimal("100"), step_number=1)

    async def test_update_and_toggle(self, db_session):
        manager = StairStepConfigManager(db_session)
        step = await manager.add_step(Decimal("5"), Decimal("100"))

        updated = await manager.update_step(step.id, commission_percentage="7.5")
        toggled = await manager.toggle_step(step.id)

        assert updated.commission_percentage == Decimal("7.5")
        assert toggled.active is False
        assert await manager.list_steps(active_only=True) == []

    async def test_step_number_is_immutable(self, db_session):
        manager = StairStepConfigManager(db_session)
        step = await manager.add_step(Decimal("5"), Decimal("100"))

        with pytest.raises(ValidationError):
            await manager.update_step(step.id, step_number=4)

    async def test_unknown_step(self, db_session):
        with pytest.raises(NotFoundError):
            await StairStepConfigManager(db_session).toggle_step(404)
