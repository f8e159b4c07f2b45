"""
Referral network integration tests.

Sponsor chain queries, unilevel and order commissions, and upline
transfer requests.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from app.models import Commission, Order, OrderItem
from app.services.binary import BinaryPurchaseService
from app.services.purchase_commission_service import PurchaseCommissionService
from app.services.referral import (
    OrderCommissionProcessor,
    ReferralChainManager,
    UnilevelDistributor,
    UplineTransferService,
)
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError


class TestChainManager:

    async def test_upline_order_and_depth(self, db_session, make_chain):
        users = await make_chain(5)
        chain = ReferralChainManager(db_session)

        upline = await chain.get_upline_ids(users[-1].id, 3)

        assert upline == [users[3].id, users[2].id, users[1].id]

    async def test_downline(self, db_session, make_chain, make_user):
        top, mid, low = await make_chain(3)
        side = await make_user(referred_by_id=top.id)
        chain = ReferralChainManager(db_session)

        levels = await chain.get_downline_levels(top.id, 5)

        assert sorted(levels[0]) == sorted([mid.id, side.id])
        assert levels[1] == [low.id]
        assert await chain.is_in_downline(top.id, low.id)
        assert not await chain.is_in_downline(low.id, top.id)


class TestUnilevel:

    async def test_seven_levels(self, db_session, make_chain):
        users = await make_chain(9)
        buyer = users[-1]

        result = await UnilevelDistributor(db_session).distribute(
            buyer.id, Decimal("1000"), purchase_id=None
        )

        assert result.commissions_count == 7
        assert [c.amount for c in result.commissions] == [
            Decimal("40.00"),
            Decimal("30.00"),
            Decimal("20.00"),
            Decimal("15.00"),
            Decimal("10.00"),
            Decimal("7.50"),
            Decimal("5.00"),
        ]
        assert result.commissions[0].user_id == users[-2].id
        assert users[0].id not in {c.user_id for c in result.commissions}
        assert result.total_distributed == Decimal("127.50")

    async def test_buyer_without_sponsor(self, db_session, make_user):
        buyer = await make_user()

        result = await UnilevelDistributor(db_session).distribute(
            buyer.id, Decimal("1000")
        )

        assert result.commissions == []

    async def test_rejects_non_positive_amount(self, db_session, make_user):
        buyer = await make_user()

        with pytest.raises(ValidationError):
            await UnilevelDistributor(db_session).distribute(buyer.id, Decimal("-1"))


class TestOrderCommissions:

    @pytest.fixture
    async def order(self, db_session, make_chain):
        users = await make_chain(4)
        order = Order(user_id=users[-1].id, total_amount=Decimal("300"))
        order.items = [
            OrderItem(
                quantity=2,
                unit_price=Decimal("100"),
                total_price=Decimal("200"),
                commission_percentage=Decimal("10"),
            ),
            OrderItem(
                unit_price=Decimal("100"),
                total_price=Decimal("100"),
                commission_percentage=Decimal("5"),
            ),
        ]
        db_session.add(order)
        await db_session.commit()
        return order, users

    async def test_pool_split_over_three_levels(self, db_session, order):
        order, users = order

        result = await OrderCommissionProcessor(db_session).process_order(order.id)

        assert [(c.user_id, c.amount) for c in result.commissions] == [
            (users[2].id, Decimal("12.50")),
            (users[1].id, Decimal("7.50")),
            (users[0].id, Decimal("5.00")),
        ]
        assert order.commissions_distributed is True

    async def test_repeat_is_skipped(self, db_session, order):
        order, _ = order
        processor = OrderCommissionProcessor(db_session)
        await processor.process_order(order.id)

        again = await processor.process_order(order.id)

        assert again.skipped is True
        rows = (await db_session.execute(select(Commission))).scalars().all()
        assert len(rows) == 3

    async def test_unknown_order(self, db_session):
        with pytest.raises(NotFoundError):
            await OrderCommissionProcessor(db_session).process_order(404)


class TestPurchaseCommissions:

    async def test_runs_every_plan(self, db_session, make_chain):
        sponsor, buyer = await make_chain(2)

        result = await PurchaseCommissionService(db_session).distribute(
            buyer.id, Decimal("1000"), purchase_id=None
        )

        assert result.unilevel.total_distributed == Decimal("40.00")
        assert result.stair_step.commissions == []
        assert result.uplines_credited == 1

    async def test_purchase_paid_once(self, db_session, make_chain, make_user):
        sponsor, buyer = await make_chain(2)
        admin = await make_user(is_admin=True)
        purchases = BinaryPurchaseService(db_session)
        purchase = await purchases.submit_purchase(buyer.id, Decimal("1000"), 10)
        service = PurchaseCommissionService(db_session)

        with pytest.raises(ConflictError):
            await service.distribute_for_purchase(purchase.id)

        await purchases.approve_purchase(purchase.id, admin.id)
        first = await service.distribute_for_purchase(purchase.id)
        second = await service.distribute_for_purchase(purchase.id)

        assert first.unilevel.total_distributed == Decimal("40.00")
        assert purchase.commissions_distributed is True
        assert second is None
        rows = (await db_session.execute(select(Commission))).scalars().all()
        assert [row.user_id for row in rows] == [sponsor.id]

    async def test_unknown_purchase(self, db_session):
        with pytest.raises(NotFoundError):
            await PurchaseCommissionService(db_session).distribute_for_purchase(404)


class TestUplineTransfer:

    async def test_approve_moves_user(self, db_session, make_user):
        old_sponsor = await make_user()
        new_sponsor = await make_user()
        member = await make_user(referred_by_id=old_sponsor.id)
        admin = await make_user(is_admin=True)
        service = UplineTransferService(db_session)

        request = await service.request_transfer(member.id, new_sponsor.id, "moved")
        processed = await service.process(request.id, admin.id, approve=True)

        assert request.current_upline_id == old_sponsor.id
        assert processed.status == "approved"
        assert processed.processed_by == admin.id
        assert member.referred_by_id == new_sponsor.id

    async def test_reject_keeps_sponsor(self, db_session, make_user):
        sponsor = await make_user()
        other = await make_user()
        member = await make_user(referred_by_id=sponsor.id)
        service = UplineTransferService(db_session)
        request = await service.request_transfer(member.id, other.id)

        processed = await service.process(request.id, other.id, approve=False, notes="no")

        assert processed.status == "rejected"
        assert member.referred_by_id == sponsor.id
        with pytest.raises(ConflictError):
            await service.process(request.id, other.id, approve=True)

    async def test_downline_target_is_rejected(self, db_session, make_chain):
        top, mid, low = await make_chain(3)

        with pytest.raises(ValidationError):
            await UplineTransferService(db_session).request_transfer(top.id, low.id)

    async def test_self_and_current_sponsor_are_rejected(self, db_session, make_chain):
        sponsor, member = await make_chain(2)
        service = UplineTransferService(db_session)

        with pytest.raises(ValidationError):
            await service.request_transfer(member.id, member.id)
        with pytest.raises(ValidationError):
            await service.request_transfer(member.id, sponsor.id)

    async def test_one_pending_request(self, db_session, make_user):
        first = await make_user()
        second = await make_user()
        member = await make_user()
        service = UplineTransferService(db_session)
        await service.request_transfer(member.id, first.id)

        with pytest.raises(ConflictError):
            await service.request_transfer(member.id, second.id)
