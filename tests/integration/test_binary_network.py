"""
Binary network integration tests.

Enrollment, pending placements, volume matching under the daily cap,
additional accounts, genealogy and package purchases.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.config.settings import settings
from app.models import (
    AppSetting,
    BinaryCommission,
    BinaryDailyEarning,
    BinaryNode,
    Wallet,
)
from app.services.binary import (
    BinaryAccountManager,
    BinaryEnrollmentService,
    BinaryGenealogyService,
    BinaryPurchaseService,
)
from app.utils.exceptions import (
    AccountLimitError,
    ConflictError,
    LegOccupiedError,
    NotFoundError,
    PermissionDeniedError,
    ServiceUnavailableError,
    ValidationError,
)


async def set_setting(session, key, value):
    session.add(AppSetting(key=key, value=value))
    await session.commit()


@pytest.fixture
def enrollment(db_session):
    return BinaryEnrollmentService(db_session)


class TestEnrollment:

    async def test_first_member_becomes_root(self, enrollment, make_user):
        user = await make_user()

        result = await enrollment.enroll(user.id)

        assert result.created is True
        assert result.node.is_root
        assert result.node.account_number == 1

    async def test_sponsor_without_account_gives_root(self, enrollment, make_user):
        sponsor = await make_user()
        member = await make_user(referred_by_id=sponsor.id)

        result = await enrollment.enroll(member.id, sponsor_user_id=sponsor.id)

        assert result.node.is_root

    async def test_enroll_is_idempotent(self, enrollment, make_user):
        user = await make_user()
        first = await enrollment.enroll(user.id)

        again = await enrollment.enroll(user.id)

        assert again.created is False
        assert again.node.id == first.node.id

    async def test_sponsor_legs_fill_left_then_right(
        self, enrollment, make_user
    ):
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node
        left_user = await make_user()
        right_user = await make_user()

        left = (await enrollment.enroll(left_user.id, sponsor.id)).node
        right = (await enrollment.enroll(right_user.id, sponsor.id)).node

        assert left.placement_leg == "left"
        assert right.placement_leg == "right"
        assert root.left_child_id == left.id
        assert root.right_child_id == right.id
        assert left.sponsor_id == root.id

    async def test_full_sponsor_creates_pending(self, enrollment, make_user):
        sponsor = await make_user()
        await enrollment.enroll(sponsor.id)
        for _ in range(2):
            await enrollment.enroll((await make_user()).id, sponsor.id)
        late = await make_user()

        result = await enrollment.enroll(late.id, sponsor.id, amount=Decimal("500"))

        assert result.is_pending
        assert result.pending.amount == Decimal("500")
        assert [p.id for p in await enrollment.list_pending(sponsor.id)] == [
            result.pending.id
        ]

    async def test_emergency_stop(self, enrollment, make_user, monkeypatch):
        monkeypatch.setattr(settings, "emergency_stop_placements", True)
        user = await make_user()

        with pytest.raises(ServiceUnavailableError):
            await enrollment.enroll(user.id)


class TestPendingPlacements:

    @pytest.fixture
    async def full_sponsor(self, enrollment, make_user):
        """Sponsor with both legs taken and one member waiting."""
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node
        paid = Decimal("500")
        left = (await enrollment.enroll((await make_user()).id, sponsor.id, paid)).node
        await enrollment.enroll((await make_user()).id, sponsor.id, paid)
        late = await make_user()
        pending = (await enrollment.enroll(late.id, sponsor.id, paid)).pending
        return sponsor, root, left, pending

    async def test_resolve_places_in_chosen_leg(self, enrollment, full_sponsor):
        sponsor, root, left, pending = full_sponsor

        node = await enrollment.resolve_pending(pending.id, sponsor.id, "left")

        assert node.parent_id == left.id
        assert node.placement_leg == "left"
        assert pending.status == "placed"
        assert pending.placed_node_id == node.id
        assert left.left_volume == Decimal("500")
        assert root.left_volume == Decimal("1000")
        assert root.right_volume == Decimal("500")

    async def test_only_sponsor_can_resolve(
        self, enrollment, full_sponsor, make_user
    ):
        _, _, _, pending = full_sponsor
        stranger = await make_user()

        with pytest.raises(PermissionDeniedError):
            await enrollment.resolve_pending(pending.id, stranger.id, "left")

    async def test_cancelled_placement_cannot_be_resolved(
        self, enrollment, full_sponsor
    ):
        sponsor, _, _, pending = full_sponsor

        cancelled = await enrollment.cancel_pending(pending.id, sponsor.id)

        assert cancelled.status == "cancelled"
        with pytest.raises(ConflictError):
            await enrollment.resolve_pending(pending.id, sponsor.id, "right")

    async def test_unknown_placement(self, enrollment, full_sponsor):
        sponsor, _, _, _ = full_sponsor

        with pytest.raises(NotFoundError):
            await enrollment.cancel_pending(9999, sponsor.id)


class TestVolumeMatching:

    @pytest.fixture
    def join(self, enrollment, make_user):
        """Enroll a new paying member under ``sponsor``."""

        async def _join(sponsor, amount="1000"):
            member = await make_user()
            return await enrollment.enroll(member.id, sponsor.id, Decimal(amount))

        return _join

    async def test_balanced_legs_pay_one_cycle(
        self, db_session, enrollment, make_user, join
    ):
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node

        await join(sponsor)
        await join(sponsor)

        assert root.total_cycles == 1
        assert root.left_volume == Decimal("0")
        assert root.right_volume == Decimal("0")
        commission = (await db_session.execute(select(BinaryCommission))).scalar_one()
        assert commission.user_id == sponsor.id
        assert commission.amount == Decimal("100")
        assert commission.cycles_matched == 1

    async def test_unpaid_enrollment_adds_no_volume(
        self, db_session, enrollment, make_user
    ):
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node

        await enrollment.enroll((await make_user()).id, sponsor.id)
        await enrollment.enroll((await make_user()).id, sponsor.id)

        assert root.left_volume == Decimal("0")
        assert root.right_volume == Decimal("0")
        assert root.total_cycles == 0
        commissions = (await db_session.execute(select(BinaryCommission))).scalars().all()
        assert commissions == []

    async def test_volume_reaches_every_ancestor(self, enrollment, make_user, join):
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node
        first = await make_user()
        first_node = (
            await enrollment.enroll(first.id, sponsor.id, Decimal("400"))
        ).node

        second_node = (await join(first, amount="300")).node

        assert second_node.parent_id == first_node.id
        assert first_node.left_volume == Decimal("300")
        assert root.left_volume == Decimal("700")
        assert root.right_volume == Decimal("0")

    async def test_daily_cap_flushes_excess(
        self, db_session, enrollment, make_user, join
    ):
        await set_setting(db_session, "binary_daily_cap", "150")
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node

        await join(sponsor, amount="2000")
        await join(sponsor, amount="2000")

        assert root.total_cycles == 2
        commission = (await db_session.execute(select(BinaryCommission))).scalar_one()
        assert commission.amount == Decimal("150")
        assert commission.flushed_amount == Decimal("50")
        daily = (await db_session.execute(select(BinaryDailyEarning))).scalar_one()
        assert daily.total_earned == Decimal("150")

    async def test_capped_account_earns_nothing_more_today(
        self, db_session, enrollment, make_user, join
    ):
        await set_setting(db_session, "binary_daily_cap", "100")
        sponsor = await make_user()
        await enrollment.enroll(sponsor.id)
        for _ in range(4):
            await join(sponsor, amount="500")
        resolver = BinaryEnrollmentService(db_session)
        waiting = await resolver.list_pending(sponsor.id)
        for pending, leg in zip(waiting, ("left", "right")):
            await resolver.resolve_pending(pending.id, sponsor.id, leg)

        rows = (
            await db_session.execute(
                select(BinaryCommission).where(BinaryCommission.user_id == sponsor.id)
            )
        ).scalars().all()
        assert sum(row.amount for row in rows) == Decimal("100")

    async def test_auto_replenish_converts_share_to_credits(
        self, db_session, enrollment, make_user, join
    ):
        await set_setting(db_session, "binary_auto_replenish_enabled", "true")
        sponsor = await make_user()
        await enrollment.enroll(sponsor.id)

        await join(sponsor)
        await join(sponsor)

        commission = (await db_session.execute(select(BinaryCommission))).scalar_one()
        wallet = (
            await db_session.execute(select(Wallet).where(Wallet.user_id == sponsor.id))
        ).scalar_one()
        assert commission.amount == Decimal("80")
        assert wallet.ai_credits == 20


class TestAdditionalAccounts:

    async def test_spillover_and_leg_modes(self, db_session, enrollment, make_user):
        user = await make_user()
        main = (await enrollment.enroll(user.id)).node
        manager = BinaryAccountManager(db_session)

        second = await manager.create_account(user.id, "spillover")
        third = await manager.create_account(user.id, "right")

        assert (second.parent_id, second.placement_leg) == (main.id, "left")
        assert (third.parent_id, third.placement_leg) == (main.id, "right")
        assert [a.account_number for a in await manager.list_accounts(user.id)] == [1, 2, 3]

    async def test_account_limit(self, db_session, enrollment, make_user):
        user = await make_user()
        await enrollment.enroll(user.id)
        manager = BinaryAccountManager(db_session)
        await manager.create_account(user.id, "spillover")
        await manager.create_account(user.id, "spillover")

        with pytest.raises(AccountLimitError):
            await manager.create_account(user.id, "spillover")

    async def test_additional_account_adds_no_volume(
        self, db_session, enrollment, make_user
    ):
        user = await make_user()
        main = (await enrollment.enroll(user.id)).node

        await BinaryAccountManager(db_session).create_account(user.id, "left")

        assert main.left_volume == Decimal("0")

    async def test_downline_mode(self, db_session, enrollment, make_user):
        sponsor = await make_user()
        await enrollment.enroll(sponsor.id)
        member = (await enrollment.enroll((await make_user()).id, sponsor.id)).node
        manager = BinaryAccountManager(db_session)

        slots = await manager.list_downlines(sponsor.id)
        node = await manager.create_account(
            sponsor.id, "downline", leg="left", downline_node_id=member.id
        )

        assert [slot.node.id for slot in slots] == [member.id]
        assert node.parent_id == member.id
        assert node.user_id == sponsor.id
        with pytest.raises(LegOccupiedError):
            await manager.create_account(
                sponsor.id, "downline", leg="left", downline_node_id=member.id
            )

    async def test_requires_main_account(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(NotFoundError):
            await BinaryAccountManager(db_session).create_account(user.id, "spillover")

    async def test_concurrent_account_number_conflict(
        self, db_session, enrollment, make_user, monkeypatch
    ):
        user = await make_user()
        await enrollment.enroll(user.id)
        manager = BinaryAccountManager(db_session)
        duplicate = IntegrityError(
            "INSERT INTO binary_nodes", {}, Exception("UNIQUE constraint failed")
        )
        monkeypatch.setattr(
            manager.placement,
            "place_with_spillover",
            AsyncMock(side_effect=duplicate),
        )

        with pytest.raises(ConflictError):
            await manager.create_account(user.id, "spillover")

        assert len(await manager.list_accounts(user.id)) == 1


class TestGenealogy:

    async def test_visibility(self, db_session, enrollment, make_user):
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node
        member = await make_user()
        child = (await enrollment.enroll(member.id, sponsor.id)).node
        admin = await make_user(is_admin=True)
        genealogy = BinaryGenealogyService(db_session)

        assert await genealogy.can_view(child.id, sponsor.id)
        assert await genealogy.can_view(child.id, member.id)
        assert not await genealogy.can_view(root.id, member.id)
        assert await genealogy.can_view(root.id, admin.id)

    async def test_tree_view(self, db_session, enrollment, make_user):
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node
        child = (await enrollment.enroll((await make_user()).id, sponsor.id)).node

        tree = await BinaryGenealogyService(db_session).get_tree(
            root.id, sponsor.id, depth=2
        )

        assert tree["id"] == root.id
        assert tree["children"]["left"]["id"] == child.id
        assert tree["children"]["right"] is None
        assert tree["children"]["left"]["children"] == {"left": None, "right": None}

    async def test_hidden_tree_is_not_found(self, db_session, enrollment, make_user):
        sponsor = await make_user()
        root = (await enrollment.enroll(sponsor.id)).node
        member = await make_user()
        await enrollment.enroll(member.id, sponsor.id)

        with pytest.raises(NotFoundError):
            await BinaryGenealogyService(db_session).get_tree(root.id, member.id)

    async def test_earnings_summary(self, db_session, enrollment, make_user):
        sponsor = await make_user()
        await enrollment.enroll(sponsor.id)
        for _ in range(2):
            await enrollment.enroll(
                (await make_user()).id, sponsor.id, amount=Decimal("1000")
            )

        summary = await BinaryGenealogyService(db_session).get_earnings_summary(
            sponsor.id, days=7
        )

        assert Decimal(summary["total_earned"]) == Decimal("100")
        assert Decimal(summary["period_earned"]) == Decimal("100")
        assert summary["total_cycles"] == 1
        assert len(summary["daily"]) == 1


class TestPurchases:

    async def test_approval_grants_credits_and_enrolls(
        self, db_session, enrollment, make_user
    ):
        sponsor = await make_user()
        await enrollment.enroll(sponsor.id)
        buyer = await make_user(referred_by_id=sponsor.id)
        admin = await make_user(is_admin=True)
        service = BinaryPurchaseService(db_session)

        purchase = await service.submit_purchase(buyer.id, Decimal("500"), 50)
        result = await service.approve_purchase(purchase.id, admin.id, "ok")

        assert purchase.sponsor_user_id == sponsor.id
        assert result.purchase.status == "approved"
        assert result.purchase.is_first_purchase is True
        assert result.enrollment.node.placement_leg == "left"
        assert result.split.admin_share == Decimal("175.00")
        assert result.split.affiliate_pool == Decimal("325.00")
        wallet = (
            await db_session.execute(select(Wallet).where(Wallet.user_id == buyer.id))
        ).scalar_one()
        assert wallet.ai_credits == 50

    async def test_reviewed_purchase_cannot_be_reviewed_again(
        self, db_session, make_user
    ):
        buyer = await make_user()
        admin = await make_user(is_admin=True)
        service = BinaryPurchaseService(db_session)
        purchase = await service.submit_purchase(buyer.id, Decimal("500"), 10)

        await service.reject_purchase(purchase.id, admin.id, "duplicate")

        assert purchase.status == "rejected"
        with pytest.raises(ConflictError):
            await service.approve_purchase(purchase.id, admin.id)
        nodes = (await db_session.execute(select(BinaryNode))).scalars().all()
        assert nodes == []

    async def test_purchase_below_join_amount(self, db_session, make_user):
        buyer = await make_user()

        with pytest.raises(ValidationError):
            await BinaryPurchaseService(db_session).submit_purchase(
                buyer.id, Decimal("499"), 10
            )
