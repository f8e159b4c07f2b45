"""
Wallet integration tests.

Currency conversion, cash PIN, deposits and withdrawals, and earnings
consolidation.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from app.config.settings import settings
from app.models import CashTransaction, Wallet
from app.services.app_settings_service import AppSettingsService
from app.services.referral import UnilevelDistributor
from app.services.wallet import (
    CashWalletService,
    ConversionService,
    EarningsConsolidationService,
)
from app.utils.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    PermissionDeniedError,
    PinLockedError,
    ServiceUnavailableError,
    ValidationError,
)


async def load_wallet(session, user_id):
    return (
        await session.execute(select(Wallet).where(Wallet.user_id == user_id))
    ).scalar_one()


async def fund(session, user_id, **balances):
    wallet = await load_wallet(session, user_id)
    for field, value in balances.items():
        setattr(wallet, field, value)
    await session.commit()
    return wallet


class TestConversion:

    async def test_credits_to_diamonds(self, db_session, make_user):
        user = await make_user()
        await fund(db_session, user.id, credits=150)

        result = await ConversionService(db_session).convert(
            user.id, "credit_to_diamond", Decimal("100")
        )

        assert result.wallet.credits == 50
        assert result.wallet.diamonds == 9

    async def test_diamonds_to_cash_writes_ledger(self, db_session, make_user):
        user = await make_user()
        await fund(db_session, user.id, diamonds=10)

        result = await ConversionService(db_session).convert(
            user.id, "diamond_to_cash", Decimal("10")
        )

        assert result.wallet.cash_balance == Decimal("95.00")
        entry = (await db_session.execute(select(CashTransaction))).scalar_one()
        assert entry.transaction_type == "conversion_in"
        assert entry.amount == Decimal("95.00")

    async def test_fractional_unit_amount(self, db_session, make_user):
        user = await make_user()
        await fund(db_session, user.id, credits=150)

        with pytest.raises(ValidationError):
            await ConversionService(db_session).convert(
                user.id, "credit_to_diamond", Decimal("10.5")
            )

    async def test_insufficient_balance(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(InsufficientBalanceError):
            await ConversionService(db_session).convert(
                user.id, "credit_to_diamond", Decimal("100")
            )

    async def test_preview_does_not_touch_wallet(self, db_session, make_user):
        user = await make_user()
        wallet = await fund(db_session, user.id, credits=100)

        quote = await ConversionService(db_session).preview(
            "credit_to_diamond", Decimal("100")
        )

        assert quote.result == Decimal("9")
        assert wallet.credits == 100


class TestCashPin:

    async def test_set_and_change(self, db_session, make_user):
        user = await make_user()
        service = CashWalletService(db_session)

        await service.set_pin(user.id, "1234")
        await service.set_pin(user.id, "5678", current_pin="1234")

        assert await service.verify_pin(user.id, "5678")
        with pytest.raises(PermissionDeniedError):
            await service.set_pin(user.id, "0000", current_pin="1234")

    @pytest.mark.parametrize("pin", ["12", "abcd", "12345"])
    async def test_format(self, db_session, make_user, pin):
        user = await make_user()

        with pytest.raises(ValidationError):
            await CashWalletService(db_session).set_pin(user.id, pin)

    async def test_lock_after_failed_attempts(self, db_session, make_user):
        user = await make_user()
        service = CashWalletService(db_session)
        await service.set_pin(user.id, "1234")

        for _ in range(5):
            assert await service.verify_pin(user.id, "9999") is False

        with pytest.raises(PinLockedError):
            await service.verify_pin(user.id, "1234")

    async def test_verify_without_pin(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(ValidationError):
            await CashWalletService(db_session).verify_pin(user.id, "1234")


class TestCashFlow:

    @pytest.fixture
    async def member(self, db_session, make_user):
        user = await make_user()
        service = CashWalletService(db_session)
        await service.set_pin(user.id, "1234")
        await service.deposit(user.id, Decimal("300"), admin_id=1)
        return user

    async def test_deposit(self, db_session, member):
        balances = await CashWalletService(db_session).get_balances(member.id)
        history = await CashWalletService(db_session).history(member.id)

        assert Decimal(balances["cash_balance"]) == Decimal("300")
        assert balances["has_pin"] is True
        assert [entry.transaction_type for entry in history] == ["deposit"]

    async def test_withdrawal_deducts_balance(self, db_session, member):
        service = CashWalletService(db_session)

        payout = await service.request_withdrawal(
            member.id, Decimal("120"), "1234", "acct-42"
        )

        wallet = await load_wallet(db_session, member.id)
        assert payout.status == "pending"
        assert wallet.cash_balance == Decimal("180")
        assert [p.id for p in await service.list_payouts()] == [payout.id]

    async def test_rejected_payout_is_refunded(self, db_session, member):
        service = CashWalletService(db_session)
        payout = await service.request_withdrawal(
            member.id, Decimal("120"), "1234", "acct-42"
        )

        processed = await service.process_payout(payout.id, 1, approve=False, notes="bad account")

        wallet = await load_wallet(db_session, member.id)
        assert processed.status == "rejected"
        assert wallet.cash_balance == Decimal("300")
        with pytest.raises(ConflictError):
            await service.process_payout(payout.id, 1, approve=True)

    async def test_wrong_pin(self, db_session, member):
        with pytest.raises(PermissionDeniedError):
            await CashWalletService(db_session).request_withdrawal(
                member.id, Decimal("120"), "0000", "acct-42"
            )

        await db_session.rollback()
        wallet = await load_wallet(db_session, member.id)
        assert wallet.pin_attempts == 1
        assert wallet.cash_balance == Decimal("300")

    @pytest.mark.parametrize("amount", ["0", "-50"])
    async def test_amount_must_be_positive(self, db_session, member, amount):
        await AppSettingsService(db_session).set_many({"cash_min_withdrawal": "0"})

        with pytest.raises(ValidationError):
            await CashWalletService(db_session).request_withdrawal(
                member.id, Decimal(amount), "1234", "acct-42"
            )

        wallet = await load_wallet(db_session, member.id)
        assert wallet.cash_balance == Decimal("300")

    async def test_below_minimum(self, db_session, member):
        with pytest.raises(ValidationError):
            await CashWalletService(db_session).request_withdrawal(
                member.id, Decimal("50"), "1234", "acct-42"
            )

    async def test_more_than_balance(self, db_session, member):
        with pytest.raises(InsufficientBalanceError):
            await CashWalletService(db_session).request_withdrawal(
                member.id, Decimal("500"), "1234", "acct-42"
            )

    async def test_emergency_stop(self, db_session, member, monkeypatch):
        monkeypatch.setattr(settings, "emergency_stop_withdrawals", True)

        with pytest.raises(ServiceUnavailableError):
            await CashWalletService(db_session).request_withdrawal(
                member.id, Decimal("120"), "1234", "acct-42"
            )


class TestConsolidation:

    async def test_pending_commissions_move_to_cash(self, db_session, make_chain):
        sponsor, buyer = await make_chain(2)
        await UnilevelDistributor(db_session).distribute(buyer.id, Decimal("1000"))
        service = EarningsConsolidationService(db_session)

        summary = await service.summary(sponsor.id)
        result = await service.consolidate(sponsor.id)

        assert Decimal(summary["total"]) == Decimal("40")
        assert summary["sources"]["commissions"]["count"] == 1
        assert result.total == Decimal("40")
        assert result.by_source == {"commissions": Decimal("40")}
        assert result.transaction.transaction_type == "earnings"
        wallet = await load_wallet(db_session, sponsor.id)
        assert wallet.cash_balance == Decimal("40")

    async def test_nothing_pending(self, db_session, make_chain):
        sponsor, buyer = await make_chain(2)
        await UnilevelDistributor(db_session).distribute(buyer.id, Decimal("1000"))
        service = EarningsConsolidationService(db_session)
        await service.consolidate(sponsor.id)

        with pytest.raises(ValidationError):
            await service.consolidate(sponsor.id)

    async def test_unknown_source(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(ValidationError):
            await EarningsConsolidationService(db_session).consolidate(
                user.id, ["bonus"]
            )
