"""
Currency conversion service.

Moves value between game credits, diamonds, AI credits and cash at the
admin-configured rates.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import CashTransactionType, Currency
from app.models.wallet import Wallet
from app.repositories.wallet_repository import (
    CashTransactionRepository,
    WalletRepository,
)
from app.services.app_settings_service import AppSettingsService, ConversionSettings
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import (
    ConversionDisabledError,
    InsufficientBalanceError,
    ValidationError,
)
from calculator import ConversionCalculator, ConversionQuote

# currency -> wallet column
BALANCE_FIELDS = {
    Currency.CREDIT: "credits",
    Currency.DIAMOND: "diamonds",
    Currency.AI_CREDIT: "ai_credits",
    Currency.CASH: "cash_balance",
}

MIN_RESULT = {
    Currency.CASH: Decimal("0.01"),
}


@dataclass
class ConversionResult:
    quote: ConversionQuote
    wallet: Wallet


def build_calculator(conversion: ConversionSettings) -> ConversionCalculator:
    return ConversionCalculator(
        fee_percent=conversion.fee_percent,
        credit_to_diamond_rate=conversion.credit_to_diamond_rate,
        diamond_to_credit_rate=conversion.diamond_to_credit_rate,
        ai_credit_to_cash_rate=conversion.ai_credit_to_cash_rate,
        ai_credit_to_diamond_rate=conversion.ai_credit_to_diamond_rate,
        ai_credit_to_game_credit_rate=conversion.ai_credit_to_game_credit_rate,
        diamond_base_price=conversion.diamond_base_price,
    )


class ConversionService(BaseService):
    """Previews and executes conversions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.wallet_repo = WalletRepository(session)
        self.cash_repo = CashTransactionRepository(session)
        self.settings_service = AppSettingsService(session)

    async def preview(self, pair: str, amount: Decimal) -> ConversionQuote:
        """
        Quote a conversion without touching balances.

        Raises:
            ConversionDisabledError: Pair switched off by an admin
            ValidationError: Unknown pair, bad amount or result below one unit
        """
        conversion = await self.settings_service.get_conversion_settings()
        calculator = build_calculator(conversion)

        try:
            source, target = calculator.currencies(pair)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not conversion.is_enabled(pair):
            raise ConversionDisabledError(f"Conversion {pair} is disabled")

        amount = Decimal(str(amount))
        if source != Currency.CASH and amount != amount.to_integral_value():
            raise ValidationError(f"{source} amount must be a whole number")

        try:
            quote = calculator.quote(pair, amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        minimum = MIN_RESULT.get(Currency(target), Decimal("1"))
        if quote.result < minimum:
            raise ValidationError(
                f"Amount too small: converts to less than {minimum} {target}"
            )
        return quote

    @transaction
    async def convert(
        self, user_id: int, pair: str, amount: Decimal
    ) -> ConversionResult:
        """
        Convert ``amount`` of the pair's source currency.

        Raises:
            ConversionDisabledError: Pair switched off
            InsufficientBalanceError: Source balance too low
            ValidationError: Invalid amount or pair
        """
        quote = await self.preview(pair, amount)
        source, target = (Currency(c) for c in ConversionCalculator.currencies(pair))

        wallet = await self.wallet_repo.get_or_create(user_id, for_update=True)
        source_field = BALANCE_FIELDS[source]
        target_field = BALANCE_FIELDS[target]

        balance = getattr(wallet, source_field)
        if balance < quote.amount:
            raise InsufficientBalanceError(
                f"Insufficient {source} balance: {balance} < {quote.amount}"
            )

        debit = quote.amount if source == Currency.CASH else int(quote.amount)
        credit = quote.result if target == Currency.CASH else int(quote.result)
        setattr(wallet, source_field, balance - debit)
        setattr(wallet, target_field, getattr(wallet, target_field) + credit)
        await self.session.flush()

        if source == Currency.CASH:
            await self.cash_repo.create(
                user_id=user_id,
                transaction_type=CashTransactionType.CONVERSION_OUT,
                amount=-quote.amount,
                balance_after=wallet.cash_balance,
                description=f"Converted to {target} ({pair})",
            )
        if target == Currency.CASH:
            await self.cash_repo.create(
                user_id=user_id,
                transaction_type=CashTransactionType.CONVERSION_IN,
                amount=quote.result,
                balance_after=wallet.cash_balance,
                description=f"Converted from {source} ({pair})",
            )

        self.logger.info(
            "Currency converted",
            extra={
                "user_id": user_id,
                "pair": pair,
                "amount": str(quote.amount),
                "result": str(quote.result),
                "fee": str(quote.fee),
            },
        )
        return ConversionResult(quote=quote, wallet=wallet)
