"""
Currency conversion math.

The fee is taken from the source amount first; the rest is multiplied
or divided by the configured rate. Integer currencies are floored, cash
is rounded down to cents.
"""

from collections.abc import Callable
from decimal import ROUND_FLOOR, Decimal

from calculator.core.models import ConversionQuote

CENT = Decimal("0.01")

CREDIT = "credit"
DIAMOND = "diamond"
AI_CREDIT = "ai_credit"
CASH = "cash"

# pair -> (source currency, target currency)
CONVERSION_PAIRS: dict[str, tuple[str, str]] = {
    "credit_to_diamond": (CREDIT, DIAMOND),
    "diamond_to_credit": (DIAMOND, CREDIT),
    "ai_credit_to_cash": (AI_CREDIT, CASH),
    "ai_credit_to_diamond": (AI_CREDIT, DIAMOND),
    "ai_credit_to_game_credit": (AI_CREDIT, CREDIT),
    "cash_to_diamond": (CASH, DIAMOND),
    "cash_to_credit": (CASH, CREDIT),
    "diamond_to_cash": (DIAMOND, CASH),
    "credit_to_cash": (CREDIT, CASH),
}


class ConversionCalculator:
    """
    Pure conversion calculator.

    Example:
        >>> calc = ConversionCalculator(fee_percent=Decimal("5"))
        >>> calc.quote("credit_to_diamond", Decimal("100")).result
        Decimal('9')
    """

    def __init__(
        self,
        fee_percent: Decimal = Decimal("5"),
        credit_to_diamond_rate: Decimal = Decimal("10"),
        diamond_to_credit_rate: Decimal = Decimal("10"),
        ai_credit_to_cash_rate: Decimal = Decimal("0.10"),
        ai_credit_to_diamond_rate: Decimal = Decimal("5"),
        ai_credit_to_game_credit_rate: Decimal = Decimal("1"),
        diamond_base_price: Decimal = Decimal("10"),
    ) -> None:
        self.fee_percent = fee_percent
        base = diamond_base_price
        # pair -> (reported rate, converter applied to the post-fee amount)
        self._rules: dict[str, tuple[Decimal, Callable[[Decimal], Decimal]]] = {
            "credit_to_diamond": (
                credit_to_diamond_rate, lambda v: v / credit_to_diamond_rate
            ),
            "diamond_to_credit": (
                diamond_to_credit_rate, lambda v: v * diamond_to_credit_rate
            ),
            "ai_credit_to_cash": (
                ai_credit_to_cash_rate, lambda v: v * ai_credit_to_cash_rate
            ),
            "ai_credit_to_diamond": (
                ai_credit_to_diamond_rate, lambda v: v / ai_credit_to_diamond_rate
            ),
            "ai_credit_to_game_credit": (
                ai_credit_to_game_credit_rate,
                lambda v: v * ai_credit_to_game_credit_rate,
            ),
            "cash_to_diamond": (base, lambda v: v / base),
            "cash_to_credit": (
                diamond_to_credit_rate / base,
                lambda v: v * diamond_to_credit_rate / base,
            ),
            "diamond_to_cash": (base, lambda v: v * base),
            "credit_to_cash": (
                base / diamond_to_credit_rate,
                lambda v: v * base / diamond_to_credit_rate,
            ),
        }

    @staticmethod
    def currencies(pair: str) -> tuple[str, str]:
        """Source and target currency of a pair."""
        if pair not in CONVERSION_PAIRS:
            raise ValueError(f"Unknown conversion pair: {pair}")
        return CONVERSION_PAIRS[pair]

    def quote(self, pair: str, amount: Decimal) -> ConversionQuote:
        """
        Compute what ``amount`` of the source currency converts to.

        Args:
            pair: Conversion pair name (e.g. ``credit_to_diamond``)
            amount: Source amount (positive)

        Returns:
            Quote with fee and rounded result

        Raises:
            ValueError: Unknown pair, non-positive amount or rate
        """
        _, target = self.currencies(pair)
        if amount <= 0:
            raise ValueError("Amount must be positive")

        rate, convert = self._rules[pair]
        if rate <= 0:
            raise ValueError(f"Rate for {pair} must be positive")

        fee = amount * self.fee_percent / 100
        after_fee = amount - fee
        raw = convert(after_fee)

        if target == CASH:
            result = raw.quantize(CENT, rounding=ROUND_FLOOR)
        else:
            result = raw.to_integral_value(rounding=ROUND_FLOOR)

        return ConversionQuote(
            pair=pair,
            amount=amount,
            fee=fee,
            amount_after_fee=after_fee,
            rate=rate,
            result=max(result, Decimal("0")),
        )
