"""
Stair-step payout math.

Differential and breakaway computation over an upline chain, without
any database access.
"""

from decimal import ROUND_HALF_UP, Decimal

from calculator.core.models import StairStepLink, StairStepPayout

ZERO = Decimal("0")
CENT = Decimal("0.01")

DIFFERENTIAL = "differential"
BREAKAWAY = "breakaway"


def to_money(value: Decimal) -> Decimal:
    """Round to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class StairStepCalculator:
    """
    Computes stair-step commissions for one sale.

    The chain passed in lists the seller's uplines ordered by level
    (level 1 = direct sponsor).
    """

    def __init__(self, max_depth: int = 7) -> None:
        self.max_depth = max_depth

    def differential(
        self,
        sales_amount: Decimal,
        seller_rate: Decimal,
        chain: list[StairStepLink],
        top_rate: Decimal,
    ) -> list[StairStepPayout]:
        """
        Differential commissions.

        Each upline whose rate exceeds the rate already paid below it
        earns the difference. Walking stops once the top rate is paid.

        Args:
            sales_amount: Sale volume
            seller_rate: Seller's own step rate (already "paid")
            chain: Uplines ordered by level
            top_rate: Rate of the highest active step

        Returns:
            Payouts in level order

        Example:
            >>> calc = StairStepCalculator()
            >>> chain = [
            ...     StairStepLink(user_id=2, level=1, rate=Decimal("5")),
            ...     StairStepLink(user_id=3, level=2, rate=Decimal("10")),
            ... ]
            >>> [p.amount for p in calc.differential(Decimal("1000"), Decimal("0"), chain, Decimal("10"))]
            [Decimal('50.00'), Decimal('50.00')]
        """
        if sales_amount <= 0:
            return []

        paid_rate = max(seller_rate, ZERO)
        payouts: list[StairStepPayout] = []

        for link in sorted(chain, key=lambda item: item.level):
            if link.level > self.max_depth or paid_rate >= top_rate:
                break
            if link.rate <= paid_rate:
                continue

            percentage = link.rate - paid_rate
            amount = to_money(sales_amount * percentage / 100)
            paid_rate = link.rate
            if amount <= 0:
                continue
            payouts.append(
                StairStepPayout(
                    user_id=link.user_id,
                    level=link.level,
                    percentage=percentage,
                    amount=amount,
                    commission_type=DIFFERENTIAL,
                )
            )

        return payouts

    def breakaway(
        self,
        sales_amount: Decimal,
        seller_is_top: bool,
        chain: list[StairStepLink],
        breakaway_percentage: Decimal,
    ) -> list[StairStepPayout]:
        """
        Breakaway (leadership) override.

        The breakaway leader is the first member at or above the seller
        holding the top step. Every leadership-eligible top-step upline
        above the leader, within ``max_depth`` levels of it, earns the
        breakaway percentage of the sale.

        Args:
            sales_amount: Sale volume
            seller_is_top: Whether the seller holds the top step
            chain: Uplines ordered by level (may extend past max_depth)
            breakaway_percentage: Breakaway rate of the top step

        Returns:
            Payouts in level order (empty when there is no leader)
        """
        if sales_amount <= 0 or breakaway_percentage <= 0:
            return []

        ordered = sorted(chain, key=lambda item: item.level)
        if seller_is_top:
            leader_level = 0
        else:
            leader_level = next(
                (link.level for link in ordered if link.is_top), None
            )
            if leader_level is None:
                return []

        amount = to_money(sales_amount * breakaway_percentage / 100)
        if amount <= 0:
            return []

        return [
            StairStepPayout(
                user_id=link.user_id,
                level=link.level,
                percentage=breakaway_percentage,
                amount=amount,
                commission_type=BREAKAWAY,
            )
            for link in ordered
            if leader_level < link.level <= leader_level + self.max_depth
            and link.is_top
            and link.eligible
        ]
