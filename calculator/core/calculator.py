"""
Pure business logic calculator for binary compensation.

This module contains standalone calculation logic without any
dependencies on database, ORM, or app-specific code.
"""

from decimal import ROUND_FLOOR, Decimal

from calculator.core.models import (
    BinaryScenarioInput,
    BinaryScenarioResult,
    CappedCommission,
    CycleMatch,
    SafetyNetSplit,
)

ZERO = Decimal("0")


class BinaryCalculator:
    """
    Pure calculator for binary cycles, caps and earnings scenarios.

    Works with Decimal only; callers pass configured values in.
    """

    def __init__(self, cycle_volume: Decimal = Decimal("11960")) -> None:
        if cycle_volume <= 0:
            raise ValueError("cycle_volume must be positive")
        self.cycle_volume = cycle_volume

    def match_cycles(
        self,
        left_volume: Decimal,
        right_volume: Decimal,
        cycle_volume: Decimal | None = None,
    ) -> CycleMatch:
        """
        Match leg volumes into whole cycles.

        Formula: cycles = min(left, right) // cycle_volume; both legs are
        reduced by ``cycles * cycle_volume``.

        Args:
            left_volume: Carried left volume
            right_volume: Carried right volume
            cycle_volume: Volume per cycle (calculator default when None)

        Returns:
            Cycles and remaining volumes

        Example:
            >>> calc = BinaryCalculator()
            >>> calc.match_cycles(Decimal("2500"), Decimal("1200"), Decimal("1000")).cycles
            1
        """
        volume = cycle_volume if cycle_volume is not None else self.cycle_volume
        if volume <= 0:
            raise ValueError("cycle_volume must be positive")

        left = max(left_volume, ZERO)
        right = max(right_volume, ZERO)
        cycles = int(min(left, right) // volume)
        used = volume * cycles
        return CycleMatch(
            cycles=cycles,
            volume_used=used,
            left_remaining=left - used,
            right_remaining=right - used,
        )

    def cap_commission(
        self,
        cycles: int,
        commission_per_cycle: Decimal,
        daily_cap: Decimal,
        earned_today: Decimal,
    ) -> CappedCommission:
        """
        Apply the remaining daily cap to a cycle commission.

        Example:
            >>> calc = BinaryCalculator()
            >>> c = calc.cap_commission(3, Decimal("100"), Decimal("250"), Decimal("0"))
            >>> (c.paid, c.flushed)
            (Decimal('250'), Decimal('50'))
        """
        gross = commission_per_cycle * max(cycles, 0)
        remaining = max(daily_cap - earned_today, ZERO)
        paid = min(gross, remaining)
        return CappedCommission(gross=gross, paid=paid, flushed=gross - paid)

    def safety_net_split(
        self, join_amount: Decimal, admin_percent: Decimal
    ) -> SafetyNetSplit:
        """
        Split a join amount into the company share and the affiliate pool.

        Example:
            >>> BinaryCalculator().safety_net_split(Decimal("500"), Decimal("35"))
            SafetyNetSplit(admin_share=Decimal('175.00'), affiliate_pool=Decimal('325.00'))
        """
        if join_amount <= 0:
            return SafetyNetSplit(admin_share=ZERO, affiliate_pool=ZERO)
        percent = min(max(admin_percent, ZERO), Decimal("100"))
        admin_share = (join_amount * percent / 100).quantize(
            Decimal("0.01"), rounding=ROUND_FLOOR
        )
        return SafetyNetSplit(
            admin_share=admin_share,
            affiliate_pool=join_amount - admin_share,
        )

    def calculate_scenario(self, inputs: BinaryScenarioInput) -> BinaryScenarioResult:
        """
        Simulate earnings of a node with the given leg populations.

        Deductions (AI cost, admin profit, direct referral) are taken
        from the matched volume of both legs; the cycle commission
        percent applies to what remains. Commission above the daily cap
        is lost to the member and counted as admin earnings.
        """
        left_volume = inputs.tier_price * inputs.left_leg_users
        right_volume = inputs.tier_price * inputs.right_leg_users
        match = self.match_cycles(left_volume, right_volume)

        total_matched = match.volume_used * 2
        ai_cost = total_matched * inputs.ai_cost_percent / 100
        admin_profit = total_matched * inputs.admin_profit_percent / 100
        direct_referral = total_matched * inputs.direct_referral_percent / 100
        total_deductions = ai_cost + admin_profit + direct_referral

        distributable = total_matched - total_deductions
        commission = distributable * inputs.cycle_commission_percent / 100
        actual = min(commission, inputs.daily_cap)
        lost = commission - actual

        return BinaryScenarioResult(
            left_leg_volume=left_volume,
            right_leg_volume=right_volume,
            weaker_leg=min(left_volume, right_volume),
            cycles_completed=match.cycles,
            volume_used_per_leg=match.volume_used,
            total_matched_volume=total_matched,
            left_leg_remaining=match.left_remaining,
            right_leg_remaining=match.right_remaining,
            ai_cost_deduction=ai_cost,
            admin_profit_deduction=admin_profit,
            direct_referral_deduction=direct_referral,
            total_deductions=total_deductions,
            distributable_amount=distributable,
            commission_earned=commission,
            is_capped=commission > inputs.daily_cap,
            actual_commission=actual,
            commission_lost=lost,
            total_purchase_volume=left_volume + right_volume,
            admin_earnings=admin_profit + lost,
        )
