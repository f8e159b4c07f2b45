"""
Unit tests for the binary compensation calculator.

Covers cycle matching, the daily cap, the safety-net split and the
admin earnings scenario.
"""

from decimal import Decimal

import pytest

from calculator import (
    DEFAULT_SCENARIO,
    BinaryCalculator,
    BinaryScenarioInput,
    format_currency,
    format_number,
    format_percentage,
    format_scenario_result,
    get_preset,
)


class TestMatchCycles:
    """Cycle matching of leg volumes."""

    def test_single_cycle_carries_remainder(self):
        """Weaker leg decides the cycles; both legs lose the used volume."""
        calc = BinaryCalculator()

        match = calc.match_cycles(Decimal("2500"), Decimal("1200"), Decimal("1000"))

        assert match.cycles == 1
        assert match.volume_used == Decimal("1000")
        assert match.left_remaining == Decimal("1500")
        assert match.right_remaining == Decimal("200")

    def test_no_cycle_below_cycle_volume(self):
        """Volumes below one cycle on either leg produce nothing."""
        calc = BinaryCalculator(cycle_volume=Decimal("1000"))

        match = calc.match_cycles(Decimal("5000"), Decimal("999.99"))

        assert match.cycles == 0
        assert match.left_remaining == Decimal("5000")
        assert match.right_remaining == Decimal("999.99")

    def test_multiple_cycles(self):
        calc = BinaryCalculator(cycle_volume=Decimal("1000"))

        match = calc.match_cycles(Decimal("3000"), Decimal("3500"))

        assert match.cycles == 3
        assert match.left_remaining == Decimal("0")
        assert match.right_remaining == Decimal("500")

    def test_rejects_non_positive_cycle_volume(self):
        with pytest.raises(ValueError):
            BinaryCalculator(cycle_volume=Decimal("0"))


class TestDailyCap:
    """Daily cap applied to cycle commissions."""

    def test_commission_below_cap_is_paid_in_full(self):
        calc = BinaryCalculator()

        capped = calc.cap_commission(2, Decimal("100"), Decimal("5000"), Decimal("0"))

        assert capped.paid == Decimal("200")
        assert capped.flushed == Decimal("0")
        assert capped.is_capped is False

    def test_commission_above_remaining_cap_is_flushed(self):
        """Only what is left of today's cap is paid."""
        calc = BinaryCalculator()

        capped = calc.cap_commission(
            3, Decimal("100"), Decimal("500"), Decimal("350")
        )

        assert capped.gross == Decimal("300")
        assert capped.paid == Decimal("150")
        assert capped.flushed == Decimal("150")
        assert capped.is_capped is True

    def test_cap_already_reached(self):
        calc = BinaryCalculator()

        capped = calc.cap_commission(1, Decimal("100"), Decimal("500"), Decimal("600"))

        assert capped.paid == Decimal("0")
        assert capped.flushed == Decimal("100")


class TestSafetyNetSplit:
    """Company share of a join amount."""

    def test_default_split(self):
        split = BinaryCalculator().safety_net_split(Decimal("500"), Decimal("35"))

        assert split.admin_share == Decimal("175.00")
        assert split.affiliate_pool == Decimal("325.00")

    def test_share_rounds_down_to_cents(self):
        split = BinaryCalculator().safety_net_split(Decimal("99.99"), Decimal("33"))

        assert split.admin_share == Decimal("32.99")
        assert split.admin_share + split.affiliate_pool == Decimal("99.99")

    def test_zero_amount(self):
        split = BinaryCalculator().safety_net_split(Decimal("0"), Decimal("35"))

        assert split.admin_share == Decimal("0")
        assert split.affiliate_pool == Decimal("0")


class TestScenario:
    """Admin earnings scenario."""

    def test_default_scenario(self):
        """4 x 2,990 on both legs completes exactly one 11,960 cycle."""
        result = BinaryCalculator().calculate_scenario(DEFAULT_SCENARIO)

        assert result.cycles_completed == 1
        assert result.total_matched_volume == Decimal("23920")
        assert result.total_deductions == Decimal("10764")
        assert result.distributable_amount == Decimal("13156")
        assert result.commission_earned == Decimal("1315.6")
        assert result.is_capped is False
        assert result.commission_lost == Decimal("0")
        assert result.admin_earnings == Decimal("2392")

    def test_capped_scenario_counts_lost_commission_as_admin_earnings(self):
        inputs = BinaryScenarioInput(
            left_leg_users=4,
            right_leg_users=4,
            tier_price=Decimal("2990"),
            daily_cap=Decimal("1000"),
        )

        result = BinaryCalculator().calculate_scenario(inputs)

        assert result.is_capped is True
        assert result.actual_commission == Decimal("1000")
        assert result.commission_lost == Decimal("315.6")
        assert result.admin_earnings == Decimal("2392") + Decimal("315.6")

    def test_imbalanced_preset_keeps_remainder_on_strong_leg(self):
        inputs = get_preset("Imbalanced: 8 x 2,990 L + 4 x 2,990 R")

        result = BinaryCalculator().calculate_scenario(inputs)

        assert result.cycles_completed == 1
        assert result.left_leg_remaining == Decimal("11960")
        assert result.right_leg_remaining == Decimal("0")

    def test_unknown_preset(self):
        assert get_preset("does not exist") is None


class TestFormatting:
    """Report text for admin screens."""

    def test_currency(self):
        assert format_currency(Decimal("1234.5")) == "₱1,234.50"
        assert format_currency(1000, currency="PHP", decimals=0) == "1,000 PHP"

    def test_percentage_and_number(self):
        assert format_percentage(Decimal("0.75")) == "0.75%"
        assert format_number(11960) == "11,960"

    def test_scenario_report(self):
        result = BinaryCalculator().calculate_scenario(DEFAULT_SCENARIO)

        report = format_scenario_result(result)

        assert report.splitlines()[0] == "Binary scenario:"
        assert "₱11,960.00" in report
        assert "₱2,392.00" in report
        assert "Lost to cap" not in report

    def test_capped_report_shows_lost_commission(self):
        inputs = BinaryScenarioInput(
            left_leg_users=4,
            right_leg_users=4,
            tier_price=Decimal("2990"),
            daily_cap=Decimal("1000"),
        )

        report = format_scenario_result(BinaryCalculator().calculate_scenario(inputs))

        assert "Lost to cap:      ₱315.60" in report
