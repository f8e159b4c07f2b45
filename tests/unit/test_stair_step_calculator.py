"""Unit tests for stair-step differential and breakaway math."""

from decimal import Decimal

from calculator import StairStepCalculator, StairStepLink


def link(user_id, level, rate="0", is_top=False, eligible=False):
    return StairStepLink(
        user_id=user_id,
        level=level,
        rate=Decimal(rate),
        is_top=is_top,
        eligible=eligible,
    )


class TestDifferential:
    """Differential commissions up the chain."""

    def test_pays_rate_differences(self):
        """Each higher rate earns only the difference over what was paid."""
        chain = [
            link(2, 1, "5"),
            link(3, 2, "5"),
            link(4, 3, "10"),
            link(5, 4, "20"),
        ]

        payouts = StairStepCalculator().differential(
            Decimal("1000"), Decimal("0"), chain, Decimal("20")
        )

        assert [(p.user_id, p.amount) for p in payouts] == [
            (2, Decimal("50.00")),
            (4, Decimal("50.00")),
            (5, Decimal("100.00")),
        ]
        assert all(p.commission_type == "differential" for p in payouts)

    def test_seller_rate_counts_as_paid(self):
        """The seller keeps their own rate; uplines at or below it earn nothing."""
        chain = [link(2, 1, "10"), link(3, 2, "15")]

        payouts = StairStepCalculator().differential(
            Decimal("200"), Decimal("10"), chain, Decimal("20")
        )

        assert len(payouts) == 1
        assert payouts[0].user_id == 3
        assert payouts[0].percentage == Decimal("5")
        assert payouts[0].amount == Decimal("10.00")

    def test_stops_once_top_rate_is_paid(self):
        chain = [link(2, 1, "20"), link(3, 2, "25")]

        payouts = StairStepCalculator().differential(
            Decimal("100"), Decimal("0"), chain, Decimal("20")
        )

        assert [p.user_id for p in payouts] == [2]

    def test_ignores_levels_beyond_depth(self):
        chain = [link(9, 8, "10")]

        payouts = StairStepCalculator(max_depth=7).differential(
            Decimal("100"), Decimal("0"), chain, Decimal("20")
        )

        assert payouts == []

    def test_non_positive_sale(self):
        payouts = StairStepCalculator().differential(
            Decimal("0"), Decimal("0"), [link(2, 1, "5")], Decimal("5")
        )

        assert payouts == []


class TestBreakaway:
    """Breakaway override above the first top-step leader."""

    def test_pays_eligible_leaders_above_first_leader(self):
        chain = [
            link(2, 1, "20", is_top=True, eligible=True),  # breakaway leader
            link(3, 2, "20", is_top=True, eligible=True),
            link(4, 3, "10"),
            link(5, 4, "20", is_top=True, eligible=False),
            link(6, 9, "20", is_top=True, eligible=True),  # beyond 7 levels of leader
        ]

        payouts = StairStepCalculator().breakaway(
            Decimal("1000"), False, chain, Decimal("3")
        )

        assert [(p.user_id, p.amount) for p in payouts] == [(3, Decimal("30.00"))]
        assert payouts[0].commission_type == "breakaway"

    def test_seller_is_leader(self):
        """A top-step seller is the leader; qualified uplines within depth earn."""
        chain = [
            link(2, 1, "20", is_top=True, eligible=True),
            link(3, 8, "20", is_top=True, eligible=True),
        ]

        payouts = StairStepCalculator().breakaway(
            Decimal("500"), True, chain, Decimal("2")
        )

        assert [p.user_id for p in payouts] == [2]
        assert payouts[0].amount == Decimal("10.00")

    def test_no_leader_no_breakaway(self):
        chain = [link(2, 1, "10"), link(3, 2, "15")]

        payouts = StairStepCalculator().breakaway(
            Decimal("1000"), False, chain, Decimal("3")
        )

        assert payouts == []

    def test_zero_breakaway_rate(self):
        chain = [link(2, 1, is_top=True, eligible=True)]

        assert StairStepCalculator().breakaway(
            Decimal("1000"), True, chain, Decimal("0")
        ) == []
