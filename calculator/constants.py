"""
Default constants for the compensation calculators.

Standalone values: the calculator package does not import the
application settings.
"""

from decimal import Decimal

from calculator.core.models import BinaryScenarioInput

# Fixed per-leg volume needed for one cycle in the admin calculator
CYCLE_VOLUME = Decimal("11960")

# Package tiers offered to buyers
TIER_PRICES: tuple[Decimal, ...] = (
    Decimal("2990"),
    Decimal("5990"),
    Decimal("11960"),
)

DEFAULT_SCENARIO = BinaryScenarioInput()

# Preset scenarios shown next to the calculator: (name, left, right, price)
PRESET_SCENARIOS: list[tuple[str, int, int, Decimal]] = [
    ("4 x 2,990 both legs", 4, 4, Decimal("2990")),
    ("2 x 5,990 both legs", 2, 2, Decimal("5990")),
    ("1 x 11,960 both legs", 1, 1, Decimal("11960")),
    ("Mixed: 4 x 2,990 L + 2 x 5,990 R", 4, 2, Decimal("2990")),
    ("Imbalanced: 8 x 2,990 L + 4 x 2,990 R", 8, 4, Decimal("2990")),
]


def get_preset(name: str) -> BinaryScenarioInput | None:
    """
    Build calculator inputs from a preset name.

    Args:
        name: Preset name from PRESET_SCENARIOS

    Returns:
        Scenario input with default percentages, or None if unknown
    """
    for preset_name, left, right, price in PRESET_SCENARIOS:
        if preset_name == name:
            return DEFAULT_SCENARIO.model_copy(
                update={
                    "left_leg_users": left,
                    "right_leg_users": right,
                    "tier_price": price,
                }
            )
    return None
