"""
Compensation calculators.

Standalone package for binary, stair-step and conversion math.

Example:
    >>> from calculator import BinaryCalculator, DEFAULT_SCENARIO
    >>>
    >>> calc = BinaryCalculator()
    >>> result = calc.calculate_scenario(DEFAULT_SCENARIO)
    >>> result.cycles_completed
    1
"""

from calculator.constants import (
    CYCLE_VOLUME,
    DEFAULT_SCENARIO,
    PRESET_SCENARIOS,
    TIER_PRICES,
    get_preset,
)
from calculator.core import (
    CONVERSION_PAIRS,
    BinaryCalculator,
    BinaryScenarioInput,
    BinaryScenarioResult,
    CappedCommission,
    ConversionCalculator,
    ConversionQuote,
    CycleMatch,
    SafetyNetSplit,
    StairStepCalculator,
    StairStepLink,
    StairStepPayout,
)
from calculator.utils import (
    format_currency,
    format_number,
    format_percentage,
    format_scenario_result,
)


__version__ = "1.0.0"
__all__ = [
    # Core
    "BinaryCalculator",
    "ConversionCalculator",
    "StairStepCalculator",
    "CONVERSION_PAIRS",
    # Models
    "BinaryScenarioInput",
    "BinaryScenarioResult",
    "CappedCommission",
    "ConversionQuote",
    "CycleMatch",
    "SafetyNetSplit",
    "StairStepLink",
    "StairStepPayout",
    # Constants
    "CYCLE_VOLUME",
    "DEFAULT_SCENARIO",
    "PRESET_SCENARIOS",
    "TIER_PRICES",
    "get_preset",
    # Formatters
    "format_currency",
    "format_number",
    "format_percentage",
    "format_scenario_result",
]
