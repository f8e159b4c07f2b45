"""
Core calculator functionality.

Contains the pure compensation math and its data models.
"""

from calculator.core.calculator import BinaryCalculator
from calculator.core.conversion import CONVERSION_PAIRS, ConversionCalculator
from calculator.core.models import (
    BinaryScenarioInput,
    BinaryScenarioResult,
    CappedCommission,
    ConversionQuote,
    CycleMatch,
    SafetyNetSplit,
    StairStepLink,
    StairStepPayout,
)
from calculator.core.stair_step import StairStepCalculator

__all__ = [
    "BinaryCalculator",
    "ConversionCalculator",
    "StairStepCalculator",
    "CONVERSION_PAIRS",
    "BinaryScenarioInput",
    "BinaryScenarioResult",
    "CappedCommission",
    "ConversionQuote",
    "CycleMatch",
    "SafetyNetSplit",
    "StairStepLink",
    "StairStepPayout",
]
