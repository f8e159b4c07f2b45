"""
Utility functions for calculator.

Formatting helpers for calculator reports.
"""

from calculator.utils.formatters import (
    format_currency,
    format_number,
    format_percentage,
    format_scenario_result,
)

__all__ = [
    "format_currency",
    "format_percentage",
    "format_number",
    "format_scenario_result",
]
