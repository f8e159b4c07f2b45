"""
Formatting utilities for numbers and currency.

Render calculator results as readable text for admin reports.
"""

from decimal import Decimal

from calculator.core.models import BinaryScenarioResult


def format_currency(
    amount: float | Decimal,
    currency: str = "₱",
    decimals: int = 2,
) -> str:
    """
    Format amount as currency.

    Args:
        amount: Amount to format
        currency: Symbol (prefixed) or code (suffixed)
        decimals: Digits after the decimal point

    Returns:
        Formatted string

    Example:
        >>> format_currency(Decimal("1234.5"))
        '₱1,234.50'
        >>> format_currency(1000, currency="PHP", decimals=0)
        '1,000 PHP'
    """
    formatted = f"{Decimal(str(amount)):,.{decimals}f}"
    if len(currency) == 1:
        return f"{currency}{formatted}"
    return f"{formatted} {currency}"


def format_percentage(value: float | Decimal, decimals: int = 2) -> str:
    """
    Format a value that is already a percentage.

    Example:
        >>> format_percentage(Decimal("0.75"))
        '0.75%'
    """
    return f"{Decimal(str(value)):.{decimals}f}%"


def format_number(value: float | Decimal | int, decimals: int = 0) -> str:
    """
    Format number with thousands separators.

    Example:
        >>> format_number(11960)
        '11,960'
    """
    return f"{Decimal(str(value)):,.{decimals}f}"


def format_scenario_result(
    result: BinaryScenarioResult,
    currency: str = "₱",
) -> str:
    """
    Format a binary scenario as a multi-line report.

    Args:
        result: Calculator output
        currency: Currency symbol

    Returns:
        Report text
    """
    lines = [
        "Binary scenario:",
        f"  Left volume:      {format_currency(result.left_leg_volume, currency)}",
        f"  Right volume:     {format_currency(result.right_leg_volume, currency)}",
        f"  Cycles:           {format_number(result.cycles_completed)}",
        f"  Matched volume:   {format_currency(result.total_matched_volume, currency)}",
        f"  Deductions:       {format_currency(result.total_deductions, currency)}",
        f"  Distributable:    {format_currency(result.distributable_amount, currency)}",
        f"  Commission:       {format_currency(result.actual_commission, currency)}",
    ]
    if result.is_capped:
        lines.append(
            f"  Lost to cap:      {format_currency(result.commission_lost, currency)}"
        )
    lines.append(
        f"  Admin earnings:   {format_currency(result.admin_earnings, currency)}"
    )
    return "\n".join(lines)
