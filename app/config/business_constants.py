"""
Business logic constants for the affiliate network.

Central location for compensation-plan defaults and setting keys.
Defaults apply when the matching row in ``app_settings`` is missing or
cannot be parsed; admins override them at runtime.
"""

from decimal import Decimal


# =============================================================================
# BINARY NETWORK
# =============================================================================

BINARY_DEFAULTS = {
    "binary_join_amount": Decimal("500"),
    "binary_cycle_volume": Decimal("1000"),
    "binary_cycle_commission": Decimal("100"),
    "binary_daily_cap": Decimal("5000"),
    "binary_admin_safety_net": Decimal("35"),  # percent kept by the company
    "binary_auto_replenish_enabled": False,
    "binary_auto_replenish_percent": Decimal("20"),
    "binary_max_accounts_per_user": 3,
}


# =============================================================================
# UNILEVEL (7 levels, percent of purchase amount)
# =============================================================================

UNILEVEL_DEPTH = 7
UNILEVEL_DEFAULTS = {
    "unilevel_level_1_percent": Decimal("4"),
    "unilevel_level_2_percent": Decimal("3"),
    "unilevel_level_3_percent": Decimal("2"),
    "unilevel_level_4_percent": Decimal("1.5"),
    "unilevel_level_5_percent": Decimal("1"),
    "unilevel_level_6_percent": Decimal("0.75"),
    "unilevel_level_7_percent": Decimal("0.5"),
}


# =============================================================================
# ORDER COMMISSIONS (share of the order's commission pool per level)
# =============================================================================

ORDER_COMMISSION_DEPTH = 3
ORDER_COMMISSION_SHARES = {
    1: Decimal("50"),  # direct referrer
    2: Decimal("30"),
    3: Decimal("20"),
}


# =============================================================================
# STAIR-STEP PLAN
# =============================================================================

# Depth of the referral network that counts for team sales and overrides
STAIR_STEP_MAX_DEPTH = 7

# Direct lines that must contain a top-step leader for breakaway eligibility
LEADERSHIP_MIN_LINES = 2

DEFAULT_MONTHS_TO_QUALIFY = 3


class QualificationType:
    """Which sales count toward a step's quota."""
    PERSONAL = "personal"
    GROUP = "group"
    COMBINED = "combined"

    ALL = (PERSONAL, GROUP, COMBINED)


# =============================================================================
# CURRENCY CONVERSION
# =============================================================================

CONVERSION_DEFAULTS = {
    "credit_to_diamond_rate": Decimal("10"),
    "diamond_to_credit_rate": Decimal("10"),
    "ai_credit_to_cash_rate": Decimal("0.10"),
    "ai_credit_to_diamond_conversion_rate": Decimal("5"),
    "ai_credit_to_game_credit_rate": Decimal("1"),
    "diamond_base_price": Decimal("10"),
    "conversion_fee_percent": Decimal("5"),
    "enable_credit_to_diamond": True,
    "enable_diamond_to_credit": True,
    "enable_ai_credit_to_cash": True,
    "enable_ai_credit_to_diamond": True,
    "enable_ai_credit_to_game_credit": True,
    "enable_cash_to_diamond": True,
    "enable_cash_to_credit": True,
    "enable_diamond_to_cash": True,
    "enable_credit_to_cash": True,
}


# =============================================================================
# CASH WALLET
# =============================================================================

CASH_DEFAULTS = {
    "cash_min_withdrawal": Decimal("100"),
}

CASH_PIN_LENGTH = 4


# =============================================================================
# AI CONTENT
# =============================================================================

# Credits charged per generation request
AI_FEATURE_COSTS = {
    "text": 1,
    "ads": 2,
    "blog": 3,
    "newsletter": 3,
    "research": 5,
}
