"""Pydantic models for calculator."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class BinaryScenarioInput(BaseModel):
    """Inputs of the admin binary earnings calculator.

    Leg volumes are simulated as ``users * tier_price`` on each side.
    """

    model_config = ConfigDict(frozen=True)

    left_leg_users: int = Field(default=4, ge=0, description="Members on the left leg")
    right_leg_users: int = Field(default=4, ge=0, description="Members on the right leg")
    tier_price: Decimal = Field(default=Decimal("2990"), gt=0, description="Package price")
    ai_cost_percent: Decimal = Field(default=Decimal("30"), ge=0, le=100)
    admin_profit_percent: Decimal = Field(default=Decimal("10"), ge=0, le=100)
    direct_referral_percent: Decimal = Field(default=Decimal("5"), ge=0, le=100)
    cycle_commission_percent: Decimal = Field(default=Decimal("10"), ge=0, le=100)
    daily_cap: Decimal = Field(default=Decimal("50000"), ge=0)


class BinaryScenarioResult(BaseModel):
    """Outcome of a binary earnings scenario."""

    model_config = ConfigDict(frozen=True)

    left_leg_volume: Decimal
    right_leg_volume: Decimal
    weaker_leg: Decimal
    cycles_completed: int = Field(..., ge=0)
    volume_used_per_leg: Decimal
    total_matched_volume: Decimal
    left_leg_remaining: Decimal
    right_leg_remaining: Decimal
    ai_cost_deduction: Decimal
    admin_profit_deduction: Decimal
    direct_referral_deduction: Decimal
    total_deductions: Decimal
    distributable_amount: Decimal
    commission_earned: Decimal
    is_capped: bool
    actual_commission: Decimal
    commission_lost: Decimal
    total_purchase_volume: Decimal
    admin_earnings: Decimal


class CycleMatch(BaseModel):
    """Result of matching the two leg volumes of one node."""

    model_config = ConfigDict(frozen=True)

    cycles: int = Field(..., ge=0)
    volume_used: Decimal = Field(..., ge=0, description="Volume removed from each leg")
    left_remaining: Decimal = Field(..., ge=0)
    right_remaining: Decimal = Field(..., ge=0)


class CappedCommission(BaseModel):
    """Cycle commission after applying the remaining daily cap."""

    model_config = ConfigDict(frozen=True)

    gross: Decimal = Field(..., ge=0)
    paid: Decimal = Field(..., ge=0)
    flushed: Decimal = Field(..., ge=0)

    @property
    def is_capped(self) -> bool:
        return self.flushed > 0


class SafetyNetSplit(BaseModel):
    """Split of a join amount between the company and the affiliate pool."""

    model_config = ConfigDict(frozen=True)

    admin_share: Decimal = Field(..., ge=0)
    affiliate_pool: Decimal = Field(..., ge=0)


class StairStepLink(BaseModel):
    """One upline in the referral chain above a seller.

    ``level`` is 1 for the seller's direct sponsor.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    level: int = Field(..., ge=1)
    rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    is_top: bool = False
    eligible: bool = Field(default=False, description="Leadership-eligible for breakaway")


class StairStepPayout(BaseModel):
    """Commission owed to one upline."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    level: int
    percentage: Decimal
    amount: Decimal
    commission_type: str


class ConversionQuote(BaseModel):
    """Preview of a currency conversion."""

    model_config = ConfigDict(frozen=True)

    pair: str
    amount: Decimal = Field(..., gt=0)
    fee: Decimal = Field(..., ge=0)
    amount_after_fee: Decimal = Field(..., ge=0)
    rate: Decimal = Field(..., gt=0)
    result: Decimal = Field(..., ge=0)
