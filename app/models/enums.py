"""
Enumerations shared by models and services.
"""

from enum import StrEnum


class BinaryLeg(StrEnum):
    """Side of a binary node."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "BinaryLeg":
        return BinaryLeg.RIGHT if self is BinaryLeg.LEFT else BinaryLeg.LEFT


class PlacementMode(StrEnum):
    """How an additional binary account is placed."""

    SPILLOVER = "spillover"
    LEFT = "left"
    RIGHT = "right"
    DOWNLINE = "downline"


class PendingPlacementStatus(StrEnum):
    PENDING = "pending"
    PLACED = "placed"
    CANCELLED = "cancelled"


class PurchaseStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CommissionStatus(StrEnum):
    """Lifecycle of any earned commission until it reaches the cash wallet."""

    PENDING = "pending"
    CONSOLIDATED = "consolidated"


class CommissionType(StrEnum):
    UNILEVEL = "unilevel"
    ORDER = "order"


class LeadershipCommissionType(StrEnum):
    DIFFERENTIAL = "differential"
    BREAKAWAY = "breakaway"


class TransferStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class OrderStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Currency(StrEnum):
    """Wallet balances that take part in conversions."""

    CREDIT = "credit"  # game credits
    DIAMOND = "diamond"
    AI_CREDIT = "ai_credit"
    CASH = "cash"


class CashTransactionType(StrEnum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    WITHDRAWAL_REFUND = "withdrawal_refund"
    CONVERSION_IN = "conversion_in"
    CONVERSION_OUT = "conversion_out"
    EARNINGS = "earnings"


class PayoutStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AIUsageStatus(StrEnum):
    SUCCESS = "success"
    REFUNDED = "refunded"


class EarningsSource(StrEnum):
    """Commission sources that can be consolidated into cash."""

    COMMISSIONS = "commissions"
    LEADERSHIP = "leadership"
    BINARY = "binary"
