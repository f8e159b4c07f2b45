"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.ai_usage import AICreditUsage
from app.models.app_setting import AppSetting
from app.models.base import Base

# Binary network
from app.models.binary_commission import (
    BinaryAutoReplenish,
    BinaryCommission,
    BinaryDailyEarning,
)
from app.models.binary_node import BinaryNode
from app.models.binary_pending_placement import BinaryPendingPlacement
from app.models.binary_purchase import BinaryPackagePurchase

# Commissions
from app.models.commission import Commission, LeadershipCommission
from app.models.enums import (
    AIUsageStatus,
    BinaryLeg,
    CashTransactionType,
    CommissionStatus,
    CommissionType,
    Currency,
    EarningsSource,
    LeadershipCommissionType,
    OrderStatus,
    PayoutStatus,
    PendingPlacementStatus,
    PlacementMode,
    PurchaseStatus,
    TransferStatus,
)
from app.models.order import Order, OrderItem

# Stair-step plan
from app.models.stair_step import (
    AffiliateCurrentRank,
    AffiliateMonthlySales,
    AffiliateRankHistory,
    StairStepConfig,
)
from app.models.upline_transfer_request import UplineTransferRequest

# Core Models
from app.models.user import User
from app.models.wallet import CashTransaction, PayoutRequest, Wallet


__all__ = [
    # Base
    "Base",
    # Core
    "User",
    "AppSetting",
    # Binary
    "BinaryNode",
    "BinaryPendingPlacement",
    "BinaryPackagePurchase",
    "BinaryCommission",
    "BinaryDailyEarning",
    "BinaryAutoReplenish",
    # Stair-step
    "StairStepConfig",
    "AffiliateCurrentRank",
    "AffiliateMonthlySales",
    "AffiliateRankHistory",
    # Commissions
    "Commission",
    "LeadershipCommission",
    "Order",
    "OrderItem",
    "UplineTransferRequest",
    # Wallets
    "Wallet",
    "CashTransaction",
    "PayoutRequest",
    "AICreditUsage",
    # Enums
    "AIUsageStatus",
    "BinaryLeg",
    "CashTransactionType",
    "CommissionStatus",
    "CommissionType",
    "Currency",
    "EarningsSource",
    "LeadershipCommissionType",
    "OrderStatus",
    "PayoutStatus",
    "PendingPlacementStatus",
    "PlacementMode",
    "PurchaseStatus",
    "TransferStatus",
]
