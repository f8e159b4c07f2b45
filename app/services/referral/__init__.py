"""
Referral services module.

Sponsor chain queries, unilevel and order commissions, upline transfers.
"""

from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.order_commission_processor import (
    OrderCommissionProcessor,
    order_commission_pool,
)
from app.services.referral.unilevel_distributor import (
    ProcessResult,
    UnilevelDistributor,
)
from app.services.referral.upline_transfer_service import UplineTransferService


__all__ = [
    "OrderCommissionProcessor",
    "ProcessResult",
    "ReferralChainManager",
    "UnilevelDistributor",
    "UplineTransferService",
    "order_commission_pool",
]
