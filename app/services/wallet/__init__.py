"""
Wallet services module.

Currency conversion, cash wallet operations and earnings consolidation.
"""

from app.services.wallet.cash_wallet_service import (
    CashWalletService,
    validate_pin_format,
    wallet_balances,
)
from app.services.wallet.conversion_service import (
    ConversionResult,
    ConversionService,
)
from app.services.wallet.earnings_consolidation import (
    ConsolidationResult,
    EarningsConsolidationService,
)


__all__ = [
    "CashWalletService",
    "ConsolidationResult",
    "ConversionResult",
    "ConversionService",
    "EarningsConsolidationService",
    "validate_pin_format",
    "wallet_balances",
]
