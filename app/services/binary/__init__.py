"""
Binary network services package.

- placement_finder: spillover search
- placement_service: locked node placement with retries
- volume_processor: volume propagation, cycles and daily cap
- account_manager: additional accounts
- pending_placements: enrollment and sponsor-resolved placements
- purchase_service: package purchases
- genealogy: tree views and earnings analytics
"""

from app.services.binary.account_manager import BinaryAccountManager, DownlineSlot
from app.services.binary.genealogy import BinaryGenealogyService
from app.services.binary.pending_placements import (
    BinaryEnrollmentService,
    EnrollmentResult,
)
from app.services.binary.placement_finder import PlacementFinder
from app.services.binary.placement_service import BinaryPlacementService
from app.services.binary.purchase_service import (
    ApprovalResult,
    BinaryPurchaseService,
)
from app.services.binary.volume_processor import (
    BinaryVolumeProcessor,
    CyclePayout,
    VolumeResult,
)


__all__ = [
    "PlacementFinder",
    "BinaryPlacementService",
    "BinaryVolumeProcessor",
    "CyclePayout",
    "VolumeResult",
    "BinaryAccountManager",
    "DownlineSlot",
    "BinaryEnrollmentService",
    "EnrollmentResult",
    "BinaryPurchaseService",
    "ApprovalResult",
    "BinaryGenealogyService",
]
