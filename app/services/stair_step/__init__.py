"""
Stair-step services module.

Step configuration, sales tracking, rank qualification, leadership
status and stair-step commissions.
"""

from app.services.stair_step.commission_distributor import (
    DistributionResult,
    StairStepCommissionDistributor,
)
from app.services.stair_step.config_manager import (
    StairStepConfigManager,
    validate_step_fields,
)
from app.services.stair_step.leadership import LeadershipService
from app.services.stair_step.rank_manager import (
    RankEvaluation,
    RankManager,
    find_qualified_step,
)
from app.services.stair_step.sales_tracker import SalesTracker


__all__ = [
    "DistributionResult",
    "LeadershipService",
    "RankEvaluation",
    "RankManager",
    "SalesTracker",
    "StairStepCommissionDistributor",
    "StairStepConfigManager",
    "find_qualified_step",
    "validate_step_fields",
]
