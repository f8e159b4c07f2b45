"""
Services.

Business logic layer. Subpackages are imported directly
(``app.services.binary``, ``app.services.stair_step``,
``app.services.referral``, ``app.services.wallet``).
"""

from app.services.app_settings_service import AppSettingsService
from app.services.base_service import BaseService, log_operation, transaction
from app.services.user_service import UserService


__all__ = [
    "AppSettingsService",
    "BaseService",
    "UserService",
    "log_operation",
    "transaction",
]
