"""
Exception handling utilities.

Defines the domain exception hierarchy raised by services and mapped
to HTTP responses by the API layer.
"""

from sqlalchemy.exc import OperationalError


class NetworkError(Exception):
    """Base class for all affiliate network domain errors."""

    default_message = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(NetworkError):
    """Input or configuration value is invalid."""

    default_message = "Invalid input"


class NotFoundError(NetworkError):
    """Requested entity does not exist (or is not visible to the caller)."""

    default_message = "Not found"


class PermissionDeniedError(NetworkError):
    """Caller is not allowed to perform the operation."""

    default_message = "Permission denied"


class ConflictError(NetworkError):
    """Operation conflicts with the current state."""

    default_message = "Conflict with current state"


class LegOccupiedError(ConflictError):
    """Binary leg already has a child."""

    default_message = "Leg is already occupied"


class AccountLimitError(ConflictError):
    """User reached the maximum number of binary accounts."""

    default_message = "Maximum number of binary accounts reached"


class PlacementError(NetworkError):
    """No open position could be found or claimed in the binary tree."""

    default_message = "Could not place account in the binary tree"


class InsufficientBalanceError(NetworkError):
    """Wallet balance is lower than the requested amount."""

    default_message = "Insufficient balance"


class ConversionDisabledError(NetworkError):
    """Conversion pair is switched off by an admin."""

    default_message = "Conversion is disabled"


class PinLockedError(PermissionDeniedError):
    """Cash wallet is locked after too many wrong PIN attempts."""

    default_message = "Wallet is locked after too many wrong PIN attempts"


class ServiceUnavailableError(NetworkError):
    """External provider is not configured or not reachable."""

    default_message = "Service temporarily unavailable"


# Exception categories based on handling strategy

# Must log but can continue - non-critical failures
MUST_LOG = (
    OperationalError,  # Database errors
    ServiceUnavailableError,  # AI provider errors
)

# Must raise - critical validation issues
MUST_RAISE = (
    ValueError,        # Validation errors
    TypeError,         # Type errors in critical paths
    NetworkError,      # Domain errors always reach the caller
)


def must_log(exc: Exception) -> bool:
    """
    Check if exception must be logged.

    Args:
        exc: Exception to check

    Returns:
        True if exception must be logged
    """
    return isinstance(exc, MUST_LOG)


def must_raise(exc: Exception) -> bool:
    """
    Check if exception must be raised.

    Args:
        exc: Exception to check

    Returns:
        True if exception must be raised
    """
    return isinstance(exc, MUST_RAISE)
