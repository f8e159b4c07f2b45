"""
Operational constants.

Technical constants used across the application: lock timeouts,
retry limits, traversal bounds and AI call parameters.
"""

# =============================================================================
# LOCK TIMEOUTS (seconds)
# =============================================================================
# Used by distributed_lock.py for Redis locks

# Short operations (single placements)
LOCK_TIMEOUT_SHORT = 30

# Medium operations (commission distribution)
LOCK_TIMEOUT_MEDIUM = 60

# Long operations (month-end rank processing)
LOCK_TIMEOUT_LONG = 300


# =============================================================================
# BLOCKING TIMEOUTS (seconds)
# =============================================================================
# How long to wait for lock acquisition

BLOCKING_TIMEOUT_SHORT = 3.0
BLOCKING_TIMEOUT_DEFAULT = 5.0


# =============================================================================
# RETRY CONFIGURATIONS
# =============================================================================

# Default retry count for most operations
DEFAULT_MAX_RETRIES = 3

# Spillover search is repeated when a concurrent placement took the slot
PLACEMENT_MAX_RETRIES = 5


# =============================================================================
# TREE TRAVERSAL BOUNDS
# =============================================================================

# Maximum levels scanned when searching for an open binary slot
BINARY_MAX_SEARCH_DEPTH = 64

# Maximum depth of the genealogy tree returned to clients
GENEALOGY_MAX_DEPTH = 7

# Upper bound for walking parent/sponsor chains (cycle guard)
CHAIN_MAX_DEPTH = 10_000


# =============================================================================
# CASH PIN
# =============================================================================

PIN_MAX_ATTEMPTS = 5
PIN_LOCK_MINUTES = 15


# =============================================================================
# DRAMATIQ TASK TIME LIMITS (milliseconds)
# =============================================================================

# Short tasks (1 minute) - single order/purchase commission runs
DRAMATIQ_TIME_LIMIT_SHORT = 60_000

# Long tasks (10 minutes) - month-end evaluation of all ranks
DRAMATIQ_TIME_LIMIT_LONG = 600_000


# =============================================================================
# AI SERVICE PARAMETERS
# =============================================================================

AI_MAX_TOKENS = 2048
AI_REQUEST_TIMEOUT = 60.0

# Pagination defaults
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
