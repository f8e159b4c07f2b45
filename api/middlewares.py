"""
API middlewares.

Caller identification, admin checks, per-request database sessions and
mapping of domain exceptions to JSON error responses.
"""

from aiohttp import web
from loguru import logger

from app.services.user_service import UserService
from app.utils.exceptions import (
    ConflictError,
    ConversionDisabledError,
    InsufficientBalanceError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    PlacementError,
    ServiceUnavailableError,
    ValidationError,
    must_log,
)

USER_HEADER = "X-User-Id"
ADMIN_PREFIX = "/api/admin/"

# (path, method) pairs reachable without a caller id
PUBLIC_ROUTES = {
    ("/health", "GET"),
    ("/api/users", "POST"),
}

# Checked in order; subclasses before their parents
ERROR_STATUS: list[tuple[type[NetworkError], int]] = [
    (ValidationError, 400),
    (PermissionDeniedError, 403),
    (ConversionDisabledError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PlacementError, 409),
    (InsufficientBalanceError, 422),
    (ServiceUnavailableError, 503),
]

SESSION_MAKER = web.AppKey("session_maker", object)


def status_for(error: NetworkError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 400


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except NetworkError as e:
        status = status_for(e)
        if must_log(e):
            logger.warning(f"{request.method} {request.path} -> {status}: {e.message}")
        return web.json_response({"error": e.message}, status=status)
    except Exception as e:
        logger.exception(f"Unhandled API error on {request.path}: {e}")
        return web.json_response({"error": "Internal server error"}, status=500)


@web.middleware
async def session_middleware(request: web.Request, handler):
    session_maker = request.app[SESSION_MAKER]
    async with session_maker() as session:
        request["session"] = session
        return await handler(request)


@web.middleware
async def auth_middleware(request: web.Request, handler):
    if (request.path, request.method) in PUBLIC_ROUTES:
        return await handler(request)

    raw = request.headers.get(USER_HEADER, "").strip()
    if not raw.isdigit():
        return web.json_response(
            {"error": f"Missing or invalid {USER_HEADER} header"}, status=401
        )
    request["user_id"] = int(raw)

    if request.path.startswith(ADMIN_PREFIX):
        await UserService(request["session"]).require_admin(request["user_id"])

    return await handler(request)
