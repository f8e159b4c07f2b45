"""
HTTP API application factory.
"""

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.handlers import binary, purchases, referral, stair_step, system, wallet
from api.middlewares import (
    SESSION_MAKER,
    auth_middleware,
    error_middleware,
    session_middleware,
)


def create_app(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        session_maker: Session factory (the configured database when None)
    """
    if session_maker is None:
        from app.config.database import async_session_maker

        session_maker = async_session_maker

    app = web.Application(
        middlewares=[error_middleware, session_middleware, auth_middleware]
    )
    app[SESSION_MAKER] = session_maker

    for module in (binary, purchases, stair_step, referral, wallet, system):
        module.setup_routes(app)

    return app
