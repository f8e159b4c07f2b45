"""
HTTP API entry point.
"""

from aiohttp import web
from loguru import logger

from api.app import create_app
from app.config.database import async_engine
from app.config.logging import setup_logging
from app.config.settings import settings


async def _dispose_engine(app: web.Application) -> None:
    await async_engine.dispose()
    logger.info("Database connections closed")


def main() -> None:
    setup_logging(settings.log_level)
    app = create_app()
    app.on_cleanup.append(_dispose_engine)
    logger.info(f"Starting API on {settings.api_host}:{settings.api_port}")
    web.run_app(
        app,
        host=settings.api_host,
        port=settings.api_port,
        print=None,
    )


if __name__ == "__main__":
    main()
