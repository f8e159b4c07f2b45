#!/usr/bin/env python3
"""Initialize database tables and seed the default stair-step ladder."""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from app.config.database import async_engine, async_session_maker
from app.models import Base
from app.services.stair_step import StairStepConfigManager

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")

# (name, commission %, monthly quota, breakaway %)
DEFAULT_STEPS = [
    ("Associate", Decimal("5"), Decimal("500"), Decimal("0")),
    ("Builder", Decimal("10"), Decimal("2000"), Decimal("0")),
    ("Manager", Decimal("15"), Decimal("5000"), Decimal("0")),
    ("Director", Decimal("20"), Decimal("10000"), Decimal("3")),
]


async def seed_stair_steps() -> None:
    """Add the default ladder when no step exists yet."""
    async with async_session_maker() as session:
        manager = StairStepConfigManager(session)
        if await manager.list_steps():
            logger.info("Stair-step ladder already configured, skipping seed")
            return
        for name, rate, quota, breakaway in DEFAULT_STEPS:
            await manager.add_step(
                commission_percentage=rate,
                sales_quota=quota,
                step_name=name,
                breakaway_percentage=breakaway,
            )
        logger.info(f"Seeded {len(DEFAULT_STEPS)} stair steps")


async def init_database() -> None:
    """Create all database tables."""
    logger.info("Connecting to database...")

    async with async_engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(
            Base.metadata.create_all,
            checkfirst=True
        )

    await seed_stair_steps()
    await async_engine.dispose()
    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
