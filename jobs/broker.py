"""
Dramatiq broker configuration.

Redis-based message broker for commission and rank tasks.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import (
    AgeLimit,
    Callbacks,
    CurrentMessage,
    Pipelines,
    Retries,
    ShutdownNotifications,
    TimeLimit,
)
from loguru import logger

from app.config.settings import settings
from app.utils.redis_utils import get_redis_url_masked

# Replaces dramatiq's default stack; each middleware appears once
# ShutdownNotifications: workers finish month-end runs before exiting
# Retries: exponential backoff for failed commission runs
MIDDLEWARE = [
    AgeLimit(),
    TimeLimit(),
    ShutdownNotifications(),
    Callbacks(),
    Pipelines(),
    CurrentMessage(),
    Retries(
        max_retries=3,
        min_backoff=1000,  # 1 second
        max_backoff=60000,  # 1 minute
    ),
]

redis_broker = RedisBroker(
    host=settings.redis_host,
    port=settings.redis_port,
    password=settings.redis_password if settings.redis_password else None,
    db=settings.redis_db,
    middleware=MIDDLEWARE,
)

dramatiq.set_broker(redis_broker)

broker = redis_broker

logger.info(f"Dramatiq broker initialized: {get_redis_url_masked()}")
