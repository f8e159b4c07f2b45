"""
Task scheduler.

Enqueues the month-end stair-step runs and serves scheduler health
checks. Rank evaluation of the previous month runs first; reversion
follows in the same pipeline so ranks are only reverted after every
member had the chance to qualify.
"""

import asyncio
import signal

import dramatiq
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from app.config.logging import setup_logging
from app.config.settings import settings
from app.utils.datetime_utils import previous_month
from jobs.broker import broker  # noqa: F401  (sets the dramatiq broker)
from jobs.health import start_health_server, stop_health_server
from jobs.tasks.ranks import evaluate_all_ranks, process_monthly_rank_reversion


def enqueue_month_end() -> None:
    """Evaluate last month's ranks, then revert the ones that did not qualify."""
    month = previous_month().isoformat()
    dramatiq.pipeline(
        [
            evaluate_all_ranks.message(month),
            process_monthly_rank_reversion.message_with_options(
                args=(month,), pipe_ignore=True
            ),
        ]
    ).run()
    logger.info(f"Month-end rank processing enqueued for {month}")


def create_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        enqueue_month_end,
        CronTrigger(day=1, hour=0, minute=5, timezone="UTC"),
        id="month_end_ranks",
        name="Month-end stair-step evaluation and reversion",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    return scheduler


async def main() -> None:
    setup_logging(settings.log_level)

    scheduler = create_scheduler()
    scheduler.start()
    runner = await start_health_server(scheduler, port=settings.health_check_port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    logger.info("Scheduler started")
    await stop_event.wait()

    logger.info("Shutting down scheduler...")
    scheduler.shutdown(wait=False)
    await stop_health_server(runner)


if __name__ == "__main__":
    asyncio.run(main())
