"""
Scheduler health endpoints.

Small aiohttp app exposing whether the month-end scheduler runs and
when each job fires next.
"""

import asyncio

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

SCHEDULER_KEY = web.AppKey("scheduler", AsyncIOScheduler)


def job_summary(scheduler: AsyncIOScheduler) -> list[dict]:
    return [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": (
                job.next_run_time.isoformat() if job.next_run_time else None
            ),
        }
        for job in scheduler.get_jobs()
    ]


async def health_handler(request: web.Request) -> web.Response:
    """Scheduler state and upcoming runs (503 when stopped)."""
    scheduler = request.app[SCHEDULER_KEY]
    if not scheduler.running:
        return web.json_response(
            {"status": "stopped", "scheduler_running": False}, status=503
        )

    jobs = job_summary(scheduler)
    return web.json_response(
        {
            "status": "healthy",
            "scheduler_running": True,
            "jobs_count": len(jobs),
            "jobs": jobs,
        }
    )


async def liveness_handler(request: web.Request) -> web.Response:
    return web.json_response({"status": "alive"})


def create_health_app(scheduler: AsyncIOScheduler) -> web.Application:
    """Build the health app for ``scheduler``."""
    app = web.Application()
    app[SCHEDULER_KEY] = scheduler
    app.router.add_get("/health", health_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app


async def start_health_server(
    scheduler: AsyncIOScheduler,
    host: str = "0.0.0.0",
    port: int = 8081,
) -> web.AppRunner:
    """
    Serve the health app.

    Returns:
        AppRunner to pass to stop_health_server
    """
    runner = web.AppRunner(create_health_app(scheduler))
    await runner.setup()
    await web.TCPSite(runner, host, port).start()
    logger.info(f"Scheduler health server listening on {host}:{port}")
    return runner


async def stop_health_server(runner: web.AppRunner, timeout: int = 5) -> None:
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
    except TimeoutError:
        logger.warning(f"Health server cleanup timed out after {timeout}s")
    else:
        logger.info("Scheduler health server stopped")
