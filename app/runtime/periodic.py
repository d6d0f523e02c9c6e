# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Periodic sweep timer.

An asyncio task bound to the FastAPI lifespan that runs the expiry sweep
every N seconds. The pass itself is synchronous (store + HTTP email calls),
so it runs in a worker thread. Exceptions are logged and the loop keeps going.
"""

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI

from app.services.sweep_service import SweepService

_STATE_KEY = "sweep_timer_task"


async def run_sweep_loop(
    service: SweepService,
    interval_seconds: float,
    wait_first: bool,
    logger: logging.Logger,
) -> None:
    if wait_first:
        await asyncio.sleep(interval_seconds)
    while True:
        try:
            report = await asyncio.to_thread(service.run_pass)
            if not report.ok:
                logger.warning("Scheduled sweep failed: %s", report.error)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Scheduled sweep crashed: %s", exc)
        await asyncio.sleep(interval_seconds)


def start_sweep_timer(
    app: FastAPI,
    service: SweepService,
    interval_seconds: float,
    wait_first: bool,
    logger: logging.Logger,
) -> asyncio.Task:
    """Start the timer task and register it on app.state."""
    task = asyncio.create_task(
        run_sweep_loop(service, interval_seconds, wait_first, logger),
        name="expiry-sweep",
    )
    setattr(app.state, _STATE_KEY, task)
    logger.info("Expiry sweep scheduled every %.0f seconds", interval_seconds)
    return task


async def stop_sweep_timer(app: FastAPI, logger: logging.Logger) -> None:
    task: Optional[asyncio.Task] = getattr(app.state, _STATE_KEY, None)
    if task is None:
        return
    task.cancel()
    try:
        await asyncio.gather(task, return_exceptions=True)
    finally:
        setattr(app.state, _STATE_KEY, None)
        logger.info("Expiry sweep timer stopped")
