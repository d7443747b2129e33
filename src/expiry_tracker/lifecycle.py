"""Lifecycle helpers wiring the daily expiry sweep into FastAPI startup."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Callable

from .notifications.notifications_service import ExpirySweeper


logger = logging.getLogger(__name__)


def seconds_until_next_run(fire_at: time, now: datetime) -> float:
    """Return the delay until the next ``fire_at`` strictly after ``now``."""

    candidate = datetime.combine(now.date(), fire_at, tzinfo=now.tzinfo)
    if candidate <= now:
        candidate += timedelta(days=1)
    return (candidate - now).total_seconds()


async def run_daily_sweep(
    *,
    sweeper: ExpirySweeper,
    shutdown_event: asyncio.Event,
    fire_at: time,
    clock: Callable[[], datetime] = datetime.now,
) -> None:
    """Fire ``sweeper`` once a day at ``fire_at`` until shutdown.

    Firings run one after another on this task, so a slow sweep delays the
    next scheduling decision instead of overlapping with it.
    """

    while not shutdown_event.is_set():
        delay = seconds_until_next_run(fire_at, clock())
        logger.info("sweep.scheduled", extra={"delay_seconds": round(delay, 1)})
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
        else:
            break

        try:
            report = await sweeper.run_once(clock())
        except Exception:
            logger.exception("Expiry sweep iteration failed")
        else:
            if report.outcomes:
                logger.info(
                    "Expiry sweep for %s delivered %s alerts, %s failed",
                    report.target_date.isoformat(),
                    report.delivered,
                    report.failed,
                )


__all__ = [
    "run_daily_sweep",
    "seconds_until_next_run",
]
