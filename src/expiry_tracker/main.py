"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers
from .lifecycle import run_daily_sweep
from .logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    if config is None:
        load_dotenv(".env.local")
        load_dotenv(".env", override=False)
    cfg = config or load_config()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await _startup_sweep()
        try:
            yield
        finally:
            await _shutdown_sweep()

    app = FastAPI(title="Grocery Expiry Tracker", lifespan=lifespan)
    include_routers(app, cfg)
    app.state.sweep_task = None
    app.state.sweep_shutdown_event = None

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    async def _startup_sweep() -> None:
        if getattr(app.state, "disable_sweep", False) or not cfg.sweep.enabled:
            logger.info("Expiry sweep startup skipped: disabled")
            return
        if not cfg.sweep.targets:
            logger.info("Expiry sweep startup skipped: no notification targets configured")
            return
        shutdown_event = asyncio.Event()
        task = asyncio.create_task(
            run_daily_sweep(
                sweeper=app.state.expiry_sweeper,
                shutdown_event=shutdown_event,
                fire_at=cfg.sweep.fire_at,
            ),
            name="expiry-daily-sweep",
        )
        app.state.sweep_task = task
        app.state.sweep_shutdown_event = shutdown_event

    async def _shutdown_sweep() -> None:
        shutdown_event = getattr(app.state, "sweep_shutdown_event", None)
        if shutdown_event is not None:
            shutdown_event.set()
        task: asyncio.Task[None] | None = getattr(app.state, "sweep_task", None)
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        app.state.sweep_task = None
        app.state.sweep_shutdown_event = None

    return app


def run() -> None:
    """Serve the API on ``LISTEN_PORT``."""
    load_dotenv(".env.local")
    load_dotenv(".env", override=False)
    config = load_config()
    uvicorn.run(create_app(config), host="0.0.0.0", port=config.listen_port)


if __name__ == "__main__":
    run()
