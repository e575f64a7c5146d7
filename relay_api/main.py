from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from common.config import Settings, get_settings
from common.db import get_engine
from .endpoints import commands_router, health_router, stats_router, tanks_router
from .infrastructure.persistence.reading_store import SqlReadingStore
from .runtime import RelayRuntime
from .transports.websocket import router as websocket_router

logger = logging.getLogger(__name__)


def create_app(
    runtime: Optional[RelayRuntime] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the relay application.

    Without ``runtime`` the lifespan builds one on top of the SQL store named
    by the settings; tests pass their own.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        if runtime is None:
            cfg = settings or get_settings()
            engine = get_engine(cfg)
            store = SqlReadingStore(engine, table_name=cfg.readings_table)
            store.ensure_schema()
            app.state.runtime = RelayRuntime.build(store)
        else:
            app.state.runtime = runtime

        logger.info("[RELAY] Tank telemetry relay started")
        try:
            yield
        finally:
            logger.info("[RELAY] Shutting down. %s", app.state.runtime.stats)
            if engine is not None:
                engine.dispose()

    app = FastAPI(title="Tank Telemetry Relay", version="0.1.0", lifespan=lifespan)
    if runtime is not None:
        app.state.runtime = runtime

    app.include_router(health_router)
    app.include_router(tanks_router)
    app.include_router(commands_router)
    app.include_router(stats_router)
    app.include_router(websocket_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    logger.info("Server is running on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
