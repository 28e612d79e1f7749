from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI

from onair.core.config import Settings, get_settings
from onair.relay.routes import build_relay_router
from onair.web.routes import build_web_router


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info("Relaying %s", settings.upstream_base_url)
        yield

    app = FastAPI(title="ONAIR", version="0.1.0", lifespan=lifespan)
    app.include_router(build_relay_router(settings=settings))
    app.include_router(build_web_router(settings=settings))

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "time": datetime.now(UTC).isoformat()}

    return app


app = create_app()
