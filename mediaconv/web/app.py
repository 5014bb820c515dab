"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mediaconv.core.config.settings import settings
from mediaconv.core.database.connection import init_db
from mediaconv.core.logging import setup_logging
from mediaconv.web.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    settings.ensure_dirs()
    init_db()
    logger.info(f"mediaconv ready (ffmpeg: {settings.FFMPEG_BINARY}, staging: {settings.TEMP_DIR})")
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="mediaconv", version="0.1.0", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()
