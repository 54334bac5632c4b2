"""FastAPI application entry point (webhook mode)."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from couchpotato_bot.config import settings
from couchpotato_bot.mock_catalog.router import router as mock_catalog_router
from couchpotato_bot.webhook.handler import bot
from couchpotato_bot.webhook.handler import router as webhook_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    await bot.startup()
    sweeper = asyncio.create_task(
        bot.session_manager.run_sweeper(settings.session_check_period_seconds)
    )
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    logger.info("Shutting down %s …", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Telegram bot for searching and requesting movies from CouchPotato",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(webhook_router)
if settings.enable_mock_catalog:
    app.include_router(mock_catalog_router)


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "active_sessions": bot.session_manager.active_count,
    }


def serve() -> None:
    """Run the webhook server with uvicorn."""
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
