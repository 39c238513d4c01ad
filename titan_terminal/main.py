"""
FastAPI Main Application
Composes the position store and the simulated market stream
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from titan_terminal.config import settings
from titan_terminal.core.logging import setup_logging
from titan_terminal.realtime.runtime import TerminalRuntime
from titan_terminal.api.routes import currency, health, market_data, portfolio

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Builds the runtime on startup and tears the stream down on shutdown
    """
    logger.info("=" * 60)
    logger.info("Starting Titan Terminal (%s)", settings.APP_ENV)
    logger.info("=" * 60)

    runtime = TerminalRuntime(settings)
    await runtime.start()
    app.state.runtime = runtime
    status = runtime.get_status()
    logger.info("Positions loaded: %d", len(runtime.store))
    logger.info("Storage backend: %s", settings.STORAGE_BACKEND)
    logger.info("Market stream: %s", status["state"])
    if status["storage_warning"]:
        logger.warning("Storage degraded: %s", status["storage_warning"])

    yield

    logger.info("Shutting down Titan Terminal...")
    await runtime.stop()
    app.state.runtime = None
    logger.info("Shutdown complete")


app = FastAPI(
    title="Titan Terminal",
    description="Portfolio tracking with a simulated live market feed",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
app.include_router(market_data.router, prefix="/api/v1/market", tags=["Market Data"])
app.include_router(currency.router, prefix="/api/v1/currencies", tags=["Currencies"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "titan_terminal.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
