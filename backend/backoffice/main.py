"""Back-office API — Main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.config import settings
from backoffice.core.middleware import RequestLoggingMiddleware

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting back-office API", env=settings.app_env)
    yield
    logger.info("Shutting down back-office API")


app = FastAPI(
    title="Back-office API",
    description="Financial back-office API with automatic cost-center assignment",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe — always returns healthy if the process is running."""
    return {"status": "healthy", "version": VERSION}


# ── API Routes ────────────────────────────────────
from backoffice.api.v1 import auto_analytics  # noqa: E402

app.include_router(auto_analytics.router, prefix="/api/v1/auto-analytics", tags=["auto-analytics"])
