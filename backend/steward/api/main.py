"""
FastAPI application entry point.

Main API server for the Steward maintainer dashboard.
"""

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from steward.api.errors import register_exception_handlers
from steward.api.schemas import HealthResponse
from steward.core.config import settings
from steward.core.logging import setup_logging
from steward.core.database import close_db
from steward.core.redis import close_redis

# Setup logging
setup_logging()

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Maintainer analytics: review sentiment, triage, mentorship and community impact",
    debug=settings.DEBUG,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.on_event("shutdown")
async def shutdown() -> None:
    """Run on application shutdown."""
    await close_db()
    await close_redis()


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


from steward.api.github_dashboard import router as github_router
from steward.api.maintainer import router as maintainer_router
from steward.api.metrics import router as metrics_router

app.include_router(github_router, prefix="/api", tags=["github"])
app.include_router(maintainer_router, prefix="/api/maintainer", tags=["maintainer"])
app.include_router(metrics_router, prefix="/api/metrics", tags=["metrics"])
