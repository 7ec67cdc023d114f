"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn tutor_admin.main:app --reload
"""

import logging

from fastapi import FastAPI

from tutor_admin.core.config import settings
from tutor_admin.routers import admin, usage

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)

# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# admin.router: /admin/tools, /admin/dispatch, /admin/tool-call, /admin/stats
# usage.router: /ai/usage/{user_id}, /ai/interactions
app.include_router(admin.router)
app.include_router(usage.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Simple health check endpoint.

    Does NOT check store connectivity.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
