"""
WanderCrew Web - FastAPI application.

Hosts the onboarding router. Authentication is Supabase JWT, validated per
request by `wandercrew.web.auth.get_current_user`.
"""

import logging

from fastapi import FastAPI

from onboarding.api import discard_wizards, router as onboarding_router
from wandercrew import __version__
from wandercrew.config import settings

logger = logging.getLogger(__name__)

app = FastAPI(title="WanderCrew", version=__version__)
app.include_router(onboarding_router)


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    logger.info("WanderCrew starting up...")
    logger.info(f"  Environment: {settings.wandercrew_env}")
    logger.info(f"  Onboarding store: {settings.onboarding_store}")
    logger.info(
        f"  Onboarding autosave: {settings.onboarding_autosave} "
        f"({settings.onboarding_autosave_interval_seconds}s)"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Drop in-memory wizards so no auto-save fires after shutdown."""
    discard_wizards()


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}
