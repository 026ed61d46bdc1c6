"""
Health check endpoints
"""
from fastapi import APIRouter

from app.core.config import get_settings
from app.core.logging_config import LoggingConfig
from app.utils.datetime_utils import utc_now_iso

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(tags=["health"])

VERSION = "0.1.0"


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": utc_now_iso(),
        "service": settings.app_name,
    }


@router.get("/health/detailed")
async def detailed_health_check():
    """
    Configuration status of every upstream and the LLM endpoint

    Nothing is called over the network; a component is "configured" when
    its API key is present.
    """
    settings = get_settings()
    components = {
        "football_api": {
            "status": "configured" if settings.football_api_key else "missing_api_key",
            "url": settings.football_api_url,
        },
        "odds_api": {
            "status": "configured" if settings.odds_api_key else "missing_api_key",
            "url": settings.odds_api_url,
        },
        "deriv_api": {
            "status": "configured",
            "url": settings.deriv_ws_url,
        },
        "llm": {
            "status": "configured" if settings.gemini_api_key else "missing_api_key",
            "model": settings.gemini_model,
        },
    }

    degraded = any(c["status"] != "configured" for c in components.values())
    return {
        "status": "degraded" if degraded else "healthy",
        "timestamp": utc_now_iso(),
        "service": settings.app_name,
        "version": VERSION,
        "environment": settings.app_env,
        "components": components,
    }


@router.get("/health/liveness")
async def liveness_check():
    """
    Liveness check - is the service alive?

    Returns:
        dict: Liveness status
    """
    return {
        "status": "alive",
        "timestamp": utc_now_iso()
    }
