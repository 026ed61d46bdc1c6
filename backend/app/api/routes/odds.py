"""
Odds routes: bookmaker prices and value-bet analysis
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.errors import INTERNAL_ERROR_PREFIX, error_response, handle_route_error
from app.core.gemini_client import GeminiClient, get_gemini_client
from app.core.logging_config import LoggingConfig
from app.services.odds_analysis import OddsAnalysisService
from app.services.odds_api import OddsApiClient, get_odds_client

router = APIRouter(prefix="/api/odds", tags=["odds"])
logger = LoggingConfig.get_logger(__name__)


class OddsAnalyzeRequest(BaseModel):
    """Odds analysis request"""
    sportKey: Optional[str] = Field(default=None, description="Provider sport key, e.g. soccer_epl")
    eventId: Optional[str] = Field(default=None, description="Provider event id")


def get_odds_analysis_service(
    odds: OddsApiClient = Depends(get_odds_client),
    llm: GeminiClient = Depends(get_gemini_client),
) -> OddsAnalysisService:
    return OddsAnalysisService(odds, llm)


@router.get("/sports")
async def list_sports(odds: OddsApiClient = Depends(get_odds_client)):
    """Sports currently in season"""
    try:
        return await odds.get_sports()
    except Exception as e:
        return handle_route_error(e, "fetch sports")


@router.post("/analyze")
async def analyze_odds(
    request: Optional[OddsAnalyzeRequest] = None,
    service: OddsAnalysisService = Depends(get_odds_analysis_service),
):
    """Best prices for an event plus the model's value-bet pick"""
    request = request or OddsAnalyzeRequest()
    if not request.sportKey or not request.eventId:
        return error_response(400, "Missing required parameters for analysis.")

    logger.info(
        "Odds analysis requested",
        extra={"sport_key": request.sportKey, "event_id": request.eventId}
    )
    try:
        return await service.analyze(request.sportKey, request.eventId)
    except Exception as e:
        return handle_route_error(e, "analyze odds", prefix=INTERNAL_ERROR_PREFIX)


@router.get("/{sport_key}")
async def list_odds(sport_key: str, odds: OddsApiClient = Depends(get_odds_client)):
    """Upcoming events of a sport with bookmaker prices"""
    try:
        return await odds.get_odds(sport_key)
    except Exception as e:
        return handle_route_error(e, "fetch odds")
