"""
Football routes: browse countries/leagues/fixtures and analyze a fixture
"""
from typing import Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.errors import INTERNAL_ERROR_PREFIX, error_response, handle_route_error
from app.core.gemini_client import GeminiClient, get_gemini_client
from app.core.logging_config import LoggingConfig
from app.services.football_api import FootballApiClient, get_football_client
from app.services.match_analysis import MatchAnalysisService

router = APIRouter(prefix="/api", tags=["football"])
logger = LoggingConfig.get_logger(__name__)


class AnalyzeRequest(BaseModel):
    """Fixture analysis request"""
    fixtureId: Optional[Union[str, int]] = Field(default=None, description="apifootball match_id")
    leagueId: Optional[Union[str, int]] = Field(default=None, description="apifootball league_id")


def get_match_analysis_service(
    football: FootballApiClient = Depends(get_football_client),
    llm: GeminiClient = Depends(get_gemini_client),
) -> MatchAnalysisService:
    return MatchAnalysisService(football, llm)


@router.get("/countries")
async def list_countries(football: FootballApiClient = Depends(get_football_client)):
    """Countries that have football leagues"""
    try:
        return await football.get_countries()
    except Exception as e:
        return handle_route_error(e, "fetch countries")


@router.get("/leagues/{country_id}")
async def list_leagues(country_id: str, football: FootballApiClient = Depends(get_football_client)):
    """Leagues of one country"""
    try:
        return await football.get_leagues(country_id)
    except Exception as e:
        return handle_route_error(e, "fetch leagues")


@router.get("/fixtures/{league_id}")
async def list_fixtures(league_id: str, football: FootballApiClient = Depends(get_football_client)):
    """Upcoming (not started) fixtures of a league"""
    try:
        return await football.get_upcoming_fixtures(league_id)
    except Exception as e:
        return handle_route_error(e, "fetch fixtures")


@router.post("/analyze")
async def analyze_fixture(
    request: Optional[AnalyzeRequest] = None,
    service: MatchAnalysisService = Depends(get_match_analysis_service),
):
    """
    Betting analysis for one fixture

    Returns the model's JSON (predictedOutcome, recommendedBet,
    confidenceScore) unchanged.
    """
    request = request or AnalyzeRequest()
    if not request.fixtureId or not request.leagueId:
        return error_response(400, "Missing required parameters for analysis.")

    logger.info(
        "Fixture analysis requested",
        extra={"fixture_id": str(request.fixtureId), "league_id": str(request.leagueId)}
    )
    try:
        return await service.analyze(str(request.fixtureId), str(request.leagueId))
    except Exception as e:
        return handle_route_error(e, "analyze fixture", prefix=INTERNAL_ERROR_PREFIX)
