"""
Market routes: technical analysis of Deriv instruments
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from app.api.errors import INTERNAL_ERROR_PREFIX, error_response, handle_route_error
from app.core.gemini_client import GeminiClient, get_gemini_client
from app.core.logging_config import LoggingConfig
from app.services.deriv_client import DerivClient, get_deriv_client
from app.services.market_analysis import MarketAnalysisService

router = APIRouter(prefix="/api/market", tags=["market"])
logger = LoggingConfig.get_logger(__name__)


class MarketAnalyzeRequest(BaseModel):
    """Market analysis request"""
    symbol: Optional[str] = Field(default=None, description="Deriv symbol, e.g. R_100 or frxEURUSD")
    granularity: Optional[int] = Field(default=None, ge=60, description="Candle size in seconds")
    count: Optional[int] = Field(default=None, ge=2, le=5000, description="Number of candles")
    format: Literal["json", "html"] = Field(default="json", description="Relay format")


def get_market_analysis_service(
    deriv: DerivClient = Depends(get_deriv_client),
    llm: GeminiClient = Depends(get_gemini_client),
) -> MarketAnalysisService:
    return MarketAnalysisService(deriv, llm)


@router.post("/analyze")
async def analyze_market(
    request: Optional[MarketAnalyzeRequest] = None,
    service: MarketAnalysisService = Depends(get_market_analysis_service),
):
    """LLM view of an instrument, as JSON or as an HTML fragment"""
    request = request or MarketAnalyzeRequest()
    if not request.symbol or not request.symbol.strip():
        return error_response(400, "Missing required parameters for analysis.")

    logger.info(
        "Market analysis requested",
        extra={"symbol": request.symbol, "format": request.format}
    )
    try:
        result = await service.analyze(
            request.symbol.strip(),
            granularity=request.granularity,
            count=request.count,
            response_format=request.format,
        )
    except Exception as e:
        return handle_route_error(e, "analyze market", prefix=INTERNAL_ERROR_PREFIX)

    if request.format == "html":
        return HTMLResponse(content=result)
    return result


@router.get("/candles/{symbol}")
async def get_candles(
    symbol: str,
    granularity: Optional[int] = Query(default=None, ge=60),
    count: Optional[int] = Query(default=None, ge=2, le=5000),
    service: MarketAnalysisService = Depends(get_market_analysis_service),
):
    """Candles with indicator values, no LLM call"""
    try:
        return await service.snapshot(symbol, granularity=granularity, count=count)
    except Exception as e:
        return handle_route_error(e, "fetch candles")
