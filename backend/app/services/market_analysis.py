"""
Market analysis: Deriv candles -> indicators -> prompt -> LLM -> JSON or HTML
"""
from typing import Any, Dict, Optional

from app.core.config import get_settings
from app.core.gemini_client import GeminiClient
from app.core.logging_config import LoggingConfig
from app.services.deriv_client import DerivClient, frame_to_records
from app.services.indicators import IndicatorSettings, compute_indicators, summarise_trend
from app.services.prompt_builder import MARKET_ANALYSIS_SCHEMA, build_market_prompt

logger = LoggingConfig.get_logger(__name__)

RESPONSE_FORMATS = ("json", "html")


class MarketAnalysisService:
    """Orchestrates one /api/market/analyze request"""

    def __init__(
        self,
        deriv: DerivClient,
        llm: GeminiClient,
        indicator_settings: Optional[IndicatorSettings] = None
    ):
        self.deriv = deriv
        self.llm = llm
        self.indicator_settings = indicator_settings or IndicatorSettings()
        self.settings = get_settings()

    async def snapshot(
        self,
        symbol: str,
        granularity: Optional[int] = None,
        count: Optional[int] = None
    ) -> Dict[str, Any]:
        """Candles plus the latest indicator values, without calling the LLM"""
        granularity = granularity or self.settings.deriv_granularity
        frame = await self.deriv.fetch_candles(symbol, count=count, granularity=granularity)
        indicators = compute_indicators(frame, self.indicator_settings)
        return {
            "symbol": symbol,
            "granularity": granularity,
            "candles": frame_to_records(frame),
            "indicators": indicators,
            "readings": summarise_trend(indicators, self.indicator_settings),
        }

    async def analyze(
        self,
        symbol: str,
        granularity: Optional[int] = None,
        count: Optional[int] = None,
        response_format: str = "json"
    ) -> Any:
        """
        Run the full pipeline

        Returns:
            str (HTML fragment) when response_format is "html", otherwise a
            dict with the model's JSON under "analysis" and the indicator
            snapshot it was given.
        """
        if response_format not in RESPONSE_FORMATS:
            raise ValueError(f"Unsupported response format: {response_format}")

        data = await self.snapshot(symbol, granularity=granularity, count=count)
        prompt = build_market_prompt(
            symbol=symbol,
            granularity=data["granularity"],
            candles=data["candles"],
            indicators=data["indicators"],
            trend=data["readings"],
            response_format=response_format,
        )

        logger.info(
            "Market snapshot ready",
            extra={"symbol": symbol, "candles": len(data["candles"]), "format": response_format}
        )

        if response_format == "html":
            return await self.llm.generate_html(prompt)

        analysis = await self.llm.generate_json(prompt, response_schema=MARKET_ANALYSIS_SCHEMA)
        return {
            "symbol": symbol,
            "granularity": data["granularity"],
            "indicators": data["indicators"],
            "analysis": analysis,
        }
