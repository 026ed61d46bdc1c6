"""
Odds analysis: event prices -> best prices -> prompt -> LLM
"""
from typing import Any, Dict

from app.core.errors import EventNotFoundError
from app.core.gemini_client import GeminiClient
from app.core.logging_config import LoggingConfig
from app.services.odds_api import OddsApiClient, best_prices
from app.services.prompt_builder import ODDS_ANALYSIS_SCHEMA, build_odds_prompt

logger = LoggingConfig.get_logger(__name__)


class OddsAnalysisService:
    """Orchestrates one /api/odds/analyze request"""

    def __init__(self, odds: OddsApiClient, llm: GeminiClient):
        self.odds = odds
        self.llm = llm

    async def analyze(self, sport_key: str, event_id: str) -> Dict[str, Any]:
        event = await self.odds.get_event_odds(sport_key, event_id)
        if not event:
            raise EventNotFoundError()

        prices = best_prices(event)
        logger.info(
            "Odds collected",
            extra={
                "event_id": event_id,
                "bookmakers": len(event.get("bookmakers") or []),
                "outcomes": len(prices),
            }
        )

        prompt = build_odds_prompt(event, prices)
        analysis = await self.llm.generate_json(prompt, response_schema=ODDS_ANALYSIS_SCHEMA)
        return {
            "event": {
                "id": event.get("id"),
                "sportKey": event.get("sport_key"),
                "homeTeam": event.get("home_team"),
                "awayTeam": event.get("away_team"),
                "commenceTime": event.get("commence_time"),
            },
            "bestPrices": prices,
            "analysis": analysis,
        }
