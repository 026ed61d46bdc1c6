"""
the-odds-api.com (v4) client and best-price comparison across bookmakers
"""
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.core.config import get_settings
from app.core.errors import ConfigurationError, UpstreamError
from app.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

PROVIDER = "the-odds-api"


def best_prices(event: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Highest decimal price per market outcome across all bookmakers

    Outcomes are keyed by (market, name, point) so totals lines stay apart.
    Ties keep the first bookmaker listed by the provider.
    """
    best: Dict[Tuple[str, str, Any], Dict[str, Any]] = {}
    for bookmaker in event.get("bookmakers") or []:
        title = bookmaker.get("title") or bookmaker.get("key")
        for market in bookmaker.get("markets") or []:
            for outcome in market.get("outcomes") or []:
                price = outcome.get("price")
                if not isinstance(price, (int, float)) or price <= 0:
                    continue
                key = (market.get("key"), outcome.get("name"), outcome.get("point"))
                if key not in best or price > best[key]["price"]:
                    best[key] = {
                        "market": market.get("key"),
                        "outcome": outcome.get("name"),
                        "point": outcome.get("point"),
                        "price": float(price),
                        "bookmaker": title,
                        "impliedProbability": round(1 / price, 4),
                    }
    return list(best.values())


class OddsApiClient:
    """REST client for sports, event odds and single-event odds"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = None
        self._transport = transport

    @property
    def settings(self):
        """Lazy load settings"""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def _odds_params(self) -> Dict[str, str]:
        return {
            "regions": self.settings.odds_regions,
            "markets": self.settings.odds_markets,
            "oddsFormat": "decimal",
        }

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        api_key = self.settings.odds_api_key
        if not api_key:
            raise ConfigurationError("ODDS_API_KEY is not configured.")

        query = dict(params or {})
        query["apiKey"] = api_key
        url = f"{self.settings.odds_api_url.rstrip('/')}/{path.lstrip('/')}"

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.upstream_timeout_seconds,
                transport=self._transport,
            ) as client:
                request = client.build_request("GET", url, params=query)
                logger.info(f"Fetching from: {request.url}")
                response = await client.send(request)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Odds API request failed: {e}", provider=PROVIDER)

        remaining = response.headers.get("x-requests-remaining")
        if remaining is not None:
            logger.debug("Odds API quota", extra={"requests_remaining": remaining})
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response):
        if response.status_code >= 400:
            raise UpstreamError(
                f"Odds API error! Status: {response.status_code}, Message: {response.text}",
                provider=PROVIDER,
                upstream_status=response.status_code,
            )

    async def get_sports(self) -> List[Dict[str, Any]]:
        response = await self._get("sports")
        self._raise_for_status(response)
        return [
            {"key": s.get("key"), "title": s.get("title"), "group": s.get("group")}
            for s in response.json()
            if s.get("active", True)
        ]

    async def get_odds(self, sport_key: str) -> List[Dict[str, Any]]:
        response = await self._get(f"sports/{sport_key}/odds", self._odds_params())
        self._raise_for_status(response)
        return response.json()

    async def get_event_odds(self, sport_key: str, event_id: str) -> Optional[Dict[str, Any]]:
        """One event with its bookmakers; None when the provider does not know it"""
        response = await self._get(
            f"sports/{sport_key}/events/{event_id}/odds",
            self._odds_params(),
        )
        if response.status_code in (404, 422):
            return None
        self._raise_for_status(response)
        return response.json()


# Global client instance
_odds_client: Optional[OddsApiClient] = None


def get_odds_client() -> OddsApiClient:
    """Get global odds API client instance"""
    global _odds_client
    if _odds_client is None:
        _odds_client = OddsApiClient()
    return _odds_client
