"""
apifootball.com (v3) client: countries, leagues, fixtures and match data
"""
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import get_settings
from app.core.errors import ConfigurationError, UpstreamError
from app.core.logging_config import LoggingConfig
from app.utils.datetime_utils import date_window

logger = LoggingConfig.get_logger(__name__)

PROVIDER = "apifootball"


class FootballApiClient:
    """
    Thin wrapper around the single-endpoint apifootball.com API.
    Every call is selected by the `action` query parameter.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = None
        self._transport = transport

    @property
    def settings(self):
        """Lazy load settings"""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def fetch(self, params: Dict[str, Any]) -> Any:
        """
        Call the API with the given parameters

        Returns:
            Decoded JSON payload; `[]` when the provider answers with a
            single "not found" string.

        Raises:
            UpstreamError: non-2xx status or an error object in the body
        """
        api_key = self.settings.football_api_key
        if not api_key:
            raise ConfigurationError("FOOTBALL_API_KEY is not configured.")

        query = {k: v for k, v in params.items() if v is not None}
        query["APIkey"] = api_key

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.upstream_timeout_seconds,
                transport=self._transport,
            ) as client:
                request = client.build_request("GET", self.settings.football_api_url, params=query)
                logger.info(f"Fetching from: {request.url}")
                response = await client.send(request)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Football API request failed: {e}", provider=PROVIDER)

        if response.status_code >= 400:
            raise UpstreamError(
                f"Football API error! Status: {response.status_code}, Message: {response.text}",
                provider=PROVIDER,
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise UpstreamError("Football API returned a non-JSON body.", provider=PROVIDER)

        if isinstance(data, dict) and data.get("error"):
            logger.error(
                "Football API returned an error",
                extra={"upstream_error": data.get("error"), "upstream_message": data.get("message")}
            )
            raise UpstreamError(
                f"Football API Error: {data.get('message') or data.get('error')}",
                provider=PROVIDER,
            )

        if isinstance(data, list) and len(data) == 1 and isinstance(data[0], str):
            return []

        return data

    async def fetch_or_none(self, params: Dict[str, Any]) -> Any:
        """Same as fetch() but logs failures and returns None"""
        try:
            return await self.fetch(params)
        except ConfigurationError:
            raise
        except UpstreamError as e:
            logger.error(
                f"An error occurred during API fetch: {e.message}",
                extra={"action": params.get("action")}
            )
            return None

    async def get_countries(self) -> List[Dict[str, Any]]:
        countries = await self.fetch({"action": "get_countries"})
        return [
            {"id": c.get("country_id"), "name": c.get("country_name")}
            for c in _as_list(countries)
        ]

    async def get_leagues(self, country_id: str) -> List[Dict[str, Any]]:
        leagues = await self.fetch({"action": "get_leagues", "country_id": country_id})
        return [
            {"id": league.get("league_id"), "name": league.get("league_name")}
            for league in _as_list(leagues)
        ]

    async def get_upcoming_fixtures(
        self,
        league_id: str,
        today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """Fixtures of a league that have not started, from today over the lookahead window"""
        from_date, to_date = date_window(
            days_ahead=self.settings.fixture_lookahead_days,
            today=today,
        )
        fixtures = await self.fetch({
            "action": "get_events",
            "league_id": league_id,
            "from": from_date,
            "to": to_date,
        })

        return [
            fixture_summary(fixture)
            for fixture in _as_list(fixtures)
            if not fixture.get("match_status")
        ]

    async def get_recent_events(
        self,
        team_id: str,
        today: Optional[date] = None
    ) -> Optional[List[Dict[str, Any]]]:
        from_date, to_date = date_window(
            days_back=self.settings.form_lookback_days,
            today=today,
        )
        return await self.fetch_or_none({
            "action": "get_events",
            "from": from_date,
            "to": to_date,
            "team_id": team_id,
        })


def fixture_summary(fixture: Dict[str, Any]) -> Dict[str, Any]:
    home = fixture.get("match_hometeam_name")
    away = fixture.get("match_awayteam_name")
    return {
        "id": fixture.get("match_id"),
        "leagueId": fixture.get("league_id"),
        "name": f"{home} vs {away}",
        "homeTeamName": home,
        "awayTeamName": away,
        "date": fixture.get("match_date"),
    }


def _as_list(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


# Global client instance
_football_client: Optional[FootballApiClient] = None


def get_football_client() -> FootballApiClient:
    """Get global football API client instance"""
    global _football_client
    if _football_client is None:
        _football_client = FootballApiClient()
    return _football_client
