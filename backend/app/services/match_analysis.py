"""
Football match analysis: gather fixture data, build the prompt, ask the LLM
"""
import asyncio
from datetime import date
from typing import Any, Dict, List, Optional

from app.core.config import get_settings
from app.core.errors import FixtureNotFoundError
from app.core.gemini_client import GeminiClient
from app.core.logging_config import LoggingConfig
from app.services.football_api import FootballApiClient
from app.services.form_stats import calculate_average_stats
from app.services.prompt_builder import MATCH_ANALYSIS_SCHEMA, build_match_prompt

logger = LoggingConfig.get_logger(__name__)


def _first(data: Any) -> Dict[str, Any]:
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return {}


def find_standing(standings: Any, team_id: str) -> Dict[str, Any]:
    if not isinstance(standings, list):
        return {}
    for row in standings:
        if isinstance(row, dict) and row.get("team_id") == team_id:
            return row
    return {}


def extract_head_to_head(h2h: Any, limit: int) -> List[Dict[str, Any]]:
    if not isinstance(h2h, dict):
        return []
    matches = h2h.get("firstTeam_VS_secondTeam")
    if not isinstance(matches, list):
        return []
    return matches[:limit]


def extract_lineups(lineups: Any, fixture_id: str) -> Optional[Dict[str, Any]]:
    """Lineups are keyed by match id, optionally nested under "lineup" """
    if not isinstance(lineups, dict):
        return None
    entry = lineups.get(str(fixture_id))
    if not isinstance(entry, dict):
        return None
    return entry.get("lineup", entry)


class MatchAnalysisService:
    """Orchestrates one /api/analyze request"""

    def __init__(self, football: FootballApiClient, llm: GeminiClient):
        self.football = football
        self.llm = llm
        self.settings = get_settings()

    async def build_prompt(
        self,
        fixture_id: str,
        league_id: str,
        today: Optional[date] = None
    ) -> str:
        """Fetch every data source for the fixture and assemble the prompt"""
        fixture_id = str(fixture_id)
        fetch = self.football.fetch_or_none

        fixture_data, standings, odds_data, predictions, lineups = await asyncio.gather(
            fetch({"action": "get_events", "match_id": fixture_id}),
            fetch({"action": "get_standings", "league_id": league_id}),
            fetch({"action": "get_odds", "match_id": fixture_id}),
            fetch({"action": "get_predictions", "match_id": fixture_id}),
            fetch({"action": "get_lineups", "match_id": fixture_id}),
        )

        fixture = _first(fixture_data)
        if not fixture.get("match_hometeam_id"):
            raise FixtureNotFoundError()

        home_id = fixture["match_hometeam_id"]
        away_id = fixture.get("match_awayteam_id")

        # Head-to-head needs both team ids, so it waits for the fixture
        h2h, home_recent, away_recent = await asyncio.gather(
            fetch({"action": "get_H2H", "firstTeamId": home_id, "secondTeamId": away_id}),
            self.football.get_recent_events(home_id, today=today),
            self.football.get_recent_events(away_id, today=today),
        )

        last_n = self.settings.recent_form_matches
        home_stats = calculate_average_stats(home_recent, home_id, last_n=last_n)
        away_stats = calculate_average_stats(away_recent, away_id, last_n=last_n)

        logger.info(
            "Fixture data collected",
            extra={
                "fixture_id": fixture_id,
                "home_form": home_stats.form,
                "away_form": away_stats.form,
            }
        )

        return build_match_prompt(
            fixture=fixture,
            home_standing=find_standing(standings, home_id),
            away_standing=find_standing(standings, away_id),
            head_to_head=extract_head_to_head(h2h, self.settings.head_to_head_limit),
            odds=_first(odds_data),
            prediction=_first(predictions),
            lineups=extract_lineups(lineups, fixture_id),
            home_stats=home_stats,
            away_stats=away_stats,
        )

    async def analyze(self, fixture_id: str, league_id: str) -> Any:
        """Return the model's structured verdict unchanged"""
        prompt = await self.build_prompt(fixture_id, league_id)
        return await self.llm.generate_json(prompt, response_schema=MATCH_ANALYSIS_SCHEMA)
