"""
Pytest configuration and fixtures
"""
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Test credentials; no test talks to a real upstream
os.environ["FOOTBALL_API_KEY"] = "test-football-key"
os.environ["ODDS_API_KEY"] = "test-odds-key"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()


class FakeLLM:
    """Stands in for GeminiClient; records every prompt it receives"""

    def __init__(self, json_result: Any = None, html_result: str = "<h2>Analysis</h2>"):
        self.json_result = json_result if json_result is not None else {
            "predictedOutcome": "Home Win",
            "recommendedBet": "Moneyline - Home Team",
            "confidenceScore": 72,
        }
        self.html_result = html_result
        self.prompts: List[str] = []
        self.schemas: List[Optional[Dict[str, Any]]] = []
        self.error: Optional[Exception] = None

    async def generate_json(self, prompt, response_schema=None, temperature=None):
        self.prompts.append(prompt)
        self.schemas.append(response_schema)
        if self.error:
            raise self.error
        return self.json_result

    async def generate_html(self, prompt, temperature=None):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.html_result


def football_fixture_payloads() -> Dict[str, Any]:
    """apifootball.com payloads for fixture 1001 (Arsenal vs Chelsea, league 152)"""
    return {
        "event": [{
            "match_id": "1001",
            "league_id": "152",
            "league_name": "Premier League",
            "match_date": "2025-03-01",
            "match_time": "15:00",
            "match_status": "",
            "match_hometeam_id": "141",
            "match_hometeam_name": "Arsenal",
            "match_awayteam_id": "2616",
            "match_awayteam_name": "Chelsea",
            "match_stadium": "Emirates Stadium",
            "match_referee": "M. Oliver",
        }],
        "standings": [
            {
                "team_id": "141",
                "overall_league_position": "2",
                "home_league_position": "1",
                "overall_league_PTS": "58",
                "home_league_GF": "30",
                "home_league_GA": "9",
            },
            {
                "team_id": "2616",
                "overall_league_position": "6",
                "away_league_position": "8",
                "overall_league_PTS": "43",
                "away_league_GF": "17",
                "away_league_GA": "16",
            },
        ],
        "h2h": {
            "firstTeam_VS_secondTeam": [
                {
                    "match_date": "2024-10-20",
                    "match_hometeam_name": "Chelsea",
                    "match_hometeam_score": "1",
                    "match_awayteam_score": "1",
                    "match_awayteam_name": "Arsenal",
                },
            ],
        },
        "odds": [{
            "odd_bookmakers": "bet365",
            "odd_1": "1.85",
            "odd_x": "3.60",
            "odd_2": "4.20",
            "o+2.5": "1.90",
            "u+2.5": "1.95",
        }],
        "predictions": [{
            "prob_HW": "52.1",
            "prob_D": "25.4",
            "prob_AW": "22.5",
            "prob_O": "55.0",
            "prob_bts": "49.8",
        }],
        "lineups": {
            "1001": {
                "lineup": {
                    "home": {
                        "starting_lineups": [{"lineup_player": "B. Saka"}, {"lineup_player": "M. Odegaard"}],
                        "missing_players": [],
                    },
                    "away": {
                        "starting_lineups": [{"lineup_player": "C. Palmer"}],
                        "missing_players": [{"lineup_player": "R. James"}],
                    },
                },
            },
        },
        "recent": [
            {
                "match_status": "Finished",
                "match_hometeam_id": "141",
                "match_awayteam_id": "99",
                "match_hometeam_score": "2",
                "match_awayteam_score": "0",
                "statistics": [
                    {"type": "Ball Possession", "home": "60%", "away": "40%"},
                    {"type": "Shots On Goal", "home": "7", "away": "2"},
                    {"type": "Corners", "home": "6", "away": "3"},
                ],
            },
        ],
    }


def football_handler(payloads: Dict[str, Any], calls: Optional[List[Dict[str, str]]] = None) -> Callable:
    """MockTransport handler answering by the `action` query parameter"""
    by_action = {
        "get_standings": payloads.get("standings"),
        "get_H2H": payloads.get("h2h"),
        "get_odds": payloads.get("odds"),
        "get_predictions": payloads.get("predictions"),
        "get_lineups": payloads.get("lineups"),
        "get_countries": payloads.get("countries"),
        "get_leagues": payloads.get("leagues"),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        if calls is not None:
            calls.append(params)
        action = params.get("action")
        if action == "get_events":
            if "match_id" in params:
                body = payloads.get("event", [])
            elif "team_id" in params:
                body = payloads.get("recent", [])
            else:
                body = payloads.get("events", [])
        else:
            body = by_action.get(action)
        if body is None:
            return httpx.Response(200, json={"error": 404, "message": "No data"})
        return httpx.Response(200, json=body)

    return handler


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def football_payloads() -> Dict[str, Any]:
    return football_fixture_payloads()


@pytest.fixture
def app():
    """FastAPI application with dependency overrides cleared after each test"""
    from main import app as fastapi_app
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Create test client"""
    from fastapi.testclient import TestClient
    with TestClient(app) as test_client:
        yield test_client
