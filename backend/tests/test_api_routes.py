"""
HTTP surface tests with upstream clients and the LLM overridden
"""
import json

import httpx
import pandas as pd
import pytest

from conftest import FakeLLM, football_handler
from app.core.errors import LLMError, UpstreamError
from app.core.gemini_client import get_gemini_client
from app.services.deriv_client import get_deriv_client
from app.services.football_api import FootballApiClient, get_football_client
from app.services.odds_api import OddsApiClient, get_odds_client


@pytest.fixture
def use_football(app):
    def install(payloads):
        client = FootballApiClient(transport=httpx.MockTransport(football_handler(payloads)))
        app.dependency_overrides[get_football_client] = lambda: client
        return client
    return install


@pytest.fixture
def use_llm(app):
    def install(llm):
        app.dependency_overrides[get_gemini_client] = lambda: llm
        return llm
    return install


class FakeDeriv:
    def __init__(self, error=None, periods=40):
        self.error = error
        self.periods = periods

    async def fetch_candles(self, symbol, count=None, granularity=None):
        if self.error:
            raise self.error
        index = pd.date_range("2025-01-01", periods=self.periods, freq="5min", tz="UTC")
        close = pd.Series([100.0 + i for i in range(self.periods)], index=index)
        return pd.DataFrame({"open": close, "high": close + 1, "low": close - 1, "close": close})


def test_health_endpoints(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/health/liveness").json()["status"] == "alive"

    detailed = client.get("/health/detailed").json()
    assert detailed["status"] == "healthy"
    assert detailed["components"]["llm"]["status"] == "configured"

    info = client.get("/api").json()
    assert info["name"] == "Tipster"


def test_responses_carry_request_id(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_countries_leagues_and_fixtures(client, use_football):
    use_football({
        "countries": [{"country_id": "44", "country_name": "England"}],
        "leagues": [{"league_id": "152", "league_name": "Premier League"}],
        "events": [
            {"match_id": "1", "league_id": "152", "match_status": "",
             "match_hometeam_name": "Arsenal", "match_awayteam_name": "Chelsea", "match_date": "2025-03-01"},
            {"match_id": "2", "league_id": "152", "match_status": "Finished",
             "match_hometeam_name": "Everton", "match_awayteam_name": "Fulham", "match_date": "2025-02-20"},
        ],
    })

    assert client.get("/api/countries").json() == [{"id": "44", "name": "England"}]
    assert client.get("/api/leagues/44").json() == [{"id": "152", "name": "Premier League"}]
    fixtures = client.get("/api/fixtures/152").json()
    assert [f["name"] for f in fixtures] == ["Arsenal vs Chelsea"]


def test_upstream_failure_is_500_with_error_message(client, app):
    client_500 = FootballApiClient(transport=httpx.MockTransport(lambda r: httpx.Response(500, text="down")))
    app.dependency_overrides[get_football_client] = lambda: client_500

    response = client.get("/api/countries")

    assert response.status_code == 500
    assert "Football API error! Status: 500" in response.json()["error"]


def test_analyze_relays_model_json(client, use_football, use_llm, football_payloads):
    use_football(football_payloads)
    llm = use_llm(FakeLLM())

    response = client.post("/api/analyze", json={"fixtureId": "1001", "leagueId": "152"})

    assert response.status_code == 200
    assert response.json() == llm.json_result
    assert "Arsenal vs Chelsea" in llm.prompts[0]


def test_analyze_accepts_numeric_ids(client, use_football, use_llm, football_payloads):
    use_football(football_payloads)
    use_llm(FakeLLM())

    response = client.post("/api/analyze", json={"fixtureId": 1001, "leagueId": 152})
    assert response.status_code == 200


def test_analyze_missing_parameters(client, use_llm):
    use_llm(FakeLLM())

    response = client.post("/api/analyze", json={"fixtureId": "1001"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required parameters for analysis."}


def test_analyze_unknown_fixture_is_404(client, use_football, use_llm, football_payloads):
    football_payloads["event"] = []
    use_football(football_payloads)
    use_llm(FakeLLM())

    response = client.post("/api/analyze", json={"fixtureId": "9", "leagueId": "152"})

    assert response.status_code == 404
    assert response.json() == {"error": "Fixture details could not be found."}


def test_analyze_llm_failure_is_500(client, use_football, use_llm, football_payloads):
    use_football(football_payloads)
    llm = FakeLLM()
    llm.error = LLMError("AI API call failed with status 500: oops")
    use_llm(llm)

    response = client.post("/api/analyze", json={"fixtureId": "1001", "leagueId": "152"})

    assert response.status_code == 500
    assert response.json()["error"] == (
        "An internal server error occurred: AI API call failed with status 500: oops"
    )


def test_malformed_body_is_400(client):
    response = client.post(
        "/api/analyze",
        content="not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()


def test_market_analyze_json_and_html(client, app, use_llm):
    app.dependency_overrides[get_deriv_client] = lambda: FakeDeriv()
    llm = use_llm(FakeLLM(json_result={"signal": "HOLD", "confidence": 50, "summary": "flat"},
                          html_result="<p>HOLD</p>"))

    response = client.post("/api/market/analyze", json={"symbol": "R_100"})
    assert response.status_code == 200
    assert response.json()["analysis"] == {"signal": "HOLD", "confidence": 50, "summary": "flat"}

    response = client.post("/api/market/analyze", json={"symbol": "R_100", "format": "html"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.text == "<p>HOLD</p>"
    assert len(llm.prompts) == 2


def test_market_analyze_validation(client, app, use_llm):
    app.dependency_overrides[get_deriv_client] = lambda: FakeDeriv()
    use_llm(FakeLLM())

    assert client.post("/api/market/analyze", json={}).status_code == 400
    assert client.post("/api/market/analyze", json={"symbol": "R_100", "format": "xml"}).status_code == 400


def test_market_upstream_error_is_500(client, app, use_llm):
    app.dependency_overrides[get_deriv_client] = lambda: FakeDeriv(
        error=UpstreamError("Deriv API Error: Symbol R_1 is invalid.", provider="deriv")
    )
    use_llm(FakeLLM())

    response = client.post("/api/market/analyze", json={"symbol": "R_1"})

    assert response.status_code == 500
    assert "Symbol R_1 is invalid." in response.json()["error"]


def test_market_candles_snapshot(client, app, use_llm):
    app.dependency_overrides[get_deriv_client] = lambda: FakeDeriv()
    use_llm(FakeLLM())

    body = client.get("/api/market/candles/R_100", params={"granularity": 60}).json()

    assert body["granularity"] == 60
    assert len(body["candles"]) == 40
    assert body["indicators"]["close"] == 139.0


def test_odds_routes(client, app, use_llm):
    event = {
        "id": "e1", "sport_key": "soccer_epl", "home_team": "A", "away_team": "B",
        "bookmakers": [{"title": "Bet365", "markets": [{"key": "h2h", "outcomes": [
            {"name": "A", "price": 2.0}, {"name": "B", "price": 3.0},
        ]}]}],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/sports"):
            return httpx.Response(200, json=[{"key": "soccer_epl", "title": "EPL", "group": "Soccer"}])
        if "/events/" in request.url.path:
            return httpx.Response(200, content=json.dumps(event))
        return httpx.Response(200, json=[event])

    odds_client = OddsApiClient(transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_odds_client] = lambda: odds_client
    llm = use_llm(FakeLLM(json_result={"recommendedBet": "B"}))

    assert client.get("/api/odds/sports").json()[0]["key"] == "soccer_epl"
    assert client.get("/api/odds/soccer_epl").json()[0]["id"] == "e1"

    response = client.post("/api/odds/analyze", json={"sportKey": "soccer_epl", "eventId": "e1"})
    assert response.status_code == 200
    assert response.json()["analysis"] == {"recommendedBet": "B"}
    assert "B: 3.0 at Bet365" in llm.prompts[0]

    assert client.post("/api/odds/analyze", json={"sportKey": "soccer_epl"}).status_code == 400


@pytest.mark.parametrize("path", ["/api/analyze", "/api/odds/analyze", "/api/market/analyze"])
def test_analyze_without_body_reports_missing_parameters(client, app, use_llm, path):
    app.dependency_overrides[get_deriv_client] = lambda: FakeDeriv()
    use_llm(FakeLLM())

    response = client.post(path)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required parameters for analysis."}


def test_market_short_history_is_422_without_internal_error_prefix(client, app, use_llm):
    app.dependency_overrides[get_deriv_client] = lambda: FakeDeriv(periods=5)
    llm = use_llm(FakeLLM())

    response = client.post("/api/market/analyze", json={"symbol": "R_100"})

    assert response.status_code == 422
    assert response.json() == {"error": "At least 15 candles are required, got 5."}
    assert llm.prompts == []
