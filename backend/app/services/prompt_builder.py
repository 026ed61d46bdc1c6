"""
Prompt assembly for match, odds and market analysis

Every builder is a pure function: the same upstream payloads always give
the same prompt, and missing values are rendered as N/A.
"""
import textwrap
from typing import Any, Dict, Iterable, List, Optional

from app.services.form_stats import NOT_AVAILABLE, TeamFormStats

MATCH_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "predictedOutcome": {"type": "STRING"},
        "recommendedBet": {"type": "STRING"},
        "confidenceScore": {"type": "NUMBER"},
    },
    "required": ["predictedOutcome", "recommendedBet", "confidenceScore"],
}

ODDS_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "recommendedBet": {"type": "STRING"},
        "bestBookmaker": {"type": "STRING"},
        "bestPrice": {"type": "NUMBER"},
        "impliedProbability": {"type": "NUMBER"},
        "confidenceScore": {"type": "NUMBER"},
        "reasoning": {"type": "STRING"},
    },
    "required": ["recommendedBet", "bestBookmaker", "bestPrice", "confidenceScore", "reasoning"],
}

MARKET_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "signal": {"type": "STRING", "enum": ["BUY", "SELL", "HOLD"]},
        "confidence": {"type": "NUMBER"},
        "summary": {"type": "STRING"},
        "keyLevels": {
            "type": "OBJECT",
            "properties": {
                "support": {"type": "NUMBER"},
                "resistance": {"type": "NUMBER"},
            },
        },
    },
    "required": ["signal", "confidence", "summary"],
}


def na(value: Any) -> Any:
    """Render falsy values the way the prompts expect them"""
    if value is None or value == "":
        return NOT_AVAILABLE
    return value


def fmt_number(value: Optional[float], digits: int = 4) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.{digits}f}"


def _block(text: str) -> str:
    return textwrap.dedent(text).strip()


# ---------------------------------------------------------------------------
# Football match
# ---------------------------------------------------------------------------

def format_lineup(team_lineup: Optional[Dict[str, Any]]) -> str:
    if not team_lineup:
        return NOT_AVAILABLE
    starters = ", ".join(
        p.get("lineup_player", "") for p in team_lineup.get("starting_lineups") or []
    ) or "Not available"
    missing = ", ".join(
        p.get("lineup_player", "") for p in team_lineup.get("missing_players") or []
    ) or "None reported"
    return f"Starting XI: {starters}\n  - Missing Players: {missing}"


def format_head_to_head(matches: Iterable[Dict[str, Any]]) -> str:
    lines = [
        f"- {m.get('match_date')}: {m.get('match_hometeam_name')} "
        f"{m.get('match_hometeam_score')} - {m.get('match_awayteam_score')} "
        f"{m.get('match_awayteam_name')}"
        for m in matches
    ]
    return "\n".join(lines) if lines else "- No recent head-to-head data available."


def _team_section(
    title: str,
    team_name: Any,
    standing: Dict[str, Any],
    venue: str,
    stats: TeamFormStats,
) -> str:
    return _block(f"""
        {title}: {na(team_name)}
        - League Position: {na(standing.get('overall_league_position'))} (Overall), {na(standing.get(f'{venue}_league_position'))} ({venue.capitalize()})
        - Points: {na(standing.get('overall_league_PTS'))}
        - Goals Scored/Conceded ({venue.capitalize()}): {na(standing.get(f'{venue}_league_GF'))} / {na(standing.get(f'{venue}_league_GA'))}
        - Recent Performance (Last 5 Games):
          - Form: {stats.form}
          - Average Ball Possession: {stats.avgPossession}
          - Average Shots on Goal: {stats.avgShotsOnGoal}
          - Average Corners: {stats.avgCorners}
    """)


def build_match_prompt(
    fixture: Dict[str, Any],
    home_standing: Dict[str, Any],
    away_standing: Dict[str, Any],
    head_to_head: List[Dict[str, Any]],
    odds: Dict[str, Any],
    prediction: Dict[str, Any],
    lineups: Optional[Dict[str, Any]],
    home_stats: TeamFormStats,
    away_stats: TeamFormStats,
) -> str:
    """Assemble the betting-analysis prompt for one fixture"""
    home = fixture.get("match_hometeam_name")
    away = fixture.get("match_awayteam_name")
    lineups = lineups or {}

    sections = [
        "Analyze the following football match for a betting recommendation. "
        "Consider all available data points, including the provider's own mathematical "
        "predictions and team lineups, to make a well-rounded decision.",
        _block(f"""
            Match Details:
            - Match: {na(home)} vs {na(away)}
            - Competition: {na(fixture.get('league_name'))}
            - Date & Time: {na(fixture.get('match_date'))} at {na(fixture.get('match_time'))}
            - Venue: {na(fixture.get('match_stadium'))}
            - Referee: {na(fixture.get('match_referee'))}
        """),
        "Team Lineup and Status:\n"
        f"- {na(home)}: {format_lineup(lineups.get('home'))}\n"
        f"- {na(away)}: {format_lineup(lineups.get('away'))}",
        _block(f"""
            Provider's Mathematical Prediction:
            - Home Win Probability: {na(prediction.get('prob_HW'))}%
            - Draw Probability: {na(prediction.get('prob_D'))}%
            - Away Win Probability: {na(prediction.get('prob_AW'))}%
            - Over 2.5 Goals Probability: {na(prediction.get('prob_O'))}%
            - Both Teams to Score Probability: {na(prediction.get('prob_bts'))}%
        """),
        _block(f"""
            Pre-Match Betting Odds (from {odds.get('odd_bookmakers') or 'various bookmakers'}):
            - Home Win (1): {na(odds.get('odd_1'))}
            - Draw (X): {na(odds.get('odd_x'))}
            - Away Win (2): {na(odds.get('odd_2'))}
            - Over 2.5 Goals: {na(odds.get('o+2.5'))}
            - Under 2.5 Goals: {na(odds.get('u+2.5'))}
        """),
        f"Head-to-Head (most recent matches):\n{format_head_to_head(head_to_head)}",
        _team_section("Home Team Analysis", home, home_standing, "home", home_stats),
        _team_section("Away Team Analysis", away, away_standing, "away", away_stats),
        "Based on a holistic analysis of ALL the data provided, output a structured JSON response "
        "with your final conclusion: a predicted outcome (e.g., \"Home Win\", \"Draw\"), a specific "
        "recommended bet (e.g., \"Moneyline - Home Team\", \"Over 2.5 Goals\", \"Both Teams to "
        "Score - Yes\"), and a confidence score (from 0 to 100) for your recommendation.",
    ]
    return "\n\n".join(sections)


# ---------------------------------------------------------------------------
# Odds comparison
# ---------------------------------------------------------------------------

def build_odds_prompt(event: Dict[str, Any], best_prices: List[Dict[str, Any]]) -> str:
    """Assemble the value-bet prompt for one odds-provider event"""
    price_lines = [
        f"- {p['market']} / {p['outcome']}"
        f"{' ' + str(p['point']) if p.get('point') is not None else ''}: "
        f"{p['price']} at {p['bookmaker']} (implied {p['impliedProbability'] * 100:.1f}%)"
        for p in best_prices
    ]
    bookmakers = ", ".join(
        b.get("title", b.get("key", "")) for b in event.get("bookmakers") or []
    ) or NOT_AVAILABLE

    return "\n\n".join([
        "Act as a sports betting analyst. Using the bookmaker prices below, identify the single "
        "bet with the best value and explain why.",
        _block(f"""
            Event:
            - Sport: {na(event.get('sport_title') or event.get('sport_key'))}
            - Match: {na(event.get('home_team'))} vs {na(event.get('away_team'))}
            - Kick-off (UTC): {na(event.get('commence_time'))}
            - Bookmakers compared: {bookmakers}
        """),
        "Best available prices (decimal odds):\n"
        + ("\n".join(price_lines) if price_lines else "- No prices available."),
        "Respond with JSON containing recommendedBet, bestBookmaker, bestPrice, "
        "impliedProbability (0-1), confidenceScore (0-100) and a short reasoning.",
    ])


# ---------------------------------------------------------------------------
# Price series (Deriv candles)
# ---------------------------------------------------------------------------

def format_candles(candles: List[Dict[str, Any]], limit: int = 10) -> str:
    rows = [
        f"- {c['time']}: O {c['open']} H {c['high']} L {c['low']} C {c['close']}"
        for c in candles[-limit:]
    ]
    return "\n".join(rows) if rows else "- No candles available."


def build_market_prompt(
    symbol: str,
    granularity: int,
    candles: List[Dict[str, Any]],
    indicators: Dict[str, Optional[float]],
    trend: Dict[str, str],
    response_format: str = "json",
) -> str:
    """Assemble the technical-analysis prompt for a price series"""
    indicator_lines = "\n".join(
        f"- {name}: {fmt_number(value)}" for name, value in indicators.items()
    )
    trend_lines = "\n".join(f"- {name}: {label}" for name, label in trend.items())

    if response_format == "html":
        instruction = (
            "Write the analysis as a self-contained HTML fragment (no <html> or <body> tags) "
            "with a heading, a short summary paragraph, a list of key observations and a final "
            "signal of BUY, SELL or HOLD."
        )
    else:
        instruction = (
            "Respond with JSON containing signal (BUY, SELL or HOLD), confidence (0-100), "
            "a short summary and keyLevels with support and resistance prices."
        )

    sections = [
        f"Act as a technical analyst. Analyze {symbol} on {granularity // 60}-minute candles "
        "and give a short-term trading view.",
        f"Latest candles (oldest first):\n{format_candles(candles)}",
        f"Indicator values on the last candle:\n{indicator_lines}",
    ]
    if trend_lines:
        sections.append(f"Indicator readings:\n{trend_lines}")
    sections.append(instruction)
    return "\n\n".join(sections)
