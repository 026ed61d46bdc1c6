"""
Recent-form statistics derived from a team's finished matches
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

NOT_AVAILABLE = "N/A"

STAT_POSSESSION = "Ball Possession"
STAT_SHOTS_ON_GOAL = "Shots On Goal"
STAT_CORNERS = "Corners"


class TeamFormStats(BaseModel):
    """Form string and per-match averages over the last finished matches"""
    form: str = NOT_AVAILABLE
    avgPossession: str = NOT_AVAILABLE
    avgShotsOnGoal: str = NOT_AVAILABLE
    avgCorners: str = NOT_AVAILABLE


def _to_int(value: Any) -> int:
    """Parse a provider stat such as "54%" or "7"; unparseable values count as 0"""
    if value is None:
        return 0
    text = str(value).strip().rstrip("%")
    try:
        return int(text)
    except ValueError:
        try:
            return int(float(text))
        except ValueError:
            return 0


def _find_stat(statistics: List[Dict[str, Any]], stat_type: str) -> Optional[Dict[str, Any]]:
    for stat in statistics:
        if isinstance(stat, dict) and stat.get("type") == stat_type:
            return stat
    return None


def match_result(match: Dict[str, Any], team_id: str) -> str:
    """W, D or L from the point of view of team_id"""
    is_home = match.get("match_hometeam_id") == team_id
    home_score = _to_int(match.get("match_hometeam_score"))
    away_score = _to_int(match.get("match_awayteam_score"))
    if home_score == away_score:
        return "D"
    if (is_home and home_score > away_score) or (not is_home and away_score > home_score):
        return "W"
    return "L"


def calculate_average_stats(matches: Any, team_id: str, last_n: int = 5) -> TeamFormStats:
    """
    Summarise a team's last `last_n` finished matches

    Args:
        matches: get_events payload for the team (may be None)
        team_id: the team whose side of each statistic is used
        last_n: number of most recent finished matches to consider

    Returns:
        TeamFormStats with "N/A" for anything that cannot be computed
    """
    if not isinstance(matches, list) or not matches:
        return TeamFormStats()

    finished = [
        m for m in matches
        if isinstance(m, dict) and m.get("match_status") == "Finished"
    ]
    recent = finished[-last_n:]

    possession_sum = shots_sum = corners_sum = 0
    valid_matches = 0
    form: List[str] = []

    for match in recent:
        side = "home" if match.get("match_hometeam_id") == team_id else "away"
        statistics = match.get("statistics")
        if isinstance(statistics, list) and statistics:
            possession = _find_stat(statistics, STAT_POSSESSION)
            shots_on_goal = _find_stat(statistics, STAT_SHOTS_ON_GOAL)
            corners = _find_stat(statistics, STAT_CORNERS)

            if possession:
                possession_sum += _to_int(possession.get(side))
            if shots_on_goal:
                shots_sum += _to_int(shots_on_goal.get(side))
            if corners:
                corners_sum += _to_int(corners.get(side))
            valid_matches += 1

        form.append(match_result(match, team_id))

    if valid_matches == 0:
        return TeamFormStats(form="".join(form))

    return TeamFormStats(
        form="".join(form),
        avgPossession=f"{possession_sum / valid_matches:.1f}%",
        avgShotsOnGoal=f"{shots_sum / valid_matches:.1f}",
        avgCorners=f"{corners_sum / valid_matches:.1f}",
    )
