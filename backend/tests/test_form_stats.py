"""
Tests for recent-form statistics
"""
from app.services.form_stats import TeamFormStats, calculate_average_stats, match_result


def _match(home_id, away_id, home_score, away_score, status="Finished", stats=None):
    return {
        "match_status": status,
        "match_hometeam_id": home_id,
        "match_awayteam_id": away_id,
        "match_hometeam_score": str(home_score),
        "match_awayteam_score": str(away_score),
        "statistics": stats or [],
    }


def test_empty_or_missing_matches_give_not_available():
    for payload in (None, [], {"error": 404}):
        stats = calculate_average_stats(payload, "1")
        assert stats == TeamFormStats()
        assert stats.form == "N/A"
        assert stats.avgPossession == "N/A"


def test_form_letters_from_team_perspective():
    matches = [
        _match("1", "2", 2, 0),   # home win
        _match("3", "1", 2, 0),   # away loss
        _match("4", "1", 1, 3),   # away win
        _match("1", "5", 1, 1),   # draw
    ]
    stats = calculate_average_stats(matches, "1")
    assert stats.form == "WLWD"


def test_only_last_five_finished_matches_count():
    matches = [_match("1", "2", 0, 1) for _ in range(3)]
    matches += [_match("1", "2", 3, 0) for _ in range(5)]
    matches.append(_match("1", "2", 0, 0, status=""))
    stats = calculate_average_stats(matches, "1")
    assert stats.form == "WWWWW"


def test_averages_use_team_side_and_skip_matches_without_statistics():
    home_stats = [
        {"type": "Ball Possession", "home": "60%", "away": "40%"},
        {"type": "Shots On Goal", "home": "7", "away": "2"},
        {"type": "Corners", "home": "5", "away": "3"},
    ]
    away_stats = [
        {"type": "Ball Possession", "home": "55%", "away": "45%"},
        {"type": "Shots On Goal", "home": "4", "away": "4"},
    ]
    matches = [
        _match("1", "2", 2, 0, stats=home_stats),
        _match("3", "1", 1, 1, stats=away_stats),
        _match("1", "4", 0, 1),
    ]
    stats = calculate_average_stats(matches, "1")

    assert stats.form == "WDL"
    assert stats.avgPossession == "52.5%"
    assert stats.avgShotsOnGoal == "5.5"
    # Corners missing in the second match still counts it as valid
    assert stats.avgCorners == "2.5"


def test_no_statistics_keeps_form_but_not_averages():
    stats = calculate_average_stats([_match("1", "2", 1, 0)], "1")
    assert stats.form == "W"
    assert stats.avgShotsOnGoal == "N/A"


def test_no_finished_matches_gives_empty_form():
    stats = calculate_average_stats([_match("1", "2", 0, 0, status="")], "1")
    assert stats.form == ""
    assert stats.avgCorners == "N/A"


def test_match_result_with_unparseable_scores_is_draw():
    match = {"match_hometeam_id": "1", "match_hometeam_score": "", "match_awayteam_score": "?"}
    assert match_result(match, "1") == "D"
