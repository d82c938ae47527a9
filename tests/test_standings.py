from datetime import date

import pytest

from tourney.models import Hole, Match, Team
from tourney.standings import (
    POLICY_FRACTIONAL,
    POLICY_LEADER_TAKES_ALL,
    POLICY_NONE,
    build_all_standings,
    build_standings,
    policy_for_view,
    sessions_played,
    tournament_progress,
)

FRIDAY = date(2025, 9, 19)
SATURDAY = date(2025, 9, 20)
SUNDAY = date(2025, 9, 21)

STROKES = {"A": (4, 5), "B": (5, 4), "H": (4, 4)}

TEAMS = [
    Team(1, "Lions", "Trophy", seed=1),
    Team(2, "Eagles", "Trophy", seed=2),
    Team(3, "Owls", "Trophy", seed=3),
    Team(4, "Hawks", "Trophy", seed=4),
    Team(5, "Badgers", "Bowl", seed=1),
]


def _holes(outcomes: str) -> tuple[Hole, ...]:
    return tuple(
        Hole(number, 4, *STROKES[outcome])
        for number, outcome in enumerate(outcomes, start=1)
    )


def _match(
    match_id,
    team_a,
    team_b,
    outcomes,
    status="completed",
    match_date=FRIDAY,
    session="AM",
    match_type="4BBB",
    division="Trophy",
):
    return Match(
        match_id=match_id,
        division=division,
        match_type=match_type,
        session=session,
        match_date=match_date,
        team_a_id=team_a,
        team_b_id=team_b,
        status=status,
        holes=_holes(outcomes),
    )


def _three_way_match(match_id=10):
    holes = []
    for number in range(1, 19):
        if number == 18:
            strokes = (3, 5, 4)
        elif number % 2:
            strokes = (4, 4, 5)
        elif number <= 8:
            strokes = (4, 5, 3)
        else:
            strokes = (5, 5, 4)
        holes.append(Hole(number, 4, *strokes))
    return Match(
        match_id=match_id,
        division="Trophy",
        match_type="Singles",
        session="AM",
        match_date=SUNDAY,
        team_a_id=1,
        team_b_id=2,
        team_c_id=3,
        status="completed",
        holes=tuple(holes),
    )


def _by_team(entries):
    return {entry.team.team_id: entry for entry in entries}


def test_completed_match_awards_session_points():
    entries = build_standings([_match(1, 1, 2, "AAA" + "H" * 13)], TEAMS, "Trophy")
    table = _by_team(entries)
    assert table[1].points == 5.0
    assert table[1].matches_won == 1
    assert table[1].holes_won == 3
    assert table[2].points == 0.0
    assert table[2].matches_lost == 1
    assert table[2].holes_lost == 3
    assert table[3].matches_played == 0
    assert [entry.position for entry in entries] == [1, 2, 3, 4]


def test_halved_match_splits_points():
    match = _match(1, 1, 2, "H" * 18, session="PM", match_type="Foursomes")
    table = _by_team(build_standings([match], TEAMS, "Trophy"))
    assert table[1].points == table[2].points == 1.5
    assert table[1].matches_halved == table[2].matches_halved == 1


def test_three_way_match_credits_every_pairing():
    entries = build_standings([_three_way_match()], TEAMS, "Trophy")
    table = _by_team(entries)

    assert table[1].matches_played == 2
    assert table[1].matches_won == 2
    assert table[1].points == 6.0
    assert (table[1].holes_won, table[1].holes_lost) == (14, 8)

    assert table[2].matches_played == 2
    assert (table[2].matches_lost, table[2].matches_halved) == (1, 1)
    assert table[2].points == 1.5
    assert (table[2].holes_won, table[2].holes_lost) == (9, 13)

    assert table[3].matches_played == 2
    assert (table[3].matches_lost, table[3].matches_halved) == (1, 1)
    assert (table[3].holes_won, table[3].holes_lost) == (17, 19)

    assert [entry.team.team_id for entry in entries] == [1, 3, 2, 4]


def test_match_counts_and_points_are_consistent():
    matches = [
        _match(1, 1, 2, "AAA" + "H" * 13),
        _match(2, 3, 4, "H" * 18),
        _match(3, 1, 3, "H" * 17 + "B", session="PM", match_type="Foursomes"),
        _match(4, 2, 4, "AB" * 9, session="PM", match_type="Foursomes"),
        _three_way_match(),
    ]
    entries = build_standings(matches, TEAMS, "Trophy")
    for entry in entries:
        assert entry.matches_won + entry.matches_lost + entry.matches_halved == entry.matches_played
    # every decided pairing hands out exactly its win value
    assert sum(entry.points for entry in entries) == pytest.approx(5 + 5 + 3 + 3 + 3 * 3)
    assert sum(entry.holes_won for entry in entries) == sum(entry.holes_lost for entry in entries)


def test_ties_broken_by_wins_then_hole_difference():
    matches = [
        _match(1, 1, 2, "H" * 17 + "A"),
        _match(2, 3, 4, "AAA" + "H" * 13),
    ]
    entries = build_standings(matches, TEAMS, "Trophy")
    assert [entry.team.team_id for entry in entries] == [3, 1, 2, 4]
    assert [entry.hole_diff for entry in entries] == [3, 1, -1, -3]


def test_full_tie_keeps_roster_order():
    roster = [TEAMS[1], TEAMS[0]]
    entries = build_standings([_match(1, 1, 2, "H" * 18)], roster, "Trophy")
    assert [entry.team.team_id for entry in entries] == [2, 1]


def test_scheduled_and_unplayed_matches_are_ignored():
    matches = [
        _match(1, 1, 2, "", status="scheduled"),
        _match(2, 1, 2, "", status="completed"),
        _match(3, 1, 2, "AAA", status="scheduled"),
    ]
    entries = build_standings(matches, TEAMS, "Trophy")
    assert all(entry.matches_played == 0 for entry in entries)
    assert all(entry.points == 0 for entry in entries)


def test_pairings_with_unknown_teams_are_skipped():
    matches = [_match(1, 1, 99, "AAA" + "H" * 13), _match(2, 1, 5, "A" * 18)]
    table = _by_team(build_standings(matches, TEAMS, "Trophy"))
    assert table[1].matches_played == 0
    assert table[1].points == 0


def test_empty_division_returns_no_rows():
    assert build_standings([], TEAMS, "Plaque") == []


def test_overridden_completion_is_settled_on_holes_won():
    match = _match(1, 1, 2, "AHHHH")
    table = _by_team(build_standings([match], TEAMS, "Trophy"))
    assert table[1].matches_won == 1
    assert table[1].points == 5.0
    assert table[2].matches_lost == 1


def test_official_view_only_counts_live_matches():
    live = _match(1, 1, 2, "AA", status="in-progress")
    table = _by_team(build_standings([live], TEAMS, "Trophy", POLICY_NONE))
    assert table[1].points == 0
    assert table[1].matches_played == 0
    assert table[1].matches_in_progress == 1
    assert table[1].trend == ""


def test_leader_takes_all_is_provisional():
    live = _match(1, 1, 2, "AA", status="in-progress")
    table = _by_team(build_standings([live], TEAMS, "Trophy", POLICY_LEADER_TAKES_ALL))
    assert table[1].points == 5.0
    assert table[1].matches_won == 1
    assert table[1].matches_in_progress == 1
    assert table[1].trend == "P"
    assert table[2].matches_lost == 1


def test_fractional_split_keeps_match_total():
    live = _match(1, 1, 2, "AA", status="in-progress")
    table = _by_team(build_standings([live], TEAMS, "Trophy", POLICY_FRACTIONAL))
    assert table[1].points == 2.8
    assert table[2].points == 2.2
    assert table[1].points + table[2].points == pytest.approx(5.0)
    assert table[1].matches_played == 0
    assert table[1].matches_in_progress == 1
    assert table[1].trend == table[2].trend == "P"


def test_level_live_match_splits_evenly_in_fractional_view():
    live = _match(1, 1, 2, "AB", status="in-progress")
    table = _by_team(build_standings([live], TEAMS, "Trophy", POLICY_FRACTIONAL))
    assert table[1].points == table[2].points == 2.5


def test_clinched_live_match_counts_as_final():
    live = _match(1, 1, 2, "A" * 10, status="in-progress")
    table = _by_team(build_standings([live], TEAMS, "Trophy", POLICY_FRACTIONAL))
    assert table[1].points == 5.0
    assert table[1].matches_played == 1
    assert table[1].trend == "W"


def test_trend_is_most_recent_first():
    matches = [
        _match(4, 1, 2, "AAA" + "H" * 13, match_date=SATURDAY, session="PM", match_type="Foursomes"),
        _match(1, 1, 2, "AAA" + "H" * 13, match_date=FRIDAY),
        _match(5, 1, 2, "BBB" + "H" * 13, match_date=SUNDAY, match_type="Singles"),
        _match(3, 1, 2, "H" * 18, match_date=SATURDAY),
        _match(2, 1, 2, "BBB" + "H" * 13, match_date=FRIDAY, session="PM", match_type="Foursomes"),
        _match(6, 1, 2, "AAA" + "H" * 13, match_date=SUNDAY, match_type="Singles"),
    ]
    table = _by_team(build_standings(matches, TEAMS, "Trophy"))
    assert table[1].trend == "WLWHL"
    assert table[2].trend == "LWLHW"
    assert table[1].points == 13.5
    assert (table[1].matches_won, table[1].matches_lost, table[1].matches_halved) == (3, 2, 1)
    assert table[1].win_rate == 50


def test_position_change_against_previous_table():
    entries = build_standings(
        [_match(1, 1, 2, "AAA" + "H" * 13)],
        TEAMS,
        "Trophy",
        previous_positions={1: 2, 2: 1},
    )
    table = _by_team(entries)
    assert table[1].position_change == "up"
    assert table[2].position_change == "down"
    assert table[3].position_change == "same"


def test_rebuilding_is_idempotent():
    matches = [_three_way_match(), _match(1, 1, 4, "AB" * 9)]
    assert build_standings(matches, TEAMS, "Trophy") == build_standings(matches, TEAMS, "Trophy")


def test_all_divisions_and_views():
    tables = build_all_standings([_match(1, 1, 2, "AAA" + "H" * 13)], TEAMS)
    assert list(tables) == ["Trophy", "Bowl"]
    assert tables["Bowl"][0].team.name == "Badgers"
    assert policy_for_view("live") == POLICY_LEADER_TAKES_ALL
    with pytest.raises(ValueError):
        policy_for_view("projected")
    with pytest.raises(ValueError):
        build_standings([], TEAMS, "Trophy", policy="projected")


def test_progress_and_sessions():
    matches = [
        _match(1, 1, 2, "AAA" + "H" * 13),
        _match(2, 3, 4, "AA", status="in-progress"),
        _match(3, 1, 3, "", status="scheduled", session="PM", match_type="Foursomes"),
        _match(4, 1, 4, "H", status="in-progress", match_date=SATURDAY),
    ]
    progress = tournament_progress(matches)
    assert progress == {
        "total_matches": 4,
        "completed_matches": 1,
        "in_progress_matches": 2,
        "scheduled_matches": 1,
        "completion_percentage": 25,
        "live_percentage": 50,
    }
    assert sessions_played(1, matches) == 2
    assert tournament_progress([])["completion_percentage"] == 0
