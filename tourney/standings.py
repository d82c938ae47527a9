"""Division standings from raw match and hole data.

Standings are always rebuilt from the full snapshot. In-progress matches are
handled by exactly one policy per call:

``none``              official table, completed matches only
``leader_takes_all``  live table, the side currently up takes the win
``fractional``        live table, the match points are split by hole lead
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping

from tourney.matchplay import HALVED, MatchPlayResult, resolve_match_play
from tourney.models import (
    DIVISIONS,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_SCHEDULED,
    Match,
    Team,
)
from tourney.points import (
    OUTCOME_LOSS,
    OUTCOME_TIE,
    OUTCOME_WIN,
    PointsValue,
    resolve_match_points,
)
from tourney.three_way import resolve_three_way

logger = logging.getLogger(__name__)

POLICY_NONE = "none"
POLICY_LEADER_TAKES_ALL = "leader_takes_all"
POLICY_FRACTIONAL = "fractional"
IN_PROGRESS_POLICIES = (POLICY_NONE, POLICY_LEADER_TAKES_ALL, POLICY_FRACTIONAL)

STANDINGS_VIEWS = {
    "official": POLICY_NONE,
    "live": POLICY_LEADER_TAKES_ALL,
    "fractional": POLICY_FRACTIONAL,
}

TREND_LENGTH = 5
TREND_CODES = {OUTCOME_WIN: "W", OUTCOME_LOSS: "L", OUTCOME_TIE: "H"}
PROVISIONAL_CODE = "P"
SESSION_ORDER = {"AM": 0, "PM": 1}

POSITION_UP = "up"
POSITION_DOWN = "down"
POSITION_SAME = "same"


@dataclass(frozen=True)
class StandingEntry:
    team: Team
    division: str
    points: float
    matches_played: int
    matches_in_progress: int
    matches_won: int
    matches_lost: int
    matches_halved: int
    holes_won: int
    holes_lost: int
    win_rate: int
    recent_results: tuple[str, ...]
    trend: str
    position: int
    position_change: str

    @property
    def hole_diff(self) -> int:
        return self.holes_won - self.holes_lost


def policy_for_view(view: str) -> str:
    try:
        return STANDINGS_VIEWS[view]
    except KeyError:
        raise ValueError(
            f"Unknown standings view {view!r}; expected one of {', '.join(STANDINGS_VIEWS)}"
        ) from None


def _empty_stat() -> dict:
    return {
        "points": 0.0,
        "played": 0,
        "in_progress": 0,
        "won": 0,
        "lost": 0,
        "halved": 0,
        "holes_won": 0,
        "holes_lost": 0,
        "results": [],
    }


def _match_order(match: Match, index: int) -> tuple:
    return (match.match_date, SESSION_ORDER.get(match.session, 2), index)


def _pairings(match: Match) -> list[tuple[int, int, MatchPlayResult]]:
    """(team id, team id, result) for every head-to-head contest inside ``match``."""
    side_ids = {"team_a": match.team_a_id, "team_b": match.team_b_id, "team_c": match.team_c_id}
    if match.is_three_way:
        resolved = resolve_three_way(match.holes)
        return [
            (side_ids[pairing.side_a], side_ids[pairing.side_b], pairing.result)
            for pairing in resolved.pairings
        ]
    return [(match.team_a_id, match.team_b_id, resolve_match_play(match.holes))]


def _decided_outcomes(result: MatchPlayResult) -> tuple[str, str]:
    """Final outcome for both sides; an overridden match is settled on holes won so far."""
    if result.is_completed:
        winner = result.winner
    else:
        winner = result.leader or HALVED
    if winner == HALVED:
        return OUTCOME_TIE, OUTCOME_TIE
    if winner == result.side_a:
        return OUTCOME_WIN, OUTCOME_LOSS
    return OUTCOME_LOSS, OUTCOME_WIN


def _credit_holes(stats: dict, first: int, second: int, result: MatchPlayResult) -> None:
    stats[first]["holes_won"] += result.team_a_holes_won
    stats[first]["holes_lost"] += result.team_b_holes_won
    stats[second]["holes_won"] += result.team_b_holes_won
    stats[second]["holes_lost"] += result.team_a_holes_won


def _credit_decided(
    stats: dict,
    first: int,
    second: int,
    result: MatchPlayResult,
    value: PointsValue,
    order: tuple,
    code: str | None = None,
) -> None:
    for team_id, outcome in zip((first, second), _decided_outcomes(result)):
        entry = stats[team_id]
        entry["points"] += value.for_outcome(outcome)
        entry["played"] += 1
        if outcome == OUTCOME_WIN:
            entry["won"] += 1
        elif outcome == OUTCOME_LOSS:
            entry["lost"] += 1
        else:
            entry["halved"] += 1
        entry["results"].append((order, code or TREND_CODES[outcome]))
    _credit_holes(stats, first, second, result)


def _credit_fractional(
    stats: dict,
    first: int,
    second: int,
    result: MatchPlayResult,
    value: PointsValue,
    order: tuple,
) -> None:
    share = result.margin / (result.holes_remaining + 1)
    swing = value.tie * share
    if result.leader is None:
        first_points = second_points = value.tie
    elif result.leader == result.side_a:
        first_points, second_points = value.tie + swing, value.tie - swing
    else:
        first_points, second_points = value.tie - swing, value.tie + swing
    stats[first]["points"] += first_points
    stats[second]["points"] += second_points
    for team_id in (first, second):
        stats[team_id]["results"].append((order, PROVISIONAL_CODE))
    _credit_holes(stats, first, second, result)


def _process_match(
    match: Match,
    order: tuple,
    stats: dict,
    policy: str,
) -> None:
    if match.is_bye:
        logger.debug("Skipping bye match %s", match.match_id)
        return
    if not match.holes:
        logger.debug("Skipping match %s with no hole records", match.match_id)
        return

    value = resolve_match_points(match)
    live = match.status == STATUS_IN_PROGRESS
    if live:
        for team_id in match.team_ids:
            if team_id in stats:
                stats[team_id]["in_progress"] += 1

    for pairing_index, (first, second, result) in enumerate(_pairings(match)):
        if first not in stats or second not in stats:
            logger.debug(
                "Skipping match %s pairing %s v %s: team not in %s roster",
                match.match_id,
                first,
                second,
                match.division,
            )
            continue
        if result.holes_played == 0:
            continue
        pairing_order = (*order, pairing_index)
        if not live or result.is_completed:
            _credit_decided(stats, first, second, result, value, pairing_order)
        elif policy == POLICY_LEADER_TAKES_ALL:
            _credit_decided(
                stats, first, second, result, value, pairing_order, code=PROVISIONAL_CODE
            )
        elif policy == POLICY_FRACTIONAL:
            _credit_fractional(stats, first, second, result, value, pairing_order)


def _position_change(team_id: int, position: int, previous: Mapping[int, int]) -> str:
    before = previous.get(team_id)
    if before is None or before == position:
        return POSITION_SAME
    return POSITION_UP if position < before else POSITION_DOWN


def build_standings(
    matches: Iterable[Match],
    teams: Iterable[Team],
    division: str,
    policy: str = POLICY_NONE,
    previous_positions: Mapping[int, int] | None = None,
) -> list[StandingEntry]:
    if policy not in IN_PROGRESS_POLICIES:
        raise ValueError(f"Unknown in-progress policy {policy!r}")

    roster = [team for team in teams if team.division == division]
    stats = {team.team_id: _empty_stat() for team in roster}
    for index, match in enumerate(matches):
        if match.division != division:
            continue
        if match.status == STATUS_SCHEDULED:
            continue
        if match.status == STATUS_IN_PROGRESS and policy == POLICY_NONE:
            for team_id in match.team_ids:
                if team_id in stats and match.holes:
                    stats[team_id]["in_progress"] += 1
            continue
        _process_match(match, _match_order(match, index), stats, policy)

    unranked = []
    for team in roster:
        entry = stats[team.team_id]
        recent = tuple(
            code
            for _, code in sorted(entry["results"], key=lambda item: item[0], reverse=True)
        )[:TREND_LENGTH]
        played = entry["played"]
        unranked.append(
            {
                "team": team,
                "points": round(entry["points"], 1),
                "played": played,
                "in_progress": entry["in_progress"],
                "won": entry["won"],
                "lost": entry["lost"],
                "halved": entry["halved"],
                "holes_won": entry["holes_won"],
                "holes_lost": entry["holes_lost"],
                "win_rate": round(entry["won"] / played * 100) if played else 0,
                "recent": recent,
            }
        )

    ranked = sorted(
        unranked,
        key=lambda item: (
            -item["points"],
            -item["won"],
            -(item["holes_won"] - item["holes_lost"]),
        ),
    )
    previous = previous_positions or {}
    return [
        StandingEntry(
            team=item["team"],
            division=division,
            points=item["points"],
            matches_played=item["played"],
            matches_in_progress=item["in_progress"],
            matches_won=item["won"],
            matches_lost=item["lost"],
            matches_halved=item["halved"],
            holes_won=item["holes_won"],
            holes_lost=item["holes_lost"],
            win_rate=item["win_rate"],
            recent_results=item["recent"],
            trend="".join(item["recent"]),
            position=position,
            position_change=_position_change(item["team"].team_id, position, previous),
        )
        for position, item in enumerate(ranked, start=1)
    ]


def build_all_standings(
    matches: Iterable[Match],
    teams: Iterable[Team],
    policy: str = POLICY_NONE,
    previous_positions: Mapping[int, int] | None = None,
) -> dict[str, list[StandingEntry]]:
    matches = list(matches)
    teams = list(teams)
    divisions = list(DIVISIONS)
    for team in teams:
        if team.division not in divisions:
            divisions.append(team.division)
    return {
        division: build_standings(matches, teams, division, policy, previous_positions)
        for division in divisions
        if any(team.division == division for team in teams)
    }


def sessions_played(team_id: int, matches: Iterable[Match]) -> int:
    sessions = {
        match.session_key
        for match in matches
        if team_id in match.team_ids
        and match.status in (STATUS_COMPLETED, STATUS_IN_PROGRESS)
    }
    return len(sessions)


def tournament_progress(matches: Iterable[Match]) -> dict[str, int]:
    counts: dict[str, int] = defaultdict(int)
    total = 0
    for match in matches:
        total += 1
        counts[match.status] += 1
    completed = counts[STATUS_COMPLETED]
    in_progress = counts[STATUS_IN_PROGRESS]
    return {
        "total_matches": total,
        "completed_matches": completed,
        "in_progress_matches": in_progress,
        "scheduled_matches": counts[STATUS_SCHEDULED],
        "completion_percentage": round(completed / total * 100) if total else 0,
        "live_percentage": round(in_progress / total * 100) if total else 0,
    }
