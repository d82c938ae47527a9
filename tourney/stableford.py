"""Net Stableford scoring for the individual stroke-play event.

A player receives one stroke on every hole whose stroke index is at or
below their handicap. Handicaps above 18 do not earn a second stroke on the
hardest holes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from tourney.fixtures import CourseHole, load_course
from tourney.models import Player, Team, is_scored

STABLEFORD_POINTS = {
    -3: 5,  # net albatross or better
    -2: 4,
    -1: 3,
    0: 2,
    1: 1,
}


@dataclass(frozen=True)
class StablefordHole:
    hole_number: int
    par: int
    stroke_index: int
    handicap: int
    gross: int | None
    net: int | None
    points: int


@dataclass(frozen=True)
class StablefordRound:
    round_number: int
    holes: tuple[StablefordHole, ...]

    @property
    def total_points(self) -> int:
        return round_total(self.holes)

    @property
    def total_gross(self) -> int:
        return sum(hole.gross for hole in self.holes if hole.gross is not None)

    @property
    def total_net(self) -> int:
        return sum(hole.net for hole in self.holes if hole.net is not None)


@dataclass(frozen=True)
class PlayerLeaderboardEntry:
    player: Player
    rounds: tuple[StablefordRound, ...]
    total_points: int
    total_gross: int
    total_net: int
    position: int

    @property
    def rounds_played(self) -> int:
        return len(self.rounds)

    def round_points(self, round_number: int) -> int:
        for entry in self.rounds:
            if entry.round_number == round_number:
                return entry.total_points
        return 0


@dataclass(frozen=True)
class TeamLeaderboardEntry:
    team: Team
    players: tuple[PlayerLeaderboardEntry, ...]
    team_points: int
    team_gross: int
    team_net: int
    position: int


def net_score(gross: int, handicap: int, stroke_index: int) -> int:
    return gross - (1 if stroke_index <= handicap else 0)


def stableford_points(net: int, par: int) -> int:
    net_to_par = net - par
    if net_to_par <= -3:
        return STABLEFORD_POINTS[-3]
    return STABLEFORD_POINTS.get(net_to_par, 0)


def score_hole(course_hole: CourseHole, gross: int | None, handicap: int) -> StablefordHole:
    if not is_scored(gross):
        return StablefordHole(
            hole_number=course_hole.hole_number,
            par=course_hole.par,
            stroke_index=course_hole.stroke_index,
            handicap=handicap,
            gross=None,
            net=None,
            points=0,
        )
    net = net_score(gross, handicap, course_hole.stroke_index)
    return StablefordHole(
        hole_number=course_hole.hole_number,
        par=course_hole.par,
        stroke_index=course_hole.stroke_index,
        handicap=handicap,
        gross=gross,
        net=net,
        points=stableford_points(net, course_hole.par),
    )


def score_round(
    gross_scores: Sequence[int | None],
    handicap: int,
    course: Sequence[CourseHole] | None = None,
) -> list[StablefordHole]:
    """Score one round; ``gross_scores[i]`` belongs to the i-th hole of the course."""
    card = course if course is not None else load_course()
    return [
        score_hole(course_hole, gross_scores[index] if index < len(gross_scores) else None, handicap)
        for index, course_hole in enumerate(card)
    ]


def round_total(holes: Iterable[StablefordHole]) -> int:
    return sum(hole.points for hole in holes)


def round_gross(holes: Sequence[StablefordHole]) -> int | None:
    if any(hole.gross is None for hole in holes):
        return None
    return sum(hole.gross for hole in holes)


def round_net(holes: Sequence[StablefordHole]) -> int | None:
    if any(hole.net is None for hole in holes):
        return None
    return sum(hole.net for hole in holes)


def _ranked(items: list, points) -> list[tuple[int, object]]:
    ordered = sorted(items, key=lambda item: -points(item))
    return list(enumerate(ordered, start=1))


def build_player_leaderboard(
    player_rounds: Iterable[tuple[Player, dict[int, Sequence[int | None]]]],
    course: Sequence[CourseHole] | None = None,
) -> list[PlayerLeaderboardEntry]:
    """Rank players on aggregate points.

    ``player_rounds`` yields ``(player, {round_number: gross_scores})``.
    """
    card = course if course is not None else load_course()
    scored = []
    for player, rounds in player_rounds:
        player_scored = tuple(
            StablefordRound(
                round_number=round_number,
                holes=tuple(score_round(scores, player.handicap, card)),
            )
            for round_number, scores in sorted(rounds.items())
        )
        scored.append((player, player_scored))

    entries = []
    for position, (player, rounds) in _ranked(
        scored, lambda item: sum(entry.total_points for entry in item[1])
    ):
        entries.append(
            PlayerLeaderboardEntry(
                player=player,
                rounds=rounds,
                total_points=sum(entry.total_points for entry in rounds),
                total_gross=sum(entry.total_gross for entry in rounds),
                total_net=sum(entry.total_net for entry in rounds),
                position=position,
            )
        )
    return entries


def round_leaderboard(
    entries: Iterable[PlayerLeaderboardEntry], round_number: int
) -> list[tuple[int, PlayerLeaderboardEntry, int]]:
    """(position, entry, round points) ranked on a single round."""
    ranked = _ranked(list(entries), lambda entry: entry.round_points(round_number))
    return [(position, entry, entry.round_points(round_number)) for position, entry in ranked]


def build_team_leaderboard(
    entries: Iterable[PlayerLeaderboardEntry], teams: Iterable[Team]
) -> list[TeamLeaderboardEntry]:
    entries = list(entries)
    totals = []
    for team in teams:
        members = tuple(entry for entry in entries if entry.player.team_id == team.team_id)
        totals.append(
            (
                team,
                members,
                sum(entry.total_points for entry in members),
                sum(entry.total_gross for entry in members),
                sum(entry.total_net for entry in members),
            )
        )
    return [
        TeamLeaderboardEntry(
            team=team,
            players=members,
            team_points=points,
            team_gross=gross,
            team_net=net,
            position=position,
        )
        for position, (team, members, points, gross, net) in _ranked(totals, lambda item: item[2])
    ]
