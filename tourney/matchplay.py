"""Hole-by-hole match play resolution for a single head-to-head pairing.

A match ends as soon as one side leads by more holes than remain. Holes
entered after that point (players walking in, or the other pairings of a
three-way group still playing) do not change the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tourney.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    TOTAL_HOLES,
    Hole,
    is_scored,
)

SIDE_LABELS = {"team_a": "Team A", "team_b": "Team B", "team_c": "Team C"}
HALVED = "halved"
ALL_SQUARE = "AS"


@dataclass(frozen=True)
class MatchPlayResult:
    status: str
    result: str
    winner: str | None
    leader: str | None
    holes_played: int
    holes_remaining: int
    team_a_holes_won: int
    team_b_holes_won: int
    holes_halved: int
    side_a: str = "team_a"
    side_b: str = "team_b"

    @property
    def margin(self) -> int:
        return abs(self.team_a_holes_won - self.team_b_holes_won)

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def is_clinched_early(self) -> bool:
        return self.is_completed and self.holes_remaining > 0

    def holes_won_by(self, side: str) -> int:
        if side == self.side_a:
            return self.team_a_holes_won
        if side == self.side_b:
            return self.team_b_holes_won
        raise KeyError(side)

    def holes_lost_by(self, side: str) -> int:
        if side == self.side_a:
            return self.team_b_holes_won
        if side == self.side_b:
            return self.team_a_holes_won
        raise KeyError(side)


def _valid_results(total_holes: int = TOTAL_HOLES) -> dict[int, tuple[str, ...]]:
    table: dict[int, tuple[str, ...]] = {total_holes: (ALL_SQUARE, "1up", "2up")}
    for played in range(1, total_holes):
        remaining = total_holes - played
        margins = [m for m in (remaining + 1, remaining + 2) if m <= played]
        if margins:
            table[played] = tuple(f"{margin}/{remaining}" for margin in margins)
    return table


VALID_RESULTS = _valid_results()


def is_valid_result(holes_played: int, result: str) -> bool:
    """True when ``result`` is a final score a match can legitimately finish on."""
    return result in VALID_RESULTS.get(holes_played, ())


def resolve_pairs(
    pairs: Iterable[tuple[int | None, int | None]],
    total_holes: int = TOTAL_HOLES,
    side_a: str = "team_a",
    side_b: str = "team_b",
) -> MatchPlayResult:
    a_won = 0
    b_won = 0
    halved = 0
    played = 0
    decided = False
    for strokes_a, strokes_b in pairs:
        if not (is_scored(strokes_a) and is_scored(strokes_b)):
            continue
        played += 1
        if strokes_a < strokes_b:
            a_won += 1
        elif strokes_b < strokes_a:
            b_won += 1
        else:
            halved += 1
        if abs(a_won - b_won) > total_holes - played or played == total_holes:
            decided = True
            break

    remaining = total_holes - played
    diff = abs(a_won - b_won)
    if a_won > b_won:
        leader = side_a
    elif b_won > a_won:
        leader = side_b
    else:
        leader = None

    if not decided:
        return MatchPlayResult(
            status=STATUS_IN_PROGRESS,
            result=ALL_SQUARE if diff == 0 else f"{diff}up",
            winner=None,
            leader=leader,
            holes_played=played,
            holes_remaining=remaining,
            team_a_holes_won=a_won,
            team_b_holes_won=b_won,
            holes_halved=halved,
            side_a=side_a,
            side_b=side_b,
        )

    if diff == 0:
        result, winner = ALL_SQUARE, HALVED
    elif remaining == 0:
        result, winner = f"{diff}up", leader
    else:
        result, winner = f"{diff}/{remaining}", leader
    return MatchPlayResult(
        status=STATUS_COMPLETED,
        result=result,
        winner=winner,
        leader=leader,
        holes_played=played,
        holes_remaining=remaining,
        team_a_holes_won=a_won,
        team_b_holes_won=b_won,
        holes_halved=halved,
        side_a=side_a,
        side_b=side_b,
    )


def resolve_match_play(
    holes: Iterable[Hole],
    total_holes: int = TOTAL_HOLES,
    side_a: str = "team_a",
    side_b: str = "team_b",
) -> MatchPlayResult:
    ordered = sorted(holes, key=lambda hole: hole.number)
    return resolve_pairs(
        ((hole.strokes_for(side_a), hole.strokes_for(side_b)) for hole in ordered),
        total_holes=total_holes,
        side_a=side_a,
        side_b=side_b,
    )


def find_partial_holes(
    holes: Iterable[Hole],
    side_a: str = "team_a",
    side_b: str = "team_b",
) -> list[int]:
    """Hole numbers where exactly one of the two sides has a score."""
    partial = []
    for hole in holes:
        a_scored = is_scored(hole.strokes_for(side_a))
        b_scored = is_scored(hole.strokes_for(side_b))
        if a_scored != b_scored:
            partial.append(hole.number)
    return sorted(partial)


def is_dormie(result: MatchPlayResult) -> bool:
    if result.is_completed:
        return False
    return result.margin > 0 and result.margin == result.holes_remaining


def describe_result(result: MatchPlayResult, labels: dict[str, str] | None = None) -> str:
    names = {**SIDE_LABELS, **(labels or {})}
    if not result.is_completed:
        if result.leader is None:
            return "All Square"
        return f"{names.get(result.leader, result.leader)} {result.result}"
    if result.winner == HALVED:
        return "Match Halved (AS)"
    return f"{names.get(result.winner, result.winner)} wins {result.result}"
