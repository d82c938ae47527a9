from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tourney.matchplay import (
    ALL_SQUARE,
    HALVED,
    SIDE_LABELS,
    MatchPlayResult,
    resolve_match_play,
)
from tourney.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    TOTAL_HOLES,
    Hole,
    is_scored,
)

PAIRINGS: tuple[tuple[str, str], ...] = (
    ("team_a", "team_b"),
    ("team_a", "team_c"),
    ("team_b", "team_c"),
)
SUMMARY_SEPARATOR = " | "


@dataclass(frozen=True)
class PairingResult:
    side_a: str
    side_b: str
    result: MatchPlayResult

    @property
    def is_completed(self) -> bool:
        return self.result.is_completed


@dataclass(frozen=True)
class ThreeWayResult:
    status: str
    pairings: tuple[PairingResult, ...]
    summary: str

    def pairing(self, side_a: str, side_b: str) -> PairingResult:
        for entry in self.pairings:
            if (entry.side_a, entry.side_b) == (side_a, side_b):
                return entry
        raise KeyError((side_a, side_b))


@dataclass(frozen=True)
class StrokeTotal:
    side: str
    strokes: int
    holes_counted: int
    to_par: int
    rank: int


def _format_pairing(pairing: PairingResult, labels: dict[str, str]) -> str:
    match_result = pairing.result
    left = labels.get(pairing.side_a, pairing.side_a)
    right = labels.get(pairing.side_b, pairing.side_b)
    head = f"{left} v {right}"
    if match_result.leader is None:
        return f"{head}: {ALL_SQUARE}"
    leader = labels.get(match_result.leader, match_result.leader)
    if match_result.winner and match_result.winner != HALVED:
        return f"{head}: {leader} won {match_result.result}"
    return f"{head}: {leader} {match_result.result}"


def resolve_three_way(
    holes: Iterable[Hole],
    total_holes: int = TOTAL_HOLES,
    labels: dict[str, str] | None = None,
) -> ThreeWayResult:
    ordered = sorted(holes, key=lambda hole: hole.number)
    pairings = tuple(
        PairingResult(
            side_a=side_a,
            side_b=side_b,
            result=resolve_match_play(ordered, total_holes, side_a=side_a, side_b=side_b),
        )
        for side_a, side_b in PAIRINGS
    )
    status = (
        STATUS_COMPLETED
        if all(pairing.is_completed for pairing in pairings)
        else STATUS_IN_PROGRESS
    )
    names = {**SIDE_LABELS, **(labels or {})}
    summary = SUMMARY_SEPARATOR.join(_format_pairing(pairing, names) for pairing in pairings)
    return ThreeWayResult(status=status, pairings=pairings, summary=summary)


def stroke_play_totals(holes: Iterable[Hole]) -> list[StrokeTotal]:
    """Cumulative strokes per side for display, best first.

    Sides can have scored different numbers of holes mid-round, so they are
    ranked on strokes relative to the par of the holes each one has counted.
    Sides with nothing scored go last. Equal positions share a rank.
    """
    totals = {side: [0, 0, 0] for side in ("team_a", "team_b", "team_c")}
    for hole in holes:
        for side, bucket in totals.items():
            strokes = hole.strokes_for(side)
            if is_scored(strokes):
                bucket[0] += strokes
                bucket[1] += 1
                bucket[2] += strokes - hole.par

    def standing(item):
        _, (_, counted, to_par) = item
        return (counted == 0, to_par)

    ranked: list[StrokeTotal] = []
    previous = None
    rank = 0
    for index, item in enumerate(sorted(totals.items(), key=standing), start=1):
        side, (strokes, counted, to_par) = item
        if standing(item) != previous:
            rank = index
            previous = standing(item)
        ranked.append(
            StrokeTotal(side=side, strokes=strokes, holes_counted=counted, to_par=to_par, rank=rank)
        )
    return ranked
