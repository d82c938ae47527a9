from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, time
from typing import Iterable

DIVISIONS: tuple[str, ...] = ("Trophy", "Shield", "Plaque", "Bowl", "Mug")

MATCH_TYPES: tuple[str, ...] = ("4BBB", "Foursomes", "Singles")
SESSIONS: tuple[str, ...] = ("AM", "PM")

STATUS_SCHEDULED = "scheduled"
STATUS_IN_PROGRESS = "in-progress"
STATUS_COMPLETED = "completed"
MATCH_STATUSES: tuple[str, ...] = (STATUS_SCHEDULED, STATUS_IN_PROGRESS, STATUS_COMPLETED)
MATCH_STATUS_LABELS = {
    STATUS_SCHEDULED: "Scheduled",
    STATUS_IN_PROGRESS: "In progress",
    STATUS_COMPLETED: "Completed",
}

TOTAL_HOLES = 18


def is_scored(strokes: int | None) -> bool:
    """A side has played a hole only when it holds a strictly positive stroke count."""
    return strokes is not None and strokes > 0


@dataclass(frozen=True)
class Team:
    team_id: int
    name: str
    division: str
    seed: int = 0
    color: str | None = None


@dataclass(frozen=True)
class Player:
    player_id: int
    team_id: int
    name: str
    handicap: int = 0
    is_pro: bool = False
    is_junior: bool = False
    is_ex_officio: bool = False


@dataclass(frozen=True)
class Hole:
    number: int
    par: int = 4
    team_a_strokes: int | None = None
    team_b_strokes: int | None = None
    team_c_strokes: int | None = None

    def strokes_for(self, side: str) -> int | None:
        return {
            "team_a": self.team_a_strokes,
            "team_b": self.team_b_strokes,
            "team_c": self.team_c_strokes,
        }[side]

    def has_any_score(self) -> bool:
        return any(
            is_scored(value)
            for value in (self.team_a_strokes, self.team_b_strokes, self.team_c_strokes)
        )


@dataclass(frozen=True)
class Match:
    match_id: int
    division: str
    match_type: str
    session: str
    match_date: date
    team_a_id: int
    team_b_id: int
    team_c_id: int | None = None
    status: str = STATUS_SCHEDULED
    holes: tuple[Hole, ...] = field(default_factory=tuple)
    tee_time: time | None = None
    is_bye: bool = False

    @property
    def is_three_way(self) -> bool:
        return self.team_c_id is not None

    @property
    def team_ids(self) -> tuple[int, ...]:
        if self.team_c_id is None:
            return (self.team_a_id, self.team_b_id)
        return (self.team_a_id, self.team_b_id, self.team_c_id)

    @property
    def session_key(self) -> str:
        return f"{self.match_date.isoformat()}-{self.session}-{self.match_type}"

    def with_status(self, status: str) -> Match:
        return replace(self, status=status)


def validate_roster(teams: Iterable[Team]) -> list[tuple[str, int]]:
    """Return (division, seed) pairs that appear more than once."""
    seen: set[tuple[str, int]] = set()
    duplicates: list[tuple[str, int]] = []
    for team in teams:
        key = (team.division, team.seed)
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates
