"""Tournament points per match from the Terms of Competition.

Trophy, Shield & Plaque:
    Fri/Sat AM 4BBB       5 win, 2.5 tie
    Fri/Sat PM Foursomes  3 win, 1.5 tie
    Sun Singles           3 win, 1.5 tie

Bowl & Mug:
    Fri/Sat AM 4BBB       5 win, 2.5 tie
    Fri/Sat PM Foursomes  4 win, 2 tie
    Sun Singles           3 win, 1.5 tie

A loss is always worth nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from tourney.models import DIVISIONS

logger = logging.getLogger(__name__)

OUTCOME_WIN = "win"
OUTCOME_TIE = "tie"
OUTCOME_LOSS = "loss"

UPPER_TIER = "upper"
LOWER_TIER = "lower"
DIVISION_TIERS = {
    "Trophy": UPPER_TIER,
    "Shield": UPPER_TIER,
    "Plaque": UPPER_TIER,
    "Bowl": LOWER_TIER,
    "Mug": LOWER_TIER,
}

FRIDAY, SATURDAY, SUNDAY = 4, 5, 6
DAY_NAMES = {0: "Mon", 1: "Tue", 2: "Wed", 3: "Thu", FRIDAY: "Fri", SATURDAY: "Sat", SUNDAY: "Sun"}


@dataclass(frozen=True)
class PointsValue:
    win: float
    tie: float

    def for_outcome(self, outcome: str) -> float:
        return points_for_outcome(self, outcome)


FALLBACK_POINTS = PointsValue(win=1.0, tie=0.5)

# (day group, session, match type, tier) -> points
POINTS_SCHEDULE: dict[tuple[str, str, str, str], PointsValue] = {
    ("Fri/Sat", "AM", "4BBB", UPPER_TIER): PointsValue(5.0, 2.5),
    ("Fri/Sat", "AM", "4BBB", LOWER_TIER): PointsValue(5.0, 2.5),
    ("Fri/Sat", "PM", "Foursomes", UPPER_TIER): PointsValue(3.0, 1.5),
    ("Fri/Sat", "PM", "Foursomes", LOWER_TIER): PointsValue(4.0, 2.0),
}
SUNDAY_SINGLES = PointsValue(3.0, 1.5)


def division_tier(division: str) -> str:
    tier = DIVISION_TIERS.get(division)
    if tier is None:
        logger.warning(
            "Unknown division %r (expected one of %s), using %s tier points",
            division,
            ", ".join(DIVISIONS),
            UPPER_TIER,
        )
        return UPPER_TIER
    return tier


def resolve_points(match_date: date, session: str, match_type: str, division: str) -> PointsValue:
    weekday = match_date.weekday()
    tier = division_tier(division)
    if weekday == SUNDAY and match_type == "Singles":
        return SUNDAY_SINGLES
    if weekday in (FRIDAY, SATURDAY):
        value = POINTS_SCHEDULE.get(("Fri/Sat", session, match_type, tier))
        if value is not None:
            return value
    logger.warning(
        "No points schedule entry for day=%s session=%s type=%s division=%s; falling back to %s/%s",
        DAY_NAMES[weekday],
        session,
        match_type,
        division,
        FALLBACK_POINTS.win,
        FALLBACK_POINTS.tie,
    )
    return FALLBACK_POINTS


def resolve_match_points(match) -> PointsValue:
    return resolve_points(match.match_date, match.session, match.match_type, match.division)


def points_for_outcome(value: PointsValue, outcome: str) -> float:
    if outcome == OUTCOME_WIN:
        return value.win
    if outcome == OUTCOME_TIE:
        return value.tie
    return 0.0
