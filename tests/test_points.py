import logging
from datetime import date

import pytest

from tourney.models import Match
from tourney.points import (
    FALLBACK_POINTS,
    PointsValue,
    division_tier,
    resolve_match_points,
    resolve_points,
)

FRIDAY = date(2025, 9, 19)
SATURDAY = date(2025, 9, 20)
SUNDAY = date(2025, 9, 21)
THURSDAY = date(2025, 9, 18)


@pytest.mark.parametrize(
    ("match_date", "session", "match_type", "division", "expected"),
    [
        (FRIDAY, "AM", "4BBB", "Trophy", PointsValue(5.0, 2.5)),
        (SATURDAY, "AM", "4BBB", "Mug", PointsValue(5.0, 2.5)),
        (FRIDAY, "PM", "Foursomes", "Shield", PointsValue(3.0, 1.5)),
        (SATURDAY, "PM", "Foursomes", "Bowl", PointsValue(4.0, 2.0)),
        (SUNDAY, "AM", "Singles", "Plaque", PointsValue(3.0, 1.5)),
        (SUNDAY, "PM", "Singles", "Mug", PointsValue(3.0, 1.5)),
    ],
)
def test_scheduled_sessions(match_date, session, match_type, division, expected):
    assert resolve_points(match_date, session, match_type, division) == expected


def test_unscheduled_combination_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="tourney.points"):
        value = resolve_points(THURSDAY, "AM", "4BBB", "Trophy")
    assert value == FALLBACK_POINTS
    assert "Thu" in caplog.text

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="tourney.points"):
        assert resolve_points(SUNDAY, "AM", "4BBB", "Trophy") == FALLBACK_POINTS
        assert resolve_points(FRIDAY, "PM", "4BBB", "Trophy") == FALLBACK_POINTS
    assert len(caplog.records) == 2


def test_unknown_division_uses_upper_tier(caplog):
    with caplog.at_level(logging.WARNING, logger="tourney.points"):
        assert division_tier("Spoon") == "upper"
        value = resolve_points(SATURDAY, "PM", "Foursomes", "Spoon")
    assert value == PointsValue(3.0, 1.5)
    assert "Spoon" in caplog.text


def test_outcome_values():
    value = resolve_points(FRIDAY, "AM", "4BBB", "Trophy")
    assert value.for_outcome("win") == 5.0
    assert value.for_outcome("tie") == 2.5
    assert value.for_outcome("loss") == 0.0


def test_match_points_read_match_fields():
    match = Match(1, "Bowl", "Foursomes", "PM", SATURDAY, 1, 2)
    assert resolve_match_points(match) == PointsValue(4.0, 2.0)
