from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from tourney.matchplay import resolve_match_play
from tourney.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_SCHEDULED,
    Hole,
    Match,
)
from tourney.three_way import resolve_three_way

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Africa/Nairobi"
OVERDUE_AFTER = timedelta(minutes=30)


@dataclass(frozen=True)
class MatchTiming:
    can_score: bool
    reason: str
    has_started: bool
    is_overdue: bool
    time_until_start: str | None = None


def tournament_timezone(name: str | None = None) -> tzinfo:
    return ZoneInfo(name or DEFAULT_TIMEZONE)


def tee_datetime(match_date: date, tee_time: time | None, tz: tzinfo) -> datetime | None:
    if tee_time is None:
        return None
    return datetime.combine(match_date, tee_time, tzinfo=tz)


def format_time_until_start(delta: timedelta) -> str:
    total_minutes = abs(int(delta.total_seconds() // 60))
    if total_minutes < 60:
        return f"{total_minutes} minute{'s' if total_minutes != 1 else ''}"
    hours, minutes = divmod(total_minutes, 60)
    if hours < 24:
        if minutes:
            return f"{hours}h {minutes}m"
        return f"{hours} hour{'s' if hours != 1 else ''}"
    days, hours = divmod(hours, 24)
    if hours:
        return f"{days}d {hours}h"
    return f"{days} day{'s' if days != 1 else ''}"


def can_score_match(
    status: str,
    match_date: date,
    tee_time: time | None,
    now: datetime,
    tz: tzinfo,
    is_admin: bool = False,
) -> MatchTiming:
    if status in (STATUS_IN_PROGRESS, STATUS_COMPLETED):
        return MatchTiming(
            can_score=True,
            reason="Match is in progress" if status == STATUS_IN_PROGRESS else "Match is completed",
            has_started=True,
            is_overdue=False,
        )
    if status != STATUS_SCHEDULED:
        return MatchTiming(
            can_score=is_admin,
            reason="Unknown status (admin can override)" if is_admin else "Unknown match status",
            has_started=False,
            is_overdue=False,
        )

    starts_at = tee_datetime(match_date, tee_time, tz)
    if starts_at is None:
        return MatchTiming(
            can_score=is_admin,
            reason="Admin override available" if is_admin else "Invalid match time",
            has_started=False,
            is_overdue=False,
        )

    until_start = starts_at - now
    if until_start <= timedelta(0):
        overdue = -until_start > OVERDUE_AFTER
        return MatchTiming(
            can_score=True,
            reason="Match is overdue to start" if overdue else "Tee time has been reached",
            has_started=True,
            is_overdue=overdue,
        )

    waiting = format_time_until_start(until_start)
    return MatchTiming(
        can_score=is_admin,
        reason=f"Match starts in {waiting} (admin can override)" if is_admin else f"Match starts in {waiting}",
        has_started=False,
        is_overdue=False,
        time_until_start=waiting,
    )


def scoring_window(match: Match, now: datetime, tz: tzinfo) -> MatchTiming:
    """Whether hole scores may be written for ``match`` right now.

    Completed matches are locked until reopened or reset. Scheduled matches
    without a tee time are open.
    """
    if match.status == STATUS_COMPLETED:
        return MatchTiming(
            can_score=False,
            reason="Match is completed; reopen or clear scores to edit",
            has_started=True,
            is_overdue=False,
        )
    if match.status == STATUS_SCHEDULED and match.tee_time is None:
        return MatchTiming(
            can_score=True,
            reason="No tee time set",
            has_started=False,
            is_overdue=False,
        )
    return can_score_match(match.status, match.match_date, match.tee_time, now, tz)


def should_promote(match: Match, now: datetime, tz: tzinfo) -> bool:
    """Scheduled matches go live once their tee time has passed."""
    if match.status != STATUS_SCHEDULED or match.is_bye:
        return False
    starts_at = tee_datetime(match.match_date, match.tee_time, tz)
    if starts_at is None:
        logger.warning("Match %s has no tee time, cannot promote automatically", match.match_id)
        return False
    return now >= starts_at


def is_decided(match: Match) -> bool:
    if match.is_three_way:
        return resolve_three_way(match.holes).status == STATUS_COMPLETED
    return resolve_match_play(match.holes).is_completed


def derive_status(match: Match) -> str:
    if match.status == STATUS_COMPLETED:
        return STATUS_COMPLETED
    if match.holes and is_decided(match):
        return STATUS_COMPLETED
    if any(hole.has_any_score() for hole in match.holes):
        return STATUS_IN_PROGRESS
    return match.status


def reset_match(match: Match) -> Match:
    cleared = tuple(Hole(number=hole.number, par=hole.par) for hole in match.holes)
    return replace(match, holes=cleared, status=STATUS_SCHEDULED)
