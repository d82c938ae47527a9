import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Literal

import psycopg
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field, ValidationError

from tourney.db import (
    clear_match_scores,
    ensure_schema,
    fetch_match,
    fetch_matches,
    fetch_players,
    fetch_stableford_rounds,
    fetch_teams,
    previous_positions,
    replace_standings_cache,
    update_match_status,
    upsert_hole_scores,
)
from tourney.fixtures import load_draw
from tourney.matchplay import describe_result, find_partial_holes, resolve_match_play
from tourney.models import (
    MATCH_STATUS_LABELS,
    STATUS_COMPLETED,
    Match,
    validate_roster,
)
from tourney.settings import configure_logging, load_settings
from tourney.stableford import build_player_leaderboard, build_team_leaderboard
from tourney.standings import (
    POLICY_NONE,
    StandingEntry,
    build_all_standings,
    build_standings,
    policy_for_view,
    tournament_progress,
)
from tourney.status import MatchTiming, derive_status, reset_match, scoring_window, tournament_timezone
from tourney.three_way import resolve_three_way, stroke_play_totals

settings = load_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI()
templates = Jinja2Templates(directory=Path(__file__).resolve().parent / "templates")


class HoleEntry(BaseModel):
    hole_number: int = Field(ge=1, le=18)
    par: int | None = Field(default=None, ge=3, le=6)
    team_a_strokes: int | None = Field(default=None, ge=1)
    team_b_strokes: int | None = Field(default=None, ge=1)
    team_c_strokes: int | None = Field(default=None, ge=1)


class HoleScoresPayload(BaseModel):
    pin: str
    holes: list[HoleEntry]


class PinPayload(BaseModel):
    pin: str


class StatusPayload(BaseModel):
    pin: str
    status: Literal["scheduled", "in-progress", "completed"]


def _standing_payload(entry: StandingEntry) -> dict:
    return {
        "team_id": entry.team.team_id,
        "team_name": entry.team.name,
        "division": entry.division,
        "points": entry.points,
        "matches_played": entry.matches_played,
        "matches_in_progress": entry.matches_in_progress,
        "matches_won": entry.matches_won,
        "matches_lost": entry.matches_lost,
        "matches_halved": entry.matches_halved,
        "holes_won": entry.holes_won,
        "holes_lost": entry.holes_lost,
        "hole_diff": entry.hole_diff,
        "win_rate": entry.win_rate,
        "trend": entry.trend,
        "position": entry.position,
        "position_change": entry.position_change,
    }


def _match_result_payload(match: Match) -> dict:
    payload = {
        "match_id": match.match_id,
        "division": match.division,
        "match_type": match.match_type,
        "session": match.session,
        "match_date": match.match_date.isoformat(),
        "status": match.status,
        "status_label": MATCH_STATUS_LABELS.get(match.status, match.status),
        "is_three_way": match.is_three_way,
    }
    if match.is_three_way:
        resolved = resolve_three_way(match.holes)
        payload.update(
            {
                "result_status": resolved.status,
                "summary": resolved.summary,
                "pairings": [
                    {
                        "side_a": pairing.side_a,
                        "side_b": pairing.side_b,
                        **asdict(pairing.result),
                        "description": describe_result(pairing.result),
                    }
                    for pairing in resolved.pairings
                ],
                "stroke_totals": [asdict(total) for total in stroke_play_totals(match.holes)],
            }
        )
        return payload

    resolved = resolve_match_play(match.holes)
    payload.update(
        {
            "result_status": resolved.status,
            "result": resolved.result,
            "winner": resolved.winner,
            "leader": resolved.leader,
            "team_a_holes_won": resolved.team_a_holes_won,
            "team_b_holes_won": resolved.team_b_holes_won,
            "holes_halved": resolved.holes_halved,
            "holes_played": resolved.holes_played,
            "holes_remaining": resolved.holes_remaining,
            "description": describe_result(resolved),
            "partial_holes": find_partial_holes(match.holes),
        }
    )
    return payload


def _recompute_division(division: str) -> list[StandingEntry]:
    teams = fetch_teams(settings.database_url, division)
    for duplicate_division, seed in validate_roster(teams):
        logger.warning("Duplicate seed %s in %s roster", seed, duplicate_division)
    matches = fetch_matches(settings.database_url, division)
    entries = build_standings(
        matches,
        teams,
        division,
        POLICY_NONE,
        previous_positions(settings.database_url, division),
    )
    replace_standings_cache(settings.database_url, division, entries)
    logger.info("Recomputed %s standings for %d teams", division, len(entries))
    return entries


def _load_match(match_id: int) -> Match:
    match = fetch_match(settings.database_url, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


def _match_timing(match: Match) -> MatchTiming:
    tz = tournament_timezone(settings.tournament_tz)
    return scoring_window(match, datetime.now(tz), tz)


@app.on_event("startup")
def startup() -> None:
    try:
        ensure_schema(settings.database_url)
    except psycopg.Error as exc:
        # Don't block startup if the database is not reachable yet.
        logger.warning("Could not ensure schema: %s", exc)


@app.get("/", response_class=RedirectResponse)
async def index():
    return RedirectResponse(url="/standings")


@app.get("/standings", response_class=HTMLResponse)
async def standings_page(request: Request):
    teams = fetch_teams(settings.database_url)
    matches = fetch_matches(settings.database_url)
    divisions = build_all_standings(matches, teams, policy_for_view(settings.default_standings_view))
    return templates.TemplateResponse(
        request,
        "standings.html",
        {
            "divisions": divisions,
            "progress": tournament_progress(matches),
        },
    )


@app.get("/api/standings/{division}")
async def api_standings(division: str, view: str | None = None):
    try:
        policy = policy_for_view(view or settings.default_standings_view)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    teams = fetch_teams(settings.database_url, division)
    matches = fetch_matches(settings.database_url, division)
    entries = build_standings(
        matches,
        teams,
        division,
        policy,
        previous_positions(settings.database_url, division),
    )
    return {
        "division": division,
        "view": view or settings.default_standings_view,
        "standings": [_standing_payload(entry) for entry in entries],
    }


@app.get("/api/matches/{match_id}/result")
async def api_match_result(match_id: int):
    return _match_result_payload(_load_match(match_id))


@app.get("/api/matches/{match_id}/timing")
async def api_match_timing(match_id: int):
    match = _load_match(match_id)
    return {"match_id": match_id, "status": match.status, **asdict(_match_timing(match))}


@app.post("/api/matches/{match_id}/holes")
async def api_match_holes(match_id: int, request: Request):
    try:
        payload = HoleScoresPayload.model_validate(await request.json())
    except ValidationError as exc:
        return JSONResponse({"error": "Invalid payload", "details": exc.errors()}, status_code=422)

    if payload.pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)

    match = _load_match(match_id)
    timing = _match_timing(match)
    if not timing.can_score:
        return JSONResponse({"error": timing.reason}, status_code=409)

    written = upsert_hole_scores(
        settings.database_url,
        match_id,
        [entry.model_dump() for entry in payload.holes],
    )
    match = _load_match(match_id)
    partial = find_partial_holes(match.holes)
    if partial and not match.is_three_way:
        logger.info("Match %s has one-sided scores on holes %s", match_id, partial)

    status = derive_status(match)
    if status != match.status:
        update_match_status(settings.database_url, match_id, status)
        logger.info("Match %s moved from %s to %s", match_id, match.status, status)
        match = match.with_status(status)
    if status == STATUS_COMPLETED:
        _recompute_division(match.division)

    return {"written": written, **_match_result_payload(match)}


@app.post("/api/matches/{match_id}/reset")
async def api_match_reset(match_id: int, request: Request):
    try:
        payload = PinPayload.model_validate(await request.json())
    except ValidationError as exc:
        return JSONResponse({"error": "Invalid payload", "details": exc.errors()}, status_code=422)

    if payload.pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)

    cleared = reset_match(_load_match(match_id))
    clear_match_scores(settings.database_url, match_id, cleared.status)
    logger.warning("Scores cleared for match %s (%s)", match_id, cleared.division)
    _recompute_division(cleared.division)
    return _match_result_payload(cleared)


@app.post("/api/matches/{match_id}/status")
async def api_match_status(match_id: int, request: Request):
    try:
        payload = StatusPayload.model_validate(await request.json())
    except ValidationError as exc:
        return JSONResponse({"error": "Invalid payload", "details": exc.errors()}, status_code=422)

    if payload.pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)

    match = _load_match(match_id)
    if payload.status != match.status:
        update_match_status(settings.database_url, match_id, payload.status)
        logger.warning("Match %s status overridden from %s to %s", match_id, match.status, payload.status)
        match = match.with_status(payload.status)
    _recompute_division(match.division)
    return _match_result_payload(match)


@app.get("/api/progress")
async def api_progress():
    return tournament_progress(fetch_matches(settings.database_url))


@app.get("/api/stableford")
async def api_stableford():
    players = fetch_players(settings.database_url)
    rounds = fetch_stableford_rounds(settings.database_url)
    entries = build_player_leaderboard(
        (player, rounds.get(player.player_id, {})) for player in players
    )
    teams = fetch_teams(settings.database_url)
    team_entries = build_team_leaderboard(entries, teams)
    return {
        "players": [
            {
                "player_id": entry.player.player_id,
                "name": entry.player.name,
                "team_id": entry.player.team_id,
                "handicap": entry.player.handicap,
                "position": entry.position,
                "total_points": entry.total_points,
                "total_gross": entry.total_gross,
                "total_net": entry.total_net,
                "rounds_played": entry.rounds_played,
                "round_points": {
                    str(scored.round_number): scored.total_points for scored in entry.rounds
                },
            }
            for entry in entries
        ],
        "teams": [
            {
                "team_id": entry.team.team_id,
                "name": entry.team.name,
                "position": entry.position,
                "team_points": entry.team_points,
                "team_gross": entry.team_gross,
                "team_net": entry.team_net,
            }
            for entry in team_entries
            if entry.players
        ],
    }


@app.get("/api/draw")
async def api_draw():
    return load_draw()
