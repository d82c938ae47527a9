from collections import defaultdict
from typing import Iterable, Optional

import psycopg

from tourney.models import Hole, Match, Player, Team
from tourney.standings import StandingEntry

SCHEMA_STATEMENTS = (
    """
    create table if not exists teams (
        id serial primary key,
        name text not null,
        division text not null,
        seed integer not null default 0,
        color text,
        unique (division, seed)
    );
    """,
    """
    create table if not exists players (
        id serial primary key,
        team_id integer not null references teams (id) on delete cascade,
        name text not null,
        handicap integer not null default 0,
        is_pro boolean not null default false,
        is_junior boolean not null default false,
        is_ex_officio boolean not null default false
    );
    """,
    """
    create table if not exists matches (
        id serial primary key,
        division text not null,
        match_type text not null,
        session text not null,
        match_date date not null,
        tee_time time,
        team_a_id integer not null references teams (id),
        team_b_id integer not null references teams (id),
        team_c_id integer references teams (id),
        status text not null default 'scheduled',
        is_bye boolean not null default false,
        updated_at timestamptz not null default now()
    );
    """,
    """
    create table if not exists holes (
        id serial primary key,
        match_id integer not null references matches (id) on delete cascade,
        hole_number integer not null,
        par integer not null default 4,
        team_a_strokes integer,
        team_b_strokes integer,
        team_c_strokes integer,
        updated_at timestamptz not null default now(),
        unique (match_id, hole_number)
    );
    """,
    """
    create table if not exists stableford_scores (
        id serial primary key,
        player_id integer not null references players (id) on delete cascade,
        round_number integer not null,
        hole_number integer not null,
        gross integer,
        unique (player_id, round_number, hole_number)
    );
    """,
    """
    create table if not exists standings_cache (
        team_id integer not null references teams (id) on delete cascade,
        division text not null,
        points numeric not null,
        matches_played integer not null,
        matches_won integer not null,
        matches_lost integer not null,
        matches_halved integer not null,
        holes_won integer not null,
        holes_lost integer not null,
        position integer not null,
        position_change text not null,
        trend text not null,
        updated_at timestamptz not null default now(),
        primary key (team_id, division)
    );
    """,
)


def ensure_schema(database_url: str) -> None:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)


def _row_to_team(row: tuple) -> Team:
    return Team(team_id=row[0], name=row[1], division=row[2], seed=row[3], color=row[4])


def _row_to_player(row: tuple) -> Player:
    return Player(
        player_id=row[0],
        team_id=row[1],
        name=row[2],
        handicap=row[3],
        is_pro=row[4],
        is_junior=row[5],
        is_ex_officio=row[6],
    )


def _row_to_hole(row: tuple) -> Hole:
    return Hole(
        number=row[0],
        par=row[1],
        team_a_strokes=row[2],
        team_b_strokes=row[3],
        team_c_strokes=row[4],
    )


def _row_to_match(row: tuple, holes: Iterable[Hole] = ()) -> Match:
    return Match(
        match_id=row[0],
        division=row[1],
        match_type=row[2],
        session=row[3],
        match_date=row[4],
        tee_time=row[5],
        team_a_id=row[6],
        team_b_id=row[7],
        team_c_id=row[8],
        status=row[9],
        is_bye=row[10],
        holes=tuple(sorted(holes, key=lambda hole: hole.number)),
    )


MATCH_COLUMNS = """
    id,
    division,
    match_type,
    session,
    match_date,
    tee_time,
    team_a_id,
    team_b_id,
    team_c_id,
    status,
    is_bye
"""


def fetch_teams(database_url: str, division: str | None = None) -> list[Team]:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            query = "select id, name, division, seed, color from teams"
            params: tuple = ()
            if division is not None:
                query += " where division = %s"
                params = (division,)
            cur.execute(query + " order by division, seed, name;", params)
            return [_row_to_team(row) for row in cur.fetchall()]


def fetch_players(database_url: str) -> list[Player]:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select id, team_id, name, handicap, is_pro, is_junior, is_ex_officio
                from players
                order by team_id, name;
                """
            )
            return [_row_to_player(row) for row in cur.fetchall()]


def _fetch_holes_by_match(cur: psycopg.Cursor, match_ids: list[int]) -> dict[int, list[Hole]]:
    holes: dict[int, list[Hole]] = defaultdict(list)
    if not match_ids:
        return holes
    cur.execute(
        """
        select match_id, hole_number, par, team_a_strokes, team_b_strokes, team_c_strokes
        from holes
        where match_id = any(%s)
        order by match_id, hole_number;
        """,
        (match_ids,),
    )
    for row in cur.fetchall():
        holes[row[0]].append(_row_to_hole(row[1:]))
    return holes


def fetch_matches(database_url: str, division: str | None = None) -> list[Match]:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            query = f"select {MATCH_COLUMNS} from matches"
            params: tuple = ()
            if division is not None:
                query += " where division = %s"
                params = (division,)
            cur.execute(query + " order by match_date, session, id;", params)
            rows = cur.fetchall()
            holes = _fetch_holes_by_match(cur, [row[0] for row in rows])
            return [_row_to_match(row, holes.get(row[0], [])) for row in rows]


def fetch_match(database_url: str, match_id: int) -> Optional[Match]:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(f"select {MATCH_COLUMNS} from matches where id = %s;", (match_id,))
            row = cur.fetchone()
            if not row:
                return None
            holes = _fetch_holes_by_match(cur, [match_id])
            return _row_to_match(row, holes.get(match_id, []))


def upsert_hole_scores(database_url: str, match_id: int, holes: Iterable[dict]) -> int:
    """Write each hole's strokes; a column absent from the entry keeps its stored value."""
    written = 0
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            for entry in holes:
                cur.execute(
                    """
                    insert into holes (
                        match_id,
                        hole_number,
                        par,
                        team_a_strokes,
                        team_b_strokes,
                        team_c_strokes
                    )
                    values (%s, %s, coalesce(%s, 4), %s, %s, %s)
                    on conflict (match_id, hole_number) do update
                        set par = coalesce(%s, holes.par),
                            team_a_strokes = coalesce(excluded.team_a_strokes, holes.team_a_strokes),
                            team_b_strokes = coalesce(excluded.team_b_strokes, holes.team_b_strokes),
                            team_c_strokes = coalesce(excluded.team_c_strokes, holes.team_c_strokes),
                            updated_at = now();
                    """,
                    (
                        match_id,
                        entry["hole_number"],
                        entry.get("par"),
                        entry.get("team_a_strokes"),
                        entry.get("team_b_strokes"),
                        entry.get("team_c_strokes"),
                        entry.get("par"),
                    ),
                )
                written += 1
    return written


def update_match_status(database_url: str, match_id: int, status: str) -> None:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                update matches
                set status = %s,
                    updated_at = now()
                where id = %s;
                """,
                (status, match_id),
            )


def clear_match_scores(database_url: str, match_id: int, status: str) -> None:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                update holes
                set team_a_strokes = null,
                    team_b_strokes = null,
                    team_c_strokes = null,
                    updated_at = now()
                where match_id = %s;
                """,
                (match_id,),
            )
            cur.execute(
                "update matches set status = %s, updated_at = now() where id = %s;",
                (status, match_id),
            )


def fetch_stableford_rounds(database_url: str) -> dict[int, dict[int, list[int | None]]]:
    """player id -> round number -> 18 gross scores (None where not entered)."""
    rounds: dict[int, dict[int, list[int | None]]] = defaultdict(dict)
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select player_id, round_number, hole_number, gross
                from stableford_scores
                order by player_id, round_number, hole_number;
                """
            )
            for player_id, round_number, hole_number, gross in cur.fetchall():
                card = rounds[player_id].setdefault(round_number, [None] * 18)
                if 1 <= hole_number <= 18:
                    card[hole_number - 1] = gross
    return rounds


def replace_standings_cache(database_url: str, division: str, entries: Iterable[StandingEntry]) -> int:
    rows = [
        (
            entry.team.team_id,
            division,
            entry.points,
            entry.matches_played,
            entry.matches_won,
            entry.matches_lost,
            entry.matches_halved,
            entry.holes_won,
            entry.holes_lost,
            entry.position,
            entry.position_change,
            entry.trend,
        )
        for entry in entries
    ]
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute("delete from standings_cache where division = %s;", (division,))
            cur.executemany(
                """
                insert into standings_cache (
                    team_id,
                    division,
                    points,
                    matches_played,
                    matches_won,
                    matches_lost,
                    matches_halved,
                    holes_won,
                    holes_lost,
                    position,
                    position_change,
                    trend
                )
                values (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s);
                """,
                rows,
            )
    return len(rows)


def fetch_standings_cache(database_url: str, division: str) -> list[dict]:
    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select team_id, division, points, matches_played, matches_won, matches_lost,
                       matches_halved, holes_won, holes_lost, position, position_change,
                       trend, updated_at
                from standings_cache
                where division = %s
                order by position;
                """,
                (division,),
            )
            return [
                {
                    "team_id": row[0],
                    "division": row[1],
                    "points": float(row[2]),
                    "matches_played": row[3],
                    "matches_won": row[4],
                    "matches_lost": row[5],
                    "matches_halved": row[6],
                    "holes_won": row[7],
                    "holes_lost": row[8],
                    "position": row[9],
                    "position_change": row[10],
                    "trend": row[11],
                    "updated_at": row[12],
                }
                for row in cur.fetchall()
            ]


def previous_positions(database_url: str, division: str) -> dict[int, int]:
    return {row["team_id"]: row["position"] for row in fetch_standings_cache(database_url, division)}
