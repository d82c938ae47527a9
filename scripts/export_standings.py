import argparse
import json
from pathlib import Path

from tourney.db import fetch_matches, fetch_teams
from tourney.settings import load_settings
from tourney.standings import (
    STANDINGS_VIEWS,
    build_all_standings,
    policy_for_view,
    tournament_progress,
)


def export_snapshot(view: str) -> dict:
    db_url = load_settings().database_url
    teams = fetch_teams(db_url)
    matches = fetch_matches(db_url)
    divisions = build_all_standings(matches, teams, policy_for_view(view))
    return {
        "view": view,
        "progress": tournament_progress(matches),
        "divisions": {
            division: [
                {
                    "position": entry.position,
                    "team": entry.team.name,
                    "points": entry.points,
                    "played": entry.matches_played,
                    "won": entry.matches_won,
                    "lost": entry.matches_lost,
                    "halved": entry.matches_halved,
                    "holes_won": entry.holes_won,
                    "holes_lost": entry.holes_lost,
                    "trend": entry.trend,
                }
                for entry in entries
            ]
            for division, entries in divisions.items()
        },
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Dump computed standings as JSON.")
    parser.add_argument(
        "--view",
        choices=sorted(STANDINGS_VIEWS),
        default="official",
        help="Standings view to export (defaults to official).",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Path to write the JSON export (defaults to stdout).",
    )
    args = parser.parse_args()

    payload = json.dumps(export_snapshot(args.view), default=str, indent=2)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        print(f"Standings saved to {args.output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
