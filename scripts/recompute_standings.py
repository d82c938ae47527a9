#!/usr/bin/env python3
"""Rebuild the standings cache from the stored matches and hole scores."""

from __future__ import annotations

import argparse
from datetime import datetime

from tourney.db import (
    fetch_matches,
    fetch_teams,
    previous_positions,
    replace_standings_cache,
    update_match_status,
)
from tourney.models import DIVISIONS, STATUS_IN_PROGRESS, validate_roster
from tourney.settings import configure_logging, load_settings
from tourney.standings import STANDINGS_VIEWS, build_standings, policy_for_view
from tourney.status import should_promote, tournament_timezone


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Recompute division standings and overwrite the cached table."
    )
    parser.add_argument(
        "--division",
        choices=DIVISIONS,
        help="Only rebuild this division (defaults to every division).",
    )
    parser.add_argument(
        "--view",
        choices=sorted(STANDINGS_VIEWS),
        default="official",
        help="How in-progress matches are credited.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the table without writing the cache.",
    )
    parser.add_argument(
        "--promote",
        action="store_true",
        help="Move scheduled matches whose tee time has passed to in-progress first.",
    )
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings.log_level)
    policy = policy_for_view(args.view)
    divisions = [args.division] if args.division else list(DIVISIONS)
    tz = tournament_timezone(settings.tournament_tz)

    for division in divisions:
        teams = fetch_teams(settings.database_url, division)
        if not teams:
            print(f"{division}: no teams, skipped.")
            continue
        for _, seed in validate_roster(teams):
            print(f"{division}: warning, seed {seed} is used by more than one team.")
        matches = fetch_matches(settings.database_url, division)
        if args.promote:
            now = datetime.now(tz)
            due = [match for match in matches if should_promote(match, now, tz)]
            for match in due:
                if not args.dry_run:
                    update_match_status(settings.database_url, match.match_id, STATUS_IN_PROGRESS)
                print(f"  match {match.match_id} promoted to in-progress.")
            if due and not args.dry_run:
                matches = fetch_matches(settings.database_url, division)
        entries = build_standings(
            matches,
            teams,
            division,
            policy,
            previous_positions(settings.database_url, division),
        )
        print(f"{division}:")
        for entry in entries:
            print(
                f"  {entry.position:>2}. {entry.team.name:<24} {entry.points:>5} pts "
                f"{entry.matches_won}-{entry.matches_lost}-{entry.matches_halved} "
                f"({entry.hole_diff:+d}) {entry.trend}"
            )
        if not args.dry_run:
            written = replace_standings_cache(settings.database_url, division, entries)
            print(f"  cached {written} row{'s' if written != 1 else ''}.")


if __name__ == "__main__":
    main()
