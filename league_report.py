#!/usr/bin/env python3
"""
Oche league report CLI

Prints standings and leaderboards for a league stored in a JSON store file,
and can submit a score sheet exported from Excel as one side's score entry.

Usage:
    python league_report.py --store data/league.json --league L1 --user U1
    python league_report.py --store data/league.json --league L1 --user U1 --season S1 --recalculate
    python league_report.py --store data/league.json --league L1 --user U1 \\
        --import-sheet week3.xlsx --game G7 --side home
"""

import argparse
import logging
import sys
from pathlib import Path

from oche import (
    LeagueStore,
    OcheError,
    get_leaderboards,
    get_standings,
    parse_score_sheet,
    recalculate_season_stats,
    rows_to_innings,
    submit_score_entry,
    validate_import_rows,
    validate_inning_set,
)
from oche.logging_config import setup_logging
from oche.player_stats import player_display_name


def print_standings(store: LeagueStore, args) -> None:
    view = get_standings(store, args.league, args.user, args.season, args.division)
    if view.season_id is None:
        print("No active season.")
        return

    print("\n" + "=" * 60)
    print("STANDINGS")
    print("=" * 60)
    if not view.rows:
        print("  No matches played yet.")
    for row in view.rows:
        print(
            f"  {row.rank}. {row.team_name}: {row.match_points} pts, "
            f"{row.game_wins} wins, {row.total_runs_scored} runs, {row.plus_minus:+d}"
        )


def print_leaderboards(store: LeagueStore, args) -> None:
    view = get_leaderboards(store, args.league, args.user, args.season)
    for category in view.categories:
        print("\n" + "-" * 60)
        print(category.name.upper())
        print("-" * 60)
        if not category.entries:
            print("  (no players)")
        for entry in category.entries:
            print(f"  {entry.rank}. {entry.player_name} ({entry.team_name}): {entry.value}")


def roster_names_for_game(store: LeagueStore, game_id: str) -> list[str]:
    """Names of every player on either team of the game's match."""
    game = store.get('games', game_id)
    if game is None:
        return []
    match = store.get('matches', game.match_id)
    if match is None:
        return []
    players = []
    for team_id in (match.home_team_id, match.visitor_team_id):
        players.extend(store.query('players', team_id=team_id))
    return [player_display_name(store, player) for player in players]


def import_sheet(store: LeagueStore, args) -> bool:
    """Submit a two-line score sheet (home player, then visitor player) as a score entry."""
    parsed = parse_score_sheet(args.import_sheet, args.sheet)
    problems = parsed.errors + validate_import_rows(parsed.rows, roster_names_for_game(store, args.game))
    if len(parsed.rows) != 2:
        problems.append(f"Expected 2 score lines (home, visitor) but found {len(parsed.rows)}")

    if problems:
        print(f"❌ Could not import {args.import_sheet}:")
        for problem in problems:
            print(f"   {problem}")
        return False

    innings = rows_to_innings(parsed.rows[0], parsed.rows[1])
    for warning in validate_inning_set(innings):
        print(f"⚠️  {warning}")

    transition = submit_score_entry(store, args.game, args.league, args.user, args.side, innings)
    print(f"Submitted {args.side} entry for game {args.game}: {transition.status.value}")
    if transition.comparison and transition.comparison.discrepancies:
        for d in transition.comparison.discrepancies:
            values = ", ".join(f"{side.value}={value}" for side, value in d.value_by_side.items())
            print(f"   Inning {d.inning_number} ({d.batter.value} batting): {values}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Oche darts league standings and score import")
    parser.add_argument(
        "--store", "-s",
        default="data/league.json",
        help="Path to the league store JSON file",
    )
    parser.add_argument(
        "--league", "-l",
        required=True,
        help="League id",
    )
    parser.add_argument(
        "--user", "-u",
        required=True,
        help="Id of the user running the report (must be a league member)",
    )
    parser.add_argument(
        "--season",
        default=None,
        help="Season id (defaults to the active season)",
    )
    parser.add_argument(
        "--division",
        default=None,
        help="Only show standings for this division",
    )
    parser.add_argument(
        "--recalculate",
        action="store_true",
        help="Recalculate player stats for the season before reporting",
    )
    parser.add_argument(
        "--import-sheet",
        default=None,
        help="Excel score sheet to submit as a score entry",
    )
    parser.add_argument(
        "--sheet",
        default=None,
        help="Sheet name within the workbook (defaults to the first sheet)",
    )
    parser.add_argument("--game", default=None, help="Game id for --import-sheet")
    parser.add_argument(
        "--side",
        choices=["home", "visitor"],
        default=None,
        help="Which captain is submitting the imported sheet",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output",
    )
    parser.add_argument(
        "--debug-module",
        action="append",
        default=[],
        metavar="MODULE",
        help="Log debug output from one module only, e.g. reconciliation (repeatable)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Also write a log file to this directory",
    )

    args = parser.parse_args()
    setup_logging(
        log_dir=Path(args.log_dir) if args.log_dir else None,
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=args.log_dir is not None,
        module_levels={module: logging.DEBUG for module in args.debug_module},
    )

    store_path = Path(args.store)
    if not store_path.exists():
        print(f"❌ Store file not found: {store_path}")
        sys.exit(1)

    store = LeagueStore.load(store_path)

    try:
        if args.import_sheet:
            if not args.game or not args.side:
                parser.error("--import-sheet requires --game and --side")
            if not import_sheet(store, args):
                sys.exit(1)
            store.save(store_path)
            return

        if args.recalculate:
            season_id = args.season or get_standings(store, args.league, args.user).season_id
            if season_id:
                updated = recalculate_season_stats(store, season_id, args.league, args.user)
                store.save(store_path)
                print(f"Recalculated stats for {len(updated)} players")

        print_standings(store, args)
        print_leaderboards(store, args)
    except OcheError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
