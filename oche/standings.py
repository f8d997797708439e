"""League standings with tiebreaker sorting.

Ranking order, each level breaking ties in the previous one:
    1. Match points (game wins x points per win, plus any bonus point)
    2. Total runs scored (regulation innings only)
    3. Plus/minus (runs scored - runs allowed)
Teams still level after all three keep their input order and get distinct
sequential ranks.
"""

import logging
from collections import defaultdict
from typing import Iterable, Optional

from .authorization import SCORERS, require_league_member, require_role
from .config import league_config
from .errors import NotFoundError
from .handicap import player_average
from .models import RosterEntry, StandingsRow, StandingsView, TeamStatsView
from .player_stats import player_display_name
from .schemas import (
    Game,
    InningRecord,
    LeagueConfig,
    Match,
    MatchTotals,
    PlayerStats,
    Side,
    Team,
    Winner,
)
from .season import list_seasons, load_season_records, resolve_season_id
from .storage import LeagueStore
from .winner import side_totals

logger = logging.getLogger('oche.standings')


def compute_match_totals(games: Iterable[Game], innings: Iterable[InningRecord]) -> MatchTotals:
    """
    Total each side's regulation runs over a match's played games.

    The bonus winner is the side with the strictly higher aggregate; a tie
    awards no bonus.
    """
    played = {game.id for game in games if not game.is_dnp}
    totals = side_totals(
        (inning for inning in innings if inning.game_id in played), regulation_only=True
    )

    bonus_winner = None
    if totals[Side.HOME] > totals[Side.VISITOR]:
        bonus_winner = Side.HOME
    elif totals[Side.VISITOR] > totals[Side.HOME]:
        bonus_winner = Side.VISITOR

    return MatchTotals(
        home_plus=totals[Side.HOME],
        visitor_plus=totals[Side.VISITOR],
        bonus_winner=bonus_winner,
    )


def compute_standings(
    matches: Iterable[Match],
    games: Iterable[Game],
    innings: Iterable[InningRecord],
    config: LeagueConfig,
    teams: Iterable[Team],
    division_id: Optional[str] = None,
) -> list[StandingsRow]:
    """
    Aggregate a season's matches into ranked team standings.

    Args:
        matches: The season's matches
        games: Games belonging to those matches
        innings: Ledger innings for those games
        config: League configuration (points per win, bonus rule)
        teams: League teams; only these teams get rows
        division_id: Restrict rows to one division

    Returns:
        Rows ranked 1..N; empty when the season has no matches
    """
    matches = list(matches)
    if not matches:
        return []

    rows: dict[str, StandingsRow] = {
        team.id: StandingsRow(rank=0, team_id=team.id, team_name=team.name)
        for team in teams
        if division_id is None or team.division_id == division_id
    }

    games_by_match = defaultdict(list)
    for game in games:
        games_by_match[game.match_id].append(game)
    innings_by_game = defaultdict(list)
    for inning in innings:
        innings_by_game[inning.game_id].append(inning)

    points_per_win = config.match.points_per_game_win

    for match in matches:
        side_rows = {
            Side.HOME: rows.get(match.home_team_id),
            Side.VISITOR: rows.get(match.visitor_team_id),
        }
        game_wins = {Side.HOME: 0, Side.VISITOR: 0}

        for game in games_by_match[match.id]:
            if game.is_dnp:
                continue

            if game.winner is Winner.HOME:
                game_wins[Side.HOME] += 1
            elif game.winner is Winner.VISITOR:
                game_wins[Side.VISITOR] += 1

            # Extra innings never count toward run totals
            runs = side_totals(innings_by_game[game.id], regulation_only=True)
            for side, row in side_rows.items():
                if row is not None:
                    row.total_runs_scored += runs[side]
                    row.total_runs_allowed += runs[side.opponent]

        for side, row in side_rows.items():
            if row is not None:
                row.game_wins += game_wins[side]
                row.match_points += game_wins[side] * points_per_win

        if config.match.bonus_for_total and match.totals and match.totals.bonus_winner:
            bonus_row = side_rows[match.totals.bonus_winner]
            if bonus_row is not None:
                bonus_row.match_points += 1

    ranked = sorted(
        rows.values(),
        key=lambda row: (-row.match_points, -row.total_runs_scored, -row.plus_minus),
    )
    for rank, row in enumerate(ranked, 1):
        row.rank = rank

    return ranked


def get_standings(
    store: LeagueStore,
    league_id: str,
    user_id: str,
    season_id: Optional[str] = None,
    division_id: Optional[str] = None,
) -> StandingsView:
    """
    Standings for a season (explicit or the active one). Any league member may call this.

    Returns:
        StandingsView with ranked rows plus the league's seasons and divisions
    """
    require_league_member(store, user_id, league_id)
    config = league_config(store, league_id)

    view = StandingsView(
        seasons=list_seasons(store, league_id),
        divisions=store.query('divisions', league_id=league_id),
    )
    view.season_id = resolve_season_id(store, league_id, season_id)
    if view.season_id is None:
        return view

    matches, games, innings = load_season_records(store, league_id, view.season_id)
    teams = store.query('teams', league_id=league_id)
    view.rows = compute_standings(matches, games, innings, config, teams, division_id)
    logger.debug(f'Standings for season {view.season_id}: {len(view.rows)} teams')
    return view


def record_match_totals(
    store: LeagueStore, match_id: str, league_id: str, user_id: str
) -> MatchTotals:
    """Compute a match's aggregate totals and bonus winner and store them. Captain or admin only."""
    require_role(store, user_id, league_id, SCORERS)
    match = store.get('matches', match_id)
    if match is None:
        raise NotFoundError('Match not found')

    games = store.query('games', match_id=match_id)
    innings = [inning for game in games for inning in store.query('innings', game_id=game.id)]
    totals = compute_match_totals(games, innings)
    store.patch('matches', match_id, totals=totals)
    logger.info(
        f'Match {match_id} totals: home {totals.home_plus}, visitor {totals.visitor_plus}, '
        f'bonus {totals.bonus_winner.value if totals.bonus_winner else "none"}'
    )
    return totals


def get_team_stats(
    store: LeagueStore,
    team_id: str,
    league_id: str,
    user_id: str,
    season_id: Optional[str] = None,
) -> TeamStatsView:
    """One team's standings row and roster stats for a season."""
    require_league_member(store, user_id, league_id)
    team = store.get('teams', team_id)
    if team is None:
        raise NotFoundError('Team not found')

    view = TeamStatsView(team_id=team.id, team_name=team.name, row=None)
    view.season_id = resolve_season_id(store, league_id, season_id)
    if view.season_id is None:
        return view

    matches, games, innings = load_season_records(store, league_id, view.season_id)
    rows = compute_standings(
        matches, games, innings, league_config(store, league_id), [team]
    )
    view.row = rows[0] if rows else None

    for player in store.query('players', team_id=team_id):
        found = store.query('player_stats', player_id=player.id, season_id=view.season_id)
        stats = found[0] if found else PlayerStats(player_id=player.id, season_id=view.season_id)
        view.roster.append(
            RosterEntry(
                player_id=player.id,
                name=player_display_name(store, player),
                stats=stats,
                average=player_average(stats),
            )
        )

    return view
