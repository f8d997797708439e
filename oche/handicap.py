"""Handicap spot runs computed from player averages.

Handicaps are a read-time adjustment for display. Nothing here writes a
game's stored winner.
"""

import logging
import math
from typing import Optional

from .authorization import ADMINS, require_league_member, require_role
from .config import league_config
from .errors import NotFoundError, ValidationError
from .innings import get_game, list_innings
from .models import GameHandicap, HandicappedResult, SpotRuns
from .schemas import Game, Match, PlayerStats, Side, Winner, player_id_of
from .season import active_season
from .storage import LeagueStore
from .utils import round_half_up
from .winner import side_totals

logger = logging.getLogger('oche.handicap')


def resolve_handicap_percent(
    league_percent: float,
    match_percent: Optional[float] = None,
    game_percent: Optional[float] = None,
) -> float:
    """Effective handicap percent: game override, then match override, then league default."""
    if game_percent is not None:
        return game_percent
    if match_percent is not None:
        return match_percent
    return league_percent


def compute_spot_runs(home_average: float, visitor_average: float, percent: float) -> SpotRuns:
    """
    Compute spot runs from two players' averages.

    spot_runs = floor(|home_average - visitor_average| * percent / 100),
    given to the lower-averaged side. No recipient when spot_runs is 0.

    Example:
        compute_spot_runs(5.0, 3.0, 70) -> SpotRuns(spot_runs=1, recipient_side=Side.VISITOR)
    """
    spot_runs = math.floor(abs(home_average - visitor_average) * percent / 100)
    if spot_runs == 0:
        return SpotRuns(spot_runs=0, recipient_side=None)

    recipient = Side.HOME if home_average < visitor_average else Side.VISITOR
    return SpotRuns(spot_runs=spot_runs, recipient_side=recipient)


def determine_handicapped_winner(
    home_raw_total: int,
    visitor_raw_total: int,
    spot_runs: int,
    recipient_side: Optional[Side],
) -> HandicappedResult:
    """Add spot runs to the recipient's raw total and compare the adjusted totals."""
    home_adjusted = home_raw_total
    visitor_adjusted = visitor_raw_total

    if recipient_side is Side.HOME:
        home_adjusted += spot_runs
    elif recipient_side is Side.VISITOR:
        visitor_adjusted += spot_runs

    if home_adjusted > visitor_adjusted:
        winner = Winner.HOME
    elif visitor_adjusted > home_adjusted:
        winner = Winner.VISITOR
    else:
        winner = Winner.TIE

    return HandicappedResult(
        home_adjusted=home_adjusted, visitor_adjusted=visitor_adjusted, winner=winner
    )


def player_average(stats: Optional[PlayerStats]) -> float:
    """Unrounded runs-per-game average; 0 for a player without games."""
    if stats is None or stats.games_played == 0:
        return 0.0
    return stats.total_plus / stats.games_played


def _season_stats(store: LeagueStore, player_id: Optional[str], season_id: str) -> Optional[PlayerStats]:
    if player_id is None:
        return None
    found = store.query('player_stats', player_id=player_id, season_id=season_id)
    return found[0] if found else None


def get_game_handicap(
    store: LeagueStore, game_id: str, league_id: str, user_id: str
) -> Optional[GameHandicap]:
    """
    Handicap details for a game, for display. Any league member may call this.

    Returns None when handicapping does not apply: disabled for the league,
    the game or its match is missing, a blind slot in the game, an effective
    percent of 0, or no active season.
    """
    require_league_member(store, user_id, league_id)
    config = league_config(store, league_id)
    if not config.handicap.enabled:
        return None

    game: Optional[Game] = store.get('games', game_id)
    if game is None or game.has_blind:
        return None

    match: Optional[Match] = store.get('matches', game.match_id)
    if match is None or match.league_id != league_id:
        return None

    percent = resolve_handicap_percent(
        config.handicap.percent, match.handicap_percent, game.handicap_percent
    )
    if percent == 0:
        return None

    season = active_season(store, league_id)
    if season is None:
        logger.debug(f'No active season for league {league_id}; no handicap for game {game_id}')
        return None
    season_id = season.id

    home_average = player_average(_season_stats(store, player_id_of(game.home), season_id))
    visitor_average = player_average(_season_stats(store, player_id_of(game.visitor), season_id))
    spot = compute_spot_runs(home_average, visitor_average, percent)

    result = None
    innings = list_innings(store, game_id)
    if innings:
        totals = side_totals(innings)
        result = determine_handicapped_winner(
            totals[Side.HOME], totals[Side.VISITOR], spot.spot_runs, spot.recipient_side
        )

    return GameHandicap(
        spot_runs=spot.spot_runs,
        recipient_side=spot.recipient_side,
        home_average=round_half_up(home_average),
        visitor_average=round_half_up(visitor_average),
        handicap_percent=percent,
        result=result,
    )


def set_handicap_override(
    store: LeagueStore,
    league_id: str,
    user_id: str,
    percent: Optional[float],
    match_id: Optional[str] = None,
    game_id: Optional[str] = None,
) -> None:
    """
    Set or clear (percent=None) a match- or game-level handicap percent. Admin only.

    Raises:
        ValidationError: If not exactly one target is given or percent is out of range
        NotFoundError: If the target does not exist
    """
    require_role(store, user_id, league_id, ADMINS)

    if (match_id is None) == (game_id is None):
        raise ValidationError('Provide exactly one of match_id or game_id')
    if percent is not None and (percent < 0 or percent > 100):
        raise ValidationError('Handicap percentage must be between 0 and 100')

    if game_id is not None:
        get_game(store, game_id, league_id)
        store.patch('games', game_id, handicap_percent=percent)
        logger.info(f'Game {game_id} handicap override set to {percent}')
        return

    match = store.get('matches', match_id)
    if match is None or match.league_id != league_id:
        raise NotFoundError('Match not found')
    store.patch('matches', match_id, handicap_percent=percent)
    logger.info(f'Match {match_id} handicap override set to {percent}')
