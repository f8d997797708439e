"""Per-player season statistics calculated from games and innings."""

import logging
from collections import defaultdict
from typing import Iterable, Sequence

from .authorization import require_league_member
from .constants import HIGH_INNING_RUNS
from .models import PlayerStatsResult
from .schemas import Game, Inning, InningRecord, Player, PlayerStats, player_id_of
from .season import load_season_records
from .storage import LeagueStore

logger = logging.getLogger('oche.player_stats')


def calculate_player_stats(
    player_id: str,
    games: Iterable[tuple[Game, Sequence[Inning | InningRecord]]],
) -> PlayerStatsResult:
    """
    Calculate a player's totals over a set of games.

    Games flagged DNP and games the player did not take part in are skipped.
    Only regulation innings count toward plus/minus and high innings.

    Args:
        player_id: Player to total
        games: Pairs of (game, that game's innings)

    Returns:
        PlayerStatsResult with games played, wins, losses, plus, minus,
        and high innings
    """
    result = PlayerStatsResult()

    for game, innings in games:
        if game.is_dnp:
            continue

        side = game.side_of(player_id)
        if side is None:
            continue

        result.games_played += 1

        for inning in innings:
            if inning.is_extra:
                continue
            if inning.batter is side:
                result.total_plus += inning.runs
                if inning.runs == HIGH_INNING_RUNS:
                    result.high_innings += 1
            else:
                result.total_minus += inning.runs

        if game.winner is not None and game.winner.value == side.value:
            result.wins += 1
        elif game.winner is not None and game.winner.value == side.opponent.value:
            result.losses += 1

    return result


def _games_with_innings(
    games: list[Game], innings: list[InningRecord]
) -> list[tuple[Game, list[InningRecord]]]:
    by_game = defaultdict(list)
    for inning in innings:
        by_game[inning.game_id].append(inning)
    return [(game, by_game[game.id]) for game in games]


def _upsert(store: LeagueStore, player_id: str, season_id: str, result: PlayerStatsResult) -> PlayerStats:
    values = {
        'games_played': result.games_played,
        'wins': result.wins,
        'losses': result.losses,
        'total_plus': result.total_plus,
        'total_minus': result.total_minus,
        'high_innings': result.high_innings,
    }
    existing = store.query('player_stats', player_id=player_id, season_id=season_id)
    if existing:
        return store.patch('player_stats', existing[0].id, **values)
    return store.insert(
        'player_stats', PlayerStats(player_id=player_id, season_id=season_id, **values)
    )


def recalculate_player_stats(
    store: LeagueStore, player_id: str, season_id: str, league_id: str, user_id: str
) -> PlayerStats:
    """Recompute and store one player's stats for a season."""
    require_league_member(store, user_id, league_id)
    _matches, games, innings = load_season_records(store, league_id, season_id)
    result = calculate_player_stats(player_id, _games_with_innings(games, innings))
    stats = _upsert(store, player_id, season_id, result)
    logger.info(f'Recalculated stats for player {player_id} in season {season_id}')
    return stats


def recalculate_season_stats(
    store: LeagueStore, season_id: str, league_id: str, user_id: str
) -> list[PlayerStats]:
    """Recompute and store stats for every player who appears in the season."""
    require_league_member(store, user_id, league_id)
    _matches, games, innings = load_season_records(store, league_id, season_id)
    pairs = _games_with_innings(games, innings)

    player_ids = []
    for game in games:
        for ref in (game.home, game.visitor):
            player_id = player_id_of(ref)
            if player_id is not None and player_id not in player_ids:
                player_ids.append(player_id)

    updated = [
        _upsert(store, player_id, season_id, calculate_player_stats(player_id, pairs))
        for player_id in player_ids
    ]
    logger.info(f'Recalculated stats for {len(updated)} players in season {season_id}')
    return updated


def player_display_name(store: LeagueStore, player: Player) -> str:
    """A player's own name, else the linked user's name or email."""
    if player.name:
        return player.name
    user = store.get('users', player.user_id)
    return user.display_name if user else 'Unknown'
