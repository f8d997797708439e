"""Game winner determination from innings."""

import logging
from typing import Iterable

from .authorization import SCORERS, require_role
from .innings import get_game, list_innings
from .schemas import Game, Inning, Side, Winner
from .storage import LeagueStore

logger = logging.getLogger('oche.winner')


def side_totals(innings: Iterable[Inning], regulation_only: bool = False) -> dict[Side, int]:
    """
    Sum runs per batter side.

    Args:
        innings: Innings to total
        regulation_only: Skip extra innings (used for run statistics)

    Returns:
        Dict with a total for both Side.HOME and Side.VISITOR
    """
    totals = {Side.HOME: 0, Side.VISITOR: 0}
    for inning in innings:
        if regulation_only and inning.is_extra:
            continue
        totals[inning.batter] += inning.runs
    return totals


def resolve_winner(innings: Iterable[Inning]) -> Winner:
    """
    Determine a game's outcome from its innings.

    Regulation and extra innings are summed alike, so extra innings break a
    regulation tie simply by adding to the totals.

    Returns:
        HOME or VISITOR for the higher total, TIE for equal totals,
        UNDETERMINED when there are no innings at all
    """
    innings = list(innings)
    if not innings:
        return Winner.UNDETERMINED

    totals = side_totals(innings)
    if totals[Side.HOME] > totals[Side.VISITOR]:
        return Winner.HOME
    if totals[Side.VISITOR] > totals[Side.HOME]:
        return Winner.VISITOR
    return Winner.TIE


def refresh_winner(store: LeagueStore, game: Game) -> Winner:
    """
    Recompute a game's winner from its current ledger and store it.

    DNP games never receive a winner, and an undetermined result leaves the
    stored winner untouched.
    """
    if game.is_dnp:
        logger.debug(f'Game {game.id} is DNP; winner not recorded')
        return Winner.UNDETERMINED

    winner = resolve_winner(list_innings(store, game.id))
    if winner is not Winner.UNDETERMINED:
        store.patch('games', game.id, winner=winner)
        logger.info(f'Game {game.id} winner: {winner.value}')
    return winner


def determine_winner(store: LeagueStore, game_id: str, league_id: str, user_id: str) -> Winner:
    """Recompute and record a game's winner. Captain or admin only."""
    require_role(store, user_id, league_id, SCORERS)
    game = get_game(store, game_id, league_id)
    return refresh_winner(store, game)
