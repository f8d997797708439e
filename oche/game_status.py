"""DNP toggling and blind-opponent scoring for individual games."""

import logging
from typing import Iterable

from .authorization import SCORERS, require_role
from .config import league_config
from .constants import REGULATION_INNINGS
from .errors import ValidationError
from .innings import get_game, replace_innings
from .schemas import Game, Inning, Side
from .storage import LeagueStore

logger = logging.getLogger('oche.game_status')


def set_dnp(
    store: LeagueStore, game_id: str, league_id: str, user_id: str, is_dnp: bool
) -> Game:
    """
    Flag a game as did-not-play (or clear the flag). Captain or admin only.

    Setting DNP clears any recorded winner; clearing it leaves the winner as is.

    Raises:
        NotFoundError: If the game does not exist
    """
    require_role(store, user_id, league_id, SCORERS)
    game = get_game(store, game_id, league_id)

    changes = {'is_dnp': is_dnp}
    if is_dnp:
        changes['winner'] = None
    updated = store.patch('games', game.id, **changes)
    logger.info(f'Game {game_id} DNP set to {is_dnp} by {user_id}')
    return updated


def blind_innings(blind_sides: Iterable[Side], default_runs: int) -> list[Inning]:
    """
    Build a full regulation inning set against a blind opponent.

    Each blind side gets default_runs in every inning; a real side starts at
    zero for a captain to fill in.
    """
    blind_sides = set(blind_sides)
    innings = []
    for number in range(1, REGULATION_INNINGS + 1):
        for batter in (Side.HOME, Side.VISITOR):
            runs = default_runs if batter in blind_sides else 0
            innings.append(Inning(inning_number=number, batter=batter, runs=runs))
    return innings


def apply_blind_score(
    store: LeagueStore, game_id: str, league_id: str, user_id: str
) -> list[Inning]:
    """
    Replace a game's ledger with blind-opponent scores. Captain or admin only.

    Raises:
        NotFoundError: If the game or league does not exist
        ValidationError: If neither side of the game is blind
    """
    require_role(store, user_id, league_id, SCORERS)
    game = get_game(store, game_id, league_id)

    blind_sides = game.blind_sides
    if not blind_sides:
        raise ValidationError('No blind player in this game')

    default_runs = league_config(store, league_id).match.blind_rules.default_runs
    innings = replace_innings(store, game.id, blind_innings(blind_sides, default_runs))
    logger.info(
        f'Blind scores applied to game {game_id}: '
        f'{"/".join(side.value for side in blind_sides)} gets {default_runs} runs per inning'
    )
    return innings
