"""Inning ledger: the canonical scored runs of each game.

A game's innings are only ever replaced as a whole set. Every writer
(reconciliation, blind scoring, direct captain entry) goes through
replace_innings().
"""

import logging
from typing import Any, Iterable, Optional

import pydantic

from .authorization import SCORERS, require_league_member, require_role
from .constants import MAX_RUNS, MIN_RUNS
from .errors import NotFoundError, ValidationError
from .schemas import Game, Inning, InningRecord, Side
from .storage import LeagueStore

logger = logging.getLogger('oche.innings')


def get_game(store: LeagueStore, game_id: str, league_id: Optional[str] = None) -> Game:
    """
    Fetch a game or raise NotFoundError.

    When league_id is given, a game whose match belongs to another league
    is reported as missing.
    """
    game = store.get('games', game_id)
    if game is None:
        raise NotFoundError('Game not found')
    if league_id is not None:
        match = store.get('matches', game.match_id)
        if match is None or match.league_id != league_id:
            logger.warning(f'Game {game_id} is not part of league {league_id}')
            raise NotFoundError('Game not found')
    return game


def coerce_innings(items: Iterable[Inning | dict[str, Any]]) -> list[Inning]:
    """
    Turn a mix of Inning objects and plain dicts into Innings.

    Raises:
        ValidationError: If an item is missing fields or has the wrong types
    """
    innings = []
    for item in items:
        if isinstance(item, Inning):
            innings.append(item)
            continue
        try:
            innings.append(Inning.model_validate(item))
        except pydantic.ValidationError as e:
            raise ValidationError(f'Invalid inning {item!r}: {e}') from e
    return innings


def check_runs(innings: Iterable[Inning]) -> None:
    """
    Ensure every run count lies within the allowed range.

    Raises:
        ValidationError: On the first inning outside [0, 9]
    """
    for inning in innings:
        if inning.runs < MIN_RUNS or inning.runs > MAX_RUNS:
            logger.warning(
                f'Rejected inning {inning.inning_number} ({inning.batter.value}) '
                f'with {inning.runs} runs'
            )
            raise ValidationError(f'Runs must be between {MIN_RUNS} and {MAX_RUNS}')


def check_unique_cells(innings: Iterable[Inning]) -> None:
    """
    Ensure no (inning number, batter) cell appears more than once.

    Raises:
        ValidationError: On the first repeated cell
    """
    seen = set()
    for inning in innings:
        if inning.key in seen:
            logger.warning(
                f'Rejected duplicate inning {inning.inning_number} ({inning.batter.value})'
            )
            raise ValidationError(
                f'Duplicate inning {inning.inning_number} for {inning.batter.value} side'
            )
        seen.add(inning.key)


def check_innings(innings: Iterable[Inning]) -> None:
    """Run every per-set check on a proposed inning set."""
    innings = list(innings)
    check_runs(innings)
    check_unique_cells(innings)


def _sort_key(inning: Inning | InningRecord) -> tuple[int, int]:
    return inning.inning_number, 0 if inning.batter is Side.HOME else 1


def replace_innings(
    store: LeagueStore,
    game_id: str,
    innings: Iterable[Inning | dict[str, Any]],
) -> list[Inning]:
    """
    Replace the full inning set of a game.

    Validation happens before anything is touched, so a rejected set
    leaves the previous ledger intact.

    Returns:
        The new innings, in ledger order
    """
    new_innings = coerce_innings(innings)
    check_innings(new_innings)

    records = [
        InningRecord(
            game_id=game_id,
            inning_number=inning.inning_number,
            batter=inning.batter,
            runs=inning.runs,
            is_extra=inning.is_extra,
        )
        for inning in new_innings
    ]

    for existing in store.query('innings', game_id=game_id):
        store.delete('innings', existing.id)
    for record in records:
        store.insert('innings', record)

    logger.debug(f'Ledger for game {game_id} replaced with {len(records)} innings')
    return sorted(new_innings, key=_sort_key)


def list_innings(store: LeagueStore, game_id: str) -> list[Inning]:
    """Return a game's innings by inning number, home before visitor."""
    records = sorted(store.query('innings', game_id=game_id), key=_sort_key)
    return [record.to_inning() for record in records]


def save_innings(
    store: LeagueStore,
    game_id: str,
    league_id: str,
    user_id: str,
    innings: Iterable[Inning | dict[str, Any]],
) -> list[Inning]:
    """Directly enter a game's innings. Captain or admin only."""
    require_role(store, user_id, league_id, SCORERS)
    get_game(store, game_id, league_id)
    saved = replace_innings(store, game_id, innings)
    logger.info(f'User {user_id} saved {len(saved)} innings for game {game_id}')
    return saved


def get_game_innings(
    store: LeagueStore, game_id: str, league_id: str, user_id: str
) -> list[Inning]:
    """Read a game's innings. Any league member may call this."""
    require_league_member(store, user_id, league_id)
    return list_innings(store, game_id)
