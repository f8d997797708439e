"""League configuration management."""

import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Optional

from .authorization import ADMINS, require_role
from .constants import HANDICAP_RECALC_FREQUENCIES, MAX_RUNS, MIN_RUNS
from .errors import NotFoundError, ValidationError
from .schemas import (
    BlindRules,
    HandicapSettings,
    League,
    LeagueConfig,
    MatchConfig,
    Membership,
    Role,
)
from .storage import LeagueStore
from .utils import load_json

logger = logging.getLogger('oche.config')

DEFAULT_CONFIG_RESOURCE = resources.files(__package__) / 'data' / 'league_config.json'


def load_league_config(path: Path | str) -> LeagueConfig:
    """
    Load a league configuration from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file has an invalid structure
    """
    return load_json(path, schema=LeagueConfig)


@lru_cache(maxsize=1)
def get_default_config() -> LeagueConfig:
    """
    Load the configuration new leagues start from (oche/data/league_config.json).

    Configuration is cached after first load for performance.

    Example:
        from oche.config import get_default_config
        config = get_default_config()
        print(f"Points per game win: {config.match.points_per_game_win}")
    """
    with resources.as_file(DEFAULT_CONFIG_RESOURCE) as path:
        return load_league_config(path)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_default_config.cache_clear()


def get_league(store: LeagueStore, league_id: str) -> League:
    """Fetch a league or raise NotFoundError."""
    league = store.get('leagues', league_id)
    if league is None:
        raise NotFoundError('League not found')
    return league


def league_config(store: LeagueStore, league_id: str) -> LeagueConfig:
    """Return the immutable scoring configuration of a league."""
    return get_league(store, league_id).config


def update_match_config(
    store: LeagueStore,
    league_id: str,
    user_id: str,
    games_per_match: int,
    points_per_game_win: int,
    bonus_for_total: bool,
    extra_exclude: bool,
    blind_enabled: bool,
    blind_default_runs: int,
) -> LeagueConfig:
    """
    Replace a league's match scoring rules. Admin only.

    Returns:
        The league's new configuration

    Raises:
        AuthorizationError: If the caller is not a league admin
        ValidationError: If any value is out of range
        NotFoundError: If the league does not exist
    """
    require_role(store, user_id, league_id, ADMINS)

    if games_per_match < 1:
        raise ValidationError('Games per match must be at least 1')
    if points_per_game_win < 0:
        raise ValidationError('Points per game win cannot be negative')
    if not MIN_RUNS <= blind_default_runs <= MAX_RUNS:
        raise ValidationError(f'Blind default runs must be between {MIN_RUNS} and {MAX_RUNS}')

    league = get_league(store, league_id)
    match_config = MatchConfig(
        games_per_match=games_per_match,
        points_per_game_win=points_per_game_win,
        bonus_for_total=bonus_for_total,
        extra_exclude=extra_exclude,
        blind_rules=BlindRules(enabled=blind_enabled, default_runs=blind_default_runs),
    )
    config = league.config.model_copy(update={'match': match_config})
    store.patch('leagues', league_id, config=config)
    logger.info(f'Match config updated for league {league_id}: {match_config}')
    return config


def update_handicap_config(
    store: LeagueStore,
    league_id: str,
    user_id: str,
    enabled: bool,
    percent: float,
    recalc_frequency: str,
) -> LeagueConfig:
    """
    Replace a league's handicap settings. Admin only.

    Raises:
        AuthorizationError: If the caller is not a league admin
        ValidationError: If the percentage or cadence is invalid
        NotFoundError: If the league does not exist
    """
    require_role(store, user_id, league_id, ADMINS)

    if percent < 0 or percent > 100:
        raise ValidationError('Handicap percentage must be between 0 and 100')
    if recalc_frequency not in HANDICAP_RECALC_FREQUENCIES:
        raise ValidationError(f'Invalid recalculation frequency: {recalc_frequency}')

    league = get_league(store, league_id)
    handicap = HandicapSettings(
        enabled=enabled, percent=percent, recalc_frequency=recalc_frequency
    )
    config = league.config.model_copy(update={'handicap': handicap})
    store.patch('leagues', league_id, config=config)
    logger.info(f'Handicap config updated for league {league_id}: {handicap}')
    return config


def create_league(
    store: LeagueStore,
    name: str,
    owner_id: str,
    description: Optional[str] = None,
    is_public: bool = False,
    config: Optional[LeagueConfig] = None,
) -> League:
    """
    Create a league and make its creator an admin.

    New leagues start from the default configuration unless one is given.
    """
    league = store.insert(
        'leagues',
        League(
            name=name,
            description=description,
            is_public=is_public,
            config=config or get_default_config(),
        ),
    )
    store.insert('memberships', Membership(user_id=owner_id, league_id=league.id, role=Role.ADMIN))
    logger.info(f'Created league {league.id} ({name}) owned by {owner_id}')
    return league
