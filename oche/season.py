"""Season lookups shared by the aggregators."""

import logging
from typing import Optional

from .schemas import Game, InningRecord, Match, Season
from .storage import LeagueStore

logger = logging.getLogger('oche.season')


def list_seasons(store: LeagueStore, league_id: str) -> list[Season]:
    return store.query('seasons', league_id=league_id)


def active_season(store: LeagueStore, league_id: str) -> Optional[Season]:
    """The league's active season, if one is marked active."""
    active = store.query('seasons', league_id=league_id, is_active=True)
    return active[0] if active else None


def resolve_season_id(
    store: LeagueStore, league_id: str, season_id: Optional[str] = None
) -> Optional[str]:
    """Use the explicit season if given, else the active one (None if neither)."""
    if season_id is not None:
        return season_id
    season = active_season(store, league_id)
    return season.id if season else None


def load_season_records(
    store: LeagueStore, league_id: str, season_id: str
) -> tuple[list[Match], list[Game], list[InningRecord]]:
    """
    Fetch everything the aggregators need for one season in one pass.

    Returns:
        Tuple of (matches, games, innings) for the league's matches in the season
    """
    matches = store.query('matches', league_id=league_id, season_id=season_id)
    games = [game for match in matches for game in store.query('games', match_id=match.id)]
    innings = [inning for game in games for inning in store.query('innings', game_id=game.id)]
    logger.debug(
        f'Season {season_id}: {len(matches)} matches, {len(games)} games, {len(innings)} innings'
    )
    return matches, games, innings
