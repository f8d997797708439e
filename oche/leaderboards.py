"""Player leaderboards across five stat categories.

Each category ranks every eligible player by a single metric and keeps the
top ten. Ties fall back to input order only; there is no secondary key.
"""

import logging
from typing import Callable, Iterable, Optional

from .authorization import require_league_member
from .constants import (
    CATEGORY_BEST_PLUS_MINUS,
    CATEGORY_HIGHEST_AVERAGE,
    CATEGORY_MOST_HIGH_INNINGS,
    CATEGORY_MOST_RUNS,
    CATEGORY_MOST_WINS,
    LEADERBOARD_CATEGORIES,
    LEADERBOARD_SIZE,
)
from .handicap import player_average
from .models import LeaderboardCategory, LeaderboardEntry, LeaderboardsView, PlayerStatLine
from .player_stats import player_display_name
from .schemas import PlayerStats
from .season import list_seasons, resolve_season_id
from .storage import LeagueStore
from .utils import round_half_up

logger = logging.getLogger('oche.leaderboards')

Metric = Callable[[PlayerStats], float]

# category -> (sort metric, displayed value)
CATEGORY_METRICS: dict[str, tuple[Metric, Metric]] = {
    CATEGORY_HIGHEST_AVERAGE: (player_average, lambda s: round_half_up(player_average(s))),
    CATEGORY_MOST_RUNS: (lambda s: s.total_plus, lambda s: s.total_plus),
    CATEGORY_BEST_PLUS_MINUS: (
        lambda s: s.total_plus - s.total_minus,
        lambda s: s.total_plus - s.total_minus,
    ),
    CATEGORY_MOST_HIGH_INNINGS: (lambda s: s.high_innings, lambda s: s.high_innings),
    CATEGORY_MOST_WINS: (lambda s: s.wins, lambda s: s.wins),
}


def top_players(
    lines: list[PlayerStatLine],
    metric: Metric,
    display: Metric,
    size: int = LEADERBOARD_SIZE,
) -> list[LeaderboardEntry]:
    """Sort lines by a metric (descending, stable) and rank the first `size`."""
    ranked = sorted(lines, key=lambda line: metric(line.stats), reverse=True)
    return [
        LeaderboardEntry(
            rank=rank,
            player_id=line.player_id,
            player_name=line.player_name,
            team_name=line.team_name,
            value=display(line.stats),
        )
        for rank, line in enumerate(ranked[:size], 1)
    ]


def compute_leaderboards(lines: Iterable[PlayerStatLine]) -> list[LeaderboardCategory]:
    """
    Build the top-ten list for every category.

    Lines without a team in the league are ignored. Highest Average sorts on
    the unrounded average and displays it rounded to one decimal.
    """
    eligible = [line for line in lines if line.team_name is not None]
    categories = []
    for name in LEADERBOARD_CATEGORIES:
        metric, display = CATEGORY_METRICS[name]
        categories.append(
            LeaderboardCategory(name=name, entries=top_players(eligible, metric, display))
        )
    return categories


def season_stat_lines(store: LeagueStore, league_id: str, season_id: str) -> list[PlayerStatLine]:
    """Join a season's stored player stats with player and team names."""
    team_names = {team.id: team.name for team in store.query('teams', league_id=league_id)}

    lines = []
    for stats in store.query('player_stats', season_id=season_id):
        player = store.get('players', stats.player_id)
        if player is None:
            continue
        lines.append(
            PlayerStatLine(
                player_id=player.id,
                player_name=player_display_name(store, player),
                team_name=team_names.get(player.team_id),
                stats=stats,
            )
        )
    return lines


def get_leaderboards(
    store: LeagueStore,
    league_id: str,
    user_id: str,
    season_id: Optional[str] = None,
) -> LeaderboardsView:
    """Leaderboards for a season (explicit or the active one). Any league member may call this."""
    require_league_member(store, user_id, league_id)

    view = LeaderboardsView(seasons=list_seasons(store, league_id))
    view.season_id = resolve_season_id(store, league_id, season_id)
    if view.season_id is None:
        view.categories = compute_leaderboards([])
        return view

    lines = season_stat_lines(store, league_id, view.season_id)
    view.categories = compute_leaderboards(lines)
    logger.debug(f'Leaderboards for season {view.season_id} from {len(lines)} players')
    return view
