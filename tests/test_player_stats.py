"""Tests for per-player season statistics."""

import pytest

from conftest import ADMIN, LEAGUE, OUTSIDER, SEASON
from oche.errors import AuthorizationError
from oche.innings import replace_innings
from oche.player_stats import calculate_player_stats, recalculate_player_stats, recalculate_season_stats
from oche.schemas import BLIND, Game, RealPlayer, Winner


def game(game_id, home, visitor, winner=None, is_dnp=False):
    return Game(
        id=game_id,
        match_id='m',
        home=RealPlayer(player_id=home) if home else BLIND,
        visitor=RealPlayer(player_id=visitor) if visitor else BLIND,
        winner=winner,
        is_dnp=is_dnp,
    )


class TestCalculatePlayerStats:
    """Tests for the pure stats calculation."""

    def test_home_player_totals(self, make_innings):
        innings = make_innings([9, 1, 1, 1, 1, 1, 1, 1, 9], [2] * 9)
        result = calculate_player_stats('a', [(game('g1', 'a', 'b', Winner.HOME), innings)])
        assert result.games_played == 1
        assert result.wins == 1
        assert result.losses == 0
        assert result.total_plus == 25
        assert result.total_minus == 18
        assert result.high_innings == 2

    def test_visitor_player_loss(self, make_innings):
        innings = make_innings([5] * 9, [3] * 9)
        result = calculate_player_stats('b', [(game('g1', 'a', 'b', Winner.HOME), innings)])
        assert (result.wins, result.losses) == (0, 1)
        assert (result.total_plus, result.total_minus) == (27, 45)

    def test_tie_is_neither(self, make_innings):
        innings = make_innings([3] * 9, [3] * 9)
        result = calculate_player_stats('a', [(game('g1', 'a', 'b', Winner.TIE), innings)])
        assert (result.games_played, result.wins, result.losses) == (1, 0, 0)

    def test_extra_innings_ignored(self, make_innings):
        innings = make_innings([3] * 9, [3] * 9, extra_home=[9], extra_visitor=[0])
        result = calculate_player_stats('a', [(game('g1', 'a', 'b', Winner.HOME), innings)])
        assert result.total_plus == 27
        assert result.high_innings == 0
        assert result.wins == 1

    def test_dnp_and_other_players_skipped(self, make_innings):
        innings = make_innings([5] * 9, [3] * 9)
        result = calculate_player_stats(
            'a',
            [
                (game('g1', 'a', 'b', Winner.HOME, is_dnp=True), innings),
                (game('g2', 'c', 'd', Winner.HOME), innings),
            ],
        )
        assert result.games_played == 0
        assert result.total_plus == 0

    def test_blind_opponent(self, make_innings):
        innings = make_innings([4] * 9, [0] * 9)
        result = calculate_player_stats('a', [(game('g1', 'a', None, Winner.HOME), innings)])
        assert (result.games_played, result.wins, result.total_plus) == (1, 1, 36)


class TestRecalculate:
    """Tests for stored stats."""

    def test_recalculate_player(self, store, make_innings):
        replace_innings(store, 'G1', make_innings([5] * 9, [4] * 9))
        store.patch('games', 'G1', winner=Winner.HOME)

        stats = recalculate_player_stats(store, 'p3', SEASON, LEAGUE, ADMIN)
        assert (stats.games_played, stats.losses, stats.total_plus, stats.total_minus) == (1, 1, 36, 45)

    def test_recalculate_updates_in_place(self, store, make_innings):
        """Recalculating twice keeps a single stats record per player and season."""
        replace_innings(store, 'G1', make_innings([5] * 9, [4] * 9))
        recalculate_player_stats(store, 'p1', SEASON, LEAGUE, ADMIN)
        replace_innings(store, 'G1', make_innings([6] * 9, [4] * 9))
        stats = recalculate_player_stats(store, 'p1', SEASON, LEAGUE, ADMIN)

        assert stats.total_plus == 54
        assert len(store.query('player_stats', player_id='p1', season_id=SEASON)) == 1

    def test_recalculate_season(self, store):
        updated = recalculate_season_stats(store, SEASON, LEAGUE, ADMIN)
        assert sorted(s.player_id for s in updated) == ['p1', 'p2', 'p3']

    def test_outsider_denied(self, store):
        with pytest.raises(AuthorizationError):
            recalculate_season_stats(store, SEASON, LEAGUE, OUTSIDER)
