"""Tests for handicap spot runs."""

import pytest

from conftest import ADMIN, HOME_CAPTAIN, LEAGUE, MEMBER, SEASON
from oche.config import update_handicap_config
from oche.errors import AuthorizationError, NotFoundError, ValidationError
from oche.handicap import (
    compute_spot_runs,
    determine_handicapped_winner,
    get_game_handicap,
    player_average,
    resolve_handicap_percent,
    set_handicap_override,
)
from oche.innings import replace_innings
from oche.schemas import PlayerStats, Side, Winner


class TestSpotRuns:
    """Tests for the spot-run formula."""

    def test_lower_average_receives_runs(self):
        """floor(|5.0 - 3.0| * 70 / 100) = 1, to the visitor."""
        spot = compute_spot_runs(5.0, 3.0, 70)
        assert spot.spot_runs == 1
        assert spot.recipient_side is Side.VISITOR

    def test_home_can_receive(self):
        spot = compute_spot_runs(2.0, 6.5, 100)
        assert spot.spot_runs == 4
        assert spot.recipient_side is Side.HOME

    def test_zero_spot_has_no_recipient(self):
        """Differences that floor to zero give nobody runs."""
        spot = compute_spot_runs(4.4, 4.0, 80)
        assert spot.spot_runs == 0
        assert spot.recipient_side is None

    def test_equal_averages(self):
        assert compute_spot_runs(4.0, 4.0, 100).recipient_side is None


class TestHandicappedWinner:
    """Tests for adjusted totals."""

    def test_spot_flips_result(self):
        result = determine_handicapped_winner(20, 19, 2, Side.VISITOR)
        assert (result.home_adjusted, result.visitor_adjusted) == (20, 21)
        assert result.winner is Winner.VISITOR

    def test_spot_can_create_tie(self):
        assert determine_handicapped_winner(20, 19, 1, Side.VISITOR).winner is Winner.TIE

    def test_no_recipient(self):
        result = determine_handicapped_winner(15, 18, 0, None)
        assert (result.home_adjusted, result.visitor_adjusted) == (15, 18)
        assert result.winner is Winner.VISITOR


class TestResolvePercent:
    """Tests for override precedence."""

    def test_game_beats_match_beats_league(self):
        assert resolve_handicap_percent(50, 60, 70) == 70
        assert resolve_handicap_percent(50, 60) == 60
        assert resolve_handicap_percent(50) == 50

    def test_zero_override_is_respected(self):
        """An explicit 0 at game level switches the handicap off."""
        assert resolve_handicap_percent(50, 60, 0) == 0


class TestPlayerAverage:
    def test_no_games(self):
        assert player_average(None) == 0.0
        assert player_average(PlayerStats(player_id='p', season_id='s')) == 0.0

    def test_average(self):
        stats = PlayerStats(player_id='p', season_id='s', games_played=3, total_plus=10)
        assert player_average(stats) == pytest.approx(3.3333, rel=1e-3)


class TestGameHandicap:
    """Tests for the store-backed handicap view."""

    @pytest.fixture
    def handicapped(self, store):
        update_handicap_config(store, LEAGUE, ADMIN, True, 70, 'weekly')
        store.insert(
            'player_stats',
            PlayerStats(player_id='p1', season_id=SEASON, games_played=10, total_plus=50),
        )
        store.insert(
            'player_stats',
            PlayerStats(player_id='p3', season_id=SEASON, games_played=10, total_plus=30),
        )
        return store

    def test_disabled_returns_none(self, store):
        assert get_game_handicap(store, 'G1', LEAGUE, MEMBER) is None

    def test_spot_without_innings(self, handicapped):
        view = get_game_handicap(handicapped, 'G1', LEAGUE, MEMBER)
        assert view.spot_runs == 1
        assert view.recipient_side is Side.VISITOR
        assert (view.home_average, view.visitor_average) == (5.0, 3.0)
        assert view.handicap_percent == 70
        assert view.result is None

    def test_averages_round_half_up(self, handicapped):
        """17 runs over 4 games displays as 4.3, not 4.2."""
        for stats in handicapped.query('player_stats', player_id='p1'):
            handicapped.delete('player_stats', stats.id)
        handicapped.insert(
            'player_stats',
            PlayerStats(player_id='p1', season_id=SEASON, games_played=4, total_plus=17),
        )

        view = get_game_handicap(handicapped, 'G1', LEAGUE, MEMBER)
        assert view.home_average == 4.3
        assert view.spot_runs == 0

    def test_result_with_innings(self, handicapped, make_innings):
        """The handicap adjusts the display result but never the stored winner."""
        replace_innings(handicapped, 'G1', make_innings([2] * 9, [2] * 9))
        handicapped.patch('games', 'G1', winner=Winner.TIE)

        view = get_game_handicap(handicapped, 'G1', LEAGUE, MEMBER)
        assert view.result.winner is Winner.VISITOR
        assert (view.result.home_adjusted, view.result.visitor_adjusted) == (18, 19)
        assert handicapped.get('games', 'G1').winner is Winner.TIE

    def test_blind_game_returns_none(self, handicapped):
        assert get_game_handicap(handicapped, 'G2', LEAGUE, MEMBER) is None

    def test_game_override_zero_returns_none(self, handicapped):
        set_handicap_override(handicapped, LEAGUE, ADMIN, 0, game_id='G1')
        assert get_game_handicap(handicapped, 'G1', LEAGUE, MEMBER) is None

    def test_match_override_applies(self, handicapped):
        set_handicap_override(handicapped, LEAGUE, ADMIN, 100, match_id='M1')
        assert get_game_handicap(handicapped, 'G1', LEAGUE, MEMBER).spot_runs == 2

    def test_no_active_season(self, handicapped):
        handicapped.patch('seasons', SEASON, is_active=False)
        assert get_game_handicap(handicapped, 'G1', LEAGUE, MEMBER) is None

    def test_missing_game(self, handicapped):
        assert get_game_handicap(handicapped, 'missing', LEAGUE, MEMBER) is None

    def test_override_on_missing_match(self, handicapped):
        with pytest.raises(NotFoundError, match='Match not found'):
            set_handicap_override(handicapped, LEAGUE, ADMIN, 50, match_id='missing')


class TestHandicapOverride:
    def test_requires_single_target(self, store):
        with pytest.raises(ValidationError, match='exactly one'):
            set_handicap_override(store, LEAGUE, ADMIN, 50)
        with pytest.raises(ValidationError, match='exactly one'):
            set_handicap_override(store, LEAGUE, ADMIN, 50, match_id='M1', game_id='G1')

    def test_percent_range(self, store):
        with pytest.raises(ValidationError, match='between 0 and 100'):
            set_handicap_override(store, LEAGUE, ADMIN, 120, game_id='G1')

    def test_clear_override(self, store):
        set_handicap_override(store, LEAGUE, ADMIN, 40, game_id='G1')
        set_handicap_override(store, LEAGUE, ADMIN, None, game_id='G1')
        assert store.get('games', 'G1').handicap_percent is None

    def test_captain_denied(self, store):
        with pytest.raises(AuthorizationError):
            set_handicap_override(store, LEAGUE, HOME_CAPTAIN, 40, game_id='G1')
