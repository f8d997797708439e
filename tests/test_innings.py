"""Tests for the inning ledger."""

import pytest

from conftest import ADMIN, HOME_CAPTAIN, LEAGUE, MEMBER, OUTSIDER
from oche.errors import AuthorizationError, NotFoundError, ValidationError
from oche.game_status import apply_blind_score, set_dnp
from oche.handicap import set_handicap_override
from oche.innings import (
    check_unique_cells,
    get_game,
    get_game_innings,
    list_innings,
    replace_innings,
    save_innings,
)
from oche.reconciliation import submit_score_entry
from oche.schemas import Inning, League, LeagueConfig, Membership, Role, Side
from oche.winner import determine_winner


class TestReplaceInnings:
    """Tests for whole-set replacement of a game's innings."""

    def test_replaces_existing_set(self, store, make_innings):
        """A second write leaves only the new innings."""
        replace_innings(store, 'G1', make_innings([1] * 9, [2] * 9))
        replace_innings(store, 'G1', make_innings([3] * 9, [4] * 9))

        innings = list_innings(store, 'G1')
        assert len(innings) == 18
        assert {i.runs for i in innings if i.batter is Side.HOME} == {3}
        assert {i.runs for i in innings if i.batter is Side.VISITOR} == {4}

    def test_out_of_range_rejected_and_ledger_untouched(self, store, make_innings):
        """A set with runs of 10 is rejected before anything is deleted."""
        replace_innings(store, 'G1', make_innings([1] * 9, [2] * 9))

        bad = make_innings([1] * 8 + [10], [2] * 9)
        with pytest.raises(ValidationError, match='Runs must be between 0 and 9'):
            replace_innings(store, 'G1', bad)

        assert sum(i.runs for i in list_innings(store, 'G1')) == 9 + 18

    def test_negative_runs_rejected(self, store):
        """Negative runs are out of range."""
        with pytest.raises(ValidationError):
            replace_innings(store, 'G1', [Inning(inning_number=1, batter=Side.HOME, runs=-1)])

    def test_accepts_dicts(self, store):
        """Plain dicts are coerced into innings."""
        saved = replace_innings(
            store,
            'G1',
            [
                {'inning_number': 1, 'batter': 'visitor', 'runs': 4},
                {'inning_number': 1, 'batter': 'home', 'runs': 7},
            ],
        )
        assert [(i.batter, i.runs) for i in saved] == [(Side.HOME, 7), (Side.VISITOR, 4)]

    def test_malformed_dict_is_validation_error(self, store):
        """A dict missing fields surfaces as a ValidationError."""
        with pytest.raises(ValidationError):
            replace_innings(store, 'G1', [{'inning_number': 1, 'runs': 4}])

    def test_empty_set_clears_ledger(self, store, make_innings):
        """Replacing with nothing removes every inning."""
        replace_innings(store, 'G1', make_innings([1] * 9, [2] * 9))
        replace_innings(store, 'G1', [])
        assert list_innings(store, 'G1') == []


class TestSaveInnings:
    """Tests for direct inning entry with permissions."""

    def test_captain_can_save(self, store, make_innings):
        """Captains may write innings directly."""
        saved = save_innings(store, 'G1', LEAGUE, HOME_CAPTAIN, make_innings([5] * 9, [4] * 9))
        assert len(saved) == 18
        assert saved[0].inning_number == 1 and saved[0].batter is Side.HOME

    def test_player_cannot_save(self, store, make_innings):
        """Plain members lack scoring rights."""
        with pytest.raises(AuthorizationError, match='Insufficient permissions'):
            save_innings(store, 'G1', LEAGUE, MEMBER, make_innings([5] * 9, [4] * 9))

    def test_unknown_game(self, store, make_innings):
        """Saving to a missing game raises NotFoundError."""
        with pytest.raises(NotFoundError, match='Game not found'):
            save_innings(store, 'nope', LEAGUE, ADMIN, make_innings([5] * 9, [4] * 9))

    def test_read_requires_membership(self, store):
        """Outsiders cannot read innings."""
        with pytest.raises(AuthorizationError, match='Not a member of this league'):
            get_game_innings(store, 'G1', LEAGUE, OUTSIDER)

    def test_member_can_read(self, store, make_innings):
        """Any member can read innings, ordered by inning then home first."""
        save_innings(store, 'G1', LEAGUE, ADMIN, make_innings([5] * 9, [4] * 9, [1], [0]))
        innings = get_game_innings(store, 'G1', LEAGUE, MEMBER)
        assert [(i.inning_number, i.batter) for i in innings[-2:]] == [
            (10, Side.HOME),
            (10, Side.VISITOR),
        ]
        assert innings[-1].is_extra


class TestDuplicateCells:
    """Tests for rejecting a repeated (inning, batter) cell."""

    def test_duplicate_cell_rejected(self, store, make_innings):
        """A second home inning 1 is rejected and the ledger is left alone."""
        replace_innings(store, 'G1', make_innings([1] * 9, [2] * 9))

        doubled = make_innings([1] * 9, [2] * 9) + [Inning(inning_number=1, batter=Side.HOME, runs=9)]
        with pytest.raises(ValidationError, match='Duplicate inning 1 for home side'):
            replace_innings(store, 'G1', doubled)

        assert len(list_innings(store, 'G1')) == 18

    def test_same_number_both_sides_allowed(self, store):
        saved = replace_innings(
            store,
            'G1',
            [
                Inning(inning_number=1, batter=Side.HOME, runs=3),
                Inning(inning_number=1, batter=Side.VISITOR, runs=3),
            ],
        )
        assert len(saved) == 2

    def test_check_unique_cells(self):
        check_unique_cells([Inning(inning_number=n, batter=Side.VISITOR, runs=0) for n in range(1, 10)])
        with pytest.raises(ValidationError):
            check_unique_cells([Inning(inning_number=2, batter=Side.VISITOR, runs=0)] * 2)


class TestLeagueScoping:
    """A game is only reachable through the league that owns its match."""

    @pytest.fixture
    def other_league(self, store):
        """League L2, where the outsider is admin."""
        store.insert('leagues', League(id='L2', name='Thursday Darts', config=LeagueConfig()))
        store.insert('memberships', Membership(user_id=OUTSIDER, league_id='L2', role=Role.ADMIN))
        return store

    def test_get_game_checks_league(self, other_league):
        assert get_game(other_league, 'G1', LEAGUE).id == 'G1'
        with pytest.raises(NotFoundError, match='Game not found'):
            get_game(other_league, 'G1', 'L2')

    def test_foreign_save_rejected(self, other_league, make_innings):
        """An admin of another league cannot write this league's innings."""
        with pytest.raises(NotFoundError, match='Game not found'):
            save_innings(other_league, 'G1', 'L2', OUTSIDER, make_innings([5] * 9, [4] * 9))
        assert list_innings(other_league, 'G1') == []

    def test_foreign_submit_rejected(self, other_league, make_innings):
        with pytest.raises(NotFoundError):
            submit_score_entry(
                other_league, 'G1', 'L2', OUTSIDER, Side.HOME, make_innings([5] * 9, [4] * 9)
            )
        assert other_league.query('score_entries', game_id='G1') == []

    def test_foreign_status_changes_rejected(self, other_league):
        with pytest.raises(NotFoundError):
            set_dnp(other_league, 'G1', 'L2', OUTSIDER, True)
        with pytest.raises(NotFoundError):
            apply_blind_score(other_league, 'G2', 'L2', OUTSIDER)
        with pytest.raises(NotFoundError):
            determine_winner(other_league, 'G1', 'L2', OUTSIDER)
        with pytest.raises(NotFoundError):
            set_handicap_override(other_league, 'L2', OUTSIDER, 50, match_id='M1')
        assert not other_league.get('games', 'G1').is_dnp
        assert list_innings(other_league, 'G2') == []
