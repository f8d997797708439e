"""Dual score entry: both captains submit independently, entries are compared
inning by inning, matching pairs are confirmed automatically and differing
pairs are flagged for an admin to resolve.

The decision logic (compare_entries, reconcile, derive_game_state) is pure;
the store-facing operations below only load entries, apply the decision, and
write the canonical innings through the ledger.
"""

import logging
from enum import Enum
from typing import Any, Iterable, Optional

from .authorization import ADMINS, SCORERS, require_league_member, require_role
from .errors import NotFoundError, ValidationError
from .innings import check_innings, coerce_innings, get_game, replace_innings
from .models import Comparison, Discrepancy, Transition
from .schemas import EntryStatus, Inning, ScoreEntry, Side
from .storage import LeagueStore
from .winner import refresh_winner

logger = logging.getLogger('oche.reconciliation')


class GameEntryState(str, Enum):
    """Composite reconciliation state of a game, derived from both entries."""

    NO_ENTRIES = 'no_entries'
    AWAITING_OTHER_SIDE = 'awaiting_other_side'
    CONFIRMED = 'confirmed'
    DISCREPANCY = 'discrepancy'
    RESOLVED = 'resolved'


def compare_entries(home_innings: Iterable[Inning], visitor_innings: Iterable[Inning]) -> Comparison:
    """
    Compare two proposed inning sets cell by cell.

    Cells are keyed by (inning number, batter). Every key present in either
    entry is checked, so an inning one side left out shows up as a
    discrepancy with None for the missing side.

    Returns:
        Comparison whose match flag is True iff there are no discrepancies
    """
    home_runs = {inning.key: inning.runs for inning in home_innings}
    visitor_runs = {inning.key: inning.runs for inning in visitor_innings}

    keys = sorted(
        set(home_runs) | set(visitor_runs),
        key=lambda key: (key[0], 0 if key[1] is Side.HOME else 1),
    )

    discrepancies = []
    for inning_number, batter in keys:
        home_value = home_runs.get((inning_number, batter))
        visitor_value = visitor_runs.get((inning_number, batter))
        if home_value != visitor_value:
            discrepancies.append(
                Discrepancy(
                    inning_number=inning_number,
                    batter=batter,
                    value_by_side={Side.HOME: home_value, Side.VISITOR: visitor_value},
                )
            )

    return Comparison(match=not discrepancies, discrepancies=discrepancies)


def reconcile(
    home_innings: Optional[list[Inning]],
    visitor_innings: Optional[list[Inning]],
) -> Transition:
    """
    Decide the status both entries move to after a submission.

    Args:
        home_innings: Home side's proposed innings, None if not submitted
        visitor_innings: Visitor side's proposed innings, None if not submitted

    Returns:
        PENDING while a side is missing; CONFIRMED with the home innings as
        the canonical set when both agree; DISCREPANCY otherwise
    """
    if home_innings is None or visitor_innings is None:
        return Transition(status=EntryStatus.PENDING)

    comparison = compare_entries(home_innings, visitor_innings)
    if comparison.match:
        return Transition(
            status=EntryStatus.CONFIRMED,
            comparison=comparison,
            canonical=list(home_innings),
        )
    return Transition(status=EntryStatus.DISCREPANCY, comparison=comparison)


def derive_game_state(
    home_status: Optional[EntryStatus],
    visitor_status: Optional[EntryStatus],
) -> GameEntryState:
    """Collapse the two per-side statuses into the game's composite state."""
    if home_status is None and visitor_status is None:
        return GameEntryState.NO_ENTRIES
    if home_status is None or visitor_status is None:
        return GameEntryState.AWAITING_OTHER_SIDE

    statuses = {home_status, visitor_status}
    if EntryStatus.DISCREPANCY in statuses:
        return GameEntryState.DISCREPANCY
    if all(status.is_terminal for status in statuses):
        if EntryStatus.RESOLVED in statuses:
            return GameEntryState.RESOLVED
        return GameEntryState.CONFIRMED
    return GameEntryState.AWAITING_OTHER_SIDE


def _entries_by_side(store: LeagueStore, game_id: str) -> dict[Side, ScoreEntry]:
    return {entry.side: entry for entry in store.query('score_entries', game_id=game_id)}


def submit_score_entry(
    store: LeagueStore,
    game_id: str,
    league_id: str,
    user_id: str,
    side: Side | str,
    innings: Iterable[Inning | dict[str, Any]],
) -> Transition:
    """
    Record one side's innings for a game and reconcile against the other side.

    Any earlier entry from the same side is replaced. Once both sides have
    submitted, matching entries are confirmed and written to the ledger;
    differing entries are flagged and the ledger is left alone.

    Raises:
        AuthorizationError: If the caller is not a captain or admin
        NotFoundError: If the game does not exist
        ValidationError: If any run count is outside [0, 9]
    """
    require_role(store, user_id, league_id, SCORERS)
    game = get_game(store, game_id, league_id)
    side = Side(side)

    proposed = coerce_innings(innings)
    check_innings(proposed)

    for entry in store.query('score_entries', game_id=game_id, side=side):
        store.delete('score_entries', entry.id)

    inserted = store.insert(
        'score_entries',
        ScoreEntry(game_id=game_id, side=side, submitted_by=user_id, innings=proposed),
    )
    logger.info(f'{side.value} entry submitted for game {game_id} by {user_id}')

    entries = _entries_by_side(store, game_id)
    entries[side] = store.get('score_entries', inserted.id)
    home = entries.get(Side.HOME)
    visitor = entries.get(Side.VISITOR)

    transition = reconcile(
        home.innings if home else None,
        visitor.innings if visitor else None,
    )
    if home is None or visitor is None:
        return transition

    store.patch('score_entries', home.id, status=transition.status)
    store.patch('score_entries', visitor.id, status=transition.status)

    if transition.canonical is not None:
        replace_innings(store, game_id, transition.canonical)
        refresh_winner(store, game)
        logger.info(f'Game {game_id} scores confirmed by both captains')
    else:
        logger.warning(
            f'Game {game_id} has {len(transition.comparison.discrepancies)} '
            f'discrepancies between home and visitor entries'
        )
    return transition


def get_score_entries(
    store: LeagueStore, game_id: str, league_id: str, user_id: str
) -> list[ScoreEntry]:
    """List a game's score entries, home first. Any league member may call this."""
    require_league_member(store, user_id, league_id)
    entries = _entries_by_side(store, game_id)
    return [entries[side] for side in (Side.HOME, Side.VISITOR) if side in entries]


def get_reconciliation_state(
    store: LeagueStore, game_id: str, league_id: str, user_id: str
) -> GameEntryState:
    """Composite reconciliation state of a game."""
    require_league_member(store, user_id, league_id)
    entries = _entries_by_side(store, game_id)
    home = entries.get(Side.HOME)
    visitor = entries.get(Side.VISITOR)
    return derive_game_state(
        home.status if home else None,
        visitor.status if visitor else None,
    )


def resolve_discrepancy(
    store: LeagueStore,
    game_id: str,
    league_id: str,
    user_id: str,
    chosen_side: Optional[Side | str] = None,
    corrected_innings: Optional[Iterable[Inning | dict[str, Any]]] = None,
) -> list[Inning]:
    """
    Settle a game's score as an admin, either by accepting one side's entry
    or by supplying corrected innings.

    Returns:
        The innings written to the ledger

    Raises:
        AuthorizationError: If the caller is not a league admin
        ValidationError: If not exactly one of chosen_side/corrected_innings is
            given, or the corrected innings are invalid
        NotFoundError: If the game or the chosen side's entry does not exist
    """
    require_role(store, user_id, league_id, ADMINS)
    game = get_game(store, game_id, league_id)

    if chosen_side is None and corrected_innings is None:
        raise ValidationError('Must provide either chosen_side or corrected_innings')
    if chosen_side is not None and corrected_innings is not None:
        raise ValidationError('Provide only one of chosen_side or corrected_innings')

    entries = _entries_by_side(store, game_id)

    if corrected_innings is not None:
        innings = coerce_innings(corrected_innings)
        source = 'admin correction'
    else:
        side = Side(chosen_side)
        chosen = entries.get(side)
        if chosen is None:
            raise NotFoundError(f'No entry found for {side.value} side')
        innings = list(chosen.innings)
        source = f'{side.value} entry'
    check_innings(innings)

    for entry in entries.values():
        store.patch('score_entries', entry.id, status=EntryStatus.RESOLVED)

    saved = replace_innings(store, game_id, innings)
    refresh_winner(store, game)
    logger.info(f'Game {game_id} resolved by {user_id} using {source}')
    return saved
