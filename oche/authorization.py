"""Role-based authorization helpers for league-scoped permissions."""

import logging
from typing import Iterable, Optional

from .errors import AuthorizationError
from .schemas import Membership, Role
from .storage import LeagueStore

logger = logging.getLogger('oche.authorization')

SCORERS = (Role.ADMIN, Role.CAPTAIN)
ADMINS = (Role.ADMIN,)


def _membership(store: LeagueStore, user_id: str, league_id: str) -> Optional[Membership]:
    matches = store.query('memberships', user_id=user_id, league_id=league_id)
    return matches[0] if matches else None


def get_member_role(store: LeagueStore, user_id: str, league_id: str) -> Optional[Role]:
    """Return the user's role in the league, or None if not a member."""
    membership = _membership(store, user_id, league_id)
    return membership.role if membership else None


def require_league_member(store: LeagueStore, user_id: str, league_id: str) -> Membership:
    """
    Ensure the user belongs to the league.

    Raises:
        AuthorizationError: If the user has no membership in the league
    """
    membership = _membership(store, user_id, league_id)
    if membership is None:
        logger.warning(f'User {user_id} is not a member of league {league_id}')
        raise AuthorizationError('Not a member of this league')
    return membership


def require_role(
    store: LeagueStore,
    user_id: str,
    league_id: str,
    allowed_roles: Iterable[Role],
) -> Membership:
    """
    Ensure the user holds one of the allowed roles in the league.

    Raises:
        AuthorizationError: If the user is not a member or has another role
    """
    allowed = list(allowed_roles)
    membership = require_league_member(store, user_id, league_id)
    if membership.role not in allowed:
        logger.warning(f'User {user_id} ({membership.role.value}) denied; needs {allowed}')
        raise AuthorizationError(
            'Insufficient permissions: requires '
            + ' or '.join(role.value for role in allowed)
            + ' role'
        )
    return membership
