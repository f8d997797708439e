"""Shared fixtures: an in-memory store seeded with one league."""

import pytest

from oche.schemas import (
    BLIND,
    Game,
    Inning,
    League,
    LeagueConfig,
    Match,
    Membership,
    Player,
    RealPlayer,
    Role,
    Season,
    Side,
    Team,
    User,
)
from oche.storage import LeagueStore

LEAGUE = 'L1'
SEASON = 'S1'
ADMIN = 'u-admin'
HOME_CAPTAIN = 'u-home-cap'
VISITOR_CAPTAIN = 'u-visitor-cap'
MEMBER = 'u-member'
OUTSIDER = 'u-outsider'


def build_innings(home_runs, visitor_runs, extra_home=(), extra_visitor=()):
    """Innings for a game: regulation runs per side, then optional extra innings from 10 up."""
    innings = []
    for side, regulation, extra in (
        (Side.HOME, home_runs, extra_home),
        (Side.VISITOR, visitor_runs, extra_visitor),
    ):
        for number, runs in enumerate(regulation, 1):
            innings.append(Inning(inning_number=number, batter=side, runs=runs))
        for number, runs in enumerate(extra, len(regulation) + 1):
            innings.append(Inning(inning_number=number, batter=side, runs=runs, is_extra=True))
    return innings


@pytest.fixture
def make_innings():
    return build_innings


@pytest.fixture
def store():
    """
    League L1 with an active season S1 and two teams.

    Bulls (home): Alice (p1), Bob (p2)
    Arrows (visitor): Cara (p3), Dan (p4)
    Match M1: G1 Alice vs Cara, G2 Bob vs a blind opponent
    """
    s = LeagueStore()
    for user_id, name in (
        (ADMIN, 'Admin'),
        (HOME_CAPTAIN, 'Home Captain'),
        (VISITOR_CAPTAIN, 'Visitor Captain'),
        (MEMBER, 'Member'),
        (OUTSIDER, 'Outsider'),
    ):
        s.insert('users', User(id=user_id, email=f'{user_id}@example.com', name=name))

    s.insert('leagues', League(id=LEAGUE, name='Tuesday Night Darts', config=LeagueConfig()))
    for user_id, role in (
        (ADMIN, Role.ADMIN),
        (HOME_CAPTAIN, Role.CAPTAIN),
        (VISITOR_CAPTAIN, Role.CAPTAIN),
        (MEMBER, Role.PLAYER),
    ):
        s.insert('memberships', Membership(user_id=user_id, league_id=LEAGUE, role=role))

    s.insert('seasons', Season(id=SEASON, league_id=LEAGUE, name='Spring', is_active=True))
    s.insert('teams', Team(id='T-home', league_id=LEAGUE, name='Bulls', captain_id=HOME_CAPTAIN))
    s.insert('teams', Team(id='T-visitor', league_id=LEAGUE, name='Arrows', captain_id=VISITOR_CAPTAIN))
    for player_id, team_id, name in (
        ('p1', 'T-home', 'Alice'),
        ('p2', 'T-home', 'Bob'),
        ('p3', 'T-visitor', 'Cara'),
        ('p4', 'T-visitor', 'Dan'),
    ):
        s.insert('players', Player(id=player_id, team_id=team_id, name=name))

    s.insert(
        'matches',
        Match(
            id='M1',
            league_id=LEAGUE,
            season_id=SEASON,
            home_team_id='T-home',
            visitor_team_id='T-visitor',
        ),
    )
    s.insert(
        'games',
        Game(id='G1', match_id='M1', slot=1, home=RealPlayer(player_id='p1'), visitor=RealPlayer(player_id='p3')),
    )
    s.insert(
        'games',
        Game(id='G2', match_id='M1', slot=2, home=RealPlayer(player_id='p2'), visitor=BLIND),
    )
    return s
