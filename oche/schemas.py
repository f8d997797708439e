"""Pydantic schemas for league records and configuration."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .constants import HANDICAP_RECALC_FREQUENCIES, MAX_RUNS, MIN_RUNS


class Side(str, Enum):
    """One half of a game or match."""

    HOME = 'home'
    VISITOR = 'visitor'

    @property
    def opponent(self) -> 'Side':
        return Side.VISITOR if self is Side.HOME else Side.HOME


class Winner(str, Enum):
    """Outcome of a game. UNDETERMINED is computed, never stored."""

    HOME = 'home'
    VISITOR = 'visitor'
    TIE = 'tie'
    UNDETERMINED = 'undetermined'


class EntryStatus(str, Enum):
    """Status of one side's score entry."""

    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    DISCREPANCY = 'discrepancy'
    RESOLVED = 'resolved'

    @property
    def is_terminal(self) -> bool:
        return self in (EntryStatus.CONFIRMED, EntryStatus.RESOLVED)


class Role(str, Enum):
    ADMIN = 'admin'
    CAPTAIN = 'captain'
    PLAYER = 'player'


class PlayerStatus(str, Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'


class MatchStatus(str, Enum):
    SCHEDULED = 'scheduled'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


# ---------------------------------------------------------------------------
# Player slots
# ---------------------------------------------------------------------------


class RealPlayer(BaseModel):
    """A rostered player occupying a game slot."""

    kind: Literal['player'] = 'player'
    player_id: str = Field(..., min_length=1)

    class Config:
        extra = 'forbid'
        frozen = True


class BlindSlot(BaseModel):
    """Stand-in for an absent opponent; scored from the league's blind rules."""

    kind: Literal['blind'] = 'blind'

    class Config:
        extra = 'forbid'
        frozen = True


PlayerRef = Annotated[Union[RealPlayer, BlindSlot], Field(discriminator='kind')]

BLIND = BlindSlot()


def player_id_of(ref: RealPlayer | BlindSlot) -> Optional[str]:
    """Return the player id in a slot, or None for a blind slot."""
    if isinstance(ref, RealPlayer):
        return ref.player_id
    return None


# ---------------------------------------------------------------------------
# League configuration
# ---------------------------------------------------------------------------


class BlindRules(BaseModel):
    """How a blind opponent is scored."""

    enabled: bool = True
    default_runs: int = Field(0, ge=MIN_RUNS, le=MAX_RUNS)

    class Config:
        extra = 'forbid'
        frozen = True


class MatchConfig(BaseModel):
    """Match scoring rules for a league.

    ``extra_exclude`` is stored for compatibility but has no effect: extra
    innings are always left out of run totals.
    """

    games_per_match: int = Field(4, ge=1)
    points_per_game_win: int = Field(1, ge=0)
    bonus_for_total: bool = False
    extra_exclude: bool = True
    blind_rules: BlindRules = Field(default_factory=BlindRules)

    class Config:
        extra = 'forbid'
        frozen = True


class HandicapSettings(BaseModel):
    """League-wide handicap settings."""

    enabled: bool = False
    percent: float = Field(0, ge=0, le=100)
    recalc_frequency: str = 'manual'

    @field_validator('recalc_frequency')
    @classmethod
    def validate_recalc_frequency(cls, v):
        """Ensure the cadence is one we know how to schedule."""
        if v not in HANDICAP_RECALC_FREQUENCIES:
            raise ValueError(f'Invalid recalculation frequency: {v}')
        return v

    class Config:
        extra = 'forbid'
        frozen = True


class LeagueConfig(BaseModel):
    """Immutable scoring configuration passed into every aggregation."""

    match: MatchConfig = Field(default_factory=MatchConfig)
    handicap: HandicapSettings = Field(default_factory=HandicapSettings)

    class Config:
        extra = 'forbid'
        frozen = True


# ---------------------------------------------------------------------------
# Innings
# ---------------------------------------------------------------------------


class Inning(BaseModel):
    """One batter's runs for one inning of a game.

    The run range is checked by the inning ledger rather than here so that
    out-of-range submissions surface as a scoring ValidationError.
    """

    inning_number: int = Field(..., ge=1)
    batter: Side
    runs: int
    is_extra: bool = False

    class Config:
        extra = 'forbid'
        frozen = True

    @property
    def key(self) -> tuple[int, Side]:
        return self.inning_number, self.batter


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


class Record(BaseModel):
    """Base for anything kept in the league store."""

    id: str = ''

    class Config:
        extra = 'forbid'
        frozen = True


class User(Record):
    email: str = ''
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or 'Unknown'


class League(Record):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    config: LeagueConfig = Field(default_factory=LeagueConfig)
    is_public: bool = False


class Membership(Record):
    user_id: str
    league_id: str
    role: Role


class Season(Record):
    league_id: str
    name: str
    start_date: str = ''
    end_date: str = ''
    is_active: bool = False


class Division(Record):
    league_id: str
    name: str


class Team(Record):
    league_id: str
    name: str
    division_id: Optional[str] = None
    captain_id: Optional[str] = None
    venue: Optional[str] = None


class Player(Record):
    team_id: str
    user_id: Optional[str] = None
    name: str = ''
    status: PlayerStatus = PlayerStatus.ACTIVE


class Pairing(BaseModel):
    slot: int = Field(..., ge=1)
    home: PlayerRef
    visitor: PlayerRef

    class Config:
        extra = 'forbid'
        frozen = True


class MatchTotals(BaseModel):
    """Aggregate plus totals for a match and who earned the bonus point."""

    home_plus: int = 0
    visitor_plus: int = 0
    bonus_winner: Optional[Side] = None

    class Config:
        extra = 'forbid'
        frozen = True


class Match(Record):
    league_id: str
    season_id: str
    home_team_id: str
    visitor_team_id: str
    date: str = ''
    status: MatchStatus = MatchStatus.SCHEDULED
    pairings: list[Pairing] = Field(default_factory=list)
    totals: Optional[MatchTotals] = None
    handicap_percent: Optional[float] = Field(None, ge=0, le=100)


class Game(Record):
    match_id: str
    slot: int = Field(1, ge=1)
    home: PlayerRef
    visitor: PlayerRef
    winner: Optional[Winner] = None
    is_dnp: bool = False
    handicap_percent: Optional[float] = Field(None, ge=0, le=100)

    @field_validator('winner')
    @classmethod
    def validate_winner(cls, v):
        """An undetermined result is never recorded on a game."""
        if v is Winner.UNDETERMINED:
            raise ValueError('An undetermined winner cannot be stored')
        return v

    @property
    def blind_sides(self) -> list[Side]:
        """Every side held by a blind slot, home first."""
        sides = []
        if isinstance(self.home, BlindSlot):
            sides.append(Side.HOME)
        if isinstance(self.visitor, BlindSlot):
            sides.append(Side.VISITOR)
        return sides

    @property
    def has_blind(self) -> bool:
        return bool(self.blind_sides)

    def side_of(self, player_id: str) -> Optional[Side]:
        """Which side the given player occupies in this game, if any."""
        if player_id_of(self.home) == player_id:
            return Side.HOME
        if player_id_of(self.visitor) == player_id:
            return Side.VISITOR
        return None


class InningRecord(Record):
    """A canonical inning in a game's ledger."""

    game_id: str
    inning_number: int = Field(..., ge=1)
    batter: Side
    runs: int = Field(..., ge=MIN_RUNS, le=MAX_RUNS)
    is_extra: bool = False

    def to_inning(self) -> Inning:
        return Inning(
            inning_number=self.inning_number,
            batter=self.batter,
            runs=self.runs,
            is_extra=self.is_extra,
        )


class ScoreEntry(Record):
    """One side's proposed innings for a game, awaiting reconciliation."""

    game_id: str
    side: Side
    submitted_by: str
    innings: list[Inning] = Field(default_factory=list)
    status: EntryStatus = EntryStatus.PENDING


class PlayerStats(Record):
    """Season totals for one player, recomputed from games and innings."""

    player_id: str
    season_id: str
    games_played: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    total_plus: int = Field(0, ge=0)
    total_minus: int = Field(0, ge=0)
    high_innings: int = Field(0, ge=0)


class StoreFile(BaseModel):
    """Complete on-disk layout of a league store."""

    users: list[User] = Field(default_factory=list)
    leagues: list[League] = Field(default_factory=list)
    memberships: list[Membership] = Field(default_factory=list)
    seasons: list[Season] = Field(default_factory=list)
    divisions: list[Division] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)
    players: list[Player] = Field(default_factory=list)
    matches: list[Match] = Field(default_factory=list)
    games: list[Game] = Field(default_factory=list)
    innings: list[InningRecord] = Field(default_factory=list)
    score_entries: list[ScoreEntry] = Field(default_factory=list)
    player_stats: list[PlayerStats] = Field(default_factory=list)

    class Config:
        extra = 'forbid'
