"""Data models for computed results."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .schemas import Division, EntryStatus, Inning, PlayerStats, Season, Side, Winner


@dataclass
class Discrepancy:
    """A single inning/batter cell where the two entries disagree.

    A value of None means that side's entry has no such inning.
    """
    inning_number: int
    batter: Side
    value_by_side: Dict[Side, Optional[int]] = field(default_factory=dict)


@dataclass
class Comparison:
    """Result of comparing the home and visitor score entries."""
    match: bool
    discrepancies: List[Discrepancy] = field(default_factory=list)


@dataclass
class Transition:
    """What reconciliation decided for the current pair of entries."""
    status: EntryStatus
    comparison: Optional[Comparison] = None
    canonical: Optional[List[Inning]] = None  # innings to write to the ledger, if any


@dataclass
class SpotRuns:
    spot_runs: int
    recipient_side: Optional[Side] = None


@dataclass
class HandicappedResult:
    home_adjusted: int
    visitor_adjusted: int
    winner: Winner


@dataclass
class GameHandicap:
    """Handicap view for one game, for display only."""
    spot_runs: int
    recipient_side: Optional[Side]
    home_average: float  # rounded to one decimal
    visitor_average: float
    handicap_percent: float
    result: Optional[HandicappedResult] = None


@dataclass
class PlayerStatsResult:
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    total_plus: int = 0
    total_minus: int = 0
    high_innings: int = 0


@dataclass
class StandingsRow:
    rank: int
    team_id: str
    team_name: str
    match_points: int = 0
    game_wins: int = 0
    total_runs_scored: int = 0
    total_runs_allowed: int = 0

    @property
    def plus_minus(self) -> int:
        return self.total_runs_scored - self.total_runs_allowed


@dataclass
class StandingsView:
    rows: List[StandingsRow] = field(default_factory=list)
    seasons: List[Season] = field(default_factory=list)
    divisions: List[Division] = field(default_factory=list)
    season_id: Optional[str] = None


@dataclass
class RosterEntry:
    player_id: str
    name: str
    stats: PlayerStats
    average: float = 0.0


@dataclass
class TeamStatsView:
    team_id: str
    team_name: str
    row: Optional[StandingsRow]
    roster: List[RosterEntry] = field(default_factory=list)
    season_id: Optional[str] = None


@dataclass
class PlayerStatLine:
    """A player's season stats joined with display names.

    team_name is None when the player does not belong to a team in the
    league; such lines are not eligible for leaderboards.
    """
    player_id: str
    player_name: str
    team_name: Optional[str]
    stats: PlayerStats


@dataclass
class LeaderboardEntry:
    rank: int
    player_id: str
    player_name: str
    team_name: str
    value: float


@dataclass
class LeaderboardCategory:
    name: str
    entries: List[LeaderboardEntry] = field(default_factory=list)


@dataclass
class LeaderboardsView:
    categories: List[LeaderboardCategory] = field(default_factory=list)
    seasons: List[Season] = field(default_factory=list)
    season_id: Optional[str] = None

    def category(self, name: str) -> LeaderboardCategory:
        return next(c for c in self.categories if c.name == name)


@dataclass
class ParsedScoreRow:
    """One player's line from an imported score sheet."""
    player_name: str
    innings: List[int] = field(default_factory=list)  # runs for innings 1-9
    plus: Optional[int] = None
    minus: Optional[int] = None


@dataclass
class SheetParseResult:
    rows: List[ParsedScoreRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    sheet_names: List[str] = field(default_factory=list)
