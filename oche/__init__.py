from .errors import OcheError, ValidationError, NotFoundError, AuthorizationError
from .schemas import (
    Side,
    Winner,
    EntryStatus,
    Role,
    RealPlayer,
    BlindSlot,
    BLIND,
    Inning,
    LeagueConfig,
    MatchConfig,
    HandicapSettings,
    BlindRules,
)
from .storage import LeagueStore
from .config import (
    get_default_config,
    create_league,
    league_config,
    update_match_config,
    update_handicap_config,
)
from .innings import save_innings, get_game_innings
from .winner import resolve_winner, determine_winner
from .game_status import set_dnp, apply_blind_score
from .reconciliation import (
    compare_entries,
    reconcile,
    derive_game_state,
    submit_score_entry,
    get_score_entries,
    get_reconciliation_state,
    resolve_discrepancy,
)
from .handicap import (
    compute_spot_runs,
    determine_handicapped_winner,
    get_game_handicap,
    set_handicap_override,
)
from .player_stats import calculate_player_stats, recalculate_player_stats, recalculate_season_stats
from .standings import compute_standings, get_standings, record_match_totals, get_team_stats
from .leaderboards import compute_leaderboards, get_leaderboards
from .excel_parser import parse_score_sheet, auto_detect_columns, rows_to_innings
from .validators import validate_import_rows, validate_inning_set

__all__ = [
    # Errors
    'OcheError',
    'ValidationError',
    'NotFoundError',
    'AuthorizationError',
    # Schemas
    'Side',
    'Winner',
    'EntryStatus',
    'Role',
    'RealPlayer',
    'BlindSlot',
    'BLIND',
    'Inning',
    'LeagueConfig',
    'MatchConfig',
    'HandicapSettings',
    'BlindRules',
    # Storage and configuration
    'LeagueStore',
    'get_default_config',
    'create_league',
    'league_config',
    'update_match_config',
    'update_handicap_config',
    # Innings and game results
    'save_innings',
    'get_game_innings',
    'resolve_winner',
    'determine_winner',
    'set_dnp',
    'apply_blind_score',
    # Dual-entry reconciliation
    'compare_entries',
    'reconcile',
    'derive_game_state',
    'submit_score_entry',
    'get_score_entries',
    'get_reconciliation_state',
    'resolve_discrepancy',
    # Handicaps
    'compute_spot_runs',
    'determine_handicapped_winner',
    'get_game_handicap',
    'set_handicap_override',
    # Statistics
    'calculate_player_stats',
    'recalculate_player_stats',
    'recalculate_season_stats',
    'compute_standings',
    'get_standings',
    'record_match_totals',
    'get_team_stats',
    'compute_leaderboards',
    'get_leaderboards',
    # Score sheet import
    'parse_score_sheet',
    'auto_detect_columns',
    'rows_to_innings',
    'validate_import_rows',
    'validate_inning_set',
]
