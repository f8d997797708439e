"""Constants for the Oche scoring engine."""

# Innings 1-9 are regulation; anything numbered above is an extra inning
REGULATION_INNINGS = 9

# Allowed run count for a single inning
MIN_RUNS = 0
MAX_RUNS = 9

# A regulation inning scoring exactly this many runs is a "high inning"
HIGH_INNING_RUNS = 9

# Leaderboard categories, in display order
LEADERBOARD_SIZE = 10
CATEGORY_HIGHEST_AVERAGE = 'Highest Average'
CATEGORY_MOST_RUNS = 'Most Runs'
CATEGORY_BEST_PLUS_MINUS = 'Best Plus/Minus'
CATEGORY_MOST_HIGH_INNINGS = 'Most High Innings'
CATEGORY_MOST_WINS = 'Most Wins'

LEADERBOARD_CATEGORIES = [
    CATEGORY_HIGHEST_AVERAGE,
    CATEGORY_MOST_RUNS,
    CATEGORY_BEST_PLUS_MINUS,
    CATEGORY_MOST_HIGH_INNINGS,
    CATEGORY_MOST_WINS,
]

# Handicap recalculation cadences a league may choose
HANDICAP_RECALC_FREQUENCIES = ('weekly', 'per-match', 'manual')

# Store table names
TABLES = (
    'users',
    'leagues',
    'memberships',
    'seasons',
    'divisions',
    'teams',
    'players',
    'matches',
    'games',
    'innings',
    'score_entries',
    'player_stats',
)
