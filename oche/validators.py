"""Validation functions for imported score lines and inning sets."""

from collections import Counter
from typing import Iterable

from .constants import MAX_RUNS, MIN_RUNS, REGULATION_INNINGS
from .models import ParsedScoreRow
from .schemas import Inning, Side


def validate_import_rows(rows: list[ParsedScoreRow], roster_names: Iterable[str]) -> list[str]:
    """
    Validate parsed score lines against a team roster.

    Checks:
    - Player name is on the roster (case-insensitive, whitespace-trimmed)
    - Every inning value is 0-9
    - All nine regulation innings are present

    Args:
        rows: Parsed score lines
        roster_names: Names of the players on the roster

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    roster = {name.strip().lower() for name in roster_names}

    for row_num, row in enumerate(rows, 1):
        if row.player_name.strip().lower() not in roster:
            errors.append(f'Row {row_num}: Player "{row.player_name}" not found on roster')

        for inning_num, runs in enumerate(row.innings, 1):
            if runs < MIN_RUNS or runs > MAX_RUNS:
                errors.append(
                    f"Row {row_num}: Invalid runs value '{runs}' in inning {inning_num} (must be 0-9)"
                )
                break

        if len(row.innings) < REGULATION_INNINGS:
            errors.append(
                f'Row {row_num}: Missing innings data (found {len(row.innings)}, need {REGULATION_INNINGS})'
            )

    return errors


def validate_inning_set(innings: list[Inning]) -> list[str]:
    """
    Check an inning set for suspicious data without rejecting it.

    Checks:
    - No duplicate (inning, batter) pairs
    - is_extra agrees with the inning number
    - Both sides have all nine regulation innings

    Returns:
        List of warning messages (empty if the set looks complete)
    """
    warnings = []

    counts = Counter(inning.key for inning in innings)
    for (inning_number, batter), count in sorted(counts.items(), key=lambda item: item[0][0]):
        if count > 1:
            warnings.append(f'Inning {inning_number} ({batter.value}) entered {count} times')

    for inning in innings:
        expected_extra = inning.inning_number > REGULATION_INNINGS
        if inning.is_extra != expected_extra:
            kind = 'extra' if inning.is_extra else 'regulation'
            warnings.append(f'Inning {inning.inning_number} ({inning.batter.value}) marked as {kind}')

    for side in Side:
        present = {i.inning_number for i in innings if i.batter is side and not i.is_extra}
        missing = [n for n in range(1, REGULATION_INNINGS + 1) if n not in present]
        if missing:
            warnings.append(
                f'{side.value.capitalize()} is missing regulation innings: {", ".join(map(str, missing))}'
            )

    return warnings
