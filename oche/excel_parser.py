"""Excel score sheet parsing utilities."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

import openpyxl

from .constants import MAX_RUNS, MIN_RUNS, REGULATION_INNINGS
from .models import ParsedScoreRow, SheetParseResult
from .schemas import Inning, Side

logger = logging.getLogger('oche.excel_parser')

PLAYER_NAME_PATTERNS = [
    re.compile(r'^player$', re.IGNORECASE),
    re.compile(r'^name$', re.IGNORECASE),
    re.compile(r'^shooter$', re.IGNORECASE),
    re.compile(r'^player\s*name$', re.IGNORECASE),
]
PLUS_PATTERNS = [re.compile(r'^plus$', re.IGNORECASE), re.compile(r'^total\s*plus$', re.IGNORECASE), re.compile(r'^\+$')]
MINUS_PATTERNS = [re.compile(r'^minus$', re.IGNORECASE), re.compile(r'^total\s*minus$', re.IGNORECASE), re.compile(r'^-$')]
INNING_HEADER = re.compile(r'^(?:inn(?:ing)?\s*)?(\d+)$', re.IGNORECASE)


@dataclass
class ColumnMapping:
    """Zero-based column positions for each field of a score sheet."""
    player_name: Optional[int] = None
    innings: list[int] = field(default_factory=list)
    plus: Optional[int] = None
    minus: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.player_name is not None and len(self.innings) == REGULATION_INNINGS


# Player name in column A, innings 1-9 in columns B-J
POSITIONAL_MAPPING = ColumnMapping(player_name=0, innings=list(range(1, REGULATION_INNINGS + 1)))


def _matches_any(header: str, patterns: list[re.Pattern]) -> bool:
    return any(p.match(header) for p in patterns)


def auto_detect_columns(headers: list[Any]) -> ColumnMapping:
    """
    Guess which columns hold the player name, innings 1-9, plus and minus.

    Inning headers may be a bare number ("3") or "Inn 3" / "Inning 3".
    The first match wins for each field.

    Example:
        auto_detect_columns(['Player', '1', '2', ..., '9', 'Plus'])
        -> ColumnMapping(player_name=0, innings=[1..9], plus=10, minus=None)
    """
    mapping = ColumnMapping()
    inning_columns: dict[int, int] = {}

    for idx, raw in enumerate(headers):
        header = str(raw).strip() if raw is not None else ''
        if not header:
            continue

        if mapping.player_name is None and _matches_any(header, PLAYER_NAME_PATTERNS):
            mapping.player_name = idx
        elif mapping.plus is None and _matches_any(header, PLUS_PATTERNS):
            mapping.plus = idx
        elif mapping.minus is None and _matches_any(header, MINUS_PATTERNS):
            mapping.minus = idx
        else:
            match = INNING_HEADER.match(header)
            if match:
                inning_columns.setdefault(int(match.group(1)), idx)

    for inning in range(1, REGULATION_INNINGS + 1):
        if inning in inning_columns:
            mapping.innings.append(inning_columns[inning])

    return mapping


def parse_runs(value: Any) -> Optional[int]:
    """Convert a cell value to a run count, or None if it is not an integer in 0-9."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, str):
        value = value.strip()
        if not re.fullmatch(r'\d+', value):
            return None
        value = int(value)
    elif not isinstance(value, int):
        return None

    if value < MIN_RUNS or value > MAX_RUNS:
        return None
    return value


def _optional_int(row: tuple, idx: Optional[int]) -> Optional[int]:
    if idx is None or idx >= len(row):
        return None
    value = row[idx]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, str) and re.fullmatch(r'-?\d+', value.strip()):
        return int(value.strip())
    return None


def parse_rows(data_rows: list[tuple], mapping: ColumnMapping) -> tuple[list[ParsedScoreRow], list[str]]:
    """
    Apply a column mapping to raw sheet rows.

    Rows are numbered from 1 (the first row under the header). A row with
    a bad run value is skipped and reported at its first bad inning.
    """
    rows = []
    errors = []

    for row_num, row in enumerate(data_rows, 1):
        if all(cell is None or str(cell).strip() == '' for cell in row):
            continue

        name_cell = row[mapping.player_name] if mapping.player_name < len(row) else None
        player_name = str(name_cell).strip() if name_cell is not None else ''
        if not player_name:
            errors.append(f'Row {row_num}: Missing player name')
            continue

        innings = []
        for inning_num, col in enumerate(mapping.innings, 1):
            raw = row[col] if col < len(row) else None
            runs = parse_runs(raw)
            if runs is None:
                shown = '' if raw is None else raw
                errors.append(
                    f"Row {row_num}: Invalid runs value '{shown}' in inning {inning_num} (must be 0-9)"
                )
                break
            innings.append(runs)
        else:
            rows.append(
                ParsedScoreRow(
                    player_name=player_name,
                    innings=innings,
                    plus=_optional_int(row, mapping.plus),
                    minus=_optional_int(row, mapping.minus),
                )
            )

    return rows, errors


def parse_score_sheet(filepath: str, sheet_name: Optional[str] = None) -> SheetParseResult:
    """
    Parse player score lines from an Excel workbook.

    The first row is a header. Columns are auto-detected from it; when the
    header does not name a player column and all nine innings, the sheet is
    read positionally (name in column A, innings in B-J).

    Args:
        filepath: Path to the .xlsx file
        sheet_name: Sheet to read (defaults to the first sheet)

    Returns:
        SheetParseResult with parsed rows, row errors, and all sheet names
    """
    wb = openpyxl.load_workbook(filepath, read_only=True, data_only=True)
    try:
        result = SheetParseResult(sheet_names=list(wb.sheetnames))
        target = sheet_name or wb.sheetnames[0]
        if target not in wb.sheetnames:
            result.errors.append(f'Sheet "{target}" not found')
            return result

        raw_rows = list(wb[target].iter_rows(values_only=True))
    finally:
        wb.close()

    if len(raw_rows) <= 1:
        return result

    mapping = auto_detect_columns(list(raw_rows[0]))
    if not mapping.is_complete:
        logger.debug(f'Header of sheet "{target}" not recognized; reading columns positionally')
        mapping = POSITIONAL_MAPPING

    result.rows, result.errors = parse_rows(raw_rows[1:], mapping)
    logger.info(
        f'Parsed {len(result.rows)} rows from sheet "{target}" ({len(result.errors)} errors)'
    )
    return result


def rows_to_innings(home_row: ParsedScoreRow, visitor_row: ParsedScoreRow) -> list[Inning]:
    """Build a regulation inning set from one home and one visitor score line."""
    innings = []
    for side, row in ((Side.HOME, home_row), (Side.VISITOR, visitor_row)):
        for inning_number, runs in enumerate(row.innings, 1):
            innings.append(Inning(inning_number=inning_number, batter=side, runs=runs, is_extra=False))
    return sorted(innings, key=lambda inning: (inning.inning_number, inning.batter is not Side.HOME))
