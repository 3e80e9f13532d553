"""
Per-column-type cell behavior.

Each ColumnType maps to a CellTypeStrategy bundling the three things that
vary by type:

- validate: coerce committed editor text, or reject it
- format_display: render a stored value for the table body
- seed_editor: pre-format a stored value as the initial editor text

The Qt editor widget for each type is chosen in core/grid_delegates.py
from the same ColumnType key.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from .models import ColumnType, NUMERIC_TYPES, DATE_TYPES, to_text


DATE_FORMAT_HINT = "YYYY-MM-DD or MM-DD"

_FULL_DATE_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
_SHORT_DATE_RE = re.compile(r'^(\d{1,2})-(\d{1,2})$')
_ISO_PREFIX_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating editor text for a column type."""
    valid: bool
    value: Any = ''
    message: str = ''


@dataclass(frozen=True)
class CellTypeStrategy:
    validate: Callable[..., ValidationResult]
    format_display: Callable[[Any], str]
    seed_editor: Callable[[Any], str]


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def _month_day_ok(month: str, day: str) -> bool:
    return 1 <= int(month) <= 12 and 1 <= int(day) <= 31


def validate_date(value: Any, today: Optional[date] = None) -> ValidationResult:
    """
    Accept YYYY-MM-DD or MM-DD (current year); empty input clears the cell.

    Only month 1-12 and day 1-31 ranges are checked, so 2024-02-31 passes.
    """
    if value is None or str(value).strip() == '':
        return ValidationResult(True, '')
    text = str(value).strip()

    full = _FULL_DATE_RE.match(text)
    if full:
        year, month, day = full.groups()
        if _month_day_ok(month, day):
            return ValidationResult(True, f"{year}-{month.zfill(2)}-{day.zfill(2)}")

    short = _SHORT_DATE_RE.match(text)
    if short:
        month, day = short.groups()
        if _month_day_ok(month, day):
            year = (today or date.today()).year
            return ValidationResult(True, f"{year}-{month.zfill(2)}-{day.zfill(2)}")

    return ValidationResult(False, text, f"Invalid date. Accepted formats: {DATE_FORMAT_HINT}")


def format_date(value: Any) -> str:
    """Render as YYYY-MM-DD; strings that do not parse are shown unchanged."""
    if value is None or value == '':
        return ''
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    text = str(value)
    match = _ISO_PREFIX_RE.match(text)
    if match:
        return '-'.join(match.groups())
    return text


def seed_date(value: Any) -> str:
    """Editor text for a date cell: the date part only."""
    if value is None:
        return ''
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    text = str(value)
    if 'T' in text:
        return text.split('T')[0]
    return text


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def validate_number(value: Any, today: Optional[date] = None) -> ValidationResult:
    """Strip thousands separators and parse; empty input clears the cell."""
    if value is None:
        return ValidationResult(True, '')
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return ValidationResult(True, value)
    text = str(value).strip()
    if text == '':
        return ValidationResult(True, '')
    try:
        number = float(text.replace(',', ''))
    except ValueError:
        return ValidationResult(False, text, "Invalid number.")
    if number != number:  # NaN
        return ValidationResult(False, text, "Invalid number.")
    if number.is_integer() and abs(number) < 1e16:
        return ValidationResult(True, int(number))
    return ValidationResult(True, number)


def format_number(value: Any) -> str:
    """Thousands grouping; integral values without decimals, others up to 2."""
    if value is None or value == '':
        return ''
    number = _as_number(value)
    if number is None:
        return to_text(value)
    if number.is_integer():
        return f"{number:,.0f}"
    return f"{number:,.2f}".rstrip('0').rstrip('.')


def seed_number(value: Any) -> str:
    """Plain decimal editor text: 100.0 → "100", 2.5 → "2.5", None → ""."""
    if value is None or value == '':
        return ''
    number = _as_number(value)
    if number is None:
        return to_text(value)
    if number.is_integer():
        return str(int(round(number)))
    return repr(number)


# ---------------------------------------------------------------------------
# Everything else
# ---------------------------------------------------------------------------

def validate_text(value: Any, today: Optional[date] = None) -> ValidationResult:
    return ValidationResult(True, '' if value is None else value)


def seed_text(value: Any) -> str:
    return to_text(value)


_DATE_STRATEGY = CellTypeStrategy(validate_date, format_date, seed_date)
_NUMBER_STRATEGY = CellTypeStrategy(validate_number, format_number, seed_number)
_TEXT_STRATEGY = CellTypeStrategy(validate_text, to_text, seed_text)

CELL_STRATEGIES: Dict[ColumnType, CellTypeStrategy] = {
    ColumnType.STRING: _TEXT_STRATEGY,
    ColumnType.TIME: _TEXT_STRATEGY,
    ColumnType.SINGLE_SELECT: _TEXT_STRATEGY,
    ColumnType.ACTIONS: _TEXT_STRATEGY,
}
CELL_STRATEGIES.update({t: _NUMBER_STRATEGY for t in NUMERIC_TYPES})
CELL_STRATEGIES.update({t: _DATE_STRATEGY for t in DATE_TYPES})


def get_cell_strategy(column_type: Any) -> CellTypeStrategy:
    """Strategy for a column type (enum or wire string)."""
    return CELL_STRATEGIES.get(ColumnType.parse(column_type), _TEXT_STRATEGY)


def is_url(value: Any) -> bool:
    """Cells holding http(s) links open the link instead of selecting the row."""
    return isinstance(value, str) and (value.startswith('http://') or value.startswith('https://'))
