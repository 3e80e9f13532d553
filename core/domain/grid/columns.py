"""
Column model: normalization of raw column declarations.

Raw declarations come from host defaults or the col-def API and may be
partial dicts. normalize() turns them into complete ColumnDefinition
objects; the derived views decide which columns feed the toolbar
filters, the search box, and the table body.
"""

from dataclasses import replace
from typing import List, Dict, Any, Optional, Callable, Iterable, Union

from .models import ColumnDefinition, ColumnType


RawColumn = Union[ColumnDefinition, Dict[str, Any]]
ColumnExtender = Callable[[List[RawColumn]], List[RawColumn]]

# Columns that can never be deleted from the database table
PROTECTED_FIELDS = frozenset({'id', 'created_at', 'updated_at'})

# Never offered as record form fields
FORM_EXCLUDED_FIELDS = PROTECTED_FIELDS | {'actions'}

# Boolean flags editable through the configuration workflow
COLUMN_FLAGS = ('visible', 'editable', 'sortable', 'filterable', 'searchable')

# Standard columns offered by "add defaults" in the configuration dialog
DEFAULT_COLUMN_TEMPLATES: Dict[str, Dict[str, Any]] = {
    'id': {'field': 'id', 'headerName': 'ID', 'type': 'number', 'width': 60, 'editable': False},
    'created_at': {'field': 'created_at', 'headerName': 'Created', 'type': 'date', 'width': 100, 'editable': False},
    'updated_at': {'field': 'updated_at', 'headerName': 'Updated', 'type': 'date', 'width': 100, 'editable': False},
    'title': {'field': 'title', 'headerName': 'Title', 'type': 'string', 'width': 200, 'editable': True},
    'owner': {'field': 'owner', 'headerName': 'Owner', 'type': 'string', 'width': 100, 'editable': True},
    'description': {'field': 'description', 'headerName': 'Description', 'type': 'string', 'width': 200, 'editable': True},
}

_GRID_TO_FORM_TYPE = {
    ColumnType.DATE: 'date',
    ColumnType.NUMBER: 'number',
    ColumnType.CURRENCY: 'number',
    ColumnType.INTEGER: 'number',
    ColumnType.SINGLE_SELECT: 'select',
}


def is_protected(field_name: str) -> bool:
    """Protected check is case-insensitive (ID, Created_At, ...)."""
    return str(field_name or '').lower() in PROTECTED_FIELDS


def grid_type_to_form_type(column_type: Any) -> str:
    """Record form input type for a grid column type."""
    return _GRID_TO_FORM_TYPE.get(ColumnType.parse(column_type), 'text')


def _normalize_one(raw: RawColumn) -> Optional[ColumnDefinition]:
    if isinstance(raw, ColumnDefinition):
        col = replace(raw, type=ColumnType.parse(raw.type))
    elif isinstance(raw, dict):
        col = ColumnDefinition.from_dict(raw)
    else:
        return None

    if not col.field:
        return None
    if not col.header_name:
        col = replace(col, header_name=col.field)
    if col.filterable and col.searchable:
        col = replace(col, searchable=False)
    return col


def normalize(raw_columns: Optional[Iterable[RawColumn]],
              extender: Optional[ColumnExtender] = None) -> List[ColumnDefinition]:
    """
    Normalize raw column declarations into complete definitions.

    Args:
        raw_columns: Dicts (wire format) and/or ColumnDefinition objects
        extender: Optional transform applied to the raw list first
                  (e.g. to inject computed action columns)

    Returns:
        New list of ColumnDefinition. Never raises: entries without a field
        are dropped, duplicate fields keep their first occurrence, and a
        column declared both filterable and searchable stays filterable.
        normalize(normalize(c)) == normalize(c).
    """
    cols = list(raw_columns or [])
    if extender is not None:
        try:
            cols = list(extender(cols) or [])
        except Exception as e:
            print(f"[grid] Column extender failed, using raw columns: {e}")

    result: List[ColumnDefinition] = []
    seen = set()
    for raw in cols:
        col = _normalize_one(raw)
        if col is None:
            print(f"[grid] Ignoring column declaration without a field: {raw!r}")
            continue
        if col.field in seen:
            print(f"[grid] Duplicate column field '{col.field}' ignored")
            continue
        seen.add(col.field)
        result.append(col)
    return result


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

def filter_columns(columns: Iterable[ColumnDefinition]) -> List[ColumnDefinition]:
    """Toolbar equality filters: filterable and visible."""
    return [c for c in columns if c.filterable and c.visible]


def search_columns(columns: Iterable[ColumnDefinition]) -> List[ColumnDefinition]:
    """Free-text search targets: searchable and visible."""
    return [c for c in columns if c.searchable and c.visible]


def display_columns(columns: Iterable[ColumnDefinition]) -> List[ColumnDefinition]:
    """Table body columns: visible and not turned into a filter."""
    return [c for c in columns if c.visible and not c.filterable]


def find_column(columns: Iterable[ColumnDefinition], field_name: str) -> Optional[ColumnDefinition]:
    for col in columns:
        if col.field == field_name:
            return col
    return None


def set_column_flag(columns: List[ColumnDefinition], field_name: str,
                    flag: str, value: bool) -> List[ColumnDefinition]:
    """
    Set one boolean flag on one column, returning a new list.

    Enabling filterable clears searchable in the same update, and the
    other way round.
    """
    if flag not in COLUMN_FLAGS:
        raise ValueError(f"Unknown column flag: {flag}")

    updated = []
    for col in columns:
        if col.field != field_name:
            updated.append(col)
            continue
        changes = {flag: bool(value)}
        if value and flag == 'filterable':
            changes['searchable'] = False
        elif value and flag == 'searchable':
            changes['filterable'] = False
        updated.append(replace(col, **changes))
    return updated


def columns_to_dicts(columns: Iterable[ColumnDefinition]) -> List[Dict[str, Any]]:
    return [c.to_dict() for c in columns]
