"""
Working copy of the column configuration dialog.

The dialog edits a draft (plain wire-format dicts) instead of the live
columns; nothing reaches the grid until the draft is saved. Every function
here returns a new list and leaves its input untouched.
"""

import pprint
import re
from typing import List, Dict, Any, Iterable, Optional

from .columns import COLUMN_FLAGS, FORM_EXCLUDED_FIELDS, grid_type_to_form_type
from .models import ColumnDefinition, FormColumn


Draft = List[Dict[str, Any]]

DEFAULT_DRAFT_WIDTH = 100

# Flags the column tab offers "check all" boxes for
BULK_TOGGLE_FLAGS = ('visible', 'editable', 'sortable')

# Choices offered when adding a column by hand
ADD_COLUMN_TYPE_CHOICES = {
    '1': 'string',
    '2': 'number',
    '3': 'float',
    '4': 'date',
    '5': 'currency',
}


def _truthy(value: Any) -> bool:
    return value is True or value == 'true'


def draft_column(raw: Any) -> Dict[str, Any]:
    """One draft entry with dialog defaults (width 100, visible, sortable)."""
    if isinstance(raw, ColumnDefinition):
        raw = raw.to_dict()
    field_name = raw.get('field') or raw.get('accessor')
    return {
        'field': field_name,
        'headerName': raw.get('headerName') or raw.get('header') or raw.get('label') or field_name,
        'visible': raw.get('visible') is not False,
        'editable': bool(raw.get('editable') or False),
        'sortable': raw.get('sortable') is not False,
        'filterable': bool(raw.get('filterable') or False),
        'searchable': bool(raw.get('searchable') or False),
        'width': raw.get('width') or DEFAULT_DRAFT_WIDTH,
        'type': raw.get('type') or 'string',
    }


def draft_from_columns(columns: Iterable[Any]) -> Draft:
    return [draft_column(c) for c in columns or []]


def new_draft_column(field_name: str, column_type: str = 'string', header_name: Optional[str] = None,
                     editable: bool = True, width: int = DEFAULT_DRAFT_WIDTH) -> Dict[str, Any]:
    """Entry for a column added by hand or discovered in the database."""
    return {
        'field': field_name,
        'headerName': header_name or field_name,
        'visible': True,
        'editable': editable,
        'sortable': True,
        'filterable': False,
        'searchable': False,
        'width': width,
        'type': column_type or 'string',
    }


def index_of(draft: Draft, field_name: str) -> int:
    for i, col in enumerate(draft):
        if col.get('field') == field_name:
            return i
    return -1


def set_cell(draft: Draft, index: int, key: str, value: Any) -> Draft:
    """
    Edit one cell of the column table.

    Flags accept True or "true"; width keeps digits only ("" is kept while
    the user is typing). Turning filterable on clears searchable and vice
    versa.
    """
    updated = []
    for i, col in enumerate(draft):
        if i != index:
            updated.append(col)
            continue
        col = dict(col)
        if key in COLUMN_FLAGS:
            flag = _truthy(value)
            col[key] = flag
            if flag and key == 'filterable':
                col['searchable'] = False
            elif flag and key == 'searchable':
                col['filterable'] = False
        elif key == 'width':
            col['width'] = '' if value == '' else re.sub(r'[^0-9]', '', str(value))
        else:
            col[key] = value
        updated.append(col)
    return updated


def toggle_all(draft: Draft, key: str) -> Draft:
    """Check-all box: if every column has the flag, clear it everywhere, else set it everywhere."""
    if key not in BULK_TOGGLE_FLAGS:
        raise ValueError(f"Bulk toggle not supported for '{key}'")
    all_checked = all(col.get(key) for col in draft)
    return [dict(col, **{key: not all_checked}) for col in draft]


def all_checked(draft: Draft, key: str) -> bool:
    return bool(draft) and all(col.get(key) for col in draft)


def _swap(items: List[Any], i: int, j: int) -> List[Any]:
    items = list(items)
    items[i], items[j] = items[j], items[i]
    return items


def move_up(draft: Draft, index: int) -> Draft:
    if index <= 0 or index >= len(draft):
        return list(draft)
    return _swap(draft, index - 1, index)


def move_down(draft: Draft, index: int) -> Draft:
    if index < 0 or index >= len(draft) - 1:
        return list(draft)
    return _swap(draft, index, index + 1)


def move_to(draft: Draft, from_index: int, to_index: int) -> Draft:
    """Drag and drop: take the entry out and reinsert it at to_index."""
    if from_index == to_index or not (0 <= from_index < len(draft)) or not (0 <= to_index < len(draft)):
        return list(draft)
    items = list(draft)
    item = items.pop(from_index)
    items.insert(to_index, item)
    return items


def remove_at(draft: Draft, index: int) -> Draft:
    return [col for i, col in enumerate(draft) if i != index]


def columns_for_save(draft: Draft) -> Draft:
    """Draft as persisted: widths become ints, blanks and junk fall back to 100."""
    saved = []
    for col in draft:
        col = dict(col)
        try:
            col['width'] = int(col.get('width')) or DEFAULT_DRAFT_WIDTH
        except (TypeError, ValueError):
            col['width'] = DEFAULT_DRAFT_WIDTH
        saved.append(col)
    return saved


# ---------------------------------------------------------------------------
# Record form columns
# ---------------------------------------------------------------------------

def auto_form_columns(draft: Draft) -> List[FormColumn]:
    """Default form: every editable grid column except system/actions columns."""
    result = []
    for col in draft:
        if not col.get('editable') or col.get('field') in FORM_EXCLUDED_FIELDS:
            continue
        result.append(FormColumn(
            field=col['field'],
            header_name=col.get('headerName') or col['field'],
            type=grid_type_to_form_type(col.get('type')),
            required=False,
            row=len(result) + 1,
        ))
    return result


def _next_row(form_columns: List[FormColumn]) -> int:
    return max([c.row or 1 for c in form_columns] + [0]) + 1


def form_candidates(draft: Draft) -> Draft:
    """Grid columns that may appear in the form tab's checklist."""
    return [c for c in draft if c.get('visible') and c.get('field') not in FORM_EXCLUDED_FIELDS]


def available_form_fields(draft: Draft, form_columns: List[FormColumn]) -> List[str]:
    """Fields not yet on the form (the 'actions' column never is)."""
    used = {fc.field for fc in form_columns}
    return [c['field'] for c in draft if c['field'] not in used and c['field'] != 'actions']


def add_form_field(draft: Draft, form_columns: List[FormColumn], field_name: str) -> List[FormColumn]:
    """Append a grid column to the form on its own new row; unknown or used fields are ignored."""
    if field_name not in available_form_fields(draft, form_columns):
        return list(form_columns)
    grid_col = next((c for c in draft if c['field'] == field_name), {})
    return list(form_columns) + [FormColumn(
        field=field_name,
        header_name=grid_col.get('headerName') or field_name,
        type=grid_type_to_form_type(grid_col.get('type')),
        required=False,
        row=_next_row(form_columns),
    )]


def toggle_form_field(draft: Draft, form_columns: List[FormColumn], field_name: str,
                      checked: bool) -> List[FormColumn]:
    if checked:
        return add_form_field(draft, form_columns, field_name)
    return [fc for fc in form_columns if fc.field != field_name]


def remove_form_field(form_columns: List[FormColumn], index: int) -> List[FormColumn]:
    return [fc for i, fc in enumerate(form_columns) if i != index]


def move_form_up(form_columns: List[FormColumn], index: int) -> List[FormColumn]:
    if index <= 0 or index >= len(form_columns):
        return list(form_columns)
    return _swap(form_columns, index - 1, index)


def move_form_down(form_columns: List[FormColumn], index: int) -> List[FormColumn]:
    if index < 0 or index >= len(form_columns) - 1:
        return list(form_columns)
    return _swap(form_columns, index, index + 1)


def set_form_cell(form_columns: List[FormColumn], index: int, key: str, value: Any) -> List[FormColumn]:
    """required coerces like the grid flags; row is an int >= 1 (junk → 1)."""
    from dataclasses import replace

    updated = []
    for i, fc in enumerate(form_columns):
        if i != index:
            updated.append(fc)
            continue
        if key == 'required':
            fc = replace(fc, required=_truthy(value))
        elif key == 'row':
            try:
                row = int(value)
            except (TypeError, ValueError):
                row = 1
            fc = replace(fc, row=row if row >= 1 else 1)
        elif key == 'headerName':
            fc = replace(fc, header_name=str(value))
        elif key in ('type', 'placeholder'):
            fc = replace(fc, **{key: value})
        else:
            raise ValueError(f"Unknown form column attribute: {key}")
        updated.append(fc)
    return updated


def auto_arrange_rows(form_columns: List[FormColumn]) -> List[FormColumn]:
    """Group fields sharing a row number together (stable within a row)."""
    return sorted(form_columns, key=lambda fc: fc.row or 1)


def generate_form_code(form_columns: List[FormColumn]) -> str:
    """Python literal of the form definition, for pasting into host code."""
    entries = []
    for fc in form_columns:
        entry = {'field': fc.field, 'headerName': fc.header_name, 'type': fc.type}
        if fc.required:
            entry['required'] = True
        entry['row'] = fc.row or 1
        entries.append(entry)
    body = pprint.pformat(entries, sort_dicts=False, width=120)
    return f"FORM_COLUMNS = {body}\n"
