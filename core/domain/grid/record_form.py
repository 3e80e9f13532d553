"""
Record add/edit form logic (the dialog widget itself lives in the host).
"""

from typing import List, Dict, Any, Optional, Tuple, Union

from .models import FormColumn, FormFieldType


def _as_form_columns(form_columns) -> List[FormColumn]:
    return [fc if isinstance(fc, FormColumn) else FormColumn.from_dict(fc) for fc in form_columns or []]


def is_edit_mode(data: Optional[Dict[str, Any]]) -> bool:
    """A record with a truthy id is being edited; anything else is new."""
    return bool(data and data.get('id'))


def empty_record(form_columns) -> Dict[str, Any]:
    """Blank form data: select fields start on their first option, the rest on ""."""
    record = {}
    for fc in _as_form_columns(form_columns):
        if fc.type == FormFieldType.SELECT.value and fc.value_options:
            first = fc.value_options[0]
            record[fc.field] = first.get('value') if isinstance(first, dict) else first
        else:
            record[fc.field] = ''
    return record


def initial_record(form_columns, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Form data when the dialog opens: a copy of the record, or an empty one."""
    if data:
        return dict(data)
    return empty_record(form_columns)


def validate_record(form_columns, data: Dict[str, Any], is_edit: bool = False) -> Tuple[bool, str]:
    """
    Check required fields before handing the record to the save intent.

    Password fields may stay blank when editing an existing record.

    Returns:
        (ok, message) with the first missing field's message
    """
    for fc in _as_form_columns(form_columns):
        if not fc.required:
            continue
        if fc.type == FormFieldType.PASSWORD.value and is_edit:
            continue
        value = (data or {}).get(fc.field)
        if value is None or value is False or str(value).strip() == '':
            return False, f"{fc.header_name or fc.field} is required."
    return True, ''


def group_by_row(form_columns) -> List[List[FormColumn]]:
    """
    Lay out fields in rows: fields sharing a row number go on one line.

    Rows are ordered by number; fields without a row get a line of their own
    after the numbered rows.
    """
    groups: Dict[Union[int, str], List[FormColumn]] = {}
    for fc in _as_form_columns(form_columns):
        key = fc.row if fc.row else fc.field
        groups.setdefault(key, []).append(fc)

    numbered = sorted(k for k in groups if isinstance(k, int))
    named = [k for k in groups if not isinstance(k, int)]
    return [groups[k] for k in numbered + named]


def is_field_disabled(form_column: FormColumn, is_edit: bool) -> bool:
    """Non-editable fields can be filled in for new records only."""
    return not form_column.editable and is_edit
