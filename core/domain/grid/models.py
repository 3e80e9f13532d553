"""
Grid domain models.

Pure Python dataclasses, no Qt imports. These describe the grid's column
declarations and the per-render engine state (sort, pagination, edit
session) and are passed between service, viewmodel, and view layers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List, Callable


class ColumnType(Enum):
    """Types of columns with different rendering/editing behavior."""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    FLOAT = "float"
    CURRENCY = "currency"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    SINGLE_SELECT = "singleSelect"
    ACTIONS = "actions"

    @classmethod
    def parse(cls, value: Any) -> 'ColumnType':
        """Map a declared type (enum or wire string) to a ColumnType; unknown → STRING."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.STRING

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC_TYPES

    @property
    def is_date(self) -> bool:
        return self in DATE_TYPES


NUMERIC_TYPES = frozenset({ColumnType.NUMBER, ColumnType.INTEGER, ColumnType.FLOAT, ColumnType.CURRENCY})
DATE_TYPES = frozenset({ColumnType.DATE, ColumnType.DATETIME})


class SortDirection(Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass
class ColumnDefinition:
    """
    Declarative description of one grid field.

    Attributes:
        field: Unique key of the column (stable identity)
        header_name: Header text (defaults to field)
        type: Column type driving formatting and validation
        editable: Inline editing allowed (double-click)
        sortable: Clicking the header sorts by this column
        filterable: Column becomes a toolbar equality filter (and is not displayed)
        searchable: Column takes part in the free-text search
        visible: Column is shown at all
        width: Width in pixels (None = view default)
        edit_field: Alternate storage key used when committing edits
        value_options: Choices for singleSelect (plain values or {value, label})
        value_getter: Optional derivation (row, raw_value) -> value
        value_formatter: Optional display formatter (value, row) -> str
        get_actions: Optional builder of action descriptors for 'actions' columns
    """
    field: str
    header_name: str = ""
    type: ColumnType = ColumnType.STRING
    editable: bool = False
    sortable: bool = True
    filterable: bool = False
    searchable: bool = False
    visible: bool = True
    width: Optional[int] = None
    edit_field: Optional[str] = None
    value_options: Optional[List[Any]] = None
    value_getter: Optional[Callable[[Dict[str, Any], Any], Any]] = field(default=None, compare=False)
    value_formatter: Optional[Callable[[Any, Dict[str, Any]], str]] = field(default=None, compare=False)
    get_actions: Optional[Callable[[Dict[str, Any]], List[Any]]] = field(default=None, compare=False)

    @property
    def storage_field(self) -> str:
        """Key written by inline edits."""
        return self.edit_field or self.field

    def value_of(self, row: Dict[str, Any]) -> Any:
        """Column value for a row, through value_getter when defined."""
        raw = row.get(self.field)
        if self.value_getter is not None:
            return self.value_getter(row, raw)
        return raw

    def option_pairs(self) -> List[tuple]:
        """value_options as (value, label) pairs."""
        pairs = []
        for opt in self.value_options or []:
            if isinstance(opt, dict):
                pairs.append((opt.get('value'), opt.get('label', opt.get('value'))))
            else:
                pairs.append((opt, opt))
        return pairs

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the col-def wire format (callables are not persisted)."""
        data = {
            'field': self.field,
            'headerName': self.header_name or self.field,
            'type': self.type.value,
            'editable': self.editable,
            'sortable': self.sortable,
            'filterable': self.filterable,
            'searchable': self.searchable,
            'visible': self.visible,
        }
        if self.width is not None:
            data['width'] = self.width
        if self.edit_field:
            data['editField'] = self.edit_field
        if self.value_options is not None:
            data['valueOptions'] = list(self.value_options)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ColumnDefinition':
        """Create a ColumnDefinition from a wire/declaration dict."""
        field_name = data.get('field') or data.get('accessor')
        header = data.get('headerName') or data.get('header') or data.get('label') or field_name
        return cls(
            field=field_name,
            header_name=header,
            type=ColumnType.parse(data.get('type') or 'string'),
            editable=_flag(data.get('editable'), False),
            sortable=_flag(data.get('sortable'), True),
            filterable=_flag(data.get('filterable'), False),
            searchable=_flag(data.get('searchable'), False),
            visible=_flag(data.get('visible'), True),
            width=_width(data.get('width')),
            edit_field=data.get('editField') or data.get('edit_field'),
            value_options=data.get('valueOptions', data.get('value_options')),
            value_getter=data.get('valueGetter', data.get('value_getter')),
            value_formatter=data.get('valueFormatter', data.get('value_formatter')),
            get_actions=data.get('getActions', data.get('get_actions')),
        )


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return bool(value)


def _width(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class FormFieldType(Enum):
    """Input kinds available in the record form."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    TEXTAREA = "textarea"
    PASSWORD = "password"


@dataclass
class FormColumn:
    """One field of the record add/edit form."""
    field: str
    header_name: str = ""
    type: str = FormFieldType.TEXT.value
    required: bool = False
    row: int = 1
    editable: bool = True
    value_options: Optional[List[Dict[str, Any]]] = None
    placeholder: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'field': self.field,
            'headerName': self.header_name or self.field,
            'type': self.type,
            'required': self.required,
            'row': self.row,
        }
        if not self.editable:
            data['editable'] = False
        if self.value_options is not None:
            data['valueOptions'] = list(self.value_options)
        if self.placeholder:
            data['placeholder'] = self.placeholder
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FormColumn':
        try:
            row = int(data.get('row') or 1)
        except (TypeError, ValueError):
            row = 1
        return cls(
            field=data.get('field', ''),
            header_name=data.get('headerName') or data.get('field', ''),
            type=data.get('type') or FormFieldType.TEXT.value,
            required=_flag(data.get('required'), False),
            row=max(1, row),
            editable=_flag(data.get('editable'), True),
            value_options=data.get('valueOptions'),
            placeholder=data.get('placeholder') or '',
        )


@dataclass(frozen=True)
class SortState:
    """At most one active sort key."""
    key: Optional[str] = None
    direction: SortDirection = SortDirection.ASCENDING

    @property
    def ascending(self) -> bool:
        return self.direction == SortDirection.ASCENDING

    def toggled(self, field_name: str) -> 'SortState':
        """Header click: same key ascending → descending, anything else → ascending."""
        if self.key == field_name and self.ascending:
            return SortState(field_name, SortDirection.DESCENDING)
        return SortState(field_name, SortDirection.ASCENDING)


@dataclass(frozen=True)
class PaginationState:
    """1-indexed page window; total_count overrides the local count (server-side paging)."""
    page: int = 1
    page_size: int = 20
    total_count: Optional[int] = None

    @property
    def offset(self) -> int:
        return (max(1, self.page) - 1) * self.page_size


@dataclass(frozen=True)
class EditSession:
    """The single in-flight inline edit."""
    row_id: Any
    field: str
    buffer: str = ""


@dataclass
class ColumnConfigRecord:
    """
    Persisted grid configuration for a (page_name, table_name) pair.

    Every attribute is optional: None means "keep the caller's default".
    """
    page_title: Optional[str] = None
    columns: Optional[List[Dict[str, Any]]] = None
    form_columns: Optional[List[Dict[str, Any]]] = None
    form_width: Optional[int] = None
    show_row_number: Optional[bool] = None
    show_checkbox: Optional[bool] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'ColumnConfigRecord':
        """Map a GET col-def response; empty column lists count as absent."""
        data = data or {}
        columns = data.get('columns')
        show_row_number = data.get('show_row_number')
        show_checkbox = data.get('show_checkbox')
        return cls(
            page_title=data.get('page_title') or None,
            columns=list(columns) if columns else None,
            form_columns=data.get('form_columns') or None,
            form_width=_width(data.get('form_width')) or None,
            show_row_number=bool(show_row_number) if show_row_number is not None else None,
            show_checkbox=bool(show_checkbox) if show_checkbox is not None else None,
        )


def is_empty(value: Any) -> bool:
    """None and the empty string count as 'no value'."""
    return value is None or value == ''


def to_text(value: Any) -> str:
    """
    Stringify a cell value for comparisons (filter, search, no-op edits).

    None becomes "", booleans "true"/"false", integral floats lose their
    fractional part so 100 and 100.0 compare equal.
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
