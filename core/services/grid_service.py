"""
Grid service.

Owns the engine state for one grid instance and orchestrates the pure
domain functions (column model, pipeline, selection, edit session). It is
Qt-free; GridViewModel wraps it and turns state changes into signals.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Dict, Any, Optional, Tuple

from core.domain.grid import edit_session
from core.domain.grid.cell_types import ValidationResult, get_cell_strategy
from core.domain.grid.columns import ColumnExtender, display_columns, filter_columns, find_column, normalize
from core.domain.grid.edit_session import CommitOutcome, MutationIntent
from core.domain.grid.models import (
    ColumnConfigRecord,
    ColumnDefinition,
    EditSession,
    FormColumn,
    PaginationState,
    SortState,
    is_empty,
)
from core.domain.grid.pipeline import CollateKey, PipelineResult, apply, unique_values
from core.domain.grid.selection import SelectionModel


DEFAULT_FORM_WIDTH = 500


@dataclass(frozen=True)
class GridState:
    """Everything that changes what the grid renders, apart from the rows."""
    columns: Tuple[ColumnDefinition, ...] = ()
    filters: Dict[str, Any] = field(default_factory=dict)
    search_term: str = ''
    sort: SortState = SortState()
    pagination: Optional[PaginationState] = None
    selection: SelectionModel = SelectionModel()
    edit: Optional[EditSession] = None
    record_form_mode: bool = False
    form_columns: Tuple[FormColumn, ...] = ()
    form_width: int = DEFAULT_FORM_WIDTH
    page_title: str = ''
    show_row_number: bool = False
    show_checkbox: bool = False

    @property
    def form_active(self) -> bool:
        """Double-click and add-row open the record form instead of editing inline."""
        return self.record_form_mode and bool(self.form_columns)


class GridService:
    """
    Engine state plus the host's row collection.

    Each command replaces the frozen GridState; result() recomputes the
    pipeline lazily and caches it until rows or state change.
    """

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None,
                 columns: Optional[List[Any]] = None,
                 extender: Optional[ColumnExtender] = None,
                 collate: Optional[CollateKey] = None):
        self._rows: List[Dict[str, Any]] = list(rows or [])
        self._state = GridState(columns=tuple(normalize(columns, extender)))
        self._raw_columns = list(columns or [])
        self._extender = extender
        self._collate = collate
        self._result: Optional[PipelineResult] = None

    @property
    def state(self) -> GridState:
        return self._state

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return self._rows

    @property
    def columns(self) -> List[ColumnDefinition]:
        return list(self._state.columns)

    @property
    def display_columns(self) -> List[ColumnDefinition]:
        return display_columns(self._state.columns)

    @property
    def filter_columns(self) -> List[ColumnDefinition]:
        return filter_columns(self._state.columns)

    def _set_state(self, **changes) -> GridState:
        self._state = replace(self._state, **changes)
        self._result = None
        return self._state

    # -------------------------------------------------------------------------
    # Data and columns
    # -------------------------------------------------------------------------

    def set_rows(self, rows: List[Dict[str, Any]]) -> None:
        """Replace the row collection. The selection is kept as-is."""
        self._rows = list(rows or [])
        self._result = None

    def set_columns(self, raw_columns: List[Any], extender: Optional[ColumnExtender] = None) -> GridState:
        if extender is not None:
            self._extender = extender
        self._raw_columns = list(raw_columns or [])
        columns = tuple(normalize(self._raw_columns, self._extender))
        # Filters on columns that stopped being filterable no longer apply
        filterable = {c.field for c in filter_columns(columns)}
        filters = {k: v for k, v in self._state.filters.items() if k in filterable}
        return self._set_state(columns=columns, filters=filters)

    def apply_config_record(self, record: ColumnConfigRecord) -> GridState:
        """Merge a loaded col-def record; absent attributes keep their current value."""
        if record.columns:
            self.set_columns(record.columns)
        changes = {}
        if record.form_columns:
            changes['form_columns'] = tuple(FormColumn.from_dict(fc) if isinstance(fc, dict) else fc
                                            for fc in record.form_columns)
        if record.form_width:
            changes['form_width'] = record.form_width
        if record.page_title:
            changes['page_title'] = record.page_title
        if record.show_row_number is not None:
            changes['show_row_number'] = record.show_row_number
        if record.show_checkbox is not None:
            changes['show_checkbox'] = record.show_checkbox
        return self._set_state(**changes)

    def set_form_config(self, form_columns: Optional[List[Any]] = None, form_width: Optional[int] = None,
                        record_form_mode: Optional[bool] = None) -> GridState:
        changes = {}
        if form_columns is not None:
            changes['form_columns'] = tuple(FormColumn.from_dict(fc) if isinstance(fc, dict) else fc
                                            for fc in form_columns)
        if form_width:
            changes['form_width'] = int(form_width)
        if record_form_mode is not None:
            changes['record_form_mode'] = bool(record_form_mode)
        return self._set_state(**changes)

    def set_display_options(self, show_row_number: Optional[bool] = None,
                            show_checkbox: Optional[bool] = None) -> GridState:
        changes = {}
        if show_row_number is not None:
            changes['show_row_number'] = bool(show_row_number)
        if show_checkbox is not None:
            changes['show_checkbox'] = bool(show_checkbox)
        return self._set_state(**changes)

    # -------------------------------------------------------------------------
    # Filter / search / sort / paging
    # -------------------------------------------------------------------------

    def set_filter(self, field_name: str, value: Any) -> GridState:
        filters = dict(self._state.filters)
        if is_empty(value):
            filters.pop(field_name, None)
        else:
            filters[field_name] = value
        return self._set_state(filters=filters)

    def clear_filters(self) -> GridState:
        """Reset every toolbar filter and the search box."""
        return self._set_state(filters={}, search_term='')

    def set_search(self, term: str) -> GridState:
        return self._set_state(search_term=term or '')

    def request_sort(self, field_name: str) -> bool:
        """
        Header click. Returns False (no change) for non-sortable columns.
        """
        column = find_column(self._state.columns, field_name)
        if column is None or not column.sortable:
            return False
        self._set_state(sort=self._state.sort.toggled(field_name))
        return True

    def set_pagination(self, pagination: Optional[PaginationState]) -> GridState:
        return self._set_state(pagination=pagination)

    def go_to_page(self, page: int) -> Optional[int]:
        """Clamp page into 1..total_pages and apply it. None when paging is off."""
        pagination = self._state.pagination
        if pagination is None:
            return None
        last = self.result().total_pages
        page = max(1, min(int(page), last))
        if page != pagination.page:
            self._set_state(pagination=replace(pagination, page=page))
        return page

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def result(self) -> PipelineResult:
        if self._result is None:
            s = self._state
            self._result = apply(self._rows, s.columns, s.filters, s.search_term,
                                 s.sort, s.pagination, self._collate)
        return self._result

    def filter_choices(self, field_name: str) -> List[Any]:
        """Distinct values of a filter column over all rows."""
        return unique_values(self._rows, field_name)

    def find_row(self, row_id: Any) -> Optional[Dict[str, Any]]:
        for row in self._rows:
            if row.get('id') == row_id:
                return row
        return None

    def display_value(self, row: Dict[str, Any], column: ColumnDefinition) -> str:
        value = column.value_of(row)
        if column.value_formatter is not None:
            return str(column.value_formatter(value, row))
        if column.value_options:
            for option_value, label in column.option_pairs():
                if option_value == value:
                    return str(label)
        return get_cell_strategy(column.type).format_display(value)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def toggle_row(self, row_id: Any, checked: bool) -> SelectionModel:
        self._set_state(selection=self._state.selection.toggle(row_id, checked))
        return self._state.selection

    def select_all_visible(self, checked: bool) -> SelectionModel:
        window = self.result().window
        self._set_state(selection=self._state.selection.select_all_visible(window, checked))
        return self._state.selection

    def clear_selection(self) -> SelectionModel:
        self._set_state(selection=self._state.selection.clear())
        return self._state.selection

    def selected_rows(self) -> List[Dict[str, Any]]:
        return self._state.selection.resolve_rows(self._rows)

    # -------------------------------------------------------------------------
    # Inline editing
    # -------------------------------------------------------------------------

    def begin_edit(self, row_id: Any, field_name: str) -> Optional[EditSession]:
        """Open an inline edit; any previous uncommitted buffer is discarded."""
        row = self.find_row(row_id)
        column = find_column(self._state.columns, field_name)
        if row is None or column is None:
            return None
        session = edit_session.begin_edit(row, column, self._state.form_active)
        if session is not None:
            self._set_state(edit=session)
        return session

    def update_edit_buffer(self, text: str) -> Optional[EditSession]:
        session = edit_session.update_buffer(self._state.edit, text)
        self._state = replace(self._state, edit=session)
        return session

    def cancel_edit(self) -> None:
        self._set_state(edit=edit_session.cancel_edit(self._state.edit))

    def validate_edit(self, today: Optional[date] = None) -> ValidationResult:
        """Check the current buffer without committing; no session counts as valid."""
        session = self._state.edit
        if session is None:
            return ValidationResult(True, '')
        column = find_column(self._state.columns, session.field)
        strategy = get_cell_strategy(column.type if column is not None else None)
        return strategy.validate(session.buffer, today=today)

    def commit_edit(self, mutate: Optional[MutationIntent], override: Any = None,
                    today: Optional[date] = None) -> CommitOutcome:
        """
        Validate and write the current buffer. The session ends on every
        outcome except INVALID, including when mutate raises.
        """
        outcome: Optional[CommitOutcome] = None
        try:
            outcome = edit_session.commit_edit(self._state.edit, self._rows, self._state.columns,
                                               mutate, override, today)
            return outcome
        finally:
            keep = outcome.session if outcome is not None and not outcome.is_valid else None
            self._set_state(edit=keep)
