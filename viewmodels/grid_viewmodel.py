"""
Grid view model: Qt integration for the grid service.

Provides QObject signals for UI binding and commands for user actions.
Sits between the table view (GridTableModel + delegates) and GridService;
host callbacks (cell change, form save/delete) are injected as providers.
"""

from typing import List, Dict, Any, Optional, Callable

from PyQt6.QtCore import QObject, pyqtSignal

from core import config
from core.domain.grid.cell_types import ValidationResult, is_url
from core.domain.grid.columns import find_column
from core.domain.grid.edit_session import CommitOutcome, CommitStatus
from core.domain.grid.models import ColumnConfigRecord, ColumnDefinition, PaginationState
from core.domain.grid.pipeline import row_number
from core.domain.grid.record_form import is_edit_mode, validate_record
from core.services.grid_service import GridService
from viewmodels.debounced_intent import DebouncedIntent


class GridViewModel(QObject):
    """
    ViewModel for one grid instance.

    Signals:
        window_changed()                     rows to render changed
        selection_changed(list, list)        (selected ids, selected rows)
        edit_started(object, str, str)       (row_id, field, editor text)
        edit_finished(object, str)           (row_id, field)
        validation_failed(str)               message for the user
        row_clicked(dict)                    single click, after the debounce window
        row_double_clicked(dict)             double click on a non-editable cell
        url_activated(str)                   click on a link cell
        form_requested(object)               open the record form (row dict or None)
        add_row_requested()                  add-row button outside form mode
        edit_requested(dict)                 context menu "edit"
        delete_requested(dict)               context menu "delete"
        page_change_requested(int)           footer navigation
        form_config_changed(list, int)       (form columns, form width)
        columns_changed()                    column definitions replaced
    """

    window_changed = pyqtSignal()
    selection_changed = pyqtSignal(list, list)
    edit_started = pyqtSignal(object, str, str)
    edit_finished = pyqtSignal(object, str)
    validation_failed = pyqtSignal(str)
    row_clicked = pyqtSignal(dict)
    row_double_clicked = pyqtSignal(dict)
    url_activated = pyqtSignal(str)
    form_requested = pyqtSignal(object)
    add_row_requested = pyqtSignal()
    edit_requested = pyqtSignal(dict)
    delete_requested = pyqtSignal(dict)
    page_change_requested = pyqtSignal(int)
    form_config_changed = pyqtSignal(list, int)
    columns_changed = pyqtSignal()

    def __init__(self, service: Optional[GridService] = None,
                 click_debounce_ms: Optional[int] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._service = service if service is not None else GridService()
        if click_debounce_ms is None:
            click_debounce_ms = config.get_click_debounce_ms()
        self._click_intent = DebouncedIntent(click_debounce_ms, self)

        # Host intents
        self._cell_change_handler: Optional[Callable[[Any, str, Any], Any]] = None
        self._form_save_handler: Optional[Callable[[Dict[str, Any], bool], Any]] = None
        self._form_delete_handler: Optional[Callable[[Dict[str, Any]], Any]] = None

    @property
    def service(self) -> GridService:
        """Access the underlying service."""
        return self._service

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def set_cell_change_handler(self, handler: Optional[Callable[[Any, str, Any], Any]]):
        """Inline edits are only offered while a handler is set."""
        self._cell_change_handler = handler

    def set_form_save_handler(self, handler: Optional[Callable[[Dict[str, Any], bool], Any]]):
        self._form_save_handler = handler

    def set_form_delete_handler(self, handler: Optional[Callable[[Dict[str, Any]], Any]]):
        self._form_delete_handler = handler

    @property
    def inline_editing_enabled(self) -> bool:
        return self._cell_change_handler is not None

    # ------------------------------------------------------------------
    # Data and configuration
    # ------------------------------------------------------------------

    def set_rows(self, rows: List[Dict[str, Any]]):
        self._service.set_rows(rows)
        self.window_changed.emit()

    def set_columns(self, raw_columns: List[Any], extender=None):
        self._service.set_columns(raw_columns, extender)
        self.columns_changed.emit()
        self.window_changed.emit()

    def apply_config_record(self, record: ColumnConfigRecord):
        """Merge a col-def record loaded by ColumnConfigViewModel."""
        self._service.apply_config_record(record)
        self.columns_changed.emit()
        self._emit_form_config()
        self.window_changed.emit()

    def set_form_config(self, form_columns: Optional[List[Any]] = None,
                        form_width: Optional[int] = None,
                        record_form_mode: Optional[bool] = None):
        before = (self.state.form_columns, self.state.form_width)
        self._service.set_form_config(form_columns, form_width, record_form_mode)
        if (self.state.form_columns, self.state.form_width) != before:
            self._emit_form_config()

    def set_display_options(self, show_row_number: Optional[bool] = None,
                            show_checkbox: Optional[bool] = None):
        self._service.set_display_options(show_row_number, show_checkbox)
        self.columns_changed.emit()

    def _emit_form_config(self):
        state = self.state
        self.form_config_changed.emit([fc.to_dict() for fc in state.form_columns], state.form_width)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self):
        return self._service.state

    @property
    def display_columns(self) -> List[ColumnDefinition]:
        return self._service.display_columns

    @property
    def filter_columns(self) -> List[ColumnDefinition]:
        return self._service.filter_columns

    @property
    def window(self) -> List[Dict[str, Any]]:
        return self._service.result().window

    @property
    def total(self) -> int:
        return self._service.result().total

    @property
    def total_pages(self) -> int:
        return self._service.result().total_pages

    def row_number(self, index: int) -> int:
        return row_number(self.state.pagination, index)

    def filter_choices(self, field_name: str) -> List[Any]:
        return self._service.filter_choices(field_name)

    def display_value(self, row: Dict[str, Any], column: ColumnDefinition) -> str:
        return self._service.display_value(row, column)

    def is_selected(self, row_id: Any) -> bool:
        return row_id in self.state.selection

    @property
    def all_visible_selected(self) -> bool:
        return self.state.selection.all_visible_selected(self.window)

    # ------------------------------------------------------------------
    # Filter / search / sort
    # ------------------------------------------------------------------

    def set_filter(self, field_name: str, value: Any):
        self._service.set_filter(field_name, value)
        self.window_changed.emit()

    def set_search(self, term: str):
        self._service.set_search(term)
        self.window_changed.emit()

    def clear_filters(self):
        self._service.clear_filters()
        self.window_changed.emit()

    def request_sort(self, field_name: str):
        if self._service.request_sort(field_name):
            self.window_changed.emit()

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def set_pagination(self, page: int = 1, page_size: Optional[int] = None,
                       total_count: Optional[int] = None):
        if page_size is None:
            page_size = config.get_setting('default_page_size')
        self._service.set_pagination(PaginationState(page, page_size, total_count))
        self.window_changed.emit()

    def disable_pagination(self):
        self._service.set_pagination(None)
        self.window_changed.emit()

    def request_page(self, page: int):
        """Footer navigation: clamp, show the page, and tell the host (server-side paging)."""
        page = self._service.go_to_page(page)
        if page is None:
            return
        self.page_change_requested.emit(page)
        self.window_changed.emit()

    def first_page(self):
        self.request_page(1)

    def previous_page(self):
        if self.state.pagination is not None:
            self.request_page(self.state.pagination.page - 1)

    def next_page(self):
        if self.state.pagination is not None:
            self.request_page(self.state.pagination.page + 1)

    def last_page(self):
        self.request_page(self.total_pages)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle_row(self, row_id: Any, checked: bool):
        self._service.toggle_row(row_id, checked)
        self._emit_selection()

    def select_all_visible(self, checked: bool):
        self._service.select_all_visible(checked)
        self._emit_selection()

    def clear_selection(self):
        self._service.clear_selection()
        self._emit_selection()

    def _emit_selection(self):
        self.selection_changed.emit(self.state.selection.ids, self._service.selected_rows())

    # ------------------------------------------------------------------
    # Clicks
    # ------------------------------------------------------------------

    def click_row(self, row: Dict[str, Any]):
        """Row click fires after the debounce window unless a double click follows."""
        self._click_intent.schedule(self.row_clicked.emit, row)

    def click_cell(self, row: Dict[str, Any], field_name: str):
        column = find_column(self.state.columns, field_name)
        value = column.value_of(row) if column is not None else row.get(field_name)
        if is_url(value):
            self._click_intent.cancel()
            self.url_activated.emit(value)
            return
        self.click_row(row)

    def double_click_cell(self, row: Dict[str, Any], field_name: str):
        """
        Record form (form mode), inline edit (editable column with a cell
        change handler), or row double click, in that order.
        """
        self._click_intent.cancel()

        if self.state.form_active:
            self.form_requested.emit(row)
            return

        column = find_column(self.state.columns, field_name)
        if column is not None and column.editable and self.inline_editing_enabled:
            self.begin_edit(row.get('id'), field_name)
            return

        self.row_double_clicked.emit(row)

    def context_action(self, action: str, row: Dict[str, Any]):
        if action == 'edit':
            self.edit_requested.emit(row)
        elif action == 'delete':
            self.delete_requested.emit(row)
        else:
            raise ValueError(f"Unknown context action: {action}")

    # ------------------------------------------------------------------
    # Inline editing
    # ------------------------------------------------------------------

    def begin_edit(self, row_id: Any, field_name: str) -> bool:
        previous = self.state.edit
        session = self._service.begin_edit(row_id, field_name)
        if session is None:
            return False
        if previous is not None and (previous.row_id, previous.field) != (row_id, field_name):
            self.edit_finished.emit(previous.row_id, previous.field)
        self.edit_started.emit(session.row_id, session.field, session.buffer)
        return True

    def update_edit_buffer(self, text: str):
        self._service.update_edit_buffer(text)

    def validate_edit(self) -> ValidationResult:
        """Check the buffer before an editor submits; emits validation_failed when it is rejected."""
        check = self._service.validate_edit()
        if not check.valid:
            self.validation_failed.emit(check.message)
        return check

    def commit_edit(self, override: Any = None) -> CommitOutcome:
        """
        Enter or focus loss. Invalid input keeps the editor open and emits
        validation_failed; any other outcome closes it. Exceptions from the
        cell change handler propagate after the editor is closed.
        """
        session = self.state.edit
        try:
            outcome = self._service.commit_edit(self._cell_change_handler, override)
        except Exception:
            self.edit_finished.emit(session.row_id, session.field)
            raise

        if outcome.status == CommitStatus.INVALID:
            self.validation_failed.emit(outcome.message)
            return outcome
        if outcome.status == CommitStatus.IDLE:
            return outcome

        self.edit_finished.emit(session.row_id, session.field)
        if outcome.status == CommitStatus.COMMITTED:
            self.window_changed.emit()
        return outcome

    def cancel_edit(self):
        session = self.state.edit
        if session is None:
            return
        self._service.cancel_edit()
        self.edit_finished.emit(session.row_id, session.field)

    # ------------------------------------------------------------------
    # Record form
    # ------------------------------------------------------------------

    def add_row(self):
        if self.state.form_active:
            self.form_requested.emit(None)
        else:
            self.add_row_requested.emit()

    def open_form(self, row: Optional[Dict[str, Any]] = None):
        self.form_requested.emit(row)

    def save_form(self, data: Dict[str, Any], original: Optional[Dict[str, Any]] = None) -> bool:
        """
        Validate the form and pass it to the save handler.

        Returns False (and emits validation_failed) when a required field is
        blank; the dialog stays open in that case.
        """
        is_edit = is_edit_mode(original if original is not None else data)
        ok, message = validate_record(self.state.form_columns, data, is_edit)
        if not ok:
            self.validation_failed.emit(message)
            return False
        if self._form_save_handler is not None:
            self._form_save_handler(data, is_edit)
        return True

    def delete_form_record(self, row: Dict[str, Any]):
        if self._form_delete_handler is not None:
            self._form_delete_handler(row)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def dispose(self):
        self._click_intent.dispose()
