"""
Column configuration view model.

QObject behind the column configuration dialog: loads the saved col-def
record once per mount, keeps the dialog's draft (grid columns, form
columns, form width, page title), runs the DB reconciliation workflows,
and saves. Remote calls run on RemoteCallWorker threads, or inline when
background=False.

No direct widget manipulation; the dialog connects to the signals.
"""

from typing import List, Dict, Any, Optional, Callable

from PyQt6.QtCore import QObject, pyqtSignal

from core import config
from core.domain.grid import column_draft
from core.domain.grid.models import ColumnConfigRecord, FormColumn
from core.services.column_config_service import ColumnConfigStore, RemoteResult, WorkflowResult


class ColumnConfigViewModel(QObject):
    """
    ViewModel for the column configuration dialog.

    Signals:
        config_loaded(object)      ColumnConfigRecord to apply to the grid
        save_finished(bool, str)   (ok, error message)
        db_status_changed(dict)    {field: exists_in_db}
        draft_changed()            draft or form columns edited
        message(str)               text for an information box
        busy_changed(bool)         a remote call started/finished
    """

    config_loaded = pyqtSignal(object)
    save_finished = pyqtSignal(bool, str)
    db_status_changed = pyqtSignal(dict)
    draft_changed = pyqtSignal()
    message = pyqtSignal(str)
    busy_changed = pyqtSignal(bool)

    def __init__(self, store: ColumnConfigStore, page_name: str = '', table_name: str = '',
                 defaults: Optional[ColumnConfigRecord] = None, background: bool = True,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._store = store
        self._page_name = page_name
        self._table_name = table_name
        self._defaults = defaults or ColumnConfigRecord()
        self._background = background

        self._loaded = False
        self._loading = False
        self._busy = False
        self._confirm_provider: Optional[Callable[[str], bool]] = None

        # Worker lifecycle: prevent GC
        self._workers = []

        # Dialog state
        self._draft: List[Dict[str, Any]] = []
        self._form_columns: List[FormColumn] = []
        self._form_width: int = config.get_setting('default_form_width') or 500
        self._page_title: str = ''
        self._db_status: Dict[str, bool] = {}

    # ------------------------------------------------------------------
    # Providers / properties
    # ------------------------------------------------------------------

    def set_confirm_provider(self, provider: Optional[Callable[[str], bool]]):
        """Yes/no question shown before destructive or DB-changing steps."""
        self._confirm_provider = provider

    def _confirm(self, text: str) -> bool:
        if self._confirm_provider is None:
            return False
        return bool(self._confirm_provider(text))

    @property
    def store(self) -> ColumnConfigStore:
        return self._store

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def draft(self) -> List[Dict[str, Any]]:
        return list(self._draft)

    @property
    def form_columns(self) -> List[FormColumn]:
        return list(self._form_columns)

    @property
    def form_width(self) -> int:
        return self._form_width

    @property
    def page_title(self) -> str:
        return self._page_title

    @property
    def db_status(self) -> Dict[str, bool]:
        return dict(self._db_status)

    # ------------------------------------------------------------------
    # Remote call plumbing
    # ------------------------------------------------------------------

    def _set_busy(self, busy: bool):
        if busy != self._busy:
            self._busy = busy
            self.busy_changed.emit(busy)

    def _run(self, call, on_done: Callable[[Any], None], *args, label: str = ''):
        self._set_busy(True)
        if not self._background:
            try:
                result = call(*args)
            finally:
                self._set_busy(False)
            on_done(result)
            return

        from core.remote_call_worker import RemoteCallWorker

        worker = RemoteCallWorker(call, *args, label=label)
        self._workers.append(worker)

        def finished(result):
            self._release(worker)
            on_done(result)

        def failed(msg):
            self._release(worker)
            self.message.emit(msg.split('\n\n')[0])

        worker.finished.connect(finished)
        worker.error.connect(failed)
        worker.start()

    def _release(self, worker):
        if worker in self._workers:
            self._workers.remove(worker)
        if not self._workers:
            self._set_busy(False)

    # ------------------------------------------------------------------
    # Load / close
    # ------------------------------------------------------------------

    def load(self):
        """Fetch the saved configuration; does nothing once loaded for this mount."""
        if self._loaded or self._loading:
            return
        self._loading = True
        self._run(self._store.load, self._on_loaded,
                  self._page_name, self._table_name, self._defaults, label='load')

    def _on_loaded(self, record: ColumnConfigRecord):
        self._loading = False
        self._loaded = True
        self._draft = column_draft.draft_from_columns(record.columns or [])
        if record.form_columns:
            self._form_columns = [fc if isinstance(fc, FormColumn) else FormColumn.from_dict(fc)
                                  for fc in record.form_columns]
        else:
            self._form_columns = column_draft.auto_form_columns(self._draft)
        if record.form_width:
            self._form_width = record.form_width
        self._page_title = record.page_title or ''
        self.draft_changed.emit()
        self.config_loaded.emit(record)

    def close(self):
        """Dialog closed: the next load() fetches the saved record again."""
        self._loaded = False

    # ------------------------------------------------------------------
    # DB status
    # ------------------------------------------------------------------

    def check_db_columns(self):
        """Ask the backend which draft columns exist in the table (dialog open)."""
        if not self._table_name or not self._draft:
            return
        fields = [c['field'] for c in self._draft]
        self._run(self._store.check_columns, self._on_db_checked,
                  self._table_name, fields, label='check_columns')

    def _on_db_checked(self, result: RemoteResult):
        if not result.ok:
            print(f"[col-def] DB column check failed: {result.error}")
            return
        self._db_status = dict(result.data.columns)
        self.db_status_changed.emit(dict(self._db_status))

    # ------------------------------------------------------------------
    # Draft editing
    # ------------------------------------------------------------------

    def _set_draft(self, draft: List[Dict[str, Any]]):
        self._draft = draft
        self.draft_changed.emit()

    def set_page_title(self, title: str):
        self._page_title = title or ''
        self.draft_changed.emit()

    def set_form_width(self, width: Any):
        try:
            self._form_width = int(width) or self._form_width
        except (TypeError, ValueError):
            return
        self.draft_changed.emit()

    def set_cell(self, index: int, key: str, value: Any):
        self._set_draft(column_draft.set_cell(self._draft, index, key, value))

    def toggle_all(self, key: str):
        self._set_draft(column_draft.toggle_all(self._draft, key))

    def move_up(self, index: int):
        self._set_draft(column_draft.move_up(self._draft, index))

    def move_down(self, index: int):
        self._set_draft(column_draft.move_down(self._draft, index))

    def move_to(self, from_index: int, to_index: int):
        self._set_draft(column_draft.move_to(self._draft, from_index, to_index))

    # --- Form columns ---

    def _set_form_columns(self, form_columns: List[FormColumn]):
        self._form_columns = form_columns
        self.draft_changed.emit()

    def toggle_form_field(self, field_name: str, checked: bool):
        self._set_form_columns(column_draft.toggle_form_field(self._draft, self._form_columns, field_name, checked))

    def add_form_field(self, field_name: str):
        self._set_form_columns(column_draft.add_form_field(self._draft, self._form_columns, field_name))

    def remove_form_field(self, index: int):
        self._set_form_columns(column_draft.remove_form_field(self._form_columns, index))

    def move_form_up(self, index: int):
        self._set_form_columns(column_draft.move_form_up(self._form_columns, index))

    def move_form_down(self, index: int):
        self._set_form_columns(column_draft.move_form_down(self._form_columns, index))

    def set_form_cell(self, index: int, key: str, value: Any):
        self._set_form_columns(column_draft.set_form_cell(self._form_columns, index, key, value))

    def auto_arrange_rows(self):
        self._set_form_columns(column_draft.auto_arrange_rows(self._form_columns))

    def reset_form_columns(self):
        """Rebuild the form from the editable grid columns."""
        self._set_form_columns(column_draft.auto_form_columns(self._draft))

    def generate_form_code(self) -> str:
        return column_draft.generate_form_code(self._form_columns)

    # ------------------------------------------------------------------
    # DB reconciliation (runs on the UI thread: each step may ask the user)
    # ------------------------------------------------------------------

    def _apply_workflow(self, result: WorkflowResult) -> WorkflowResult:
        status_changed = result.db_status != self._db_status
        self._db_status = dict(result.db_status)
        if result.changed:
            self._set_draft(result.draft)
        if status_changed:
            self.db_status_changed.emit(dict(self._db_status))
        if result.message:
            self.message.emit(result.message)
        return result

    def _workflow(self, call, *args) -> WorkflowResult:
        self._set_busy(True)
        try:
            result = call(*args)
        finally:
            self._set_busy(False)
        return self._apply_workflow(result)

    def remove_column(self, field_name: str) -> WorkflowResult:
        return self._workflow(self._store.remove_column, self._draft, field_name,
                              self._db_status, self._table_name, self._confirm)

    def delete_from_db(self, field_name: str) -> WorkflowResult:
        return self._workflow(self._store.delete_from_db, self._draft, field_name,
                              self._db_status, self._table_name, self._confirm)

    def add_column(self, field_name: str, type_choice: Any = '1') -> WorkflowResult:
        return self._workflow(self._store.add_column, self._draft, field_name, type_choice,
                              self._table_name, self._confirm, self._db_status)

    def merge_db_columns(self) -> WorkflowResult:
        return self._workflow(self._store.merge_db_columns, self._draft,
                              self._db_status, self._table_name, self._confirm)

    def add_default_columns(self) -> WorkflowResult:
        return self._workflow(self._store.add_default_columns, self._draft,
                              self._db_status, self._table_name, self._confirm)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self):
        """
        Persist the draft. On success the saved record is emitted through
        config_loaded for the grid; on failure the dialog stays open.
        """
        columns = column_draft.columns_for_save(self._draft)
        form_columns = list(self._form_columns) or None
        record = ColumnConfigRecord(
            page_title=self._page_title,
            columns=columns,
            form_columns=[fc.to_dict() for fc in form_columns] if form_columns else None,
            form_width=self._form_width,
        )

        def on_saved(result: RemoteResult):
            if not result.ok:
                self.save_finished.emit(False, f"Failed to save column settings: {result.error}")
                return
            self._draft = columns
            self.save_finished.emit(True, '')
            self.config_loaded.emit(record)

        self._run(self._store.save, on_saved, self._page_name, self._page_title,
                  columns, form_columns, self._form_width, label='save')
