"""
Column configuration store: persisted grid config plus DB schema reconciliation.

Wraps a ColumnConfigPort. Remote calls never raise for backend failures;
they return RemoteResult values the caller inspects:

    store = ColumnConfigStore(ColDefHttpAdapter())
    record = store.load('orders', 'tb_orders', defaults)
    status = store.check_columns('tb_orders', ['id', 'title', 'memo'])
    if status.ok:
        status.data.columns    # {'title': True, 'memo': False}
        status.data.rejected   # ['id']

The reconciliation workflows edit the configuration dialog's draft and take a
confirm(message) -> bool provider for user confirmation. They return a
WorkflowResult with the next draft and DB status; nothing is mutated in place.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Callable, Iterable

from core.domain.grid import column_draft
from core.domain.grid.columns import DEFAULT_COLUMN_TEMPLATES, is_protected
from core.domain.grid.models import ColumnConfigRecord, ColumnDefinition, ColumnType, FormColumn
from core.ports.column_config_port import ColumnConfigPort, ColumnConfigError


Confirm = Callable[[str], bool]


@dataclass(frozen=True)
class RemoteResult:
    """Outcome of one remote operation."""
    ok: bool
    data: Any = None
    error: str = ''

    @classmethod
    def success(cls, data: Any = None) -> 'RemoteResult':
        return cls(True, data)

    @classmethod
    def failure(cls, error: str) -> 'RemoteResult':
        return cls(False, None, error)


@dataclass(frozen=True)
class DbColumnStatus:
    """check_columns payload: which fields exist, which were refused locally."""
    columns: Dict[str, bool] = field(default_factory=dict)
    rejected: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AddColumnsResult(RemoteResult):
    """Partial success is normal: some columns may be added, others fail."""
    added: List[str] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class WorkflowResult:
    """Next dialog state after a reconciliation workflow."""
    draft: List[Dict[str, Any]]
    db_status: Dict[str, bool]
    message: str = ''
    changed: bool = False


class ColumnConfigStore:
    """
    Service for the col-def backend.

    Stateless apart from the port; the configuration dialog's state is
    passed in and returned by each call.
    """

    def __init__(self, port: ColumnConfigPort):
        self._port = port

    # ------------------------------------------------------------------
    # Persisted configuration
    # ------------------------------------------------------------------

    def load(self, page_name: str, table_name: str,
             defaults: Optional[ColumnConfigRecord] = None) -> ColumnConfigRecord:
        """
        Fetch the saved configuration, falling back field by field to defaults.

        Never fails: a missing page/table name or any backend error returns
        the defaults unchanged.
        """
        defaults = defaults or ColumnConfigRecord()
        if not page_name or not table_name:
            return defaults

        try:
            response = self._port.load_config(page_name, table_name)
        except Exception as e:
            print(f"[col-def] Failed to load column config for {page_name}/{table_name}: {e}")
            return defaults

        record = ColumnConfigRecord.from_response(response)
        return ColumnConfigRecord(
            page_title=record.page_title or defaults.page_title,
            columns=record.columns or defaults.columns,
            form_columns=record.form_columns or defaults.form_columns,
            form_width=record.form_width or defaults.form_width,
            show_row_number=(record.show_row_number if record.show_row_number is not None
                             else defaults.show_row_number),
            show_checkbox=(record.show_checkbox if record.show_checkbox is not None
                           else defaults.show_checkbox),
        )

    def save(self, page_name: str, page_title: str, columns: List[Dict[str, Any]],
             form_columns: Optional[List[Any]] = None, form_width: Optional[int] = None) -> RemoteResult:
        """Persist the dialog's configuration; an empty form column list is saved as null."""
        if not page_name:
            # Nothing to persist against; the host still gets the new columns.
            return RemoteResult.success()

        form_payload = None
        if form_columns:
            form_payload = [fc.to_dict() if isinstance(fc, FormColumn) else dict(fc) for fc in form_columns]

        payload = {
            'page_name': page_name,
            'page_title': page_title or '',
            'columns': list(columns),
            'form_columns': form_payload,
            'form_width': form_width,
        }
        try:
            response = self._port.save_config(payload)
        except ColumnConfigError as e:
            print(f"[col-def] Failed to save column config for {page_name}: {e}")
            return RemoteResult.failure(str(e))

        if isinstance(response, dict) and response.get('success') is False:
            return RemoteResult.failure(response.get('message') or 'Save rejected by server')
        return RemoteResult.success(response)

    # ------------------------------------------------------------------
    # Database schema
    # ------------------------------------------------------------------

    def check_columns(self, table_name: str, fields: Iterable[str]) -> RemoteResult:
        """
        Which fields exist in the live table.

        Protected fields are never sent; they are listed in data.rejected.
        A request made only of protected fields makes no network call.
        """
        fields = list(fields)
        rejected = [f for f in fields if is_protected(f)]
        allowed = [f for f in fields if not is_protected(f)]

        if not table_name:
            return RemoteResult.failure('No table name is configured.')
        if not allowed:
            return RemoteResult.success(DbColumnStatus({}, rejected))

        try:
            columns = self._port.check_columns(table_name, allowed)
        except ColumnConfigError as e:
            print(f"[col-def] Column check failed for {table_name}: {e}")
            return RemoteResult.failure(str(e))
        return RemoteResult.success(DbColumnStatus(dict(columns), rejected))

    def add_columns(self, table_name: str, specs: List[Dict[str, Any]]) -> AddColumnsResult:
        if not table_name:
            return AddColumnsResult(False, error='No table name is configured.')
        try:
            response = self._port.add_columns(table_name, specs)
        except ColumnConfigError as e:
            print(f"[col-def] Adding columns to {table_name} failed: {e}")
            return AddColumnsResult(False, error=str(e))

        added = list(response.get('addedColumns') or [])
        failed = list(response.get('failedColumns') or [])
        return AddColumnsResult(True, data=response, added=added, failed=failed)

    def delete_column(self, table_name: str, field_name: str) -> RemoteResult:
        """Drop a column and its data from the table. Protected fields are refused locally."""
        if is_protected(field_name):
            return RemoteResult.failure(f"Column '{field_name}' cannot be deleted.")
        if not table_name:
            return RemoteResult.failure('No table name is configured.')

        try:
            response = self._port.delete_column(table_name, field_name)
        except ColumnConfigError as e:
            print(f"[col-def] Deleting {table_name}.{field_name} failed: {e}")
            return RemoteResult.failure(str(e))

        if not response.get('success'):
            return RemoteResult.failure(response.get('message') or f"Could not delete column '{field_name}'.")
        return RemoteResult.success(response)

    def sync_from_db(self, table_name: str, local_fields: Iterable[str]) -> RemoteResult:
        """Columns present in the live schema but missing from local_fields."""
        if not table_name:
            return RemoteResult.failure('No table name is configured.')
        try:
            schema = self._port.get_all_columns(table_name)
        except ColumnConfigError as e:
            print(f"[col-def] Schema read for {table_name} failed: {e}")
            return RemoteResult.failure(str(e))

        if not schema:
            return RemoteResult.failure('Could not read DB column information.')

        local = set(local_fields)
        missing = []
        for db_col in schema:
            name = db_col.get('field')
            if not name or name in local:
                continue
            local.add(name)
            missing.append(ColumnDefinition(
                field=name,
                header_name=db_col.get('headerName') or name,
                type=ColumnType.parse(db_col.get('type') or 'string'),
                editable=True,
            ))
        return RemoteResult.success(missing)

    # ------------------------------------------------------------------
    # Reconciliation workflows (configuration dialog)
    # ------------------------------------------------------------------

    def remove_column(self, draft: List[Dict[str, Any]], field_name: str, db_status: Dict[str, bool],
                      table_name: str, confirm: Confirm) -> WorkflowResult:
        """
        Remove a column from the draft.

        A column confirmed present in the DB is dropped there too, after a
        destructive confirmation; the draft changes only once the remote
        delete succeeds. Columns not known to the DB are removed locally
        straight away.
        """
        index = column_draft.index_of(draft, field_name)
        if index < 0:
            return WorkflowResult(draft, db_status, f"Column '{field_name}' not found.")
        if is_protected(field_name):
            return WorkflowResult(draft, db_status, f"Column '{field_name}' cannot be deleted.")

        header = draft[index].get('headerName') or field_name
        if db_status.get(field_name) is True and table_name:
            if not confirm(f'Delete column "{header}"?\n\n'
                           f'The column and its data will be permanently removed from the database.'):
                return WorkflowResult(draft, db_status)
            result = self.delete_column(table_name, field_name)
            if not result.ok:
                return WorkflowResult(draft, db_status, f"Failed to delete DB column: {result.error}")
            db_status = {k: v for k, v in db_status.items() if k != field_name}

        return WorkflowResult(column_draft.remove_at(draft, index), db_status, changed=True)

    def delete_from_db(self, draft: List[Dict[str, Any]], field_name: str, db_status: Dict[str, bool],
                       table_name: str, confirm: Confirm) -> WorkflowResult:
        """Explicit, irreversible DB drop; only for columns the DB reported as present."""
        index = column_draft.index_of(draft, field_name)
        if index < 0:
            return WorkflowResult(draft, db_status, f"Column '{field_name}' not found.")
        if is_protected(field_name):
            return WorkflowResult(draft, db_status, f"Column '{field_name}' cannot be deleted.")
        if db_status.get(field_name) is not True:
            return WorkflowResult(draft, db_status, 'This column does not exist in the database.')

        header = draft[index].get('headerName') or field_name
        if not confirm(f'Permanently delete column "{header}" from the database?\n\n'
                       f'Warning: the column and its data are removed from the real table.\n'
                       f'This cannot be undone.'):
            return WorkflowResult(draft, db_status)

        result = self.delete_column(table_name, field_name)
        if not result.ok:
            return WorkflowResult(draft, db_status, f"Failed to delete column: {result.error}")

        db_status = {k: v for k, v in db_status.items() if k != field_name}
        return WorkflowResult(column_draft.remove_at(draft, index), db_status,
                              f"Column '{field_name}' was deleted from the database.", changed=True)

    def add_column(self, draft: List[Dict[str, Any]], field_name: str, type_choice: Any,
                   table_name: str, confirm: Confirm,
                   db_status: Optional[Dict[str, bool]] = None) -> WorkflowResult:
        """
        Append a hand-typed column, optionally creating it in the DB as well.

        type_choice is a menu number ('1'..'5') or a type name; anything else
        means string. The local column is added even when the DB add fails.
        """
        db_status = dict(db_status or {})
        name = (field_name or '').strip()
        if not name:
            return WorkflowResult(draft, db_status)
        if column_draft.index_of(draft, name) >= 0:
            return WorkflowResult(draft, db_status, 'A column with that name already exists.')

        choice = str(type_choice or '').strip()
        column_type = column_draft.ADD_COLUMN_TYPE_CHOICES.get(choice)
        if column_type is None:
            column_type = choice if choice in column_draft.ADD_COLUMN_TYPE_CHOICES.values() else 'string'

        message = ''
        if table_name and confirm(f'Also add column "{name}" to the database table?'):
            result = self.add_columns(table_name, [{'field': name, 'type': column_type}])
            if not result.ok:
                message = f"Failed to add DB column: {result.error}"
            elif result.added:
                db_status[name] = True
                message = f"Added DB column: {name}"
            elif result.failed:
                message = f"Failed to add DB column: {result.failed[0].get('error')}"

        new_col = column_draft.new_draft_column(name, column_type)
        return WorkflowResult(list(draft) + [new_col], db_status, message, changed=True)

    def merge_db_columns(self, draft: List[Dict[str, Any]], db_status: Dict[str, bool],
                         table_name: str, confirm: Confirm) -> WorkflowResult:
        """Offer DB columns missing from the draft and append the confirmed set."""
        if not table_name:
            return WorkflowResult(draft, db_status, 'No table name is configured.')

        result = self.sync_from_db(table_name, [c.get('field') for c in draft])
        if not result.ok:
            return WorkflowResult(draft, db_status, f"DB sync failed: {result.error}")

        missing = result.data
        if not missing:
            return WorkflowResult(draft, db_status, 'No new DB columns to add.')

        names = ', '.join(c.field for c in missing)
        if not confirm(f"Add the following DB columns?\n\n{names}"):
            return WorkflowResult(draft, db_status)

        db_status = dict(db_status)
        for col in missing:
            db_status[col.field] = True
        merged = list(draft) + column_draft.draft_from_columns(missing)
        return WorkflowResult(merged, db_status, f"{len(missing)} column(s) added.", changed=True)

    def add_default_columns(self, draft: List[Dict[str, Any]], db_status: Dict[str, bool],
                            table_name: str, confirm: Confirm) -> WorkflowResult:
        """
        Add the standard template columns missing from the draft.

        Templates the DB reports as absent are offered for creation in the
        table as well. The message summarizes what happened.
        """
        current_status = dict(db_status)
        if table_name:
            # Protected templates are never sent; keep whatever status was known for them.
            check = self.check_columns(table_name, list(DEFAULT_COLUMN_TEMPLATES))
            if check.ok:
                current_status.update(check.data.columns)

        to_add, existing, not_in_db = [], [], []
        for template in DEFAULT_COLUMN_TEMPLATES.values():
            name = template['field']
            if current_status.get(name) is False:
                not_in_db.append(template)
            if column_draft.index_of(draft, name) >= 0:
                existing.append(name)
            else:
                to_add.append(column_draft.new_draft_column(
                    name, template['type'], template['headerName'],
                    editable=template['editable'], width=template['width'],
                ))

        if not to_add and not existing and not not_in_db:
            return WorkflowResult(draft, db_status, 'All default columns already exist.')

        added_result = None
        next_status = dict(current_status)
        if not_in_db and table_name:
            names = ', '.join(t['field'] for t in not_in_db)
            if confirm(f"These columns are missing from the DB table:\n{names}\n\n"
                       f"Add them to the real table?"):
                added_result = self.add_columns(
                    table_name, [{'field': t['field'], 'type': t['type']} for t in not_in_db])
                for name in added_result.added:
                    next_status[name] = True

        parts = []
        if added_result is not None and not added_result.ok:
            parts.append(f"Failed to add DB columns: {added_result.error}")
        if added_result is not None and added_result.added:
            parts.append(f"Added DB columns: {', '.join(added_result.added)}")
        if added_result is not None and added_result.failed:
            parts.append(f"Failed DB columns: {', '.join(str(f.get('name')) for f in added_result.failed)}")
        if existing:
            parts.append(f"Already in the list: {', '.join(existing)}")
        if to_add:
            parts.append(f"Newly added: {', '.join(c['field'] for c in to_add)}")

        return WorkflowResult(list(draft) + to_add, next_status, '\n\n'.join(parts), changed=bool(to_add))
