"""
Inline cell editing state machine.

States:
    Idle                         session is None
    Editing(row_id, field, buf)  an EditSession value

Transitions are functions returning the next session value:

    begin_edit      Idle/Editing -> Editing  (a previous buffer is dropped, never committed)
    update_buffer   Editing -> Editing
    commit_edit     Editing -> Idle          (validation failure keeps Editing)
    cancel_edit     Editing -> Idle          (no callback)

Only one session exists at a time, so two commits can never overlap.
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

from .cell_types import get_cell_strategy
from .columns import find_column
from .models import ColumnDefinition, EditSession, to_text


MutationIntent = Callable[[Any, str, Any], Any]


class CommitStatus(Enum):
    COMMITTED = "committed"    # mutation intent was invoked
    UNCHANGED = "unchanged"    # value equals the original, intent skipped
    INVALID = "invalid"        # validation failed, still editing
    IDLE = "idle"              # nothing was being edited


@dataclass(frozen=True)
class CommitOutcome:
    status: CommitStatus
    session: Optional[EditSession] = None    # next state (None = Idle)
    row_id: Any = None
    field: Optional[str] = None
    value: Any = None
    message: str = ''
    result: Any = None                       # whatever the mutation intent returned

    @property
    def is_valid(self) -> bool:
        return self.status != CommitStatus.INVALID


def begin_edit(row: Dict[str, Any], column: ColumnDefinition,
               record_form_mode: bool = False) -> Optional[EditSession]:
    """
    Open an edit on a cell.

    Returns None when the column is not editable or when record-form mode
    is on (double-click opens the form dialog instead). The buffer is the
    raw cell value pre-formatted for the column type.
    """
    if record_form_mode or not column.editable:
        return None
    strategy = get_cell_strategy(column.type)
    return EditSession(
        row_id=row.get('id'),
        field=column.field,
        buffer=strategy.seed_editor(row.get(column.field)),
    )


def update_buffer(session: Optional[EditSession], text: str) -> Optional[EditSession]:
    if session is None:
        return None
    return replace(session, buffer='' if text is None else str(text))


def cancel_edit(session: Optional[EditSession]) -> Optional[EditSession]:
    """Escape: drop the buffer unconditionally."""
    return None


def _find_row(rows: Iterable[Dict[str, Any]], row_id: Any) -> Optional[Dict[str, Any]]:
    for row in rows:
        if row.get('id') == row_id:
            return row
    return None


def commit_edit(session: Optional[EditSession], rows: Iterable[Dict[str, Any]],
                columns: Iterable[ColumnDefinition], mutate: Optional[MutationIntent],
                override: Any = None, today: Optional[date] = None) -> CommitOutcome:
    """
    Enter / focus loss: validate, then write through the mutation intent.

    Args:
        session: Current session (None = Idle, nothing happens)
        rows: Host row collection holding the original values
        columns: Normalized columns
        mutate: Host intent (row_id, storage_field, value); awaited inline
        override: Value to commit instead of the buffer (date picker, select)
        today: Reference date for MM-DD input

    Returns:
        CommitOutcome. INVALID keeps the session; every other status leaves
        the machine Idle. If mutate raises, the exception propagates; callers
        must still treat the session as closed.
    """
    if session is None:
        return CommitOutcome(CommitStatus.IDLE)

    column = find_column(columns, session.field)
    column_type = column.type if column is not None else None
    strategy = get_cell_strategy(column_type)
    raw = session.buffer if override is None else override

    check = strategy.validate(raw, today=today)
    if not check.valid:
        return CommitOutcome(CommitStatus.INVALID, session=session, row_id=session.row_id,
                             field=session.field, value=check.value, message=check.message)

    storage_field = column.storage_field if column is not None else session.field
    original_row = _find_row(rows, session.row_id)
    if original_row is None:
        # Row vanished from the collection; nothing to compare against or write.
        return CommitOutcome(CommitStatus.UNCHANGED, row_id=session.row_id,
                             field=storage_field, value=check.value)

    if to_text(original_row.get(storage_field)) == to_text(check.value):
        return CommitOutcome(CommitStatus.UNCHANGED, row_id=session.row_id,
                             field=storage_field, value=check.value)

    result = None
    if mutate is not None:
        result = mutate(session.row_id, storage_field, check.value)
    return CommitOutcome(CommitStatus.COMMITTED, row_id=session.row_id,
                         field=storage_field, value=check.value, result=result)
