"""
Grid Table Model - Model/View adapter for a GridViewModel.

Exposes the current page window as a QAbstractTableModel:
- Optional checkbox and row-number leading columns
- One column per display column (visible, not a filter)
- Display text from the cell-type strategy or the column's value_formatter
- setData commits inline edits and checkbox toggles through the viewmodel

Usage:
    from core.grid_table_model import GridTableModel

    model = GridTableModel(grid_viewmodel)
    table_view.setModel(model)
    table_view.horizontalHeader().sectionClicked.connect(model.header_clicked)
"""

from typing import List, Dict, Any, Optional, Tuple

from PyQt6.QtCore import QAbstractTableModel, QModelIndex, Qt, pyqtSignal
from PyQt6.QtGui import QBrush, QColor

from core.domain.grid.cell_types import get_cell_strategy, is_url
from core.domain.grid.models import ColumnDefinition


CHECKBOX_KEY = '__checkbox__'
ROW_NUMBER_KEY = '__row_number__'

_SORT_ASC = ' ▲'
_SORT_DESC = ' ▼'


class GridTableModel(QAbstractTableModel):
    """
    Table model for one grid.

    Holds no rows of its own; every call reads the viewmodel's current
    window, so a window_changed signal is all it takes to refresh.
    """

    # Signals
    commit_rejected = pyqtSignal(str)  # validation message for the view

    # Custom roles
    RowDataRole = Qt.ItemDataRole.UserRole + 1
    ColumnKeyRole = Qt.ItemDataRole.UserRole + 2
    ColumnDefRole = Qt.ItemDataRole.UserRole + 3

    _LINK_COLOR = QColor(80, 140, 220)

    def __init__(self, viewmodel, parent=None):
        super().__init__(parent)
        self._vm = viewmodel
        self._vm.window_changed.connect(self._reset)
        self._vm.columns_changed.connect(self._reset)
        self._vm.selection_changed.connect(self._on_selection_changed)
        self._vm.edit_finished.connect(self._on_edit_finished)

    @property
    def viewmodel(self):
        return self._vm

    def _reset(self):
        self.beginResetModel()
        self.endResetModel()

    # -------------------------------------------------------------------------
    # Column layout
    # -------------------------------------------------------------------------

    def _leading_keys(self) -> List[str]:
        state = self._vm.state
        keys = []
        if state.show_checkbox:
            keys.append(CHECKBOX_KEY)
        if state.show_row_number:
            keys.append(ROW_NUMBER_KEY)
        return keys

    def _column_at(self, col_index: int) -> Tuple[Optional[str], Optional[ColumnDefinition]]:
        """(key, ColumnDefinition or None for the leading columns)."""
        leading = self._leading_keys()
        if 0 <= col_index < len(leading):
            return leading[col_index], None
        columns = self._vm.display_columns
        data_index = col_index - len(leading)
        if 0 <= data_index < len(columns):
            column = columns[data_index]
            return column.field, column
        return None, None

    def get_column_index(self, key: str) -> int:
        """Visual column index for a field, or -1 if not displayed."""
        for i in range(self.columnCount()):
            if self._column_at(i)[0] == key:
                return i
        return -1

    def get_row_data(self, row: int) -> Optional[Dict[str, Any]]:
        window = self._vm.window
        if 0 <= row < len(window):
            return window[row]
        return None

    # -------------------------------------------------------------------------
    # Required QAbstractTableModel methods
    # -------------------------------------------------------------------------

    def rowCount(self, parent=QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._vm.window)

    def columnCount(self, parent=QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._leading_keys()) + len(self._vm.display_columns)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        row_data = self.get_row_data(index.row())
        if row_data is None:
            return None
        key, column = self._column_at(index.column())
        if key is None:
            return None

        if key == CHECKBOX_KEY:
            if role == Qt.ItemDataRole.CheckStateRole:
                selected = self._vm.is_selected(row_data.get('id'))
                return Qt.CheckState.Checked if selected else Qt.CheckState.Unchecked
            if role == self.RowDataRole:
                return row_data
            return None

        if key == ROW_NUMBER_KEY:
            if role == Qt.ItemDataRole.DisplayRole:
                return str(self._vm.row_number(index.row()))
            if role == Qt.ItemDataRole.TextAlignmentRole:
                return Qt.AlignmentFlag.AlignCenter
            return None

        if role == Qt.ItemDataRole.DisplayRole:
            return self._vm.display_value(row_data, column)

        elif role == Qt.ItemDataRole.EditRole:
            session = self._vm.state.edit
            if session is not None and session.row_id == row_data.get('id') and session.field == key:
                return session.buffer
            # Raw stored value, not the value_getter output
            return get_cell_strategy(column.type).seed_editor(row_data.get(column.field))

        elif role == Qt.ItemDataRole.ToolTipRole:
            text = self._vm.display_value(row_data, column)
            if text and len(text) > 20:
                return text
            return None

        elif role == Qt.ItemDataRole.ForegroundRole:
            if is_url(column.value_of(row_data)):
                return QBrush(self._LINK_COLOR)
            return None

        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if column.type.is_numeric:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return None

        elif role == self.RowDataRole:
            return row_data

        elif role == self.ColumnKeyRole:
            return key

        elif role == self.ColumnDefRole:
            return column

        return None

    def setData(self, index: QModelIndex, value, role: int = Qt.ItemDataRole.EditRole) -> bool:
        if not index.isValid():
            return False
        row_data = self.get_row_data(index.row())
        key, column = self._column_at(index.column())
        if row_data is None or key is None:
            return False

        if key == CHECKBOX_KEY and role == Qt.ItemDataRole.CheckStateRole:
            checked = value in (Qt.CheckState.Checked, Qt.CheckState.Checked.value)
            self._vm.toggle_row(row_data.get('id'), checked)
            return True

        if column is None or role != Qt.ItemDataRole.EditRole:
            return False

        if not self._stage_edit(row_data, key, value):
            return False
        outcome = self._vm.commit_edit()
        if not outcome.is_valid:
            self.commit_rejected.emit(outcome.message)
            return False
        self.dataChanged.emit(index, index, [Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.EditRole])
        return True

    def _stage_edit(self, row_data: Dict[str, Any], key: str, value) -> bool:
        """Put editor text into the viewmodel's session for this cell, opening one if needed."""
        session = self._vm.state.edit
        if session is None or session.row_id != row_data.get('id') or session.field != key:
            if not self._vm.begin_edit(row_data.get('id'), key):
                return False
        self._vm.update_edit_buffer('' if value is None else str(value))
        return True

    def check_edit(self, index: QModelIndex, value) -> bool:
        """
        Validate editor text without committing.

        The session keeps the text either way; on rejection commit_rejected
        fires and the caller should leave the editor open.
        """
        row_data = self.get_row_data(index.row())
        key, column = self._column_at(index.column())
        if row_data is None or column is None:
            return True
        if not self._stage_edit(row_data, key, value):
            return True
        check = self._vm.validate_edit()
        if check.valid:
            return True
        self.commit_rejected.emit(check.message)
        return False

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole):
        if orientation == Qt.Orientation.Horizontal:
            key, column = self._column_at(section)
            if role == Qt.ItemDataRole.DisplayRole:
                if key == CHECKBOX_KEY:
                    return ''
                if key == ROW_NUMBER_KEY:
                    return '#'
                if column is None:
                    return ''
                sort = self._vm.state.sort
                suffix = ''
                if sort.key == column.field:
                    suffix = _SORT_ASC if sort.ascending else _SORT_DESC
                return f"{column.header_name}{suffix}"

            elif role == Qt.ItemDataRole.ToolTipRole:
                if column is not None and column.sortable:
                    return f"Sort by {column.header_name}"

        elif orientation == Qt.Orientation.Vertical:
            if role == Qt.ItemDataRole.DisplayRole:
                return str(section + 1)

        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags

        base_flags = Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable
        key, column = self._column_at(index.column())
        if key == CHECKBOX_KEY:
            return base_flags | Qt.ItemFlag.ItemIsUserCheckable
        if column is not None and column.editable and self._vm.inline_editing_enabled \
                and not self._vm.state.form_active:
            base_flags |= Qt.ItemFlag.ItemIsEditable
        return base_flags

    # -------------------------------------------------------------------------
    # View hooks
    # -------------------------------------------------------------------------

    def header_clicked(self, section: int):
        """Horizontal header click: sort by the column (ignored for non-sortable ones)."""
        key, column = self._column_at(section)
        if key == CHECKBOX_KEY:
            self._vm.select_all_visible(not self._vm.all_visible_selected)
        elif column is not None:
            self._vm.request_sort(column.field)

    def cell_clicked(self, index: QModelIndex):
        row_data = self.get_row_data(index.row())
        key, _ = self._column_at(index.column())
        if row_data is None or key in (None, CHECKBOX_KEY):
            return
        self._vm.click_cell(row_data, key)

    def cell_double_clicked(self, index: QModelIndex):
        row_data = self.get_row_data(index.row())
        key, _ = self._column_at(index.column())
        if row_data is None or key in (None, CHECKBOX_KEY, ROW_NUMBER_KEY):
            return
        self._vm.double_click_cell(row_data, key)

    def _on_selection_changed(self, ids, rows):
        col = self.get_column_index(CHECKBOX_KEY)
        if col >= 0 and self.rowCount() > 0:
            self.dataChanged.emit(self.index(0, col), self.index(self.rowCount() - 1, col),
                                  [Qt.ItemDataRole.CheckStateRole])

    def _on_edit_finished(self, row_id, field_name):
        col = self.get_column_index(field_name)
        if col < 0:
            return
        for row, row_data in enumerate(self._vm.window):
            if row_data.get('id') == row_id:
                index = self.index(row, col)
                self.dataChanged.emit(index, index)
                break
