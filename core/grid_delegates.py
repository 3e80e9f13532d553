"""
Grid Delegates - Per-column-type cell editors for the grid table.

GridCellDelegate picks the editor widget from the column's ColumnType:
- singleSelect: QComboBox over the column's value options
- date/datetime: QLineEdit with a YYYY-MM-DD placeholder (MM-DD accepted)
- everything else: QLineEdit

Enter validates first and only commits through the model
(GridTableModel.setData -> viewmodel) when the text is accepted; rejected
text leaves the editor open with the session still Editing. Escape cancels
the viewmodel's edit session without a commit.

Usage:
    from core.grid_delegates import GridCellDelegate

    delegate = GridCellDelegate(grid_viewmodel, table_view)
    table_view.setItemDelegate(delegate)
"""

from typing import Callable, Dict

from PyQt6.QtWidgets import (
    QStyledItemDelegate, QWidget, QStyleOptionViewItem,
    QLineEdit, QComboBox, QAbstractItemView
)
from PyQt6.QtCore import Qt, QModelIndex, QPersistentModelIndex, QEvent, QAbstractItemModel, QTimer

from core.domain.grid.cell_types import DATE_FORMAT_HINT
from core.domain.grid.models import ColumnDefinition, ColumnType


def _line_edit(parent: QWidget, column: ColumnDefinition) -> QWidget:
    editor = QLineEdit(parent)
    if column.type.is_numeric:
        editor.setAlignment(Qt.AlignmentFlag.AlignRight)
    return editor


def _date_edit(parent: QWidget, column: ColumnDefinition) -> QWidget:
    editor = QLineEdit(parent)
    editor.setPlaceholderText(DATE_FORMAT_HINT)
    editor.setToolTip(f"Date ({DATE_FORMAT_HINT})")
    return editor


def _select_edit(parent: QWidget, column: ColumnDefinition) -> QWidget:
    editor = QComboBox(parent)
    for value, label in column.option_pairs():
        editor.addItem(str(label), value)
    return editor


EditorBuilder = Callable[[QWidget, ColumnDefinition], QWidget]

EDITOR_BUILDERS: Dict[ColumnType, EditorBuilder] = {
    ColumnType.SINGLE_SELECT: _select_edit,
    ColumnType.DATE: _date_edit,
    ColumnType.DATETIME: _date_edit,
}

_SUBMIT_KEYS = (Qt.Key.Key_Return, Qt.Key.Key_Enter)


def build_editor(parent: QWidget, column: ColumnDefinition) -> QWidget:
    """Editor widget for a column type (QLineEdit when the type has no builder)."""
    return EDITOR_BUILDERS.get(column.type, _line_edit)(parent, column)


def _plain_index(persistent: QPersistentModelIndex) -> QModelIndex:
    if not persistent.isValid():
        return QModelIndex()
    return persistent.model().index(persistent.row(), persistent.column())


class GridCellDelegate(QStyledItemDelegate):
    """
    Delegate for inline cell editing.

    Relies on GridTableModel.ColumnDefRole to find the column behind an
    index and on GridTableModel.check_edit to validate before submitting.
    The parent is expected to be the table view; it is used to reopen an
    editor whose commit was rejected on focus loss.
    """

    def __init__(self, viewmodel, parent=None):
        super().__init__(parent)
        self._vm = viewmodel

    def _column(self, index: QModelIndex):
        from core.grid_table_model import GridTableModel
        return index.data(GridTableModel.ColumnDefRole)

    def createEditor(self, parent: QWidget, option: QStyleOptionViewItem,
                     index: QModelIndex) -> QWidget:
        """Create the editor widget for the cell's column type."""
        column = self._column(index)
        if column is None:
            return super().createEditor(parent, option, index)
        editor = build_editor(parent, column)
        editor.grid_index = QPersistentModelIndex(index)
        editor.installEventFilter(self)
        return editor

    def setEditorData(self, editor: QWidget, index: QModelIndex):
        """Seed the editor with the edit buffer."""
        value = index.data(Qt.ItemDataRole.EditRole)
        text = '' if value is None else str(value)
        if isinstance(editor, QComboBox):
            idx = editor.findData(value)
            if idx < 0:
                idx = editor.findText(text)
            if idx >= 0:
                editor.setCurrentIndex(idx)
        elif isinstance(editor, QLineEdit):
            editor.setText(text)
            editor.selectAll()
        else:
            super().setEditorData(editor, index)

    def setModelData(self, editor: QWidget, model: QAbstractItemModel,
                     index: QModelIndex):
        """Commit the editor value through the model."""
        if isinstance(editor, QComboBox):
            value = editor.currentData()
            model.setData(index, editor.currentText() if value is None else value,
                          Qt.ItemDataRole.EditRole)
        elif isinstance(editor, QLineEdit):
            if not model.setData(index, editor.text(), Qt.ItemDataRole.EditRole):
                self._reopen_if_editing(index)
        else:
            super().setModelData(editor, model, index)

    def updateEditorGeometry(self, editor: QWidget, option: QStyleOptionViewItem,
                             index: QModelIndex):
        """Set the editor geometry."""
        editor.setGeometry(option.rect)

    def _reopen_if_editing(self, index: QModelIndex):
        # Focus loss already closes the editor; bring it back on the kept session
        view = self.parent()
        if self._vm.state.edit is None or not isinstance(view, QAbstractItemView):
            return
        persistent = QPersistentModelIndex(index)
        QTimer.singleShot(0, lambda: self._reopen(view, persistent))

    def _reopen(self, view: QAbstractItemView, persistent: QPersistentModelIndex):
        index = _plain_index(persistent)
        if index.isValid() and self._vm.state.edit is not None:
            view.edit(index)

    def eventFilter(self, obj, event) -> bool:
        if event.type() == QEvent.Type.KeyPress:
            if event.key() == Qt.Key.Key_Escape:
                # Escape closes without commit; drop the session too
                self._vm.cancel_edit()
            elif event.key() in _SUBMIT_KEYS and isinstance(obj, QLineEdit):
                persistent = getattr(obj, 'grid_index', None)
                index = _plain_index(persistent) if persistent is not None else QModelIndex()
                model = index.model() if index.isValid() else None
                if model is not None and hasattr(model, 'check_edit') \
                        and not model.check_edit(index, obj.text()):
                    return True
        return super().eventFilter(obj, event)
