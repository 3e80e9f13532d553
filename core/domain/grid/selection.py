"""
Row selection (checkbox column).

The selection is an insertion-ordered set of row ids that survives
filtering, sorting, and paging. It is never pruned when the host replaces
the row collection, so ids of deleted rows stay selected until the host
clears them.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class SelectionModel:
    selected: Tuple[Any, ...] = ()

    def __contains__(self, row_id: Any) -> bool:
        return row_id in self.selected

    def __len__(self) -> int:
        return len(self.selected)

    @property
    def ids(self) -> List[Any]:
        """Selected ids in the order they were checked."""
        return list(self.selected)

    def _with(self, row_ids: Iterable[Any]) -> 'SelectionModel':
        selected = list(self.selected)
        for row_id in row_ids:
            if row_id not in selected:
                selected.append(row_id)
        return SelectionModel(tuple(selected))

    def _without(self, row_ids: Iterable[Any]) -> 'SelectionModel':
        dropped = list(row_ids)
        return SelectionModel(tuple(i for i in self.selected if i not in dropped))

    def toggle(self, row_id: Any, checked: bool) -> 'SelectionModel':
        """Add or remove one row id."""
        if checked:
            return self._with([row_id])
        return self._without([row_id])

    def select_all_visible(self, window: Iterable[Dict[str, Any]], checked: bool) -> 'SelectionModel':
        """Add or remove every row of the current page (not the whole filtered set)."""
        ids = [row.get('id') for row in window]
        if checked:
            return self._with(ids)
        return self._without(ids)

    def clear(self) -> 'SelectionModel':
        return SelectionModel()

    def all_visible_selected(self, window: Iterable[Dict[str, Any]]) -> bool:
        """State of the select-all checkbox: the current page only."""
        window = list(window)
        return bool(window) and all(row.get('id') in self.selected for row in window)

    def resolve_rows(self, all_rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Selected rows looked up in the full, unfiltered collection."""
        return [row for row in all_rows if row.get('id') in self.selected]
