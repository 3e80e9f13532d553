"""
Grid data pipeline.

Pure functions, no Qt and no state. apply() runs the four stages in a fixed
order, each one consuming only the previous stage's output:

    filter -> search -> sort -> paginate

Usage:
    result = apply(rows, columns, {'status': 'open'}, 'smith',
                   SortState('created_at'), PaginationState(page=2, page_size=20))
    result.window        # rows to render
    result.total         # matches before slicing (or the server-side count)
    result.total_pages
"""

import locale
import math
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import List, Dict, Any, Optional, Callable, Iterable

from .columns import filter_columns, search_columns, find_column
from .models import ColumnDefinition, SortState, PaginationState, is_empty, to_text


Row = Dict[str, Any]
CollateKey = Callable[[str], Any]


@dataclass(frozen=True)
class PipelineResult:
    """Visible window plus the counts the footer needs."""
    window: List[Row] = field(default_factory=list)
    total: int = 0
    total_pages: int = 1
    rows_before_paging: List[Row] = field(default_factory=list)


def total_pages(total: int, page_size: int) -> int:
    """ceil(total / page_size), never less than 1."""
    if page_size <= 0:
        return 1
    return max(1, math.ceil(total / page_size))


def row_number(pagination: Optional[PaginationState], index: int) -> int:
    """1-based number of the index-th row of the current window."""
    if pagination is None:
        return index + 1
    return pagination.offset + index + 1


def has_active_filters(filters: Optional[Dict[str, Any]], search_term: str = '') -> bool:
    return any(not is_empty(v) for v in (filters or {}).values()) or bool(search_term)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def apply_filters(rows: List[Row], columns: Iterable[ColumnDefinition],
                  filters: Optional[Dict[str, Any]]) -> List[Row]:
    """Exact text equality per filter column; empty filter values are ignored."""
    active = [(c.field, to_text(filters[c.field]))
              for c in filter_columns(columns)
              if filters and not is_empty(filters.get(c.field))]
    if not active:
        return list(rows)
    return [row for row in rows
            if all(to_text(row.get(name)) == wanted for name, wanted in active)]


def apply_search(rows: List[Row], columns: Iterable[ColumnDefinition],
                 search_term: Optional[str]) -> List[Row]:
    """Case-insensitive substring match across search columns, OR-combined."""
    targets = [c.field for c in search_columns(columns)]
    if not search_term or not targets:
        return list(rows)
    term = search_term.lower()

    def matches(row: Row) -> bool:
        for name in targets:
            value = row.get(name)
            if value is not None and term in to_text(value).lower():
                return True
        return False

    return [row for row in rows if matches(row)]


def _compare_values(a: Any, b: Any, collate: CollateKey) -> int:
    # Empty values sort after everything (ascending); descending negates this.
    a_empty, b_empty = is_empty(a), is_empty(b)
    if a_empty and b_empty:
        return 0
    if a_empty:
        return 1
    if b_empty:
        return -1

    if isinstance(a, str) and isinstance(b, str):
        a, b = collate(a), collate(b)
    try:
        if a < b:
            return -1
        if a > b:
            return 1
        return 0
    except TypeError:
        a_text, b_text = collate(to_text(a)), collate(to_text(b))
        return (a_text > b_text) - (a_text < b_text)


def apply_sort(rows: List[Row], columns: Iterable[ColumnDefinition], sort: Optional[SortState],
               collate: Optional[CollateKey] = None) -> List[Row]:
    """
    Stable single-key sort.

    sorted() is a stable merge sort; descending uses the negated
    comparator rather than reverse=True so empties come first and ties
    keep input order in both directions.
    """
    if sort is None or not sort.key:
        return list(rows)
    column = find_column(columns, sort.key)
    collate = collate or locale.strxfrm
    sign = 1 if sort.ascending else -1

    if column is not None:
        accessor = column.value_of
    else:
        def accessor(row: Row) -> Any:
            return row.get(sort.key)

    keyed = [(accessor(row), row) for row in rows]
    keyed = sorted(keyed, key=cmp_to_key(lambda x, y: sign * _compare_values(x[0], y[0], collate)))
    return [row for _, row in keyed]


def paginate(rows: List[Row], pagination: Optional[PaginationState]) -> List[Row]:
    if pagination is None:
        return list(rows)
    start = pagination.offset
    return rows[start:start + pagination.page_size]


def apply(rows: Iterable[Row], columns: Iterable[ColumnDefinition],
          filters: Optional[Dict[str, Any]] = None, search_term: Optional[str] = '',
          sort: Optional[SortState] = None, pagination: Optional[PaginationState] = None,
          collate: Optional[CollateKey] = None) -> PipelineResult:
    """
    Run filter -> search -> sort -> paginate.

    Args:
        rows: Host row collection (never mutated)
        columns: Normalized column definitions
        filters: field -> equality value
        search_term: Free text across searchable columns
        sort: Active sort key/direction (None or key=None for input order)
        pagination: Page window; None renders every row
        collate: String sort key (defaults to locale.strxfrm)

    Returns:
        PipelineResult with the window, the pre-slice total (or
        pagination.total_count when the host pages server-side), and the
        page count.
    """
    columns = list(columns)
    result = apply_filters(list(rows), columns, filters)
    result = apply_search(result, columns, search_term)
    result = apply_sort(result, columns, sort, collate)

    if pagination is None:
        return PipelineResult(window=result, total=len(result), total_pages=1,
                              rows_before_paging=result)

    total = pagination.total_count if pagination.total_count is not None else len(result)
    return PipelineResult(
        window=paginate(result, pagination),
        total=total,
        total_pages=total_pages(total, pagination.page_size),
        rows_before_paging=result,
    )


def unique_values(rows: Iterable[Row], field_name: str) -> List[Any]:
    """Distinct non-empty values of a field, sorted, for filter choices."""
    values = []
    seen = set()
    for row in rows:
        value = row.get(field_name)
        if is_empty(value):
            continue
        key = to_text(value)
        if key in seen:
            continue
        seen.add(key)
        values.append(value)
    try:
        return sorted(values)
    except TypeError:
        return sorted(values, key=to_text)
