from core.domain.grid.columns import normalize
from core.domain.grid.models import PaginationState, SortDirection, SortState
from core.domain.grid.pipeline import (
    apply,
    apply_sort,
    has_active_filters,
    row_number,
    total_pages,
    unique_values,
)


def _ids(rows):
    return [r["id"] for r in rows]


def test_no_state_returns_input_order(order_rows, order_columns) -> None:
    result = apply(order_rows, normalize(order_columns))
    assert _ids(result.window) == [1, 2, 3, 4, 5]
    assert result.total == 5
    assert result.total_pages == 1


def test_filter_is_exact_text_match(order_rows, order_columns) -> None:
    result = apply(order_rows, normalize(order_columns), filters={"status": "open"})
    assert _ids(result.window) == [1, 3, 4]


def test_empty_filter_value_is_ignored(order_rows, order_columns) -> None:
    result = apply(order_rows, normalize(order_columns), filters={"status": ""})
    assert result.total == 5


def test_filter_on_non_filterable_column_is_ignored(order_rows, order_columns) -> None:
    result = apply(order_rows, normalize(order_columns), filters={"title": "Alpha"})
    assert result.total == 5


def test_search_is_case_insensitive_substring(order_rows, order_columns) -> None:
    result = apply(order_rows, normalize(order_columns), search_term="ALP")
    assert _ids(result.window) == [1]


def test_search_without_searchable_columns_matches_everything(order_rows) -> None:
    result = apply(order_rows, normalize([{"field": "title"}]), search_term="zzz")
    assert result.total == 5


def test_filter_runs_before_search(order_rows, order_columns) -> None:
    result = apply(order_rows, normalize(order_columns), filters={"status": "closed"}, search_term="a")
    # "Alpha" and "Charlie" match the search but are open
    assert _ids(result.window) == [2]


def test_sort_directions_are_exact_reverses_without_ties(order_columns) -> None:
    rows = [{"id": i, "title": t} for i, t in enumerate(["b", "d", "a", "c"])]
    cols = normalize(order_columns)
    asc = apply_sort(rows, cols, SortState("title"), collate=str)
    desc = apply_sort(rows, cols, SortState("title", SortDirection.DESCENDING), collate=str)
    assert [r["title"] for r in asc] == ["a", "b", "c", "d"]
    assert desc == list(reversed(asc))


def test_sort_is_stable_in_both_directions(order_rows, order_columns) -> None:
    cols = normalize(order_columns)
    asc = apply_sort(order_rows, cols, SortState("status"), collate=str)
    desc = apply_sort(order_rows, cols, SortState("status", SortDirection.DESCENDING), collate=str)
    assert _ids(asc) == [2, 5, 1, 3, 4]
    assert _ids(desc) == [1, 3, 4, 2, 5]


def test_empty_values_sort_last_ascending_first_descending(order_rows, order_columns) -> None:
    cols = normalize(order_columns)
    asc = apply_sort(order_rows, cols, SortState("amount"))
    desc = apply_sort(order_rows, cols, SortState("amount", SortDirection.DESCENDING))
    assert _ids(asc) == [4, 1, 5, 2, 3]
    assert _ids(desc)[0] == 3


def test_sort_uses_value_getter() -> None:
    cols = normalize([{"field": "name", "valueGetter": lambda row, value: len(value)}])
    rows = [{"id": 1, "name": "ccc"}, {"id": 2, "name": "a"}, {"id": 3, "name": "bb"}]
    assert _ids(apply_sort(rows, cols, SortState("name"))) == [2, 3, 1]


def test_numbers_sort_numerically(order_columns) -> None:
    rows = [{"id": 1, "amount": 10}, {"id": 2, "amount": 9}, {"id": 3, "amount": 100}]
    assert _ids(apply_sort(rows, normalize(order_columns), SortState("amount"))) == [2, 1, 3]


def test_pagination_window() -> None:
    rows = [{"id": i} for i in range(5)]
    result = apply(rows, normalize([{"field": "id"}]), pagination=PaginationState(page=2, page_size=2))
    assert _ids(result.window) == [2, 3]
    assert result.total == 5
    assert result.total_pages == 3


def test_server_side_total_count_overrides_local_length() -> None:
    rows = [{"id": i} for i in range(20)]
    result = apply(rows, normalize([{"field": "id"}]),
                   pagination=PaginationState(page=1, page_size=20, total_count=95))
    assert result.total == 95
    assert result.total_pages == 5


def test_total_pages_never_below_one() -> None:
    assert total_pages(0, 20) == 1
    assert total_pages(21, 20) == 2


def test_row_number_continues_across_pages() -> None:
    assert row_number(PaginationState(page=3, page_size=10), 0) == 21
    assert row_number(None, 4) == 5


def test_inputs_are_not_mutated(order_rows, order_columns) -> None:
    snapshot = [dict(r) for r in order_rows]
    apply(order_rows, normalize(order_columns), {"status": "open"}, "a", SortState("title"),
          PaginationState(1, 2))
    assert order_rows == snapshot


def test_unique_values_sorted_and_non_empty(order_rows) -> None:
    assert unique_values(order_rows, "status") == ["closed", "open"]
    assert unique_values(order_rows, "amount") == [7, 100, 2500.5]


def test_has_active_filters() -> None:
    assert not has_active_filters({"status": ""}, "")
    assert has_active_filters({"status": "open"})
    assert has_active_filters({}, "x")
