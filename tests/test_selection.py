from core.domain.grid.selection import SelectionModel


def test_toggle_adds_and_removes() -> None:
    sel = SelectionModel().toggle(1, True).toggle(2, True).toggle(1, False)
    assert sel.ids == [2]
    assert 2 in sel
    assert len(sel) == 1


def test_select_all_visible_only_touches_window() -> None:
    window = [{"id": 3}, {"id": 4}]
    sel = SelectionModel().toggle(1, True).select_all_visible(window, True)
    assert sel.ids == [1, 3, 4]
    assert sel.all_visible_selected(window)

    sel = sel.select_all_visible(window, False)
    assert sel.ids == [1]
    assert not sel.all_visible_selected(window)


def test_empty_window_is_never_all_selected() -> None:
    assert not SelectionModel().all_visible_selected([])


def test_resolve_rows_uses_full_collection_and_keeps_stale_ids() -> None:
    rows = [{"id": 1}, {"id": 2}, {"id": 3}]
    sel = SelectionModel().toggle(2, True).toggle(99, True)
    assert sel.resolve_rows(rows) == [{"id": 2}]
    assert 99 in sel


def test_selection_is_immutable() -> None:
    original = SelectionModel()
    original.toggle(1, True)
    assert len(original) == 0


def test_ids_keep_check_order() -> None:
    sel = SelectionModel()
    for row_id in ["zeta", "alpha", "mike", "bravo"]:
        sel = sel.toggle(row_id, True)
    sel = sel.toggle("alpha", True).toggle("mike", False)
    assert sel.ids == ["zeta", "alpha", "bravo"]
