import pytest

from core.domain.grid.columns import (
    display_columns,
    filter_columns,
    is_protected,
    normalize,
    search_columns,
    set_column_flag,
    grid_type_to_form_type,
)
from core.domain.grid.models import ColumnDefinition, ColumnType


def test_normalize_fills_defaults_and_aliases() -> None:
    cols = normalize([{"accessor": "name", "label": "Name"}, {"field": "qty", "type": "integer"}])

    assert [c.field for c in cols] == ["name", "qty"]
    assert cols[0].header_name == "Name"
    assert cols[0].type == ColumnType.STRING
    assert cols[0].sortable and cols[0].visible and not cols[0].editable
    assert cols[1].header_name == "qty"
    assert cols[1].type == ColumnType.INTEGER


def test_normalize_unknown_type_falls_back_to_string() -> None:
    (col,) = normalize([{"field": "x", "type": "geometry"}])
    assert col.type == ColumnType.STRING


def test_normalize_drops_missing_fields_and_duplicates() -> None:
    cols = normalize([
        {"headerName": "No field"},
        {"field": "a", "headerName": "First"},
        {"field": "a", "headerName": "Second"},
        "junk",
    ])
    assert len(cols) == 1
    assert cols[0].header_name == "First"


def test_normalize_filterable_wins_over_searchable() -> None:
    (col,) = normalize([{"field": "status", "filterable": True, "searchable": True}])
    assert col.filterable
    assert not col.searchable


def test_normalize_is_idempotent(order_columns) -> None:
    once = normalize(order_columns)
    assert normalize(once) == once


def test_normalize_string_flags() -> None:
    (col,) = normalize([{"field": "a", "editable": "true", "visible": "false"}])
    assert col.editable
    assert not col.visible


def test_extender_runs_before_normalization() -> None:
    def add_actions(cols):
        return cols + [{"field": "actions", "type": "actions", "sortable": False}]

    cols = normalize([{"field": "a"}], extender=add_actions)
    assert [c.field for c in cols] == ["a", "actions"]
    assert cols[1].type == ColumnType.ACTIONS


def test_failing_extender_keeps_raw_columns(capsys) -> None:
    def broken(cols):
        raise RuntimeError("boom")

    cols = normalize([{"field": "a"}], extender=broken)
    assert [c.field for c in cols] == ["a"]
    assert "extender failed" in capsys.readouterr().out


def test_derived_views(order_columns) -> None:
    cols = normalize(order_columns + [{"field": "hidden", "visible": False, "searchable": True}])

    assert [c.field for c in filter_columns(cols)] == ["status"]
    assert [c.field for c in search_columns(cols)] == ["title"]
    assert "status" not in [c.field for c in display_columns(cols)]
    assert "hidden" not in [c.field for c in display_columns(cols)]


def test_set_column_flag_keeps_filter_search_exclusive() -> None:
    cols = normalize([{"field": "title", "searchable": True}])

    cols = set_column_flag(cols, "title", "filterable", True)
    assert cols[0].filterable and not cols[0].searchable

    cols = set_column_flag(cols, "title", "searchable", True)
    assert cols[0].searchable and not cols[0].filterable


def test_set_column_flag_rejects_unknown_flag() -> None:
    with pytest.raises(ValueError):
        set_column_flag([ColumnDefinition("a")], "a", "resizable", True)


def test_protected_fields_case_insensitive() -> None:
    assert is_protected("id")
    assert is_protected("Created_At")
    assert not is_protected("title")


def test_grid_type_to_form_type() -> None:
    assert grid_type_to_form_type("currency") == "number"
    assert grid_type_to_form_type("singleSelect") == "select"
    assert grid_type_to_form_type("date") == "date"
    assert grid_type_to_form_type("string") == "text"


def test_to_dict_uses_wire_keys() -> None:
    col = ColumnDefinition("amount", "Amount", ColumnType.CURRENCY, edit_field="amount_raw", width=120)
    data = col.to_dict()
    assert data["headerName"] == "Amount"
    assert data["type"] == "currency"
    assert data["editField"] == "amount_raw"
    assert ColumnDefinition.from_dict(data) == col
