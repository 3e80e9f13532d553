import pytest

from core.domain.grid import column_draft
from core.domain.grid.models import ColumnConfigRecord, FormColumn
from core.services.column_config_service import ColumnConfigStore


def _yes(message):
    return True


def _no(message):
    return False


@pytest.fixture
def store(port):
    return ColumnConfigStore(port)


@pytest.fixture
def draft():
    return column_draft.draft_from_columns([{"field": "id"}, {"field": "title"}, {"field": "memo"}, {"field": "local"}])


def _fields(draft):
    return [c["field"] for c in draft]


def test_load_merges_over_defaults(store, port) -> None:
    port.config = {"columns": [{"field": "a"}], "page_title": "Orders", "show_checkbox": 0}
    defaults = ColumnConfigRecord(page_title="Default", columns=[{"field": "x"}], form_width=600,
                                  show_row_number=True)
    record = store.load("orders", "tb_orders", defaults)
    assert record.columns == [{"field": "a"}]
    assert record.page_title == "Orders"
    assert record.form_width == 600
    assert record.show_row_number is True
    assert record.show_checkbox is False


def test_load_empty_columns_keeps_defaults(store, port) -> None:
    port.config = {"columns": []}
    defaults = ColumnConfigRecord(columns=[{"field": "x"}])
    assert store.load("orders", "tb_orders", defaults).columns == [{"field": "x"}]


def test_load_failure_returns_defaults(store, port, capsys) -> None:
    port.failing.add("load_config")
    defaults = ColumnConfigRecord(columns=[{"field": "x"}])
    assert store.load("orders", "tb_orders", defaults) is defaults
    assert "[col-def]" in capsys.readouterr().out


def test_load_without_names_makes_no_call(store, port) -> None:
    store.load("", "tb_orders")
    assert port.calls == []


def test_save_payload(store, port) -> None:
    result = store.save("orders", "Orders", [{"field": "a", "width": 100}], [FormColumn("a", "A")], 480)
    assert result.ok
    payload = port.calls[-1][1]
    assert payload["page_name"] == "orders"
    assert payload["form_columns"][0]["field"] == "a"
    assert payload["form_width"] == 480


def test_save_empty_form_columns_sent_as_null(store, port) -> None:
    store.save("orders", "", [], [], 500)
    assert port.calls[-1][1]["form_columns"] is None


def test_save_failure(store, port) -> None:
    port.failing.add("save_config")
    result = store.save("orders", "", [], None, 500)
    assert not result.ok
    assert "unavailable" in result.error


def test_check_columns_never_sends_protected_fields(store, port) -> None:
    result = store.check_columns("tb_orders", ["id", "title", "ghost"])
    assert result.ok
    assert result.data.columns == {"title": True, "ghost": False}
    assert result.data.rejected == ["id"]
    assert port.calls == [("check_columns", "tb_orders", ["title", "ghost"])]


def test_check_only_protected_fields_makes_no_call(store, port) -> None:
    result = store.check_columns("tb_orders", ["id", "created_at"])
    assert result.ok
    assert result.data.rejected == ["id", "created_at"]
    assert port.calls == []


def test_delete_protected_column_makes_no_call(store, port) -> None:
    result = store.delete_column("tb_orders", "ID")
    assert not result.ok
    assert "cannot be deleted" in result.error
    assert port.calls == []


def test_delete_reports_server_message(store, port) -> None:
    result = store.delete_column("tb_orders", "ghost")
    assert not result.ok
    assert result.error == "no such column"


def test_add_columns_partial_success(store, port) -> None:
    port.refuse_add = {"bad": "type not allowed"}
    result = store.add_columns("tb_orders", [{"field": "good", "type": "string"}, {"field": "bad", "type": "x"}])
    assert result.ok
    assert result.added == ["good"]
    assert result.failed == [{"name": "bad", "error": "type not allowed"}]


def test_sync_from_db_lists_missing_columns(store, port) -> None:
    port.schema["extra"] = "date"
    result = store.sync_from_db("tb_orders", ["id", "title"])
    assert [c.field for c in result.data] == ["memo", "extra"]
    assert result.data[1].type.value == "date"


def test_remove_db_column_waits_for_remote_success(store, port, draft) -> None:
    port.failing.add("delete_column")
    result = store.remove_column(draft, "memo", {"memo": True}, "tb_orders", _yes)
    assert "memo" in _fields(result.draft)
    assert "Failed" in result.message
    assert not result.changed


def test_remove_db_column_after_confirm(store, port, draft) -> None:
    result = store.remove_column(draft, "memo", {"memo": True, "title": True}, "tb_orders", _yes)
    assert _fields(result.draft) == ["id", "title", "local"]
    assert result.db_status == {"title": True}
    assert "memo" not in port.schema


def test_remove_db_column_declined(store, port, draft) -> None:
    result = store.remove_column(draft, "memo", {"memo": True}, "tb_orders", _no)
    assert result.draft == draft
    assert port.calls == []


def test_remove_local_only_column_is_unconditional(store, port, draft) -> None:
    result = store.remove_column(draft, "local", {"local": False}, "tb_orders", _no)
    assert _fields(result.draft) == ["id", "title", "memo"]
    assert port.calls == []


def test_remove_protected_column_rejected(store, port, draft) -> None:
    result = store.remove_column(draft, "id", {"id": True}, "tb_orders", _yes)
    assert result.draft == draft
    assert "cannot be deleted" in result.message


def test_delete_from_db_requires_known_db_column(store, port, draft) -> None:
    result = store.delete_from_db(draft, "local", {}, "tb_orders", _yes)
    assert "does not exist" in result.message
    assert port.calls == []

    result = store.delete_from_db(draft, "title", {"title": True}, "tb_orders", _yes)
    assert "title" not in _fields(result.draft)
    assert "deleted from the database" in result.message


def test_add_column_local_and_db(store, port, draft) -> None:
    result = store.add_column(draft, " price ", "5", "tb_orders", _yes)
    assert result.draft[-1]["field"] == "price"
    assert result.draft[-1]["type"] == "currency"
    assert result.db_status["price"] is True
    assert port.schema["price"] == "currency"


def test_add_column_db_failure_still_adds_locally(store, port, draft) -> None:
    port.refuse_add = {"price": "nope"}
    result = store.add_column(draft, "price", "9", "tb_orders", _yes)
    assert result.draft[-1]["field"] == "price"
    assert result.draft[-1]["type"] == "string"
    assert "nope" in result.message


def test_add_duplicate_column_rejected(store, draft) -> None:
    result = store.add_column(draft, "title", "1", "tb_orders", _yes)
    assert result.draft == draft
    assert "already exists" in result.message


def test_merge_db_columns(store, port, draft) -> None:
    port.schema["extra"] = "date"
    result = store.merge_db_columns(draft[:2], {}, "tb_orders", _yes)
    assert _fields(result.draft) == ["id", "title", "memo", "extra"]
    assert result.db_status == {"memo": True, "extra": True}
    assert "2 column(s)" in result.message


def test_merge_db_columns_nothing_new(store, draft) -> None:
    result = store.merge_db_columns(draft, {}, "tb_orders", _yes)
    assert result.message == "No new DB columns to add."
    assert not result.changed


def test_add_default_columns(store, port, draft) -> None:
    result = store.add_default_columns(draft, {}, "tb_orders", _yes)
    added = _fields(result.draft)[len(draft):]
    assert added == ["created_at", "updated_at", "owner", "description"]
    assert result.db_status["owner"] is True
    assert result.db_status["title"] is True
    assert result.db_status["description"] is True
    assert "Newly added" in result.message
    assert "Already in the list: id, title" in result.message
    assert ("check_columns", "tb_orders", ["title", "owner", "description"]) in port.calls


def test_add_default_columns_reports_fresh_db_status_when_declined(store, port, draft) -> None:
    result = store.add_default_columns(draft, {"title": False}, "tb_orders", _no)
    assert result.db_status["title"] is True
    assert result.db_status["owner"] is False
    assert not any(call[0] == "add_columns" for call in port.calls)
