import pytest
from PyQt6.QtTest import QTest

from core.domain.grid.edit_session import CommitStatus
from core.domain.grid.models import ColumnConfigRecord
from viewmodels.grid_viewmodel import GridViewModel


@pytest.fixture
def vm(qapp, order_rows, order_columns):
    vm = GridViewModel(click_debounce_ms=30)
    vm.set_columns(order_columns)
    vm.set_rows(order_rows)
    yield vm
    vm.dispose()


def _collect(signal):
    received = []
    signal.connect(lambda *args: received.append(args))
    return received


def test_single_click_emits_after_debounce(vm, order_rows) -> None:
    clicks = _collect(vm.row_clicked)
    vm.click_row(order_rows[0])
    assert clicks == []
    QTest.qWait(120)
    assert clicks == [(order_rows[0],)]


def test_double_click_cancels_pending_row_click(vm, order_rows) -> None:
    clicks = _collect(vm.row_clicked)
    doubles = _collect(vm.row_double_clicked)
    vm.click_row(order_rows[0])
    vm.double_click_cell(order_rows[0], "id")
    QTest.qWait(120)
    assert clicks == []
    assert doubles == [(order_rows[0],)]


def test_url_cell_click_activates_link(vm) -> None:
    links = _collect(vm.url_activated)
    clicks = _collect(vm.row_clicked)
    vm.click_cell({"id": 9, "title": "https://example.com/x"}, "title")
    QTest.qWait(120)
    assert links == [("https://example.com/x",)]
    assert clicks == []


def test_double_click_starts_inline_edit_with_handler(vm, order_rows) -> None:
    started = _collect(vm.edit_started)
    doubles = _collect(vm.row_double_clicked)
    vm.set_cell_change_handler(lambda *a: None)
    vm.double_click_cell(order_rows[0], "due")
    assert started == [(1, "due", "2024-03-05")]
    assert doubles == []


def test_double_click_without_handler_is_row_double_click(vm, order_rows) -> None:
    doubles = _collect(vm.row_double_clicked)
    vm.double_click_cell(order_rows[0], "title")
    assert doubles == [(order_rows[0],)]
    assert vm.state.edit is None


def test_double_click_in_form_mode_opens_form(vm, order_rows) -> None:
    forms = _collect(vm.form_requested)
    vm.set_cell_change_handler(lambda *a: None)
    vm.set_form_config([{"field": "title"}], record_form_mode=True)
    vm.double_click_cell(order_rows[0], "title")
    assert forms == [(order_rows[0],)]
    assert vm.state.edit is None


def test_commit_flow(vm) -> None:
    calls = []
    finished = _collect(vm.edit_finished)
    vm.set_cell_change_handler(lambda *a: calls.append(a))
    vm.begin_edit(1, "amount")
    vm.update_edit_buffer("100")
    assert vm.commit_edit().status == CommitStatus.UNCHANGED
    assert calls == []
    assert finished == [(1, "amount")]

    vm.begin_edit(1, "amount")
    vm.update_edit_buffer("101")
    assert vm.commit_edit().status == CommitStatus.COMMITTED
    assert calls == [(1, "amount", 101)]


def test_invalid_commit_emits_validation_failed(vm) -> None:
    failures = _collect(vm.validation_failed)
    finished = _collect(vm.edit_finished)
    vm.set_cell_change_handler(lambda *a: None)
    vm.begin_edit(1, "amount")
    vm.update_edit_buffer("12abc")
    assert vm.commit_edit().status == CommitStatus.INVALID
    assert failures == [("Invalid number.",)]
    assert finished == []
    assert vm.state.edit is not None


def test_cancel_edit(vm) -> None:
    finished = _collect(vm.edit_finished)
    vm.set_cell_change_handler(lambda *a: None)
    vm.begin_edit(2, "title")
    vm.cancel_edit()
    assert vm.state.edit is None
    assert finished == [(2, "title")]


def test_selection_signal_carries_rows(vm, order_rows) -> None:
    changes = _collect(vm.selection_changed)
    vm.toggle_row(3, True)
    assert changes == [([3], [order_rows[2]])]


def test_paging_requests(vm) -> None:
    pages = _collect(vm.page_change_requested)
    vm.set_pagination(page=1, page_size=2)
    vm.next_page()
    vm.last_page()
    vm.next_page()
    vm.first_page()
    assert pages == [(2,), (3,), (3,), (1,)]
    assert vm.row_number(0) == 1


def test_add_row_depends_on_form_mode(vm) -> None:
    adds = _collect(vm.add_row_requested)
    forms = _collect(vm.form_requested)
    vm.add_row()
    vm.set_form_config([{"field": "title"}], record_form_mode=True)
    vm.add_row()
    assert adds == [()]
    assert forms == [(None,)]


def test_save_form_validates_required_fields(vm) -> None:
    saved = []
    failures = _collect(vm.validation_failed)
    vm.set_form_save_handler(lambda data, is_edit: saved.append((data, is_edit)))
    vm.set_form_config([{"field": "title", "headerName": "Title", "required": True}])
    assert not vm.save_form({"title": ""})
    assert failures == [("Title is required.",)]
    assert vm.save_form({"id": 4, "title": "x"})
    assert saved == [({"id": 4, "title": "x"}, True)]


def test_context_actions(vm, order_rows) -> None:
    edits = _collect(vm.edit_requested)
    deletes = _collect(vm.delete_requested)
    vm.context_action("edit", order_rows[0])
    vm.context_action("delete", order_rows[1])
    assert edits == [(order_rows[0],)]
    assert deletes == [(order_rows[1],)]
    with pytest.raises(ValueError):
        vm.context_action("archive", order_rows[0])


def test_apply_config_record_emits_form_config(vm) -> None:
    forms = _collect(vm.form_config_changed)
    columns = _collect(vm.columns_changed)
    vm.apply_config_record(ColumnConfigRecord(form_columns=[{"field": "title"}], form_width=700))
    assert columns == [()]
    assert forms[0][1] == 700
    assert forms[0][0][0]["field"] == "title"


def test_validate_edit_emits_failure_and_keeps_session(vm) -> None:
    failures = _collect(vm.validation_failed)
    vm.set_cell_change_handler(lambda *a: None)
    vm.begin_edit(1, "amount")
    vm.update_edit_buffer("12abc")
    assert not vm.validate_edit().valid
    assert failures == [("Invalid number.",)]
    assert vm.state.edit.buffer == "12abc"
