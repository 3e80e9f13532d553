from core.domain.grid.models import FormColumn
from core.domain.grid.record_form import (
    empty_record,
    group_by_row,
    initial_record,
    is_edit_mode,
    is_field_disabled,
    validate_record,
)

FORM = [
    FormColumn("name", "Name", required=True, row=1),
    FormColumn("kind", "Kind", type="select", row=1,
               value_options=[{"value": "a", "label": "A"}, {"value": "b", "label": "B"}]),
    FormColumn("password", "Password", type="password", required=True, row=2),
    FormColumn("code", "Code", editable=False, row=3),
]


def test_empty_record_defaults() -> None:
    assert empty_record(FORM) == {"name": "", "kind": "a", "password": "", "code": ""}


def test_initial_record_copies_data() -> None:
    data = {"id": 1, "name": "x"}
    record = initial_record(FORM, data)
    assert record == data
    assert record is not data


def test_required_fields() -> None:
    ok, message = validate_record(FORM, {"name": "  ", "password": "pw"})
    assert not ok
    assert "Name" in message
    assert validate_record(FORM, {"name": "x", "password": "pw"}) == (True, "")


def test_password_optional_when_editing() -> None:
    assert not validate_record(FORM, {"name": "x", "password": ""})[0]
    assert validate_record(FORM, {"name": "x", "password": ""}, is_edit=True)[0]


def test_dict_form_columns_accepted() -> None:
    ok, _ = validate_record([{"field": "a", "headerName": "A", "required": True}], {"a": ""})
    assert not ok


def test_group_by_row() -> None:
    rows = group_by_row([FORM[2], FORM[0], FORM[1]])
    assert [[fc.field for fc in row] for row in rows] == [["name", "kind"], ["password"]]


def test_edit_mode() -> None:
    assert is_edit_mode({"id": 5})
    assert not is_edit_mode({"id": None})
    assert not is_edit_mode(None)
    assert is_field_disabled(FORM[3], is_edit=True)
    assert not is_field_disabled(FORM[3], is_edit=False)
