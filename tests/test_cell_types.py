from datetime import date

from core.domain.grid.cell_types import (
    format_date,
    format_number,
    get_cell_strategy,
    is_url,
    seed_date,
    seed_number,
    validate_date,
    validate_number,
)
from core.domain.grid.models import ColumnType

TODAY = date(2025, 6, 1)


def test_full_date_accepted() -> None:
    result = validate_date("2024-03-05", today=TODAY)
    assert result.valid
    assert result.value == "2024-03-05"


def test_short_date_uses_current_year() -> None:
    result = validate_date("3-5", today=TODAY)
    assert result.valid
    assert result.value == "2025-03-05"


def test_single_digit_full_date_is_zero_padded() -> None:
    assert validate_date("2024-3-5").value == "2024-03-05"


def test_out_of_range_date_rejected() -> None:
    result = validate_date("2024-13-40", today=TODAY)
    assert not result.valid
    assert "YYYY-MM-DD" in result.message


def test_day_range_only_checked_loosely() -> None:
    assert validate_date("2024-02-31").valid


def test_garbage_date_rejected() -> None:
    assert not validate_date("next tuesday").valid


def test_empty_date_clears() -> None:
    assert validate_date("").value == ""
    assert validate_date(None).valid


def test_number_validation() -> None:
    assert validate_number("1,234").value == 1234
    assert validate_number("2.5").value == 2.5
    assert validate_number("100").value == 100
    assert isinstance(validate_number("100.0").value, int)
    assert validate_number("").value == ""
    assert not validate_number("abc").valid
    assert not validate_number("nan").valid


def test_number_display_and_seed() -> None:
    assert format_number(1234567) == "1,234,567"
    assert format_number(2500.5) == "2,500.5"
    assert format_number(None) == ""
    assert seed_number(100.0) == "100"
    assert seed_number(2.5) == "2.5"
    assert seed_number(None) == ""


def test_date_display_and_seed() -> None:
    assert format_date("2024-03-05T10:00:00Z") == "2024-03-05"
    assert format_date(date(2024, 1, 2)) == "2024-01-02"
    assert seed_date("2024-03-05T10:00:00") == "2024-03-05"
    assert seed_date(None) == ""


def test_strategy_lookup_by_wire_name() -> None:
    assert get_cell_strategy("currency").validate is validate_number
    assert get_cell_strategy(ColumnType.DATETIME).validate is validate_date
    assert get_cell_strategy("unknown").validate("x").value == "x"


def test_is_url() -> None:
    assert is_url("https://example.com")
    assert is_url("http://example.com")
    assert not is_url("ftp://example.com")
    assert not is_url(None)
