from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from financial_insights import excel_serial_to_date, parse_cell_date


@pytest.mark.parametrize(
    ("serial", "expected"),
    [
        (1, date(1899, 12, 31)),
        (60, date(1900, 2, 28)),
        (61, date(1900, 3, 1)),
        (45292, date(2024, 1, 1)),
        (45292.5, date(2024, 1, 1)),
        (Decimal("45323.999"), date(2024, 2, 1)),
    ],
)
def test_excel_serial_to_date(serial, expected):
    assert excel_serial_to_date(serial) == expected


@pytest.mark.parametrize("serial", [float("nan"), float("inf"), 10**12])
def test_excel_serial_to_date_rejects_unusable_serials(serial):
    with pytest.raises(ValueError):
        excel_serial_to_date(serial)


def test_native_datetime_keeps_only_calendar_day():
    late = datetime(2024, 3, 31, 23, 59, 59, tzinfo=timezone.utc)
    assert parse_cell_date(late) == date(2024, 3, 31)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2024-01-05", date(2024, 1, 5)),
        (" 2024-01-05 ", date(2024, 1, 5)),
        ("2024-01-05T23:59:59Z", date(2024, 1, 5)),
        ("2024-01-05 00:00:00", date(2024, 1, 5)),
        ("01/05/2024", date(2024, 1, 5)),
        ("1/5/24", date(2024, 1, 5)),
    ],
)
def test_parse_cell_date_text(text, expected):
    assert parse_cell_date(text) == expected


@pytest.mark.parametrize("value", ["", "not-a-date", "2024-02-30", "31/12/2024", True, None, object()])
def test_parse_cell_date_rejects(value):
    with pytest.raises(ValueError):
        parse_cell_date(value)
