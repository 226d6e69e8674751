"""Cell-level date parsing for spreadsheet imports.

Spreadsheet cells reach the normalizer as native ``date``/``datetime``
values, as numeric serial dates, or as text. All three collapse to a plain
``datetime.date`` here; time-of-day and timezone information is discarded so
a transaction never drifts to a neighbouring calendar day.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from decimal import Decimal

# Day zero of the spreadsheet serial-date convention. Serial 1 lands on
# 1899-12-31 and serials from 61 onward agree with the 1900 date system.
EXCEL_EPOCH = date(1899, 12, 30)

_FALLBACK_FORMATS: tuple[str, ...] = ("%m/%d/%Y", "%m/%d/%y")


def excel_serial_to_date(serial: int | float | Decimal) -> date:
    """Convert a spreadsheet serial day number to a calendar date.

    The fractional part of ``serial`` encodes the time of day and is dropped.
    Raises ``ValueError`` for non-finite or out-of-range serials.
    """

    try:
        days = math.floor(serial)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"invalid serial date: {serial!r}") from exc
    try:
        return EXCEL_EPOCH + timedelta(days=days)
    except OverflowError as exc:
        raise ValueError(f"serial date out of range: {serial!r}") from exc


def _parse_date_text(raw: str) -> date:
    s = raw.strip()
    if not s:
        raise ValueError("date is empty")
    # Keep only the calendar part of values like "2024-01-05T13:45:00Z" or
    # "01/05/2024 08:00".
    first = s.split()[0].split("T", 1)[0]
    try:
        return date.fromisoformat(first)
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(first, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date: {raw!r}")


def parse_cell_date(value: object) -> date:
    """Return the calendar date held by a spreadsheet cell.

    Policy, in order: native ``datetime``/``date`` values are used directly
    (datetimes truncated to their date); numbers are serial dates; strings
    are parsed as ``YYYY-MM-DD`` with ``MM/DD/YYYY`` and ``MM/DD/YY`` as
    fallbacks. Anything else raises ``ValueError``.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid date: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return excel_serial_to_date(value)
    if isinstance(value, str):
        return _parse_date_text(value)
    raise ValueError(f"unsupported date cell: {value!r}")


__all__ = ["EXCEL_EPOCH", "excel_serial_to_date", "parse_cell_date"]
