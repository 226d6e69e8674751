"""Spreadsheet grid → CTV normalizer.

Turns an arbitrary 2-D grid of cells (row 0 holds the headers) into
Canonical Transaction View records. Columns are located by matching trimmed,
lower-cased header text against a small synonym table, so exports from
different tools import without per-provider adapters.

Failure policy:

- A missing header row, or a header without a recognizable date or amount
  column, raises :class:`SchemaError` before any data row is looked at.
- A data row whose date or amount cannot be parsed is logged and skipped.
  One bad line never aborts the whole import.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal, DecimalException

from .ctv import NO_DESCRIPTION, CanonicalTransaction
from .dates import parse_cell_date
from .logging_setup import get_logger

# Synonyms per canonical field, in priority order. Matching is exact on the
# trimmed, lower-cased header text.
HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "date": ("date",),
    "description": ("description", "desc", "details"),
    "amount": ("amount", "value", "total"),
    "category": ("category", "group"),
    "account": ("account", "source"),
}

REQUIRED_FIELDS: tuple[str, ...] = ("date", "amount")

# Larger magnitudes are rejected as corrupt cells.
MAX_ABS_AMOUNT = Decimal("1e15")


_logger = get_logger("financial_insights.normalizers")


class SchemaError(ValueError):
    """The grid has no header row or lacks a required column."""


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Resolved column positions; ``None`` marks an absent optional column."""

    date: int
    amount: int
    description: int | None = None
    category: int | None = None
    account: int | None = None


# ---------------------------------------------------------------------------
# Helpers (header matching, cell coercion)
# ---------------------------------------------------------------------------


def _header_text(cell: object) -> str:
    if cell is None:
        return ""
    return str(cell).strip().lower()


def _find_header_index(headers: Sequence[str], synonyms: Sequence[str]) -> int | None:
    for name in synonyms:
        for idx, header in enumerate(headers):
            if header == name:
                return idx
    return None


def _cell(row: Sequence[object], idx: int | None) -> object:
    if idx is None or idx >= len(row):
        return None
    return row[idx]


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_decimal(raw: str) -> Decimal:
    s = raw.strip()
    if not s:
        raise ValueError("amount is empty")
    negative = False

    # Strip leading sign, currency symbol and accounting parentheses in any
    # order until stable, so "-($1,234.56)" and "$(12.00)" both parse.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()

    try:
        d = Decimal(s)
    except DecimalException as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    _check_amount(d, raw)
    return -d.copy_abs() if negative else d


def _check_amount(d: Decimal, raw: object) -> None:
    if not d.is_finite():
        raise ValueError(f"amount is not finite: {raw!r}")
    if d.copy_abs() >= MAX_ABS_AMOUNT:
        raise ValueError(f"amount out of range: {raw!r}")


def parse_cell_amount(value: object) -> Decimal:
    """Coerce a spreadsheet cell into a finite signed ``Decimal``.

    Raises ``ValueError`` for blanks, booleans, non-numeric text, non-finite
    values (``NaN``/``sNaN``/``Infinity``) and magnitudes of
    :data:`MAX_ABS_AMOUNT` or more. No ``decimal`` signal escapes as anything
    other than ``ValueError``.
    """

    if value is None:
        raise ValueError("amount is required")
    if isinstance(value, bool):
        raise ValueError(f"invalid amount: {value!r}")
    try:
        if isinstance(value, str):
            return _to_decimal(value)
        if isinstance(value, Decimal):
            d = value
        elif isinstance(value, int):
            d = Decimal(value)
        elif isinstance(value, float):
            # repr() keeps the shortest round-tripping form (0.1 -> "0.1").
            d = Decimal(repr(value))
        else:
            raise ValueError(f"unsupported amount cell: {value!r}")
    except DecimalException as exc:
        raise ValueError(f"invalid amount: {value!r}") from exc
    _check_amount(d, value)
    return d


def _new_import_id(_row_index: int) -> str:
    return f"import-{uuid.uuid4().hex}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_columns(header_row: Sequence[object] | None) -> ColumnMap:
    """Map canonical fields to column positions in ``header_row``.

    For each field the synonym list is scanned in priority order and the first
    header equal to a synonym wins. Raises :class:`SchemaError` when the row is
    missing or empty, or when ``date``/``amount`` cannot be resolved.
    """

    if not header_row:
        raise SchemaError("File must contain a header row.")
    headers = [_header_text(cell) for cell in header_row]
    if not any(headers):
        raise SchemaError("File must contain a header row.")

    resolved = {
        field: _find_header_index(headers, synonyms)
        for field, synonyms in HEADER_SYNONYMS.items()
    }
    missing = [field for field in REQUIRED_FIELDS if resolved[field] is None]
    if missing:
        raise SchemaError(
            "File header must contain at least 'Date' and 'Amount' columns "
            f"(missing: {', '.join(missing)})."
        )

    return ColumnMap(
        date=resolved["date"],
        amount=resolved["amount"],
        description=resolved["description"],
        category=resolved["category"],
        account=resolved["account"],
    )


def normalize_rows(
    rows: Sequence[Sequence[object]],
    *,
    id_factory: Callable[[int], str] | None = None,
) -> list[CanonicalTransaction]:
    """Normalize a header-first grid of cells into CTV records.

    Parameters
    ----------
    rows:
        Row 0 is the header row; the rest are data rows holding strings,
        numbers, or native ``date``/``datetime`` values. The grid is not
        modified.
    id_factory:
        Optional callable receiving the 0-based data-row index and returning
        the record id. Defaults to ``"import-<uuid4 hex>"``.

    Returns
    -------
    list[CanonicalTransaction]
        One record per valid data row, in input order.
    """

    if not rows:
        raise SchemaError("File must contain a header row.")
    columns = resolve_columns(rows[0])
    make_id = id_factory or _new_import_id

    out: list[CanonicalTransaction] = []
    skipped = 0
    for i, row in enumerate(rows[1:]):
        # 1-based line number as seen in the spreadsheet (header is line 1).
        line_no = i + 2
        if not any(_cell_text(cell) for cell in row):
            _logger.debug("normalize:blank_row line=%d", line_no)
            skipped += 1
            continue
        try:
            tx_date = parse_cell_date(_cell(row, columns.date))
            amount = parse_cell_amount(_cell(row, columns.amount))
        except ValueError as exc:
            _logger.warning("normalize:skip_row line=%d reason=%s", line_no, exc)
            skipped += 1
            continue

        description = _cell_text(_cell(row, columns.description)) or NO_DESCRIPTION
        category = _cell_text(_cell(row, columns.category)) or None
        account = _cell_text(_cell(row, columns.account)) or None

        out.append(
            CanonicalTransaction(
                id=make_id(i),
                date=tx_date,
                description=description,
                amount=amount,
                category=category,
                account=account,
            )
        )

    _logger.info(
        "normalize:done rows=%d kept=%d skipped=%d", len(rows) - 1, len(out), skipped
    )
    return out


__all__ = [
    "HEADER_SYNONYMS",
    "MAX_ABS_AMOUNT",
    "REQUIRED_FIELDS",
    "ColumnMap",
    "SchemaError",
    "normalize_rows",
    "parse_cell_amount",
    "resolve_columns",
]
