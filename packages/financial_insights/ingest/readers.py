"""Decode spreadsheet-like files into header-first grids of cells.

The normalizer only understands grids (``list`` of rows, row 0 = headers).
This module is the step before it: delimited text goes through the stdlib
:mod:`csv` reader, Excel workbooks through :mod:`openpyxl`. Excel date cells
come back as native ``datetime`` values; CSV cells are always strings.

Blank rows are kept so that grid index ``i`` is spreadsheet row ``i + 1``;
the normalizer skips them and its ``line=`` numbers match what a user sees.
"""

from __future__ import annotations

import csv
import zipfile
from os import PathLike
from pathlib import Path

Grid = list[list[object]]

CSV_SUFFIXES: frozenset[str] = frozenset({".csv", ".txt"})
EXCEL_SUFFIXES: frozenset[str] = frozenset({".xlsx", ".xlsm"})


def read_csv_grid(path: str | PathLike[str]) -> Grid:
    """Read a delimited text file, one grid row per CSV record."""

    p = Path(path)
    # utf-8-sig strips the BOM spreadsheet tools like to prepend.
    with p.open(encoding="utf-8-sig", newline="") as f:
        return [list(row) for row in csv.reader(f)]


def read_excel_grid(path: str | PathLike[str]) -> Grid:
    """Read the first worksheet of an ``.xlsx`` workbook.

    Formulas are read as their cached values and empty cells become ``""``.
    A file that is not a readable workbook raises ``ValueError``.
    """

    from openpyxl import load_workbook
    from openpyxl.utils.exceptions import InvalidFileException

    try:
        wb = load_workbook(filename=str(path), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError) as exc:
        raise ValueError(f"not a readable Excel workbook: {Path(path).name}") from exc
    try:
        ws = wb.worksheets[0]
        return [
            ["" if v is None else v for v in values] for values in ws.iter_rows(values_only=True)
        ]
    finally:
        wb.close()


def read_grid(path: str | PathLike[str]) -> Grid:
    """Dispatch on file suffix and return the file's grid of cells.

    Raises ``ValueError`` for unsupported file types.
    """

    suffix = Path(path).suffix.lower()
    if suffix in CSV_SUFFIXES:
        return read_csv_grid(path)
    if suffix in EXCEL_SUFFIXES:
        return read_excel_grid(path)
    supported = ", ".join(sorted(CSV_SUFFIXES | EXCEL_SUFFIXES))
    raise ValueError(f"unsupported file type {suffix or '(none)'!r}; expected one of: {supported}")


__all__ = ["Grid", "read_csv_grid", "read_excel_grid", "read_grid"]
