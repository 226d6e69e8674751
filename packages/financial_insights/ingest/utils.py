"""Ingest utilities shared by the CLI and library callers.

Exposes a single helper that turns a spreadsheet or CSV file into Canonical
Transaction View records, consulting an optional parse cache first.
"""

from __future__ import annotations

from collections.abc import Callable
from os import PathLike
from pathlib import Path

from ..cache import ParseCache, compute_file_key
from ..ctv import CanonicalTransaction
from ..logging_setup import get_logger
from ..normalizers import normalize_rows
from .readers import read_grid

_logger = get_logger("financial_insights.ingest")


def load_transactions_from_file(
    path: str | PathLike[str],
    *,
    cache: ParseCache | None = None,
    id_factory: Callable[[int], str] | None = None,
) -> list[CanonicalTransaction]:
    """Read ``path`` and return its normalized transactions.

    When ``cache`` is given, the file's identity (path, size, mtime) is used
    as the key; a hit skips reading and normalizing entirely. Schema errors
    from the normalizer propagate and nothing is cached for that file.
    """

    p = Path(path)
    key = compute_file_key(p) if cache is not None else None
    if cache is not None and key is not None:
        hit = cache.get(key)
        if hit is not None:
            _logger.info("ingest:cache_hit path=%s rows=%d", p, len(hit))
            return hit

    grid = read_grid(p)
    transactions = normalize_rows(grid, id_factory=id_factory)

    if cache is not None and key is not None:
        cache.set(key, transactions)
    return transactions


__all__ = ["load_transactions_from_file"]
