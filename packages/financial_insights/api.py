"""Public API for the ``financial_insights`` package.

The pure building blocks live in their own modules
(:mod:`~financial_insights.normalizers`, :mod:`~financial_insights.analysis`,
:mod:`~financial_insights.summarize`) and are re-exported here. The two
file-level helpers below chain them for callers that start from a path.
"""

from __future__ import annotations

from os import PathLike

from .analysis import analyze_transactions, filter_by_account
from .cache import ParseCache
from .ctv import CanonicalTransaction
from .ingest.utils import load_transactions_from_file
from .models import AiSummary, FinancialAnalysis
from .normalizers import normalize_rows
from .summarize import summarize_transactions


def import_transactions(
    path: str | PathLike[str], *, cache: ParseCache | None = None
) -> list[CanonicalTransaction]:
    """Read and normalize a CSV/Excel export into CTV records."""

    return load_transactions_from_file(path, cache=cache)


def analyze_file(
    path: str | PathLike[str],
    *,
    account: str | None = None,
    cache: ParseCache | None = None,
) -> FinancialAnalysis:
    """Import ``path`` and aggregate it, optionally narrowed to one account."""

    transactions = filter_by_account(import_transactions(path, cache=cache), account)
    return analyze_transactions(transactions)


__all__ = [
    "AiSummary",
    "analyze_file",
    "analyze_transactions",
    "filter_by_account",
    "import_transactions",
    "normalize_rows",
    "summarize_transactions",
]
