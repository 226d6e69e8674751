"""Public interface for the ``financial_insights`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .analysis import analyze_transactions, filter_by_account
from .api import analyze_file, import_transactions
from .cache import DiskParseCache, InMemoryParseCache, ParseCache, compute_file_key
from .ctv import UNCATEGORIZED, CanonicalTransaction
from .dates import excel_serial_to_date, parse_cell_date
from .models import AiSummary, CategorySummary, FinancialAnalysis, MonthlySummary
from .normalizers import SchemaError, normalize_rows, resolve_columns
from .summarize import SummaryError, summarize_transactions

__all__ = [
    # API
    "analyze_file",
    "analyze_transactions",
    "filter_by_account",
    "import_transactions",
    "normalize_rows",
    "resolve_columns",
    "summarize_transactions",
    # Models / types
    "AiSummary",
    "CanonicalTransaction",
    "CategorySummary",
    "FinancialAnalysis",
    "MonthlySummary",
    "UNCATEGORIZED",
    # Caches
    "DiskParseCache",
    "InMemoryParseCache",
    "ParseCache",
    "compute_file_key",
    # Errors
    "SchemaError",
    "SummaryError",
    # Helpers
    "excel_serial_to_date",
    "parse_cell_date",
]
