"""Transaction aggregation: totals, monthly series and category ranking.

:func:`analyze_transactions` is a pure, single-pass reduction over CTV
records. It performs no I/O and no filtering; callers narrow the input first
(for example with :func:`filter_by_account`).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from .ctv import UNCATEGORIZED, CanonicalTransaction
from .models import CategorySummary, FinancialAnalysis, MonthlySummary

_ZERO = Decimal(0)


def _month_key(d: date) -> str:
    # Zero-padded so lexicographic order is chronological order.
    return f"{d.year:04d}-{d.month:02d}"


def _month_label(month_key: str) -> str:
    """Render ``"2024-01"`` as ``"Jan 24"``.

    Formats from the 2nd of the month so no timezone shift can move the label
    into the previous month.
    """

    year, month = month_key.split("-")
    return date(int(year), int(month), 2).strftime("%b %y")


def analyze_transactions(transactions: Sequence[CanonicalTransaction]) -> FinancialAnalysis:
    """Reduce ``transactions`` into a :class:`FinancialAnalysis`.

    Classification uses the sign only: ``amount > 0`` is income; everything
    else, zero included, is an expense. Expense categories fall back to
    ``"Uncategorized"`` when ``category`` is ``None``.

    Output ordering:
    - ``monthly_summaries``: ascending by ``YYYY-MM`` key.
    - ``category_summaries``: descending by value; equal values keep the
      order in which their categories were first seen.
    """

    total_income = _ZERO
    total_expenses = _ZERO
    monthly: dict[str, dict[str, Decimal]] = {}
    by_category: dict[str, Decimal] = {}

    for tx in transactions:
        bucket = monthly.setdefault(_month_key(tx.date), {"income": _ZERO, "expenses": _ZERO})
        if tx.amount > 0:
            total_income += tx.amount
            bucket["income"] += tx.amount
        else:
            total_expenses += tx.amount
            spent = abs(tx.amount)
            bucket["expenses"] += spent
            name = tx.category or UNCATEGORIZED
            by_category[name] = by_category.get(name, _ZERO) + spent

    monthly_summaries = tuple(
        MonthlySummary(
            month=_month_label(key),
            income=monthly[key]["income"],
            expenses=monthly[key]["expenses"],
        )
        for key in sorted(monthly)
    )

    # sorted() is stable, and stays stable with reverse=True, so ties keep
    # first-seen (dict insertion) order.
    ranked = sorted(by_category.items(), key=lambda item: item[1], reverse=True)
    category_summaries = tuple(CategorySummary(name=name, value=value) for name, value in ranked)

    return FinancialAnalysis(
        total_income=total_income,
        total_expenses=total_expenses,
        net_savings=total_income + total_expenses,
        monthly_summaries=monthly_summaries,
        category_summaries=category_summaries,
        transactions=transactions,
    )


def filter_by_account(
    transactions: Iterable[CanonicalTransaction], account: str | None
) -> list[CanonicalTransaction]:
    """Return transactions booked to ``account``; ``None`` keeps everything."""

    if account is None:
        return list(transactions)
    return [tx for tx in transactions if tx.account == account]


__all__ = ["analyze_transactions", "filter_by_account"]
