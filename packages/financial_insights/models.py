"""Data models for ``financial_insights``.

Two kinds of models live here:

- Frozen dataclasses for the aggregation output (:class:`FinancialAnalysis`
  and its summary rows). These are plain value objects recomputed on every
  call.
- Pydantic DTOs for data crossing a trust boundary: the AI summary returned
  by the LLM and the on-disk parse cache files.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date as Date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .ctv import CanonicalTransaction

# ---------------------------------------------------------------------------
# Aggregation output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MonthlySummary:
    """Income and expenses for one calendar month.

    ``month`` is a display label such as ``"Jan 24"``; both amounts are
    non-negative.
    """

    month: str
    income: Decimal
    expenses: Decimal


@dataclass(frozen=True, slots=True)
class CategorySummary:
    name: str
    value: Decimal


def _transaction_to_dict(tx: CanonicalTransaction) -> dict[str, Any]:
    return {
        "id": tx.id,
        "date": tx.date.isoformat(),
        "description": tx.description,
        "amount": float(tx.amount),
        "category": tx.category,
        "account": tx.account,
    }


@dataclass(frozen=True, slots=True)
class FinancialAnalysis:
    """Totals and breakdowns computed from a transaction list.

    Attributes
    ----------
    total_income:
        Sum of positive amounts.
    total_expenses:
        Sum of zero and negative amounts (never positive).
    net_savings:
        ``total_income + total_expenses``.
    monthly_summaries:
        One row per month present, oldest first.
    category_summaries:
        One row per expense category, largest first.
    transactions:
        The input transactions, unchanged.
    """

    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal
    monthly_summaries: tuple[MonthlySummary, ...]
    category_summaries: tuple[CategorySummary, ...]
    transactions: Sequence[CanonicalTransaction]

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-compatible camelCase shape used by presentation code."""

        return {
            "totalIncome": float(self.total_income),
            "totalExpenses": float(self.total_expenses),
            "netSavings": float(self.net_savings),
            "monthlySummaries": [
                {"month": m.month, "income": float(m.income), "expenses": float(m.expenses)}
                for m in self.monthly_summaries
            ],
            "categorySummaries": [
                {"name": c.name, "value": float(c.value)} for c in self.category_summaries
            ],
            "transactions": [_transaction_to_dict(tx) for tx in self.transactions],
        }


# ---------------------------------------------------------------------------
# AI summary DTO
# ---------------------------------------------------------------------------


class AiSummary(BaseModel):
    """Validated natural-language summary returned by the LLM.

    Field names follow the camelCase JSON schema on the wire
    (``overallSummary``, ``incomeAnalysis``, ``expenseAnalysis``,
    ``actionableInsights``).
    """

    model_config = ConfigDict(
        strict=True,
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    overall_summary: str
    income_analysis: str
    expense_analysis: str
    actionable_insights: tuple[str, ...]

    @field_validator("overall_summary")
    @classmethod
    def _summary_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("overallSummary must be non-empty")
        return v

    @field_validator("actionable_insights", mode="before")
    @classmethod
    def _normalize_insights(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return v
        return tuple(s.strip() for s in v if isinstance(s, str) and s.strip())


# ---------------------------------------------------------------------------
# DTOs for typed parse-cache I/O
# ---------------------------------------------------------------------------


class CachedTransaction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    date: Date
    description: str
    amount: Decimal
    category: str | None = None
    account: str | None = None

    @classmethod
    def from_ctv(cls, tx: CanonicalTransaction) -> CachedTransaction:
        return cls(
            id=tx.id,
            date=tx.date,
            description=tx.description,
            amount=tx.amount,
            category=tx.category,
            account=tx.account,
        )

    def to_ctv(self) -> CanonicalTransaction:
        return CanonicalTransaction(
            id=self.id,
            date=self.date,
            description=self.description,
            amount=self.amount,
            category=self.category,
            account=self.account,
        )


class ParseCacheFile(BaseModel):
    """Top-level schema for a parse cache JSON file."""

    model_config = ConfigDict(extra="forbid")

    schema_version: int
    key: str
    transactions: list[CachedTransaction]
