"""Canonical Transaction View (CTV) model.

A CTV record is what the ingestion normalizer emits and what the aggregation
engine consumes. Field order (exact):

    - id: string, assigned at import time (never user supplied)
    - date: calendar date without time-of-day
    - description: string, ``"N/A"`` when the source has none
    - amount: signed ``Decimal``; positive is income, zero or negative is an
      expense. There is no separate type field.
    - category: string | None
    - account: string | None

``None`` is the only representation of a missing category or account; empty
strings never appear in those fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as Date
from decimal import Decimal

UNCATEGORIZED = "Uncategorized"
NO_DESCRIPTION = "N/A"


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """A single canonicalized transaction row."""

    id: str
    date: Date
    description: str
    amount: Decimal
    category: str | None = None
    account: str | None = None

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        # Zero-amount rows fall on the expense side.
        return not self.amount > 0


__all__ = ["NO_DESCRIPTION", "UNCATEGORIZED", "CanonicalTransaction"]
