"""Prompt construction and transaction serialization for AI summaries.

This module builds:
- The simplified transaction projection sent to the model (most recent
  first, capped) and its deterministic JSON serialization.
- The system instructions and user content for the summary task.
- The strict ``response_format`` (JSON Schema) object for the OpenAI
  Responses API.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .ctv import CanonicalTransaction

SUMMARY_FIELD_ORDER: tuple[str, ...] = (
    "date",
    "amount",
    "category",
    "description",
    "account",
)

# Keeps the prompt within a predictable token budget.
DEFAULT_PROJECTION_LIMIT: int = 200

BEGIN = "BEGIN_TRANSACTIONS_JSON\n"
END = "\nEND_TRANSACTIONS_JSON"


def build_summary_projection(
    transactions: Sequence[CanonicalTransaction],
    *,
    limit: int = DEFAULT_PROJECTION_LIMIT,
) -> list[dict[str, Any]]:
    """Return the newest ``limit`` transactions as plain dicts.

    Ordering is by date descending; transactions sharing a date keep their
    input order. Each item carries exactly the fields in
    :data:`SUMMARY_FIELD_ORDER`.
    """

    if limit < 0:
        raise ValueError("limit must be non-negative")
    newest_first = sorted(transactions, key=lambda tx: tx.date, reverse=True)
    return [
        {
            "date": tx.date.isoformat(),
            "amount": float(tx.amount),
            "category": tx.category,
            "description": tx.description,
            "account": tx.account,
        }
        for tx in newest_first[:limit]
    ]


def serialize_projection_to_json(items: Sequence[dict[str, Any]]) -> str:
    """Serialize projection items to a JSON array with a fixed field order."""

    arr = [{key: item.get(key) for key in SUMMARY_FIELD_ORDER} for item in items]
    return json.dumps(arr, ensure_ascii=False)


def build_system_instructions() -> str:
    return (
        "You are a personal finance assistant. You analyze a user's transactions "
        "from one or more accounts. A positive amount is income and a zero or "
        "negative amount is an expense. Be concise and concrete, never invent "
        "transactions, and output JSON only that conforms to the specified schema."
    )


def build_user_content(projection_json: str) -> str:
    """Build the user message embedding the transactions between markers."""

    return (
        "Analyze the following financial transactions and provide a concise, helpful "
        "financial summary. Consider trends across different accounts if applicable.\n"
        "Return:\n"
        "- overallSummary: one sentence on overall financial health.\n"
        "- incomeAnalysis: a short paragraph on income sources and trends.\n"
        "- expenseAnalysis: a short paragraph on spending habits, top categories and "
        "potential savings.\n"
        "- actionableInsights: 3-5 concrete suggestions for improvement.\n\n"
        f"{BEGIN}{projection_json}{END}"
    )


def build_response_format() -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema response_format object."""

    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": "financial_summary",
        "schema": {
            "type": "object",
            "properties": {
                "overallSummary": {"type": "string"},
                "incomeAnalysis": {"type": "string"},
                "expenseAnalysis": {"type": "string"},
                "actionableInsights": {
                    "type": "array",
                    "items": {"type": "string"},
                },
            },
            "required": [
                "overallSummary",
                "incomeAnalysis",
                "expenseAnalysis",
                "actionableInsights",
            ],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result


__all__ = [
    "BEGIN",
    "DEFAULT_PROJECTION_LIMIT",
    "END",
    "SUMMARY_FIELD_ORDER",
    "build_response_format",
    "build_summary_projection",
    "build_system_instructions",
    "build_user_content",
    "serialize_projection_to_json",
]
