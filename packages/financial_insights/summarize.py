"""AI-generated natural-language summary of a transaction set.

Public API:
    - :func:`summarize_transactions`
    - :class:`SummaryError`

One non-streaming OpenAI Responses call per summary. The model sees only
the simplified projection built by :mod:`financial_insights.prompting` and
must answer with the strict ``financial_summary`` JSON schema, validated into
:class:`~financial_insights.models.AiSummary`. No side effects occur at
import time (no client creation, no environment reads).
"""

from __future__ import annotations

import json
import os
import random
import time
from collections.abc import Mapping, Sequence
from typing import Any

from openai import OpenAI
from openai.types.responses import ResponseTextConfigParam
from pydantic import ValidationError

from . import prompting
from .ctv import CanonicalTransaction
from .logging_setup import get_logger
from .models import AiSummary

# ---- Tunables (private) ------------------------------------------------------

_MAX_ATTEMPTS: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20

_MODEL_DEFAULT: str = "gpt-5-mini"


_logger = get_logger("financial_insights.summarize")


class SummaryError(RuntimeError):
    """The summary could not be produced (API failure or unusable output)."""


# ---- Internal helpers --------------------------------------------------------


def _resolve_model(model: str | None) -> str:
    if model:
        return model
    env_model = os.getenv("FI_SUMMARY_MODEL")
    if env_model and env_model.strip():
        return env_model.strip()
    return _MODEL_DEFAULT


def _create_client() -> OpenAI:
    if not os.getenv("OPENAI_API_KEY"):
        raise SummaryError("OPENAI_API_KEY environment variable is required for AI summaries")
    return OpenAI()


def _extract_response_json_mapping(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON mapping from an OpenAI Responses SDK result.

    Prefers ``resp.output_text``; falls back to ``resp.output[0].content[0].text``.
    Raises ``ValueError`` if text cannot be located or is not a JSON object.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        first = resp.output[0] if getattr(resp, "output", None) else None
        content = getattr(first, "content", None)
        if content:
            txt_obj = getattr(content[0], "text", None)
            if isinstance(txt_obj, str):
                text = txt_obj
            else:
                # Some SDKs expose text as an object with a ``value`` string.
                maybe_val = getattr(txt_obj, "value", None)
                if isinstance(maybe_val, str):
                    text = maybe_val
    if not text or not isinstance(text, str) or not text.strip():
        raise ValueError("Received an empty response from the model")

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("Model output was not valid JSON per the requested schema") from e
    if not isinstance(decoded, Mapping):
        raise ValueError("Model output was not a JSON object")
    return decoded


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for HTTP 429 and 5xx errors."""

    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


def _sleep_backoff(attempt_no: int) -> None:
    if attempt_no - 1 < len(_BACKOFF_SCHEDULE_SEC):
        base = _BACKOFF_SCHEDULE_SEC[attempt_no - 1]
    else:
        base = _BACKOFF_SCHEDULE_SEC[-1]
    jitter = base * _JITTER_PCT
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


# ---- Public API --------------------------------------------------------------


def summarize_transactions(
    transactions: Sequence[CanonicalTransaction],
    *,
    client: Any | None = None,
    model: str | None = None,
    limit: int = prompting.DEFAULT_PROJECTION_LIMIT,
) -> AiSummary:
    """Ask the model for a summary of ``transactions``.

    Parameters
    ----------
    transactions:
        Already filtered CTV records. Only the newest ``limit`` are sent.
    client:
        Optional object shaped like ``openai.OpenAI``. When omitted a client
        is created from ``OPENAI_API_KEY``.
    model:
        Model name; defaults to ``FI_SUMMARY_MODEL`` or ``gpt-5-mini``.

    Raises
    ------
    ValueError
        ``transactions`` is empty.
    SummaryError
        The API call failed (after retrying 429/5xx responses) or the output
        did not match the schema.
    """

    if not transactions:
        raise ValueError("no transactions to summarize")

    projection = prompting.build_summary_projection(transactions, limit=limit)
    user_content = prompting.build_user_content(
        prompting.serialize_projection_to_json(projection)
    )
    text_cfg = ResponseTextConfigParam(format=prompting.build_response_format())
    resolved_model = _resolve_model(model)

    if client is None:
        client = _create_client()

    _logger.info(
        "summarize:request model=%s num_transactions=%d", resolved_model, len(projection)
    )

    attempt = 1
    while True:
        t0 = time.perf_counter()
        try:
            resp = client.responses.create(
                model=resolved_model,
                instructions=prompting.build_system_instructions(),
                input=user_content,
                text=text_cfg,
            )
        except Exception as e:  # noqa: BLE001 - SDK raises a family of error types
            if attempt < _MAX_ATTEMPTS and _is_retryable(e):
                _logger.warning(
                    "summarize:retry attempt=%d status=%s", attempt, getattr(e, "status_code", None)
                )
                _sleep_backoff(attempt)
                attempt += 1
                continue
            raise SummaryError(
                "Failed to generate AI-powered financial summary. The API may be unavailable."
            ) from e
        break

    try:
        decoded = _extract_response_json_mapping(resp)
        summary = AiSummary.model_validate(decoded)
    except (ValueError, ValidationError) as e:
        raise SummaryError(f"AI summary response could not be processed: {e}") from e

    _logger.info(
        "summarize:done latency_ms=%.2f insights=%d",
        (time.perf_counter() - t0) * 1000.0,
        len(summary.actionable_insights),
    )
    return summary


__all__ = ["SummaryError", "summarize_transactions"]
