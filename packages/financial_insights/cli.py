"""CLI for the ``financial_insights`` package.

This module exposes callable command handlers (``cmd_preview``,
``cmd_analyze``, ``cmd_summarize``) and a Typer-based console interface.
Environment variables (notably ``OPENAI_API_KEY``) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Business logic lives
in ``financial_insights.api`` and related modules; this module only loads
files, reports errors and renders results.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typer.models import OptionInfo

from .logging_setup import configure_logging

# ---- Small module-level helpers used by CLI commands -------------------------


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _load(file_path: str, *, use_cache: bool, account: str | None = None):
    """Import ``file_path`` and apply the account filter.

    Returns ``(transactions, exit_code)``; ``exit_code`` is non-zero when an
    error was already reported to stderr.
    """

    from .analysis import filter_by_account
    from .cache import DiskParseCache
    from .ingest.utils import load_transactions_from_file
    from .normalizers import SchemaError

    cache = DiskParseCache() if use_cache else None
    try:
        transactions = load_transactions_from_file(file_path, cache=cache)
    except FileNotFoundError:
        return [], _error(f"File not found: {file_path}")
    except PermissionError:
        return [], _error(f"Permission denied: {file_path}")
    except SchemaError as e:
        return [], _error(f"Invalid file layout: {e}")
    except ValueError as e:
        return [], _error(str(e))

    if not transactions:
        return [], _error(f"No valid transactions found in {file_path}")

    transactions = filter_by_account(transactions, account)
    if not transactions:
        return [], _error(f"No transactions found for account {account!r}")
    return transactions, 0


def _fmt(value) -> str:
    return f"{value:,.2f}"


def cmd_preview(file_path: str, *, use_cache: bool = True) -> int:
    """Print the staged transactions parsed from ``file_path``."""

    transactions, code = _load(file_path, use_cache=use_cache)
    if code:
        return code

    table = Table(title=f"Staged transactions ({len(transactions)})")
    for header in ("Date", "Description", "Amount", "Category", "Account"):
        table.add_column(header, justify="right" if header == "Amount" else "left")
    for tx in transactions:
        table.add_row(
            tx.date.isoformat(),
            tx.description,
            _fmt(tx.amount),
            tx.category or "",
            tx.account or "",
        )
    Console().print(table)
    return 0


def cmd_analyze(
    file_path: str,
    *,
    account: str | None = None,
    as_json: bool = False,
    use_cache: bool = True,
) -> int:
    """Print totals, the monthly series and the category ranking."""

    from .analysis import analyze_transactions

    transactions, code = _load(file_path, use_cache=use_cache, account=account)
    if code:
        return code
    analysis = analyze_transactions(transactions)

    if as_json:
        typer.echo(json.dumps(analysis.to_dict(), indent=2))
        return 0

    console = Console()
    totals = Table(title="Totals", show_header=False)
    totals.add_column("Metric")
    totals.add_column("Amount", justify="right")
    totals.add_row("Total income", _fmt(analysis.total_income))
    totals.add_row("Total expenses", _fmt(analysis.total_expenses))
    totals.add_row("Net savings", _fmt(analysis.net_savings))
    console.print(totals)

    monthly = Table(title="Monthly summary")
    monthly.add_column("Month")
    monthly.add_column("Income", justify="right")
    monthly.add_column("Expenses", justify="right")
    for row in analysis.monthly_summaries:
        monthly.add_row(row.month, _fmt(row.income), _fmt(row.expenses))
    console.print(monthly)

    categories = Table(title="Expenses by category")
    categories.add_column("Category")
    categories.add_column("Spent", justify="right")
    for cat in analysis.category_summaries:
        categories.add_row(cat.name, _fmt(cat.value))
    console.print(categories)
    return 0


def cmd_summarize(
    file_path: str,
    *,
    account: str | None = None,
    model: str | None = None,
    use_cache: bool = True,
) -> int:
    """Print an AI-generated summary of the file's transactions."""

    from .summarize import SummaryError, summarize_transactions

    transactions, code = _load(file_path, use_cache=use_cache, account=account)
    if code:
        return code

    try:
        summary = summarize_transactions(transactions, model=model)
    except SummaryError as e:
        return _error(str(e))

    console = Console()
    console.print(Panel(summary.overall_summary, title="Overview"))
    console.print(Panel(summary.income_analysis, title="Income"))
    console.print(Panel(summary.expense_analysis, title="Expenses"))
    if summary.actionable_insights:
        console.print(
            Panel(
                "\n".join(f"- {tip}" for tip in summary.actionable_insights),
                title="Actionable insights",
            )
        )
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import transaction spreadsheets (CSV/XLSX), analyze income and spending, "
        "and request an AI summary. Loads OPENAI_API_KEY from a local .env."
    ),
)


# Shared by every command through ``Annotated``; it must keep ``...`` as its
# default because Typer rejects defaults inside ``Annotated`` metadata.
FILE_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--file",
    "-f",
    help="Path to a CSV or XLSX export with at least Date and Amount columns",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler reports nice errors
)


@app.command("preview")
def preview_cmd(
    file_path: Annotated[Path, FILE_OPTION],
    *,
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the on-disk parse cache."),
) -> None:
    """Show the transactions a file would import."""

    raise typer.Exit(cmd_preview(str(file_path), use_cache=not no_cache))


@app.command("analyze")
def analyze_cmd(
    file_path: Annotated[Path, FILE_OPTION],
    *,
    account: str | None = typer.Option(
        None, "--account", help="Only include transactions booked to this account."
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit the analysis as JSON."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the on-disk parse cache."),
) -> None:
    """Aggregate a file into totals, monthly and category summaries."""

    raise typer.Exit(
        cmd_analyze(str(file_path), account=account, as_json=as_json, use_cache=not no_cache)
    )


@app.command("summarize")
def summarize_cmd(
    file_path: Annotated[Path, FILE_OPTION],
    *,
    account: str | None = typer.Option(
        None, "--account", help="Only include transactions booked to this account."
    ),
    model: str | None = typer.Option(
        None, help="Override the model (falls back to FI_SUMMARY_MODEL)."
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the on-disk parse cache."),
) -> None:
    """Generate an AI summary of a file's transactions."""

    raise typer.Exit(
        cmd_summarize(str(file_path), account=account, model=model, use_cache=not no_cache)
    )


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to FINANCIAL_INSIGHTS_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
