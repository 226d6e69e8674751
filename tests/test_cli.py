import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import financial_insights.cli as cli_mod
import financial_insights.summarize as summarize_mod
from tests.helpers.openai_stub import HttpError, OpenAIStub

CSV_TEXT = (
    "Date,Description,Amount,Category,Account\n"
    "2024-01-05,Payroll,100,Salary,Checking\n"
    "2024-01-10,Groceries,-40,Food,Card\n"
    "not-a-date,Broken,-1,Food,Card\n"
    "2024-02-01,Rent,-1000000,,Checking\n"
)


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Keep the package logger untouched so caplog in other modules still works.
    monkeypatch.setattr(cli_mod, "configure_logging", lambda *_a, **_k: None)
    return CliRunner()


@pytest.fixture
def export_csv(tmp_path: Path) -> Path:
    path = tmp_path / "export.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return path


def test_analyze_json(runner: CliRunner, export_csv: Path):
    result = runner.invoke(cli_mod.app, ["analyze", "--file", str(export_csv), "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["totalIncome"] == 100.0
    assert data["totalExpenses"] == -1000040.0
    assert data["netSavings"] == -999940.0
    assert [c["name"] for c in data["categorySummaries"]] == ["Uncategorized", "Food"]
    assert [m["month"] for m in data["monthlySummaries"]] == ["Jan 24", "Feb 24"]
    assert len(data["transactions"]) == 3


def test_analyze_account_filter(runner: CliRunner, export_csv: Path):
    result = runner.invoke(
        cli_mod.app, ["analyze", "-f", str(export_csv), "--account", "Card", "--json"]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["totalIncome"] == 0.0
    assert data["totalExpenses"] == -40.0


def test_analyze_unknown_account_fails(runner: CliRunner, export_csv: Path):
    result = runner.invoke(cli_mod.app, ["analyze", "-f", str(export_csv), "--account", "Savings"])

    assert result.exit_code == 1
    assert "No transactions found for account" in result.output


def test_analyze_tables(runner: CliRunner, export_csv: Path):
    result = runner.invoke(cli_mod.app, ["analyze", "-f", str(export_csv)])

    assert result.exit_code == 0, result.output
    assert "Net savings" in result.stdout
    assert "-999,940.00" in result.stdout
    assert "Feb 24" in result.stdout
    assert "Uncategorized" in result.stdout


def test_analyze_second_run_hits_disk_cache(runner: CliRunner, export_csv: Path):
    first = runner.invoke(cli_mod.app, ["analyze", "-f", str(export_csv), "--json"])
    second = runner.invoke(cli_mod.app, ["analyze", "-f", str(export_csv), "--json"])

    assert first.exit_code == second.exit_code == 0
    assert json.loads(first.stdout) == json.loads(second.stdout)


def test_preview_lists_rows(runner: CliRunner, export_csv: Path):
    result = runner.invoke(cli_mod.app, ["preview", "-f", str(export_csv), "--no-cache"])

    assert result.exit_code == 0, result.output
    assert "Staged transactions (3)" in result.stdout
    assert "Payroll" in result.stdout


def test_missing_file(runner: CliRunner, tmp_path: Path):
    result = runner.invoke(cli_mod.app, ["analyze", "-f", str(tmp_path / "nope.csv")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_schema_error_is_reported(runner: CliRunner, tmp_path: Path):
    path = tmp_path / "bad.csv"
    path.write_text("When,Value\n2024-01-01,1\n", encoding="utf-8")

    result = runner.invoke(cli_mod.app, ["analyze", "-f", str(path)])

    assert result.exit_code == 1
    assert "Invalid file layout" in result.output


def test_no_valid_rows_is_reported(runner: CliRunner, tmp_path: Path):
    path = tmp_path / "empty.csv"
    path.write_text("Date,Amount\nsoon,1\n", encoding="utf-8")

    result = runner.invoke(cli_mod.app, ["preview", "-f", str(path)])

    assert result.exit_code == 1
    assert "No valid transactions" in result.output


def test_unsupported_file_type(runner: CliRunner, tmp_path: Path):
    path = tmp_path / "export.pdf"
    path.write_bytes(b"%PDF")

    result = runner.invoke(cli_mod.app, ["preview", "-f", str(path)])

    assert result.exit_code == 1
    assert "unsupported file type" in result.output


def test_corrupt_workbook_is_reported(runner: CliRunner, tmp_path: Path):
    path = tmp_path / "export.xlsx"
    path.write_bytes(b"this is not a zip archive")

    result = runner.invoke(cli_mod.app, ["analyze", "-f", str(path)])

    assert result.exit_code == 1
    assert "Error: not a readable Excel workbook" in result.output


def test_summarize_prints_panels(
    runner: CliRunner, export_csv: Path, monkeypatch: pytest.MonkeyPatch
):
    stub = OpenAIStub()
    monkeypatch.setattr(summarize_mod, "_create_client", lambda: stub)

    result = runner.invoke(cli_mod.app, ["summarize", "-f", str(export_csv), "--model", "m1"])

    assert result.exit_code == 0, result.output
    assert "You saved money" in result.stdout
    assert "Automate savings." in result.stdout
    assert stub.calls[0]["model"] == "m1"


def test_summarize_reports_api_failure(
    runner: CliRunner, export_csv: Path, monkeypatch: pytest.MonkeyPatch
):
    stub = OpenAIStub(failures=[HttpError(400)])
    monkeypatch.setattr(summarize_mod, "_create_client", lambda: stub)

    result = runner.invoke(cli_mod.app, ["summarize", "-f", str(export_csv)])

    assert result.exit_code == 1
    assert "Failed to generate" in result.output
