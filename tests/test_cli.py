import csv
import json

from click.testing import CliRunner

from debt_coach.main import cli, parse_amount, parse_debt_strings


def test_parse_debt_strings_with_suffixes():
    debts = parse_debt_strings(("Visa:5.2k:22.99%:110:12", "Auto:9800:6.5:275"))
    assert debts[0] == {"name": "Visa", "balance": 5200.0, "apr": 22.99, "minimum_payment": 110.0, "due_day": 12}
    assert debts[1]["due_day"] == 1
    assert parse_amount("1,500") == 1500.0


def test_schedule_prints_summary_and_rows():
    runner = CliRunner()
    result = runner.invoke(cli, ["schedule", "--debt", "Card:1200:12:100", "--start-date", "2026-01"])
    assert result.exit_code == 0, result.output
    assert "Months to debt-free" in result.output
    assert "Card pay" in result.output
    assert "1112.00" in result.output


def test_schedule_exports_json(tmp_path):
    out = tmp_path / "plan.json"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "schedule",
            "--debt", "X:1000:20:50",
            "--debt", "Y:500:10:50",
            "--extra", "200",
            "--start-date", "2026-01-01",
            "--output", str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["plan"][0]["payments"] == [250.0, 50.0]
    assert data["plan"][0]["date"] == "2026-02-01"
    assert len(data["plan"]) == data["months"] == data["summary"]["months"]
    assert data["summary"]["paid_off"] is True
    assert data["summary"]["comparison"]["interest_saved"] > 0


def test_schedule_exports_csv(tmp_path):
    out = tmp_path / "plan.csv"
    runner = CliRunner()
    result = runner.invoke(cli, ["schedule", "--debt", "Loan:1000:0:100", "--start-date", "2026-01", "--output", str(out)])
    assert result.exit_code == 0, result.output
    with out.open(newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Month", "Date", "Loan_Payment", "Loan_Remaining", "Interest", "Total_Remaining"]
    assert len(rows) == 11
    assert rows[-1][0] == "10"


def test_summary_from_debts_file(tmp_path):
    debts_file = tmp_path / "debts.json"
    debts_file.write_text(
        json.dumps(
            [
                {"name": "Visa", "balance": 5200, "apr": 22.99, "min": 110, "dueDay": 12},
                {"name": "Store Card", "balance": 1350, "apr": 25.49, "min": 35, "dueDay": 18},
            ]
        )
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["summary", "--debts-file", str(debts_file), "--extra", "300", "--strategy", "snowball"])
    assert result.exit_code == 0, result.output
    assert "Interest saved" in result.output
    assert "Store Card" in result.output
    assert "Extra-payment streak" in result.output
    assert "Milestones" in result.output


def test_compare_shows_both_strategies():
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["compare", "--debt", "A:2000:10:40", "--debt", "B:3000:25:60", "--debt", "C:1500:18:30", "--extra", "100"],
    )
    assert result.exit_code == 0, result.output
    assert "Avalanche" in result.output
    assert "Snowball" in result.output
    assert "total_interest" in result.output


def test_bad_debt_string_is_rejected():
    runner = CliRunner()
    result = runner.invoke(cli, ["schedule", "--debt", "Card:1200"])
    assert result.exit_code != 0
    assert "NAME:BALANCE:APR:MIN" in result.output


def test_missing_debts_is_rejected():
    runner = CliRunner()
    result = runner.invoke(cli, ["schedule"])
    assert result.exit_code != 0
    assert "--debt" in result.output
