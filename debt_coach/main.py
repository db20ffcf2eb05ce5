"""Command-line interface for the debt payoff coach.

This module uses the ``click`` library to implement a multi-command
interface. Users can print a full payoff schedule, view summary KPIs with the
minimums-only comparison, or compare the avalanche and snowball strategies on
the same debts. Schedules can be exported to JSON or CSV files.

Debts are given either as repeated ``--debt NAME:BALANCE:APR:MIN[:DUE_DAY]``
options or as a JSON file holding a list of debt objects, for example::

    debt-coach schedule --debt "Visa:5.2k:22.99:110" --extra 400
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .data_models import PlanResult
from .engine import simulate_plan
from .formatter import (
    plan_to_dict,
    print_comparison,
    print_insights,
    print_payoff_table,
    print_schedule,
    print_summary,
)
from .insights import (
    extra_payment_streak,
    milestones,
    only_minimums_plan,
    payoff_order,
    plan_progress,
    plan_summary,
)
from .strategies import STRATEGIES
from .utils import ensure_ids, parse_start_date

logger = logging.getLogger(__name__)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("5200") and shorthand with ``k``/``m`` suffixes
    (e.g., "5.2k" meaning 5_200). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_percent(value: str) -> float:
    """Parse an APR string such as "22.99" or "22.99%" (percent units)."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        return float(value)
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")


def parse_debt_strings(values: Tuple[str, ...]) -> List[Dict[str, Any]]:
    debts: List[Dict[str, Any]] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (4, 5):
            raise click.BadParameter(
                f"Debt must be in NAME:BALANCE:APR:MIN[:DUE_DAY] format; got {item}"
            )
        name, balance, apr, minimum = parts[:4]
        due_day = 1
        if len(parts) == 5:
            try:
                due_day = int(parts[4])
            except ValueError:
                raise click.BadParameter(f"Invalid due day: {parts[4]}")
        debts.append(
            {
                "name": name.strip(),
                "balance": parse_amount(balance),
                "apr": parse_percent(apr),
                "minimum_payment": parse_amount(minimum),
                "due_day": due_day,
            }
        )
    return debts


def load_debts_file(path: Path) -> List[Dict[str, Any]]:
    """Load a JSON list of debt objects (or ``{"debts": [...]}``) from ``path``."""
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise click.BadParameter(f"Cannot read debts file {path}: {exc}")
    if isinstance(data, dict):
        data = data.get("debts", [])
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise click.BadParameter(f"Debts file {path} must contain a list of objects")
    return data


def build_debts_from_options(
    debt: Tuple[str, ...], debts_file: Optional[str]
) -> List[Dict[str, Any]]:
    debts: List[Dict[str, Any]] = []
    if debts_file:
        debts.extend(load_debts_file(Path(debts_file)))
    debts.extend(parse_debt_strings(debt))
    if not debts:
        raise click.BadParameter("Provide at least one --debt or a --debts-file")
    return ensure_ids(debts)


def resolve_start_date(start_date: Optional[str]) -> date:
    if not start_date:
        return date.today()
    try:
        return parse_start_date(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def export_to_json(path: Path, result: PlanResult, summary: Dict[str, Any]) -> None:
    """Export the plan and its summary to a JSON file."""
    data = {"summary": summary, **plan_to_dict(result)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: PlanResult) -> None:
    """Export the monthly plan to a CSV file, two columns per debt."""
    header = ["Month", "Date"]
    for outcome in result.payoff:
        header.extend([f"{outcome.name}_Payment", f"{outcome.name}_Remaining"])
    header.extend(["Interest", "Total_Remaining"])
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in result.plan:
            cells: List[Any] = [row.month_index + 1, row.date.strftime("%Y-%m")]
            for payment, remaining in zip(row.payments, row.remaining):
                cells.extend([float(payment), float(remaining)])
            cells.extend([float(row.interest), float(row.total_remaining)])
            writer.writerow(cells)


def debt_options(func):
    """Attach the options shared by every command."""
    options = [
        click.option("--debt", "debt", multiple=True, help="Debt in NAME:BALANCE:APR:MIN[:DUE_DAY] format"),
        click.option("--debts-file", "debts_file", type=click.Path(exists=True, dir_okay=False), help="JSON file with a list of debts"),
        click.option("--extra", "-e", "extra", default="0", help="Extra amount paid each month on top of minimums"),
        click.option("--start-date", "-s", "start_date", help="Simulation start (YYYY-MM or YYYY-MM-DD); defaults to today"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """Plan debt payoff with the avalanche or snowball strategy."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@debt_options
@click.option("--strategy", "strategy", type=click.Choice(sorted(STRATEGIES)), default="avalanche", help="Which debt receives the extra first")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    debt: Tuple[str, ...],
    debts_file: Optional[str],
    extra: str,
    start_date: Optional[str],
    strategy: str,
    output: Optional[str],
) -> None:
    """Compute and print the month-by-month payoff schedule."""
    debts = build_debts_from_options(debt, debts_file)
    start = resolve_start_date(start_date)
    result = simulate_plan(debts, parse_amount(extra), strategy, start)
    summary = plan_summary(result, only_minimums_plan(debts, start))
    logger.info("Plan takes %d months with %s", result.months, strategy)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result, summary)
            click.echo(f"Schedule exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_summary(summary)
        # Limit schedule length printed to avoid flooding the terminal
        max_rows = 120
        names = [p.name for p in result.payoff]
        if len(result.plan) > max_rows:
            click.echo(
                f"Schedule has {len(result.plan)} rows; showing first {max_rows} rows."
            )
            print_schedule(result.plan[:max_rows], names)
        else:
            print_schedule(result.plan, names)


@cli.command()
@debt_options
@click.option("--strategy", "strategy", type=click.Choice(sorted(STRATEGIES)), default="avalanche", help="Which debt receives the extra first")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    debt: Tuple[str, ...],
    debts_file: Optional[str],
    extra: str,
    start_date: Optional[str],
    strategy: str,
    output: Optional[str],
) -> None:
    """Print KPIs, payoff order, streak and milestones for a plan."""
    debts = build_debts_from_options(debt, debts_file)
    start = resolve_start_date(start_date)
    result = simulate_plan(debts, parse_amount(extra), strategy, start)
    summary_data = plan_summary(result, only_minimums_plan(debts, start))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
        return
    progress = plan_progress(debts, result)
    print_summary(summary_data)
    print_payoff_table(payoff_order(result))
    print_insights(
        extra_payment_streak(debts, result), progress, milestones(progress["progress"])
    )


@cli.command()
@debt_options
def compare(
    debt: Tuple[str, ...],
    debts_file: Optional[str],
    extra: str,
    start_date: Optional[str],
) -> None:
    """Compare the avalanche and snowball strategies for the same debts."""
    debts = build_debts_from_options(debt, debts_file)
    start = resolve_start_date(start_date)
    amount = parse_amount(extra)
    avalanche = plan_summary(simulate_plan(debts, amount, "avalanche", start))
    snowball = plan_summary(simulate_plan(debts, amount, "snowball", start))
    print_comparison(avalanche, snowball)


if __name__ == "__main__":
    cli()
