"""Output helpers for the debt payoff coach.

This module renders plan results as plain text tables for the terminal and
converts them into JSON-serialisable dictionaries for export and the web
API. Only built-in printing and string formatting are used.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from .data_models import MonthRow, PlanResult


def plan_to_dict(result: PlanResult) -> Dict[str, Any]:
    """Convert a ``PlanResult`` into plain Python types."""
    return {
        "months": result.months,
        "total_start": float(result.total_start),
        "total_interest": float(result.total_interest),
        "timeline": [
            {
                "month_index": t.month_index,
                "total_balance": float(t.total_balance),
                "interest_paid": float(t.interest_paid),
            }
            for t in result.timeline
        ],
        "payoff": [
            {
                "id": p.id,
                "name": p.name,
                "start_balance": float(p.start_balance),
                "payoff_month_index": p.payoff_month_index,
                "payoff_date": p.payoff_date.isoformat() if p.payoff_date else None,
                "interest_paid": float(p.interest_paid),
            }
            for p in result.payoff
        ],
        "plan": [
            {
                "month_index": row.month_index,
                "date": row.date.isoformat(),
                "payments": [float(v) for v in row.payments],
                "remaining": [float(v) for v in row.remaining],
                "interest": float(row.interest),
                "total_remaining": float(row.total_remaining),
            }
            for row in result.plan
        ],
    }


def print_summary(summary: Dict[str, Any]) -> None:
    """Print plan KPIs in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Starting principal : {summary['total_start']:.2f}")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total cost         : {summary['total_cost']:.2f}")
    if summary["paid_off"]:
        print(f"Months to debt-free: {summary['months']}")
        print(f"Debt-free date     : {summary['debt_free_date']}")
    else:
        print(f"Not paid off after : {summary['months']} months")
        print(f"Remaining balance  : {summary['final_balance']:.2f}")
    comparison = summary.get("comparison")
    if comparison:
        print(f"Minimums-only interest : {comparison['baseline_total_interest']:.2f}")
        print(f"Interest saved         : {comparison['interest_saved']:.2f}")
        if comparison.get("months_saved"):
            print(f"Months saved           : {comparison['months_saved']}")
    print("-" * 72)


def print_schedule(plan: Iterable[MonthRow], names: Sequence[str]) -> None:
    """Print the month-by-month plan as a simple table.

    Each debt gets a payment and a remaining-balance column, in the order of
    ``names``.
    """
    headers = ["Month", "Date"]
    for name in names:
        headers.extend([f"{name} pay", f"{name} left"])
    headers.extend(["Interest", "Remaining"])
    print("\t".join(headers))
    for row in plan:
        cells = [str(row.month_index + 1), row.date.strftime("%Y-%m")]
        for payment, remaining in zip(row.payments, row.remaining):
            cells.extend([f"{payment:.2f}", f"{remaining:.2f}"])
        cells.extend([f"{row.interest:.2f}", f"{row.total_remaining:.2f}"])
        print("\t".join(cells))


def print_payoff_table(rows: List[Dict[str, Any]]) -> None:
    """Print the payoff order table produced by ``insights.payoff_order``."""
    print(f"{'Debt':24s} {'Start balance':>14s} {'Payoff':>10s}")
    for row in rows:
        payoff = row["payoff_date"].strftime("%Y-%m") if row["payoff_date"] else "never"
        print(f"{(row['name'] or '(unnamed)'):24s} {row['start_balance']:14.2f} {payoff:>10s}")


def print_insights(streak: int, progress: Dict[str, Any], badges: List[Dict[str, Any]]) -> None:
    """Print the progress and gamification lines of the summary."""
    print(f"Progress           : {float(progress['progress']) * 100:.0f}%")
    print(f"Extra-payment streak: {streak} month{'' if streak == 1 else 's'} in a row")
    unlocked = [b["label"] for b in badges if b["hit"]]
    print(f"Milestones         : {', '.join(unlocked) if unlocked else 'none yet'}")


def print_comparison(s1: Dict[str, Any], s2: Dict[str, Any], labels: Sequence[str] = ("Avalanche", "Snowball")) -> None:
    """Print two plan summaries side by side.

    The difference column is ``second - first``; a negative value means the
    second plan is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    keys = [
        "months",
        "total_interest",
        "total_cost",
    ]
    print(f"{'Metric':20s} {labels[0]:>15s} {labels[1]:>15s} {'Difference':>15s}")
    for key in keys:
        v1 = s1.get(key)
        v2 = s2.get(key)
        diff = v2 - v1
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print("=" * 72)
