"""Derived metrics computed from plan results.

Everything here is a reduction over the output of ``engine.simulate_plan``:
the minimums-only baseline and interest saved, payoff progress, milestone
badges, the extra-payment streak and the payoff order table. None of it
feeds back into the simulation.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .data_models import PlanResult
from .engine import PAID_OFF_TOLERANCE, normalize_debts, simulate_plan
from .utils import ZERO, add_months, field_value, to_decimal

MILESTONE_FRACTIONS = (Decimal("0.25"), Decimal("0.5"), Decimal("0.75"), Decimal("1"))
STREAK_FLOOR = Decimal("25")
STREAK_PRINCIPAL_SHARE = Decimal("0.01")


def only_minimums_plan(debts: Iterable[Any], start_date: Optional[date] = None) -> PlanResult:
    """Simulate paying only the minimums, the baseline for comparisons."""
    return simulate_plan(debts, 0, "avalanche", start_date)


def compare_plans(plan: PlanResult, baseline: PlanResult) -> Dict[str, float]:
    """Compare an active plan with its baseline run.

    ``interest_saved`` never goes below zero. ``months_saved`` is the
    difference in simulated months and may be zero.
    """
    interest_saved = max(ZERO, baseline.total_interest - plan.total_interest)
    return {
        "baseline_total_interest": float(baseline.total_interest),
        "baseline_months": baseline.months,
        "interest_saved": float(interest_saved),
        "months_saved": baseline.months - plan.months,
    }


def total_principal(debts: Iterable[Any]) -> Decimal:
    """Sum of all entered balances, including rows the simulator ignores."""
    return sum((to_decimal(field_value(d, "balance")) for d in debts), ZERO)


def total_minimum(debts: Iterable[Any]) -> Decimal:
    """Sum of all entered minimum payments."""
    return sum(
        (to_decimal(field_value(d, "minimum_payment", "min")) for d in debts), ZERO
    )


def plan_progress(debts: Iterable[Any], result: PlanResult) -> Dict[str, Decimal]:
    """Return principal paid by the end of the plan and the share it represents."""
    principal = total_principal(debts)
    if result.timeline:
        paid = principal - result.timeline[-1].total_balance
    else:
        paid = ZERO
    if principal > 0:
        fraction = min(Decimal("1"), max(ZERO, paid / principal))
    else:
        fraction = ZERO
    return {"total_principal": principal, "paid_principal": paid, "progress": fraction}


def milestones(progress: Decimal) -> List[Dict[str, Any]]:
    """Return the milestone badges unlocked at ``progress``."""
    return [
        {"label": f"{int(m * 100)}% paid", "hit": progress >= m}
        for m in MILESTONE_FRACTIONS
    ]


def extra_payment_streak(debts: Iterable[Any], result: PlanResult) -> int:
    """Return the run of consecutive months ending the plan with enough extra.

    A month counts when the payments beyond each debt's minimum add up to at
    least ``max(25, 1% of total principal)``. A month below that resets the
    run.
    """
    debt_list = list(debts)
    minimums = [d.minimum_payment for d in normalize_debts(debt_list)]
    threshold = max(STREAK_FLOOR, total_principal(debt_list) * STREAK_PRINCIPAL_SHARE)
    streak = 0
    for row in result.plan:
        extra = sum(
            (payment - minimum for payment, minimum in zip(row.payments, minimums)),
            ZERO,
        )
        streak = streak + 1 if extra >= threshold else 0
    return streak


def payoff_order(result: PlanResult) -> List[Dict[str, Any]]:
    """Return per-debt payoff rows ordered by payoff date.

    Debts that never close within the horizon come last, in input order.
    """
    rows = [
        {
            "id": outcome.id,
            "name": outcome.name,
            "start_balance": outcome.start_balance,
            "payoff_month_index": outcome.payoff_month_index,
            "payoff_date": outcome.payoff_date,
        }
        for outcome in result.payoff
    ]
    return sorted(
        rows,
        key=lambda r: (r["payoff_date"] is None, r["payoff_date"] or date.min),
    )


def plan_summary(result: PlanResult, baseline: Optional[PlanResult] = None) -> Dict[str, Any]:
    """Aggregate KPIs for display and export."""
    start = result.start_date or date.today()
    summary: Dict[str, Any] = {
        "months": result.months,
        "total_start": float(result.total_start),
        "total_interest": float(result.total_interest),
        "total_cost": float(result.total_start + result.total_interest),
        "debt_free_date": add_months(start, result.months).isoformat(),
        "final_balance": float(result.final_balance),
        "paid_off": result.final_balance <= PAID_OFF_TOLERANCE,
    }
    if baseline is not None:
        summary["comparison"] = compare_plans(result, baseline)
    return summary
