"""Core simulation engine for the debt payoff coach.

This module implements the month-by-month payoff simulation. Each month,
interest is accrued on every open debt and its fixed minimum payment is
applied. The configured extra amount is then directed at the debt chosen by
the strategy (see ``strategies``), with any overflow cascading to the next
target in the same month once a debt closes. The simulation stops when all
balances are effectively zero or after ``MAX_MONTHS`` months, whichever
comes first.

Interest compounds monthly at ``apr / 100 / 12``; there is no day counting.
Every call works on a private copy of the balances, so results depend only
on the arguments.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, getcontext
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .data_models import (
    Debt,
    MonthRow,
    PerDebtOutcome,
    PlanResult,
    TimelineEntry,
    WorkingBalance,
)
from .strategies import DEFAULT_STRATEGY, get_selector
from .utils import ZERO, add_months, field_value, to_decimal

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

MAX_MONTHS = 600  # 50 years
# A balance above this keeps the simulation running.
OPEN_BALANCE_EPSILON = Decimal("0.005")
# At or below this a debt counts as closed and extra stops being distributed.
CLOSED_EPSILON = Decimal("0.0001")
# Total remaining at or below this ends the simulation early.
PAID_OFF_TOLERANCE = Decimal("0.01")

_MONTHS_PER_YEAR = Decimal(12)
_HUNDRED = Decimal(100)


def normalize_debts(raw_debts: Iterable[Any]) -> List[Debt]:
    """Return the simulation-ready subset of ``raw_debts``.

    Records may be ``Debt`` instances or mappings using either the
    ``minimum_payment``/``due_day`` or the short ``min``/``dueDay`` keys.
    Numeric fields are coerced with ``to_decimal`` so bad values become zero.
    Only rows with a positive balance and non-negative APR and minimum are
    kept; the rest are dropped without raising.
    """
    debts: List[Debt] = []
    for position, record in enumerate(raw_debts or ()):
        balance = to_decimal(field_value(record, "balance"))
        apr = to_decimal(field_value(record, "apr"))
        minimum = to_decimal(field_value(record, "minimum_payment", "min"))
        if not (balance > 0 and apr >= 0 and minimum >= 0):
            logger.debug("Dropping unusable debt record at position %d", position)
            continue
        due = to_decimal(field_value(record, "due_day", "dueDay"))
        due_day = int(due) if 1 <= due <= 31 else 1
        debts.append(
            Debt(
                id=str(field_value(record, "id") or ""),
                name=str(field_value(record, "name") or ""),
                balance=balance,
                apr=apr,
                minimum_payment=minimum,
                due_day=due_day,
            )
        )
    return debts


def accrue_month(
    balances: Sequence[WorkingBalance], extra: Decimal, strategy: str
) -> Tuple[Decimal, List[Decimal]]:
    """Advance ``balances`` by one month in place.

    Returns the interest accrued over all debts this month and the payment
    made to each debt (minimum plus any extra).
    """
    select = get_selector(strategy)
    month_interest = ZERO
    payments = [ZERO] * len(balances)

    for i, wb in enumerate(balances):
        if not wb.is_open:
            continue
        interest = wb.balance * (wb.apr / _HUNDRED / _MONTHS_PER_YEAR)
        month_interest += interest
        wb.balance += interest

        minimum = min(max(wb.minimum_payment, ZERO), wb.balance)
        wb.balance -= minimum
        payments[i] = minimum

    # Extra goes to the current target; when it closes the selector is asked
    # again so the leftover rolls over to the next debt in the same month.
    remaining_extra = max(ZERO, extra)
    while remaining_extra > CLOSED_EPSILON and any(
        wb.balance > CLOSED_EPSILON for wb in balances
    ):
        idx = select(balances)
        if idx is None:
            break
        target = balances[idx]
        pay = min(remaining_extra, target.balance)
        target.balance -= pay
        payments[idx] += pay
        remaining_extra -= pay

    return month_interest, payments


def mark_payoffs(
    balances: Sequence[WorkingBalance],
    payoff: Sequence[PerDebtOutcome],
    month_index: int,
    start_date: date,
) -> None:
    """Record the payoff month for debts that closed this month."""
    for wb, outcome in zip(balances, payoff):
        if wb.balance <= CLOSED_EPSILON and outcome.payoff_month_index is None:
            outcome.payoff_month_index = month_index
            outcome.payoff_date = add_months(start_date, month_index + 1)


class TimelineRecorder:
    """Collects the monthly rows and chart timeline of a simulation."""

    def __init__(self, start_date: date) -> None:
        self.start_date = start_date
        self.plan: List[MonthRow] = []
        self.timeline: List[TimelineEntry] = []

    def record(
        self,
        month_index: int,
        balances: Sequence[WorkingBalance],
        payments: List[Decimal],
        interest: Decimal,
    ) -> Decimal:
        """Append the rows for ``month_index`` and return the total remaining."""
        remaining = [max(ZERO, wb.balance) for wb in balances]
        total_remaining = sum(remaining, ZERO)
        self.timeline.append(
            TimelineEntry(
                month_index=month_index,
                total_balance=total_remaining,
                interest_paid=interest,
            )
        )
        self.plan.append(
            MonthRow(
                month_index=month_index,
                date=add_months(self.start_date, month_index + 1),
                payments=payments,
                remaining=remaining,
                interest=interest,
                total_remaining=total_remaining,
            )
        )
        return total_remaining

    @property
    def total_interest(self) -> Decimal:
        return sum((t.interest_paid for t in self.timeline), ZERO)


def simulate_plan(
    debts: Iterable[Any],
    extra: Any = 0,
    strategy: str = DEFAULT_STRATEGY,
    start_date: Optional[date] = None,
) -> PlanResult:
    """Simulate paying off ``debts`` month by month.

    Parameters
    ----------
    debts: Iterable
        Raw debt records (``Debt`` instances or mappings). They are
        normalized first; unusable rows are dropped.
    extra: number
        Amount paid each month on top of all minimums. Negative or
        non-numeric values are treated as zero.
    strategy: str
        ``"avalanche"`` (highest APR first) or ``"snowball"`` (smallest
        balance first).
    start_date: date, optional
        Simulation start; defaults to today. Month ``n`` is dated
        ``n + 1`` months after it.

    Returns
    -------
    PlanResult
        ``months`` is the number of months simulated. When the horizon cap
        is reached without payoff it equals ``MAX_MONTHS`` and the last row
        still carries the residual balances.

    Raises
    ------
    ValueError
        If ``strategy`` is not a registered strategy name.
    """
    get_selector(strategy)
    start = start_date or date.today()
    normalized = normalize_debts(debts)
    if not normalized:
        return PlanResult(months=0, total_start=ZERO, total_interest=ZERO, start_date=start)

    extra_amount = max(ZERO, to_decimal(extra))
    total_start = sum((d.balance for d in normalized), ZERO)
    working = [
        WorkingBalance(apr=d.apr, minimum_payment=d.minimum_payment, balance=d.balance)
        for d in normalized
    ]
    payoff = [
        PerDebtOutcome(id=d.id, name=d.name, start_balance=d.balance)
        for d in normalized
    ]
    recorder = TimelineRecorder(start)
    logger.debug(
        "Simulating %d debts (total %s) with extra %s using %s",
        len(normalized),
        total_start,
        extra_amount,
        strategy,
    )

    month_index = 0
    while month_index < MAX_MONTHS and any(
        wb.balance > OPEN_BALANCE_EPSILON for wb in working
    ):
        interest, payments = accrue_month(working, extra_amount, strategy)
        mark_payoffs(working, payoff, month_index, start)
        total_remaining = recorder.record(month_index, working, payments, interest)
        month_index += 1
        if total_remaining <= PAID_OFF_TOLERANCE:
            break

    result = PlanResult(
        months=month_index,
        total_start=total_start,
        total_interest=recorder.total_interest,
        timeline=recorder.timeline,
        payoff=payoff,
        plan=recorder.plan,
        start_date=start,
    )
    if month_index >= MAX_MONTHS and result.final_balance > PAID_OFF_TOLERANCE:
        logger.warning(
            "Plan did not reach zero within %d months; %s remains",
            MAX_MONTHS,
            result.final_balance,
        )
    return result
