"""Data models for the debt payoff coach.

This module defines dataclasses representing the entities used by the
simulator: the debts supplied by the user, the working balances the engine
mutates during a run, and the structures that make up a plan result (monthly
rows, chart timeline entries and per-debt outcomes). Money values are
``Decimal`` throughout; conversion to floats only happens on serialization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional


@dataclass
class Debt:
    """A single liability as entered by the user.

    Attributes
    ----------
    id: str
        Opaque identifier assigned by the caller. The simulator never creates
        or changes it.
    apr: Decimal
        Annual percentage rate in percent units, e.g. ``Decimal("22.99")``.
    minimum_payment: Decimal
        Fixed monthly minimum payment.
    due_day: int
        Day of month the payment is due. Informational only.
    """

    id: str
    name: str
    balance: Decimal
    apr: Decimal
    minimum_payment: Decimal
    due_day: int = 1


@dataclass
class WorkingBalance:
    """Simulation-local shadow of a debt's balance.

    Each simulation call builds its own list of these and discards it when
    the call returns, so the caller's ``Debt`` objects are never mutated.
    """

    apr: Decimal
    minimum_payment: Decimal
    balance: Decimal

    @property
    def is_open(self) -> bool:
        return self.balance > 0


@dataclass
class PerDebtOutcome:
    """Payoff result for one input debt.

    ``payoff_month_index`` is the 0-based month in which the balance first
    reached zero, or ``None`` when it never did within the horizon.
    ``interest_paid`` is kept for consumers of the result but is not
    attributed per debt and always stays zero; the plan-level interest total
    lives on ``PlanResult``.
    """

    id: str
    name: str
    start_balance: Decimal
    payoff_month_index: Optional[int] = None
    payoff_date: Optional[date] = None
    interest_paid: Decimal = Decimal("0")


@dataclass
class MonthRow:
    """One simulated month of the plan.

    ``payments`` and ``remaining`` are indexed like the normalized debts.
    ``date`` is the end of the month, i.e. ``month_index + 1`` months after
    the simulation start.
    """

    month_index: int
    date: date
    payments: List[Decimal]
    remaining: List[Decimal]
    interest: Decimal
    total_remaining: Decimal


@dataclass
class TimelineEntry:
    """Lightweight per-month point used for trend charts."""

    month_index: int
    total_balance: Decimal
    interest_paid: Decimal


@dataclass
class PlanResult:
    """Aggregate result of one full simulation."""

    months: int
    total_start: Decimal
    total_interest: Decimal
    timeline: List[TimelineEntry] = field(default_factory=list)
    payoff: List[PerDebtOutcome] = field(default_factory=list)
    plan: List[MonthRow] = field(default_factory=list)
    start_date: Optional[date] = None

    @property
    def final_balance(self) -> Decimal:
        """Total remaining balance after the last simulated month."""
        if not self.plan:
            return Decimal("0")
        return self.plan[-1].total_remaining
