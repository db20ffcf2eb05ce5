"""Target selection strategies for extra payments.

Each strategy takes the current working balances and returns the index of the
debt that should receive extra funds, or ``None`` once nothing is left open.
Strategies are registered in ``STRATEGIES`` so callers can refer to them by
name. Selection is recomputed from the balances on every call; the monthly
engine relies on this to cascade leftover extra to the next debt after the
current target closes.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from .data_models import WorkingBalance

Selector = Callable[[Sequence[WorkingBalance]], Optional[int]]

DEFAULT_STRATEGY = "avalanche"


def avalanche(balances: Sequence[WorkingBalance]) -> Optional[int]:
    """Highest APR first; ties go to the earliest debt in input order."""
    open_debts = [b for b in balances if b.is_open]
    if not open_debts:
        return None
    highest = max(b.apr for b in open_debts)
    for i, b in enumerate(balances):
        if b.is_open and b.apr == highest:
            return i
    return None


def snowball(balances: Sequence[WorkingBalance]) -> Optional[int]:
    """Smallest balance first; ties go to the earliest debt in input order."""
    open_debts = [b for b in balances if b.is_open]
    if not open_debts:
        return None
    smallest = min(b.balance for b in open_debts)
    for i, b in enumerate(balances):
        if b.is_open and b.balance == smallest:
            return i
    return None


STRATEGIES: Dict[str, Selector] = {
    "avalanche": avalanche,
    "snowball": snowball,
}


def get_selector(strategy: str) -> Selector:
    """Return the selector registered under ``strategy``."""
    try:
        return STRATEGIES[strategy.lower()]
    except (KeyError, AttributeError):
        raise ValueError(
            f"Unknown strategy: {strategy!r} (expected one of {', '.join(STRATEGIES)})"
        )


def select_target(balances: Sequence[WorkingBalance], strategy: str) -> Optional[int]:
    """Return the index of the debt to receive extra funds under ``strategy``."""
    return get_selector(strategy)(balances)
