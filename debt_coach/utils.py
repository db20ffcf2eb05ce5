"""Utility functions for the debt payoff coach.

This module provides helpers for coercing loosely typed user input into
``Decimal`` values, for handling dates (adding months and parsing start
dates) and for allocating debt identifiers. Identifier allocation lives here
so that callers (the CLI and the web layer) own it; the simulator only ever
receives ids that were already assigned.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, getcontext
from typing import Any, Iterable, List, Mapping, MutableMapping
from uuid import uuid4

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

ZERO = Decimal("0")
# Values whose decimal exponent exceeds this coerce to zero.
MAX_EXPONENT = 100


def to_decimal(value: Any) -> Decimal:
    """Coerce ``value`` into a finite ``Decimal``.

    Numbers and numeric strings (commas allowed as thousands separators) are
    converted. Anything else, including ``None``, empty strings, booleans,
    NaN, infinities and absurdly large magnitudes, becomes zero rather than
    raising.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip().replace(",", ""))
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite() or (result and result.adjusted() > MAX_EXPONENT):
        return ZERO
    return result


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_start_date(value: str) -> date:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM`` into a ``date``.

    A bare year-month resolves to the first day of that month.

    Raises
    ------
    ValueError
        If the string matches neither format.
    """
    text = value.strip()
    for fmt in ("%Y-%m-%d", "%Y-%m"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date (expected YYYY-MM or YYYY-MM-DD): {value}")


def new_debt_id() -> str:
    """Allocate a fresh opaque debt identifier."""
    return uuid4().hex


def ensure_ids(records: Iterable[MutableMapping[str, Any]]) -> List[MutableMapping[str, Any]]:
    """Assign an identifier to every record that lacks one, in place."""
    out = []
    for record in records:
        if not record.get("id"):
            record["id"] = new_debt_id()
        out.append(record)
    return out


def field_value(record: Any, *names: str) -> Any:
    """Return the first of ``names`` present on ``record``.

    ``record`` may be a mapping or an object with attributes, so raw form
    data and ``Debt`` instances can be read the same way.
    """
    for name in names:
        if isinstance(record, Mapping):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return None
