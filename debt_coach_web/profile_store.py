"""Persistence layer for the user's debt profile.

A profile is what the dashboard edits: the list of debts, the extra amount
paid each month and the chosen strategy. Profiles are keyed by the opaque
user token kept in the browser session. SQLite is the default for local
development, but any SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL) works.
"""

from __future__ import annotations

import copy
import json
import logging
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import Column, DateTime, Float, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from debt_coach.strategies import DEFAULT_STRATEGY, STRATEGIES
from debt_coach.utils import ensure_ids, to_decimal

logger = logging.getLogger(__name__)

Base = declarative_base()

EXAMPLE_DEBTS: List[Dict[str, Any]] = [
    {"name": "Visa", "balance": 5200, "apr": 22.99, "minimum_payment": 110, "due_day": 12},
    {"name": "Auto Loan", "balance": 9800, "apr": 6.5, "minimum_payment": 275, "due_day": 5},
    {"name": "Store Card", "balance": 1350, "apr": 25.49, "minimum_payment": 35, "due_day": 18},
]
DEFAULT_EXTRA = 400.0
SHORT_KEYS = {"min": "minimum_payment", "dueDay": "due_day"}


def example_profile() -> Dict[str, Any]:
    """Return a fresh copy of the starter profile with new debt ids."""
    return {
        "debts": ensure_ids(copy.deepcopy(EXAMPLE_DEBTS)),
        "extra": DEFAULT_EXTRA,
        "what_if_extra": DEFAULT_EXTRA,
        "strategy": DEFAULT_STRATEGY,
    }


def clean_profile(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the shape of a profile payload and fill in defaults.

    Individual debt values are kept as entered; the simulator coerces and
    filters them. Debts without an id get one allocated here. A missing
    ``what_if_extra`` follows ``extra``.

    Raises
    ------
    ValueError
        If ``debts`` is not a list of objects or the strategy is unknown.
    """
    if not isinstance(data, dict):
        raise ValueError("Profile must be a JSON object")
    debts = data.get("debts", [])
    if not isinstance(debts, list) or not all(isinstance(d, dict) for d in debts):
        raise ValueError("'debts' must be a list of objects")
    strategy = str(data.get("strategy") or DEFAULT_STRATEGY).lower()
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {strategy}")
    extra = max(0.0, float(to_decimal(data.get("extra", 0))))
    what_if = data.get("what_if_extra")
    if what_if is None or what_if == "":
        what_if_extra = extra
    else:
        what_if_extra = max(0.0, float(to_decimal(what_if)))
    canonical = []
    for debt in debts:
        debt = dict(debt)
        for short, name in SHORT_KEYS.items():
            if short in debt:
                debt.setdefault(name, debt.pop(short))
        canonical.append(debt)
    return {
        "debts": ensure_ids(canonical),
        "extra": extra,
        "what_if_extra": what_if_extra,
        "strategy": strategy,
    }


class DebtProfileModel(Base):
    __tablename__ = "debt_profiles"

    user_token = Column(String(64), primary_key=True)
    debts_json = Column(Text, nullable=False)
    extra = Column(Float, nullable=False, default=0.0)
    what_if_extra = Column(Float, nullable=True)
    strategy = Column(String(32), nullable=False, default=DEFAULT_STRATEGY)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ProfileStore:
    """Database-backed profile store."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    def load_profile(self, user_token: str) -> Dict[str, Any]:
        """Return the stored profile, or the example profile if there is none."""
        if not user_token:
            return example_profile()
        with self._session_factory() as session:
            row = session.get(DebtProfileModel, user_token)
            if row is None:
                return example_profile()
            return self._to_dict(row)

    def save_profile(self, user_token: str, profile: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and store ``profile`` for ``user_token``; return what was stored."""
        cleaned = clean_profile(profile)
        if not user_token:
            return cleaned
        with self._session_factory() as session:
            row = session.get(DebtProfileModel, user_token)
            if row is None:
                row = DebtProfileModel(user_token=user_token)
                session.add(row)
            row.debts_json = json.dumps(cleaned["debts"])
            row.extra = cleaned["extra"]
            row.what_if_extra = cleaned["what_if_extra"]
            row.strategy = cleaned["strategy"]
            row.updated_at = datetime.utcnow()
            session.commit()
        logger.debug("Saved profile with %d debts", len(cleaned["debts"]))
        return cleaned

    def clear_profile(self, user_token: str) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            row = session.get(DebtProfileModel, user_token)
            if row is not None:
                session.delete(row)
                session.commit()

    @staticmethod
    def _to_dict(row: DebtProfileModel) -> Dict[str, Any]:
        return {
            "debts": json.loads(row.debts_json),
            "extra": row.extra,
            "what_if_extra": row.extra if row.what_if_extra is None else row.what_if_extra,
            "strategy": row.strategy,
        }


def create_store_from_env(url: str | None) -> ProfileStore:
    return ProfileStore(url or "sqlite:///debt_coach.sqlite3")
