"""
Module: plywood_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors form the reporting projection: structured read access to lots,
    stage ledgers, settings and finished goods without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    the DTOs in domain/.  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: selectors never call session.add(), delete(),
      commit() or flush().
    - DTO return convention: selectors return frozen dataclasses or row
      dataclasses, never ORM instances.
    - Deterministic ordering: every list query has a total order (creation
      time, then id), so repeated reads of unchanged storage are identical.

Failure modes:
    - ValidationError for filter combinations that make no sense (e.g. a
      machine filter on a stage that has no machine).
"""

from abc import ABC
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from plywood_kernel.db.base import Base
from plywood_kernel.domain.validation import ZERO

ModelType = TypeVar("ModelType", bound=Base)


def day_start(day: date) -> datetime:
    """Midnight UTC at the start of ``day``."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def day_end(day: date) -> datetime:
    """Midnight UTC at the start of the day after ``day`` (exclusive bound)."""
    return day_start(day + timedelta(days=1))


def as_decimal(value: Any) -> Decimal:
    """Aggregate result to Decimal; NULL (empty group) becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def as_date(value: Any) -> date:
    """``DATE(created_at)`` comes back as a string on SQLite."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only
        queries, and return DTOs or computed rows.  They MUST NOT mutate
        any data.
    """

    def __init__(self, session: Session):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session

    @staticmethod
    def _created_between(column, start_date: date | None, end_date: date | None) -> list:
        """Inclusive calendar-day range over a created_at column."""
        clauses = []
        if start_date is not None:
            clauses.append(column >= day_start(start_date))
        if end_date is not None:
            clauses.append(column < day_end(end_date))
        return clauses
