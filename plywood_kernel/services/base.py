"""
BaseService -- abstract base for session-scoped kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for the
    building-block services (lot store, stage ledger, intake, suppliers).
    They receive a SQLAlchemy ``Session`` and use ``session.flush()`` --
    never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.  The top-level
    components (QualityGate, TransformationEngine, SettingRecorder) own the
    unit of work through ``LedgerStore.session_scope()`` and compose these
    services inside it.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or rollback themselves.  A debit, a ledger append and
    a credit therefore land together or not at all.

Failure modes:
    - If a subclass calls ``session.commit()`` the debit/ledger/credit
      triple of a stage execution is no longer atomic.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from plywood_kernel.db.base import Base
from plywood_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for session-scoped services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide reporting queries -- those belong in
          ``plywood_kernel/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
            clock: Source of created_at / updated_at.  Defaults to
                SystemClock.
        """
        self.session = session
        self.clock = clock or SystemClock()
