"""
Module: plywood_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the UUID primary key convention, the type annotation map for consistent
    column types, and the TrackedBase mixin for actor/timestamp tracking.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - UUID primary keys: every model inherits a uuid4-generated primary key.
    - Decimal precision: Python Decimal maps to Quantity, nine decimal
      places.  PostgreSQL stores Numeric(38, 9).  SQLite has no exact
      decimal storage, so there the value is stored as an integer count of
      10^-9 units and every comparison and subtraction stays exact.
    - Timestamps are timezone-aware.  Values are supplied by the services
      from an injected Clock, never by the database server.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Guarantees:
        - process_bind_param: UUID -> str on INSERT/UPDATE.
        - process_result_value: str -> UUID on SELECT.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


# Canonical precision for every quantity column
QUANTITY_DECIMAL_PLACES = 9


class Quantity(TypeDecorator):
    """
    Exact quantity type: Numeric(38, 9) on PostgreSQL, scaled integer on SQLite.

    pysqlite hands Numeric values to SQLite as REAL, so a guarded
    ``quantity >= :amount`` compares drifted floats.  Storing the value in
    10^-9 units as BIGINT keeps the guard and the debit arithmetic exact.
    The SQLite range is therefore about 9.2 x 10^9 units per column.

    Guarantees:
        - process_bind_param: Decimal -> int (SQLite), unchanged elsewhere.
        - process_result_value: int -> Decimal with nine places (SQLite).
        - Bind values in comparisons and arithmetic against a Quantity
          column are converted the same way.

    Raises:
        ValueError: on a value with more than nine decimal places.
    """

    impl = Numeric(38, QUANTITY_DECIMAL_PLACES)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(38, QUANTITY_DECIMAL_PLACES))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        scaled = Decimal(value).scaleb(QUANTITY_DECIMAL_PLACES)
        if scaled != scaled.to_integral_value():
            raise ValueError(
                f"{value} has more than {QUANTITY_DECIMAL_PLACES} decimal places"
            )
        return int(scaled)

    def process_result_value(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return Decimal(int(value)).scaleb(-QUANTITY_DECIMAL_PLACES)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Quantity.
        - datetime maps to DateTime(timezone=True).
        - int maps to BigInteger.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Quantity(),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TrackedBase(Base):
    """
    Abstract base with timestamp and actor tracking for mutable rows.

    Contract:
        Rows that change after insert (lots, suppliers) record who created
        them and who last touched them.  Append-only rows (ledger entries,
        settings, finished goods) do not use this base; they carry only
        ``operator_id`` / ``created_at``.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    created_by_id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    updated_by_id: Mapped[PyUUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )


# Re-export UUID for convenience
UUID = PyUUID
