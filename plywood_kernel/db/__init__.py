"""Database layer - store access, base classes, and append-only enforcement."""

from plywood_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from plywood_kernel.db.engine import LedgerStore

__all__ = [
    "LedgerStore",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
]
