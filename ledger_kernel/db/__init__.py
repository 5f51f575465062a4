"""Database layer - engine, base classes, and column types."""

from ledger_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from ledger_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    read_only_scope,
    session_scope,
)
from ledger_kernel.db.types import CurrencyCode, MinorUnits

__all__ = [
    "get_engine",
    "get_session",
    "create_tables",
    "session_scope",
    "read_only_scope",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "MinorUnits",
    "CurrencyCode",
]
