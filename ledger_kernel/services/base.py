"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for every
    service in the kernel layer.  All concrete services inherit from
    BaseService, receiving a SQLAlchemy ``Session`` that they use via
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell around the pure domain.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction and
    never commit or rollback themselves.  The caller (session_scope(), the
    CLI, or the test harness) owns commit/rollback, so a failed check leaves
    nothing behind.
"""

from abc import ABC

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and an optional
        ``Clock`` (defaults to SystemClock) used for every timestamp the
        service writes.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
