"""
Household double-entry ledger kernel.

Posting, balances and reports over a SQLAlchemy session supplied by the
caller.  Typical use:

    from ledger_kernel.db.engine import init_engine_from_url, session_scope
    from ledger_kernel.services import LedgerPostingService

    init_engine_from_url("postgresql://...")
    with session_scope() as session:
        LedgerPostingService(session).post(actor_id, request)
"""

__version__ = "0.1.0"
