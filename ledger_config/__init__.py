"""
ledger_config -- the only place that reads configuration files or the
environment.

Responsibility:
    ``load_settings()`` produces a frozen ``LedgerSettings``;
    ``configure_kernel()`` uses it to set up structured logging and the
    database engine.

Architecture position:
    Sits above ``ledger_kernel``.  The kernel MUST NEVER import from
    ``ledger_config``; it receives plain arguments instead.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from ledger_config.loader import load_settings
from ledger_config.schema import LedgerSettings
from ledger_kernel.db.engine import init_engine_from_url
from ledger_kernel.logging_config import configure_logging, get_logger

__all__ = ["LedgerSettings", "load_settings", "configure_kernel"]

_logger = get_logger("config")


def configure_kernel(settings: LedgerSettings) -> Engine:
    """Initialize logging, then the engine, from settings."""
    configure_logging(level=settings.log_level)
    engine = init_engine_from_url(
        settings.database_url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )
    _logger.info(
        "kernel_configured",
        extra={"log_level": settings.log_level, "default_currency": settings.default_currency},
    )
    return engine
