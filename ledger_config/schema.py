"""
Settings schema.

LedgerSettings is the typed, frozen result of merging the packaged defaults,
an optional user YAML file, and environment overrides.  The kernel never sees
this type; configure_kernel() unpacks it into plain arguments.
"""

from __future__ import annotations

from dataclasses import dataclass

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class LedgerSettings:
    """Runtime settings for the ledger kernel and CLI."""

    database_url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    log_level: str = "INFO"
    default_currency: str = "EUR"

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database.url must not be empty")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"logging.level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}"
            )
        for name in ("pool_size", "max_overflow", "pool_timeout", "pool_recycle"):
            if getattr(self, name) < 0:
                raise ValueError(f"database.{name} must be >= 0")
        if len(self.default_currency) != 3:
            raise ValueError(
                f"ledger.default_currency must be a 3-letter code, got {self.default_currency!r}"
            )
