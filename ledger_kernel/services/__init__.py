"""Kernel services (write paths and access-checked reads)."""

from ledger_kernel.services.access_control import AccessControlResolver
from ledger_kernel.services.account_service import AccountService
from ledger_kernel.services.balance_service import BalanceService
from ledger_kernel.services.category_service import CategoryService
from ledger_kernel.services.household_service import HouseholdService
from ledger_kernel.services.opening_balance_service import (
    OPENING_EQUITY_NAME,
    OpeningBalanceService,
)
from ledger_kernel.services.posting_service import LedgerPostingService
from ledger_kernel.services.reporting_service import ReportingService

__all__ = [
    "AccessControlResolver",
    "AccountService",
    "BalanceService",
    "CategoryService",
    "HouseholdService",
    "LedgerPostingService",
    "OpeningBalanceService",
    "OPENING_EQUITY_NAME",
    "ReportingService",
]
