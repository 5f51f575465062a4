"""ORM models for the ledger kernel."""

from ledger_kernel.models.account import Account
from ledger_kernel.models.category_tag import CategoryTag, category_name_key
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.household import (
    Household,
    HouseholdAccountShare,
    HouseholdMember,
    HouseholdRole,
    MemberStatus,
)
from ledger_kernel.models.ledger import LedgerSplit, LedgerTransaction
from ledger_kernel.models.user import User

__all__ = [
    "User",
    "Currency",
    "Account",
    "CategoryTag",
    "category_name_key",
    "LedgerTransaction",
    "LedgerSplit",
    "Household",
    "HouseholdMember",
    "HouseholdAccountShare",
    "HouseholdRole",
    "MemberStatus",
]
