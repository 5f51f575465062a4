"""
Value types -- enumerations and small immutable values of the ledger domain.

Responsibility:
    AccountType, SplitSide, PostingMode and TransactionKind, the fixed
    sets of debit-normal and transfer-only account types, the mode parser,
    and the YearMonth calendar-month value used by monthly aggregation.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Models import the
    enums from here so that persisted values and domain values are the same
    objects.

Invariants enforced:
    - Enum values are the upper-case member names; that is what is stored.
    - YearMonth always denotes a valid month (1..12).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from ledger_kernel.exceptions import InvalidRequestError


class AccountType(str, Enum):
    """Five account types of double-entry bookkeeping."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class SplitSide(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class PostingMode(str, Enum):
    """Whether a request acts on the actor's own books or a household's."""

    INDIVIDUAL = "INDIVIDUAL"
    HOUSEHOLD = "HOUSEHOLD"


class TransactionKind(str, Enum):
    """Derived classification of a posted transaction."""

    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    TRANSFER = "TRANSFER"


# Accounts whose balance increases on the DEBIT side
DEBIT_NORMAL_TYPES: frozenset[AccountType] = frozenset(
    {AccountType.ASSET, AccountType.EXPENSE}
)

# A transaction touching only these types moves value without earning or spending it
TRANSFER_TYPES: frozenset[AccountType] = frozenset(
    {AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY}
)


def parse_account_type(value: AccountType | str) -> AccountType:
    """Parse an account type name; unknown names raise InvalidRequestError."""
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(str(value).strip().upper())
    except ValueError:
        raise InvalidRequestError(f"Invalid account type: {value}") from None


def parse_side(value: SplitSide | str) -> SplitSide:
    """Parse a split side; unknown values raise InvalidRequestError."""
    if isinstance(value, SplitSide):
        return value
    if isinstance(value, str):
        try:
            return SplitSide(value)
        except ValueError:
            pass
    raise InvalidRequestError(f"Invalid split side: {value}")


def parse_mode(value: PostingMode | str | None) -> PostingMode:
    """
    Parse a posting mode case-insensitively.

    None means INDIVIDUAL.  Anything that is neither INDIVIDUAL nor
    HOUSEHOLD raises InvalidRequestError.
    """
    if value is None:
        return PostingMode.INDIVIDUAL
    if isinstance(value, PostingMode):
        return value
    try:
        return PostingMode(str(value).strip().upper())
    except ValueError:
        raise InvalidRequestError(
            f"Invalid mode: {value}. Must be INDIVIDUAL or HOUSEHOLD"
        ) from None


_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True, slots=True, order=True)
class YearMonth:
    """A calendar month, e.g. YearMonth(2026, 2) for February 2026."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidRequestError(f"Invalid month: {self.month}")
        if not 1 <= self.year <= 9999:
            raise InvalidRequestError(f"Invalid year: {self.year}")

    @classmethod
    def parse(cls, value: YearMonth | str) -> YearMonth:
        """Accept a YearMonth or a "YYYY-MM" string."""
        if isinstance(value, YearMonth):
            return value
        match = _YEAR_MONTH_RE.match(str(value).strip())
        if match is None:
            raise InvalidRequestError(
                f"Invalid month: {value}. Expected format YYYY-MM"
            )
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def of(cls, day: date) -> YearMonth:
        return cls(day.year, day.month)

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def next_month(self) -> YearMonth:
        if self.month == 12:
            return YearMonth(self.year + 1, 1)
        return YearMonth(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
