"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable request and result structures that cross the service boundary:
    SplitInput and PostTransactionRequest (posting input), CreateAccountRequest,
    PostedSplit and PostedTransaction (materialized posting view),
    BalanceResult, TimeseriesPoint / BalanceTimeseries, MonthlyExpenseRow, and
    the AccountView / CategoryTagView read views.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers.

Invariants enforced:
    - Services accept and return DTOs, never ORM entities, for ledger data.
    - Amounts are ints in minor units; no floats or Decimals.

Data flow:
    PostTransactionRequest -> (validation, access control) -> PostedTransaction
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ledger_kernel.domain.sign_convention import derive_kind, split_effect
from ledger_kernel.domain.values import (
    AccountType,
    PostingMode,
    SplitSide,
    TransactionKind,
)
from ledger_kernel.exceptions import InvalidRequestError

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account as AccountModel
    from ledger_kernel.models.category_tag import CategoryTag as CategoryTagModel
    from ledger_kernel.models.household import HouseholdRole, MemberStatus
    from ledger_kernel.models.ledger import LedgerSplit as LedgerSplitModel
    from ledger_kernel.models.ledger import (
        LedgerTransaction as LedgerTransactionModel,
    )


def as_uuid(value: Any, name: str = "id") -> UUID:
    """Coerce a UUID or its string form; anything else is an InvalidRequestError."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidRequestError(f"Invalid {name}: {value}") from None


def as_optional_uuid(value: Any, name: str = "id") -> UUID | None:
    if value is None:
        return None
    return as_uuid(value, name)


# ---------------------------------------------------------------------------
# Posting input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SplitInput:
    """
    One proposed line of a transaction, exactly as supplied by the caller.

    ``side`` and ``amount_minor`` are deliberately loose here: the validation
    pipeline is what rejects bad values, with the documented messages.
    """

    account_id: UUID
    side: SplitSide | str
    amount_minor: int
    category_tag_id: UUID | None = None
    memo: str | None = None


@dataclass(frozen=True)
class PostTransactionRequest:
    """A proposed multi-line transaction."""

    currency: str
    txn_date: date
    description: str
    splits: tuple[SplitInput, ...]
    mode: PostingMode | str | None = PostingMode.INDIVIDUAL
    household_id: UUID | None = None

    def __post_init__(self) -> None:
        # Accept any sequence of splits; store as a tuple
        if self.splits is None:
            object.__setattr__(self, "splits", ())
        elif not isinstance(self.splits, tuple):
            object.__setattr__(self, "splits", tuple(self.splits))


@dataclass(frozen=True)
class CreateAccountRequest:
    name: str
    account_type: AccountType | str
    currency: str
    opening_balance_minor: int = 0
    opening_balance_date: date | None = None


# ---------------------------------------------------------------------------
# Posting output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PostedSplit:
    """A persisted split with its signed effect on the account balance."""

    id: UUID
    line_no: int
    account_id: UUID
    account_name: str
    account_type: AccountType
    side: SplitSide
    amount_minor: int
    effect_minor: int
    category_tag_id: UUID | None = None
    category_tag_name: str | None = None
    memo: str | None = None

    @classmethod
    def from_model(cls, model: LedgerSplitModel) -> PostedSplit:
        account = model.account
        tag = model.category_tag
        return cls(
            id=model.id,
            line_no=model.line_no,
            account_id=account.id,
            account_name=account.name,
            account_type=account.account_type,
            side=model.side,
            amount_minor=model.amount_minor,
            effect_minor=split_effect(
                account.account_type, model.side, model.amount_minor
            ),
            category_tag_id=model.category_tag_id,
            category_tag_name=tag.name if tag is not None else None,
            memo=model.memo,
        )


@dataclass(frozen=True)
class PostedTransaction:
    """Materialized view of a posted transaction."""

    id: UUID
    created_by_id: UUID
    household_id: UUID | None
    txn_date: date
    currency: str
    description: str
    kind: TransactionKind
    splits: tuple[PostedSplit, ...]
    created_at: datetime
    updated_at: datetime

    @property
    def total_debits(self) -> int:
        return sum(s.amount_minor for s in self.splits if s.side == SplitSide.DEBIT)

    @property
    def total_credits(self) -> int:
        return sum(s.amount_minor for s in self.splits if s.side == SplitSide.CREDIT)

    @classmethod
    def from_model(cls, model: LedgerTransactionModel) -> PostedTransaction:
        splits = tuple(PostedSplit.from_model(s) for s in model.splits)
        return cls(
            id=model.id,
            created_by_id=model.created_by_id,
            household_id=model.household_id,
            txn_date=model.txn_date,
            currency=model.currency_code,
            description=model.description,
            kind=derive_kind(s.account_type for s in splits),
            splits=splits,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


# ---------------------------------------------------------------------------
# Balances and reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BalanceResult:
    """Signed balance of one account as of a date (inclusive)."""

    account_id: UUID
    account_name: str
    account_type: AccountType
    currency: str
    as_of: date
    balance_minor: int


@dataclass(frozen=True)
class TimeseriesPoint:
    date: date
    balance_minor: int


@dataclass(frozen=True)
class BalanceTimeseries:
    """
    Daily end-of-day balances for one account over an inclusive date range.

    ``opening_balance_minor`` is the balance at the end of the day before
    ``date_from``.
    """

    account_id: UUID
    account_name: str
    account_type: AccountType
    currency: str
    date_from: date
    date_to: date
    opening_balance_minor: int
    points: tuple[TimeseriesPoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MonthlyExpenseRow:
    """Net spend for one (expense account, category) pair in a month."""

    account_id: UUID
    account_name: str
    category_tag_id: UUID | None
    category_name: str | None
    currency: str
    amount_minor: int


# ---------------------------------------------------------------------------
# Read views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountView:
    id: UUID
    owner_id: UUID
    name: str
    account_type: AccountType
    currency: str

    @classmethod
    def from_model(cls, model: AccountModel) -> AccountView:
        return cls(
            id=model.id,
            owner_id=model.owner_id,
            name=model.name,
            account_type=model.account_type,
            currency=model.currency_code,
        )


@dataclass(frozen=True)
class CategoryTagView:
    id: UUID
    owner_id: UUID
    name: str
    color: str | None = None

    @classmethod
    def from_model(cls, model: CategoryTagModel) -> CategoryTagView:
        return cls(
            id=model.id,
            owner_id=model.owner_id,
            name=model.name,
            color=model.color,
        )



@dataclass(frozen=True)
class HouseholdSummary:
    """One of the actor's households, as seen from their membership."""

    id: UUID
    name: str
    role: HouseholdRole
    status: MemberStatus
    created_at: datetime


@dataclass(frozen=True)
class HouseholdMemberView:
    user_id: UUID
    username: str
    role: HouseholdRole
    status: MemberStatus


@dataclass(frozen=True)
class HouseholdView:
    id: UUID
    name: str
    created_at: datetime
    members: tuple[HouseholdMemberView, ...] = field(default_factory=tuple)
