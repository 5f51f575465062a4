"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for user-owned ledger accounts -- the target
    of every split.
Architecture position: Kernel > Models.  May import from db/ and
    domain/values.py only.

Invariants enforced:
    - (owner_id, account_type, currency_code, name) is unique, which also
      keeps one "Opening Equity" account per owner and currency.
    - account_type and currency_code are fixed at creation; only the name
      can be changed later.

Failure modes:
    - IntegrityError on a duplicate (owner, type, currency, name); the account
      service checks first and raises ConflictError instead.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import CurrencyCode, ShortName, enum_column_type
from ledger_kernel.domain.values import AccountType

if TYPE_CHECKING:
    from ledger_kernel.models.user import User


class Account(TrackedBase):
    """
    A single account in a user's books.

    Contract:
        Every account has exactly one owner.  Other users only ever reach it
        through a household share.

    Non-goals:
        - No hierarchy, no active/inactive flag, no stored balance.  Balances
          are always derived from splits.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint(
            "owner_id",
            "account_type",
            "currency_code",
            "name",
            name="uq_account_owner_type_currency_name",
        ),
        Index("idx_account_owner", "owner_id"),
    )

    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    name: Mapped[ShortName] = mapped_column(nullable=False)

    account_type: Mapped[AccountType] = mapped_column(
        enum_column_type(AccountType),
        nullable=False,
    )

    currency_code: Mapped[CurrencyCode] = mapped_column(
        ForeignKey("currencies.code"),
        nullable=False,
    )

    owner: Mapped["User"] = relationship()

    def __repr__(self) -> str:
        return f"<Account {self.name} {self.account_type.value} {self.currency_code}>"
