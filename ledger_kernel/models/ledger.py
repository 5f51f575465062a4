"""
Module: ledger_kernel.models.ledger
Responsibility: ORM persistence for ledger transactions and their splits --
    the single source of truth for every balance and report.
Architecture position: Kernel > Models.  May import from db/ and
    domain/values.py only.  MUST NOT import from services/ or selectors/.

Invariants enforced:
    - amount_minor > 0 on every split (CHECK constraint); direction is carried
      by side, never by sign.
    - Splits are owned by their transaction: they are written together in one
      flush and deleted with it (cascade).
    - Debits == credits per transaction (checked by the validation pipeline
      before the rows are built).
    - household_id is set at posting time from the request mode and is never
      re-derived from later share changes.  It is cleared only when the
      household itself is dissolved.

Failure modes:
    - IntegrityError if a split with amount_minor <= 0 reaches the database.
"""

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import Base, TrackedBase
from ledger_kernel.db.types import (
    CurrencyCode,
    LongText,
    MinorUnits,
    enum_column_type,
)
from ledger_kernel.domain.values import SplitSide

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.category_tag import CategoryTag


class LedgerTransaction(TrackedBase):
    """
    A balanced set of splits recorded on one date in one currency.

    Contract:
        Created only by LedgerPostingService (directly or through the
        opening-balance path) with all of its splits in a single flush.

    Guarantees:
        - splits are loaded in line_no order.
        - updated_at is refreshed on every modification.
    """

    __tablename__ = "ledger_transactions"

    __table_args__ = (
        Index("idx_txn_created_by", "created_by_id"),
        Index("idx_txn_household", "household_id"),
        Index("idx_txn_date", "txn_date"),
    )

    created_by_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    # Only set for HOUSEHOLD-mode postings
    household_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("households.id"),
        nullable=True,
    )

    txn_date: Mapped[date] = mapped_column(Date, nullable=False)

    currency_code: Mapped[CurrencyCode] = mapped_column(
        ForeignKey("currencies.code"),
        nullable=False,
    )

    description: Mapped[LongText] = mapped_column(nullable=False)

    splits: Mapped[list["LedgerSplit"]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="LedgerSplit.line_no",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<LedgerTransaction {self.id} {self.txn_date} {self.currency_code}>"


class LedgerSplit(Base):
    """
    One DEBIT or CREDIT line of a transaction against a single account.

    Guarantees:
        - amount_minor is a positive integer in the transaction currency's
          minor unit.
        - line_no is unique within its transaction and preserves request order.
    """

    __tablename__ = "ledger_splits"

    __table_args__ = (
        CheckConstraint("amount_minor > 0", name="ck_split_amount_positive"),
        UniqueConstraint("transaction_id", "line_no", name="uq_split_line_no"),
        Index("idx_split_account", "account_id"),
        Index("idx_split_category", "category_tag_id"),
    )

    transaction_id: Mapped[UUID] = mapped_column(
        ForeignKey("ledger_transactions.id", ondelete="CASCADE"),
        nullable=False,
    )

    line_no: Mapped[int] = mapped_column(Integer, nullable=False)

    account_id: Mapped[UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    side: Mapped[SplitSide] = mapped_column(
        enum_column_type(SplitSide, length=10),
        nullable=False,
    )

    amount_minor: Mapped[MinorUnits] = mapped_column(nullable=False)

    category_tag_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("category_tags.id"),
        nullable=True,
    )

    memo: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    transaction: Mapped["LedgerTransaction"] = relationship(
        back_populates="splits",
    )

    account: Mapped["Account"] = relationship(lazy="joined")

    category_tag: Mapped["CategoryTag | None"] = relationship()

    def __repr__(self) -> str:
        return f"<LedgerSplit {self.side.value} {self.amount_minor}>"
