"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Grouped aggregations over ledger splits -- raw per-account
    balances, per-day net movement, and monthly expense totals by account and
    category.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.

Invariants enforced:
    - No stored balances.  Every figure is derived from ledger_splits joined to
      ledger_transactions.
    - Aggregations return raw (DEBIT - CREDIT) sums; the sign convention is
      applied by the caller through domain.sign_convention (except for
      expense rows, which are debit-normal by definition).
    - The as-of date is inclusive; monthly windows are [first day, first day
      of next month).
    - One query per aggregation regardless of how many accounts are involved.

Failure modes:
    - None beyond database errors.  Unknown ids simply produce no rows; callers
      decide whether that is NotFound.
"""

from datetime import date
from typing import Iterable
from uuid import UUID

from sqlalchemy import case, func, select

from ledger_kernel.domain.dtos import MonthlyExpenseRow
from ledger_kernel.domain.values import AccountType, SplitSide
from ledger_kernel.models.account import Account
from ledger_kernel.models.category_tag import CategoryTag
from ledger_kernel.models.ledger import LedgerSplit, LedgerTransaction
from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.reference_selector import distinct_ids

# +amount for DEBIT, -amount for CREDIT
_DEBIT_MINUS_CREDIT = case(
    (LedgerSplit.side == SplitSide.DEBIT, LedgerSplit.amount_minor),
    else_=-LedgerSplit.amount_minor,
)


class LedgerSelector(BaseSelector):
    """
    Read-only aggregations over the ledger.

    Contract:
        Callers have already checked that the actor may see the accounts or
        household involved.  The selector does no access control.

    Guarantees:
        - Results are plain Python ints (PostgreSQL SUM over BIGINT yields
          NUMERIC, which is converted here).
    """

    def raw_balances_by_account(
        self, account_ids: Iterable[UUID], as_of: date
    ) -> dict[UUID, int]:
        """
        sum(DEBIT) - sum(CREDIT) per account for transactions dated on or
        before as_of.  Accounts without splits are absent from the result.
        """
        ids = distinct_ids(account_ids)
        if not ids:
            return {}
        stmt = (
            select(LedgerSplit.account_id, func.sum(_DEBIT_MINUS_CREDIT))
            .join(LedgerTransaction, LedgerSplit.transaction_id == LedgerTransaction.id)
            .where(
                LedgerSplit.account_id.in_(ids),
                LedgerTransaction.txn_date <= as_of,
            )
            .group_by(LedgerSplit.account_id)
        )
        return {
            account_id: int(total or 0)
            for account_id, total in self.session.execute(stmt)
        }

    def daily_net_by_account(
        self, account_id: UUID, date_from: date, date_to: date
    ) -> dict[date, int]:
        """Raw (DEBIT - CREDIT) movement per day in [date_from, date_to]."""
        stmt = (
            select(LedgerTransaction.txn_date, func.sum(_DEBIT_MINUS_CREDIT))
            .join(LedgerTransaction, LedgerSplit.transaction_id == LedgerTransaction.id)
            .where(
                LedgerSplit.account_id == account_id,
                LedgerTransaction.txn_date >= date_from,
                LedgerTransaction.txn_date <= date_to,
            )
            .group_by(LedgerTransaction.txn_date)
        )
        return {day: int(total or 0) for day, total in self.session.execute(stmt)}

    def monthly_expenses_by_user(
        self, user_id: UUID, month_start: date, next_month_start: date
    ) -> list[MonthlyExpenseRow]:
        """Expense totals over the user's own EXPENSE accounts."""
        return self._monthly_expenses(
            Account.owner_id == user_id, month_start, next_month_start
        )

    def monthly_expenses_by_household(
        self, household_id: UUID, month_start: date, next_month_start: date
    ) -> list[MonthlyExpenseRow]:
        """Expense totals over transactions tagged with the household."""
        return self._monthly_expenses(
            LedgerTransaction.household_id == household_id,
            month_start,
            next_month_start,
        )

    def _monthly_expenses(
        self, scope, month_start: date, next_month_start: date
    ) -> list[MonthlyExpenseRow]:
        stmt = (
            select(
                Account.id,
                Account.name,
                CategoryTag.id,
                CategoryTag.name,
                Account.currency_code,
                func.sum(_DEBIT_MINUS_CREDIT),
            )
            .select_from(LedgerSplit)
            .join(LedgerTransaction, LedgerSplit.transaction_id == LedgerTransaction.id)
            .join(Account, LedgerSplit.account_id == Account.id)
            .outerjoin(CategoryTag, LedgerSplit.category_tag_id == CategoryTag.id)
            .where(
                scope,
                Account.account_type == AccountType.EXPENSE,
                LedgerTransaction.txn_date >= month_start,
                LedgerTransaction.txn_date < next_month_start,
            )
            .group_by(
                Account.id,
                Account.name,
                CategoryTag.id,
                CategoryTag.name,
                Account.currency_code,
            )
            .order_by(
                Account.name,
                Account.id,
                # Uncategorized last within an account
                case((CategoryTag.name.is_(None), 1), else_=0),
                CategoryTag.name,
            )
        )
        return [
            MonthlyExpenseRow(
                account_id=account_id,
                account_name=account_name,
                category_tag_id=category_id,
                category_name=category_name,
                currency=currency,
                amount_minor=int(total or 0),
            )
            for (
                account_id,
                account_name,
                category_id,
                category_name,
                currency,
                total,
            ) in self.session.execute(stmt)
        ]
