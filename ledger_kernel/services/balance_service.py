"""
BalanceService -- point-in-time account balances.

Responsibility:
    Single and batch balance queries as of a date (inclusive), after the same
    visibility checks the posting path applies.

Architecture position:
    Kernel > Services.  Read-only: never adds, flushes or deletes.

Invariants enforced:
    - Balances are derived from splits on every call; nothing is stored.
    - ASSET/EXPENSE report sum(DEBIT) - sum(CREDIT); LIABILITY/EQUITY/INCOME
      report sum(CREDIT) - sum(DEBIT).
    - The batch form issues one grouped aggregation for all requested
      accounts, reports 0 for accounts without splits, and preserves the
      distinct request order.

Failure modes:
    - AccountNotFoundError -- any requested id is unknown.
    - AccountNotOwnedError -- without a household id, an account is not owned.
    - NotHouseholdMemberError / AccountNotSharedError -- household checks.
"""

from datetime import date
from typing import Iterable
from uuid import UUID

from ledger_kernel.domain.dtos import BalanceResult, as_optional_uuid, as_uuid
from ledger_kernel.domain.sign_convention import signed_from_debit_minus_credit
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.selectors.reference_selector import ReferenceSelector, distinct_ids
from ledger_kernel.services.access_control import AccessControlResolver
from ledger_kernel.services.base import BaseService

logger = get_logger("services.balances")


def _result(account: Account, as_of: date, raw: int) -> BalanceResult:
    return BalanceResult(
        account_id=account.id,
        account_name=account.name,
        account_type=account.account_type,
        currency=account.currency_code,
        as_of=as_of,
        balance_minor=signed_from_debit_minus_credit(account.account_type, raw),
    )


class BalanceService(BaseService):
    def balance(
        self,
        actor_id: UUID,
        account_id: UUID,
        as_of: date,
        household_id: UUID | None = None,
    ) -> BalanceResult:
        actor_id = as_uuid(actor_id, "actor id")
        account_id = as_uuid(account_id, "account id")
        household_id = as_optional_uuid(household_id, "household id")

        account = ReferenceSelector(self.session).get_account(account_id)
        if account is None:
            raise AccountNotFoundError([account_id])
        AccessControlResolver(self.session).require_account_visible(
            actor_id, account, household_id
        )

        raw = LedgerSelector(self.session).raw_balances_by_account([account.id], as_of)
        return _result(account, as_of, raw.get(account.id, 0))

    def balances(
        self,
        actor_id: UUID,
        account_ids: Iterable[UUID],
        as_of: date,
        household_id: UUID | None = None,
    ) -> list[BalanceResult]:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_optional_uuid(household_id, "household id")
        ids = distinct_ids(as_uuid(i, "account id") for i in account_ids)
        if not ids:
            return []

        accounts = ReferenceSelector(self.session).find_accounts_by_ids(ids)
        missing = [i for i in ids if i not in accounts]
        if missing:
            raise AccountNotFoundError(missing)

        ordered = [accounts[i] for i in ids]
        AccessControlResolver(self.session).require_accounts_visible(
            actor_id, ordered, household_id
        )

        raw = LedgerSelector(self.session).raw_balances_by_account(ids, as_of)
        logger.debug("balances_computed", extra={"account_count": len(ids)})
        return [_result(a, as_of, raw.get(a.id, 0)) for a in ordered]
