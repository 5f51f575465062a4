"""
AccountService -- create, rename and list a user's accounts.

Responsibility:
    The user-facing account lifecycle.  Creating an ASSET account with a
    non-zero opening balance also posts that balance through
    OpeningBalanceService in the same transaction.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - EQUITY accounts are system-managed; they cannot be created here.
    - (owner, type, currency, name) is unique per owner.
    - Opening balances only for ASSET accounts; an opening date only makes
      sense with a non-zero opening balance.

Failure modes:
    - InvalidRequestError: unknown type, EQUITY, blank name, unknown
      currency, bad opening-balance combination.
    - ConflictError: duplicate account.
    - AccountNotFoundError / AccountNotOwnedError on rename.
    - NotHouseholdMemberError when listing a household the actor is not in.
"""

from uuid import UUID

from ledger_kernel.domain.dtos import (
    AccountView,
    CreateAccountRequest,
    as_optional_uuid,
    as_uuid,
)
from ledger_kernel.domain.values import (
    AccountType,
    PostingMode,
    parse_account_type,
    parse_mode,
)
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AccountNotOwnedError,
    ConflictError,
    InvalidRequestError,
    UnknownCurrencyError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.selectors.household_selector import HouseholdSelector
from ledger_kernel.selectors.reference_selector import ReferenceSelector
from ledger_kernel.services.access_control import AccessControlResolver
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.opening_balance_service import OpeningBalanceService

logger = get_logger("services.accounts")


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidRequestError("Account name must not be blank")
    return cleaned


class AccountService(BaseService):
    def create_account(self, actor_id: UUID, request: CreateAccountRequest) -> AccountView:
        actor_id = as_uuid(actor_id, "actor id")
        account_type = parse_account_type(request.account_type)
        if account_type == AccountType.EQUITY:
            raise InvalidRequestError(
                "EQUITY accounts are system-managed and cannot be created manually"
            )

        references = ReferenceSelector(self.session)
        currency = references.find_currency(request.currency)
        if currency is None:
            raise UnknownCurrencyError(request.currency)

        name = _clean_name(request.name)

        opening = request.opening_balance_minor or 0
        if isinstance(opening, bool) or not isinstance(opening, int):
            raise InvalidRequestError("openingBalanceMinor must be an integer")
        if opening != 0 and account_type != AccountType.ASSET:
            raise InvalidRequestError(
                "openingBalanceMinor is supported only for ASSET accounts"
            )
        if request.opening_balance_date is not None and opening == 0:
            raise InvalidRequestError(
                "openingBalanceDate requires non-zero openingBalanceMinor"
            )

        if references.find_account(actor_id, account_type, currency.code, name):
            raise ConflictError(
                f"Account '{name}' of type {account_type.value} in "
                f"{currency.code} already exists"
            )

        now = self.clock.now()
        account = Account(
            owner_id=actor_id,
            name=name,
            account_type=account_type,
            currency_code=currency.code,
            created_at=now,
            updated_at=now,
        )
        self.session.add(account)
        self.session.flush()
        logger.info(
            "account_created",
            extra={
                "account_id": str(account.id),
                "account_type": account_type.value,
                "currency": currency.code,
            },
        )

        if opening != 0:
            OpeningBalanceService(self.session, self.clock).post_opening_balance(
                actor_id,
                account.id,
                opening,
                request.opening_balance_date or self.clock.today(),
            )

        return AccountView.from_model(account)

    def rename_account(self, actor_id: UUID, account_id: UUID, name: str) -> AccountView:
        actor_id = as_uuid(actor_id, "actor id")
        account_id = as_uuid(account_id, "account id")

        account = ReferenceSelector(self.session).get_account(account_id)
        if account is None:
            raise AccountNotFoundError([account_id])
        if account.owner_id != actor_id:
            raise AccountNotOwnedError(account_id, "Not the owner of this account")
        if account.account_type == AccountType.EQUITY:
            raise InvalidRequestError("EQUITY accounts are system-managed")

        new_name = _clean_name(name)
        if new_name != account.name:
            clash = ReferenceSelector(self.session).find_account(
                actor_id, account.account_type, account.currency_code, new_name
            )
            if clash is not None:
                raise ConflictError(f"Account '{new_name}' already exists")
            account.name = new_name
            account.updated_at = self.clock.now()
            self.session.flush()
            logger.info("account_renamed", extra={"account_id": str(account_id)})

        return AccountView.from_model(account)

    def list_accounts(
        self,
        actor_id: UUID,
        mode: PostingMode | str | None = PostingMode.INDIVIDUAL,
        household_id: UUID | None = None,
    ) -> list[AccountView]:
        """
        The actor's own accounts; in HOUSEHOLD mode also the accounts shared
        into the household, without duplicates, own accounts first.
        """
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_optional_uuid(household_id, "household id")
        posting_mode = parse_mode(mode)

        owned = ReferenceSelector(self.session).find_accounts_by_owner(actor_id)
        if posting_mode != PostingMode.HOUSEHOLD:
            return [AccountView.from_model(a) for a in owned]

        if household_id is None:
            raise InvalidRequestError("householdId is required for HOUSEHOLD mode")
        AccessControlResolver(self.session).require_active_member(household_id, actor_id)

        seen = {a.id for a in owned}
        result = [AccountView.from_model(a) for a in owned]
        for account in HouseholdSelector(self.session).shared_accounts(household_id):
            if account.id not in seen:
                seen.add(account.id)
                result.append(AccountView.from_model(account))
        return result
