"""
AccessControlResolver -- who may post to, or read, which accounts.

Responsibility:
    Resolves the accounts and category tags a posting references and decides
    whether the acting user may use them.  Provides the matching read-side
    visibility checks used by balances and reports.

Architecture position:
    Kernel > Services.  Reads through ReferenceSelector and HouseholdSelector;
    never writes.

Invariants enforced:
    - Accounts the actor owns are always usable.
    - A non-owned account is usable only in HOUSEHOLD mode, with a household
      id, by an ACTIVE member, when the account is shared into that household
      and is an ASSET account.  One failing account fails the whole request.
    - Category tags must exist and belong to the actor.
    - Every account's currency equals the transaction currency.
    - Reads and writes use the same membership and share rules and raise the
      same exception types.

Failure modes:
    - AccountsNotFoundError / CategoryTagsNotFoundError -- unknown ids.
    - CurrencyMismatchError -- account in another currency.
    - AccountNotOwnedError -- non-owned account outside HOUSEHOLD mode.
    - InvalidRequestError -- HOUSEHOLD mode without a household id.
    - NotHouseholdMemberError / AccountNotSharedError -- household checks.
    - CrossUserAccountTypeError -- non-owned account that is not an ASSET.
"""

from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.values import AccountType, PostingMode
from ledger_kernel.exceptions import (
    AccountNotOwnedError,
    AccountNotSharedError,
    AccountsNotFoundError,
    CategoryTagNotOwnedError,
    CategoryTagsNotFoundError,
    CrossUserAccountTypeError,
    CurrencyMismatchError,
    InvalidRequestError,
    NotHouseholdMemberError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.category_tag import CategoryTag
from ledger_kernel.selectors.household_selector import HouseholdSelector
from ledger_kernel.selectors.reference_selector import ReferenceSelector, distinct_ids

logger = get_logger("services.access_control")


class AccessControlResolver:
    """
    Resolution and permission checks shared by posting, balances and reports.

    Contract:
        Read-only.  Every check completes before the caller writes anything.
    """

    def __init__(self, session: Session):
        self.session = session
        self._references = ReferenceSelector(session)
        self._households = HouseholdSelector(session)

    # ------------------------------------------------------------------
    # Posting side
    # ------------------------------------------------------------------

    def resolve_accounts(self, account_ids: Iterable[UUID]) -> dict[UUID, Account]:
        """Bulk-load the distinct accounts; any missing id fails the request."""
        ids = distinct_ids(account_ids)
        accounts = self._references.find_accounts_by_ids(ids)
        missing = [i for i in ids if i not in accounts]
        if missing:
            raise AccountsNotFoundError(missing)
        return accounts

    @staticmethod
    def check_currency(accounts: Iterable[Account], currency_code: str) -> None:
        for account in accounts:
            if account.currency_code != currency_code:
                raise CurrencyMismatchError(
                    account_id=account.id,
                    account_name=account.name,
                    account_currency=account.currency_code,
                    transaction_currency=currency_code,
                )

    def authorize_posting(
        self,
        actor_id: UUID,
        accounts: Sequence[Account],
        mode: PostingMode,
        household_id: UUID | None,
    ) -> None:
        """
        Decide whether the actor may post to every resolved account.

        Only non-owned accounts trigger the household checks; a posting that
        touches the actor's own accounts alone is permitted in either mode.
        """
        non_owned = [a for a in accounts if a.owner_id != actor_id]
        if not non_owned:
            return

        if mode != PostingMode.HOUSEHOLD:
            raise AccountNotOwnedError(
                non_owned[0].id,
                "Cannot post to accounts not owned by current user in individual mode",
            )

        if household_id is None:
            raise InvalidRequestError("householdId is required for household mode")

        self.require_active_member(household_id, actor_id)

        shared = self._households.shared_account_ids(household_id)
        for account in non_owned:
            if account.id not in shared:
                raise AccountNotSharedError(
                    household_id, [account.id], account_name=account.name
                )

        for account in non_owned:
            if account.account_type != AccountType.ASSET:
                raise CrossUserAccountTypeError(
                    account_id=account.id,
                    account_name=account.name,
                    account_type=account.account_type.value,
                )

        logger.info(
            "cross_user_posting_authorized",
            extra={
                "household_id": str(household_id),
                "non_owned_accounts": [str(a.id) for a in non_owned],
            },
        )

    def resolve_category_tags(
        self, actor_id: UUID, category_tag_ids: Iterable[UUID]
    ) -> dict[UUID, CategoryTag]:
        """Bulk-load the distinct tags; all must exist and belong to the actor."""
        ids = distinct_ids(category_tag_ids)
        if not ids:
            return {}
        tags = self._references.find_category_tags_by_ids(ids)
        missing = [i for i in ids if i not in tags]
        if missing:
            raise CategoryTagsNotFoundError(missing)
        for tag_id in ids:
            tag = tags[tag_id]
            if tag.owner_id != actor_id:
                raise CategoryTagNotOwnedError(tag.id, tag.name)
        return tags

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def require_active_member(self, household_id: UUID, actor_id: UUID) -> None:
        if not self._households.is_active_member(household_id, actor_id):
            logger.warning(
                "household_access_denied",
                extra={"household_id": str(household_id), "actor_id": str(actor_id)},
            )
            raise NotHouseholdMemberError(household_id, actor_id)

    def require_account_visible(
        self,
        actor_id: UUID,
        account: Account,
        household_id: UUID | None = None,
    ) -> None:
        """
        Without a household id the actor must own the account.  With one, the
        actor must be an ACTIVE member and the account must be shared into the
        household, even when the actor owns it.
        """
        self.require_accounts_visible(actor_id, [account], household_id)

    def require_accounts_visible(
        self,
        actor_id: UUID,
        accounts: Sequence[Account],
        household_id: UUID | None = None,
    ) -> None:
        if household_id is None:
            for account in accounts:
                if account.owner_id != actor_id:
                    raise AccountNotOwnedError(
                        account.id, "Not the owner of this account"
                    )
            return

        self.require_active_member(household_id, actor_id)
        shared = self._households.shared_account_ids(household_id)
        not_shared = [a.id for a in accounts if a.id not in shared]
        if not_shared:
            raise AccountNotSharedError(household_id, not_shared)
