"""
Module: ledger_kernel.selectors.transaction_selector
Responsibility: Filtered listing of posted transactions for the actor's own
    books or for a household.
Architecture position: Kernel > Selectors.

INDIVIDUAL mode lists transactions the actor created.  HOUSEHOLD mode requires
the actor to be an ACTIVE member and lists every transaction with at least one
split on an account currently shared into the household, whatever its
household tag (older postings have none).  Nothing shared, nothing listed.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.dtos import PostedTransaction, as_optional_uuid, as_uuid
from ledger_kernel.domain.values import PostingMode, parse_mode
from ledger_kernel.exceptions import InvalidRequestError, NotHouseholdMemberError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.ledger import LedgerSplit, LedgerTransaction
from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.household_selector import HouseholdSelector

logger = get_logger("selectors.transactions")


class TransactionSelector(BaseSelector):
    def list_transactions(
        self,
        actor_id: UUID,
        mode: PostingMode | str | None = PostingMode.INDIVIDUAL,
        household_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        account_id: UUID | None = None,
        category_tag_id: UUID | None = None,
        limit: int | None = None,
    ) -> list[PostedTransaction]:
        """
        List transactions newest first (txn_date desc, then created_at desc).

        Raises:
            InvalidRequestError: bad mode, or HOUSEHOLD without household_id.
            NotHouseholdMemberError: actor is not an ACTIVE member.
        """
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_optional_uuid(household_id, "household id")
        posting_mode = parse_mode(mode)

        stmt = select(LedgerTransaction)
        if posting_mode == PostingMode.HOUSEHOLD:
            if household_id is None:
                raise InvalidRequestError("householdId is required for household mode")
            households = HouseholdSelector(self.session)
            if not households.is_active_member(household_id, actor_id):
                logger.warning(
                    "transaction_list_denied",
                    extra={"household_id": str(household_id), "actor_id": str(actor_id)},
                )
                raise NotHouseholdMemberError(household_id, actor_id)
            shared = households.shared_account_ids(household_id)
            if not shared:
                return []
            stmt = stmt.where(
                LedgerTransaction.id.in_(
                    select(LedgerSplit.transaction_id).where(
                        LedgerSplit.account_id.in_(shared)
                    )
                )
            )
        else:
            stmt = stmt.where(LedgerTransaction.created_by_id == actor_id)

        if date_from is not None:
            stmt = stmt.where(LedgerTransaction.txn_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(LedgerTransaction.txn_date <= date_to)
        if account_id is not None:
            stmt = stmt.where(
                LedgerTransaction.id.in_(
                    select(LedgerSplit.transaction_id).where(
                        LedgerSplit.account_id == as_uuid(account_id, "account id")
                    )
                )
            )
        if category_tag_id is not None:
            stmt = stmt.where(
                LedgerTransaction.id.in_(
                    select(LedgerSplit.transaction_id).where(
                        LedgerSplit.category_tag_id
                        == as_uuid(category_tag_id, "category tag id")
                    )
                )
            )

        stmt = stmt.order_by(
            LedgerTransaction.txn_date.desc(),
            LedgerTransaction.created_at.desc(),
            LedgerTransaction.id,
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        return [
            PostedTransaction.from_model(txn) for txn in self.session.scalars(stmt)
        ]
