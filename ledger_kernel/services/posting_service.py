"""
LedgerPostingService -- validate, authorize and persist one transaction.

Responsibility:
    The single write path for ledger transactions.  Runs the validation
    pipeline, resolves the currency, accounts and category tags, applies the
    access rules, then writes the transaction and all of its splits in one
    flush and returns the materialized view.

Architecture position:
    Kernel > Services -- imperative shell.  Pure checks live in
    domain/validation.py; lookups and permission checks in
    services/access_control.py.

Invariants enforced:
    - Structural checks run first and never touch the database.
    - Every check completes before anything is added to the session.
    - A transaction and its splits are flushed together or not at all.
    - household_id is stored only for HOUSEHOLD-mode postings.

Failure modes:
    - InvalidRequestError family: malformed splits, unknown currency, unknown
      accounts or tags, currency mismatch, cross-user non-ASSET account,
      HOUSEHOLD mode without a household id or with an unknown one, unknown
      mode, missing or mistyped date, currency or description.
    - ForbiddenError family: non-owned account in INDIVIDUAL mode, not an
      active member, account not shared, tag owned by someone else.
"""

from uuid import UUID

from ledger_kernel.domain.dtos import (
    PostedTransaction,
    PostTransactionRequest,
    as_optional_uuid,
    as_uuid,
)
from ledger_kernel.domain.validation import validate_header, validate_splits
from ledger_kernel.domain.values import PostingMode, parse_mode, parse_side
from ledger_kernel.exceptions import (
    InvalidRequestError,
    LedgerKernelError,
    UnknownCurrencyError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.ledger import LedgerSplit, LedgerTransaction
from ledger_kernel.selectors.household_selector import HouseholdSelector
from ledger_kernel.selectors.reference_selector import ReferenceSelector
from ledger_kernel.services.access_control import AccessControlResolver
from ledger_kernel.services.base import BaseService

logger = get_logger("services.posting")


def _clean_memo(memo: str | None) -> str | None:
    if memo is None:
        return None
    memo = memo.strip()
    return memo or None


class LedgerPostingService(BaseService):
    """
    Posts balanced multi-split transactions.

    Contract:
        ``post()`` either returns a PostedTransaction whose rows have been
        flushed into the caller's transaction, or raises a LedgerKernelError
        having added nothing to the session.
    """

    def post(self, actor_id: UUID, request: PostTransactionRequest) -> PostedTransaction:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_optional_uuid(request.household_id, "household id")

        with LogContext.bind(actor_id=actor_id, household_id=household_id):
            try:
                return self._post(actor_id, household_id, request)
            except LedgerKernelError as exc:
                logger.warning(
                    "transaction_rejected",
                    extra={"error_code": exc.code, "reason": str(exc)},
                )
                raise

    def _post(
        self,
        actor_id: UUID,
        household_id: UUID | None,
        request: PostTransactionRequest,
    ) -> PostedTransaction:
        splits = request.splits

        validate_splits(splits)
        logger.debug("balance_validated", extra={"split_count": len(splits)})
        validate_header(request.txn_date, request.currency, request.description)

        mode = parse_mode(request.mode)

        references = ReferenceSelector(self.session)
        currency = references.find_currency(request.currency)
        if currency is None:
            raise UnknownCurrencyError(request.currency)

        access = AccessControlResolver(self.session)
        account_ids = [as_uuid(s.account_id, "account id") for s in splits]
        accounts = access.resolve_accounts(account_ids)
        access.check_currency(accounts.values(), currency.code)
        access.authorize_posting(actor_id, list(accounts.values()), mode, household_id)
        if mode == PostingMode.HOUSEHOLD and household_id is not None:
            self._require_household(household_id)

        tag_ids = [
            as_uuid(s.category_tag_id, "category tag id")
            for s in splits
            if s.category_tag_id is not None
        ]
        tags = access.resolve_category_tags(actor_id, tag_ids)

        now = self.clock.now()
        txn = LedgerTransaction(
            created_by_id=actor_id,
            household_id=household_id if mode == PostingMode.HOUSEHOLD else None,
            txn_date=request.txn_date,
            currency_code=currency.code,
            description=(request.description or "").strip(),
            created_at=now,
            updated_at=now,
        )
        for line_no, (split, account_id) in enumerate(zip(splits, account_ids), start=1):
            tag_id = (
                as_uuid(split.category_tag_id, "category tag id")
                if split.category_tag_id is not None
                else None
            )
            txn.splits.append(
                LedgerSplit(
                    line_no=line_no,
                    account=accounts[account_id],
                    side=parse_side(split.side),
                    amount_minor=split.amount_minor,
                    category_tag=tags[tag_id] if tag_id is not None else None,
                    memo=_clean_memo(split.memo),
                )
            )

        self.session.add(txn)
        self.session.flush()

        posted = PostedTransaction.from_model(txn)
        logger.info(
            "transaction_posted",
            extra={
                "transaction_id": str(posted.id),
                "kind": posted.kind.value,
                "mode": mode.value,
                "currency": posted.currency,
                "split_count": len(posted.splits),
                "total_minor": posted.total_debits,
            },
        )
        return posted

    def _require_household(self, household_id: UUID) -> None:
        # authorize_posting skips the household when every account is the actor's own
        if HouseholdSelector(self.session).find_household(household_id) is None:
            raise InvalidRequestError(f"Household not found: {household_id}")
