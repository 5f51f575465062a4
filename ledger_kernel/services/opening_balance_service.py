"""
OpeningBalanceService -- seed a new ASSET account with its starting balance.

Responsibility:
    Posts the two-split transaction that moves an opening balance between the
    per-owner, per-currency "Opening Equity" account and a new ASSET account,
    creating the equity account on first use.

Architecture position:
    Kernel > Services.  Delegates the actual posting to LedgerPostingService
    so the opening balance goes through exactly the same checks as any other
    transaction.

Invariants enforced:
    - At most one Opening Equity account per (owner, currency).  The owner's
      users row is locked with SELECT ... FOR UPDATE before the lookup, so
      concurrent opening-balance postings serialize on it; the unique
      (owner, type, currency, name) constraint backs this up.
    - Positive amount: DEBIT asset / CREDIT equity.  Negative amount: the
      sides are inverted and the absolute value is posted.

Failure modes:
    - InvalidRequestError if the account is not an ASSET, the amount is 0 or
      the date is not a date.  Nothing is written in these cases.
    - AccountNotOwnedError if the actor does not own the account.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.dtos import (
    PostedTransaction,
    PostTransactionRequest,
    SplitInput,
    as_uuid,
)
from ledger_kernel.domain.validation import validate_header
from ledger_kernel.domain.values import AccountType, PostingMode, SplitSide
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AccountNotOwnedError,
    InvalidRequestError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.user import User
from ledger_kernel.selectors.reference_selector import ReferenceSelector
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.posting_service import LedgerPostingService

logger = get_logger("services.opening_balance")

OPENING_EQUITY_NAME = "Opening Equity"


class OpeningBalanceService(BaseService):
    def post_opening_balance(
        self,
        actor_id: UUID,
        account_id: UUID,
        amount_minor: int,
        txn_date: date,
    ) -> PostedTransaction:
        """
        Post the opening balance of ``account_id`` dated ``txn_date``.

        Preconditions: the account is an ASSET account owned by the actor and
        ``amount_minor`` is a non-zero integer.
        """
        actor_id = as_uuid(actor_id, "actor id")
        account_id = as_uuid(account_id, "account id")

        account = ReferenceSelector(self.session).get_account(account_id)
        if account is None:
            raise AccountNotFoundError([account_id])
        if account.owner_id != actor_id:
            raise AccountNotOwnedError(account_id, "Not the owner of this account")
        if account.account_type != AccountType.ASSET:
            raise InvalidRequestError(
                "Opening balance is supported only for ASSET accounts"
            )
        if isinstance(amount_minor, bool) or not isinstance(amount_minor, int):
            raise InvalidRequestError("Opening balance must be an integer amount")
        if amount_minor == 0:
            raise InvalidRequestError("Opening balance must be non-zero")
        validate_header(txn_date, account.currency_code, None)

        equity = self.get_or_create_opening_equity(actor_id, account.currency_code)

        if amount_minor > 0:
            asset_side, equity_side = SplitSide.DEBIT, SplitSide.CREDIT
        else:
            asset_side, equity_side = SplitSide.CREDIT, SplitSide.DEBIT
        amount = abs(amount_minor)

        request = PostTransactionRequest(
            currency=account.currency_code,
            txn_date=txn_date,
            description=f"Opening balance - {account.name}",
            mode=PostingMode.INDIVIDUAL,
            splits=(
                SplitInput(account_id=account.id, side=asset_side, amount_minor=amount),
                SplitInput(account_id=equity.id, side=equity_side, amount_minor=amount),
            ),
        )
        posted = LedgerPostingService(self.session, self.clock).post(actor_id, request)

        logger.info(
            "opening_balance_posted",
            extra={
                "account_id": str(account.id),
                "transaction_id": str(posted.id),
                "amount_minor": amount_minor,
            },
        )
        return posted

    def get_or_create_opening_equity(self, owner_id: UUID, currency_code: str) -> Account:
        """
        Return the owner's Opening Equity account for the currency, creating
        it if needed.  Serialized per owner by a row lock on the users row.
        """
        # FOR UPDATE is dropped by the SQLite compiler
        self.session.execute(
            select(User.id).where(User.id == owner_id).with_for_update()
        )

        references = ReferenceSelector(self.session)
        equity = references.find_account(
            owner_id, AccountType.EQUITY, currency_code, OPENING_EQUITY_NAME
        )
        if equity is not None:
            return equity

        now = self.clock.now()
        equity = Account(
            owner_id=owner_id,
            name=OPENING_EQUITY_NAME,
            account_type=AccountType.EQUITY,
            currency_code=currency_code,
            created_at=now,
            updated_at=now,
        )
        self.session.add(equity)
        self.session.flush()
        logger.info(
            "opening_equity_created",
            extra={
                "account_id": str(equity.id),
                "owner_id": str(owner_id),
                "currency": currency_code,
            },
        )
        return equity
