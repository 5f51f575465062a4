"""
Validation pipeline -- structural checks on proposed splits.

Responsibility:
    Reject malformed transactions before any account, currency or category
    lookup happens.  Each check is a pure function ``(splits) -> None`` that
    raises on failure; SPLIT_CHECKS fixes the order they run in and
    validate_splits() runs them, stopping at the first failure.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Called first by
    LedgerPostingService.post().

Invariants enforced:
    - At least two lines.
    - Every amount is an integer in 1..MAX_AMOUNT_MINOR.
    - Every side is DEBIT or CREDIT.
    - Integer sum of DEBIT amounts equals integer sum of CREDIT amounts.
    - The transaction date is a calendar date; currency and description are
      strings (description may be omitted).

Failure modes:
    - InvalidRequestError for the first three checks and for a missing or
      mistyped header field.
    - UnbalancedTransactionError (an InvalidRequestError) carrying both sums.
"""

from datetime import date, datetime
from typing import Callable, Sequence

from ledger_kernel.db.types import MAX_AMOUNT_MINOR
from ledger_kernel.domain.dtos import SplitInput
from ledger_kernel.domain.values import SplitSide, parse_side
from ledger_kernel.exceptions import (
    InvalidRequestError,
    UnbalancedTransactionError,
)

SplitCheck = Callable[[Sequence[SplitInput]], None]


def check_minimum_lines(splits: Sequence[SplitInput]) -> None:
    if splits is None or len(splits) < 2:
        raise InvalidRequestError("Transaction must have at least 2 splits")


def _is_valid_amount(amount: object) -> bool:
    # bool is an int subclass; True must not post as 1
    if isinstance(amount, bool) or not isinstance(amount, int):
        return False
    return 0 < amount <= MAX_AMOUNT_MINOR


def check_positive_amounts(splits: Sequence[SplitInput]) -> None:
    if any(not _is_valid_amount(s.amount_minor) for s in splits):
        raise InvalidRequestError("All split amounts must be greater than 0")


def check_sides(splits: Sequence[SplitInput]) -> None:
    for split in splits:
        parse_side(split.side)


def check_double_entry(splits: Sequence[SplitInput]) -> None:
    debits = 0
    credits = 0
    for split in splits:
        if parse_side(split.side) == SplitSide.DEBIT:
            debits += split.amount_minor
        else:
            credits += split.amount_minor
    if debits != credits:
        raise UnbalancedTransactionError(debits=debits, credits=credits)


SPLIT_CHECKS: tuple[SplitCheck, ...] = (
    check_minimum_lines,
    check_positive_amounts,
    check_sides,
    check_double_entry,
)


def validate_splits(splits: Sequence[SplitInput]) -> None:
    """Run every check in order; the first failure propagates."""
    for check in SPLIT_CHECKS:
        check(splits)


def validate_header(txn_date: object, currency: object, description: object) -> None:
    """Reject a missing or mistyped date, currency or description."""
    # datetime is a date subclass but carries a time of day
    if not isinstance(txn_date, date) or isinstance(txn_date, datetime):
        raise InvalidRequestError(f"txnDate must be a date, got {txn_date!r}")
    if not isinstance(currency, str):
        raise InvalidRequestError(f"currency must be a string, got {currency!r}")
    if description is not None and not isinstance(description, str):
        raise InvalidRequestError(
            f"description must be a string, got {type(description).__name__}"
        )
