"""
Sign convention -- how raw DEBIT/CREDIT amounts become signed balances.

Responsibility:
    Single source of truth for the normal side of each account type, the
    signed effect of one split, the signed balance of a set of raw totals,
    and the kind (EXPENSE / INCOME / TRANSFER) of a transaction.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Used by the posting
    service (materialized view), the balance and reporting services, and the
    property tests.

Invariants enforced:
    - ASSET and EXPENSE are debit-normal: balance = sum(DEBIT) - sum(CREDIT).
    - LIABILITY, EQUITY and INCOME are credit-normal:
      balance = sum(CREDIT) - sum(DEBIT).
    - Summing split_effect over an account's splits equals
      signed_balance(type, debits, credits) for the same splits.
"""

from typing import Iterable

from ledger_kernel.domain.values import (
    DEBIT_NORMAL_TYPES,
    TRANSFER_TYPES,
    AccountType,
    SplitSide,
    TransactionKind,
)


def normal_side(account_type: AccountType) -> SplitSide:
    """Side on which the account type naturally increases."""
    if account_type in DEBIT_NORMAL_TYPES:
        return SplitSide.DEBIT
    return SplitSide.CREDIT


def is_debit_normal(account_type: AccountType) -> bool:
    return account_type in DEBIT_NORMAL_TYPES


def split_effect(
    account_type: AccountType, side: SplitSide, amount_minor: int
) -> int:
    """+amount when the split is on the account's normal side, else -amount."""
    if side == normal_side(account_type):
        return amount_minor
    return -amount_minor


def signed_balance(account_type: AccountType, debits: int, credits: int) -> int:
    """Balance from raw DEBIT and CREDIT totals under the type's convention."""
    if account_type in DEBIT_NORMAL_TYPES:
        return debits - credits
    return credits - debits


def signed_from_debit_minus_credit(
    account_type: AccountType, debit_minus_credit: int
) -> int:
    """Convert a raw (DEBIT - CREDIT) aggregate into a signed balance."""
    if account_type in DEBIT_NORMAL_TYPES:
        return debit_minus_credit
    return -debit_minus_credit


def derive_kind(account_types: Iterable[AccountType]) -> TransactionKind:
    """
    Classify a transaction by the types of the accounts it touches.

    TRANSFER when every type is ASSET, LIABILITY or EQUITY; otherwise EXPENSE
    if any EXPENSE account is involved, else INCOME if any INCOME account is,
    else TRANSFER.
    """
    types = set(account_types)
    if types <= TRANSFER_TYPES:
        return TransactionKind.TRANSFER
    if AccountType.EXPENSE in types:
        return TransactionKind.EXPENSE
    if AccountType.INCOME in types:
        return TransactionKind.INCOME
    return TransactionKind.TRANSFER
