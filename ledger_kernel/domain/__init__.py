"""Pure domain layer: values, DTOs, sign convention, validation and clocks."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.dtos import (
    AccountView,
    BalanceResult,
    BalanceTimeseries,
    CategoryTagView,
    CreateAccountRequest,
    MonthlyExpenseRow,
    PostedSplit,
    PostedTransaction,
    PostTransactionRequest,
    SplitInput,
    TimeseriesPoint,
)
from ledger_kernel.domain.values import (
    AccountType,
    PostingMode,
    SplitSide,
    TransactionKind,
    YearMonth,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "AccountType",
    "SplitSide",
    "PostingMode",
    "TransactionKind",
    "YearMonth",
    "SplitInput",
    "PostTransactionRequest",
    "CreateAccountRequest",
    "PostedSplit",
    "PostedTransaction",
    "BalanceResult",
    "TimeseriesPoint",
    "BalanceTimeseries",
    "MonthlyExpenseRow",
    "AccountView",
    "CategoryTagView",
]
