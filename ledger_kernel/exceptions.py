"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (an HTTP layer, the CLI, tests) map kernel failures onto responses.
Matching on message text is fragile, so:
  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

The four top-level categories mirror the outcomes a caller has to map:

    LedgerKernelError (base)
    |
    +-- InvalidRequestError                 -> malformed or inconsistent input
    |   +-- UnbalancedTransactionError
    |   +-- AccountsNotFoundError
    |   +-- CategoryTagsNotFoundError
    |   +-- UnknownCurrencyError
    |   +-- CurrencyMismatchError
    |   +-- CrossUserAccountTypeError
    |   +-- InvalidDateRangeError
    |
    +-- ForbiddenError                      -> actor may not touch the resource
    |   +-- NotHouseholdMemberError
    |   +-- AccountNotSharedError
    |   +-- AccountNotOwnedError
    |   +-- CategoryTagNotOwnedError
    |
    +-- NotFoundError                       -> referenced entity does not exist
    |   +-- AccountNotFoundError
    |
    +-- ConflictError                       -> uniqueness / in-use violations

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
InvalidRequest  | INVALID_REQUEST             | Generic bad input (line count, side...)
                | UNBALANCED_TRANSACTION      | Debits != Credits
                | ACCOUNTS_NOT_FOUND          | Posting references unknown accounts
                | CATEGORY_TAGS_NOT_FOUND     | Posting references unknown tags
                | UNKNOWN_CURRENCY            | Currency code not in reference data
                | CURRENCY_MISMATCH           | Account currency != transaction currency
                | CROSS_USER_ACCOUNT_TYPE     | Non-owned account is not ASSET
                | INVALID_DATE_RANGE          | date_from > date_to
----------------|-----------------------------|-----------------------------------------
Forbidden       | FORBIDDEN                   | Generic access denial
                | NOT_HOUSEHOLD_MEMBER        | Actor is not an ACTIVE member
                | ACCOUNT_NOT_SHARED          | Account not shared into household
                | ACCOUNT_NOT_OWNED           | Account belongs to someone else
                | CATEGORY_TAG_NOT_OWNED      | Tag belongs to someone else
----------------|-----------------------------|-----------------------------------------
NotFound        | NOT_FOUND                   | Generic missing entity
                | ACCOUNT_NOT_FOUND           | Balance/report on unknown account
----------------|-----------------------------|-----------------------------------------
Conflict        | CONFLICT                    | Duplicate name, share, category in use

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        posted = LedgerPostingService(session).post(actor_id, request)
    except UnbalancedTransactionError as e:
        return {"error": e.code, "debits": e.debits, "credits": e.credits}
    except ForbiddenError as e:
        return {"error": e.code}, 403

Every subclass of a category also satisfies ``except <Category>``, so a
transport layer only needs the four category classes to pick a status code.
"""

from typing import Any, Iterable


def _sorted_ids(ids: Iterable[Any]) -> list[str]:
    return sorted(str(i) for i in ids)


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Invalid request


class InvalidRequestError(LedgerKernelError):
    """Request is malformed or internally inconsistent."""

    code: str = "INVALID_REQUEST"


class UnbalancedTransactionError(InvalidRequestError):
    """Sum of DEBIT amounts differs from sum of CREDIT amounts."""

    code: str = "UNBALANCED_TRANSACTION"

    def __init__(self, debits: int, credits: int):
        self.debits = debits
        self.credits = credits
        super().__init__(
            f"Double-entry violation: sum of debits ({debits}) "
            f"must equal sum of credits ({credits})"
        )


class AccountsNotFoundError(InvalidRequestError):
    """One or more accounts referenced by a posting do not exist."""

    code: str = "ACCOUNTS_NOT_FOUND"

    def __init__(self, missing_ids: Iterable[Any]):
        self.missing_ids = _sorted_ids(missing_ids)
        super().__init__(f"Accounts not found: {self.missing_ids}")


class CategoryTagsNotFoundError(InvalidRequestError):
    """One or more category tags referenced by a posting do not exist."""

    code: str = "CATEGORY_TAGS_NOT_FOUND"

    def __init__(self, missing_ids: Iterable[Any]):
        self.missing_ids = _sorted_ids(missing_ids)
        super().__init__(f"Category tags not found: {self.missing_ids}")


class UnknownCurrencyError(InvalidRequestError):
    """Currency code is not present in the reference data."""

    code: str = "UNKNOWN_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid currency: {currency}")


class CurrencyMismatchError(InvalidRequestError):
    """An account's currency differs from the transaction currency."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(
        self,
        account_id: Any,
        account_name: str,
        account_currency: str,
        transaction_currency: str,
    ):
        self.account_id = str(account_id)
        self.account_name = account_name
        self.account_currency = account_currency
        self.transaction_currency = transaction_currency
        super().__init__(
            f"Account '{account_name}' has currency {account_currency} "
            f"but transaction currency is {transaction_currency}"
        )


class CrossUserAccountTypeError(InvalidRequestError):
    """A non-owned account used in a household posting is not an ASSET."""

    code: str = "CROSS_USER_ACCOUNT_TYPE"

    def __init__(self, account_id: Any, account_name: str, account_type: str):
        self.account_id = str(account_id)
        self.account_name = account_name
        self.account_type = account_type
        super().__init__(
            f"Cross-user transfers only allow ASSET accounts, "
            f"but '{account_name}' is {account_type}"
        )


class InvalidDateRangeError(InvalidRequestError):
    """Start of a date range is after its end."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, date_from: Any, date_to: Any):
        self.date_from = date_from
        self.date_to = date_to
        super().__init__("dateFrom must be before or equal to dateTo")


# Forbidden


class ForbiddenError(LedgerKernelError):
    """Actor is not allowed to perform the operation."""

    code: str = "FORBIDDEN"


class NotHouseholdMemberError(ForbiddenError):
    """Actor is not an ACTIVE member of the household."""

    code: str = "NOT_HOUSEHOLD_MEMBER"

    def __init__(self, household_id: Any, user_id: Any):
        self.household_id = str(household_id)
        self.user_id = str(user_id)
        super().__init__("Not an active member of this household")


class AccountNotSharedError(ForbiddenError):
    """One or more accounts are not shared into the household."""

    code: str = "ACCOUNT_NOT_SHARED"

    def __init__(
        self,
        household_id: Any,
        account_ids: Iterable[Any],
        account_name: str | None = None,
    ):
        self.household_id = str(household_id)
        self.account_ids = _sorted_ids(account_ids)
        if account_name is not None:
            message = f"Account '{account_name}' is not shared into household"
        else:
            message = f"Accounts not shared into household: {self.account_ids}"
        super().__init__(message)


class AccountNotOwnedError(ForbiddenError):
    """Account belongs to another user and no household grants access."""

    code: str = "ACCOUNT_NOT_OWNED"

    def __init__(self, account_id: Any, message: str | None = None):
        self.account_id = str(account_id)
        super().__init__(message or "Account is not owned by current user")


class CategoryTagNotOwnedError(ForbiddenError):
    """Category tag belongs to another user."""

    code: str = "CATEGORY_TAG_NOT_OWNED"

    def __init__(self, category_tag_id: Any, name: str):
        self.category_tag_id = str(category_tag_id)
        self.name = name
        super().__init__(f"Category tag '{name}' is not owned by current user")


# Not found


class NotFoundError(LedgerKernelError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    """One or more accounts requested for a balance or report do not exist."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_ids: Iterable[Any]):
        self.account_ids = _sorted_ids(account_ids)
        if len(self.account_ids) == 1:
            message = "Account not found"
        else:
            message = f"Accounts not found: {self.account_ids}"
        super().__init__(message)


# Conflict


class ConflictError(LedgerKernelError):
    """Operation collides with existing state (duplicate name, share in use)."""

    code: str = "CONFLICT"
