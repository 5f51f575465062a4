"""
LedgerPostingService tests.

Verifies:
- Balanced transactions persist with their splits and materialized view
- Validation runs before any lookup and nothing is written on failure
- Currency, account and category-tag resolution errors
- Derived transaction kind and signed split effects
- Structured log events for posted and rejected transactions
"""

from datetime import date, datetime
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from ledger_kernel.domain.dtos import PostTransactionRequest, SplitInput
from ledger_kernel.domain.values import AccountType, SplitSide, TransactionKind
from ledger_kernel.exceptions import (
    AccountsNotFoundError,
    AccountNotOwnedError,
    CategoryTagNotOwnedError,
    CategoryTagsNotFoundError,
    CurrencyMismatchError,
    ForbiddenError,
    InvalidRequestError,
    UnbalancedTransactionError,
    UnknownCurrencyError,
)
from ledger_kernel.models.ledger import LedgerSplit, LedgerTransaction
from tests.conftest import TEST_DATE, credit, debit


def _transaction_count(session) -> int:
    return session.scalar(select(func.count()).select_from(LedgerTransaction))


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def books(alice, make_account):
    """Alice's checking, groceries and salary accounts."""
    return {
        "checking": make_account(alice, "Checking", AccountType.ASSET),
        "groceries": make_account(alice, "Groceries", AccountType.EXPENSE),
        "salary": make_account(alice, "Salary", AccountType.INCOME),
        "card": make_account(alice, "Card", AccountType.LIABILITY),
    }


class TestSuccessfulPosting:
    def test_expense_posting(self, session, alice, books, post):
        posted = post(
            alice,
            [debit(books["groceries"], 4250), credit(books["checking"], 4250)],
            description="  Weekly shop  ",
        )

        assert posted.kind == TransactionKind.EXPENSE
        assert posted.description == "Weekly shop"
        assert posted.currency == "EUR"
        assert posted.txn_date == TEST_DATE
        assert posted.household_id is None
        assert posted.created_by_id == alice.id
        assert posted.total_debits == posted.total_credits == 4250

        first, second = posted.splits
        assert (first.line_no, first.account_name, first.side) == (1, "Groceries", SplitSide.DEBIT)
        assert first.effect_minor == 4250
        assert (second.line_no, second.account_name, second.side) == (2, "Checking", SplitSide.CREDIT)
        assert second.effect_minor == -4250

        stored = session.get(LedgerTransaction, posted.id)
        assert stored is not None
        assert len(stored.splits) == 2
        assert sum(s.amount_minor for s in stored.splits if s.side == SplitSide.DEBIT) == 4250

    def test_income_kind(self, alice, books, post):
        posted = post(alice, [debit(books["checking"], 300000), credit(books["salary"], 300000)])
        assert posted.kind == TransactionKind.INCOME
        assert [s.effect_minor for s in posted.splits] == [300000, 300000]

    def test_transfer_kind(self, alice, books, post):
        posted = post(alice, [debit(books["card"], 5000), credit(books["checking"], 5000)])
        assert posted.kind == TransactionKind.TRANSFER
        # Paying down a liability reduces it
        assert posted.splits[0].effect_minor == -5000

    def test_multi_split_with_same_account(self, alice, books, post):
        posted = post(
            alice,
            [
                debit(books["groceries"], 1000),
                debit(books["groceries"], 500),
                credit(books["checking"], 1500),
            ],
        )
        assert [s.line_no for s in posted.splits] == [1, 2, 3]

    def test_timestamps_come_from_clock(self, alice, books, post, clock):
        posted = post(alice, [debit(books["groceries"], 1), credit(books["checking"], 1)])
        assert posted.created_at == clock.now()
        assert posted.updated_at == clock.now()

    def test_lowercase_currency_is_normalized(self, alice, books, post):
        posted = post(
            alice,
            [debit(books["groceries"], 10), credit(books["checking"], 10)],
            currency="eur",
        )
        assert posted.currency == "EUR"

    def test_string_ids_and_sides_accepted(self, alice, books, posting_service):
        request = PostTransactionRequest(
            currency="EUR",
            txn_date=TEST_DATE,
            description="raw input",
            splits=[
                SplitInput(str(books["groceries"].id), "DEBIT", 700),
                SplitInput(str(books["checking"].id), "CREDIT", 700),
            ],
            mode=None,
        )
        posted = posting_service.post(str(alice.id), request)
        assert posted.total_debits == 700

    def test_category_and_memo(self, alice, books, make_category, post):
        food = make_category(alice, "Food")
        posted = post(
            alice,
            [
                debit(books["groceries"], 900, category=food, memo="  bread  "),
                credit(books["checking"], 900, memo="   "),
            ],
        )
        assert posted.splits[0].category_tag_id == food.id
        assert posted.splits[0].category_tag_name == "Food"
        assert posted.splits[0].memo == "bread"
        assert posted.splits[1].memo is None

    def test_household_mode_with_own_accounts_only(
        self, alice, books, make_household, post
    ):
        household = make_household(alice)
        posted = post(
            alice,
            [debit(books["groceries"], 100), credit(books["checking"], 100)],
            mode="HOUSEHOLD",
            household=household,
        )
        assert posted.household_id == household.id

    def test_individual_mode_never_stores_household(
        self, alice, books, make_household, post
    ):
        household = make_household(alice)
        posted = post(
            alice,
            [debit(books["groceries"], 100), credit(books["checking"], 100)],
            mode="INDIVIDUAL",
            household=household,
        )
        assert posted.household_id is None


class TestRejections:
    def test_unbalanced_scenario(self, session, alice, books, post):
        with pytest.raises(UnbalancedTransactionError) as exc_info:
            post(alice, [debit(books["groceries"], 5000), credit(books["checking"], 4500)])
        assert "5000" in str(exc_info.value)
        assert "4500" in str(exc_info.value)
        assert _transaction_count(session) == 0

    def test_validation_runs_before_account_lookup(self, alice, eur, post):
        class Ghost:
            id = uuid4()

        # Unknown accounts would fail resolution; the structural error wins
        with pytest.raises(InvalidRequestError, match="at least 2 splits"):
            post(alice, [debit(Ghost, 100)])

    def test_unknown_currency(self, alice, books, post):
        with pytest.raises(UnknownCurrencyError, match="Invalid currency: XYZ"):
            post(
                alice,
                [debit(books["groceries"], 100), credit(books["checking"], 100)],
                currency="XYZ",
            )

    def test_unknown_mode(self, alice, books, post):
        with pytest.raises(InvalidRequestError, match="Invalid mode"):
            post(
                alice,
                [debit(books["groceries"], 100), credit(books["checking"], 100)],
                mode="FAMILY",
            )

    def test_missing_accounts_are_named(self, alice, books, post):
        class Ghost:
            id = uuid4()

        with pytest.raises(AccountsNotFoundError) as exc_info:
            post(alice, [debit(Ghost, 100), credit(books["checking"], 100)])
        assert exc_info.value.missing_ids == [str(Ghost.id)]
        assert str(Ghost.id) in str(exc_info.value)

    def test_currency_mismatch(self, session, alice, books, make_currency, make_account, post):
        make_currency("USD", 2, "US Dollar")
        dollars = make_account(alice, "Dollar Cash", AccountType.ASSET, currency="USD")
        with pytest.raises(CurrencyMismatchError) as exc_info:
            post(alice, [debit(books["groceries"], 100), credit(dollars, 100)])
        assert exc_info.value.account_name == "Dollar Cash"
        assert "Dollar Cash" in str(exc_info.value)
        assert _transaction_count(session) == 0

    def test_other_users_account_in_individual_mode(
        self, make_user, alice, books, make_account, post
    ):
        bob = make_user("bob")
        bobs_cash = make_account(bob, "Bob Cash", AccountType.ASSET)
        with pytest.raises(AccountNotOwnedError) as exc_info:
            post(alice, [debit(bobs_cash, 100), credit(books["checking"], 100)])
        assert "individual mode" in str(exc_info.value)
        assert isinstance(exc_info.value, ForbiddenError)

    def test_unknown_category_tag(self, alice, books, post):
        class GhostTag:
            id = uuid4()

        with pytest.raises(CategoryTagsNotFoundError) as exc_info:
            post(
                alice,
                [debit(books["groceries"], 100, category=GhostTag), credit(books["checking"], 100)],
            )
        assert exc_info.value.missing_ids == [str(GhostTag.id)]

    def test_category_tag_of_another_user(
        self, session, make_user, alice, books, make_category, post
    ):
        bob = make_user("bob")
        bobs_tag = make_category(bob, "Hobbies")
        with pytest.raises(CategoryTagNotOwnedError):
            post(
                alice,
                [debit(books["groceries"], 100, category=bobs_tag), credit(books["checking"], 100)],
            )
        assert _transaction_count(session) == 0
        assert session.scalar(select(func.count()).select_from(LedgerSplit)) == 0

    @pytest.mark.parametrize(
        "txn_date", [None, "2026-02-15", datetime(2026, 2, 15, 9, 30)]
    )
    def test_missing_or_mistyped_date(self, session, alice, books, post, txn_date):
        with pytest.raises(InvalidRequestError, match="txnDate must be a date"):
            post(
                alice,
                [debit(books["groceries"], 100), credit(books["checking"], 100)],
                txn_date=txn_date,
            )
        assert _transaction_count(session) == 0

    def test_non_string_currency(self, alice, books, post):
        with pytest.raises(InvalidRequestError, match="currency must be a string"):
            post(
                alice,
                [debit(books["groceries"], 100), credit(books["checking"], 100)],
                currency=978,
            )

    def test_non_string_description(self, alice, books, post):
        with pytest.raises(InvalidRequestError, match="description must be a string"):
            post(
                alice,
                [debit(books["groceries"], 100), credit(books["checking"], 100)],
                description=42,
            )

    def test_splits_none_reports_minimum_lines(self, alice, posting_service):
        request = PostTransactionRequest(
            currency="EUR", txn_date=None, description="x", splits=None
        )
        assert request.splits == ()
        with pytest.raises(InvalidRequestError, match="at least 2 splits"):
            posting_service.post(alice.id, request)

    def test_unknown_household_with_own_accounts(self, session, alice, books, post):
        missing = uuid4()
        with pytest.raises(InvalidRequestError, match="Household not found") as exc_info:
            post(
                alice,
                [debit(books["groceries"], 100), credit(books["checking"], 100)],
                mode="HOUSEHOLD",
                household=missing,
            )
        assert str(missing) in str(exc_info.value)
        assert _transaction_count(session) == 0

    def test_header_rejection_is_logged(self, alice, books, post, captured_logs):
        with pytest.raises(InvalidRequestError):
            post(
                alice,
                [debit(books["groceries"], 100), credit(books["checking"], 100)],
                txn_date=None,
            )
        records = [r for r in captured_logs() if r["message"] == "transaction_rejected"]
        assert records[0]["error_code"] == "INVALID_REQUEST"


class TestPostingLogs:
    def test_posted_event(self, alice, books, post, captured_logs):
        posted = post(alice, [debit(books["groceries"], 250), credit(books["checking"], 250)])

        records = [r for r in captured_logs() if r["message"] == "transaction_posted"]
        assert len(records) == 1
        record = records[0]
        assert record["transaction_id"] == str(posted.id)
        assert record["kind"] == "EXPENSE"
        assert record["split_count"] == 2
        assert record["total_minor"] == 250
        assert record["actor_id"] == str(alice.id)

    def test_rejected_event(self, alice, books, post, captured_logs):
        with pytest.raises(UnbalancedTransactionError):
            post(alice, [debit(books["groceries"], 2), credit(books["checking"], 1)])

        records = [r for r in captured_logs() if r["message"] == "transaction_rejected"]
        assert len(records) == 1
        assert records[0]["level"] == "WARNING"
        assert records[0]["error_code"] == "UNBALANCED_TRANSACTION"

    def test_context_is_restored_after_post(self, alice, books, post):
        from ledger_kernel.logging_config import LogContext

        post(alice, [debit(books["groceries"], 1), credit(books["checking"], 1)])
        assert "actor_id" not in LogContext.get_all()
