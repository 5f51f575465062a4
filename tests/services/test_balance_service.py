"""
BalanceService tests.

Verifies:
- Sign convention per account type, as-of date inclusive
- Batch balances keep request order, include zero-activity accounts,
  and fail as a whole on a missing or invisible account
- Household visibility for reads mirrors the posting rules
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from ledger_kernel.domain.values import AccountType
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AccountNotOwnedError,
    AccountNotSharedError,
    NotHouseholdMemberError,
)
from ledger_kernel.models.household import MemberStatus
from ledger_kernel.services.balance_service import BalanceService
from tests.conftest import TEST_DATE, credit, debit


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def books(alice, make_account):
    return {
        "checking": make_account(alice, "Checking", AccountType.ASSET),
        "card": make_account(alice, "Card", AccountType.LIABILITY),
        "salary": make_account(alice, "Salary", AccountType.INCOME),
        "food": make_account(alice, "Food", AccountType.EXPENSE),
        "idle": make_account(alice, "Idle", AccountType.ASSET),
    }


@pytest.fixture
def service(session, clock):
    return BalanceService(session, clock)


@pytest.fixture
def activity(alice, books, post):
    """Salary in, groceries on the card, then the card paid down."""
    post(alice, [debit(books["checking"], 300000), credit(books["salary"], 300000)],
         txn_date=date(2026, 2, 1))
    post(alice, [debit(books["food"], 12000), credit(books["card"], 12000)],
         txn_date=date(2026, 2, 10))
    post(alice, [debit(books["card"], 5000), credit(books["checking"], 5000)],
         txn_date=TEST_DATE)


class TestSingleBalance:
    def test_sign_convention(self, alice, books, activity, service):
        def bal(name):
            return service.balance(alice.id, books[name].id, TEST_DATE).balance_minor

        assert bal("checking") == 295000
        assert bal("card") == 7000
        assert bal("salary") == 300000
        assert bal("food") == 12000

    def test_as_of_is_inclusive(self, alice, books, activity, service):
        checking = books["checking"].id
        assert service.balance(alice.id, checking, TEST_DATE - timedelta(days=1)).balance_minor == 300000
        assert service.balance(alice.id, checking, TEST_DATE).balance_minor == 295000
        assert service.balance(alice.id, checking, date(2026, 1, 31)).balance_minor == 0

    def test_result_fields(self, alice, books, activity, service):
        result = service.balance(alice.id, books["card"].id, TEST_DATE)
        assert result.account_name == "Card"
        assert result.account_type == AccountType.LIABILITY
        assert result.currency == "EUR"
        assert result.as_of == TEST_DATE

    def test_unknown_account(self, alice, eur, service):
        with pytest.raises(AccountNotFoundError, match="Account not found"):
            service.balance(alice.id, uuid4(), TEST_DATE)

    def test_foreign_account(self, make_user, books, service):
        bob = make_user("bob")
        with pytest.raises(AccountNotOwnedError):
            service.balance(bob.id, books["checking"].id, TEST_DATE)


class TestBatchBalances:
    def test_order_and_zero_activity(self, alice, books, activity, service):
        ids = [books["idle"].id, books["card"].id, books["idle"].id, books["checking"].id]
        results = service.balances(alice.id, ids, TEST_DATE)

        assert [r.account_name for r in results] == ["Idle", "Card", "Checking"]
        assert [r.balance_minor for r in results] == [0, 7000, 295000]

    def test_empty_request(self, alice, service):
        assert service.balances(alice.id, [], TEST_DATE) == []

    def test_missing_id_fails_whole_batch(self, alice, books, service):
        ghost = uuid4()
        with pytest.raises(AccountNotFoundError) as exc_info:
            service.balances(alice.id, [books["checking"].id, ghost], TEST_DATE)
        assert exc_info.value.account_ids == [str(ghost)]

    def test_foreign_account_fails_whole_batch(self, make_user, make_account, alice, books, service):
        bob = make_user("bob")
        bobs = make_account(bob, "Bob Cash")
        with pytest.raises(AccountNotOwnedError):
            service.balances(alice.id, [books["checking"].id, bobs.id], TEST_DATE)

    def test_matches_single_balances(self, alice, books, activity, service):
        ids = [a.id for a in books.values()]
        batch = {r.account_id: r.balance_minor for r in service.balances(alice.id, ids, TEST_DATE)}
        for account_id in ids:
            assert batch[account_id] == service.balance(alice.id, account_id, TEST_DATE).balance_minor


class TestHouseholdReads:
    @pytest.fixture
    def bob(self, make_user):
        return make_user("bob")

    @pytest.fixture
    def home(self, alice, make_household):
        return make_household(alice)

    def test_member_reads_shared_account(self, bob, home, books, activity, add_member, share, service):
        add_member(home, bob)
        share(home, books["checking"])
        result = service.balance(bob.id, books["checking"].id, TEST_DATE, household_id=home.id)
        assert result.balance_minor == 295000

    def test_batch_with_unshared_account(self, bob, home, books, add_member, share, service):
        add_member(home, bob)
        share(home, books["checking"])
        with pytest.raises(AccountNotSharedError) as exc_info:
            service.balances(
                bob.id, [books["checking"].id, books["card"].id], TEST_DATE, household_id=home.id
            )
        assert exc_info.value.account_ids == [str(books["card"].id)]

    def test_invited_member_refused(self, bob, home, books, add_member, share, service):
        add_member(home, bob, status=MemberStatus.INVITED)
        share(home, books["checking"])
        with pytest.raises(NotHouseholdMemberError):
            service.balance(bob.id, books["checking"].id, TEST_DATE, household_id=home.id)

    def test_non_member_refused(self, bob, home, books, share, service):
        share(home, books["checking"])
        with pytest.raises(NotHouseholdMemberError):
            service.balances(bob.id, [books["checking"].id], TEST_DATE, household_id=home.id)
