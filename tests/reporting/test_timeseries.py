"""
Balance time-series tests.

The series over [date_from, date_to] has one end-of-day point per calendar
day, starting from the balance as of the day before date_from.
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from ledger_kernel.domain.values import AccountType
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AccountNotOwnedError,
    InvalidDateRangeError,
    InvalidRequestError,
)
from ledger_kernel.services.reporting_service import ReportingService
from tests.conftest import credit, debit


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def checking(alice, make_account):
    return make_account(alice, "Checking", AccountType.ASSET)


@pytest.fixture
def salary(alice, make_account):
    return make_account(alice, "Salary", AccountType.INCOME)


@pytest.fixture
def service(session, clock):
    return ReportingService(session, clock)


class TestBalanceTimeseries:
    def test_running_balance(self, alice, checking, salary, post, service):
        post(alice, [debit(checking, 1000), credit(salary, 1000)], txn_date=date(2026, 1, 31))
        post(alice, [debit(checking, 200), credit(salary, 200)], txn_date=date(2026, 2, 2))
        post(alice, [debit(salary, 50), credit(checking, 50)], txn_date=date(2026, 2, 2))
        post(alice, [debit(checking, 300), credit(salary, 300)], txn_date=date(2026, 2, 4))

        series = service.balance_timeseries(alice.id, checking.id, date(2026, 2, 1), date(2026, 2, 5))

        assert series.opening_balance_minor == 1000
        assert [(p.date.day, p.balance_minor) for p in series.points] == [
            (1, 1000),
            (2, 1150),
            (3, 1150),
            (4, 1450),
            (5, 1450),
        ]
        assert series.account_name == "Checking"
        assert series.currency == "EUR"
        assert (series.date_from, series.date_to) == (date(2026, 2, 1), date(2026, 2, 5))

    def test_credit_normal_account(self, alice, checking, salary, post, service):
        post(alice, [debit(checking, 700), credit(salary, 700)], txn_date=date(2026, 3, 10))
        series = service.balance_timeseries(alice.id, salary.id, date(2026, 3, 9), date(2026, 3, 10))
        assert [p.balance_minor for p in series.points] == [0, 700]

    def test_single_day(self, alice, checking, service):
        series = service.balance_timeseries(alice.id, checking.id, date(2026, 2, 1), date(2026, 2, 1))
        assert len(series.points) == 1
        assert series.points[0].balance_minor == 0

    def test_contiguous_across_leap_day(self, alice, checking, service):
        start, end = date(2024, 2, 20), date(2024, 3, 5)
        series = service.balance_timeseries(alice.id, checking.id, start, end)
        assert len(series.points) == (end - start).days + 1
        for previous, current in zip(series.points, series.points[1:]):
            assert current.date - previous.date == timedelta(days=1)

    def test_reversed_range(self, alice, checking, service):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            service.balance_timeseries(alice.id, checking.id, date(2026, 2, 2), date(2026, 2, 1))
        assert str(exc_info.value) == "dateFrom must be before or equal to dateTo"
        assert isinstance(exc_info.value, InvalidRequestError)

    def test_range_checked_before_account(self, alice, service):
        with pytest.raises(InvalidDateRangeError):
            service.balance_timeseries(alice.id, uuid4(), date(2026, 2, 2), date(2026, 2, 1))

    def test_unknown_account(self, alice, eur, service):
        with pytest.raises(AccountNotFoundError):
            service.balance_timeseries(alice.id, uuid4(), date(2026, 2, 1), date(2026, 2, 2))

    def test_foreign_account(self, make_user, checking, service):
        bob = make_user("bob")
        with pytest.raises(AccountNotOwnedError):
            service.balance_timeseries(bob.id, checking.id, date(2026, 2, 1), date(2026, 2, 2))


class TestAllAccountBalances:
    def test_every_owned_account(self, make_user, alice, checking, salary, make_account, post, service):
        bob = make_user("bob")
        make_account(bob, "Bob Cash")
        post(alice, [debit(checking, 400), credit(salary, 400)], txn_date=date(2026, 2, 1))

        results = service.all_account_balances(alice.id, date(2026, 2, 28))

        assert [(r.account_name, r.balance_minor) for r in results] == [
            ("Checking", 400),
            ("Salary", 400),
        ]

    def test_user_without_accounts(self, alice, service):
        assert service.all_account_balances(alice.id, date(2026, 2, 28)) == []
