"""
Value type tests: enum parsing, posting modes and calendar months.
"""

from datetime import date

import pytest

from ledger_kernel.domain.values import (
    AccountType,
    PostingMode,
    SplitSide,
    YearMonth,
    parse_account_type,
    parse_mode,
    parse_side,
)
from ledger_kernel.exceptions import InvalidRequestError


class TestParseMode:
    def test_none_means_individual(self):
        assert parse_mode(None) == PostingMode.INDIVIDUAL

    @pytest.mark.parametrize("raw", ["household", "HOUSEHOLD", " Household "])
    def test_case_insensitive(self, raw):
        assert parse_mode(raw) == PostingMode.HOUSEHOLD

    def test_enum_passthrough(self):
        assert parse_mode(PostingMode.INDIVIDUAL) is PostingMode.INDIVIDUAL

    def test_unknown_mode_rejected(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_mode("SHARED")
        assert str(exc_info.value) == "Invalid mode: SHARED. Must be INDIVIDUAL or HOUSEHOLD"


class TestParseSide:
    def test_exact_names(self):
        assert parse_side("DEBIT") == SplitSide.DEBIT
        assert parse_side("CREDIT") == SplitSide.CREDIT

    @pytest.mark.parametrize("raw", ["debit", "DR", "", None, 1])
    def test_anything_else_rejected(self, raw):
        with pytest.raises(InvalidRequestError, match="Invalid split side"):
            parse_side(raw)


class TestParseAccountType:
    def test_case_insensitive(self):
        assert parse_account_type("expense") == AccountType.EXPENSE

    def test_unknown_type(self):
        with pytest.raises(InvalidRequestError, match="Invalid account type: CASH"):
            parse_account_type("CASH")


class TestYearMonth:
    def test_parse_and_format(self):
        month = YearMonth.parse("2026-02")
        assert month == YearMonth(2026, 2)
        assert str(month) == "2026-02"

    def test_first_day_and_next_month(self):
        month = YearMonth(2026, 2)
        assert month.first_day() == date(2026, 2, 1)
        assert month.next_month().first_day() == date(2026, 3, 1)

    def test_december_rolls_over(self):
        assert YearMonth(2025, 12).next_month() == YearMonth(2026, 1)

    def test_of_date(self):
        assert YearMonth.of(date(2024, 2, 29)) == YearMonth(2024, 2)

    @pytest.mark.parametrize("raw", ["2026-13", "2026-00", "2026/02", "26-02", "february"])
    def test_invalid_months(self, raw):
        with pytest.raises(InvalidRequestError):
            YearMonth.parse(raw)

    def test_ordering(self):
        assert YearMonth(2025, 12) < YearMonth(2026, 1)
