"""
ReportingService -- time series and aggregate reports.

Responsibility:
    Daily balance series for one account, monthly expense totals per
    (expense account, category), and the balances of every account a user
    owns.

Architecture position:
    Kernel > Services.  Read-only.  Aggregation queries live in
    LedgerSelector; this service adds access checks, the sign convention and
    the day-by-day accumulation.

Invariants enforced:
    - A series over [date_from, date_to] has exactly
      (date_to - date_from).days + 1 points, one per calendar day, with no
      gaps.  Each point is the balance at the end of that day.
    - The series starts from the balance as of the day before date_from.
    - Monthly totals cover [first day of month, first day of next month).

Failure modes:
    - InvalidDateRangeError -- date_from after date_to.
    - AccountNotFoundError / AccountNotOwnedError -- timeseries on an unknown
      or foreign account.
    - InvalidRequestError -- bad mode or month, HOUSEHOLD without a household.
    - NotHouseholdMemberError -- household report by a non-member.
"""

from datetime import date, timedelta
from uuid import UUID

from ledger_kernel.domain.dtos import (
    BalanceResult,
    BalanceTimeseries,
    MonthlyExpenseRow,
    TimeseriesPoint,
    as_optional_uuid,
    as_uuid,
)
from ledger_kernel.domain.sign_convention import signed_from_debit_minus_credit
from ledger_kernel.domain.values import PostingMode, YearMonth, parse_mode
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AccountNotOwnedError,
    InvalidDateRangeError,
    InvalidRequestError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.selectors.reference_selector import ReferenceSelector
from ledger_kernel.services.access_control import AccessControlResolver
from ledger_kernel.services.balance_service import BalanceService
from ledger_kernel.services.base import BaseService

logger = get_logger("services.reporting")


class ReportingService(BaseService):
    def balance_timeseries(
        self,
        actor_id: UUID,
        account_id: UUID,
        date_from: date,
        date_to: date,
    ) -> BalanceTimeseries:
        if date_from > date_to:
            raise InvalidDateRangeError(date_from, date_to)

        actor_id = as_uuid(actor_id, "actor id")
        account_id = as_uuid(account_id, "account id")

        account = ReferenceSelector(self.session).get_account(account_id)
        if account is None:
            raise AccountNotFoundError([account_id])
        if account.owner_id != actor_id:
            raise AccountNotOwnedError(account_id, "Not the owner of this account")

        ledger = LedgerSelector(self.session)
        opening_raw = ledger.raw_balances_by_account(
            [account.id], date_from - timedelta(days=1)
        ).get(account.id, 0)
        opening = signed_from_debit_minus_credit(account.account_type, opening_raw)
        daily = ledger.daily_net_by_account(account.id, date_from, date_to)

        points = []
        running = opening
        day = date_from
        while day <= date_to:
            running += signed_from_debit_minus_credit(
                account.account_type, daily.get(day, 0)
            )
            points.append(TimeseriesPoint(date=day, balance_minor=running))
            day += timedelta(days=1)

        logger.debug(
            "timeseries_computed",
            extra={"account_id": str(account.id), "points": len(points)},
        )
        return BalanceTimeseries(
            account_id=account.id,
            account_name=account.name,
            account_type=account.account_type,
            currency=account.currency_code,
            date_from=date_from,
            date_to=date_to,
            opening_balance_minor=opening,
            points=tuple(points),
        )

    def monthly_expenses(
        self,
        actor_id: UUID,
        period: YearMonth | str,
        mode: PostingMode | str | None = PostingMode.INDIVIDUAL,
        household_id: UUID | None = None,
    ) -> list[MonthlyExpenseRow]:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_optional_uuid(household_id, "household id")
        month = YearMonth.parse(period)
        posting_mode = parse_mode(mode)
        start = month.first_day()
        end = month.next_month().first_day()

        ledger = LedgerSelector(self.session)
        if posting_mode == PostingMode.HOUSEHOLD:
            if household_id is None:
                raise InvalidRequestError("householdId is required for household mode")
            AccessControlResolver(self.session).require_active_member(
                household_id, actor_id
            )
            rows = ledger.monthly_expenses_by_household(household_id, start, end)
        else:
            rows = ledger.monthly_expenses_by_user(actor_id, start, end)

        logger.debug(
            "monthly_expenses_computed",
            extra={"period": str(month), "mode": posting_mode.value, "rows": len(rows)},
        )
        return rows

    def all_account_balances(self, actor_id: UUID, as_of: date) -> list[BalanceResult]:
        """Balances of every account the actor owns, ordered by type then name."""
        actor_id = as_uuid(actor_id, "actor id")
        accounts = ReferenceSelector(self.session).find_accounts_by_owner(actor_id)
        return BalanceService(self.session, self.clock).balances(
            actor_id, [a.id for a in accounts], as_of
        )
