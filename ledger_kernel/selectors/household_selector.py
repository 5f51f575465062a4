"""
Module: ledger_kernel.selectors.household_selector
Responsibility: Read-only household state -- active membership and the
    set of accounts shared into a household for access decisions, plus the
    membership listings behind the household views.
Architecture position: Kernel > Selectors.

For access decisions only ACTIVE memberships count.  An INVITED member is
treated exactly like a non-member.
"""

from uuid import UUID

from sqlalchemy import case, select

from ledger_kernel.models.account import Account
from ledger_kernel.models.household import (
    Household,
    HouseholdAccountShare,
    HouseholdMember,
    MemberStatus,
)
from ledger_kernel.models.user import User
from ledger_kernel.selectors.base import BaseSelector


class HouseholdSelector(BaseSelector):
    def find_household(self, household_id: UUID) -> Household | None:
        return self.session.get(Household, household_id)

    def find_membership(
        self, household_id: UUID, user_id: UUID
    ) -> HouseholdMember | None:
        return self.session.scalars(
            select(HouseholdMember).where(
                HouseholdMember.household_id == household_id,
                HouseholdMember.user_id == user_id,
            )
        ).first()

    def is_active_member(self, household_id: UUID, user_id: UUID) -> bool:
        member_id = self.session.scalar(
            select(HouseholdMember.id).where(
                HouseholdMember.household_id == household_id,
                HouseholdMember.user_id == user_id,
                HouseholdMember.status == MemberStatus.ACTIVE,
            )
        )
        return member_id is not None

    def shared_account_ids(self, household_id: UUID) -> set[UUID]:
        """Ids of every account currently shared into the household."""
        return set(
            self.session.scalars(
                select(HouseholdAccountShare.account_id).where(
                    HouseholdAccountShare.household_id == household_id
                )
            )
        )

    def is_account_shared(self, household_id: UUID, account_id: UUID) -> bool:
        return self.find_share(household_id, account_id) is not None

    def find_share(
        self, household_id: UUID, account_id: UUID
    ) -> HouseholdAccountShare | None:
        return self.session.scalars(
            select(HouseholdAccountShare).where(
                HouseholdAccountShare.household_id == household_id,
                HouseholdAccountShare.account_id == account_id,
            )
        ).first()

    def shared_accounts(self, household_id: UUID) -> list[Account]:
        """Accounts shared into the household, ordered by name."""
        return list(
            self.session.scalars(
                select(Account)
                .join(
                    HouseholdAccountShare,
                    HouseholdAccountShare.account_id == Account.id,
                )
                .where(HouseholdAccountShare.household_id == household_id)
                .order_by(Account.name, Account.id)
            )
        )

    def memberships_for_user(
        self, user_id: UUID
    ) -> list[tuple[HouseholdMember, Household]]:
        """Every membership of the user, ACTIVE first, newest household first."""
        return [
            (member, household)
            for member, household in self.session.execute(
                select(HouseholdMember, Household)
                .join(Household, HouseholdMember.household_id == Household.id)
                .where(HouseholdMember.user_id == user_id)
                .order_by(
                    case((HouseholdMember.status == MemberStatus.ACTIVE, 0), else_=1),
                    Household.created_at.desc(),
                    Household.id,
                )
            )
        ]

    def members(self, household_id: UUID) -> list[tuple[HouseholdMember, User]]:
        return [
            (member, user)
            for member, user in self.session.execute(
                select(HouseholdMember, User)
                .join(User, HouseholdMember.user_id == User.id)
                .where(HouseholdMember.household_id == household_id)
                .order_by(HouseholdMember.created_at, User.username)
            )
        ]

    def active_members(self, household_id: UUID) -> list[HouseholdMember]:
        return list(
            self.session.scalars(
                select(HouseholdMember)
                .where(
                    HouseholdMember.household_id == household_id,
                    HouseholdMember.status == MemberStatus.ACTIVE,
                )
                .order_by(HouseholdMember.created_at, HouseholdMember.id)
            )
        )
