"""
HouseholdService -- the one writer of household state.

Responsibility:
    Create households, invite and activate members, let members leave, and
    share or unshare accounts.  Also serves the household listings.  Posting
    and reporting only ever read what this service writes.

Invariants enforced:
    - The creator becomes an ACTIVE OWNER member.
    - Only ACTIVE OWNER or ADMIN members may invite.
    - Invitations start INVITED and become ACTIVE only when the invitee
      accepts.
    - Only the account owner, as an ACTIVE member, may share an account; an
      account is shared into a household at most once.
    - Unsharing never alters already-posted transactions: their household tag
      was fixed at posting time.
    - A household always has an ACTIVE OWNER while it has ACTIVE members;
      when the last one leaves it is dissolved and its transactions lose the
      household tag.
"""

from uuid import UUID

from sqlalchemy import delete, select, update

from ledger_kernel.domain.dtos import (
    AccountView,
    HouseholdMemberView,
    HouseholdSummary,
    HouseholdView,
    as_uuid,
)
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    AccountNotOwnedError,
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.household import (
    Household,
    HouseholdAccountShare,
    HouseholdMember,
    HouseholdRole,
    MemberStatus,
)
from ledger_kernel.models.ledger import LedgerTransaction
from ledger_kernel.selectors.household_selector import HouseholdSelector
from ledger_kernel.selectors.reference_selector import ReferenceSelector
from ledger_kernel.services.access_control import AccessControlResolver
from ledger_kernel.services.base import BaseService

logger = get_logger("services.households")

_INVITER_ROLES = frozenset({HouseholdRole.OWNER, HouseholdRole.ADMIN})


class HouseholdService(BaseService):
    def create_household(self, actor_id: UUID, name: str) -> Household:
        actor_id = as_uuid(actor_id, "actor id")
        name = (name or "").strip()
        if not name:
            raise InvalidRequestError("Household name must not be blank")

        now = self.clock.now()
        household = Household(
            name=name, created_by_id=actor_id, created_at=now, updated_at=now
        )
        self.session.add(household)
        self.session.flush()
        self.session.add(
            HouseholdMember(
                household_id=household.id,
                user_id=actor_id,
                role=HouseholdRole.OWNER,
                status=MemberStatus.ACTIVE,
                created_at=now,
                updated_at=now,
            )
        )
        self.session.flush()
        logger.info("household_created", extra={"household_id": str(household.id)})
        return household

    def invite_member(
        self,
        actor_id: UUID,
        household_id: UUID,
        user_id: UUID,
        role: HouseholdRole = HouseholdRole.MEMBER,
    ) -> HouseholdMember:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_uuid(household_id, "household id")
        user_id = as_uuid(user_id, "user id")
        households = HouseholdSelector(self.session)

        if households.find_household(household_id) is None:
            raise NotFoundError("Household not found")
        inviter = households.find_membership(household_id, actor_id)
        if (
            inviter is None
            or inviter.status != MemberStatus.ACTIVE
            or inviter.role not in _INVITER_ROLES
        ):
            raise ForbiddenError("Only household owners and admins can invite members")
        if role == HouseholdRole.OWNER:
            raise InvalidRequestError("Cannot invite a member as OWNER")
        if ReferenceSelector(self.session).find_user(user_id) is None:
            raise NotFoundError("User not found")
        if households.find_membership(household_id, user_id) is not None:
            raise ConflictError("User is already a member or has a pending invite")

        now = self.clock.now()
        member = HouseholdMember(
            household_id=household_id,
            user_id=user_id,
            role=role,
            status=MemberStatus.INVITED,
            created_at=now,
            updated_at=now,
        )
        self.session.add(member)
        self.session.flush()
        logger.info(
            "household_member_invited",
            extra={"household_id": str(household_id), "user_id": str(user_id)},
        )
        return member

    def accept_invite(self, actor_id: UUID, household_id: UUID) -> HouseholdMember:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_uuid(household_id, "household id")
        member = HouseholdSelector(self.session).find_membership(household_id, actor_id)
        if member is None:
            raise NotFoundError("No invitation found")
        if member.status != MemberStatus.INVITED:
            raise ConflictError("Invitation already accepted")

        member.status = MemberStatus.ACTIVE
        member.updated_at = self.clock.now()
        self.session.flush()
        logger.info(
            "household_invite_accepted",
            extra={"household_id": str(household_id), "user_id": str(actor_id)},
        )
        return member

    def share_account(
        self, actor_id: UUID, household_id: UUID, account_id: UUID
    ) -> HouseholdAccountShare:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_uuid(household_id, "household id")
        account_id = as_uuid(account_id, "account id")

        AccessControlResolver(self.session).require_active_member(household_id, actor_id)
        account = ReferenceSelector(self.session).get_account(account_id)
        if account is None:
            raise AccountNotFoundError([account_id])
        if account.owner_id != actor_id:
            raise AccountNotOwnedError(account_id, "Only the account owner can share it")

        households = HouseholdSelector(self.session)
        if households.is_account_shared(household_id, account_id):
            raise ConflictError("Account is already shared into this household")

        share = HouseholdAccountShare(
            household_id=household_id,
            account_id=account_id,
            shared_by_id=actor_id,
            created_at=self.clock.now(),
        )
        self.session.add(share)
        self.session.flush()
        logger.info(
            "account_shared",
            extra={"household_id": str(household_id), "account_id": str(account_id)},
        )
        return share

    def unshare_account(
        self, actor_id: UUID, household_id: UUID, account_id: UUID
    ) -> None:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_uuid(household_id, "household id")
        account_id = as_uuid(account_id, "account id")

        account = ReferenceSelector(self.session).get_account(account_id)
        if account is None:
            raise AccountNotFoundError([account_id])
        if account.owner_id != actor_id:
            raise AccountNotOwnedError(account_id, "Only the account owner can unshare it")

        share = HouseholdSelector(self.session).find_share(household_id, account_id)
        if share is None:
            raise NotFoundError("Account is not shared into this household")

        self.session.delete(share)
        self.session.flush()
        logger.info(
            "account_unshared",
            extra={"household_id": str(household_id), "account_id": str(account_id)},
        )

    def list_shared_accounts(self, actor_id: UUID, household_id: UUID) -> list[AccountView]:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_uuid(household_id, "household id")
        AccessControlResolver(self.session).require_active_member(household_id, actor_id)
        return [
            AccountView.from_model(a)
            for a in HouseholdSelector(self.session).shared_accounts(household_id)
        ]

    def leave_household(self, actor_id: UUID, household_id: UUID) -> None:
        """
        Remove the actor from the household.

        The actor's own shares go with them.  An OWNER who leaves hands the
        role to the first ACTIVE ADMIN, or failing that to the first remaining
        ACTIVE member.  When no ACTIVE member remains the household is
        dissolved: pending invites and shares are removed and transactions
        tagged with it keep their splits but lose the tag.
        """
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_uuid(household_id, "household id")
        households = HouseholdSelector(self.session)

        member = households.find_membership(household_id, actor_id)
        if member is None:
            raise NotFoundError("Not a member of this household")
        if member.status != MemberStatus.ACTIVE:
            raise InvalidRequestError("Only active members can leave a household")

        self.session.execute(
            delete(HouseholdAccountShare).where(
                HouseholdAccountShare.household_id == household_id,
                HouseholdAccountShare.account_id.in_(
                    select(Account.id).where(Account.owner_id == actor_id)
                ),
            )
        )
        was_owner = member.role == HouseholdRole.OWNER
        self.session.delete(member)
        self.session.flush()
        logger.info(
            "household_member_left",
            extra={"household_id": str(household_id), "user_id": str(actor_id)},
        )

        remaining = households.active_members(household_id)
        if not remaining:
            self._dissolve(household_id)
            return
        if was_owner:
            successor = next(
                (m for m in remaining if m.role == HouseholdRole.ADMIN), remaining[0]
            )
            successor.role = HouseholdRole.OWNER
            successor.updated_at = self.clock.now()
            self.session.flush()
            logger.info(
                "household_owner_transferred",
                extra={
                    "household_id": str(household_id),
                    "user_id": str(successor.user_id),
                },
            )

    def list_households(self, actor_id: UUID) -> list[HouseholdSummary]:
        actor_id = as_uuid(actor_id, "actor id")
        return [
            HouseholdSummary(
                id=household.id,
                name=household.name,
                role=member.role,
                status=member.status,
                created_at=household.created_at,
            )
            for member, household in HouseholdSelector(
                self.session
            ).memberships_for_user(actor_id)
        ]

    def get_household(self, actor_id: UUID, household_id: UUID) -> HouseholdView:
        actor_id = as_uuid(actor_id, "actor id")
        household_id = as_uuid(household_id, "household id")
        AccessControlResolver(self.session).require_active_member(household_id, actor_id)

        households = HouseholdSelector(self.session)
        household = households.find_household(household_id)
        if household is None:
            raise NotFoundError("Household not found")
        return HouseholdView(
            id=household.id,
            name=household.name,
            created_at=household.created_at,
            members=tuple(
                HouseholdMemberView(
                    user_id=member.user_id,
                    username=user.username,
                    role=member.role,
                    status=member.status,
                )
                for member, user in households.members(household_id)
            ),
        )

    def _dissolve(self, household_id: UUID) -> None:
        # ledger_transactions.household_id has no ON DELETE action
        self.session.execute(
            update(LedgerTransaction)
            .where(LedgerTransaction.household_id == household_id)
            .values(household_id=None)
        )
        self.session.execute(
            delete(HouseholdAccountShare).where(
                HouseholdAccountShare.household_id == household_id
            )
        )
        self.session.execute(
            delete(HouseholdMember).where(HouseholdMember.household_id == household_id)
        )
        household = HouseholdSelector(self.session).find_household(household_id)
        if household is not None:
            self.session.delete(household)
        self.session.flush()
        logger.info("household_dissolved", extra={"household_id": str(household_id)})
