"""
Module: ledger_kernel.models.household
Responsibility: Households, their memberships, and the accounts members have
    shared into them.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - A user has at most one membership row per household.
    - An account is shared into a given household at most once.
    - Only ACTIVE memberships grant access; INVITED does not.

The posting and reporting paths only read these tables.  HouseholdService is
the one writer.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, TrackedBase
from ledger_kernel.db.types import ShortName, enum_column_type


class HouseholdRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class MemberStatus(str, Enum):
    INVITED = "INVITED"
    ACTIVE = "ACTIVE"


class Household(TrackedBase):
    __tablename__ = "households"

    name: Mapped[ShortName] = mapped_column(nullable=False)

    created_by_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Household {self.name}>"


class HouseholdMember(TrackedBase):
    """Membership of one user in one household."""

    __tablename__ = "household_members"

    __table_args__ = (
        UniqueConstraint("household_id", "user_id", name="uq_household_member"),
        Index("idx_household_member_user", "user_id"),
    )

    household_id: Mapped[UUID] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    role: Mapped[HouseholdRole] = mapped_column(
        enum_column_type(HouseholdRole),
        nullable=False,
    )

    status: Mapped[MemberStatus] = mapped_column(
        enum_column_type(MemberStatus),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<HouseholdMember {self.user_id} {self.role.value} {self.status.value}>"


class HouseholdAccountShare(Base):
    """An account its owner has made visible to a household."""

    __tablename__ = "household_account_shares"

    __table_args__ = (
        UniqueConstraint(
            "household_id", "account_id", name="uq_household_account_share"
        ),
        Index("idx_household_share_account", "account_id"),
    )

    household_id: Mapped[UUID] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )

    shared_by_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
