"""
Module: ledger_kernel.models.category_tag
Responsibility: User-owned labels attached to splits for expense reporting.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Names are unique per owner, case-insensitively: name_key holds the
      lower-cased name under a unique constraint.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import ShortName


def category_name_key(name: str) -> str:
    return name.strip().lower()


class CategoryTag(TrackedBase):
    __tablename__ = "category_tags"

    __table_args__ = (
        UniqueConstraint("owner_id", "name_key", name="uq_category_owner_name"),
    )

    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    name: Mapped[ShortName] = mapped_column(nullable=False)

    # Lower-cased name, the uniqueness key
    name_key: Mapped[ShortName] = mapped_column(nullable=False)

    # Display color such as "#aabbcc"
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<CategoryTag {self.name}>"
