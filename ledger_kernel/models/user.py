"""
Module: ledger_kernel.models.user
Responsibility: Minimal user record -- the owner anchor for accounts and
    category tags, and the row locked while the Opening Equity account is
    looked up or created.
Architecture position: Kernel > Models.  May import from db/ only.

Registration, credentials and profile data live outside the kernel.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class User(Base):
    """A ledger user (account and category owner, household member)."""

    __tablename__ = "users"

    __table_args__ = (UniqueConstraint("username", name="uq_user_username"),)

    username: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"
