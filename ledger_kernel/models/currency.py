"""
Module: ledger_kernel.models.currency
Responsibility: Currency reference data (code, minor-unit exponent, name).
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - code is unique; accounts and transactions reference currencies by code.
    - minor_unit_exponent >= 0 (2 for EUR/USD, 0 for JPY).

Rows are seeded outside the posting path and never modified by the kernel.
"""

from sqlalchemy import CheckConstraint, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base
from ledger_kernel.db.types import CurrencyCode


class Currency(Base):
    __tablename__ = "currencies"

    __table_args__ = (
        UniqueConstraint("code", name="uq_currency_code"),
        CheckConstraint(
            "minor_unit_exponent >= 0", name="ck_currency_exponent_non_negative"
        ),
    )

    code: Mapped[CurrencyCode] = mapped_column(nullable=False)

    minor_unit_exponent: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        default=2,
    )

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Currency {self.code}>"
