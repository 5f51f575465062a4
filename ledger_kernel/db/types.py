"""
Module: ledger_kernel.db.types
Responsibility: Annotated type aliases and column helpers shared by every model.
    Centralizes the minor-unit amount type, currency code width and enum
    persistence so that models declare columns identically.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/ and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere in the kernel.  Amounts are signed 64-bit integers in
      the currency's minor unit (cents for EUR, yen for JPY).
    - Enum columns store the member value as a bounded VARCHAR (no native
      database enum types, so the schema stays portable).
"""

from enum import Enum
from typing import Annotated

from sqlalchemy import BigInteger, String
from sqlalchemy import Enum as SAEnum


# Signed amount in minor units (split amounts are always > 0; balances may be negative)
MinorUnits = Annotated[int, BigInteger]

# ISO 4217 style three-letter code
CurrencyCode = Annotated[str, String(3)]

# Short display names (accounts, categories, households)
ShortName = Annotated[str, String(255)]

# Free text descriptions
LongText = Annotated[str, String(4000)]

# Largest amount a BigInteger column can hold
MAX_AMOUNT_MINOR = 2**63 - 1


def enum_column_type(enum_cls: type[Enum], length: int = 20) -> SAEnum:
    """Portable VARCHAR-backed column type for a str Enum.

    Members are persisted by value and loaded back as enum members.
    """
    return SAEnum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


def normalize_currency_code(code: str | None) -> str:
    """Return the upper-cased, trimmed currency code ("" for None)."""
    if code is None:
        return ""
    return str(code).strip().upper()
