"""
Module: ledger_kernel.selectors.reference_selector
Responsibility: Batch lookups of the reference rows a posting touches --
    accounts, currencies and category tags.
Architecture position: Kernel > Selectors.

Every *_by_ids method takes an id collection, de-duplicates it, and issues at
most one query.  An empty collection returns an empty mapping without touching
the database.
"""

from typing import Iterable
from uuid import UUID

from sqlalchemy import func, select

from ledger_kernel.db.types import normalize_currency_code
from ledger_kernel.domain.values import AccountType
from ledger_kernel.models.account import Account
from ledger_kernel.models.category_tag import CategoryTag, category_name_key
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.user import User
from ledger_kernel.selectors.base import BaseSelector


def distinct_ids(ids: Iterable[UUID]) -> list[UUID]:
    """De-duplicate while keeping first-seen order."""
    return list(dict.fromkeys(ids))


class ReferenceSelector(BaseSelector):
    """Read access to accounts, currencies, category tags and users."""

    def find_accounts_by_ids(self, account_ids: Iterable[UUID]) -> dict[UUID, Account]:
        ids = distinct_ids(account_ids)
        if not ids:
            return {}
        rows = self.session.scalars(select(Account).where(Account.id.in_(ids)))
        return {account.id: account for account in rows}

    def get_account(self, account_id: UUID) -> Account | None:
        return self.session.get(Account, account_id)

    def find_accounts_by_owner(self, owner_id: UUID) -> list[Account]:
        """All accounts owned by the user, ordered by type then name."""
        return list(
            self.session.scalars(
                select(Account)
                .where(Account.owner_id == owner_id)
                .order_by(Account.account_type, Account.name)
            )
        )

    def find_account(
        self,
        owner_id: UUID,
        account_type: AccountType,
        currency_code: str,
        name: str,
    ) -> Account | None:
        """Look up an account by its natural key (owner, type, currency, name)."""
        return self.session.scalars(
            select(Account).where(
                Account.owner_id == owner_id,
                Account.account_type == account_type,
                Account.currency_code == currency_code,
                Account.name == name,
            )
        ).first()

    def find_currency(self, code: str) -> Currency | None:
        code = normalize_currency_code(code)
        if not code:
            return None
        return self.session.scalars(
            select(Currency).where(Currency.code == code)
        ).first()

    def list_currencies(self) -> list[Currency]:
        return list(self.session.scalars(select(Currency).order_by(Currency.code)))

    def find_category_tags_by_ids(
        self, category_tag_ids: Iterable[UUID]
    ) -> dict[UUID, CategoryTag]:
        ids = distinct_ids(category_tag_ids)
        if not ids:
            return {}
        rows = self.session.scalars(
            select(CategoryTag).where(CategoryTag.id.in_(ids))
        )
        return {tag.id: tag for tag in rows}

    def get_category_tag(self, category_tag_id: UUID) -> CategoryTag | None:
        return self.session.get(CategoryTag, category_tag_id)

    def find_category_tag_by_name(self, owner_id: UUID, name: str) -> CategoryTag | None:
        """Case-insensitive lookup within one owner's tags."""
        return self.session.scalars(
            select(CategoryTag).where(
                CategoryTag.owner_id == owner_id,
                CategoryTag.name_key == category_name_key(name),
            )
        ).first()

    def find_category_tags_by_owner(self, owner_id: UUID) -> list[CategoryTag]:
        return list(
            self.session.scalars(
                select(CategoryTag)
                .where(CategoryTag.owner_id == owner_id)
                .order_by(func.lower(CategoryTag.name))
            )
        )

    def find_user(self, user_id: UUID) -> User | None:
        return self.session.get(User, user_id)
