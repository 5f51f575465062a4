"""
CategoryService -- manage a user's category tags.

Names are unique per owner without regard to case.  A tag referenced by any
split cannot be deleted.
"""

from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.dtos import CategoryTagView, as_uuid
from ledger_kernel.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.category_tag import CategoryTag, category_name_key
from ledger_kernel.models.ledger import LedgerSplit
from ledger_kernel.selectors.reference_selector import ReferenceSelector
from ledger_kernel.services.base import BaseService

logger = get_logger("services.categories")

_UNSET = object()


class CategoryService(BaseService):
    def create_category(
        self, actor_id: UUID, name: str, color: str | None = None
    ) -> CategoryTagView:
        actor_id = as_uuid(actor_id, "actor id")
        name = self._clean_name(name)
        if ReferenceSelector(self.session).find_category_tag_by_name(actor_id, name):
            raise ConflictError(f"Category '{name}' already exists")

        now = self.clock.now()
        tag = CategoryTag(
            owner_id=actor_id,
            name=name,
            name_key=category_name_key(name),
            color=color,
            created_at=now,
            updated_at=now,
        )
        self.session.add(tag)
        self.session.flush()
        logger.info("category_created", extra={"category_tag_id": str(tag.id)})
        return CategoryTagView.from_model(tag)

    def list_categories(self, actor_id: UUID) -> list[CategoryTagView]:
        tags = ReferenceSelector(self.session).find_category_tags_by_owner(
            as_uuid(actor_id, "actor id")
        )
        return [CategoryTagView.from_model(t) for t in tags]

    def update_category(
        self,
        actor_id: UUID,
        category_tag_id: UUID,
        name: str | None = None,
        color=_UNSET,
    ) -> CategoryTagView:
        """Rename and/or recolor a tag.  Pass color=None to clear it."""
        actor_id = as_uuid(actor_id, "actor id")
        tag = self._owned_tag(actor_id, category_tag_id)

        if name is not None:
            new_name = self._clean_name(name)
            clash = ReferenceSelector(self.session).find_category_tag_by_name(
                actor_id, new_name
            )
            if clash is not None and clash.id != tag.id:
                raise ConflictError(f"Category '{new_name}' already exists")
            tag.name = new_name
            tag.name_key = category_name_key(new_name)
        if color is not _UNSET:
            tag.color = color

        tag.updated_at = self.clock.now()
        self.session.flush()
        return CategoryTagView.from_model(tag)

    def delete_category(self, actor_id: UUID, category_tag_id: UUID) -> None:
        actor_id = as_uuid(actor_id, "actor id")
        tag = self._owned_tag(actor_id, category_tag_id)

        in_use = self.session.scalar(
            select(LedgerSplit.id).where(LedgerSplit.category_tag_id == tag.id).limit(1)
        )
        if in_use is not None:
            raise ConflictError("Category is in use and cannot be deleted")

        self.session.delete(tag)
        self.session.flush()
        logger.info("category_deleted", extra={"category_tag_id": str(tag.id)})

    def _owned_tag(self, actor_id: UUID, category_tag_id: UUID) -> CategoryTag:
        tag = ReferenceSelector(self.session).get_category_tag(
            as_uuid(category_tag_id, "category tag id")
        )
        if tag is None:
            raise NotFoundError("Category not found")
        if tag.owner_id != actor_id:
            raise ForbiddenError("Not the owner of this category")
        return tag

    @staticmethod
    def _clean_name(name: str | None) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidRequestError("Category name must not be blank")
        return cleaned
