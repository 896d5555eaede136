"""Category access service with per-user name uniqueness."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from backend.errors import DuplicateNameError
from backend.guards import OwnershipGuard
from backend.repositories.categories_repository import CategoriesRepository
from backend.repositories.transactions_repository import TransactionsRepository
from shared.models import Category, CategoryCreateRequest, CategoryUpdateRequest


logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGE = "A category with this name already exists"


@dataclass(slots=True)
class CategoryService:
    categories_repository: CategoriesRepository
    transactions_repository: TransactionsRepository
    guard: OwnershipGuard

    def list_categories(self, user_id: UUID) -> list[Category]:
        return self.categories_repository.list_categories(user_id)

    def get_category(self, category_id: UUID, user_id: UUID) -> Category:
        return self.guard.category(category_id, user_id)

    def create_category(self, request: CategoryCreateRequest, user_id: UUID) -> Category:
        # Fast path only; the store's unique (user_id, name) constraint is authoritative.
        if self.categories_repository.get_category_by_name(user_id=user_id, name=request.name) is not None:
            raise DuplicateNameError(_DUPLICATE_MESSAGE)

        category = self.categories_repository.create_category(
            user_id=user_id,
            name=request.name,
            color=request.color,
        )
        logger.info("category_created user_id=%s category_id=%s", user_id, category.id)
        return category

    def update_category(self, category_id: UUID, request: CategoryUpdateRequest, user_id: UUID) -> Category:
        self.guard.category(category_id, user_id)

        if request.name is not None:
            existing = self.categories_repository.get_category_by_name(user_id=user_id, name=request.name)
            if existing is not None and existing.id != category_id:
                raise DuplicateNameError(_DUPLICATE_MESSAGE)

        category = self.categories_repository.update_category(
            category_id=category_id,
            name=request.name,
            color=request.color,
        )
        logger.info("category_updated user_id=%s category_id=%s", user_id, category_id)
        return category

    def delete_category(self, category_id: UUID, user_id: UUID) -> bool:
        """Delete a category after detaching it from the user's transactions."""

        self.guard.category(category_id, user_id)
        detached = self.transactions_repository.clear_category(category_id)
        self.categories_repository.delete_category(category_id)
        logger.info(
            "category_deleted user_id=%s category_id=%s detached_transactions=%s",
            user_id,
            category_id,
            detached,
        )
        return True
