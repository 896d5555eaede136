"""Ownership guard applied before every singular read and every mutation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, overload
from uuid import UUID

from backend.errors import ForbiddenError, NotFoundError
from backend.repositories.categories_repository import CategoriesRepository
from backend.repositories.transactions_repository import TransactionsRepository
from backend.repositories.users_repository import UsersRepository
from shared.models import Category, Transaction, UserRecord


logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    CATEGORY = "category"
    TRANSACTION = "transaction"
    PROFILE = "profile"


_LABELS = {
    ResourceKind.CATEGORY: "Category",
    ResourceKind.TRANSACTION: "Transaction",
    ResourceKind.PROFILE: "User",
}


@dataclass(slots=True)
class OwnershipGuard:
    """Load a resource by id and fail unless the acting user owns it.

    A missing resource raises NotFoundError; a resource owned by someone else
    raises ForbiddenError. On success the loaded resource is returned so the
    caller does not look it up twice.
    """

    users_repository: UsersRepository
    categories_repository: CategoriesRepository
    transactions_repository: TransactionsRepository

    @overload
    def assert_owned(self, kind: Literal[ResourceKind.CATEGORY], resource_id: UUID, user_id: UUID) -> Category: ...

    @overload
    def assert_owned(
        self, kind: Literal[ResourceKind.TRANSACTION], resource_id: UUID, user_id: UUID
    ) -> Transaction: ...

    @overload
    def assert_owned(self, kind: Literal[ResourceKind.PROFILE], resource_id: UUID, user_id: UUID) -> UserRecord: ...

    def assert_owned(self, kind: ResourceKind, resource_id: UUID, user_id: UUID) -> Any:
        resource, owner_id = self._load(kind, resource_id)
        label = _LABELS[kind]
        if resource is None:
            raise NotFoundError(f"{label} not found")
        if owner_id != user_id:
            logger.warning(
                "ownership_denied kind=%s resource_id=%s user_id=%s",
                kind.value,
                resource_id,
                user_id,
            )
            raise ForbiddenError(f"You are not allowed to access this {label.lower()}")
        return resource

    def _load(self, kind: ResourceKind, resource_id: UUID) -> tuple[Any, UUID | None]:
        if kind == ResourceKind.CATEGORY:
            category = self.categories_repository.get_category(resource_id)
            return category, category.user_id if category else None
        if kind == ResourceKind.TRANSACTION:
            transaction = self.transactions_repository.get_transaction(resource_id)
            return transaction, transaction.user_id if transaction else None
        user = self.users_repository.get_user(resource_id)
        return user, user.id if user else None

    def category(self, category_id: UUID, user_id: UUID) -> Category:
        return self.assert_owned(ResourceKind.CATEGORY, category_id, user_id)

    def transaction(self, transaction_id: UUID, user_id: UUID) -> Transaction:
        return self.assert_owned(ResourceKind.TRANSACTION, transaction_id, user_id)

    def profile(self, profile_id: UUID, user_id: UUID) -> UserRecord:
        return self.assert_owned(ResourceKind.PROFILE, profile_id, user_id)
