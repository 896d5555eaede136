"""Transaction access service: list/get/create/update/delete for one owner."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from backend.guards import OwnershipGuard
from backend.queries.filters import compile_transaction_filters
from backend.queries.pagination import paginate
from backend.repositories.categories_repository import CategoriesRepository
from backend.repositories.transactions_repository import TransactionsRepository
from shared.models import (
    Category,
    Transaction,
    TransactionCreateRequest,
    TransactionFilters,
    TransactionsPage,
    TransactionUpdateRequest,
)


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransactionService:
    transactions_repository: TransactionsRepository
    categories_repository: CategoriesRepository
    guard: OwnershipGuard

    def _with_categories(self, user_id: UUID, transactions: list[Transaction]) -> list[Transaction]:
        if not any(transaction.category_id for transaction in transactions):
            return transactions
        categories = {category.id: category for category in self.categories_repository.list_categories(user_id)}
        return [
            transaction.model_copy(update={"category": categories.get(transaction.category_id)})
            if transaction.category_id is not None
            else transaction
            for transaction in transactions
        ]

    def _with_category(self, transaction: Transaction, category: Category | None = None) -> Transaction:
        if transaction.category_id is None:
            return transaction
        if category is None or category.id != transaction.category_id:
            category = self.categories_repository.get_category(transaction.category_id)
        return transaction.model_copy(update={"category": category})

    def list_transactions(self, user_id: UUID, filters: TransactionFilters | None = None) -> TransactionsPage:
        """Return one page of the user's transactions, most recent first.

        The total and the rows are read with the same compiled predicate.
        """

        filters = filters or TransactionFilters()
        predicate = compile_transaction_filters(filters, user_id)
        total = self.transactions_repository.count_transactions(predicate)
        window = paginate(total, filters.page, filters.limit)
        items = self.transactions_repository.find_transactions(
            predicate,
            offset=window.offset,
            limit=window.limit,
        )
        return TransactionsPage(
            items=self._with_categories(user_id, items),
            total=window.total,
            page=window.page,
            limit=window.limit,
            total_pages=window.total_pages,
        )

    def get_transaction(self, transaction_id: UUID, user_id: UUID) -> Transaction:
        transaction = self.guard.transaction(transaction_id, user_id)
        return self._with_category(transaction)

    def create_transaction(self, request: TransactionCreateRequest, user_id: UUID) -> Transaction:
        category: Category | None = None
        if request.category_id is not None:
            category = self.guard.category(request.category_id, user_id)

        transaction = self.transactions_repository.create_transaction(
            user_id=user_id,
            title=request.title,
            amount=request.amount,
            type=request.type,
            date=request.date,
            category_id=request.category_id,
        )
        logger.info("transaction_created user_id=%s transaction_id=%s", user_id, transaction.id)
        return self._with_category(transaction, category)

    def update_transaction(
        self,
        transaction_id: UUID,
        request: TransactionUpdateRequest,
        user_id: UUID,
    ) -> Transaction:
        current = self.guard.transaction(transaction_id, user_id)

        changes = request.changes()
        category: Category | None = None
        new_category_id = changes.get("category_id")
        if isinstance(new_category_id, UUID):
            category = self.guard.category(new_category_id, user_id)

        if not changes:
            return self._with_category(current)

        transaction = self.transactions_repository.update_transaction(
            transaction_id=transaction_id,
            changes=changes,
        )
        logger.info(
            "transaction_updated user_id=%s transaction_id=%s fields=%s",
            user_id,
            transaction_id,
            ",".join(sorted(changes)),
        )
        return self._with_category(transaction, category)

    def delete_transaction(self, transaction_id: UUID, user_id: UUID) -> bool:
        self.guard.transaction(transaction_id, user_id)
        self.transactions_repository.delete_transaction(transaction_id)
        logger.info("transaction_deleted user_id=%s transaction_id=%s", user_id, transaction_id)
        return True
