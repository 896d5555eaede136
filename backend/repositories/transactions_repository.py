"""Transactions repository adapters.

Every read takes a compiled `TransactionPredicate`, so the user scope is part
of the query itself rather than a post-filter.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol
from uuid import UUID, uuid4

from backend.db.supabase_client import SupabaseClient
from shared.models import Transaction, TransactionPredicate, TransactionType


_TRANSACTION_COLUMNS = "id,user_id,title,amount,type,date,category_id,created_at,updated_at"
_ORDER = "date.desc,created_at.desc,id.desc"


def _literal_pattern(term: str) -> str:
    """Return a regex matching ``term`` literally.

    PostgREST rewrites every `*` inside `like`/`ilike` values to `%`, so a
    literal match goes through `imatch` with the term fully escaped.
    """

    return re.escape(term)


class TransactionsRepository(Protocol):
    def get_transaction(self, transaction_id: UUID) -> Transaction | None:
        """Return one transaction by id regardless of owner, or None."""

    def find_transactions(
        self,
        predicate: TransactionPredicate,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Transaction]:
        """Return matching transactions, most recent first."""

    def count_transactions(self, predicate: TransactionPredicate) -> int:
        """Return the number of transactions matching the predicate."""

    def create_transaction(
        self,
        *,
        user_id: UUID,
        title: str,
        amount: Decimal,
        type: TransactionType,
        date: datetime,
        category_id: UUID | None,
    ) -> Transaction:
        """Insert and return a transaction."""

    def update_transaction(self, *, transaction_id: UUID, changes: dict[str, object]) -> Transaction:
        """Apply column changes to one transaction and return it."""

    def delete_transaction(self, transaction_id: UUID) -> None:
        """Delete one transaction."""

    def clear_category(self, category_id: UUID) -> int:
        """Detach a category from every transaction referencing it; return the count."""


def _sort_key(transaction: Transaction) -> tuple[datetime, datetime, str]:
    return transaction.date, transaction.created_at, str(transaction.id)


class InMemoryTransactionsRepository:
    """In-memory transactions repository used by tests/dev."""

    def __init__(self) -> None:
        self._transactions: dict[UUID, Transaction] = {}

    def _filter_rows(self, predicate: TransactionPredicate) -> list[Transaction]:
        rows = [row for row in self._transactions.values() if predicate.matches(row)]
        return sorted(rows, key=_sort_key, reverse=True)

    def get_transaction(self, transaction_id: UUID) -> Transaction | None:
        return self._transactions.get(transaction_id)

    def find_transactions(
        self,
        predicate: TransactionPredicate,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Transaction]:
        rows = self._filter_rows(predicate)
        if limit is None:
            return rows[offset:]
        return rows[offset : offset + limit]

    def count_transactions(self, predicate: TransactionPredicate) -> int:
        return len(self._filter_rows(predicate))

    def create_transaction(
        self,
        *,
        user_id: UUID,
        title: str,
        amount: Decimal,
        type: TransactionType,
        date: datetime,
        category_id: UUID | None,
    ) -> Transaction:
        now = datetime.now(timezone.utc)
        transaction = Transaction(
            id=uuid4(),
            user_id=user_id,
            title=title,
            amount=amount,
            type=type,
            date=date,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )
        self._transactions[transaction.id] = transaction
        return transaction

    def update_transaction(self, *, transaction_id: UUID, changes: dict[str, object]) -> Transaction:
        transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise ValueError("Transaction not found")
        updated = Transaction.model_validate(
            {
                **transaction.model_dump(exclude={"category"}),
                **changes,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._transactions[transaction_id] = updated
        return updated

    def delete_transaction(self, transaction_id: UUID) -> None:
        if self._transactions.pop(transaction_id, None) is None:
            raise ValueError("Transaction not found")

    def clear_category(self, category_id: UUID) -> int:
        detached = 0
        for transaction_id, transaction in list(self._transactions.items()):
            if transaction.category_id != category_id:
                continue
            self._transactions[transaction_id] = transaction.model_copy(
                update={"category_id": None, "updated_at": datetime.now(timezone.utc)}
            )
            detached += 1
        return detached


class SupabaseTransactionsRepository:
    """Supabase repository over `public.transactions`."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    @staticmethod
    def _build_query(predicate: TransactionPredicate) -> list[tuple[str, str | int]]:
        query: list[tuple[str, str | int]] = [("user_id", f"eq.{predicate.user_id}")]

        if predicate.title_contains is not None:
            query.append(("title", f"imatch.{_literal_pattern(predicate.title_contains)}"))

        if predicate.type is not None:
            query.append(("type", f"eq.{predicate.type.value}"))

        if predicate.category_id is not None:
            query.append(("category_id", f"eq.{predicate.category_id}"))

        if predicate.date_from is not None:
            query.append(("date", f"gte.{predicate.date_from.isoformat()}"))

        if predicate.date_to is not None:
            query.append(("date", f"lte.{predicate.date_to.isoformat()}"))

        return query

    @staticmethod
    def _parse_row(row: dict[str, object]) -> Transaction:
        return Transaction.model_validate(
            {
                "id": row.get("id"),
                "user_id": row.get("user_id"),
                "title": row.get("title"),
                "amount": Decimal(str(row.get("amount"))),
                "type": row.get("type"),
                "date": row.get("date"),
                "category_id": row.get("category_id"),
                "created_at": row.get("created_at"),
                "updated_at": row.get("updated_at"),
            }
        )

    @staticmethod
    def _serialize_changes(changes: dict[str, object]) -> dict[str, object]:
        payload: dict[str, object] = {}
        for key, value in changes.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()
            elif isinstance(value, (Decimal, UUID)):
                payload[key] = str(value)
            elif isinstance(value, TransactionType):
                payload[key] = value.value
            else:
                payload[key] = value
        return payload

    def get_transaction(self, transaction_id: UUID) -> Transaction | None:
        rows, _ = self._client.get_rows(
            table="transactions",
            query={"id": f"eq.{transaction_id}", "select": _TRANSACTION_COLUMNS, "limit": 1},
            with_count=False,
        )
        if not rows:
            return None
        return self._parse_row(rows[0])

    def find_transactions(
        self,
        predicate: TransactionPredicate,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Transaction]:
        query = [
            *self._build_query(predicate),
            ("select", _TRANSACTION_COLUMNS),
            ("order", _ORDER),
            ("offset", offset),
        ]
        if limit is not None:
            query.append(("limit", limit))
        rows, _ = self._client.get_rows(table="transactions", query=query, with_count=False)
        return [self._parse_row(row) for row in rows]

    def count_transactions(self, predicate: TransactionPredicate) -> int:
        query = [*self._build_query(predicate), ("select", "id"), ("limit", 1)]
        rows, total = self._client.get_rows(table="transactions", query=query, with_count=True)
        if total is None:
            raise RuntimeError("Supabase did not return an exact count")
        return total

    def create_transaction(
        self,
        *,
        user_id: UUID,
        title: str,
        amount: Decimal,
        type: TransactionType,
        date: datetime,
        category_id: UUID | None,
    ) -> Transaction:
        rows = self._client.post_rows(
            table="transactions",
            query={"select": _TRANSACTION_COLUMNS},
            payload=self._serialize_changes(
                {
                    "user_id": user_id,
                    "title": title,
                    "amount": amount,
                    "type": type,
                    "date": date,
                    "category_id": category_id,
                }
            ),
        )
        if not rows:
            raise RuntimeError("Supabase did not return created transaction")
        return self._parse_row(rows[0])

    def update_transaction(self, *, transaction_id: UUID, changes: dict[str, object]) -> Transaction:
        rows = self._client.patch_rows(
            table="transactions",
            query={"id": f"eq.{transaction_id}", "select": _TRANSACTION_COLUMNS},
            payload=self._serialize_changes({**changes, "updated_at": datetime.now(timezone.utc)}),
        )
        if not rows:
            raise ValueError("Transaction not found")
        return self._parse_row(rows[0])

    def delete_transaction(self, transaction_id: UUID) -> None:
        rows = self._client.delete_rows(
            table="transactions",
            query={"id": f"eq.{transaction_id}", "select": "id"},
        )
        if not rows:
            raise ValueError("Transaction not found")

    def clear_category(self, category_id: UUID) -> int:
        rows = self._client.patch_rows(
            table="transactions",
            query={"category_id": f"eq.{category_id}", "select": "id"},
            payload={"category_id": None, "updated_at": datetime.now(timezone.utc).isoformat()},
        )
        return len(rows)
