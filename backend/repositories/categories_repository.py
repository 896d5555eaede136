"""Repository interfaces and adapters for user categories CRUD."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Protocol
from uuid import UUID, uuid4

from backend.db.supabase_client import SupabaseClient, SupabaseConflictError
from backend.errors import DuplicateNameError
from shared.models import Category


_CATEGORY_COLUMNS = "id,user_id,name,color,created_at,updated_at"
_DUPLICATE_MESSAGE = "A category with this name already exists"


class CategoriesRepository(Protocol):
    def list_categories(self, user_id: UUID) -> list[Category]:
        """Return user categories sorted by name."""

    def get_category(self, category_id: UUID) -> Category | None:
        """Return one category by id regardless of owner, or None."""

    def get_category_by_name(self, *, user_id: UUID, name: str) -> Category | None:
        """Return the user's category with exactly this name, or None."""

    def create_category(self, *, user_id: UUID, name: str, color: str) -> Category:
        """Create and return a category; the (name, user_id) pair is unique."""

    def update_category(
        self,
        *,
        category_id: UUID,
        name: str | None = None,
        color: str | None = None,
    ) -> Category:
        """Update and return a category."""

    def delete_category(self, category_id: UUID) -> None:
        """Delete a category."""


class InMemoryCategoriesRepository:
    """In-memory categories repository used by tests/dev."""

    def __init__(self) -> None:
        self._categories: dict[UUID, Category] = {}
        self._write_lock = threading.Lock()

    def _name_taken(self, *, user_id: UUID, name: str, exclude_id: UUID | None = None) -> bool:
        return any(
            category.user_id == user_id and category.name == name and category.id != exclude_id
            for category in self._categories.values()
        )

    def list_categories(self, user_id: UUID) -> list[Category]:
        return sorted(
            [category for category in self._categories.values() if category.user_id == user_id],
            key=lambda category: category.name,
        )

    def get_category(self, category_id: UUID) -> Category | None:
        return self._categories.get(category_id)

    def get_category_by_name(self, *, user_id: UUID, name: str) -> Category | None:
        for category in self._categories.values():
            if category.user_id == user_id and category.name == name:
                return category
        return None

    def create_category(self, *, user_id: UUID, name: str, color: str) -> Category:
        with self._write_lock:
            if self._name_taken(user_id=user_id, name=name):
                raise DuplicateNameError(_DUPLICATE_MESSAGE)

            now = datetime.now(timezone.utc)
            category = Category(
                id=uuid4(),
                user_id=user_id,
                name=name,
                color=color,
                created_at=now,
                updated_at=now,
            )
            self._categories[category.id] = category
            return category

    def update_category(
        self,
        *,
        category_id: UUID,
        name: str | None = None,
        color: str | None = None,
    ) -> Category:
        with self._write_lock:
            category = self._categories.get(category_id)
            if category is None:
                raise ValueError("Category not found")

            if name is not None and self._name_taken(user_id=category.user_id, name=name, exclude_id=category_id):
                raise DuplicateNameError(_DUPLICATE_MESSAGE)

            updated_category = category.model_copy(
                update={
                    "name": name if name is not None else category.name,
                    "color": color if color is not None else category.color,
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            self._categories[category_id] = updated_category
            return updated_category

    def delete_category(self, category_id: UUID) -> None:
        if self._categories.pop(category_id, None) is None:
            raise ValueError("Category not found")


class SupabaseCategoriesRepository:
    """Supabase-backed categories repository.

    The `categories` table carries a unique index on (user_id, name); a
    violation comes back as HTTP 409 and is reported as DuplicateNameError.
    """

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def _get_one(self, query: dict[str, str | int]) -> Category | None:
        rows, _ = self._client.get_rows(
            table="categories",
            query={**query, "select": _CATEGORY_COLUMNS, "limit": 1},
            with_count=False,
        )
        if not rows:
            return None
        return Category.model_validate(rows[0])

    def list_categories(self, user_id: UUID) -> list[Category]:
        rows, _ = self._client.get_rows(
            table="categories",
            query=[
                ("user_id", f"eq.{user_id}"),
                ("select", _CATEGORY_COLUMNS),
                ("order", "name.asc"),
            ],
            with_count=False,
        )
        return [Category.model_validate(row) for row in rows]

    def get_category(self, category_id: UUID) -> Category | None:
        return self._get_one({"id": f"eq.{category_id}"})

    def get_category_by_name(self, *, user_id: UUID, name: str) -> Category | None:
        return self._get_one({"user_id": f"eq.{user_id}", "name": f"eq.{name}"})

    def create_category(self, *, user_id: UUID, name: str, color: str) -> Category:
        try:
            rows = self._client.post_rows(
                table="categories",
                query={"select": _CATEGORY_COLUMNS},
                payload={"user_id": str(user_id), "name": name, "color": color},
            )
        except SupabaseConflictError as exc:
            raise DuplicateNameError(_DUPLICATE_MESSAGE) from exc
        if not rows:
            raise RuntimeError("Supabase did not return created category")
        return Category.model_validate(rows[0])

    def update_category(
        self,
        *,
        category_id: UUID,
        name: str | None = None,
        color: str | None = None,
    ) -> Category:
        payload: dict[str, object] = {}
        if name is not None:
            payload["name"] = name
        if color is not None:
            payload["color"] = color

        if not payload:
            category = self.get_category(category_id)
            if category is None:
                raise ValueError("Category not found")
            return category

        payload["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            rows = self._client.patch_rows(
                table="categories",
                query={"id": f"eq.{category_id}", "select": _CATEGORY_COLUMNS},
                payload=payload,
            )
        except SupabaseConflictError as exc:
            raise DuplicateNameError(_DUPLICATE_MESSAGE) from exc
        if not rows:
            raise ValueError("Category not found")
        return Category.model_validate(rows[0])

    def delete_category(self, category_id: UUID) -> None:
        rows = self._client.delete_rows(
            table="categories",
            query={"id": f"eq.{category_id}", "select": "id"},
        )
        if not rows:
            raise ValueError("Category not found")
