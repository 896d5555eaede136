"""Repository interfaces and adapters for user accounts."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Protocol
from uuid import UUID, uuid4

from backend.db.supabase_client import SupabaseClient, SupabaseConflictError
from backend.errors import DuplicateEmailError
from shared.models import UserRecord


_USER_COLUMNS = "id,name,email,password_hash,created_at,updated_at"


class UsersRepository(Protocol):
    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return one user by id, or None."""

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return one user by (normalized) email, or None."""

    def create_user(self, *, name: str, email: str, password_hash: str) -> UserRecord:
        """Insert a user; raise DuplicateEmailError when the email is taken."""

    def update_user_name(self, *, user_id: UUID, name: str) -> UserRecord:
        """Rename one user and return the updated row."""


class InMemoryUsersRepository:
    """In-memory users repository used by tests/dev."""

    def __init__(self) -> None:
        self._users: dict[UUID, UserRecord] = {}
        self._write_lock = threading.Lock()

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def create_user(self, *, name: str, email: str, password_hash: str) -> UserRecord:
        with self._write_lock:
            if self.get_user_by_email(email) is not None:
                raise DuplicateEmailError("Email already registered")

            now = datetime.now(timezone.utc)
            user = UserRecord(
                id=uuid4(),
                name=name,
                email=email,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            return user

    def update_user_name(self, *, user_id: UUID, name: str) -> UserRecord:
        user = self._users.get(user_id)
        if user is None:
            raise ValueError("User not found")
        updated = user.model_copy(update={"name": name, "updated_at": datetime.now(timezone.utc)})
        self._users[user_id] = updated
        return updated


class SupabaseUsersRepository:
    """Supabase-backed users repository over `public.users`."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def _get_one(self, query: dict[str, str | int]) -> UserRecord | None:
        rows, _ = self._client.get_rows(
            table="users",
            query={**query, "select": _USER_COLUMNS, "limit": 1},
            with_count=False,
        )
        if not rows:
            return None
        return UserRecord.model_validate(rows[0])

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self._get_one({"id": f"eq.{user_id}"})

    def get_user_by_email(self, email: str) -> UserRecord | None:
        return self._get_one({"email": f"eq.{email}"})

    def create_user(self, *, name: str, email: str, password_hash: str) -> UserRecord:
        try:
            rows = self._client.post_rows(
                table="users",
                query={"select": _USER_COLUMNS},
                payload={"name": name, "email": email, "password_hash": password_hash},
            )
        except SupabaseConflictError as exc:
            raise DuplicateEmailError("Email already registered") from exc
        if not rows:
            raise RuntimeError("Supabase did not return created user")
        return UserRecord.model_validate(rows[0])

    def update_user_name(self, *, user_id: UUID, name: str) -> UserRecord:
        rows = self._client.patch_rows(
            table="users",
            query={"id": f"eq.{user_id}", "select": _USER_COLUMNS},
            payload={"name": name, "updated_at": datetime.now(timezone.utc).isoformat()},
        )
        if not rows:
            raise ValueError("User not found")
        return UserRecord.model_validate(rows[0])

