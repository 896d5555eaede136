"""Shared builders for service and API tests."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from backend.auth.context import RequestContext
from backend.auth.credentials import CredentialSettings
from backend.factory import BackendServices, build_in_memory_services
from shared.models import AuthResult, Category, Transaction, TransactionCreateRequest, TransactionType


TEST_SECRET = "test-secret"
# Cheap hash so registration-heavy tests stay fast.
FAST_HASH_METHOD = "pbkdf2:sha256:1000"


def credential_settings(**overrides: object) -> CredentialSettings:
    values: dict[str, object] = {"secret": TEST_SECRET, "password_hash_method": FAST_HASH_METHOD}
    values.update(overrides)
    return CredentialSettings(**values)


def build_services() -> BackendServices:
    return build_in_memory_services(credential_settings())


def register_user(
    services: BackendServices,
    *,
    name: str = "Alice",
    email: str = "alice@example.com",
    password: str = "pw123456",
) -> AuthResult:
    return services.operations.register({"name": name, "email": email, "password": password})


def context_for(result: AuthResult) -> RequestContext:
    return RequestContext(user_id=result.user.id)


def add_category(services: BackendServices, user_id: UUID, name: str, color: str = "#22c55e") -> Category:
    return services.categories_repository.create_category(user_id=user_id, name=name, color=color)


def add_transaction(
    services: BackendServices,
    user_id: UUID,
    *,
    title: str = "Coffee",
    amount: str = "4.50",
    type: TransactionType = TransactionType.EXPENSE,
    date: datetime | None = None,
    category_id: UUID | None = None,
) -> Transaction:
    request = TransactionCreateRequest(
        title=title,
        amount=Decimal(amount),
        type=type,
        date=date or datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc),
        category_id=category_id,
    )
    return services.operations.transaction_service.create_transaction(request, user_id)
