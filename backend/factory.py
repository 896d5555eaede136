"""Composition root for backend services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from backend.auth.credentials import CredentialSettings, CredentialVerifier
from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.guards import OwnershipGuard
from backend.operations import FinanceOperations
from backend.repositories.categories_repository import (
    CategoriesRepository,
    InMemoryCategoriesRepository,
    SupabaseCategoriesRepository,
)
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
    TransactionsRepository,
)
from backend.repositories.users_repository import (
    InMemoryUsersRepository,
    SupabaseUsersRepository,
    UsersRepository,
)
from backend.services.auth_service import AuthService
from backend.services.category_service import CategoryService
from backend.services.dashboard_service import DashboardService
from backend.services.transaction_service import TransactionService
from backend.services.user_service import UserService
from shared import config


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BackendServices:
    """Store handle and everything wired on top of it."""

    users_repository: UsersRepository
    categories_repository: CategoriesRepository
    transactions_repository: TransactionsRepository
    verifier: CredentialVerifier
    guard: OwnershipGuard
    operations: FinanceOperations


def _wire(
    *,
    users_repository: UsersRepository,
    categories_repository: CategoriesRepository,
    transactions_repository: TransactionsRepository,
    verifier: CredentialVerifier,
) -> BackendServices:
    guard = OwnershipGuard(
        users_repository=users_repository,
        categories_repository=categories_repository,
        transactions_repository=transactions_repository,
    )
    operations = FinanceOperations(
        verifier=verifier,
        users_repository=users_repository,
        auth_service=AuthService(users_repository=users_repository, verifier=verifier),
        user_service=UserService(users_repository=users_repository, guard=guard),
        category_service=CategoryService(
            categories_repository=categories_repository,
            transactions_repository=transactions_repository,
            guard=guard,
        ),
        transaction_service=TransactionService(
            transactions_repository=transactions_repository,
            categories_repository=categories_repository,
            guard=guard,
        ),
        dashboard_service=DashboardService(
            transactions_repository=transactions_repository,
            categories_repository=categories_repository,
        ),
    )
    return BackendServices(
        users_repository=users_repository,
        categories_repository=categories_repository,
        transactions_repository=transactions_repository,
        verifier=verifier,
        guard=guard,
        operations=operations,
    )


def build_in_memory_services(settings: CredentialSettings | None = None) -> BackendServices:
    """Build services over empty in-process repositories."""

    return _wire(
        users_repository=InMemoryUsersRepository(),
        categories_repository=InMemoryCategoriesRepository(),
        transactions_repository=InMemoryTransactionsRepository(),
        verifier=CredentialVerifier(settings or CredentialSettings.from_env()),
    )


def build_backend_services() -> BackendServices:
    """Build services with repository adapters chosen from configuration.

    Supabase adapters are used when both the URL and the service role key are
    configured; otherwise everything runs in memory.
    """

    verifier = CredentialVerifier(CredentialSettings.from_env())

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key()
    if not (supabase_url and supabase_key):
        logger.info("backend_services_store=in_memory")
        return build_in_memory_services(verifier.settings)

    supabase_client = SupabaseClient(
        settings=SupabaseSettings(
            url=supabase_url,
            service_role_key=supabase_key,
            anon_key=config.supabase_anon_key(),
        )
    )
    logger.info("backend_services_store=supabase")
    return _wire(
        users_repository=SupabaseUsersRepository(client=supabase_client),
        categories_repository=SupabaseCategoriesRepository(client=supabase_client),
        transactions_repository=SupabaseTransactionsRepository(client=supabase_client),
        verifier=verifier,
    )
