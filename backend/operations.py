"""Operation boundary: validate payloads, authenticate, then call the access services."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from backend.auth.context import RequestContext, authenticated, extract_bearer_token, resolve_request_context
from backend.auth.credentials import CredentialVerifier
from backend.errors import ValidationFailedError
from backend.repositories.users_repository import UsersRepository
from backend.services.auth_service import AuthService
from backend.services.category_service import CategoryService
from backend.services.dashboard_service import DashboardService
from backend.services.transaction_service import TransactionService
from backend.services.user_service import UserService
from shared.models import (
    AuthResult,
    Category,
    CategoryCreateRequest,
    CategoryUpdateRequest,
    DashboardPeriodRequest,
    DashboardSummary,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    Transaction,
    TransactionCreateRequest,
    TransactionFilters,
    TransactionsPage,
    TransactionUpdateRequest,
    UserProfile,
)


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Payload = Mapping[str, object] | BaseModel | None


def _validate(model: type[ModelT], payload: Payload, *, operation: str) -> ModelT:
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model.model_validate(dict(payload or {}))
    except ValidationError as exc:
        logger.info("operation_payload_invalid operation=%s errors=%s", operation, exc.error_count())
        raise ValidationFailedError.from_validation_error(exc, operation=operation) from exc


@dataclass(slots=True)
class FinanceOperations:
    """Every operation exposed to callers.

    Protected operations take a ``RequestContext`` as first argument and fail
    with ``AuthenticationFailedError`` when it carries no user.
    """

    verifier: CredentialVerifier
    users_repository: UsersRepository
    auth_service: AuthService
    user_service: UserService
    category_service: CategoryService
    transaction_service: TransactionService
    dashboard_service: DashboardService

    def resolve_context(self, authorization: str | None) -> RequestContext:
        return resolve_request_context(
            extract_bearer_token(authorization),
            verifier=self.verifier,
            users_repository=self.users_repository,
        )

    def register(self, payload: Payload) -> AuthResult:
        request = _validate(RegisterRequest, payload, operation="register")
        return self.auth_service.register(request)

    def login(self, payload: Payload) -> AuthResult:
        request = _validate(LoginRequest, payload, operation="login")
        return self.auth_service.login(request)

    @authenticated
    def get_profile(self, user_id: UUID) -> UserProfile:
        return self.user_service.get_profile(user_id)

    @authenticated
    def update_profile(self, user_id: UUID, payload: Payload) -> UserProfile:
        request = _validate(ProfileUpdateRequest, payload, operation="update_profile")
        return self.user_service.update_profile(request, user_id)

    @authenticated
    def list_categories(self, user_id: UUID) -> list[Category]:
        return self.category_service.list_categories(user_id)

    @authenticated
    def get_category(self, user_id: UUID, category_id: UUID) -> Category:
        return self.category_service.get_category(category_id, user_id)

    @authenticated
    def create_category(self, user_id: UUID, payload: Payload) -> Category:
        request = _validate(CategoryCreateRequest, payload, operation="create_category")
        return self.category_service.create_category(request, user_id)

    @authenticated
    def update_category(self, user_id: UUID, category_id: UUID, payload: Payload) -> Category:
        request = _validate(CategoryUpdateRequest, payload, operation="update_category")
        return self.category_service.update_category(category_id, request, user_id)

    @authenticated
    def delete_category(self, user_id: UUID, category_id: UUID) -> bool:
        return self.category_service.delete_category(category_id, user_id)

    @authenticated
    def list_transactions(self, user_id: UUID, filters: Payload = None) -> TransactionsPage:
        parsed = _validate(TransactionFilters, filters, operation="list_transactions")
        return self.transaction_service.list_transactions(user_id, parsed)

    @authenticated
    def get_transaction(self, user_id: UUID, transaction_id: UUID) -> Transaction:
        return self.transaction_service.get_transaction(transaction_id, user_id)

    @authenticated
    def create_transaction(self, user_id: UUID, payload: Payload) -> Transaction:
        request = _validate(TransactionCreateRequest, payload, operation="create_transaction")
        return self.transaction_service.create_transaction(request, user_id)

    @authenticated
    def update_transaction(self, user_id: UUID, transaction_id: UUID, payload: Payload) -> Transaction:
        request = _validate(TransactionUpdateRequest, payload, operation="update_transaction")
        return self.transaction_service.update_transaction(transaction_id, request, user_id)

    @authenticated
    def delete_transaction(self, user_id: UUID, transaction_id: UUID) -> bool:
        return self.transaction_service.delete_transaction(transaction_id, user_id)

    @authenticated
    def dashboard_summary(self, user_id: UUID, period: Payload = None) -> DashboardSummary:
        parsed = _validate(DashboardPeriodRequest, period, operation="dashboard_summary")
        return self.dashboard_service.summary(user_id, parsed.month, parsed.year)

    @authenticated
    def dashboard_report(self, user_id: UUID, period: Payload = None) -> tuple[bytes, str]:
        """Return the month report PDF and its period label (``YYYY-MM``)."""

        parsed = _validate(DashboardPeriodRequest, period, operation="dashboard_report")
        pdf_bytes, data = self.dashboard_service.report_pdf(user_id, parsed.month, parsed.year)
        return pdf_bytes, data.period_label
