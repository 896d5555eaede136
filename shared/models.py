"""Pydantic contracts shared across backend services and the HTTP API."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorCode(str, Enum):
    """Stable error codes for operation contracts across layers."""

    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


def as_utc(value: datetime) -> datetime:
    """Return an aware datetime, reading naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _strip_required(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be blank")
    return stripped


class UserRecord(BaseModel):
    """Stored user row, password hash included."""

    model_config = ConfigDict(extra="forbid")

    id: UUID
    name: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime


class UserProfile(BaseModel):
    """User projection returned across the operation boundary."""

    model_config = ConfigDict(extra="forbid")

    id: UUID
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UserRecord) -> UserProfile:
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class Category(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: UUID
    user_id: UUID
    name: str
    color: str
    created_at: datetime
    updated_at: datetime


class Transaction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: UUID
    user_id: UUID
    title: str
    amount: Decimal = Field(ge=0)
    type: TransactionType
    date: datetime
    category_id: UUID | None = None
    category: Category | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=6)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        local_part, _, domain = normalized.partition("@")
        if not local_part or not domain:
            raise ValueError("email must contain a local part and a domain")
        return normalized


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class AuthResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token: str
    user: UserProfile


class TokenClaims(BaseModel):
    """Claims carried by a validated bearer token."""

    model_config = ConfigDict(extra="forbid")

    user_id: UUID
    email: str
    expires_at: datetime


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _strip_required(value)


class CategoryCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    color: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _strip_required(value)


class CategoryUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    color: Annotated[str, Field(min_length=1)] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _strip_required(value)


class TransactionCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)
    type: TransactionType
    date: datetime
    category_id: UUID | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)


class TransactionUpdateRequest(BaseModel):
    """Partial transaction update.

    Omitted fields are left unchanged. ``category_id`` may be sent as ``null``
    to detach the category; the other fields reject ``null``.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    amount: Annotated[Decimal, Field(ge=0)] | None = None
    type: TransactionType | None = None
    date: datetime | None = None
    category_id: UUID | None = None

    @field_validator("title", "amount", "type", "date", mode="before")
    @classmethod
    def reject_explicit_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _strip_required(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return value
        return as_utc(value)

    def changes(self) -> dict[str, object]:
        """Return only the fields explicitly sent by the caller."""
        return self.model_dump(exclude_unset=True)


class TransactionFilters(BaseModel):
    """Sparse filters accepted by transaction listing."""

    model_config = ConfigDict(extra="forbid")

    search: str | None = None
    type: TransactionType | None = None
    category_id: UUID | None = None
    month: Annotated[int, Field(ge=1, le=12)] | None = None
    year: Annotated[int, Field(ge=1, le=9999)] | None = None
    page: int | None = None
    limit: int | None = None


class TransactionPredicate(BaseModel):
    """Conjunctive, user-scoped condition compiled from transaction filters."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_id: UUID
    title_contains: str | None = None
    type: TransactionType | None = None
    category_id: UUID | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    def matches(self, transaction: Transaction) -> bool:
        if transaction.user_id != self.user_id:
            return False
        if self.title_contains is not None and self.title_contains.lower() not in transaction.title.lower():
            return False
        if self.type is not None and transaction.type != self.type:
            return False
        if self.category_id is not None and transaction.category_id != self.category_id:
            return False
        if self.date_from is not None and transaction.date < self.date_from:
            return False
        if self.date_to is not None and transaction.date > self.date_to:
            return False
        return True


class TransactionsPage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[Transaction]
    total: int
    page: int
    limit: int
    total_pages: int


class CategoryStat(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: Category
    count: int
    total: Decimal


class DashboardSummary(BaseModel):
    """Month totals plus recent activity for the dashboard."""

    model_config = ConfigDict(extra="forbid")

    month: int
    year: int
    income: Decimal
    expense: Decimal
    balance: Decimal
    recent_transactions: list[Transaction]
    categories: list[CategoryStat]


class ErrorPayload(BaseModel):
    """Standardized error body returned by the HTTP API."""

    model_config = ConfigDict(extra="forbid")

    code: ErrorCode
    message: str
    details: dict[str, object] | None = None


class DashboardPeriodRequest(BaseModel):
    """Month selection for the dashboard; absent values mean the current month."""

    model_config = ConfigDict(extra="forbid")

    month: Annotated[int, Field(ge=1, le=12)] | None = None
    year: Annotated[int, Field(ge=1, le=9999)] | None = None
