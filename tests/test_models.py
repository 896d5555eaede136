"""Tests for request contracts shared across layers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from shared.models import (
    CategoryCreateRequest,
    CategoryUpdateRequest,
    RegisterRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)


def test_naive_dates_are_read_as_utc() -> None:
    request = TransactionCreateRequest(title="Coffee", amount="1", type="expense", date=datetime(2024, 3, 1, 8))

    assert request.date == datetime(2024, 3, 1, 8, tzinfo=timezone.utc)


def test_aware_dates_are_converted_to_utc() -> None:
    local = datetime(2024, 3, 1, 10, tzinfo=timezone(timedelta(hours=2)))

    request = TransactionCreateRequest(title="Coffee", amount="1", type="expense", date=local)

    assert request.date == datetime(2024, 3, 1, 8, tzinfo=timezone.utc)
    assert request.date.tzinfo == timezone.utc


def test_update_request_reports_only_sent_fields() -> None:
    request = TransactionUpdateRequest.model_validate({"title": " New ", "category_id": None})

    assert request.changes() == {"title": "New", "category_id": None}


@pytest.mark.parametrize("field", ["title", "amount", "type", "date"])
def test_update_request_rejects_null_for_required_columns(field: str) -> None:
    with pytest.raises(ValidationError):
        TransactionUpdateRequest.model_validate({field: None})


def test_blank_names_are_rejected() -> None:
    with pytest.raises(ValidationError):
        CategoryCreateRequest(name="   ", color="#000")
    with pytest.raises(ValidationError):
        RegisterRequest(name=" ", email="a@x.com", password="pw123456")


def test_register_requires_six_character_password() -> None:
    with pytest.raises(ValidationError):
        RegisterRequest(name="A", email="a@x.com", password="12345")


def test_category_update_rejects_empty_color_like_create() -> None:
    with pytest.raises(ValidationError):
        CategoryCreateRequest(name="Food", color="")
    with pytest.raises(ValidationError):
        CategoryUpdateRequest(color="")

    assert CategoryUpdateRequest(color="#000").color == "#000"
    assert CategoryUpdateRequest(name="Food").color is None
