"""Tests for transaction access: isolation, referential integrity and listing."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from backend.errors import ForbiddenError, NotFoundError
from shared.models import (
    TransactionCreateRequest,
    TransactionFilters,
    TransactionPredicate,
    TransactionType,
    TransactionUpdateRequest,
)
from tests.fakes import add_category, add_transaction, build_services, register_user


def _two_users():
    services = build_services()
    alice = register_user(services).user
    bob = register_user(services, name="Bob", email="bob@example.com").user
    return services, services.operations.transaction_service, alice, bob


def test_create_then_get_round_trip_embeds_category() -> None:
    services, service, alice, _ = _two_users()
    category = add_category(services, alice.id, "Food")

    created = service.create_transaction(
        TransactionCreateRequest(
            title="  Lunch  ",
            amount=Decimal("12.50"),
            type=TransactionType.EXPENSE,
            date=datetime(2024, 3, 10, 12, 0),
            category_id=category.id,
        ),
        alice.id,
    )
    fetched = service.get_transaction(created.id, alice.id)

    assert fetched.title == "Lunch"
    assert fetched.amount == Decimal("12.50")
    assert fetched.type == TransactionType.EXPENSE
    assert fetched.date == datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
    assert fetched.category_id == category.id
    assert fetched.category == category
    assert fetched.user_id == alice.id


def test_other_user_cannot_read_update_or_delete() -> None:
    services, service, alice, bob = _two_users()
    transaction = add_transaction(services, alice.id)

    with pytest.raises(ForbiddenError):
        service.get_transaction(transaction.id, bob.id)
    with pytest.raises(ForbiddenError):
        service.update_transaction(transaction.id, TransactionUpdateRequest(title="Hacked"), bob.id)
    with pytest.raises(ForbiddenError):
        service.delete_transaction(transaction.id, bob.id)

    assert service.get_transaction(transaction.id, alice.id).title == "Coffee"


def test_list_only_returns_own_transactions() -> None:
    services, service, alice, bob = _two_users()
    add_transaction(services, alice.id, title="Mine")
    add_transaction(services, bob.id, title="Theirs")

    page = service.list_transactions(alice.id)

    assert [item.title for item in page.items] == ["Mine"]
    assert page.total == 1


def test_create_with_foreign_category_writes_nothing() -> None:
    services, service, alice, bob = _two_users()
    foreign_category = add_category(services, bob.id, "Bob food")

    with pytest.raises(ForbiddenError):
        service.create_transaction(
            TransactionCreateRequest(
                title="Sneaky",
                amount=Decimal("1"),
                type=TransactionType.EXPENSE,
                date=datetime(2024, 3, 1, tzinfo=timezone.utc),
                category_id=foreign_category.id,
            ),
            alice.id,
        )

    assert services.transactions_repository.count_transactions(TransactionPredicate(user_id=alice.id)) == 0


def test_create_with_unknown_category_is_not_found() -> None:
    services, service, alice, _ = _two_users()

    with pytest.raises(NotFoundError, match="Category not found"):
        service.create_transaction(
            TransactionCreateRequest(
                title="Ghost",
                amount=Decimal("1"),
                type=TransactionType.EXPENSE,
                date=datetime(2024, 3, 1, tzinfo=timezone.utc),
                category_id=uuid4(),
            ),
            alice.id,
        )

    assert services.transactions_repository.count_transactions(TransactionPredicate(user_id=alice.id)) == 0


def test_update_with_foreign_category_leaves_transaction_unchanged() -> None:
    services, service, alice, bob = _two_users()
    transaction = add_transaction(services, alice.id)
    foreign_category = add_category(services, bob.id, "Bob food")

    with pytest.raises(ForbiddenError):
        service.update_transaction(
            transaction.id,
            TransactionUpdateRequest(title="Changed", category_id=foreign_category.id),
            alice.id,
        )

    stored = services.transactions_repository.get_transaction(transaction.id)
    assert stored.title == "Coffee"
    assert stored.category_id is None


def test_update_applies_partial_changes(caplog) -> None:
    caplog.set_level(logging.INFO)
    services, service, alice, _ = _two_users()
    category = add_category(services, alice.id, "Food")
    transaction = add_transaction(services, alice.id)

    updated = service.update_transaction(
        transaction.id,
        TransactionUpdateRequest(amount=Decimal("9.99"), category_id=category.id),
        alice.id,
    )

    assert updated.amount == Decimal("9.99")
    assert updated.title == "Coffee"
    assert updated.category == category
    assert "transaction_updated" in caplog.text


def test_update_with_explicit_null_category_clears_it() -> None:
    services, service, alice, _ = _two_users()
    category = add_category(services, alice.id, "Food")
    transaction = add_transaction(services, alice.id, category_id=category.id)

    updated = service.update_transaction(
        transaction.id,
        TransactionUpdateRequest.model_validate({"category_id": None}),
        alice.id,
    )

    assert updated.category_id is None
    assert updated.category is None


def test_update_without_changes_returns_current_row() -> None:
    services, service, alice, _ = _two_users()
    transaction = add_transaction(services, alice.id)

    assert service.update_transaction(transaction.id, TransactionUpdateRequest(), alice.id) == transaction


def test_delete_then_get_is_not_found() -> None:
    services, service, alice, _ = _two_users()
    transaction = add_transaction(services, alice.id)

    assert service.delete_transaction(transaction.id, alice.id) is True
    with pytest.raises(NotFoundError):
        service.get_transaction(transaction.id, alice.id)


def test_pagination_over_twenty_seven_transactions() -> None:
    services, service, alice, _ = _two_users()
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for index in range(27):
        add_transaction(services, alice.id, title=f"Item {index}", date=start + timedelta(days=index))

    page = service.list_transactions(alice.id, TransactionFilters(page=3, limit=10))

    assert page.total == 27
    assert page.total_pages == 3
    assert page.page == 3
    assert len(page.items) == 7
    assert page.items[0].title == "Item 6"
    assert page.items[-1].title == "Item 0"


def test_list_defaults_to_ten_most_recent() -> None:
    services, service, alice, _ = _two_users()
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for index in range(12):
        add_transaction(services, alice.id, title=f"Item {index}", date=start + timedelta(days=index))

    page = service.list_transactions(alice.id)

    assert (page.page, page.limit, page.total_pages) == (1, 10, 2)
    assert page.items[0].title == "Item 11"


def test_list_filters_are_combined() -> None:
    services, service, alice, _ = _two_users()
    food = add_category(services, alice.id, "Food")
    add_transaction(
        services, alice.id, title="Grocery run", date=datetime(2024, 2, 29, tzinfo=timezone.utc), category_id=food.id
    )
    add_transaction(services, alice.id, title="Grocery run", date=datetime(2024, 3, 1, tzinfo=timezone.utc))
    add_transaction(
        services,
        alice.id,
        title="Grocery refund",
        type=TransactionType.INCOME,
        date=datetime(2024, 2, 10, tzinfo=timezone.utc),
    )
    add_transaction(services, alice.id, title="Rent", date=datetime(2024, 2, 1, tzinfo=timezone.utc))

    page = service.list_transactions(
        alice.id,
        TransactionFilters(search="GROCERY", type=TransactionType.EXPENSE, month=2, year=2024),
    )

    assert page.total == 1
    assert page.items[0].category == food

    by_category = service.list_transactions(alice.id, TransactionFilters(category_id=food.id))
    assert by_category.total == 1
