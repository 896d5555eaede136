"""Tests for bearer parsing, identity resolution and the authorization wrapper."""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

import pytest

from backend.auth.context import (
    RequestContext,
    authenticated,
    extract_bearer_token,
    resolve_request_context,
)
from backend.errors import AuthenticationFailedError
from tests.fakes import build_services, register_user


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, None),
        ("", None),
        ("Basic abc", None),
        ("Bearer ", None),
        ("Bearer   abc.def  ", "abc.def"),
    ],
)
def test_extract_bearer_token(header: str | None, expected: str | None) -> None:
    assert extract_bearer_token(header) == expected


def test_resolve_without_token_is_anonymous() -> None:
    services = build_services()

    context = resolve_request_context(None, verifier=services.verifier, users_repository=services.users_repository)

    assert context == RequestContext.anonymous()
    assert context.is_authenticated is False


def test_resolve_valid_token_returns_user() -> None:
    services = build_services()
    auth = register_user(services)

    context = resolve_request_context(
        auth.token,
        verifier=services.verifier,
        users_repository=services.users_repository,
    )

    assert context.user_id == auth.user.id
    assert context.is_authenticated is True


def test_resolve_invalid_token_degrades_to_anonymous(caplog) -> None:
    caplog.set_level(logging.INFO)
    services = build_services()

    context = resolve_request_context(
        "garbage",
        verifier=services.verifier,
        users_repository=services.users_repository,
    )

    assert context.user_id is None
    assert "request_context_token_rejected" in caplog.text


def test_resolve_token_for_unknown_user_degrades_to_anonymous(caplog) -> None:
    caplog.set_level(logging.INFO)
    services = build_services()
    token = services.verifier.issue_token(user_id=uuid4(), email="ghost@example.com")

    context = resolve_request_context(token, verifier=services.verifier, users_repository=services.users_repository)

    assert context.user_id is None
    assert "request_context_user_missing" in caplog.text


def test_resolve_lookup_failure_degrades_to_anonymous(caplog) -> None:
    services = build_services()
    token = services.verifier.issue_token(user_id=uuid4(), email="a@x.com")

    class _FailingUsers:
        def get_user(self, user_id: UUID):
            raise RuntimeError("db down")

    context = resolve_request_context(token, verifier=services.verifier, users_repository=_FailingUsers())

    assert context.user_id is None
    assert "request_context_user_lookup_failed" in caplog.text


class _Probe:
    @authenticated
    def whoami(self, user_id: UUID, suffix: str = "") -> str:
        return f"{user_id}{suffix}"


def test_authenticated_passes_user_id_to_body() -> None:
    user_id = UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")

    assert _Probe().whoami(RequestContext(user_id=user_id), suffix="!") == f"{user_id}!"


def test_authenticated_rejects_anonymous_context() -> None:
    with pytest.raises(AuthenticationFailedError, match="Authentication required"):
        _Probe().whoami(RequestContext.anonymous())


def test_authenticated_keeps_wrapped_name() -> None:
    assert _Probe.whoami.__name__ == "whoami"
