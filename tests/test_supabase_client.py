"""Unit tests for Supabase client query encoding and error normalization."""

from __future__ import annotations

import json
from io import BytesIO
from urllib.error import HTTPError

import pytest

from backend.db.supabase_client import SupabaseClient, SupabaseConflictError, SupabaseSettings


def _build_client() -> SupabaseClient:
    return SupabaseClient(
        SupabaseSettings(url="https://example.supabase.co", service_role_key="service-role")
    )


def _response(body: bytes = b"[]", headers: dict[str, str] | None = None):
    class _Response:
        def __init__(self) -> None:
            self.headers = headers or {}

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def read(self) -> bytes:
            return body

    return _Response()


def _http_error(code: int, body: bytes) -> HTTPError:
    return HTTPError(
        url="https://example.supabase.co/rest/v1/categories",
        code=code,
        msg="error",
        hdrs=None,
        fp=BytesIO(body),
    )


def test_get_rows_uses_doseq_for_repeated_query_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert "date=gte.2024-01-01" in request.full_url
        assert "date=lte.2024-01-31" in request.full_url
        return _response()

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(
        table="transactions",
        query=[("date", "gte.2024-01-01"), ("date", "lte.2024-01-31")],
        with_count=False,
    )

    assert rows == []
    assert total is None


def test_get_rows_parses_exact_count_from_content_range(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_header("Prefer") == "count=exact"
        return _response(b'[{"id": "x"}]', headers={"content-range": "0-0/27"})

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows, total = client.get_rows(table="transactions", query={"select": "id", "limit": 1}, with_count=True)

    assert rows == [{"id": "x"}]
    assert total == 27


def test_get_rows_ignores_unknown_count(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()
    monkeypatch.setattr(
        "backend.db.supabase_client.urlopen",
        lambda _request: _response(headers={"content-range": "*/*"}),
    )

    _, total = client.get_rows(table="transactions", query={}, with_count=True)

    assert total is None


def test_get_rows_includes_status_and_body_on_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_http_error(_request):
        raise _http_error(400, b"Bad Request from Supabase")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_http_error)

    with pytest.raises(RuntimeError, match="status 400") as error:
        client.get_rows(table="categories", query={"select": "*"}, with_count=False)

    assert "Bad Request from Supabase" in str(error.value)
    assert not isinstance(error.value, SupabaseConflictError)


def test_post_rows_raises_conflict_error_on_409(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _raise_http_error(_request):
        raise _http_error(409, b"duplicate key value violates unique constraint")

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _raise_http_error)

    with pytest.raises(SupabaseConflictError, match="status 409"):
        client.post_rows(table="categories", payload={"name": "Food"})


def test_post_rows_sends_json_body_and_representation_header(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "POST"
        assert request.full_url == "https://example.supabase.co/rest/v1/categories?select=id"
        assert request.get_header("Prefer") == "return=representation"
        assert json.loads(request.data) == {"name": "Food", "color": "#000"}
        return _response(b'[{"id": "x"}]')

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.post_rows(table="categories", payload={"name": "Food", "color": "#000"}, query={"select": "id"})

    assert rows == [{"id": "x"}]


def test_patch_rows_uses_patch_method(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "PATCH"
        assert "id=eq.abc" in request.full_url
        return _response()

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    assert client.patch_rows(table="users", query={"id": "eq.abc"}, payload={"name": "Bob"}) == []


def test_delete_rows_uses_delete_method_and_query_params(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _build_client()

    def _fake_urlopen(request):
        assert request.get_method() == "DELETE"
        assert request.full_url == (
            "https://example.supabase.co/rest/v1/transactions?"
            "user_id=eq.00000000-0000-0000-0000-000000000000"
        )
        return _response()

    monkeypatch.setattr("backend.db.supabase_client.urlopen", _fake_urlopen)

    rows = client.delete_rows(
        table="transactions",
        query={"user_id": "eq.00000000-0000-0000-0000-000000000000"},
    )

    assert rows == []


def test_anon_key_mode_requires_anon_key() -> None:
    with pytest.raises(ValueError, match="Missing Supabase API key"):
        _build_client().get_rows(table="categories", query={}, with_count=False, use_anon_key=True)
