"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


Query = dict[str, str | int] | list[tuple[str, str | int]]


class SupabaseConflictError(RuntimeError):
    """Raised when PostgREST rejects a write on a unique constraint (HTTP 409)."""


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str
    anon_key: str | None = None


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def healthcheck(self) -> bool:
        return bool(self.settings.url and self.settings.service_role_key)

    def _api_key(self, use_anon_key: bool) -> str:
        api_key = self.settings.anon_key if use_anon_key else self.settings.service_role_key
        if not api_key:
            raise ValueError("Missing Supabase API key for requested mode")
        return api_key

    def _send(
        self,
        *,
        method: str,
        table: str,
        query: Query,
        body: object | None,
        prefer: str,
        use_anon_key: bool,
    ) -> tuple[list[dict[str, Any]], str | None]:
        encoded_query = urlencode(query, doseq=True)
        api_key = self._api_key(use_anon_key)
        payload = json.dumps(body, default=str).encode("utf-8") if body is not None else None
        request = Request(
            url=f"{self.settings.url}/rest/v1/{table}?{encoded_query}",
            data=payload,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Prefer": prefer,
            },
            method=method,
        )
        try:
            with urlopen(request) as response:  # noqa: S310 - URL comes from trusted env config
                raw = response.read().decode("utf-8")
                rows = json.loads(raw) if raw else []
                return rows, response.headers.get("content-range")
        except HTTPError as exc:
            body_text = exc.read().decode("utf-8", errors="replace")[:500]
            if exc.code == 409:
                raise SupabaseConflictError(
                    f"Supabase request conflicted with status {exc.code}: {body_text}"
                ) from exc
            raise RuntimeError(
                f"Supabase request failed with status {exc.code}: {body_text}"
            ) from exc

    def get_rows(
        self,
        *,
        table: str,
        query: Query,
        with_count: bool,
        use_anon_key: bool = False,
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Fetch rows from PostgREST and optionally parse exact row count."""

        rows, content_range = self._send(
            method="GET",
            table=table,
            query=query,
            body=None,
            prefer="count=exact" if with_count else "return=representation",
            use_anon_key=use_anon_key,
        )
        total: int | None = None
        if with_count and content_range and "/" in content_range:
            _, total_str = content_range.split("/", maxsplit=1)
            if total_str.isdigit():
                total = int(total_str)
        return rows, total

    def post_rows(
        self,
        *,
        table: str,
        payload: dict[str, object] | list[dict[str, object]],
        query: Query | None = None,
        use_anon_key: bool = False,
    ) -> list[dict[str, Any]]:
        rows, _ = self._send(
            method="POST",
            table=table,
            query=query or {},
            body=payload,
            prefer="return=representation",
            use_anon_key=use_anon_key,
        )
        return rows

    def patch_rows(
        self,
        *,
        table: str,
        query: Query,
        payload: dict[str, object],
        use_anon_key: bool = False,
    ) -> list[dict[str, Any]]:
        rows, _ = self._send(
            method="PATCH",
            table=table,
            query=query,
            body=payload,
            prefer="return=representation",
            use_anon_key=use_anon_key,
        )
        return rows

    def delete_rows(
        self,
        *,
        table: str,
        query: Query,
        use_anon_key: bool = False,
    ) -> list[dict[str, Any]]:
        rows, _ = self._send(
            method="DELETE",
            table=table,
            query=query,
            body=None,
            prefer="return=representation",
            use_anon_key=use_anon_key,
        )
        return rows
