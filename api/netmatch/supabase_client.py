from __future__ import annotations

from typing import Any, Dict

import httpx

from .config import get_settings
from .errors import StoreError, SupabaseUnavailable


def _get_supabase_config() -> tuple[str, str]:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise SupabaseUnavailable("Supabase client not configured; set SUPABASE_URL and a key.")
    return settings.supabase_url.rstrip("/"), settings.supabase_key


def _headers(key: str) -> dict[str, str]:
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Accept": "application/json",
    }


def _decode(resp: httpx.Response, table: str, operation: str) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise StoreError(f"{operation} on {table} returned a non-JSON body", table=table, operation=operation) from exc


async def supabase_select(
    table: str,
    *,
    select: str,
    filters: Dict[str, str] | None = None,
    limit: int | None = None,
    order: str | None = None,
) -> list[dict[str, Any]]:
    base, key = _get_supabase_config()
    params: Dict[str, Any] = {"select": select}
    if filters:
        params.update(filters)
    if limit is not None:
        params["limit"] = max(1, int(limit))
    if order:
        params["order"] = order
    try:
        async with httpx.AsyncClient(timeout=get_settings().store_timeout) as client:
            resp = await client.get(f"{base}/rest/v1/{table}", params=params, headers=_headers(key))
    except httpx.HTTPError as exc:
        raise StoreError(f"select on {table} failed: {exc}", table=table, operation="select") from exc
    if resp.status_code == 404:
        return []
    if resp.status_code >= 400:
        raise StoreError(
            f"select on {table} returned HTTP {resp.status_code}",
            table=table,
            operation="select",
            details={"body": resp.text[:500]},
        )
    data = _decode(resp, table, "select")
    if isinstance(data, list):
        return data
    return [data]


async def supabase_insert(table: str, row: dict[str, Any]) -> dict[str, Any]:
    """Insert one row and return the stored representation."""
    base, key = _get_supabase_config()
    headers = _headers(key)
    headers["Content-Type"] = "application/json"
    headers["Prefer"] = "return=representation"
    try:
        async with httpx.AsyncClient(timeout=get_settings().store_timeout) as client:
            resp = await client.post(f"{base}/rest/v1/{table}", json=row, headers=headers)
    except httpx.HTTPError as exc:
        raise StoreError(f"insert into {table} failed: {exc}", table=table, operation="insert") from exc
    if resp.status_code >= 400:
        raise StoreError(
            f"insert into {table} returned HTTP {resp.status_code}",
            table=table,
            operation="insert",
            details={"body": resp.text[:500]},
        )
    data = _decode(resp, table, "insert") if resp.content else []
    if isinstance(data, list):
        return data[0] if data else dict(row)
    return data
