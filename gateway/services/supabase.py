# gateway/services/supabase.py
"""
Supabase (PostgREST) table client using the service-role key.

Filters are passed PostgREST-style, e.g. {"status": eq("pending")} or
{"status": in_(["draft", "in_review"])}. All calls go through the retry
wrapper; non-2xx answers raise SupabaseError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import requests
from django.conf import settings

from .http import new_session, request_with_retry

log = logging.getLogger(__name__)

Rows = Union[Mapping[str, Any], List[Mapping[str, Any]]]


class SupabaseError(Exception):
    def __init__(self, message: str, status: int = 0, code: str = "", details: Any = None):
        super().__init__(message)
        self.status = status
        self.code = code or ""
        self.details = details

    @property
    def is_duplicate(self) -> bool:
        # 23505 = unique_violation
        return self.code == "23505" or "duplicate" in str(self).lower()


def eq(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return f"eq.{value}"


def in_(values: Iterable[Any]) -> str:
    return "in.(" + ",".join(str(v) for v in values) + ")"


class SupabaseClient:
    def __init__(self, url: str, service_key: str, *, session: Optional[requests.Session] = None):
        self.url = (url or "").rstrip("/")
        self.session = session or new_session({
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        })

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "SupabaseClient":
        return cls(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY, session=session)

    def _rest_url(self, path: str) -> str:
        return f"{self.url}/rest/v1/{path.lstrip('/')}"

    def _request(self, method: str, table: str, *, params=None, json=None,
                 prefer: str = "return=representation",
                 headers: Optional[Dict[str, str]] = None) -> requests.Response:
        hdrs = {"Prefer": prefer}
        if headers:
            hdrs.update(headers)
        resp = request_with_retry(self.session, method, self._rest_url(table),
                                  params=params, json=json, headers=hdrs)
        if resp.status_code >= 300:
            raise self._error(resp, table)
        return resp

    @staticmethod
    def _error(resp: requests.Response, table: str) -> SupabaseError:
        try:
            body = resp.json()
        except ValueError:
            body = {"message": resp.text[:300]}
        if not isinstance(body, dict):
            body = {"message": str(body)[:300]}
        message = body.get("message") or f"Supabase {table}: HTTP {resp.status_code}"
        log.warning("[supabase] %s -> %s code=%s", table, resp.status_code, body.get("code"))
        return SupabaseError(message, status=resp.status_code,
                             code=str(body.get("code") or ""), details=body.get("details"))

    # ----- table operations ------------------------------------------------

    def select(self, table: str, *, filters: Optional[Mapping[str, str]] = None,
               columns: str = "*", order: Optional[str] = None,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = int(limit)
        data = self._request("GET", table, params=params).json()
        return data if isinstance(data, list) else []

    def select_one(self, table: str, **equals: Any) -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters={k: eq(v) for k, v in equals.items()}, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, rows: Rows) -> List[Dict[str, Any]]:
        payload = rows if isinstance(rows, list) else [rows]
        data = self._request("POST", table, json=payload).json()
        return data if isinstance(data, list) else [data]

    def update(self, table: str, values: Mapping[str, Any],
               filters: Mapping[str, str]) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("update() without filters would touch every row")
        data = self._request("PATCH", table, params=dict(filters), json=dict(values)).json()
        return data if isinstance(data, list) else [data]

    def delete(self, table: str, filters: Mapping[str, str]) -> None:
        if not filters:
            raise ValueError("delete() without filters would touch every row")
        self._request("DELETE", table, params=dict(filters), prefer="return=minimal")

    def count(self, table: str, filters: Optional[Mapping[str, str]] = None) -> int:
        params: Dict[str, Any] = {"select": "id"}
        params.update(filters or {})
        resp = self._request("GET", table, params=params, prefer="count=exact",
                             headers={"Range-Unit": "items", "Range": "0-0"})
        # Content-Range: "0-0/42" or "*/0"
        total = (resp.headers.get("Content-Range") or "").rsplit("/", 1)[-1]
        try:
            return int(total)
        except ValueError:
            return 0

    # ----- raw pass-through (functions/supabase proxy) ---------------------

    def forward(self, method: str, path: str, *, query: str = "",
                body: Optional[bytes] = None) -> requests.Response:
        url = self._rest_url(path)
        if query:
            url = f"{url}?{query}"
        return request_with_retry(self.session, method, url, data=body,
                                  headers={"Prefer": "return=representation"})
