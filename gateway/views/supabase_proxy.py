# /home/dork/editorialdesk/gateway/views/supabase_proxy.py
"""
/functions/supabase/<path> - datastore pass-through with the service-role key.

The browser never sees the service key; it presents the dashboard key instead.
"""

from __future__ import annotations

import logging

import requests

from gateway.services.supabase import SupabaseClient
from . import _dashboard_key_ok, _error, _passthrough, gateway_function

logger = logging.getLogger("gateway.views.supabase_proxy")

REQUIRED = ("DASHBOARD_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_KEY")
METHODS = ("GET", "POST", "PATCH", "PUT", "DELETE")


def _client() -> SupabaseClient:
    return SupabaseClient.from_settings()


@gateway_function("supabase", methods=METHODS, required=REQUIRED)
def supabase_proxy(request, path: str):
    view = "supabase"
    if not _dashboard_key_ok(request):
        return _error("Unauthorized", view=view, status=401, why="bad dashboard key")
    if not path or ".." in path or path.startswith("/"):
        return _error("Invalid path", view=view, status=400)

    body = None if request.method == "GET" else (request.body or None)
    try:
        resp = _client().forward(request.method, path, query=request.META.get("QUERY_STRING", ""), body=body)
    except requests.RequestException as exc:
        logger.error("[gateway][supabase] %s %s unreachable: %s", request.method, path, exc)
        return _error("Upstream error", f"Datastore request failed: {exc.__class__.__name__}", view=view, status=502)

    logger.info("[gateway][supabase] %s %s -> %s", request.method, path, resp.status_code)
    return _passthrough(resp.text or "null", view=view, status=resp.status_code)
