"""
Gateway functions - views package

Shared helpers for the /functions/* endpoints plus the public health/version
endpoints. Function modules (wordpress, generate, feedly, supabase_proxy) import
from here, so helpers are defined at module level and nothing below imports
them back.

CHANGE LOG
----------
2026-02-11 • _parse_json_object(): an empty body is invalid JSON, not {}.
2026-02-06 • gateway_function(): one structured log line per request (method/path/status/ms).
2026-02-04 • Auth logging reports lengths + match flags only.
2026-02-02 • Dashboard-key guard for sync-feedly and the datastore proxy.
2026-01-28 • Initial helpers: JSON responses, HMAC verify, settings check, 405 shape.
"""

from __future__ import annotations

import functools
import json
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from gateway.signing import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    Verification,
    shared_key_matches,
    verify_signature,
)

logger = logging.getLogger("gateway.views")

VER = "gw.v1"

DASHBOARD_KEY_HEADER = "X-Dashboard-Key"

WP_SETTINGS = ("WP_BASE", "WP_USER", "WP_APP_PASSWORD")


# -----------------------------------------------------------------------------
# Response helpers
# -----------------------------------------------------------------------------

def _with_headers(resp: HttpResponse, *, view: str) -> HttpResponse:
    """Breadcrumb + no-store on every gateway response."""
    resp["X-Gateway-View"] = view
    resp["Cache-Control"] = "no-store"
    return resp


def _json_response(data: Any, *, view: str, status: int = 200) -> JsonResponse:
    resp = JsonResponse(data, status=status, safe=not isinstance(data, list))
    return _with_headers(resp, view=view)


def _passthrough(text: str, *, view: str, status: int) -> HttpResponse:
    """Upstream JSON text relayed unchanged."""
    resp = HttpResponse(text, status=status, content_type="application/json")
    return _with_headers(resp, view=view)


def _error_payload(error: str, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": error}
    if message is not None:
        payload["message"] = message
    payload.update(extra)
    return payload


def _error(error: str, message: Optional[str] = None, *, view: str, status: int, **extra: Any) -> JsonResponse:
    return _json_response(_error_payload(error, message, **extra), view=view, status=status)


# -----------------------------------------------------------------------------
# Request helpers
# -----------------------------------------------------------------------------

def _missing_settings(names: Iterable[str]) -> List[str]:
    return [name for name in names if not str(getattr(settings, name, "") or "").strip()]


def _verify_request(request: HttpRequest) -> Verification:
    """HMAC check of the raw body; logs lengths only."""
    ts = request.headers.get(TIMESTAMP_HEADER, "")
    sig = request.headers.get(SIGNATURE_HEADER, "")
    body = request.body or b""
    result = verify_signature(settings.GATEWAY_SECRET, ts, body, sig)
    logger.info(
        "[gateway][auth] path=%s ts_len=%s sig_len=%s body_len=%s ok=%s why=%s",
        request.path, len(ts), len(sig), len(body), result.ok, result.why or "-",
    )
    return result


def _dashboard_key_ok(request: HttpRequest) -> bool:
    presented = request.headers.get(DASHBOARD_KEY_HEADER, "")
    ok = shared_key_matches(presented, getattr(settings, "DASHBOARD_KEY", ""))
    logger.info("[gateway][auth] path=%s dashboard_key_len=%s match=%s", request.path, len(presented), ok)
    return ok


def _parse_json_object(request: HttpRequest) -> Dict[str, Any]:
    """Body as a JSON object; ValueError when it is not one (an empty body included)."""
    raw = (request.body or b"").decode("utf-8", errors="replace")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("JSON body must be an object")
    return payload


def gateway_function(view: str, methods: Iterable[str] = ("POST",), required: Iterable[str] = ()):
    """
    Wrap a function view:
    - CSRF-exempt (callers sign or present a key instead)
    - 500 {"error": "misconfigured"} when a required setting is blank
    - 405 {"error": "Method not allowed"} for other methods
    - one log line per request with status + duration
    """
    allowed = tuple(m.upper() for m in methods)
    required = tuple(required)

    def decorator(func):
        @csrf_exempt
        @functools.wraps(func)
        def wrapped(request, *args, **kwargs):
            started = time.monotonic()
            missing = _missing_settings(required)
            if missing:
                logger.error("[gateway][%s] missing settings: %s", view, ", ".join(missing))
                resp = _error("misconfigured", "Missing settings: " + ", ".join(missing),
                              view=view, status=500)
            elif request.method not in allowed:
                resp = _error("Method not allowed", view=view, status=405)
                resp["Allow"] = ", ".join(allowed)
            else:
                resp = func(request, *args, **kwargs)
            logger.info(
                "[gateway][request] view=%s method=%s path=%s status=%s ms=%d",
                view, request.method, request.path, resp.status_code,
                (time.monotonic() - started) * 1000,
            )
            return resp

        return wrapped

    return decorator


# ---------- Public endpoints (no auth) ----------

def health(request, *args, **kwargs):
    """Lightweight readiness check."""
    return _json_response({"ok": True, "v": VER, "p": "django"}, view="health")


def version(request, *args, **kwargs):
    payload = {
        "ok": True,
        "v": VER,
        "functions": [
            "wp-post", "wp-media", "wp-query", "wp-taxonomy",
            "generate-article", "generate-feed-article", "sync-feedly", "supabase",
        ],
    }
    return _json_response(payload, view="version")
