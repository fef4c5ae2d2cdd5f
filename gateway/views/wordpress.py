# /home/dork/editorialdesk/gateway/views/wordpress.py
"""
WordPress gateway functions.

POST /functions/wp-post/     (HMAC) create or update a post
POST /functions/wp-media/    (HMAC) upload media, optionally set featured image
POST /functions/wp-query/    (HMAC) list_terms | get_terms | search_media | get_media
GET  /functions/wp-taxonomy/ read-only term listing

CHANGE LOG
----------
2026-02-11 • wp-media: reject a bad postId before uploading anything.
2026-02-05 • wp-query: JSON error bodies (was plain text); invalid taxonomy -> 400.
2026-02-03 • wp-post: also accept the dashboard shape {action, post[, id]}.
2026-01-28 • Initial port of wp-post / wp-media / wp-query / wp-taxonomy.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from gateway.services.wordpress import WordPressClient, WordPressError
from . import WP_SETTINGS, _error, _json_response, _parse_json_object, _passthrough, _verify_request, gateway_function

logger = logging.getLogger("gateway.views.wordpress")

SIGNED_SETTINGS = ("GATEWAY_SECRET",) + WP_SETTINGS

QUERY_ACTIONS = ("list_terms", "get_terms", "search_media", "get_media")


def _client() -> WordPressClient:
    return WordPressClient.from_settings()


def _unauthorized(why: str, *, view: str):
    return _error("Unauthorized", view=view, status=401, why=why)


def _upstream_error(exc: Exception, *, view: str):
    logger.error("[gateway][%s] WordPress unreachable: %s", view, exc)
    return _error("Upstream error", f"WordPress request failed: {exc.__class__.__name__}", view=view, status=502)


def _result(res, *, view: str):
    return _json_response({"ok": res.ok, "status": res.status, "body": res.body()}, view=view, status=res.status)


def _authed_payload(request, view: str) -> Tuple[Optional[Dict[str, Any]], Any]:
    """(payload, None) on success, (None, error response) otherwise."""
    verification = _verify_request(request)
    if not verification:
        return None, _unauthorized(verification.why, view=view)
    try:
        return _parse_json_object(request), None
    except ValueError:
        return None, _error("Invalid JSON", view=view, status=400)


def _post_target(payload: Dict[str, Any]) -> Tuple[Optional[int], Any]:
    """Accept {id?, data} and the dashboard's {action, post, id?}."""
    data = payload.get("data")
    if data is None:
        data = payload.get("post")
    post_id = payload.get("id")
    if post_id in ("", None, 0, "0"):
        post_id = None
    return post_id, data


@gateway_function("wp-post", methods=("POST",), required=SIGNED_SETTINGS)
def wp_post(request):
    view = "wp-post"
    payload, err = _authed_payload(request, view)
    if err is not None:
        return err

    post_id, data = _post_target(payload)
    if not isinstance(data, dict):
        return _error("Missing data", view=view, status=400)
    if post_id is not None:
        try:
            post_id = int(post_id)
        except (TypeError, ValueError):
            return _error("Invalid id", view=view, status=400)

    try:
        res = _client().save_post(data, post_id=post_id)
    except requests.RequestException as exc:
        return _upstream_error(exc, view=view)

    logger.info("[gateway][wp-post] %s id=%s -> %s", "update" if post_id else "create", post_id or "-", res.status)
    return _result(res, view=view)


@gateway_function("wp-media", methods=("POST",), required=SIGNED_SETTINGS)
def wp_media(request):
    view = "wp-media"
    payload, err = _authed_payload(request, view)
    if err is not None:
        return err

    encoded = payload.get("file")
    if not encoded or not isinstance(encoded, str):
        return _error("Missing file (base64)", view=view, status=400)
    try:
        content = base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError):
        return _error("Invalid file (base64)", view=view, status=400)

    filename = payload.get("filename") or "upload"
    mime_type = payload.get("mimeType") or "application/octet-stream"
    post_id = payload.get("postId")
    featured = bool(payload.get("featured"))
    if post_id in ("", None, 0, "0"):
        post_id = None
    else:
        try:
            post_id = int(post_id)
        except (TypeError, ValueError):
            return _error("Invalid postId", view=view, status=400)

    client = _client()
    try:
        res = client.upload_media(content, filename, mime_type)
        body = res.body()
        media_id = body.get("id") if isinstance(body, dict) else None
        if post_id and featured and isinstance(media_id, int):
            featured_res = client.set_featured_media(post_id, media_id)
            if not featured_res.ok:
                logger.warning("[gateway][wp-media] featured_media on post %s -> %s", post_id, featured_res.status)
    except requests.RequestException as exc:
        return _upstream_error(exc, view=view)

    logger.info("[gateway][wp-media] bytes=%s mime=%s -> %s", len(content), mime_type, res.status)
    return _json_response({"ok": res.ok, "status": res.status, "body": body}, view=view, status=res.status)


@gateway_function("wp-query", methods=("POST",), required=SIGNED_SETTINGS)
def wp_query(request):
    view = "wp-query"
    payload, err = _authed_payload(request, view)
    if err is not None:
        return err

    action = payload.get("action")
    client = _client()
    try:
        if action in ("list_terms", "get_terms"):
            res = client.list_terms(payload.get("taxonomy") or "sections")
        elif action == "search_media":
            res = client.search_media(payload.get("search") or None)
        elif action == "get_media" and payload.get("id"):
            res = client.get_media(int(payload["id"]))
        else:
            return _error("Unknown action or missing parameters",
                          f"action must be one of: {', '.join(QUERY_ACTIONS)}", view=view, status=400)
    except WordPressError as exc:
        return _error("Invalid request", str(exc), view=view, status=exc.status or 400)
    except (TypeError, ValueError):
        return _error("Invalid id", view=view, status=400)
    except requests.RequestException as exc:
        return _upstream_error(exc, view=view)

    return _passthrough(res.text, view=view, status=res.status)


@gateway_function("wp-taxonomy", methods=("GET",), required=WP_SETTINGS)
def wp_taxonomy(request):
    view = "wp-taxonomy"
    taxonomy = request.GET.get("taxonomy") or "sections"
    try:
        res = _client().list_terms(taxonomy)
    except WordPressError as exc:
        return _error("Invalid request", str(exc), view=view, status=exc.status or 400)
    except requests.RequestException as exc:
        return _upstream_error(exc, view=view)
    return _passthrough(res.text, view=view, status=res.status)
