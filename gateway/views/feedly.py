# /home/dork/editorialdesk/gateway/views/feedly.py
"""POST /functions/sync-feedly/ - pull the Feedly stream into editorial_stories (dashboard key)."""

from __future__ import annotations

import logging

import requests

from gateway.services.feedly import FeedlyClient, FeedlyError, sync_feedly as run_sync
from gateway.services.supabase import SupabaseClient, SupabaseError
from . import _dashboard_key_ok, _error, _json_response, gateway_function

logger = logging.getLogger("gateway.views.feedly")

REQUIRED = ("DASHBOARD_KEY", "FEEDLY_TOKEN", "FEEDLY_STREAM_ID", "SUPABASE_URL", "SUPABASE_SERVICE_KEY")


def _clients():
    return FeedlyClient.from_settings(), SupabaseClient.from_settings()


@gateway_function("sync-feedly", methods=("POST",), required=REQUIRED)
def sync_feedly(request):
    view = "sync-feedly"
    if not _dashboard_key_ok(request):
        return _error("Unauthorized", view=view, status=401, why="bad dashboard key")

    feedly, supabase = _clients()
    try:
        result = run_sync(feedly, supabase)
    except (FeedlyError, SupabaseError, requests.RequestException) as exc:
        logger.error("[gateway][sync-feedly] failed: %s", exc)
        return _error("Sync failed", str(exc), view=view, status=502)

    payload = {"success": True}
    payload.update(result.as_dict())
    return _json_response(payload, view=view)
