# /home/dork/editorialdesk/gateway/views/generate.py
"""
Template article generators over HTTP.

POST /functions/generate-article/       {subject, body, artist_names?, sender?}
POST /functions/generate-feed-article/  {title, summary?, source?, url?, artist_names?}

No auth: pure text transformation, nothing upstream is touched.
"""

from __future__ import annotations

import logging

from gateway.services.generator import feed_article, press_release_article
from . import _error, _json_response, _parse_json_object, gateway_function

logger = logging.getLogger("gateway.views.generate")

FAILED = "Failed to generate article"


def _artist_list(value):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@gateway_function("generate-article", methods=("POST",))
def generate_article(request):
    view = "generate-article"
    try:
        payload = _parse_json_object(request)
        result = press_release_article(
            payload.get("subject"),
            payload.get("body"),
            artist_names=_artist_list(payload.get("artist_names")),
            sender=payload.get("sender") or "",
        )
    except ValueError as exc:
        return _error(FAILED, str(exc), view=view, status=400)
    logger.info("[gateway][generate-article] slug=%s content_len=%s", result["slug"], len(result["content"]))
    return _json_response(result, view=view)


@gateway_function("generate-feed-article", methods=("POST",))
def generate_feed_article(request):
    view = "generate-feed-article"
    try:
        payload = _parse_json_object(request)
        result = feed_article(
            payload.get("title"),
            summary=payload.get("summary"),
            source=payload.get("source") or "",
            url=payload.get("url") or "",
            artist_names=_artist_list(payload.get("artist_names")),
        )
    except ValueError as exc:
        return _error(FAILED, str(exc), view=view, status=400)
    logger.info("[gateway][generate-feed-article] slug=%s content_len=%s", result["slug"], len(result["content"]))
    return _json_response(result, view=view)
