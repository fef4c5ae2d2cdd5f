# gateway/services/wordpress.py
"""
WordPress REST client (Basic Auth with an application password).

Two call styles:
- fetch()/save_post()/upload_media()/... return a WPResponse (status + text)
  so the gateway functions can pass WordPress' answer straight through.
- create_post()/get_posts()/resolve_tag_ids() raise WordPressError on non-2xx;
  used by the newsdesk workflow, which needs parsed JSON.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import requests
from django.conf import settings

from .http import new_session, request_with_retry

log = logging.getLogger(__name__)

API_PREFIX = "/wp-json/wp/v2"

# Taxonomy/rest_base names as WordPress registers them.
_TAXONOMY_RE = re.compile(r"^[a-z0-9_-]{1,64}$")


class WordPressError(Exception):
    def __init__(self, message: str, status: int = 0, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


@dataclass
class WPResponse:
    status: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status < 300

    def body(self) -> Any:
        """Parsed JSON, or {"raw": text} when WordPress answered with something else."""
        try:
            return json.loads(self.text)
        except ValueError:
            return {"raw": self.text}


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")


def valid_taxonomy(name: str) -> bool:
    return bool(_TAXONOMY_RE.match(name or ""))


class WordPressClient:
    def __init__(
        self,
        base: str,
        user: str,
        app_password: str,
        *,
        session: Optional[requests.Session] = None,
    ):
        self.base = (base or "").rstrip("/")
        # WP shows application passwords with spaces; both forms authenticate.
        self.auth = (user, app_password)
        self.session = session or new_session()

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "WordPressClient":
        return cls(settings.WP_BASE, settings.WP_USER, settings.WP_APP_PASSWORD, session=session)

    # ----- raw pass-through -------------------------------------------------

    def fetch(self, path: str, method: str = "GET", **kwargs) -> WPResponse:
        url = f"{self.base}{path}"
        resp = request_with_retry(self.session, method, url, auth=self.auth, **kwargs)
        log.info("[wp] %s %s -> %s", method.upper(), path, resp.status_code)
        return WPResponse(resp.status_code, resp.text, dict(resp.headers))

    def save_post(self, data: Dict[str, Any], post_id: Optional[int] = None) -> WPResponse:
        if post_id:
            return self.fetch(f"{API_PREFIX}/posts/{int(post_id)}", "PUT", json=data)
        return self.fetch(f"{API_PREFIX}/posts", "POST", json=data)

    def upload_media(self, content: bytes, filename: str = "upload",
                     mime_type: str = "application/octet-stream") -> WPResponse:
        # Bytes (not a file object) so a retried attempt re-sends the full upload.
        files = {"file": (filename or "upload", content, mime_type or "application/octet-stream")}
        return self.fetch(f"{API_PREFIX}/media", "POST", files=files)

    def set_featured_media(self, post_id: int, media_id: int) -> WPResponse:
        return self.fetch(f"{API_PREFIX}/posts/{int(post_id)}", "PUT",
                          json={"featured_media": int(media_id)})

    def list_terms(self, taxonomy: str = "sections") -> WPResponse:
        if not valid_taxonomy(taxonomy):
            raise WordPressError(f"Invalid taxonomy: {taxonomy!r}", status=400)
        return self.fetch(f"{API_PREFIX}/{taxonomy}", params={"per_page": 100})

    def search_media(self, search: Optional[str] = None) -> WPResponse:
        params: Dict[str, Any] = {"per_page": 20}
        if search:
            params["search"] = search
        return self.fetch(f"{API_PREFIX}/media", params=params)

    def get_media(self, media_id: int) -> WPResponse:
        return self.fetch(f"{API_PREFIX}/media/{int(media_id)}")

    # ----- parsed calls (raise on failure) ----------------------------------

    def _json_or_raise(self, res: WPResponse, what: str) -> Any:
        body = res.body()
        if not res.ok:
            message = body.get("message") if isinstance(body, dict) else None
            raise WordPressError(message or f"{what} failed: HTTP {res.status}",
                                 status=res.status, body=body)
        return body

    def get_posts(self, status: Optional[str] = None, per_page: int = 20) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"per_page": per_page, "_embed": "wp:featuredmedia"}
        if status:
            params["status"] = status
        body = self._json_or_raise(self.fetch(f"{API_PREFIX}/posts", params=params), "get_posts")
        return body if isinstance(body, list) else []

    def create_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        return self._json_or_raise(self.save_post(post), "create_post")

    def resolve_tag_ids(self, names: Iterable[Any]) -> List[int]:
        """Map tag names (or ids) to tag ids, creating missing tags."""
        out: List[int] = []
        for raw in names or []:
            if isinstance(raw, int) or (isinstance(raw, str) and raw.strip().isdigit()):
                out.append(int(raw))
                continue
            name = str(raw).strip()
            if not name:
                continue
            slug = _slug(name)
            found = self._json_or_raise(
                self.fetch(f"{API_PREFIX}/tags", params={"slug": slug, "per_page": 1}), "tag lookup"
            )
            if isinstance(found, list) and found:
                out.append(int(found[0]["id"]))
                continue
            created = self._json_or_raise(
                self.fetch(f"{API_PREFIX}/tags", "POST", json={"name": name, "slug": slug}), "tag create"
            )
            out.append(int(created["id"]))
        return out
