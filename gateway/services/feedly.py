# gateway/services/feedly.py
"""
Feedly stream -> editorial_stories ingestion.

Each item is tagged with a magazine section, a priority flag (watch-listed
artists) and up to three artist names guessed from the headline, then inserted
as a pending story. The stories table has a unique URL, so items seen before
come back as duplicate errors and are counted, not failed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests
from django.conf import settings

from .http import new_session, request_with_retry
from .supabase import SupabaseClient, SupabaseError

log = logging.getLogger(__name__)

FEEDLY_API = "https://cloud.feedly.com"
STORIES_TABLE = "editorial_stories"
SUMMARY_MAX = 1000
MAX_ARTISTS = 3

PRIORITY_ARTISTS = (
    "wolf alice", "the 1975", "wet leg", "charli xcx", "beabadoobee",
    "fontaines dc", "idles", "slowthai", "yungblud", "sam fender",
    "lorde", "billie eilish", "olivia rodrigo", "arctic monkeys",
    "foals", "bombay bicycle club", "the strokes", "yeah yeah yeahs",
)

UPSET_KEYWORDS = ("rock", "punk", "metal", "hardcore", "emo", "post-hardcore")
HYPE_KEYWORDS = ("debut", "new artist", "emerging", "breakthrough")
FESTIVAL_KEYWORDS = ("festival", "lineup", "stage", "weekend")

_ARTIST_PATTERNS = (
    re.compile(
        r"^([A-Z][a-zA-Z\s]+?)"
        r"(?:\s+(?:announce|release|drop|share|debut|unveil|return|sign|join|team|-|:|–))"
    ),
    re.compile(
        r"([A-Z][a-zA-Z\s]+?)(?:\s+(?:and|&|\+)\s+([A-Z][a-zA-Z\s]+?))?"
        r"(?:\s+(?:announce|release|drop|share))"
    ),
)


class FeedlyError(Exception):
    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


def detect_section(title: str, summary: Optional[str], source: str) -> Tuple[str, bool]:
    """Return (section, is_festival)."""
    text = f"{title} {summary or ''} {source}".lower()
    if any(kw in text for kw in FESTIVAL_KEYWORDS):
        return "Festivals", True
    if any(kw in text for kw in UPSET_KEYWORDS):
        return "Upset", False
    if any(kw in text for kw in HYPE_KEYWORDS):
        return "Hype", False
    return "None", False


def detect_priority_artists(title: str, summary: Optional[str]) -> List[str]:
    text = f"{title} {summary or ''}".lower()
    return [artist.title() for artist in PRIORITY_ARTISTS if artist in text]


def extract_artist_names(title: str, summary: Optional[str]) -> List[str]:
    text = f"{title} {summary or ''}"
    found: List[str] = []
    for pattern in _ARTIST_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        name = (match.group(1) or "").strip()
        if len(name) > 2 and name not in found:
            found.append(name)
    return found[:MAX_ARTISTS]


def _iso_from_ms(ms: Any) -> Optional[str]:
    try:
        stamp = datetime.fromtimestamp(float(ms) / 1000.0, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def story_from_item(item: Mapping[str, Any], created_by: str = "dan") -> Optional[Dict[str, Any]]:
    """Map one Feedly entry to an editorial_stories row; None when it has no URL."""
    alternates = item.get("alternate") or []
    url = ""
    if alternates and isinstance(alternates[0], Mapping):
        url = alternates[0].get("href") or ""
    if not url:
        return None

    title = item.get("title") or "Untitled"
    source = (item.get("origin") or {}).get("title") or "Unknown"
    summary = (item.get("summary") or {}).get("content") or None
    if summary:
        summary = summary[:SUMMARY_MAX]
    image_url = (item.get("visual") or {}).get("url") or None
    if image_url and "blank" in image_url:
        image_url = None

    published_at = _iso_from_ms(item["published"]) if item.get("published") else None

    section, is_festival = detect_section(title, summary, source)
    artists = extract_artist_names(title, summary)

    return {
        "title": title,
        "url": url,
        "source": source,
        "summary": summary,
        "image_url": image_url,
        "published_at": published_at or _now_iso(),
        "status": "pending",
        "priority": bool(detect_priority_artists(title, summary)),
        "created_by": created_by,
        "section": section,
        "is_festival": is_festival,
        "artist_names": artists or None,
    }


class FeedlyClient:
    def __init__(self, token: str, *, base: str = FEEDLY_API, session: Optional[requests.Session] = None):
        self.base = base.rstrip("/")
        self.session = session or new_session({"Authorization": f"OAuth {token}"})

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "FeedlyClient":
        return cls(settings.FEEDLY_TOKEN, session=session)

    def fetch_stream(self, stream_id: str, count: int = 100) -> List[Dict[str, Any]]:
        params = {"streamId": stream_id, "count": int(count), "ranked": "newest"}
        resp = request_with_retry(self.session, "GET", f"{self.base}/v3/streams/contents", params=params)
        if resp.status_code >= 300:
            raise FeedlyError(f"Feedly API error: {resp.status_code}", status=resp.status_code)
        try:
            data = resp.json()
        except ValueError as exc:
            raise FeedlyError("Feedly API returned non-JSON", status=resp.status_code) from exc
        items = data.get("items") if isinstance(data, dict) else None
        return items if isinstance(items, list) else []


@dataclass
class SyncResult:
    fetched: int = 0
    added: int = 0
    duplicates: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def message(self) -> str:
        return f"Synced {self.fetched} items, added {self.added} new stories"

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["message"] = self.message
        return data


def sync_feedly(
    feedly: FeedlyClient,
    supabase: SupabaseClient,
    *,
    stream_id: Optional[str] = None,
    count: int = 100,
    created_by: str = "dan",
) -> SyncResult:
    """Pull the stream and insert new pending stories. FeedlyError propagates."""
    items = feedly.fetch_stream(stream_id or settings.FEEDLY_STREAM_ID, count=count)
    result = SyncResult(fetched=len(items))

    for item in items:
        row = story_from_item(item, created_by=created_by)
        if row is None:
            result.skipped += 1
            continue
        try:
            supabase.insert(STORIES_TABLE, row)
        except SupabaseError as exc:
            if exc.is_duplicate:
                result.duplicates += 1
            else:
                result.failed += 1
                log.error("[feedly] insert failed url=%s status=%s: %s", row["url"], exc.status, exc)
            continue
        result.added += 1

    log.info("[feedly] fetched=%s added=%s duplicates=%s skipped=%s failed=%s",
             result.fetched, result.added, result.duplicates, result.skipped, result.failed)
    return result
